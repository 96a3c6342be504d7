from __future__ import annotations

import logging
from dataclasses import dataclass

from movie_agent.core.completion import Completer
from movie_agent.core.config import Settings
from movie_agent.core.extract import parse_records
from movie_agent.core.models import MovieRecommendation, PipelineState, UserPreferences
from movie_agent.core.pipeline import Observer, run_pipeline
from movie_agent.core.prompts import build_single_shot_prompt

logger = logging.getLogger(__name__)


class RecommendationError(RuntimeError):
    pass


@dataclass(frozen=True)
class RecommendationOutcome:
    recommendations: list[MovieRecommendation]
    error: str | None = None


def recommend_single_shot(
    preferences: UserPreferences, client: Completer
) -> list[MovieRecommendation]:
    """Ask for the final list in one completion call.

    Unlike the pipeline there is no degraded path: provider errors propagate
    and a response without a JSON array raises `RecommendationError`.
    """

    text = client.complete(build_single_shot_prompt(preferences))
    recs = parse_records(text, MovieRecommendation.from_dict)
    if recs is None:
        raise RecommendationError("Failed to parse recommendations from LLM response")

    logger.info("Single-shot returned %d recommendations", len(recs))
    return recs


def recommend(
    preferences: UserPreferences,
    client: Completer,
    settings: Settings,
    *,
    on_transition: Observer | None = None,
) -> RecommendationOutcome:
    if settings.mode == "single_shot":
        return RecommendationOutcome(recommendations=recommend_single_shot(preferences, client))

    final: PipelineState = run_pipeline(
        preferences,
        client,
        empty_search_policy=settings.empty_search_policy,
        on_transition=on_transition,
    )
    return RecommendationOutcome(
        recommendations=list(final.recommendations),
        error=final.error if final.current_step == "error" else None,
    )
