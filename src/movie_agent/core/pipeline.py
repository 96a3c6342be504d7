from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import replace
from typing import Any

from movie_agent.core.completion import Completer
from movie_agent.core.config import EmptySearchPolicy
from movie_agent.core.extract import parse_records
from movie_agent.core.models import (
    AgentStep,
    MovieRecommendation,
    MovieReview,
    MovieSearchResult,
    PipelineState,
    UserPreferences,
)
from movie_agent.core.prompts import (
    build_recommendations_prompt,
    build_reviews_prompt,
    build_search_prompt,
)

logger = logging.getLogger(__name__)

FINAL_STAGE_ERROR = "Failed to generate recommendations. Please try again."
EMPTY_SEARCH_ERROR = "No candidate movies found. Please try again."
DEFAULT_ERROR = "An unexpected error occurred"

Stage = Callable[[PipelineState, Completer], dict[str, Any]]
Router = Callable[[PipelineState, EmptySearchPolicy], AgentStep]
Observer = Callable[[PipelineState], None]


# Stages return the fields they own; the controller applies them.
def analyze_preferences(state: PipelineState, client: Completer) -> dict[str, Any]:
    logger.info(
        "Analyzing preferences (mood=%s, with=%s, time=%s)",
        state.user_preferences.mood,
        state.user_preferences.watching_with,
        state.user_preferences.available_time,
    )
    return {}


def search_movies(state: PipelineState, client: Completer) -> dict[str, Any]:
    logger.info("Searching for candidate movies")
    try:
        text = client.complete(build_search_prompt(state.user_preferences))
        results = parse_records(text, MovieSearchResult.from_dict)
    except Exception:
        logger.warning("Candidate search failed; continuing without candidates", exc_info=True)
        results = None

    if results is None:
        results = []
    logger.info("Found %d candidates", len(results))
    return {"search_results": tuple(results)}


def read_reviews(state: PipelineState, client: Completer) -> dict[str, Any]:
    logger.info("Reading reviews for %d candidates", len(state.search_results))
    try:
        text = client.complete(build_reviews_prompt(state.user_preferences, state.search_results))
        reviews = parse_records(text, MovieReview.from_dict)
    except Exception:
        logger.warning("Review summary failed; continuing without reviews", exc_info=True)
        reviews = None

    return {"reviews": tuple(reviews or ())}


def generate_recommendations(state: PipelineState, client: Completer) -> dict[str, Any]:
    logger.info("Generating personalized recommendations")
    prompt = build_recommendations_prompt(
        state.user_preferences, state.search_results, state.reviews
    )
    try:
        text = client.complete(prompt)
        logger.info("Recommendations response length: %d", len(text))
        recs = parse_records(text, MovieRecommendation.from_dict)
    except Exception:
        logger.exception("Recommendation generation failed")
        recs = None

    if recs is None:
        return {"recommendations": (), "error": FINAL_STAGE_ERROR}

    logger.info("Parsed %d recommendations", len(recs))
    return {"recommendations": tuple(recs)}


# Routing predicates see the state with the stage updates already applied.
def route_after_analysis(state: PipelineState, policy: EmptySearchPolicy) -> AgentStep:
    if state.error:
        return "error"
    return "searching_movies"


def route_after_search(state: PipelineState, policy: EmptySearchPolicy) -> AgentStep:
    if state.error:
        return "error"
    if not state.search_results:
        return "error" if policy == "error" else "generating_recommendations"
    return "reading_reviews"


def route_after_reviews(state: PipelineState, policy: EmptySearchPolicy) -> AgentStep:
    if state.error:
        return "error"
    return "generating_recommendations"


def route_after_generation(state: PipelineState, policy: EmptySearchPolicy) -> AgentStep:
    if state.error:
        return "error"
    return "complete"


STAGES: dict[str, tuple[Stage, Router]] = {
    "analyzing_preferences": (analyze_preferences, route_after_analysis),
    "searching_movies": (search_movies, route_after_search),
    "reading_reviews": (read_reviews, route_after_reviews),
    "generating_recommendations": (generate_recommendations, route_after_generation),
}


def _error_message(state: PipelineState) -> str:
    if state.error:
        return state.error
    if state.current_step == "searching_movies" and not state.search_results:
        return EMPTY_SEARCH_ERROR
    return DEFAULT_ERROR


def iter_pipeline(
    preferences: UserPreferences,
    client: Completer,
    *,
    empty_search_policy: EmptySearchPolicy = "continue",
) -> Iterator[PipelineState]:
    """Run the four stages, yielding every state the pipeline enters.

    The first yielded state is `analyzing_preferences`; the last is either
    `complete` or `error`. Steps only move forward.
    """

    state = PipelineState(user_preferences=preferences).advance("analyzing_preferences")
    yield state

    while not state.is_terminal:
        stage, router = STAGES[state.current_step]
        updates = stage(state, client)
        staged = replace(state, **updates)
        next_step = router(staged, empty_search_policy)

        if next_step == "error":
            updates["error"] = _error_message(staged)
            logger.error("Pipeline failed at %s: %s", state.current_step, updates["error"])

        state = state.advance(next_step, **updates)
        yield state


def run_pipeline(
    preferences: UserPreferences,
    client: Completer,
    *,
    empty_search_policy: EmptySearchPolicy = "continue",
    on_transition: Observer | None = None,
) -> PipelineState:
    states = iter_pipeline(preferences, client, empty_search_policy=empty_search_policy)
    state = next(states)
    while True:
        if on_transition is not None:
            on_transition(state)
        if state.is_terminal:
            return state
        state = next(states)
