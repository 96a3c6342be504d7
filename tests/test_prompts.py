from __future__ import annotations

import pytest

from movie_agent.core.models import MOODS, WATCHING_WITH, MovieReview, MovieSearchResult, UserPreferences
from movie_agent.core.prompts import (
    build_recommendations_prompt,
    build_reviews_prompt,
    build_search_prompt,
    build_single_shot_prompt,
)


def _all_builders(prefs: UserPreferences) -> list[str]:
    candidates = [MovieSearchResult(title="Heat", year=1995, runtime=170)]
    return [
        build_single_shot_prompt(prefs),
        build_search_prompt(prefs),
        build_reviews_prompt(prefs, candidates),
        build_recommendations_prompt(prefs),
    ]


@pytest.mark.parametrize("mood", MOODS)
@pytest.mark.parametrize("watching_with", WATCHING_WITH)
def test_prompts_mention_every_preference_verbatim(mood, watching_with) -> None:
    prefs = UserPreferences(mood=mood, watching_with=watching_with, available_time=135)

    for prompt in _all_builders(prefs):
        assert mood in prompt
        assert watching_with in prompt
        assert "135" in prompt


def test_prompts_are_deterministic(prefs) -> None:
    assert _all_builders(prefs) == _all_builders(
        UserPreferences(mood="cozy", watching_with="solo", available_time=90)
    )


def test_recently_enjoyed_is_optional(prefs) -> None:
    assert "Recently enjoyed" not in build_search_prompt(prefs)

    liked = UserPreferences(
        mood="funny", watching_with="friends", available_time=120, recently_enjoyed="Game Night"
    )
    assert "Recently enjoyed: Game Night" in build_search_prompt(liked)
    assert "Recently enjoyed: Game Night" in build_single_shot_prompt(liked)


def test_prompts_ask_for_json_only(prefs) -> None:
    for prompt in _all_builders(prefs):
        assert "JSON" in prompt
        assert "no other text" in prompt


def test_final_prompt_injects_candidates_and_reviews(prefs) -> None:
    candidates = [MovieSearchResult(title="Paddington 2", year=2017, runtime=103)]
    reviews = [
        MovieReview(
            movie_title="Paddington 2",
            source="Aggregated Reviews",
            summary="Warm and funny.",
            sentiment="positive",
        )
    ]

    prompt = build_recommendations_prompt(prefs, candidates, reviews)
    assert "Candidate: Paddington 2 (2017), 103 min" in prompt
    assert "Review of Paddington 2 [positive]: Warm and funny." in prompt
    assert "recommend exactly 20 movies" in prompt

    assert "CONTEXT FROM EARLIER RESEARCH" not in build_recommendations_prompt(prefs)
