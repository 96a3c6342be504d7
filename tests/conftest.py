from __future__ import annotations

import json
from collections.abc import Callable

import pytest

from movie_agent.core.models import UserPreferences

_ENV_VARS = (
    "ANTHROPIC_API_KEY",
    "OMDB_API_KEY",
    "MOVIE_AGENT_MODE",
    "MOVIE_AGENT_MODEL",
    "MOVIE_AGENT_MAX_TOKENS",
    "MOVIE_AGENT_TEMPERATURE",
    "MOVIE_AGENT_LLM_TIMEOUT_S",
    "MOVIE_AGENT_EMPTY_SEARCH_POLICY",
    "MOVIE_AGENT_PIPELINE_ERROR_STATUS",
    "MOVIE_AGENT_CORS_ORIGINS",
    "MOVIE_AGENT_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Keep a developer's local .env out of the tests.
    monkeypatch.chdir(tmp_path)


class ScriptedCompleter:
    """Fake completion client that answers prompts from a script.

    Each reply is either a string or an exception instance to raise.
    """

    def __init__(self, *replies: str | Exception) -> None:
        self._replies = list(replies)
        self.prompts: list[str] = []

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self._replies:
            raise AssertionError("Unexpected completion call")
        reply = self._replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


def recommendation_payload(n: int, *, runtime: int = 100) -> list[dict]:
    return [
        {
            "title": f"Movie {i}",
            "year": 2000 + i,
            "runtime": runtime,
            "streamingPlatforms": ["Netflix"],
            "rating": 7.5,
            "genres": ["Drama"],
            "whyItFits": "Fits the mood.",
            "plot": "Something happens.",
            "imdbId": f"tt{1000000 + i}",
        }
        for i in range(n)
    ]


def search_payload() -> list[dict]:
    return [
        {
            "title": "Knives Out",
            "year": 2019,
            "imdbId": "tt8946378",
            "runtime": 130,
            "genres": ["Comedy", "Crime"],
            "streamingPlatforms": ["Prime Video"],
            "rating": 7.9,
        },
        {
            "title": "Paddington 2",
            "year": 2017,
            "imdbId": "tt4468740",
            "runtime": 103,
            "genres": ["Family", "Comedy"],
            "streamingPlatforms": ["Netflix"],
            "rating": 7.8,
        },
    ]


def review_payload() -> list[dict]:
    return [
        {
            "movieTitle": "Knives Out",
            "source": "Aggregated Reviews",
            "summary": "A witty whodunit.",
            "sentiment": "positive",
        }
    ]


@pytest.fixture
def prefs() -> UserPreferences:
    return UserPreferences(mood="cozy", watching_with="solo", available_time=90)


@pytest.fixture
def as_reply() -> Callable[[list[dict]], str]:
    def _wrap(items: list[dict]) -> str:
        return "Here you go:\n" + json.dumps(items) + "\nEnjoy!"

    return _wrap
