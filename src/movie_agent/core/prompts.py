from __future__ import annotations

from collections.abc import Sequence

from movie_agent.core.models import MovieReview, MovieSearchResult, UserPreferences

SINGLE_SHOT_COUNT = 10
FINAL_RECOMMENDATION_COUNT = 20

_JSON_ONLY = "Only return valid JSON, no other text."

_RECOMMENDATION_SHAPE = """[
  {
    "title": "Movie Title",
    "year": 2023,
    "runtime": 120,
    "streamingPlatforms": ["Netflix", "Prime Video"],
    "rating": 8.5,
    "genres": ["Drama", "Comedy"],
    "whyItFits": "Personal 1-2 sentence explanation",
    "plot": "Brief 1-2 sentence plot summary without spoilers",
    "imdbId": "tt1234567"
  }
]"""

_SEARCH_SHAPE = """[
  {
    "title": "Movie Title",
    "year": 2023,
    "imdbId": "tt1234567",
    "runtime": 120,
    "genres": ["Drama", "Comedy"],
    "streamingPlatforms": ["Netflix", "Hulu"],
    "rating": 8.5
  }
]"""

_REVIEW_SHAPE = """[
  {
    "movieTitle": "Movie Title",
    "source": "Aggregated Reviews",
    "summary": "Brief 1-2 sentence summary of critical consensus",
    "sentiment": "positive"
  }
]"""


def _preference_lines(prefs: UserPreferences, *, bullet: str = "") -> list[str]:
    lines = [
        f"{bullet}Mood: {prefs.mood}",
        f"{bullet}Watching with: {prefs.watching_with}",
        f"{bullet}Available time: {prefs.available_time} minutes",
    ]
    if prefs.recently_enjoyed:
        lines.append(f"{bullet}Recently enjoyed: {prefs.recently_enjoyed}")
    return lines


def build_single_shot_prompt(prefs: UserPreferences) -> str:
    """One-call variant: ask directly for the final list."""

    lines = [
        f"You are a movie expert. Recommend {SINGLE_SHOT_COUNT} movies based on:",
        *_preference_lines(prefs, bullet="- "),
        "",
        f"Every movie must fit within {prefs.available_time} minutes.",
        f"Return a JSON array with {SINGLE_SHOT_COUNT} movies:",
        _RECOMMENDATION_SHAPE,
        "",
        "JSON only, no other text.",
    ]
    return "\n".join(lines)


def build_search_prompt(prefs: UserPreferences) -> str:
    lines = [
        "You are a movie recommendation expert. Based on the following preferences, "
        "suggest 5-7 movies that would be good candidates:",
        "",
        *_preference_lines(prefs),
        "",
        f"Candidates should fit within {prefs.available_time} minutes.",
        "Return a JSON array of movies with this structure:",
        _SEARCH_SHAPE,
        "",
        _JSON_ONLY,
    ]
    return "\n".join(lines)


def build_reviews_prompt(prefs: UserPreferences, candidates: Sequence[MovieSearchResult]) -> str:
    titles = ", ".join(m.title for m in candidates)
    lines = [
        f"For these movies: {titles}",
        "",
        "Provide a brief review summary for each movie that would help someone decide "
        f"if it fits a {prefs.mood} mood when watching with {prefs.watching_with} "
        f"in an evening of {prefs.available_time} minutes.",
        "",
        "Return as JSON array:",
        _REVIEW_SHAPE,
        "",
        'sentiment must be one of: "positive", "mixed", "negative"',
        _JSON_ONLY,
    ]
    return "\n".join(lines)


def _candidate_context(
    candidates: Sequence[MovieSearchResult], reviews: Sequence[MovieReview]
) -> list[str]:
    if not candidates and not reviews:
        return []

    lines = ["", "CONTEXT FROM EARLIER RESEARCH:"]
    for m in candidates:
        year = f" ({m.year})" if m.year else ""
        runtime = f", {m.runtime} min" if m.runtime else ""
        lines.append(f"- Candidate: {m.title}{year}{runtime}")
    for r in reviews:
        lines.append(f"- Review of {r.movie_title} [{r.sentiment}]: {r.summary}")
    return lines


def build_recommendations_prompt(
    prefs: UserPreferences,
    candidates: Sequence[MovieSearchResult] = (),
    reviews: Sequence[MovieReview] = (),
) -> str:
    n = FINAL_RECOMMENDATION_COUNT
    lines = [
        "You are a movie recommendation expert. Based on the user's preferences, "
        f"recommend exactly {n} movies.",
        "",
        "USER PREFERENCES:",
        *_preference_lines(prefs, bullet="- "),
        *_candidate_context(candidates, reviews),
        "",
        "IMPORTANT REQUIREMENTS:",
        f"1. Recommend exactly {n} movies that fit within the {prefs.available_time} minute time limit",
        "2. Each movie must have a valid IMDb ID (format: tt followed by 7-8 digits)",
        "3. Include a variety of movies - mix classics and recent films",
        '4. The "whyItFits" should be personal, explaining why this movie fits their '
        f"{prefs.mood} mood for {prefs.watching_with} viewing",
        '5. The "plot" should be a 1-2 sentence non-spoiler summary',
        "6. Include realistic streaming platforms where the movie might be available",
        "",
        f"Return exactly {n} recommendations as a JSON array:",
        _RECOMMENDATION_SHAPE,
        "",
        _JSON_ONLY,
    ]
    return "\n".join(lines)
