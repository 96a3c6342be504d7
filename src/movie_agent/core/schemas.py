from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from movie_agent.core.models import Mood, UserPreferences, WatchingWith


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class RecommendRequest(_CamelModel):
    mood: Mood
    watching_with: WatchingWith = Field(alias="watchingWith")
    available_time: int = Field(alias="availableTime", gt=0)
    recently_enjoyed: str | None = Field(default=None, alias="recentlyEnjoyed")

    def to_preferences(self) -> UserPreferences:
        recent = (self.recently_enjoyed or "").strip() or None
        return UserPreferences(
            mood=self.mood,
            watching_with=self.watching_with,
            available_time=self.available_time,
            recently_enjoyed=recent,
        )


class RecommendationOut(_CamelModel):
    """Documented shape of one recommendation.

    Model output is passed through as produced, so values are not coerced.
    """

    title: Any = None
    year: Any = None
    runtime: Any = None
    streaming_platforms: Any = Field(default=None, alias="streamingPlatforms")
    rating: Any = None
    genres: Any = None
    why_it_fits: Any = Field(default=None, alias="whyItFits")
    plot: Any = None
    imdb_id: Any = Field(default=None, alias="imdbId")


class RecommendResponse(_CamelModel):
    recommendations: list[RecommendationOut]
    error: str | None = None


class ErrorResponse(BaseModel):
    error: str


class PlaceholderOut(BaseModel):
    initials: str
    background: str
    foreground: str


class PosterResponse(_CamelModel):
    imdb_id: str = Field(alias="imdbId")
    poster_url: str | None = Field(default=None, alias="posterUrl")
    imdb_url: str = Field(alias="imdbUrl")
    rotten_tomatoes_url: str = Field(alias="rottenTomatoesUrl")
    placeholder: PlaceholderOut
