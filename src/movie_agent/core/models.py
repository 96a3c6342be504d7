from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Literal, get_args

Mood = Literal["cozy", "thrilling", "funny", "dramatic", "romantic", "thought-provoking"]
WatchingWith = Literal["solo", "date", "family", "friends"]
Sentiment = Literal["positive", "mixed", "negative"]

AgentStep = Literal[
    "idle",
    "analyzing_preferences",
    "searching_movies",
    "reading_reviews",
    "generating_recommendations",
    "complete",
    "error",
]

MOODS: tuple[str, ...] = get_args(Mood)
WATCHING_WITH: tuple[str, ...] = get_args(WatchingWith)
AGENT_STEPS: tuple[str, ...] = get_args(AgentStep)

TERMINAL_STEPS: frozenset[str] = frozenset({"complete", "error"})

# Forward order of the happy path; "error" is reachable from any non-terminal step.
_STEP_RANK: dict[str, int] = {
    "idle": 0,
    "analyzing_preferences": 1,
    "searching_movies": 2,
    "reading_reviews": 3,
    "generating_recommendations": 4,
    "complete": 5,
}


class PipelineTransitionError(RuntimeError):
    pass


def _coerce_str_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, list):
        return [str(v) for v in value]
    return [str(value)]


@dataclass(frozen=True)
class UserPreferences:
    mood: Mood
    watching_with: WatchingWith
    available_time: int  # minutes
    recently_enjoyed: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "mood": self.mood,
            "watchingWith": self.watching_with,
            "availableTime": self.available_time,
        }
        if self.recently_enjoyed:
            out["recentlyEnjoyed"] = self.recently_enjoyed
        return out


@dataclass(frozen=True)
class MovieSearchResult:
    title: str
    year: int | None = None
    imdb_id: str = ""
    runtime: int | None = None
    genres: list[str] = field(default_factory=list)
    streaming_platforms: list[str] = field(default_factory=list)
    rating: float | None = None

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> MovieSearchResult:
        return cls(
            title=str(raw.get("title") or ""),
            year=raw.get("year"),
            imdb_id=str(raw.get("imdbId") or ""),
            runtime=raw.get("runtime"),
            genres=_coerce_str_list(raw.get("genres")),
            streaming_platforms=_coerce_str_list(raw.get("streamingPlatforms")),
            rating=raw.get("rating"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "year": self.year,
            "imdbId": self.imdb_id,
            "runtime": self.runtime,
            "genres": list(self.genres),
            "streamingPlatforms": list(self.streaming_platforms),
            "rating": self.rating,
        }


@dataclass(frozen=True)
class MovieReview:
    movie_title: str
    source: str
    summary: str
    sentiment: Sentiment = "mixed"

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> MovieReview:
        return cls(
            movie_title=str(raw.get("movieTitle") or ""),
            source=str(raw.get("source") or ""),
            summary=str(raw.get("summary") or ""),
            sentiment=raw.get("sentiment") or "mixed",
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "movieTitle": self.movie_title,
            "source": self.source,
            "summary": self.summary,
            "sentiment": self.sentiment,
        }


@dataclass(frozen=True)
class MovieRecommendation:
    title: str
    year: int | None = None
    runtime: int | None = None
    streaming_platforms: list[str] = field(default_factory=list)
    rating: float | None = None
    genres: list[str] = field(default_factory=list)
    why_it_fits: str = ""
    plot: str = ""
    imdb_id: str = ""

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> MovieRecommendation:
        return cls(
            title=str(raw.get("title") or ""),
            year=raw.get("year"),
            runtime=raw.get("runtime"),
            streaming_platforms=_coerce_str_list(raw.get("streamingPlatforms")),
            rating=raw.get("rating"),
            genres=_coerce_str_list(raw.get("genres")),
            why_it_fits=str(raw.get("whyItFits") or ""),
            plot=str(raw.get("plot") or ""),
            imdb_id=str(raw.get("imdbId") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "year": self.year,
            "runtime": self.runtime,
            "streamingPlatforms": list(self.streaming_platforms),
            "rating": self.rating,
            "genres": list(self.genres),
            "whyItFits": self.why_it_fits,
            "plot": self.plot,
            "imdbId": self.imdb_id,
        }


@dataclass(frozen=True)
class PipelineState:
    """Snapshot of one pipeline run.

    States are never mutated; every stage produces a new snapshot through
    `advance`, which replaces (does not merge) the fields it is given.
    """

    user_preferences: UserPreferences
    search_results: tuple[MovieSearchResult, ...] = ()
    reviews: tuple[MovieReview, ...] = ()
    recommendations: tuple[MovieRecommendation, ...] = ()
    current_step: AgentStep = "idle"
    error: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.current_step in TERMINAL_STEPS

    def advance(self, step: AgentStep, **changes: Any) -> PipelineState:
        if self.is_terminal:
            raise PipelineTransitionError(
                f"Pipeline already finished in {self.current_step!r}"
            )
        if step != "error" and _STEP_RANK[step] <= _STEP_RANK[self.current_step]:
            raise PipelineTransitionError(
                f"Cannot move from {self.current_step!r} back to {step!r}"
            )
        return replace(self, current_step=step, **changes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "currentStep": self.current_step,
            "userPreferences": self.user_preferences.to_dict(),
            "searchResults": [m.to_dict() for m in self.search_results],
            "reviews": [r.to_dict() for r in self.reviews],
            "recommendations": [r.to_dict() for r in self.recommendations],
            "error": self.error,
        }
