from __future__ import annotations

from dataclasses import dataclass

from movie_agent.core.models import AgentStep

PROGRESS_STEPS: tuple[tuple[str, str], ...] = (
    ("analyzing_preferences", "Understanding your vibe"),
    ("searching_movies", "Searching thousands of titles"),
    ("reading_reviews", "Reading critic reviews"),
    ("generating_recommendations", "Picking your perfect matches"),
)


@dataclass(frozen=True)
class ProgressView:
    step: str
    label: str
    index: int
    total: int


def progress_for(step: AgentStep) -> ProgressView | None:
    """Progress indicator for a running step; `None` when nothing is in flight."""

    for i, (key, label) in enumerate(PROGRESS_STEPS):
        if key == step:
            return ProgressView(step=key, label=label, index=i, total=len(PROGRESS_STEPS))
    return None
