from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from urllib.parse import quote_plus

import httpx

logger = logging.getLogger(__name__)

OMDB_BASE = "https://www.omdbapi.com/"

IMDB_ID_RE = re.compile(r"^tt\d{7,8}$")

# Background/foreground pairs for the placeholder tile.
PALETTE: tuple[tuple[str, str], ...] = (
    ("#7c3aed", "#ddd6fe"),  # violet
    ("#2563eb", "#bfdbfe"),  # blue
    ("#4f46e5", "#c7d2fe"),  # indigo
    ("#9333ea", "#e9d5ff"),  # purple
    ("#c026d3", "#f5d0fe"),  # fuchsia
    ("#0891b2", "#a5f3fc"),  # cyan
    ("#0d9488", "#99f6e4"),  # teal
    ("#059669", "#a7f3d0"),  # emerald
)


@dataclass(frozen=True)
class PosterPlaceholder:
    initials: str
    background: str
    foreground: str


@dataclass(frozen=True)
class Poster:
    imdb_id: str
    poster_url: str | None
    placeholder: PosterPlaceholder


def title_initials(title: str) -> str:
    words = [w for w in title.split(" ") if w]
    return "".join(w[0] for w in words[:2]).upper()


def placeholder_for(title: str) -> PosterPlaceholder:
    bg, fg = PALETTE[len(title) % len(PALETTE)]
    return PosterPlaceholder(initials=title_initials(title), background=bg, foreground=fg)


def imdb_url(imdb_id: str) -> str:
    return f"https://www.imdb.com/title/{imdb_id}/"


def rotten_tomatoes_search_url(title: str) -> str:
    return f"https://www.rottentomatoes.com/search?search={quote_plus(title)}"


def fetch_poster_url(
    imdb_id: str,
    *,
    api_key: str | None,
    client: httpx.Client | None = None,
    timeout_s: float = 10.0,
) -> str | None:
    """Look up a poster image URL on OMDb.

    Decorative only: every failure (no key, bad id, network, odd payload)
    yields `None`.
    """

    if not api_key or not IMDB_ID_RE.match(imdb_id or ""):
        return None

    close_client = False
    if client is None:
        client = httpx.Client(timeout=timeout_s)
        close_client = True

    try:
        resp = client.get(OMDB_BASE, params={"i": imdb_id, "apikey": api_key})
        if resp.status_code >= 400:
            return None
        data = resp.json()
    except (httpx.HTTPError, ValueError):
        logger.debug("Poster lookup failed for %s", imdb_id, exc_info=True)
        return None
    finally:
        if close_client:
            client.close()

    poster = data.get("Poster") if isinstance(data, dict) else None
    if not isinstance(poster, str) or not poster or poster == "N/A":
        return None
    return poster


def get_poster(
    imdb_id: str,
    title: str,
    *,
    api_key: str | None,
    client: httpx.Client | None = None,
) -> Poster:
    return Poster(
        imdb_id=imdb_id,
        poster_url=fetch_poster_url(imdb_id, api_key=api_key, client=client),
        placeholder=placeholder_for(title),
    )
