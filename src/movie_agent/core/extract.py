from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def find_json_array(text: str) -> str | None:
    """Return the first balanced top-level JSON array span in `text`.

    Scans bracket depth while skipping string literals, so brackets inside
    titles or trailing prose do not widen the span. A candidate that fails to
    parse is skipped and scanning resumes after its opening bracket.
    """

    if not isinstance(text, str):
        return None

    start = text.find("[")
    while start != -1:
        end = _matching_bracket(text, start)
        if end is None:
            start = text.find("[", start + 1)
            continue
        span = text[start : end + 1]
        try:
            json.loads(span)
        except json.JSONDecodeError:
            start = text.find("[", start + 1)
            continue
        return span
    return None


def _matching_bracket(text: str, start: int) -> int | None:
    depth = 0
    in_str = False
    esc = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_str:
            if esc:
                esc = False
            elif ch == "\\":
                esc = True
            elif ch == '"':
                in_str = False
            continue
        if ch == '"':
            in_str = True
        elif ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
            if depth == 0:
                return i
    return None


def extract_json_array(text: str) -> list[Any] | None:
    """Parse the first JSON array embedded in `text`; `None` means not found."""

    span = find_json_array(text)
    if span is None:
        return None
    return json.loads(span)


def parse_records(text: str, factory: Callable[[dict[str, Any]], T]) -> list[T] | None:
    """Extract an array and build one record per object element.

    Elements that are not objects, or that the factory rejects, are skipped.
    Order is preserved.
    """

    items = extract_json_array(text)
    if items is None:
        return None

    out: list[T] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            out.append(factory(item))
        except (TypeError, ValueError):
            logger.debug("Skipping malformed record: %r", item)
    return out
