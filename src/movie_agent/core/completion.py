from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol, Union

import anthropic
import httpx

from movie_agent.core.config import Settings

logger = logging.getLogger(__name__)


class CompletionError(RuntimeError):
    pass


class CompletionConfigError(CompletionError):
    pass


class Completer(Protocol):
    def complete(self, prompt: str) -> str: ...


@dataclass(frozen=True)
class TextContent:
    text: str


@dataclass(frozen=True)
class BlockListContent:
    blocks: tuple[Any, ...]


CompletionContent = Union[TextContent, BlockListContent]


def parse_content(raw: Any) -> CompletionContent:
    """Classify a provider `content` payload as plain text or a list of blocks."""

    if isinstance(raw, str):
        return TextContent(raw)
    if isinstance(raw, list):
        return BlockListContent(tuple(raw))
    return TextContent("" if raw is None else str(raw))


def _block_text(block: Any) -> str:
    if isinstance(block, str):
        return block
    if isinstance(block, dict):
        if block.get("type", "text") != "text":
            return ""
        text = block.get("text")
    elif getattr(block, "type", None) == "text":
        text = getattr(block, "text", None)
    else:
        return ""
    return text if isinstance(text, str) else ""


def content_text(content: CompletionContent) -> str:
    if isinstance(content, TextContent):
        return content.text
    if isinstance(content, BlockListContent):
        return "".join(_block_text(b) for b in content.blocks)
    raise TypeError(f"Unsupported completion content: {type(content).__name__}")


class AnthropicCompletionClient:
    """Text-in, text-out wrapper around the Anthropic Messages API.

    One outbound request per `complete` call, with SDK retries disabled.
    `anthropic.APIStatusError` and `anthropic.APIConnectionError` propagate
    to the caller unwrapped.
    """

    def __init__(
        self,
        *,
        api_key: str | None,
        model: str,
        max_tokens: int,
        temperature: float = 0.7,
        timeout_s: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        if not api_key:
            raise CompletionConfigError("ANTHROPIC_API_KEY environment variable not set")

        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

        options: dict[str, Any] = {"api_key": api_key, "max_retries": 0}
        if timeout_s is not None:
            options["timeout"] = timeout_s
        if client is not None:
            options["http_client"] = client
        self._client = anthropic.Anthropic(**options)

    @classmethod
    def from_settings(
        cls, settings: Settings, *, client: httpx.Client | None = None
    ) -> AnthropicCompletionClient:
        return cls(
            api_key=settings.anthropic_api_key,
            model=settings.model,
            max_tokens=settings.max_tokens,
            temperature=settings.temperature,
            timeout_s=settings.llm_timeout_s,
            client=client,
        )

    def complete(self, prompt: str) -> str:
        message = self._client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            messages=[{"role": "user", "content": prompt}],
        )

        text = content_text(parse_content(message.content))
        logger.debug("Completion returned %d characters", len(text))
        return text
