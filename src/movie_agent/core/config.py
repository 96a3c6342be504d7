from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

from dotenv import find_dotenv, load_dotenv

Mode = Literal["pipeline", "single_shot"]
EmptySearchPolicy = Literal["continue", "error"]

ENV_PREFIX = "MOVIE_AGENT_"

# Per-variant defaults: the pipeline's final stage asks for twice as many titles.
_DEFAULT_MODELS: dict[str, str] = {
    "pipeline": "claude-sonnet-4-20250514",
    "single_shot": "claude-3-5-haiku-latest",
}
_DEFAULT_MAX_TOKENS: dict[str, int] = {
    "pipeline": 8192,
    "single_shot": 4096,
}


class ConfigError(ValueError):
    pass


def _env(name: str, default: str = "") -> str:
    return os.environ.get(f"{ENV_PREFIX}{name}", default).strip()


def parse_csv_env(name: str) -> list[str]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return []

    # Support both comma-separated values and newline-separated values (common in PaaS).
    parts = [p.strip() for p in raw.replace("\n", ",").split(",")]
    return [p for p in parts if p]


def _choice(name: str, value: str, allowed: tuple[str, ...]) -> str:
    if value not in allowed:
        raise ConfigError(f"{ENV_PREFIX}{name} must be one of {', '.join(allowed)} (got {value!r})")
    return value


@dataclass(frozen=True)
class Settings:
    anthropic_api_key: str | None = None
    mode: Mode = "pipeline"
    model: str = _DEFAULT_MODELS["pipeline"]
    max_tokens: int = _DEFAULT_MAX_TOKENS["pipeline"]
    temperature: float = 0.7
    llm_timeout_s: float | None = None
    empty_search_policy: EmptySearchPolicy = "continue"
    pipeline_error_status: int = 200
    cors_origins: tuple[str, ...] = ("*",)
    omdb_api_key: str | None = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> Settings:
        # Real environment variables win over a local .env file.
        load_dotenv(find_dotenv(usecwd=True), override=False)

        mode = _choice("MODE", _env("MODE", "pipeline"), ("pipeline", "single_shot"))
        policy = _choice(
            "EMPTY_SEARCH_POLICY", _env("EMPTY_SEARCH_POLICY", "continue"), ("continue", "error")
        )

        timeout_raw = _env("LLM_TIMEOUT_S")
        try:
            max_tokens = int(_env("MAX_TOKENS") or _DEFAULT_MAX_TOKENS[mode])
            temperature = float(_env("TEMPERATURE", "0.7"))
            llm_timeout_s = float(timeout_raw) if timeout_raw else None
            error_status = int(_env("PIPELINE_ERROR_STATUS", "200"))
        except ValueError as e:
            raise ConfigError(f"Invalid numeric setting: {e}") from e

        return cls(
            anthropic_api_key=os.environ.get("ANTHROPIC_API_KEY") or None,
            mode=mode,  # type: ignore[arg-type]
            model=_env("MODEL") or _DEFAULT_MODELS[mode],
            max_tokens=max_tokens,
            temperature=temperature,
            llm_timeout_s=llm_timeout_s,
            empty_search_policy=policy,  # type: ignore[arg-type]
            pipeline_error_status=error_status,
            cors_origins=tuple(parse_csv_env(f"{ENV_PREFIX}CORS_ORIGINS")) or ("*",),
            omdb_api_key=os.environ.get("OMDB_API_KEY") or None,
            log_level=_env("LOG_LEVEL", "INFO").upper(),
        )
