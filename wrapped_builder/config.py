"""Runtime settings loaded from the environment (and an optional .env file)."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from wrapped_builder.errors import ConfigurationError


DEFAULT_MODEL = "llama-3.3-70b-versatile"
API_KEY_VAR = "GROQ_API_KEY"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(
            f"Invalid value for {name}",
            f"{name} must be a number, got {raw!r}",
        ) from None


@dataclass(frozen=True)
class Settings:
    """Generation, fetch, and pacing settings.

    The API key is optional here: its absence only becomes an error when a
    report is actually requested (see :meth:`require_api_key`).
    """
    api_key: str | None = None
    model: str = DEFAULT_MODEL
    temperature: float = 0.8
    max_tokens: int = 2048
    fetch_timeout: float = 5.0
    context_chars: int = 2000
    bulk_delay: float = 1.0
    settle_delay: float = 0.5
    themes_file: str | None = None

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        if dotenv:
            load_dotenv()
        return cls(
            api_key=os.getenv(API_KEY_VAR) or None,
            model=os.getenv("WRAPPED_MODEL", DEFAULT_MODEL),
            temperature=_env_float("WRAPPED_TEMPERATURE", 0.8),
            max_tokens=int(_env_float("WRAPPED_MAX_TOKENS", 2048)),
            fetch_timeout=_env_float("WRAPPED_FETCH_TIMEOUT", 5.0),
            context_chars=int(_env_float("WRAPPED_CONTEXT_CHARS", 2000)),
            bulk_delay=_env_float("WRAPPED_BULK_DELAY", 1.0),
            settle_delay=_env_float("WRAPPED_SETTLE_DELAY", 0.5),
            themes_file=os.getenv("WRAPPED_THEMES_FILE") or None,
        )

    def require_api_key(self) -> str:
        """Return the API key or raise :class:`ConfigurationError`."""
        if not self.api_key:
            raise ConfigurationError(
                "API key not configured",
                f"{API_KEY_VAR} environment variable is missing",
            )
        return self.api_key
