"""globrun configuration — Pydantic BaseSettings with env var support."""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from globrun.dispatch.keys import DebounceKey, parse_debounce_key


class GlobrunConfig(BaseSettings):
    """Session configuration for globrun.

    All fields can be overridden via environment variables prefixed with GLOBRUN_.
    Example: GLOBRUN_DEBOUNCE_KEY=file
    Command-line options take precedence over both.
    """

    model_config = {
        "env_prefix": "GLOBRUN_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    # Debouncing
    debounce_key: str = "pattern"
    debounce_seconds: float = Field(default=1.0, ge=0)

    # Launched commands
    file_env_var: str = Field(default="FILE", min_length=1)
    kill_grace_seconds: float = Field(default=5.0, ge=0)

    # Logging
    log_level: str = "WARNING"

    @field_validator("debounce_key")
    @classmethod
    def known_debounce_key(cls, v: str) -> str:
        return parse_debounce_key(v).value

    @field_validator("log_level")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        return v.upper()

    @property
    def debounce_policy(self) -> DebounceKey:
        """Return the parsed debounce key policy."""
        return DebounceKey(self.debounce_key)
