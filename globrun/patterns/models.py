"""Pydantic models for pattern/command pairs."""

from __future__ import annotations

from pydantic import BaseModel, Field, ValidationError, field_validator


class PatternSpecError(ValueError):
    """Raised when a ``GLOB:COMMAND`` string cannot be parsed."""


class PatternSpec(BaseModel):
    """A glob pattern paired with the shell command it triggers."""

    model_config = {"frozen": True}

    pattern: str = Field(min_length=1)
    command: str = Field(min_length=1)

    @field_validator("pattern", "command")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    def __str__(self) -> str:
        return f"{self.pattern}:{self.command}"


def parse_pattern_spec(text: str) -> PatternSpec:
    """Parse ``GLOB:COMMAND``; the first colon separates the two halves.

    Raises:
        PatternSpecError: If there is no colon or either half is empty.
    """
    pattern, sep, command = text.partition(":")
    if not sep or not pattern or not command:
        raise PatternSpecError(f"Invalid pattern {text!r}: expected PATTERN:COMMAND")
    try:
        return PatternSpec(pattern=pattern, command=command)
    except ValidationError as e:
        raise PatternSpecError(f"Invalid pattern {text!r}: {e.errors()[0]['msg']}") from e
