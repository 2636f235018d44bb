"""Debounce keys — which launches supersede each other."""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from globrun.patterns.glob import CompiledPattern


class DebounceKeyError(ValueError):
    """Raised for an unrecognised debounce key name."""


class DebounceKey(enum.Enum):
    PER_ANY = "all"
    PER_FILE = "file"
    PER_PATTERN = "pattern"
    PER_COMMAND = "command"


def parse_debounce_key(name: str) -> DebounceKey:
    """Parse a policy name case-insensitively.

    Raises:
        DebounceKeyError: If the name is not one of all, file, pattern, command.
    """
    try:
        return DebounceKey(name.strip().lower())
    except ValueError:
        choices = ", ".join(f"'{k.value}'" for k in DebounceKey)
        raise DebounceKeyError(
            f"Unrecognized debounce key {name!r}: must be one of {choices}"
        ) from None


def derive_key(
    policy: DebounceKey,
    base_dir: str,
    pattern: CompiledPattern,
    command: str,
    file_path: str,
) -> str:
    """Compute the debounce key for one matched event."""
    if policy is DebounceKey.PER_ANY:
        return ""
    if policy is DebounceKey.PER_FILE:
        return file_path
    if policy is DebounceKey.PER_PATTERN:
        return f"{base_dir}/{pattern.decompile()}"
    return command
