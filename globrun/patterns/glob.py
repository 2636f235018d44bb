"""Glob patterns — per-segment compilation on top of fnmatch.

A pattern is split on ``/`` into segments. ``**`` as a whole segment matches
zero or more directory levels; every other segment is translated with
``fnmatch.translate`` so ``*`` and ``?`` never cross a path separator.
"""

from __future__ import annotations

import fnmatch
import os
import re
from dataclasses import dataclass, field

GLOB_CHARS = frozenset("*?[")
GLOBSTAR = "**"


class PatternSyntaxError(ValueError):
    """Raised when a glob pattern cannot be compiled."""

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"Invalid glob pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


def _is_literal(segment: str) -> bool:
    return not any(ch in GLOB_CHARS for ch in segment)


def _check_brackets(pattern: str) -> None:
    """Reject unterminated character classes and classes spanning a ``/``."""
    i = 0
    n = len(pattern)
    while i < n:
        if pattern[i] != "[":
            i += 1
            continue
        j = i + 1
        if j < n and pattern[j] == "!":
            j += 1
        # a leading ']' is a literal member of the class
        if j < n and pattern[j] == "]":
            j += 1
        while j < n and pattern[j] != "]":
            if pattern[j] == "/":
                raise PatternSyntaxError(
                    pattern, f"character class at offset {i} spans a path separator"
                )
            j += 1
        if j >= n:
            raise PatternSyntaxError(pattern, f"unterminated character class at offset {i}")
        i = j + 1


def _simplify_segments(segments: list[str]) -> list[str]:
    simplified: list[str] = []
    for segment in segments:
        if segment in ("", "."):
            continue
        if segment == GLOBSTAR:
            if simplified and simplified[-1] == GLOBSTAR:
                continue
        else:
            segment = re.sub(r"\*{2,}", "*", segment)
        simplified.append(segment)
    return simplified


def _split(pattern: str) -> list[str]:
    if not pattern:
        raise PatternSyntaxError(pattern, "pattern is empty")
    _check_brackets(pattern)
    segments = _simplify_segments(pattern.split("/"))
    if not segments:
        raise PatternSyntaxError(pattern, "pattern names no file")
    return segments


@dataclass(frozen=True)
class CompiledPattern:
    """A simplified, compiled glob pattern relative to some directory."""

    segments: tuple[str, ...]
    _matchers: tuple[re.Pattern[str] | None, ...] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        matchers: list[re.Pattern[str] | None] = []
        for segment in self.segments:
            if segment == GLOBSTAR:
                matchers.append(None)
                continue
            try:
                matchers.append(re.compile(fnmatch.translate(segment)))
            except re.error as e:
                raise PatternSyntaxError(self.decompile(), str(e)) from e
        object.__setattr__(self, "_matchers", tuple(matchers))

    def decompile(self) -> str:
        """Return the canonical string form of the pattern."""
        return "/".join(self.segments)

    def match(self, relative_path: str) -> bool:
        """Test a ``/``-separated path relative to the pattern's directory."""
        parts = [p for p in relative_path.split("/") if p not in ("", ".")]
        if not parts:
            return False
        return self._match_parts(parts, 0, 0)

    def _match_parts(self, parts: list[str], pi: int, si: int) -> bool:
        matchers = self._matchers
        while si < len(matchers):
            matcher = matchers[si]
            if matcher is None:
                # ``**`` consumes zero or more whole segments
                return any(
                    self._match_parts(parts, k, si + 1) for k in range(pi, len(parts) + 1)
                )
            if pi >= len(parts) or not matcher.match(parts[pi]):
                return False
            pi += 1
            si += 1
        return pi == len(parts)

    def match_under(self, base_dir: str, path: str) -> bool:
        """Test an event path against this pattern anchored at ``base_dir``."""
        relative = relative_to(base_dir, path)
        return relative is not None and self.match(relative)

    def __str__(self) -> str:
        return self.decompile()


def relative_to(base_dir: str, path: str) -> str | None:
    """Return ``path`` relative to ``base_dir`` with ``/`` separators.

    Returns None when the path does not lie under ``base_dir``.
    """
    try:
        relative = os.path.relpath(path, base_dir)
    except ValueError:
        # different drives on Windows
        return None
    relative = relative.replace(os.sep, "/")
    if relative == ".." or relative.startswith("../"):
        return None
    return relative


def compile_pattern(pattern: str) -> CompiledPattern:
    """Compile a full glob pattern without splitting off its directory."""
    return CompiledPattern(tuple(_split(pattern)))


def common_directory(pattern: str) -> tuple[str, CompiledPattern]:
    """Split a pattern into its literal base directory and the remaining glob.

    The longest run of leading segments free of glob metacharacters becomes
    the base directory; at least one segment always stays in the pattern.

    Examples::

        common_directory("src/**/*.py")  -> ("src", <**/*.py>)
        common_directory("*.txt")        -> (".", <*.txt>)
        common_directory("/etc/hosts")   -> ("/etc", <hosts>)
    """
    segments = _split(pattern)
    prefix: list[str] = []
    while len(prefix) < len(segments) - 1 and _is_literal(segments[len(prefix)]):
        prefix.append(segments[len(prefix)])

    if pattern.startswith("/"):
        base_dir = "/" + "/".join(prefix)
    else:
        base_dir = "/".join(prefix) or "."
    return base_dir, CompiledPattern(tuple(segments[len(prefix):]))
