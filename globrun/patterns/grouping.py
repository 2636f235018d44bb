"""Directory grouping — one watch subscription per literal base directory."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from globrun.patterns.glob import CompiledPattern, common_directory

if TYPE_CHECKING:
    from collections.abc import Iterable

    from globrun.patterns.models import PatternSpec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PatternEntry:
    """A compiled pattern and its command, as registered under a directory."""

    pattern: CompiledPattern
    command: str
    source: str
    """The glob exactly as the user wrote it."""


@dataclass
class DirectoryGroup:
    """All pattern entries sharing one base directory, in registration order."""

    base_dir: str
    entries: list[PatternEntry] = field(default_factory=list)

    def matches(self, path: str) -> list[PatternEntry]:
        """Return every entry whose pattern matches ``path`` (all fire)."""
        return [e for e in self.entries if e.pattern.match_under(self.base_dir, path)]

    def __len__(self) -> int:
        return len(self.entries)


def group_by_directory(specs: Iterable[PatternSpec]) -> dict[str, DirectoryGroup]:
    """Group pattern specs by the literal directory prefix of their glob.

    Nested base directories are not merged; each gets its own group.

    Raises:
        PatternSyntaxError: If any glob is invalid.
    """
    groups: dict[str, DirectoryGroup] = {}
    for spec in specs:
        base_dir, pattern = common_directory(spec.pattern)
        group = groups.setdefault(base_dir, DirectoryGroup(base_dir=base_dir))
        group.entries.append(
            PatternEntry(pattern=pattern, command=spec.command, source=spec.pattern)
        )
        logger.debug("Pattern %r -> %s [%s]", spec.pattern, base_dir, pattern.decompile())
    return groups
