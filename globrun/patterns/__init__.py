"""Patterns module — pattern specs, glob compilation and directory grouping.

Public API::

    from globrun.patterns import PatternSpec, parse_pattern_spec
    from globrun.patterns import CompiledPattern, common_directory, compile_pattern
    from globrun.patterns import DirectoryGroup, group_by_directory
"""

from globrun.patterns.glob import (
    CompiledPattern,
    PatternSyntaxError,
    common_directory,
    compile_pattern,
)
from globrun.patterns.grouping import DirectoryGroup, PatternEntry, group_by_directory
from globrun.patterns.models import PatternSpec, PatternSpecError, parse_pattern_spec

__all__ = [
    "CompiledPattern",
    "PatternSyntaxError",
    "common_directory",
    "compile_pattern",
    "DirectoryGroup",
    "PatternEntry",
    "group_by_directory",
    "PatternSpec",
    "PatternSpecError",
    "parse_pattern_spec",
]
