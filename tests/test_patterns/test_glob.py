"""Tests for globrun.patterns.glob — compilation, matching, directory split."""

from __future__ import annotations

import pytest

from globrun.patterns.glob import (
    CompiledPattern,
    PatternSyntaxError,
    common_directory,
    compile_pattern,
    relative_to,
)

# ---------------------------------------------------------------------------
# TestCompilePattern
# ---------------------------------------------------------------------------


class TestCompilePattern:
    """Tests for compile_pattern and CompiledPattern.match."""

    @pytest.mark.parametrize(
        ("pattern", "path", "expected"),
        [
            ("*.txt", "notes.txt", True),
            ("*.txt", "notes.md", False),
            ("*.txt", "sub/notes.txt", False),
            ("**/*.txt", "notes.txt", True),
            ("**/*.txt", "a/b/notes.txt", True),
            ("src/*.py", "src/main.py", True),
            ("src/*.py", "src/pkg/main.py", False),
            ("src/**/test_*.py", "src/a/b/test_x.py", True),
            ("src/**/test_*.py", "src/test_x.py", True),
            ("file?.log", "file1.log", True),
            ("file?.log", "file12.log", False),
            ("[abc].c", "b.c", True),
            ("[!abc].c", "b.c", False),
            ("[!abc].c", "d.c", True),
            ("docs/**", "docs/a/b/index.md", True),
            ("README", "README", True),
            ("README", "readme", False),
        ],
    )
    def test_match(self, pattern: str, path: str, expected: bool) -> None:
        assert compile_pattern(pattern).match(path) is expected

    def test_star_does_not_cross_separator(self) -> None:
        """``*`` matches within one segment only."""
        assert not compile_pattern("a*b").match("a/b")

    def test_empty_path_never_matches(self) -> None:
        assert not compile_pattern("**").match("")

    def test_simplification_collapses_redundant_nodes(self) -> None:
        """Repeated ``**`` segments, ``.`` segments and ``**`` within a name collapse."""
        pattern = compile_pattern("./a/**/**/b**c.txt")
        assert pattern.decompile() == "a/**/b*c.txt"

    def test_simplified_pattern_matches_like_unsimplified(self) -> None:
        raw = CompiledPattern(("a", "**", "**", "b**c.txt"))
        simplified = compile_pattern("a/**/**/b**c.txt")
        for path in ["a/bxc.txt", "a/x/y/bc.txt", "a/x/b/c.txt", "b/bc.txt"]:
            assert raw.match(path) == simplified.match(path)

    def test_str_is_decompiled_form(self) -> None:
        assert str(compile_pattern("src//*.py")) == "src/*.py"

    def test_equality_by_segments(self) -> None:
        assert compile_pattern("a/*.c") == compile_pattern("./a/*.c")


# ---------------------------------------------------------------------------
# TestPatternSyntaxError
# ---------------------------------------------------------------------------


class TestPatternSyntaxError:
    """Invalid globs fail with PatternSyntaxError naming the pattern."""

    @pytest.mark.parametrize("pattern", ["[abc", "src/[!a", "a[b/c]d", "", "./"])
    def test_invalid_patterns(self, pattern: str) -> None:
        with pytest.raises(PatternSyntaxError) as exc_info:
            compile_pattern(pattern)
        assert exc_info.value.pattern == pattern
        assert repr(pattern) in str(exc_info.value)

    def test_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            common_directory("[oops")

    def test_literal_bracket_member(self) -> None:
        """A ``]`` right after ``[`` is part of the class, not its end."""
        assert compile_pattern("[]x].txt").match("].txt")


# ---------------------------------------------------------------------------
# TestCommonDirectory
# ---------------------------------------------------------------------------


class TestCommonDirectory:
    """Tests for splitting patterns into base directory + relative glob."""

    @pytest.mark.parametrize(
        ("pattern", "base_dir", "relative"),
        [
            ("*.txt", ".", "*.txt"),
            ("src/*.py", "src", "*.py"),
            ("src/app/**/*.py", "src/app", "**/*.py"),
            ("src/lib.py", "src", "lib.py"),
            ("README.md", ".", "README.md"),
            ("/etc/*.conf", "/etc", "*.conf"),
            ("/*.conf", "/", "*.conf"),
            ("../shared/*.h", "../shared", "*.h"),
            ("./docs/*.md", "docs", "*.md"),
            ("a/b*/c/*.txt", "a", "b*/c/*.txt"),
        ],
    )
    def test_split(self, pattern: str, base_dir: str, relative: str) -> None:
        got_dir, got_pattern = common_directory(pattern)
        assert got_dir == base_dir
        assert got_pattern.decompile() == relative

    def test_grouped_match_equals_full_match(self) -> None:
        """Matching under the base directory agrees with matching the whole pattern."""
        paths = [
            "src/app/main.py",
            "src/app/sub/util.py",
            "src/other.py",
            "src/app/readme.md",
            "lib/app/main.py",
        ]
        for pattern in ["src/app/**/*.py", "src/*.py", "src/app/*.md", "**/main.py"]:
            full = compile_pattern(pattern)
            base_dir, relative = common_directory(pattern)
            for path in paths:
                assert relative.match_under(base_dir, path) == full.match(path), (pattern, path)


# ---------------------------------------------------------------------------
# TestRelativeTo
# ---------------------------------------------------------------------------


class TestRelativeTo:
    def test_inside(self) -> None:
        assert relative_to("src", "src/a/b.py") == "a/b.py"

    def test_dot_base(self) -> None:
        assert relative_to(".", "./notes.txt") == "notes.txt"

    def test_outside(self) -> None:
        assert relative_to("src", "lib/a.py") is None

    def test_absolute(self, tmp_path) -> None:
        assert relative_to(str(tmp_path), str(tmp_path / "x" / "y.txt")) == "x/y.txt"
