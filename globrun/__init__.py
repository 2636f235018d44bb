"""globrun — run shell commands when files matching glob patterns change."""

__version__ = "0.1.0"
