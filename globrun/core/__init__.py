"""Core module — config, hooks, watchers, session engine, CLI."""

from globrun.core.hooks import HookEvent, HookManager
from globrun.core.config import GlobrunConfig

__all__ = ["GlobrunConfig", "HookEvent", "HookManager"]
