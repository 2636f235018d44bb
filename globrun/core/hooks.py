"""Hook System — lifecycle hooks for file changes and launched commands."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class HookEvent(Enum):
    """Events that can trigger hooks."""

    ON_FILE_CHANGE = "on_file_change"
    ON_MATCH = "on_match"
    PROCESS_STARTED = "process_started"
    PROCESS_SUPERSEDED = "process_superseded"
    PROCESS_EXITED = "process_exited"
    ON_ERROR = "on_error"


@dataclass
class HookContext:
    """Context passed to hook callbacks.

    Attributes:
        event: The event that triggered the hook.
        data: Event-specific data (path, key, pid, returncode, error, ...).
    """

    event: HookEvent
    data: dict[str, Any] = field(default_factory=dict)


# Type alias for hook callbacks
HookCallback = Callable[[HookContext], None]


class HookManager:
    """Manages lifecycle hooks for a watch session.

    Multiple callbacks can be registered for the same event and are invoked
    in registration order. Hooks fire from watcher and process threads, so
    callbacks must be thread-safe. Errors in callbacks are logged but don't
    propagate.
    """

    def __init__(self) -> None:
        self._hooks: dict[HookEvent, list[HookCallback]] = {
            event: [] for event in HookEvent
        }

    def register(self, event: HookEvent, callback: HookCallback) -> None:
        """Register a callback for an event."""
        self._hooks[event].append(callback)

    def emit(self, event: HookEvent, data: dict[str, Any] | None = None) -> None:
        """Emit an event, invoking all registered callbacks.

        Errors are logged and swallowed so a failing hook cannot disturb
        dispatch or process bookkeeping.
        """
        context = HookContext(event=event, data=data or {})
        for callback in list(self._hooks[event]):
            try:
                callback(context)
            except Exception:
                logger.exception(
                    "Hook callback %s failed for event %s",
                    getattr(callback, "__name__", repr(callback)),
                    event.value,
                )
