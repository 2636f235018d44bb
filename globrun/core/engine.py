"""Dispatcher and WatchSession -- wire watchers, patterns and the supervisor."""

from __future__ import annotations

import functools
import logging
import time
from typing import TYPE_CHECKING, Any

from globrun.core.config import GlobrunConfig
from globrun.core.hooks import HookEvent, HookManager
from globrun.core.watcher import WatchManager
from globrun.dispatch.keys import DebounceKey, derive_key
from globrun.dispatch.supervisor import ProcessSupervisor
from globrun.patterns.grouping import group_by_directory

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from globrun.core.watcher import ChangeEvent
    from globrun.dispatch.process import RunningProcess
    from globrun.patterns.grouping import DirectoryGroup
    from globrun.patterns.models import PatternSpec

logger = logging.getLogger(__name__)


class Dispatcher:
    """Routes change events from one base directory to matching commands.

    Every matching entry fires; each match gets its own debounce key and
    its own supersede-and-start call.
    """

    def __init__(
        self,
        groups: dict[str, DirectoryGroup],
        policy: DebounceKey,
        supervisor: ProcessSupervisor,
        hooks: HookManager | None = None,
    ) -> None:
        self.groups = groups
        self.policy = policy
        self.supervisor = supervisor
        self.hooks = hooks or HookManager()

    def dispatch(self, base_dir: str, event: ChangeEvent) -> list[RunningProcess]:
        """Handle one event delivered by the watcher of ``base_dir``."""
        if not event.triggers_dispatch:
            return []
        group = self.groups.get(base_dir)
        if group is None:
            return []

        path = event.path
        self.hooks.emit(HookEvent.ON_FILE_CHANGE, {"path": path, "base_dir": base_dir})

        launched: list[RunningProcess] = []
        for entry in group.matches(path):
            key = derive_key(self.policy, base_dir, entry.pattern, entry.command, path)
            self.hooks.emit(
                HookEvent.ON_MATCH,
                {"path": path, "pattern": entry.source, "command": entry.command, "key": key},
            )
            try:
                launched.append(self.supervisor.supersede_and_start(key, path, entry.command))
            except Exception as e:
                logger.exception("Failed to dispatch %r for %s", entry.command, path)
                self.hooks.emit(HookEvent.ON_ERROR, {"key": key, "error": e})
        return launched

    def handler_for(self, base_dir: str) -> Callable[[ChangeEvent], Any]:
        """Return the watcher callback for one base directory."""
        return functools.partial(self.dispatch, base_dir)


class WatchSession:
    """Central orchestrator for one watch session.

    Builds directory groups from the pattern specs, owns the supervisor and
    the watchers, and tears everything down on close. Invalid configuration
    fails here, before anything is watched.

    Args:
        specs: Pattern/command pairs; at least one is required.
        config: Session configuration (defaults to GlobrunConfig()).
        hooks: Optional HookManager shared with dispatcher and supervisor.
        watch_manager: Optional WatchManager (tests inject a fake observer).

    Raises:
        ValueError: If no specs are given.
        PatternSyntaxError: If any glob is invalid.
    """

    def __init__(
        self,
        specs: Iterable[PatternSpec],
        config: GlobrunConfig | None = None,
        hooks: HookManager | None = None,
        watch_manager: WatchManager | None = None,
    ) -> None:
        specs = list(specs)
        if not specs:
            raise ValueError("No patterns given")
        self.config = config or GlobrunConfig()
        self.hooks = hooks or HookManager()
        self.groups = group_by_directory(specs)
        self.supervisor = ProcessSupervisor(
            delay=self.config.debounce_seconds,
            env_var=self.config.file_env_var,
            kill_grace=self.config.kill_grace_seconds,
            hooks=self.hooks,
        )
        self.dispatcher = Dispatcher(
            self.groups, self.config.debounce_policy, self.supervisor, self.hooks
        )
        self.watch_manager = watch_manager or WatchManager()
        self._started = False

    def start(self) -> None:
        """Subscribe to every base directory and start delivering events."""
        if self._started:
            return
        for base_dir in self.groups:
            self.watch_manager.subscribe(base_dir, self.dispatcher.handler_for(base_dir))
        self.watch_manager.start()
        self._started = True

    def close(self) -> None:
        """Stop watching, then cancel all outstanding commands."""
        if not self._started:
            return
        self.watch_manager.stop()
        self.supervisor.shutdown(timeout=self.config.kill_grace_seconds + 5)
        self._started = False

    def run_forever(self) -> None:
        """Block until interrupted (KeyboardInterrupt propagates)."""
        self.start()
        while True:
            time.sleep(1)

    @property
    def is_running(self) -> bool:
        return self._started

    def __enter__(self) -> WatchSession:
        self.start()
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
