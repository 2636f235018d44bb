"""Watchers — watchdog subscriptions delivering change events per directory."""

from __future__ import annotations

import enum
import logging
import os
import queue
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from globrun.patterns.glob import relative_to

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


class ChangeKind(enum.Enum):
    CREATED = "created"
    MODIFIED = "modified"
    REMOVED = "removed"
    RENAMED = "renamed"
    OTHER = "other"


_KINDS = {
    EVENT_TYPE_CREATED: ChangeKind.CREATED,
    EVENT_TYPE_MODIFIED: ChangeKind.MODIFIED,
    EVENT_TYPE_DELETED: ChangeKind.REMOVED,
    EVENT_TYPE_MOVED: ChangeKind.RENAMED,
}


@dataclass(frozen=True)
class ChangeEvent:
    kind: ChangeKind
    path: str
    dest_path: str | None = None

    @classmethod
    def from_watchdog(cls, event: FileSystemEvent, base_dir: str | None = None) -> ChangeEvent:
        """Map a watchdog event; directory events are always OTHER.

        A file moved to somewhere inside ``base_dir`` is reported as CREATED
        at its destination, the same as a file that appeared there. Without
        a ``base_dir`` every destination counts as inside.
        """
        path = os.fsdecode(event.src_path)
        if event.is_directory:
            return cls(kind=ChangeKind.OTHER, path=path)
        kind = _KINDS.get(event.event_type, ChangeKind.OTHER)
        if kind is not ChangeKind.RENAMED:
            return cls(kind=kind, path=path)

        dest = os.fsdecode(event.dest_path)
        if base_dir is None or relative_to(base_dir, dest) is not None:
            return cls(kind=ChangeKind.CREATED, path=dest)
        return cls(kind=kind, path=path, dest_path=dest)

    @property
    def triggers_dispatch(self) -> bool:
        return self.kind in (ChangeKind.CREATED, ChangeKind.MODIFIED)


_CLOSE = object()


class _ChannelHandler(FileSystemEventHandler):
    """Forwards every watchdog event into a channel."""

    def __init__(self, channel: queue.Queue, base_dir: str):
        super().__init__()
        self._channel = channel
        self._base_dir = base_dir

    def on_any_event(self, event: FileSystemEvent) -> None:
        self._channel.put(ChangeEvent.from_watchdog(event, self._base_dir))


class DirectoryWatcher:
    """One subscription: a channel of events for a base directory and the
    consumer thread that drains it into ``callback``.

    Args:
        base_dir: Directory watched recursively.
        callback: Called with each ChangeEvent, on the consumer thread.
    """

    def __init__(self, base_dir: str, callback: Callable[[ChangeEvent], Any]):
        self.base_dir = base_dir
        self.callback = callback
        self.channel: queue.Queue = queue.Queue()
        self.handler = _ChannelHandler(self.channel, base_dir)
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(
            target=self._consume, name=f"globrun-watch[{self.base_dir}]", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """Close the channel and join the consumer thread."""
        if self._thread is None:
            return
        self.channel.put(_CLOSE)
        self._thread.join(timeout=timeout)
        self._thread = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _consume(self) -> None:
        while True:
            event = self.channel.get()
            if event is _CLOSE:
                return
            try:
                self.callback(event)
            except Exception:
                logger.exception("Dispatch failed for %s in %s", event.path, self.base_dir)


class WatchManager:
    """Schedules DirectoryWatchers on a single watchdog Observer.

    Each base directory gets its own recursive watch, even when nested in
    another watched directory.
    """

    def __init__(self, observer_factory: Callable[[], Any] = Observer):
        self._observer_factory = observer_factory
        self._observer: Any = None
        self.watchers: dict[str, DirectoryWatcher] = {}
        self._running = False

    def subscribe(
        self, base_dir: str, callback: Callable[[ChangeEvent], Any]
    ) -> DirectoryWatcher | None:
        """Subscribe to a directory tree. Missing directories are skipped."""
        if not Path(base_dir).is_dir():
            logger.warning("Watch directory does not exist: %s", base_dir)
            return None
        if self._observer is None:
            self._observer = self._observer_factory()

        watcher = DirectoryWatcher(base_dir, callback)
        try:
            self._observer.schedule(watcher.handler, base_dir, recursive=True)
        except OSError as e:
            logger.warning("Cannot watch %s: %s", base_dir, e)
            return None
        self.watchers[base_dir] = watcher
        if self._running:
            watcher.start()
        logger.info("Watching %s", base_dir)
        return watcher

    def start(self) -> None:
        """Start the consumer threads and the observer."""
        if self._running:
            return
        for watcher in self.watchers.values():
            watcher.start()
        if self._observer is not None:
            self._observer.daemon = True
            self._observer.start()
        self._running = True
        logger.info("Started %d watcher(s)", len(self.watchers))

    def stop(self) -> None:
        """Stop the observer, then close every channel and join its consumer."""
        if not self._running:
            return
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5)
        for watcher in self.watchers.values():
            watcher.stop()
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def __enter__(self) -> WatchManager:
        self.start()
        return self

    def __exit__(self, *exc: object) -> None:
        self.stop()
