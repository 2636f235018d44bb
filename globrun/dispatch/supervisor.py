"""ProcessSupervisor — at most one running command per debounce key."""

from __future__ import annotations

import logging
import os
import threading
from typing import TYPE_CHECKING

from globrun.core.hooks import HookEvent
from globrun.dispatch.process import RunningProcess

if TYPE_CHECKING:
    from collections.abc import Mapping

    from globrun.core.hooks import HookManager

logger = logging.getLogger(__name__)


class ProcessSupervisor:
    """Owns the live table mapping debounce key -> RunningProcess.

    All table mutations happen under one lock. Starting a launch for a key
    that already has one cancels the previous launch first; cancellation
    does not wait for the old process, whose own task thread waits for it
    to stop and then removes its table entry only if the entry still points
    at that task.

    Args:
        delay: Seconds each launch waits before starting its process.
        env_var: Environment variable that receives the triggering file path.
        kill_grace: Seconds a cancelled process gets before it is killed.
        hooks: Optional HookManager notified of process lifecycle events.
        base_env: Environment to inherit; defaults to ``os.environ`` at launch time.
    """

    def __init__(
        self,
        delay: float = 0.0,
        env_var: str = "FILE",
        kill_grace: float = 5.0,
        hooks: HookManager | None = None,
        base_env: Mapping[str, str] | None = None,
    ) -> None:
        if delay < 0:
            raise ValueError(f"delay must be >= 0, got {delay}")
        if not env_var:
            raise ValueError("env_var must not be empty")
        self.delay = delay
        self.env_var = env_var
        self.kill_grace = kill_grace
        self._hooks = hooks
        self._base_env = base_env

        self._table: dict[str, RunningProcess] = {}
        self._active: set[RunningProcess] = set()
        self._lock = threading.Lock()
        self._closed = False

    def _build_env(self, file_path: str) -> dict[str, str]:
        env = dict(os.environ if self._base_env is None else self._base_env)
        env[self.env_var] = file_path
        return env

    def supersede_and_start(self, key: str, file_path: str, command: str) -> RunningProcess:
        """Cancel whatever runs under ``key`` and launch ``command`` in its place.

        Raises:
            RuntimeError: If the supervisor has been shut down.
        """
        run = RunningProcess(
            key=key,
            command=command,
            file_path=file_path,
            env=self._build_env(file_path),
            delay=self.delay,
            kill_grace=self.kill_grace,
            on_start=self._on_start,
            on_exit=self._on_exit,
        )
        with self._lock:
            if self._closed:
                raise RuntimeError("ProcessSupervisor is shut down")
            previous = self._table.get(key)
            if previous is not None:
                previous.cancel()
            self._table[key] = run
            self._active.add(run)
            run.start()

        if previous is not None:
            logger.debug("Superseded %r", previous)
            self._emit(HookEvent.PROCESS_SUPERSEDED, key=key, file=previous.file_path)
        return run

    def _on_start(self, run: RunningProcess) -> None:
        self._emit(
            HookEvent.PROCESS_STARTED,
            key=run.key,
            pid=run.pid,
            command=run.command,
            file=run.file_path,
        )

    def _on_exit(self, run: RunningProcess) -> None:
        with self._lock:
            if self._table.get(run.key) is run:
                del self._table[run.key]
            self._active.discard(run)

        if run.error is not None:
            self._emit(HookEvent.ON_ERROR, key=run.key, error=run.error)
        elif run.started.is_set():
            self._emit(
                HookEvent.PROCESS_EXITED,
                key=run.key,
                returncode=run.returncode,
                cancelled=run.cancelled,
            )

    def _emit(self, event: HookEvent, **data: object) -> None:
        if self._hooks is not None:
            self._hooks.emit(event, data)

    def get(self, key: str) -> RunningProcess | None:
        with self._lock:
            return self._table.get(key)

    def is_running(self, key: str) -> bool:
        with self._lock:
            return key in self._table

    def running_keys(self) -> list[str]:
        with self._lock:
            return list(self._table)

    def __len__(self) -> int:
        with self._lock:
            return len(self._table)

    def shutdown(self, timeout: float | None = None) -> None:
        """Cancel every outstanding launch and wait for the tasks to finish.

        Superseded launches that are still stopping are waited for as well.
        """
        with self._lock:
            self._closed = True
            runs = list(self._active)

        for run in runs:
            run.cancel()
        for run in runs:
            if not run.join(timeout):
                logger.warning("Timed out waiting for %r", run)
        if runs:
            logger.info("Stopped %d command(s)", len(runs))

    def __enter__(self) -> ProcessSupervisor:
        return self

    def __exit__(self, *exc: object) -> None:
        self.shutdown()
