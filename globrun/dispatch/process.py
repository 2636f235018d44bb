"""RunningProcess — one cancellable launch of a shell command."""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import threading
import time
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

_POSIX = os.name == "posix"
_GROUP_POLL_INTERVAL = 0.05
_REAP_TIMEOUT = 1.0


class RunningProcess:
    """A launch task: optional delay, then a shell process until exit or cancel.

    The task runs on its own thread. ``cancel()`` never blocks on the OS
    process; it sets the cancellation signal and requests termination of
    the command's process group. The task thread itself waits for the whole
    group to stop, escalating to a kill after ``kill_grace`` seconds.

    Args:
        key: Debounce key this launch is recorded under.
        command: Shell command line.
        file_path: Path of the file that triggered the launch.
        env: Full environment for the child process.
        delay: Seconds to wait before launching; a cancel during the delay
            means the process is never created.
        kill_grace: Seconds between the termination request and a kill.
        on_start: Called with this task once the OS process exists.
        on_exit: Called with this task when it is finished, whatever the outcome.
    """

    def __init__(
        self,
        key: str,
        command: str,
        file_path: str,
        env: dict[str, str],
        delay: float = 0.0,
        kill_grace: float = 5.0,
        on_start: Callable[[RunningProcess], Any] | None = None,
        on_exit: Callable[[RunningProcess], Any] | None = None,
    ):
        self.key = key
        self.command = command
        self.file_path = file_path
        self.env = env
        self.delay = delay
        self.kill_grace = kill_grace
        self._on_start = on_start
        self._on_exit = on_exit

        self.returncode: int | None = None
        self.error: OSError | None = None
        self.started = threading.Event()
        self.finished = threading.Event()

        self._cancelled = threading.Event()
        self._lock = threading.Lock()  # serialises launch against cancel
        self._process: subprocess.Popen[bytes] | None = None
        self._kill_timer: threading.Timer | None = None
        self._escalated = threading.Event()
        self._thread = threading.Thread(
            target=self._run, name=f"globrun-run[{key}]", daemon=True
        )

    def __repr__(self) -> str:
        return f"RunningProcess(key={self.key!r}, command={self.command!r}, pid={self.pid})"

    @property
    def pid(self) -> int | None:
        return self._process.pid if self._process is not None else None

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def start(self) -> None:
        self._thread.start()

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the task to finish. Returns True if it did."""
        return self.finished.wait(timeout)

    def cancel(self) -> None:
        """Request cancellation without waiting for the process to stop."""
        with self._lock:
            if self._cancelled.is_set():
                return
            self._cancelled.set()
            process = self._process
            if process is None or self.finished.is_set():
                return
            logger.debug("Terminating pid %s (key %r)", process.pid, self.key)
            self._send(process, signal.SIGTERM)
            # runs for the full grace period even if the shell exits first
            self._kill_timer = threading.Timer(self.kill_grace, self._escalate)
            self._kill_timer.daemon = True
            self._kill_timer.start()

    def _escalate(self) -> None:
        with self._lock:
            process = self._process
            if process is not None and self._group_alive(process):
                logger.warning(
                    "pid %s (key %r) still running %.1fs after termination, killing",
                    process.pid,
                    self.key,
                    self.kill_grace,
                )
                self._send(process, signal.SIGKILL if _POSIX else None)
        self._escalated.set()

    @staticmethod
    def _send(process: subprocess.Popen[bytes], sig: int | None) -> None:
        """Signal the whole process group so shell children go too.

        The group id is the shell's pid, which stays valid after the shell
        itself has exited.
        """
        try:
            if _POSIX:
                os.killpg(process.pid, sig)
            elif sig == signal.SIGTERM:
                process.terminate()
            else:
                process.kill()
        except ProcessLookupError:
            pass

    @staticmethod
    def _group_alive(process: subprocess.Popen[bytes]) -> bool:
        """True while any member of the command's process group exists."""
        if not _POSIX:
            return process.poll() is None
        try:
            os.killpg(process.pid, 0)
        except ProcessLookupError:
            return False
        except PermissionError:
            pass
        return True

    def _await_group(self, process: subprocess.Popen[bytes]) -> None:
        """After a cancel, wait until the process group is gone.

        Descendants that ignore the termination request outlive the shell;
        they are killed when the grace period runs out.
        """
        killed_at: float | None = None
        while self._group_alive(process):
            if self._escalated.is_set():
                if killed_at is None:
                    killed_at = time.monotonic()
                elif time.monotonic() - killed_at > _REAP_TIMEOUT:
                    # killed members linger as zombies when nobody reaps orphans
                    logger.debug("Process group %s not reaped after kill", process.pid)
                    return
            time.sleep(_GROUP_POLL_INTERVAL)

    def _launch(self) -> subprocess.Popen[bytes] | None:
        with self._lock:
            if self._cancelled.is_set():
                return None
            try:
                self._process = subprocess.Popen(
                    self.command,
                    shell=True,
                    env=self.env,
                    start_new_session=_POSIX,
                )
            except OSError as e:
                logger.error("Failed to start %r for %s: %s", self.command, self.file_path, e)
                self.error = e
                return None
            return self._process

    def _run(self) -> None:
        try:
            if self.delay > 0 and self._cancelled.wait(self.delay):
                logger.debug("Launch for key %r cancelled before start", self.key)
                return
            process = self._launch()
            if process is None:
                return

            logger.debug("Started pid %s: %s", process.pid, self.command)
            self.started.set()
            if self._on_start is not None:
                self._on_start(self)

            self.returncode = process.wait()
            if self.returncode == 0 or self.cancelled:
                logger.debug("pid %s exited with %s", process.pid, self.returncode)
            else:
                logger.info(
                    "Command %r exited with status %s", self.command, self.returncode
                )
            if self.cancelled:
                self._await_group(process)
        finally:
            with self._lock:
                timer = self._kill_timer
            if timer is not None:
                timer.cancel()
            try:
                if self._on_exit is not None:
                    self._on_exit(self)
            finally:
                self.finished.set()
