"""Shared test fixtures for globrun."""

from __future__ import annotations

import os
import time
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path

    from globrun.dispatch.supervisor import ProcessSupervisor


def _wait_until(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.02)
    return predicate()


@pytest.fixture
def wait_until() -> Callable[..., bool]:
    """Poll a predicate until it is true or the timeout elapses."""
    return _wait_until


@pytest.fixture
def base_env() -> dict[str, str]:
    """A minimal inherited environment with a stale FILE value."""
    return {"PATH": os.environ.get("PATH", ""), "FILE": "stale-value"}


@pytest.fixture
def supervisor(base_env: dict[str, str]) -> Iterator[ProcessSupervisor]:
    """A zero-delay supervisor that is shut down after the test."""
    from globrun.dispatch.supervisor import ProcessSupervisor

    sup = ProcessSupervisor(delay=0.0, kill_grace=1.0, base_env=base_env)
    yield sup
    sup.shutdown(timeout=5.0)


@pytest.fixture
def watched_dir(tmp_path: Path) -> Path:
    """A directory to watch, separate from where commands write output."""
    d = tmp_path / "watched"
    d.mkdir()
    return d


@pytest.fixture
def out_dir(tmp_path: Path) -> Path:
    d = tmp_path / "out"
    d.mkdir()
    return d
