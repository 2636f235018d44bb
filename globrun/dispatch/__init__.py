"""Dispatch module — debounce keys and the process supervisor.

Public API::

    from globrun.dispatch import DebounceKey, parse_debounce_key, derive_key
    from globrun.dispatch import ProcessSupervisor, RunningProcess
"""

from globrun.dispatch.keys import DebounceKey, DebounceKeyError, derive_key, parse_debounce_key
from globrun.dispatch.process import RunningProcess
from globrun.dispatch.supervisor import ProcessSupervisor

__all__ = [
    "DebounceKey",
    "DebounceKeyError",
    "derive_key",
    "parse_debounce_key",
    "RunningProcess",
    "ProcessSupervisor",
]
