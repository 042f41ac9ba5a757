"""
Execution Context - Everything a task receives for one graph execution.

The context is owned by the executor. Tasks read from it; they never write
to the environment or the profile dictionary, and only touch the data
storage keys they declared.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any

from composer.instructions import ManipulatorInfo
from composer.profiles.dictionary import ProfileDictionary

logger = logging.getLogger(__name__)


class AbortToken:
    """Cooperative cancellation flag shared by every node of an execution."""

    def __init__(self):
        self._event = threading.Event()
        self._reason = ""

    def abort(self, reason: str = "") -> None:
        self._reason = reason
        self._event.set()

    @property
    def is_aborted(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str:
        return self._reason


class DataStorage:
    """
    Keyed data shared between the tasks of a graph.

    Example:
        storage = DataStorage()
        storage.set_data("input_program", program)
        program = storage.get_data("input_program")
    """

    def __init__(self, data: dict[str, Any] | None = None):
        self._data: dict[str, Any] = dict(data or {})
        self._lock = threading.Lock()

    def has_key(self, key: str) -> bool:
        with self._lock:
            return key in self._data

    def get_data(self, key: str) -> Any | None:
        """Return the value bound to ``key``, or None when unbound."""
        with self._lock:
            return self._data.get(key)

    def set_data(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = value

    def remove_data(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._data)


@dataclass
class TaskProblem:
    """The planning problem a graph execution works on."""

    environment: Any = None
    manip_info: ManipulatorInfo = field(default_factory=ManipulatorInfo)
    # Task name -> declared profile name -> replacement profile name
    composite_profile_remapping: dict[str, dict[str, str]] = field(default_factory=dict)
    name: str = "unset"


@dataclass
class ExecutionContext:
    """Per-execution inputs handed to every task by the executor."""

    problem: TaskProblem = field(default_factory=TaskProblem)
    data_storage: DataStorage = field(default_factory=DataStorage)
    profiles: ProfileDictionary = field(default_factory=ProfileDictionary)
    abort_token: AbortToken = field(default_factory=AbortToken)

    def is_aborted(self) -> bool:
        return self.abort_token.is_aborted

    def abort(self, reason: str = "") -> None:
        """Request that nodes not yet started skip their work."""
        logger.info(f"Abort requested for '{self.problem.name}': {reason or 'no reason given'}")
        self.abort_token.abort(reason)
