"""
Task Node - The contract every node of a task graph implements.

The executor only ever holds a TaskNodeProtocol: it calls ``run`` once per
graph execution and compares node definitions structurally when diffing or
deduplicating graphs. Concrete tasks subclass TaskNode and implement
``_run_impl``; the base class scopes the log context to the invocation and
seals the returned report.

Declarative construction:
    Tasks built from configuration go through ``from_config``. The base
    step below reads the fields every task shares:

        conditional: true
        inputs: [input_program]   # or a single string
        outputs: [output_program]
"""

import logging
import uuid
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from composer.errors import TaskConfigurationError
from composer.graph.context import ExecutionContext
from composer.graph.info import TaskNodeInfo
from composer.observability import reset_trace_context, set_trace_context

if TYPE_CHECKING:
    from composer.plugins.factory import TaskPluginFactory

logger = logging.getLogger(__name__)


@runtime_checkable
class TaskNodeProtocol(Protocol):
    """What the executor needs from a node."""

    @property
    def name(self) -> str: ...

    @property
    def is_conditional(self) -> bool: ...

    def run(self, context: ExecutionContext) -> TaskNodeInfo: ...


def _parse_keys(config: Mapping[str, Any], entry: str, task_name: str) -> tuple[str, ...]:
    value = config.get(entry)
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, Sequence) and all(isinstance(k, str) for k in value):
        return tuple(value)
    raise TaskConfigurationError(
        f"{task_name}, config '{entry}' entry must be a string or a list of strings"
    )


class TaskNode:
    """
    Base class for task graph nodes.

    Equality is structural: same concrete type, name, conditional flag and
    keys. The per-instance uuid, injected collaborators and anything a node
    produced at run time never take part.
    """

    def __init__(
        self,
        name: str,
        is_conditional: bool = False,
        input_keys: Sequence[str] = (),
        output_keys: Sequence[str] = (),
    ):
        self._name = name
        self._is_conditional = bool(is_conditional)
        self._input_keys = tuple(input_keys)
        self._output_keys = tuple(output_keys)
        self._uuid = uuid.uuid4().hex

    @classmethod
    def parse_config(
        cls,
        name: str,
        config: Mapping[str, Any] | None,
        default_conditional: bool = False,
    ) -> dict[str, Any]:
        """
        Read the fields shared by every task from a declarative config.

        Returns:
            Keyword arguments for ``TaskNode.__init__``
        """
        config = config or {}
        if not isinstance(config, Mapping):
            raise TaskConfigurationError(f"{name}, config must be a mapping")

        conditional = config.get("conditional", default_conditional)
        if not isinstance(conditional, bool):
            raise TaskConfigurationError(f"{name}, config 'conditional' entry must be a boolean")

        return {
            "name": name,
            "is_conditional": conditional,
            "input_keys": _parse_keys(config, "inputs", name),
            "output_keys": _parse_keys(config, "outputs", name),
        }

    @classmethod
    def from_config(
        cls,
        name: str,
        config: Mapping[str, Any] | None,
        plugin_factory: "TaskPluginFactory | None" = None,
    ) -> "TaskNode":
        return cls(**cls.parse_config(name, config))

    @property
    def name(self) -> str:
        return self._name

    @property
    def uuid(self) -> str:
        return self._uuid

    @property
    def is_conditional(self) -> bool:
        return self._is_conditional

    @property
    def input_keys(self) -> tuple[str, ...]:
        return self._input_keys

    @property
    def output_keys(self) -> tuple[str, ...]:
        return self._output_keys

    def run(self, context: ExecutionContext) -> TaskNodeInfo:
        """
        Execute the node once and return its sealed report.

        Failures the node can describe are reported through the returned
        info; they are never raised.
        """
        token = set_trace_context(node_name=self._name, node_uuid=self._uuid)
        start_time = datetime.now(UTC)
        try:
            info = self._run_impl(context)
        finally:
            reset_trace_context(token)

        info.start_time = start_time
        info.seal()
        return info

    def _run_impl(self, context: ExecutionContext) -> TaskNodeInfo:
        raise NotImplementedError(f"{type(self).__name__} must implement _run_impl")

    def _definition(self) -> tuple:
        return (self._name, self._is_conditional, self._input_keys, self._output_keys)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TaskNode):
            return NotImplemented
        return type(self) is type(other) and self._definition() == other._definition()

    def __hash__(self) -> int:
        return hash((type(self), self._definition()))

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self._name!r}, "
            f"is_conditional={self._is_conditional}, input_keys={list(self._input_keys)})"
        )
