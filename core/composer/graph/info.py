"""
Task Node Info - The uniform report returned by every task invocation.

Every node type returns the same shape, so the executor can branch on
``return_value``, log ``message`` and aggregate ``elapsed_time`` without
knowing which task produced it. Node types subclass it to attach their own
diagnostic payload.

Lifecycle:
    created at the start of TaskNode.run()
        ↓ mutated by that invocation only
    sealed before it is returned (further assignment raises)
"""

import copy
from dataclasses import FrozenInstanceError, dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from composer.graph.node import TaskNode


@dataclass(eq=False)
class TaskNodeInfo:
    """Outcome of one task invocation."""

    # Identity of the node that produced this report
    name: str = ""
    uuid: str = ""
    input_keys: tuple[str, ...] = ()
    output_keys: tuple[str, ...] = ()
    is_conditional: bool = False

    # Outcome. 0 means failed or undetermined; the meaning of nonzero values
    # is node specific and indexes outbound edges for conditional nodes.
    return_value: int = 0
    message: str = ""
    elapsed_time: float = 0.0  # seconds, this invocation only
    start_time: datetime | None = None
    aborted: bool = False

    # Environment used by the invocation, kept for audit
    environment: Any = None

    _sealed: bool = field(default=False, init=False, repr=False)

    @classmethod
    def from_node(cls, node: "TaskNode") -> "TaskNodeInfo":
        """Create a blank report bound to ``node``'s identity."""
        return cls(
            name=node.name,
            uuid=node.uuid,
            input_keys=node.input_keys,
            output_keys=node.output_keys,
            is_conditional=node.is_conditional,
        )

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, "_sealed", False):
            raise FrozenInstanceError(f"cannot assign to field '{name}' of a sealed report")
        super().__setattr__(name, value)

    def seal(self) -> None:
        """Make the report read-only. Called once the invocation finishes."""
        object.__setattr__(self, "_sealed", True)

    @property
    def sealed(self) -> bool:
        return self._sealed

    @property
    def succeeded(self) -> bool:
        return self.return_value != 0

    def clone(self) -> "TaskNodeInfo":
        """Return an unsealed copy that shares only the environment handle."""
        duplicate = copy.copy(self)
        object.__setattr__(duplicate, "_sealed", False)
        return duplicate

    def _comparable(self) -> tuple:
        return (
            self.name,
            self.uuid,
            self.input_keys,
            self.output_keys,
            self.is_conditional,
            self.return_value,
            self.message,
            self.elapsed_time,
            self.aborted,
        )

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._comparable() == other._comparable()

    def to_dict(self) -> dict[str, Any]:
        """Summary suitable for logs and run records."""
        return {
            "name": self.name,
            "uuid": self.uuid,
            "return_value": self.return_value,
            "message": self.message,
            "elapsed_time": self.elapsed_time,
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "aborted": self.aborted,
        }
