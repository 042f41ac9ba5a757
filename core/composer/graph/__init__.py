"""Graph structures: the node contract, execution context and reports."""

from composer.graph.context import AbortToken, DataStorage, ExecutionContext, TaskProblem
from composer.graph.info import TaskNodeInfo
from composer.graph.node import TaskNode, TaskNodeProtocol

__all__ = [
    # Context
    "AbortToken",
    "DataStorage",
    "ExecutionContext",
    "TaskProblem",
    # Node
    "TaskNode",
    "TaskNodeProtocol",
    "TaskNodeInfo",
]
