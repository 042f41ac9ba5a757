"""Concrete task nodes."""

from composer.tasks.discrete_contact_check_task import (
    DiscreteContactCheckTask,
    DiscreteContactCheckTaskInfo,
)

__all__ = [
    "DiscreteContactCheckTask",
    "DiscreteContactCheckTaskInfo",
]
