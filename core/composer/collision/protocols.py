"""
Collaborator Protocols - What a task needs from the environment.

The scene model, the kinematic state solver and the geometric contact
manager are supplied by the host application. Tasks only depend on these
narrow, read-only views.
"""

from collections.abc import Sequence
from typing import Any, Protocol

from composer.collision.types import (
    ContactManagerConfig,
    ContactRequest,
    ContactResultMap,
    SceneState,
)


class JointGroup(Protocol):
    """Kinematic group of a manipulator."""

    def get_joint_names(self) -> list[str]: ...

    def get_active_link_names(self) -> list[str]: ...


class StateSolver(Protocol):
    """Computes link poses for a set of joint values."""

    def get_state(
        self, joint_names: Sequence[str], joint_values: Sequence[float]
    ) -> SceneState: ...


class DiscreteContactManager(Protocol):
    """Checks a single static scene configuration for contacts."""

    def set_active_collision_objects(self, names: Sequence[str]) -> None: ...

    def apply_contact_manager_config(self, config: ContactManagerConfig) -> None: ...

    def set_collision_objects_transform(self, transforms: dict[str, Any]) -> None: ...

    def contact_test(self, request: ContactRequest) -> ContactResultMap: ...


class Environment(Protocol):
    """Scene environment shared by every node of a graph.

    ``get_state_solver`` and ``get_discrete_contact_manager`` must hand out
    independent instances so nodes running on different threads never share
    mutable checker state.
    """

    def get_joint_group(self, group_name: str) -> JointGroup: ...

    def get_state_solver(self) -> StateSolver: ...

    def get_discrete_contact_manager(self) -> DiscreteContactManager: ...
