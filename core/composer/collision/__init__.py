"""Collision checking: contact types and the collaborator protocols tasks consume."""

from composer.collision.protocols import (
    DiscreteContactManager,
    Environment,
    JointGroup,
    StateSolver,
)
from composer.collision.types import (
    CheckProgramMode,
    ContactManagerConfig,
    ContactRequest,
    ContactResult,
    ContactResultMap,
    ContactTestType,
    PairMargin,
    SceneState,
    count_contacts,
    has_contacts,
)

__all__ = [
    # Types
    "CheckProgramMode",
    "ContactManagerConfig",
    "ContactRequest",
    "ContactResult",
    "ContactResultMap",
    "ContactTestType",
    "PairMargin",
    "SceneState",
    "count_contacts",
    "has_contacts",
    # Collaborators
    "DiscreteContactManager",
    "Environment",
    "JointGroup",
    "StateSolver",
]
