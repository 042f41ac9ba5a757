"""
Contact Types - Value objects exchanged with the contact manager.

These describe WHAT to check (request, manager configuration) and WHAT
was found (contact results). The geometry itself lives behind the
collaborator protocols in ``composer.collision.protocols``.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class ContactTestType(StrEnum):
    """How many contacts the manager should report per sample."""

    FIRST = "first"  # Stop at the first contact found
    CLOSEST = "closest"  # Closest contact per link pair
    ALL = "all"  # Every contact
    LIMITED = "limited"  # Up to ContactRequest.contact_limit


class CheckProgramMode(StrEnum):
    """Which samples of a program are evaluated."""

    ALL = "all"
    ALL_EXCEPT_START = "all_except_start"
    ALL_EXCEPT_END = "all_except_end"
    START_ONLY = "start_only"
    END_ONLY = "end_only"
    INTERMEDIATE_ONLY = "intermediate_only"


class ContactRequest(BaseModel):
    """Parameters passed to a single contact test."""

    type: ContactTestType = ContactTestType.ALL
    calculate_penetration: bool = True
    calculate_distance: bool = False
    contact_limit: int = Field(default=0, ge=0, description="Used when type is 'limited'")

    model_config = {"frozen": True}


class PairMargin(BaseModel):
    """Contact margin override for one link pair."""

    link_a: str
    link_b: str
    margin: float

    model_config = {"frozen": True}


class ContactManagerConfig(BaseModel):
    """Configuration applied to a contact manager before checking."""

    default_margin: float | None = Field(
        default=None, description="Margin applied to every pair without an override"
    )
    pair_margins: tuple[PairMargin, ...] = ()
    enabled_objects: dict[str, bool] = Field(
        default_factory=dict, description="Collision object name -> enabled"
    )

    model_config = {"frozen": True}


class ContactResult(BaseModel):
    """A single contact between two links."""

    link_names: tuple[str, str]
    distance: float = Field(description="Signed distance, negative when penetrating")
    shape_id: tuple[int, int] = (0, 0)
    subshape_id: tuple[int, int] = (0, 0)
    nearest_points: tuple[tuple[float, float, float], tuple[float, float, float]] | None = None
    normal: tuple[float, float, float] | None = None

    model_config = {"extra": "allow", "frozen": True}


# Link pair -> contacts found for that pair, for one sample.
ContactResultMap = dict[tuple[str, str], list[ContactResult]]


@dataclass
class SceneState:
    """Joint values and link poses computed by a state solver."""

    joints: dict[str, float] = field(default_factory=dict)
    link_transforms: dict[str, Any] = field(default_factory=dict)


def count_contacts(contacts: list[ContactResultMap]) -> int:
    """Total number of contact records across every sample."""
    return sum(len(results) for sample in contacts for results in sample.values())


def has_contacts(contacts: list[ContactResultMap]) -> bool:
    """True if any sample reported at least one contact."""
    return any(results for sample in contacts for results in sample.values())
