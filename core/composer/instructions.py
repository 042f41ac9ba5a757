"""
Instruction Schema - The motion program handed between tasks.

Only the parts of a program the contact check needs are modelled: a
composite instruction names its profile, carries optional per-task profile
overrides and its manipulator, and holds joint waypoints or nested
composites.
"""

from typing import Union

from pydantic import BaseModel, Field, model_validator

from composer.profiles.profile import ProfileOverride


class ManipulatorInfo(BaseModel):
    """Which kinematic group a program moves, and in which frames."""

    manipulator: str = ""
    working_frame: str = ""
    tcp_frame: str = ""

    model_config = {"frozen": True}

    @property
    def empty(self) -> bool:
        return not (self.manipulator or self.working_frame or self.tcp_frame)

    def get_combined(self, other: "ManipulatorInfo") -> "ManipulatorInfo":
        """Fill fields left empty on this instance from ``other``."""
        return ManipulatorInfo(
            manipulator=self.manipulator or other.manipulator,
            working_frame=self.working_frame or other.working_frame,
            tcp_frame=self.tcp_frame or other.tcp_frame,
        )


class StateWaypoint(BaseModel):
    """A joint-space waypoint."""

    joint_names: list[str]
    position: list[float]

    @model_validator(mode="after")
    def _check_sizes(self) -> "StateWaypoint":
        if len(self.joint_names) != len(self.position):
            raise ValueError(
                f"joint_names ({len(self.joint_names)}) and position "
                f"({len(self.position)}) must have the same length"
            )
        return self


class CompositeInstruction(BaseModel):
    """An ordered program of waypoints and nested composites."""

    description: str = ""
    profile: str = ""
    profile_overrides: dict[str, ProfileOverride] = Field(
        default_factory=dict,
        description="Task name -> override applied after the profile is resolved",
        exclude=True,
    )
    manipulator_info: ManipulatorInfo = Field(default_factory=ManipulatorInfo)
    instructions: list[Union[StateWaypoint, "CompositeInstruction"]] = Field(default_factory=list)

    def flatten(self) -> list[StateWaypoint]:
        """Return every waypoint in program order, descending into composites."""
        waypoints: list[StateWaypoint] = []
        for instruction in self.instructions:
            if isinstance(instruction, CompositeInstruction):
                waypoints.extend(instruction.flatten())
            else:
                waypoints.append(instruction)
        return waypoints


CompositeInstruction.model_rebuild()
