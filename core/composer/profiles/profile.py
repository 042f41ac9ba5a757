"""
Profile Schema - Named, immutable configuration bundles.

A profile is looked up by name for each composite instruction a task
processes. Registry entries are frozen so the same instance can be shared
by every node in a graph, including nodes running on other threads.
"""

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, Field

from composer.collision.types import (
    CheckProgramMode,
    ContactManagerConfig,
    ContactRequest,
    ContactTestType,
)


class Profile(BaseModel):
    """Base class for every task profile."""

    model_config = {"frozen": True}


# Receives a private copy of the resolved profile and returns the effective one.
ProfileOverride = Callable[[Any], Any]


class ContactCheckConfig(BaseModel):
    """Parameters for checking a program for contacts at discrete samples."""

    contact_manager_config: ContactManagerConfig = Field(default_factory=ContactManagerConfig)
    contact_request: ContactRequest = Field(
        default_factory=lambda: ContactRequest(type=ContactTestType.ALL)
    )
    longest_valid_segment_length: float = Field(
        default=0.005,
        ge=0.0,
        description="Max joint-space distance between samples, 0 checks waypoints only",
    )
    check_program_mode: CheckProgramMode = CheckProgramMode.ALL

    model_config = {"frozen": True}


class ContactCheckProfile(Profile):
    """Profile consumed by the discrete contact check task."""

    config: ContactCheckConfig = Field(default_factory=ContactCheckConfig)
