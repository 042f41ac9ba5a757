"""
Discrete Program Validator - Checks a motion program at discrete samples.

The program is reduced to a sequence of joint states: every waypoint, plus
linearly interpolated states so that no two consecutive samples are further
apart (in joint space) than the profile's longest valid segment length.
Each selected sample is posed through the state solver and handed to the
contact manager.

The result is sample-index-major: ``contacts[i]`` holds the contacts found
at sample ``i``, keyed by link pair. Samples skipped by the check mode keep
their slot with an empty map so indices always refer to the same sample.
"""

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

import numpy as np

from composer.collision.protocols import DiscreteContactManager, StateSolver
from composer.collision.types import CheckProgramMode, ContactResultMap, ContactTestType
from composer.instructions import CompositeInstruction, StateWaypoint
from composer.profiles.profile import ContactCheckConfig

logger = logging.getLogger(__name__)


class ContactValidator(Protocol):
    """Evaluates a whole program for contacts."""

    def check_program(
        self,
        manager: DiscreteContactManager,
        state_solver: StateSolver,
        program: CompositeInstruction,
        config: ContactCheckConfig,
    ) -> list[ContactResultMap]: ...


@dataclass
class Sample:
    """One joint state to be checked."""

    joint_names: list[str]
    positions: np.ndarray
    waypoint_index: int  # Index of the waypoint this sample moves towards


def interpolate_segment(start: np.ndarray, end: np.ndarray, max_step: float) -> list[np.ndarray]:
    """
    States strictly after ``start`` up to and including ``end``.

    With ``max_step <= 0`` only ``end`` is returned.
    """
    if max_step <= 0:
        return [end]

    distance = float(np.linalg.norm(end - start))
    steps = max(1, math.ceil(distance / max_step))
    alphas = np.linspace(0.0, 1.0, steps + 1, endpoint=True)[1:]
    return [start + alpha * (end - start) for alpha in alphas]


def sample_waypoints(waypoints: Sequence[StateWaypoint], max_step: float) -> list[Sample]:
    """Expand waypoints into the ordered list of states to check."""
    samples: list[Sample] = []
    previous: StateWaypoint | None = None

    for index, waypoint in enumerate(waypoints):
        end = np.asarray(waypoint.position, dtype=np.float64)
        if previous is None or previous.joint_names != waypoint.joint_names:
            # Different joint sets cannot be interpolated, check the waypoint alone
            samples.append(Sample(list(waypoint.joint_names), end, index))
        else:
            start = np.asarray(previous.position, dtype=np.float64)
            for state in interpolate_segment(start, end, max_step):
                samples.append(Sample(list(waypoint.joint_names), state, index))
        previous = waypoint

    return samples


def select_samples(count: int, mode: CheckProgramMode) -> list[bool]:
    """Which sample indices the check mode evaluates."""
    if count == 0:
        return []

    last = count - 1
    if mode == CheckProgramMode.ALL:
        return [True] * count
    if mode == CheckProgramMode.ALL_EXCEPT_START:
        return [i != 0 for i in range(count)]
    if mode == CheckProgramMode.ALL_EXCEPT_END:
        return [i != last for i in range(count)]
    if mode == CheckProgramMode.START_ONLY:
        return [i == 0 for i in range(count)]
    if mode == CheckProgramMode.END_ONLY:
        return [i == last for i in range(count)]
    if mode == CheckProgramMode.INTERMEDIATE_ONLY:
        return [0 < i < last for i in range(count)]
    raise ValueError(f"Unknown check program mode: {mode}")


class DiscreteProgramValidator:
    """Default ContactValidator used by the discrete contact check task."""

    def check_program(
        self,
        manager: DiscreteContactManager,
        state_solver: StateSolver,
        program: CompositeInstruction,
        config: ContactCheckConfig,
    ) -> list[ContactResultMap]:
        waypoints = program.flatten()
        samples = sample_waypoints(waypoints, config.longest_valid_segment_length)
        selected = select_samples(len(samples), config.check_program_mode)
        stop_at_first = config.contact_request.type == ContactTestType.FIRST

        logger.debug(
            f"Checking {sum(selected)} of {len(samples)} samples "
            f"from {len(waypoints)} waypoints ({config.check_program_mode})"
        )

        contacts: list[ContactResultMap] = []
        for index, sample in enumerate(samples):
            if not selected[index]:
                contacts.append({})
                continue

            state = state_solver.get_state(sample.joint_names, sample.positions.tolist())
            manager.set_collision_objects_transform(state.link_transforms)
            found = manager.contact_test(config.contact_request)

            sample_contacts = {pair: results for pair, results in found.items() if results}
            contacts.append(sample_contacts)

            if sample_contacts:
                logger.debug(
                    f"Contact at sample {index} (waypoint {sample.waypoint_index})",
                    extra={"sample_index": index},
                )
                if stop_at_first:
                    break

        return contacts
