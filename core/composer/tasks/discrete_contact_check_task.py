"""
Discrete Contact Check Task - Verifies a program is contact free.

Reads one composite instruction from data storage, resolves its contact
check profile and checks the program at discrete samples. The report's
return value is 1 when the program is clear and 0 otherwise, so a
conditional graph can branch on it.

Example config:
    DiscreteContactCheckTask:
      class: DiscreteContactCheckTaskFactory
      config:
        conditional: true
        inputs: [output_data]
"""

import logging
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from composer.collision.types import ContactResultMap, count_contacts, has_contacts
from composer.collision.validator import ContactValidator, DiscreteProgramValidator
from composer.config import get_default_profile_name
from composer.errors import TaskConfigurationError
from composer.graph.context import ExecutionContext
from composer.graph.info import TaskNodeInfo
from composer.graph.node import TaskNode
from composer.instructions import CompositeInstruction
from composer.profiles.profile import ContactCheckProfile
from composer.profiles.resolver import resolve_profile

if TYPE_CHECKING:
    from composer.plugins.factory import TaskPluginFactory

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class DiscreteContactCheckTaskInfo(TaskNodeInfo):
    """Report of a discrete contact check.

    ``contact_results[i]`` holds the contacts found at sample ``i``; it is
    empty when the program is clear or the check never ran. Sealing turns
    the payload into read-only tuples and mapping proxies.
    """

    contact_results: Sequence[ContactResultMap] = field(default_factory=list)

    def seal(self) -> None:
        frozen = tuple(
            MappingProxyType({pair: tuple(results) for pair, results in sample.items()})
            for sample in self.contact_results
        )
        object.__setattr__(self, "contact_results", frozen)
        super().seal()

    def clone(self) -> "DiscreteContactCheckTaskInfo":
        duplicate = super().clone()
        duplicate.contact_results = [
            {pair: list(results) for pair, results in sample.items()}
            for sample in self.contact_results
        ]
        return duplicate

    def to_dict(self) -> dict[str, Any]:
        summary = super().to_dict()
        summary["contact_count"] = count_contacts(self.contact_results)
        return summary


class DiscreteContactCheckTask(TaskNode):
    """Checks the program bound to its single input key for contacts."""

    DEFAULT_NAME = "DiscreteContactCheckTask"

    def __init__(
        self,
        name: str = DEFAULT_NAME,
        input_key: str | None = None,
        is_conditional: bool = True,
        validator: ContactValidator | None = None,
        output_keys: Sequence[str] = (),
        default_profile: str | None = None,
    ):
        super().__init__(
            name=name,
            is_conditional=is_conditional,
            input_keys=(input_key,) if input_key is not None else (),
            output_keys=output_keys,
        )
        self._validator = validator or DiscreteProgramValidator()
        # Resolved once, at construction
        self._default_profile = default_profile or get_default_profile_name()

    @classmethod
    def from_config(
        cls,
        name: str,
        config: Mapping[str, Any] | None,
        plugin_factory: "TaskPluginFactory | None" = None,
        validator: ContactValidator | None = None,
    ) -> "DiscreteContactCheckTask":
        """Build the task from a declarative config (see module docstring)."""
        fields = cls.parse_config(name, config, default_conditional=True)
        input_keys = fields["input_keys"]

        if not input_keys:
            raise TaskConfigurationError(f"{cls.__name__}, config missing 'inputs' entry")
        if len(input_keys) > 1:
            raise TaskConfigurationError(
                f"{cls.__name__}, config 'inputs' entry currently only supports one input key"
            )

        return cls(
            name=name,
            input_key=input_keys[0],
            is_conditional=fields["is_conditional"],
            validator=validator,
            output_keys=fields["output_keys"],
        )

    @property
    def validator(self) -> ContactValidator:
        return self._validator

    @property
    def default_profile(self) -> str:
        return self._default_profile

    def _run_impl(self, context: ExecutionContext) -> DiscreteContactCheckTaskInfo:
        info = DiscreteContactCheckTaskInfo.from_node(self)
        info.return_value = 0
        info.environment = context.problem.environment

        if context.is_aborted():
            info.message = "Aborted"
            info.aborted = True
            return info

        started = time.perf_counter()

        # --------------------
        # Check that inputs are valid
        # --------------------
        program = context.data_storage.get_data(self.input_keys[0]) if self.input_keys else None
        if type(program) is not CompositeInstruction:
            info.message = f"Input seed to {type(self).__name__} must be a composite instruction"
            info.elapsed_time = time.perf_counter() - started
            logger.error(info.message)
            return info

        problem = context.problem
        profile = resolve_profile(
            self.name,
            program.profile,
            problem.composite_profile_remapping,
            context.profiles,
            program.profile_overrides,
            ContactCheckProfile,
            self._default_profile,
        )

        manip_info = program.manipulator_info.get_combined(problem.manip_info)
        env = problem.environment
        joint_group = env.get_joint_group(manip_info.manipulator)
        state_solver = env.get_state_solver()
        manager = env.get_discrete_contact_manager()

        manager.set_active_collision_objects(joint_group.get_active_link_names())
        manager.apply_contact_manager_config(profile.config.contact_manager_config)

        contacts = self._validator.check_program(manager, state_solver, program, profile.config)

        if has_contacts(contacts):
            info.message = f"Results are not contact free for process input: {program.description}"
            logger.info(info.message)
            for index, sample in enumerate(contacts):
                for results in sample.values():
                    for contact in results:
                        logger.debug(
                            f"timestep: {index} Links: {contact.link_names[0]}, "
                            f"{contact.link_names[1]} Dist: {contact.distance}",
                            extra={"sample_index": index},
                        )
            info.contact_results = contacts
            info.elapsed_time = time.perf_counter() - started
            return info

        info.message = "Discrete contact check succeeded"
        info.return_value = 1
        info.elapsed_time = time.perf_counter() - started
        logger.debug(info.message, extra={"elapsed_time": info.elapsed_time})
        return info
