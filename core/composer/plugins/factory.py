"""
Task Plugin Factory - Builds task nodes from declarative configuration.

A task definition names the registered task class and its config:

    tasks:
      DiscreteContactCheckTask:
        class: DiscreteContactCheckTaskFactory
        config:
          conditional: true
          inputs: [output_data]

Construction errors (unknown class, missing or extra input keys) raise
TaskConfigurationError. They are graph-build-time errors: nothing in this
module runs while a graph executes.
"""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from composer.errors import TaskConfigurationError
from composer.graph.node import TaskNode
from composer.profiles.dictionary import ProfileDictionary
from composer.profiles.profile import ContactCheckProfile, Profile
from composer.tasks.discrete_contact_check_task import DiscreteContactCheckTask

logger = logging.getLogger(__name__)


def load_yaml_file(path: str | Path) -> Any:
    """Parse a YAML file, reporting problems as configuration errors."""
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            return yaml.safe_load(f)
    except OSError as e:
        raise TaskConfigurationError(f"Cannot read '{path}': {e}") from e
    except yaml.YAMLError as e:
        raise TaskConfigurationError(f"Invalid YAML in '{path}': {e}") from e


def load_profiles(
    data: Mapping[str, Any] | None,
    profile_type: type[Profile] = ContactCheckProfile,
) -> ProfileDictionary:
    """
    Build a profile dictionary from a parsed ``profiles:`` document.

    Args:
        data: {"profiles": {namespace: {profile_name: fields}}}
        profile_type: Profile model for every entry

    Returns:
        Populated ProfileDictionary
    """
    section = (data or {}).get("profiles", {})
    if not isinstance(section, Mapping):
        raise TaskConfigurationError("'profiles' entry must be a mapping")
    try:
        return ProfileDictionary.from_mapping(section, profile_type)
    except (ValueError, TypeError) as e:
        raise TaskConfigurationError(f"Invalid profile definition: {e}") from e


class TaskPluginFactory:
    """
    Registry of task classes addressable from configuration.

    Example:
        factory = TaskPluginFactory()
        task = factory.create_task_node(
            "DiscreteContactCheckTask",
            {"class": "DiscreteContactCheckTaskFactory", "config": {"inputs": ["program"]}},
        )
    """

    def __init__(self):
        self._task_types: dict[str, type[TaskNode]] = {}
        self.register_task("DiscreteContactCheckTaskFactory", DiscreteContactCheckTask)
        self.register_task("DiscreteContactCheckTask", DiscreteContactCheckTask)

    def register_task(self, class_name: str, task_type: type[TaskNode]) -> None:
        """Make ``task_type`` constructible under ``class_name``."""
        if not issubclass(task_type, TaskNode):
            raise TypeError(f"{task_type!r} is not a TaskNode")
        self._task_types[class_name] = task_type

    def has_task(self, class_name: str) -> bool:
        return class_name in self._task_types

    def registered_tasks(self) -> list[str]:
        return sorted(self._task_types)

    def create_task_node(self, name: str, plugin_config: Mapping[str, Any]) -> TaskNode:
        """Construct one task from its definition."""
        if not isinstance(plugin_config, Mapping):
            raise TaskConfigurationError(f"Task '{name}' definition must be a mapping")

        class_name = plugin_config.get("class")
        if not class_name:
            raise TaskConfigurationError(f"Task '{name}' is missing a 'class' entry")

        task_type = self._task_types.get(class_name)
        if task_type is None:
            raise TaskConfigurationError(
                f"Task '{name}' uses unknown class '{class_name}'. "
                f"Registered: {', '.join(self.registered_tasks())}"
            )

        task = task_type.from_config(name, plugin_config.get("config"), self)
        logger.debug(f"Created task '{name}' from '{class_name}'")
        return task

    def create_task_nodes(self, data: Mapping[str, Any] | None) -> dict[str, TaskNode]:
        """Construct every task of a parsed ``tasks:`` document."""
        section = (data or {}).get("tasks")
        if not isinstance(section, Mapping) or not section:
            raise TaskConfigurationError("Configuration has no 'tasks' entry")
        return {
            name: self.create_task_node(name, definition) for name, definition in section.items()
        }
