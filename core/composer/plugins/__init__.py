"""Declarative construction of task nodes."""

from composer.plugins.factory import (
    TaskPluginFactory,
    load_profiles,
    load_yaml_file,
)

__all__ = [
    "TaskPluginFactory",
    "load_profiles",
    "load_yaml_file",
]
