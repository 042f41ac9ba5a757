"""
Command-line interface for the task composer.

Usage:
    composer validate tasks.yaml
    composer profiles profiles.yaml --task DiscreteContactCheckTask --profile FREESPACE
    composer profiles profiles.yaml --task DiscreteContactCheckTask --remap FREESPACE=SLOW
"""

import argparse
import sys

from composer.config import ComposerConfig
from composer.errors import TaskConfigurationError
from composer.observability import configure_logging
from composer.plugins.factory import TaskPluginFactory, load_profiles, load_yaml_file
from composer.profiles.profile import ContactCheckProfile
from composer.profiles.resolver import get_profile, get_profile_string


def _parse_remap(entries: list[str]) -> dict[str, str]:
    remap = {}
    for entry in entries:
        source, sep, target = entry.partition("=")
        if not sep or not source or not target:
            raise argparse.ArgumentTypeError(f"Invalid remap '{entry}', expected FROM=TO")
        remap[source] = target
    return remap


def cmd_validate(args: argparse.Namespace) -> int:
    """Build every task in a YAML file and report configuration errors."""
    factory = TaskPluginFactory()
    try:
        tasks = factory.create_task_nodes(load_yaml_file(args.tasks_file))
    except TaskConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for name, task in tasks.items():
        conditional = "conditional" if task.is_conditional else "unconditional"
        print(f"{name}: {type(task).__name__} ({conditional}) inputs={list(task.input_keys)}")
    print(f"{len(tasks)} task(s) valid")
    return 0


def cmd_profiles(args: argparse.Namespace) -> int:
    """Show the profile a task would resolve for a declared profile name."""
    try:
        profiles = load_profiles(load_yaml_file(args.profiles_file))
        remapping = {args.task: _parse_remap(args.remap)} if args.remap else {}
    except (TaskConfigurationError, argparse.ArgumentTypeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    name = get_profile_string(args.task, args.profile, remapping)
    found = profiles.has_profile(args.task, name)
    profile = get_profile(args.task, name, profiles, ContactCheckProfile())

    source = "registry" if found else "default"
    print(f"# {args.task}: '{args.profile or '<empty>'}' -> '{name}' ({source})")
    print(profile.model_dump_json(indent=2))
    return 0


def main():
    config = ComposerConfig()

    parser = argparse.ArgumentParser(
        prog="composer",
        description="Task composer - validate motion program task graphs",
    )
    parser.add_argument("--log-level", default=config.log_level, help="Logging level")
    parser.add_argument(
        "--log-format",
        default=config.log_format,
        choices=["json", "human", "auto"],
        help="Logging output format",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    validate_parser = subparsers.add_parser(
        "validate", help="Build the tasks declared in a YAML file"
    )
    validate_parser.add_argument("tasks_file", help="YAML file with a 'tasks' mapping")
    validate_parser.set_defaults(func=cmd_validate)

    profiles_parser = subparsers.add_parser(
        "profiles", help="Resolve a contact check profile offline"
    )
    profiles_parser.add_argument("profiles_file", help="YAML file with a 'profiles' mapping")
    profiles_parser.add_argument("--task", required=True, help="Task name (profile namespace)")
    profiles_parser.add_argument("--profile", default="", help="Declared profile name")
    profiles_parser.add_argument(
        "--remap", action="append", default=[], help="Remap FROM=TO for this task"
    )
    profiles_parser.set_defaults(func=cmd_profiles)

    args = parser.parse_args()
    configure_logging(level=args.log_level, format=args.log_format)

    if hasattr(args, "func"):
        sys.exit(args.func(args))


if __name__ == "__main__":
    main()
