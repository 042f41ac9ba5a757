"""
Profile Resolver - Turns a declared profile name into the effective profile.

Resolution chain, per instruction:
1. Empty declared name -> library-wide default name
2. One level of remapping: remapping[task_name][name] replaces the name
3. Registry lookup; an unknown name yields the task's default profile
4. Instruction override for this task, applied to a private copy

No step raises. A graph built with a typo in a profile name still runs,
with the default profile, and says so in the debug log.
"""

import logging
from collections.abc import Callable, Mapping
from typing import TypeVar

from composer.config import get_default_profile_name
from composer.profiles.dictionary import ProfileDictionary
from composer.profiles.profile import Profile, ProfileOverride

logger = logging.getLogger(__name__)

P = TypeVar("P", bound=Profile)

ProfileRemapping = Mapping[str, Mapping[str, str]]


def get_profile_string(
    ns: str,
    profile: str,
    profile_remapping: ProfileRemapping | None,
    default_profile: str | None = None,
) -> str:
    """
    Return the profile name to look up for a task.

    Args:
        ns: Namespace, normally the task name
        profile: Profile name declared on the instruction (may be empty)
        profile_remapping: {ns: {declared_name: replacement_name}}
        default_profile: Name used when ``profile`` is empty; the configured
            library default when omitted

    Returns:
        The remapped name, the declared name, or the default name
    """
    results = profile or default_profile or get_default_profile_name()

    if not profile_remapping:
        return results

    remap = profile_remapping.get(ns)
    if remap is None:
        logger.debug(f"No profile remapping found for '{ns}'")
        return results

    # Remapping is a single hop; the replacement is never remapped again.
    replacement = remap.get(results)
    if replacement:
        logger.debug(f"Profile '{results}' remapped to '{replacement}' for '{ns}'")
        return replacement

    logger.debug(f"No profile remapping for '{results}' in '{ns}'")
    return results


def get_profile(
    ns: str,
    profile: str,
    profile_dictionary: ProfileDictionary | None,
    default_profile: P,
) -> P:
    """
    Look a profile up in the registry, falling back to ``default_profile``.

    Entries of the wrong profile type are treated as missing.
    """
    if profile_dictionary is None or not profile_dictionary.has_profile(ns, profile):
        logger.debug(f"Profile '{profile}' was not found in '{ns}', using default")
        return default_profile

    found = profile_dictionary.get_profile(ns, profile)
    if not isinstance(found, type(default_profile)):
        logger.warning(
            f"Profile '{profile}' in '{ns}' is a {type(found).__name__}, "
            f"expected {type(default_profile).__name__}; using default"
        )
        return default_profile
    return found


def apply_profile_overrides(
    ns: str,
    profile_name: str,
    profile: P,
    overrides: Mapping[str, ProfileOverride] | None,
) -> P:
    """
    Apply the instruction's override for ``ns`` to a copy of ``profile``.

    The override receives a deep copy and returns the effective profile,
    typically ``copy.model_copy(update={...})``. Returning ``None`` keeps the
    copy as-is. An override that raises or returns the wrong type is ignored.
    ``profile`` itself is never modified.
    """
    if not overrides:
        return profile

    override = overrides.get(ns)
    if override is None:
        return profile

    working = profile.model_copy(deep=True)
    try:
        result = override(working)
    except Exception:
        logger.warning(
            f"Override for profile '{profile_name}' in '{ns}' raised; ignoring it",
            exc_info=True,
        )
        return profile
    if result is None:
        return working

    if not isinstance(result, type(profile)):
        logger.warning(
            f"Override for profile '{profile_name}' in '{ns}' returned "
            f"{type(result).__name__}, expected {type(profile).__name__}; ignoring it"
        )
        return profile

    logger.debug(f"Applied override to profile '{profile_name}' for '{ns}'")
    return result


def resolve_profile(
    ns: str,
    declared_profile: str,
    profile_remapping: ProfileRemapping | None,
    profile_dictionary: ProfileDictionary | None,
    overrides: Mapping[str, ProfileOverride] | None,
    default_factory: Callable[[], P],
    default_profile: str | None = None,
) -> P:
    """Run the full resolution chain and return the effective profile."""
    name = get_profile_string(ns, declared_profile, profile_remapping, default_profile)
    base = get_profile(ns, name, profile_dictionary, default_factory())
    return apply_profile_overrides(ns, name, base, overrides)
