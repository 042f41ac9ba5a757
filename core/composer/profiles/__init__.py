"""Profiles: named configuration bundles and the resolution chain."""

from composer.profiles.dictionary import ProfileDictionary
from composer.profiles.profile import (
    ContactCheckConfig,
    ContactCheckProfile,
    Profile,
    ProfileOverride,
)
from composer.profiles.resolver import (
    ProfileRemapping,
    apply_profile_overrides,
    get_profile,
    get_profile_string,
    resolve_profile,
)

__all__ = [
    "Profile",
    "ProfileOverride",
    "ProfileDictionary",
    "ProfileRemapping",
    "ContactCheckConfig",
    "ContactCheckProfile",
    "get_profile_string",
    "get_profile",
    "apply_profile_overrides",
    "resolve_profile",
]
