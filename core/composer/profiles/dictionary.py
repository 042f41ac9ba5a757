"""
Profile Dictionary - The registry of named profiles shared by a graph.

Profiles are grouped by namespace (normally the task name) and then by
profile name. The dictionary is filled at graph-build time and only read
while the graph executes.

Example:
    profiles = ProfileDictionary()
    profiles.add_profile(
        "DiscreteContactCheckTask",
        "FREESPACE",
        ContactCheckProfile(),
    )
"""

import logging
import threading
from collections.abc import Mapping
from typing import Any

from composer.profiles.profile import Profile

logger = logging.getLogger(__name__)


class ProfileDictionary:
    """
    Namespace -> profile name -> profile.

    Writers replace the inner mapping wholesale under a lock, so readers
    never need one and always see a consistent snapshot.
    """

    def __init__(self):
        self._profiles: dict[str, dict[str, Profile]] = {}
        self._write_lock = threading.Lock()

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Mapping[str, Any]],
        profile_type: type[Profile],
    ) -> "ProfileDictionary":
        """
        Build a dictionary from plain data, e.g. a parsed YAML document.

        Args:
            data: {namespace: {profile_name: profile_fields}}
            profile_type: Profile model used to validate every entry

        Returns:
            Populated ProfileDictionary
        """
        profiles = cls()
        for ns, entries in data.items():
            for name, fields in (entries or {}).items():
                profiles.add_profile(ns, name, profile_type.model_validate(fields or {}))
        return profiles

    def add_profile(self, ns: str, profile_name: str, profile: Profile) -> None:
        """Register (or replace) a profile."""
        if not ns:
            raise ValueError("Profile namespace must not be empty")
        if not profile_name:
            raise ValueError("Profile name must not be empty")
        if not isinstance(profile, Profile):
            raise TypeError(f"Expected a Profile, got {type(profile).__name__}")

        with self._write_lock:
            updated = dict(self._profiles.get(ns, {}))
            updated[profile_name] = profile
            self._profiles = {**self._profiles, ns: updated}
        logger.debug(f"Registered profile '{profile_name}' in namespace '{ns}'")

    def remove_profile(self, ns: str, profile_name: str) -> None:
        """Remove a profile if present."""
        with self._write_lock:
            current = self._profiles.get(ns)
            if current is None or profile_name not in current:
                return
            updated = {k: v for k, v in current.items() if k != profile_name}
            self._profiles = {**self._profiles, ns: updated}

    def has_profile(self, ns: str, profile_name: str) -> bool:
        return profile_name in self._profiles.get(ns, {})

    def get_profile(self, ns: str, profile_name: str) -> Profile:
        """Return a registered profile; raises KeyError when absent."""
        try:
            return self._profiles[ns][profile_name]
        except KeyError:
            raise KeyError(f"No profile '{profile_name}' in namespace '{ns}'") from None

    def get_profiles(self, ns: str) -> dict[str, Profile]:
        return dict(self._profiles.get(ns, {}))

    def namespaces(self) -> list[str]:
        return list(self._profiles)
