"""
Tests for the profile resolution chain.

Resolution must be total: every combination of declared name, remapping,
registry contents and override yields a profile, and resolving never
mutates what is stored in the registry.
"""

import json
import logging

import pytest

from composer.collision.types import CheckProgramMode, ContactRequest, ContactTestType
from composer.profiles.dictionary import ProfileDictionary
from composer.profiles.profile import ContactCheckConfig, ContactCheckProfile, Profile
from composer.profiles.resolver import (
    apply_profile_overrides,
    get_profile,
    get_profile_string,
    resolve_profile,
)

NS = "DiscreteContactCheckTask"


class OtherProfile(Profile):
    speed: float = 1.0


def lvs_profile(value: float) -> ContactCheckProfile:
    return ContactCheckProfile(config=ContactCheckConfig(longest_valid_segment_length=value))


@pytest.fixture
def profiles() -> ProfileDictionary:
    profiles = ProfileDictionary()
    profiles.add_profile(NS, "DEFAULT", lvs_profile(0.01))
    profiles.add_profile(NS, "FREESPACE", lvs_profile(0.1))
    profiles.add_profile(NS, "RASTER", lvs_profile(0.001))
    return profiles


# ---------------------------------------------------------------------------
# get_profile_string
# ---------------------------------------------------------------------------


class TestProfileString:
    def test_declared_name_is_kept(self):
        assert get_profile_string(NS, "FREESPACE", {}) == "FREESPACE"

    def test_empty_name_uses_library_default(self):
        assert get_profile_string(NS, "", None) == "DEFAULT"

    def test_empty_name_uses_explicit_default(self):
        assert get_profile_string(NS, "", None, default_profile="MY_DEFAULT") == "MY_DEFAULT"

    def test_empty_name_uses_configured_default(self, tmp_path, monkeypatch):
        config_file = tmp_path / "configuration.json"
        config_file.write_text(json.dumps({"profiles": {"default_name": "SITE_DEFAULT"}}))
        monkeypatch.setenv("COMPOSER_CONFIG_FILE", str(config_file))

        assert get_profile_string(NS, "", None) == "SITE_DEFAULT"

    def test_remapping_replaces_name(self):
        remapping = {NS: {"FREESPACE": "RASTER"}}
        assert get_profile_string(NS, "FREESPACE", remapping) == "RASTER"

    def test_remapping_applies_to_default_name(self):
        remapping = {NS: {"DEFAULT": "FREESPACE"}}
        assert get_profile_string(NS, "", remapping) == "FREESPACE"

    def test_remapping_is_single_hop(self):
        remapping = {NS: {"A": "B", "B": "C"}}
        assert get_profile_string(NS, "A", remapping) == "B"

    def test_remapping_for_other_namespace_is_ignored(self):
        remapping = {"OtherTask": {"FREESPACE": "RASTER"}}
        assert get_profile_string(NS, "FREESPACE", remapping) == "FREESPACE"


# ---------------------------------------------------------------------------
# get_profile
# ---------------------------------------------------------------------------


class TestGetProfile:
    def test_registered_profile_is_returned_by_reference(self, profiles):
        found = get_profile(NS, "FREESPACE", profiles, ContactCheckProfile())
        assert found is profiles.get_profile(NS, "FREESPACE")

    def test_unknown_profile_returns_default(self, profiles):
        default = ContactCheckProfile()
        assert get_profile(NS, "MISSING", profiles, default) is default

    def test_unknown_namespace_returns_default(self, profiles):
        default = ContactCheckProfile()
        assert get_profile("OtherTask", "FREESPACE", profiles, default) is default

    def test_missing_registry_returns_default(self):
        default = ContactCheckProfile()
        assert get_profile(NS, "FREESPACE", None, default) is default

    def test_wrong_profile_type_returns_default(self, profiles):
        profiles.add_profile(NS, "FAST", OtherProfile(speed=2.0))
        default = ContactCheckProfile()
        assert get_profile(NS, "FAST", profiles, default) is default


# ---------------------------------------------------------------------------
# apply_profile_overrides
# ---------------------------------------------------------------------------


class TestOverrides:
    def test_no_overrides_returns_same_profile(self, profiles):
        base = profiles.get_profile(NS, "FREESPACE")
        assert apply_profile_overrides(NS, "FREESPACE", base, None) is base
        assert apply_profile_overrides(NS, "FREESPACE", base, {}) is base

    def test_override_fields_are_reflected(self, profiles):
        base = profiles.get_profile(NS, "FREESPACE")

        def first_contact_only(profile):
            config = profile.config.model_copy(
                update={"contact_request": ContactRequest(type=ContactTestType.FIRST)}
            )
            return profile.model_copy(update={"config": config})

        effective = apply_profile_overrides(NS, "FREESPACE", base, {NS: first_contact_only})

        assert effective.config.contact_request.type == ContactTestType.FIRST
        assert effective.config.longest_valid_segment_length == 0.1
        assert base.config.contact_request.type == ContactTestType.ALL
        assert profiles.get_profile(NS, "FREESPACE") is base

    def test_override_receives_a_copy(self, profiles):
        base = profiles.get_profile(NS, "FREESPACE")
        seen = []

        def record(profile):
            seen.append(profile)
            return None

        effective = apply_profile_overrides(NS, "FREESPACE", base, {NS: record})

        assert seen[0] is not base
        assert effective is seen[0]
        assert effective == base

    def test_override_returning_wrong_type_is_ignored(self, profiles):
        base = profiles.get_profile(NS, "FREESPACE")
        effective = apply_profile_overrides(NS, "FREESPACE", base, {NS: lambda p: "nonsense"})
        assert effective is base

    def test_override_that_raises_is_ignored(self, profiles, caplog):
        def broken(profile):
            raise RuntimeError("boom")

        base = profiles.get_profile(NS, "FREESPACE")
        with caplog.at_level(logging.WARNING, logger="composer.profiles.resolver"):
            effective = apply_profile_overrides(NS, "FREESPACE", base, {NS: broken})

        assert effective is base
        [record] = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert "raised" in record.getMessage()
        assert record.exc_info[0] is RuntimeError

    def test_registered_profiles_cannot_be_mutated(self, profiles):
        base = profiles.get_profile(NS, "FREESPACE")
        with pytest.raises(ValueError):
            base.config = ContactCheckConfig()


# ---------------------------------------------------------------------------
# resolve_profile
# ---------------------------------------------------------------------------


def end_only(profile):
    config = profile.config.model_copy(update={"check_program_mode": CheckProgramMode.END_ONLY})
    return profile.model_copy(update={"config": config})


@pytest.mark.parametrize("declared", ["", "DEFAULT", "FREESPACE", "MISSING"])
@pytest.mark.parametrize("remapping", [None, {}, {NS: {"FREESPACE": "MISSING", "": "RASTER"}}])
@pytest.mark.parametrize("use_registry", [True, False])
@pytest.mark.parametrize(
    "overrides", [None, {NS: end_only}, {"OtherTask": end_only}, {NS: lambda p: 1 / 0}]
)
def test_resolve_profile_is_total(profiles, declared, remapping, use_registry, overrides):
    registry = profiles if use_registry else None
    snapshot = {name: p for name, p in profiles.get_profiles(NS).items()}

    effective = resolve_profile(
        NS, declared, remapping, registry, overrides, ContactCheckProfile
    )

    assert isinstance(effective, ContactCheckProfile)
    assert profiles.get_profiles(NS) == snapshot
    for name, profile in profiles.get_profiles(NS).items():
        assert profile is snapshot[name]
        assert profile.config.check_program_mode == CheckProgramMode.ALL


def test_resolve_empty_name_resolves_default_entry(profiles):
    effective = resolve_profile(NS, "", None, profiles, None, ContactCheckProfile)
    assert effective is profiles.get_profile(NS, "DEFAULT")


def test_resolve_is_deterministic(profiles):
    remapping = {NS: {"FREESPACE": "RASTER"}}
    first = resolve_profile(NS, "FREESPACE", remapping, profiles, None, ContactCheckProfile)
    second = resolve_profile(NS, "FREESPACE", remapping, profiles, None, ContactCheckProfile)
    assert first is second is profiles.get_profile(NS, "RASTER")


def test_resolve_applies_override_last(profiles):
    remapping = {NS: {"FREESPACE": "RASTER"}}
    effective = resolve_profile(
        NS, "FREESPACE", remapping, profiles, {NS: end_only}, ContactCheckProfile
    )
    assert effective.config.longest_valid_segment_length == 0.001
    assert effective.config.check_program_mode == CheckProgramMode.END_ONLY


def raise_error(profile):
    raise RuntimeError("boom")


def test_resolve_survives_raising_override(profiles):
    effective = resolve_profile(NS, "", {}, None, {NS: raise_error}, ContactCheckProfile)
    assert effective == ContactCheckProfile()


def test_resolve_uses_given_default_name(profiles):
    effective = resolve_profile(
        NS, "", None, profiles, None, ContactCheckProfile, default_profile="FREESPACE"
    )
    assert effective is profiles.get_profile(NS, "FREESPACE")
