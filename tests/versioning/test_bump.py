"""Tests for bump operations."""

import pytest

from semverstore.versioning import VersionFormatError, parse_version
from semverstore.versioning.bump import (
    FinalBump,
    MajorBump,
    MinorBump,
    MultiBump,
    PatchBump,
    PrereleaseBump,
    bump_from_params,
)


def bumped(version: str, bump) -> str:
    return str(bump.apply(parse_version(version)))


@pytest.mark.short
class TestBumps:
    def test_patch(self):
        assert bumped("1.2.3", PatchBump()) == "1.2.4"

    def test_minor(self):
        assert bumped("1.2.3", MinorBump()) == "1.3.0"

    def test_major(self):
        assert bumped("1.2.3", MajorBump()) == "2.0.0"

    def test_numeric_bumps_clear_prerelease_and_build(self):
        assert bumped("1.2.3-rc.1+b5", PatchBump()) == "1.2.4"
        assert bumped("1.2.3-rc.1", MinorBump()) == "1.3.0"
        assert bumped("1.2.3-rc.1", MajorBump()) == "2.0.0"

    def test_final(self):
        assert bumped("1.2.3-rc.1", FinalBump()) == "1.2.3"
        assert bumped("1.2.3", FinalBump()) == "1.2.3"

    def test_prerelease_starts_at_one(self):
        assert bumped("1.2.3", PrereleaseBump("rc")) == "1.2.3-rc.1"

    def test_prerelease_increments(self):
        assert bumped("1.2.3-rc.1", PrereleaseBump("rc")) == "1.2.3-rc.2"
        assert bumped("1.2.3-rc.9", PrereleaseBump("rc")) == "1.2.3-rc.10"

    def test_prerelease_switches_identifier(self):
        assert bumped("1.2.3-alpha.4", PrereleaseBump("rc")) == "1.2.3-rc.1"

    def test_prerelease_without_number(self):
        assert bumped("1.2.3", PrereleaseBump("rc", without_number=True)) == "1.2.3-rc"
        assert (
            bumped("1.2.3-rc.3", PrereleaseBump("beta", without_number=True))
            == "1.2.3-beta"
        )

    def test_bump_is_pure(self):
        current = parse_version("1.2.3")
        PatchBump().apply(current)
        assert str(current) == "1.2.3"

    def test_bump_is_callable(self):
        assert str(PatchBump()(parse_version("0.0.1"))) == "0.0.2"

    def test_multi_bump_applies_in_order(self):
        bump = MultiBump((PatchBump(), PrereleaseBump("rc")))
        assert bumped("1.2.3", bump) == "1.2.4-rc.1"

    def test_empty_multi_bump_keeps_version(self):
        assert bumped("1.2.3-rc.1+b1", MultiBump()) == "1.2.3-rc.1"


@pytest.mark.short
class TestBumpFromParams:
    def test_single_component(self):
        assert isinstance(bump_from_params("patch"), PatchBump)
        assert isinstance(bump_from_params("MAJOR"), MajorBump)
        assert isinstance(bump_from_params("final"), FinalBump)

    def test_prerelease_only(self):
        assert bump_from_params(pre="rc") == PrereleaseBump("rc")

    def test_component_and_prerelease(self):
        bump = bump_from_params("minor", "beta")
        assert bumped("1.2.3", bump) == "1.3.0-beta.1"

    def test_final_and_prerelease(self):
        bump = bump_from_params("final", "rc", pre_without_version=True)
        assert bumped("1.2.3-alpha.2", bump) == "1.2.3-rc"

    def test_nothing_given(self):
        assert bumped("1.2.3", bump_from_params()) == "1.2.3"

    def test_unknown_component(self):
        with pytest.raises(ValueError, match="Unknown version component"):
            bump_from_params("micro")

    def test_invalid_prerelease_identifier(self):
        with pytest.raises(VersionFormatError):
            bump_from_params("patch", "rc_1")


@pytest.mark.short
class TestPrereleaseIdentifier:
    @pytest.mark.parametrize("identifier", ["rc_1", "rc.beta", "", "pre release", "01"])
    def test_rejected(self, identifier):
        with pytest.raises(VersionFormatError):
            PrereleaseBump(identifier)

    def test_rejected_without_number(self):
        with pytest.raises(VersionFormatError):
            PrereleaseBump("rc.beta", without_number=True)

    def test_repeated_bumps_advance(self):
        bump = PrereleaseBump("beta-2")
        first = bump.apply(parse_version("1.0.0"))
        second = bump.apply(first)

        assert str(first) == "1.0.0-beta-2.1"
        assert str(second) == "1.0.0-beta-2.2"
        assert parse_version(str(second)) == second
