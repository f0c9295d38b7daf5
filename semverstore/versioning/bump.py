"""
Bump operations: pure functions that advance a Version.

A bump never touches storage. Stores call ``bump.apply(current)`` inside
their compare-and-set loop, possibly several times against fresher values.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Optional, Sequence

from .exceptions import VersionFormatError
from .version import Version


class Bump(ABC):
    """Describes how to derive the next version from the current one."""

    @abstractmethod
    def apply(self, version: Version) -> Version:
        """Return the next version. Build metadata is always dropped."""

    def __call__(self, version: Version) -> Version:
        return self.apply(version)


class MajorBump(Bump):
    def apply(self, version: Version) -> Version:
        return Version.from_semver(version.to_semver().bump_major())

    def __repr__(self) -> str:
        return "MajorBump()"


class MinorBump(Bump):
    def apply(self, version: Version) -> Version:
        return Version.from_semver(version.to_semver().bump_minor())

    def __repr__(self) -> str:
        return "MinorBump()"


class PatchBump(Bump):
    def apply(self, version: Version) -> Version:
        return Version.from_semver(version.to_semver().bump_patch())

    def __repr__(self) -> str:
        return "PatchBump()"


class FinalBump(Bump):
    """Strip the prerelease suffix, leaving the numeric fields unchanged."""

    def apply(self, version: Version) -> Version:
        return Version.from_semver(version.to_semver().finalize_version())

    def __repr__(self) -> str:
        return "FinalBump()"


@dataclass(frozen=True)
class PrereleaseBump(Bump):
    """
    Advance the prerelease named ``identifier``.

    ``1.2.3-rc.1`` becomes ``1.2.3-rc.2``; any other prerelease (or none)
    starts over at ``<identifier>.1``. With ``without_number`` the prerelease
    is just ``<identifier>``.

    The identifier is a single semver identifier: no dots, only
    ``[0-9A-Za-z-]``.
    """

    identifier: str
    without_number: bool = False

    def __post_init__(self):
        valid = bool(self.identifier) and "." not in self.identifier
        if valid:
            try:
                Version(0, 0, 0, prerelease=(self.identifier,))
            except VersionFormatError:
                valid = False
        if not valid:
            raise VersionFormatError(
                self.identifier,
                expected_format="a single prerelease identifier, e.g. rc",
                reason="only [0-9A-Za-z-], no '.', no leading zeros",
            )

    def apply(self, version: Version) -> Version:
        if self.without_number:
            prerelease = (self.identifier,)
        elif (
            len(version.prerelease) >= 2
            and version.prerelease[0] == self.identifier
            and version.prerelease[1].isdigit()
        ):
            prerelease = (self.identifier, str(int(version.prerelease[1]) + 1))
        else:
            prerelease = (self.identifier, "1")
        return replace(version, prerelease=prerelease, build=())


@dataclass(frozen=True)
class MultiBump(Bump):
    """Apply several bumps in order. An empty MultiBump only drops build metadata."""

    bumps: Sequence[Bump] = ()

    def apply(self, version: Version) -> Version:
        result = replace(version, build=())
        for bump in self.bumps:
            result = bump.apply(result)
        return result


_BUMPS = {
    "major": MajorBump,
    "minor": MinorBump,
    "patch": PatchBump,
    "final": FinalBump,
}


def bump_from_params(
    bump: Optional[str] = None,
    pre: Optional[str] = None,
    pre_without_version: bool = False,
) -> Bump:
    """
    Build a bump from the usual parameters.

    Args:
        bump: One of "major", "minor", "patch" or "final" (case-insensitive)
        pre: Prerelease identifier applied after ``bump``, e.g. "rc"
        pre_without_version: Use the bare identifier, without a counter

    Returns:
        A single bump, or a MultiBump when both are given

    Raises:
        ValueError: If ``bump`` is not a known component
    """
    bumps = []
    if bump:
        try:
            bumps.append(_BUMPS[bump.lower()]())
        except KeyError:
            raise ValueError(
                f"Unknown version component: {bump}. "
                f"Expected one of: {', '.join(_BUMPS)}"
            ) from None
    if pre:
        bumps.append(PrereleaseBump(pre, without_number=pre_without_version))

    if len(bumps) == 1:
        return bumps[0]
    return MultiBump(tuple(bumps))
