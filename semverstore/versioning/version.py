"""
Semantic version value type.

Versions follow the semver 2.0 grammar, major.minor.patch[-prerelease][+build],
and are ordered by semver precedence. Build metadata is carried along for
formatting but never takes part in comparison, equality or hashing.

Parsing and precedence are delegated to the ``semver`` package; ``Version``
is the immutable, tuple-based value the rest of the package works with.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

import semver

from .exceptions import VersionFormatError


def _identifiers(text: Optional[str]) -> Tuple[str, ...]:
    return tuple(text.split(".")) if text else ()


@dataclass(frozen=True, eq=False)
class Version:
    """
    An immutable semantic version.

    A "new" version is always a fresh value; use the bump operations in
    ``semverstore.versioning.bump`` or ``dataclasses.replace`` to derive one.
    Every instance formats to a string that parses back to an equal value:
    identifiers that would not survive formatting (empty, containing a dot or
    characters outside ``[0-9A-Za-z-]``, numeric prerelease identifiers with a
    leading zero) are rejected on construction.
    """

    major: int
    minor: int
    patch: int
    prerelease: Tuple[str, ...] = field(default=())
    build: Tuple[str, ...] = field(default=())

    def __post_init__(self):
        for name in ("major", "minor", "patch"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise VersionFormatError(
                    str(value), reason=f"{name} must be a non-negative integer"
                )
        # allow lists on construction, store tuples
        object.__setattr__(self, "prerelease", tuple(self.prerelease))
        object.__setattr__(self, "build", tuple(self.build))

        text = str(self)
        try:
            parsed = semver.Version.parse(text)
        except ValueError as e:
            raise VersionFormatError(text, reason="invalid identifier") from e
        if (
            _identifiers(parsed.prerelease) != self.prerelease
            or _identifiers(parsed.build) != self.build
        ):
            raise VersionFormatError(text, reason="identifiers must not contain '.'")
        object.__setattr__(self, "_semver", parsed)

    @classmethod
    def parse(cls, version_string: str) -> "Version":
        return parse_version(version_string)

    @classmethod
    def from_semver(cls, version: semver.Version) -> "Version":
        return cls(
            version.major,
            version.minor,
            version.patch,
            prerelease=_identifiers(version.prerelease),
            build=_identifiers(version.build),
        )

    def to_semver(self) -> semver.Version:
        return self._semver

    def __str__(self) -> str:
        """Return the string representation of the version."""
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += "-" + ".".join(self.prerelease)
        if self.build:
            text += "+" + ".".join(self.build)
        return text

    def __repr__(self) -> str:
        return f"Version('{str(self)}')"

    def _compare(self, other: "Version") -> int:
        # semver.Version.compare ignores build metadata
        return self._semver.compare(other._semver)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._compare(other) == 0

    def __lt__(self, other) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._compare(other) < 0

    def __le__(self, other) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._compare(other) <= 0

    def __gt__(self, other) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._compare(other) > 0

    def __ge__(self, other) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._compare(other) >= 0

    def __hash__(self) -> int:
        return hash((self.major, self.minor, self.patch, self.prerelease))


def parse_version(version_string: str) -> Version:
    """
    Parse a version string into a Version object.

    Args:
        version_string: Version string such as "1.4.0" or "1.4.0-rc.2+build.7".
            Surrounding whitespace (e.g. a trailing newline read from a file)
            is ignored.

    Returns:
        Version object

    Raises:
        VersionFormatError: If the string is not a valid semantic version
    """
    text = str(version_string).strip()
    try:
        parsed = semver.Version.parse(text)
    except ValueError as e:
        raise VersionFormatError(text) from e
    return Version.from_semver(parsed)
