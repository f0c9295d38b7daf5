"""
Versioning Module for semverstore.

This module holds everything that is about version *values*, as opposed to
where they are kept:

1. **Core Version Logic** (version.py):
   - Version: immutable semantic version with semver precedence ordering
   - parse_version, built on the semver package

2. **Bumps** (bump.py):
   - MajorBump, MinorBump, PatchBump, FinalBump, PrereleaseBump, MultiBump
   - bump_from_params: builds a bump from "patch" / "rc" style parameters

3. **Exception Hierarchy** (exceptions.py):
   - Unified exception types for parsing, configuration and store failures.
     Store adapters translate their backend errors into these, so callers
     never see a botocore or git error directly.

Storage of the current version lives in ``semverstore.store``.
"""

from .bump import (
    Bump,
    MajorBump,
    MinorBump,
    PatchBump,
    FinalBump,
    PrereleaseBump,
    MultiBump,
    bump_from_params,
)
from .exceptions import (
    VersioningError,
    VersionFormatError,
    ConfigurationError,
    VersionStoreError,
    TransientIOError,
    ConflictRejected,
    ConcurrencyExhausted,
)
from .version import Version, parse_version

__all__ = [
    # Core version utilities
    "Version",
    "parse_version",
    # Bumps
    "Bump",
    "MajorBump",
    "MinorBump",
    "PatchBump",
    "FinalBump",
    "PrereleaseBump",
    "MultiBump",
    "bump_from_params",
    # Centralized exception hierarchy
    "VersioningError",
    "VersionFormatError",
    "ConfigurationError",
    "VersionStoreError",
    "TransientIOError",
    "ConflictRejected",
    "ConcurrencyExhausted",
]
