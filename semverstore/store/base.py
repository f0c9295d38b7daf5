"""
Abstract version store and its compare-and-set protocol.

None of the supported backends can increment a value atomically, but all of
them can refuse a write whose precondition no longer holds (an ETag, a
generation number, a fast-forward push). Every mutation is therefore a
read-modify-write loop: read the value together with a precondition token,
compute the new value, write it only if the token still matches, and start
over on a conflict. The loop is bounded by ``max_retries`` attempts.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Iterator, List, Optional, Union

from semverstore.constants import MAX_RETRIES
from semverstore.versioning import (
    Bump,
    ConcurrencyExhausted,
    ConflictRejected,
    TransientIOError,
    Version,
    VersionFormatError,
    VersionStoreError,
    parse_version,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredVersion:
    """
    A version as read from a backend.

    ``token`` is whatever the backend needs to make the next write
    conditional on this read (ETag, commit sha, generation). It is None when
    nothing has been stored at the location yet, in which case ``version`` is
    the configured initial version.
    """

    version: Version
    token: Optional[Any] = None
    exists: bool = True


class VersionStore(ABC):
    """
    A single semantic version kept in an external store.

    Subclasses implement ``read`` and ``write`` for one backend; ``check``,
    ``bump`` and ``set`` are shared. Instances keep no per-operation state and
    can be used from several threads at once.

    Args:
        initial_version: Version reported (and bumped from) while the
            location is still empty. Defaults to 0.0.0.
        max_retries: Maximum number of write attempts per operation.
    """

    def __init__(
        self,
        initial_version: Optional[Version] = None,
        max_retries: int = MAX_RETRIES,
    ):
        if max_retries < 1:
            raise ValueError(f"max_retries must be at least 1, got {max_retries}")
        self.initial_version = (
            initial_version if initial_version is not None else Version(0, 0, 0)
        )
        self.max_retries = max_retries

    @property
    @abstractmethod
    def location(self) -> str:
        """Human readable location of the stored version, without credentials."""

    @contextmanager
    def session(self, operation: str) -> Iterator[Any]:
        """
        Per-operation resources, passed to every ``read``/``write`` of that
        operation. Stores that need none yield None.
        """
        yield None

    @abstractmethod
    def read(self, session: Any, operation: str) -> StoredVersion:
        """
        Read the current version and its precondition token.

        Raises:
            TransientIOError: The backend could not be reached
            VersionStoreError: Any other backend failure
        """

    @abstractmethod
    def write(
        self, session: Any, operation: str, version: Version, token: Optional[Any]
    ) -> None:
        """
        Store ``version`` if the location is still at ``token``.

        A None token means "create, only if nothing exists yet".

        Raises:
            ConflictRejected: Someone else wrote since the read
            TransientIOError: The backend could not be reached
            VersionStoreError: Any other backend failure
        """

    def check(self, since: Optional[Version] = None) -> List[Version]:
        """
        List the versions that are newer than ``since``.

        Without ``since`` the current version (or the initial version, for an
        empty location) is returned. With ``since`` the current version is
        returned only if it is strictly greater.

        Returns:
            An empty or one-element list of versions
        """
        with self.session("check") as session:
            stored = self._read_with_retries(session, "check")

        if since is None:
            return [stored.version]
        if stored.exists and stored.version > since:
            return [stored.version]
        return []

    def bump(self, bump: Bump) -> Version:
        """
        Atomically advance the stored version.

        Returns:
            The version that was stored

        Raises:
            ConcurrencyExhausted: Every attempt lost a race with another writer
            TransientIOError: The last attempt failed to reach the backend
        """
        return self._compare_and_set("bump", bump.apply)

    def set(self, version: Union[str, Version]) -> None:
        """
        Atomically replace the stored version, whatever it currently is.

        A conflicting write is retried with the same value against the
        freshly read precondition.
        """
        if not isinstance(version, Version):
            version = parse_version(version)
        self._compare_and_set("set", lambda current: version)

    def _read_with_retries(self, session: Any, operation: str) -> StoredVersion:
        attempt = 1
        while True:
            try:
                return self.read(session, operation)
            except TransientIOError as e:
                if attempt >= self.max_retries:
                    raise
                logger.debug(
                    f"{operation}: read attempt {attempt}/{self.max_retries} "
                    f"failed for {self.location}: {e.message}"
                )
            attempt += 1

    def _compare_and_set(
        self, operation: str, compute: Callable[[Version], Version]
    ) -> Version:
        error: Optional[VersionStoreError] = None
        with self.session(operation) as session:
            for attempt in range(1, self.max_retries + 1):
                try:
                    stored = self.read(session, operation)
                    desired = compute(stored.version)
                    self.write(session, operation, desired, stored.token)
                except ConflictRejected as e:
                    error = e
                    logger.debug(
                        f"{operation}: attempt {attempt}/{self.max_retries} "
                        f"lost a race on {self.location}, retrying"
                    )
                    continue
                except TransientIOError as e:
                    error = e
                    logger.debug(
                        f"{operation}: attempt {attempt}/{self.max_retries} "
                        f"failed for {self.location}: {e.message}"
                    )
                    continue

                logger.debug(f"{operation}: stored {desired} at {self.location}")
                return desired

        if isinstance(error, TransientIOError):
            raise error
        logger.warning(
            f"{operation}: giving up on {self.location} after "
            f"{self.max_retries} conflicting attempts"
        )
        raise ConcurrencyExhausted(operation, self.location, self.max_retries) from error

    def _parse_stored(self, text: str, operation: str) -> Version:
        """Parse a stored value, naming the location if it is corrupt."""
        try:
            return parse_version(text)
        except VersionFormatError as e:
            raise VersionStoreError(
                operation, self.location, f"stored value is not a version: {e}"
            ) from e

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.location!r})"
