"""Google Cloud Storage version store."""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from google.api_core import exceptions as gexc
from requests import exceptions as rexc

from semverstore.versioning import (
    ConflictRejected,
    TransientIOError,
    Version,
    VersionStoreError,
)
from .base import StoredVersion, VersionStore

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (
    gexc.TooManyRequests,
    gexc.InternalServerError,
    gexc.BadGateway,
    gexc.ServiceUnavailable,
    gexc.GatewayTimeout,
    gexc.RetryError,
    rexc.ConnectionError,
    rexc.Timeout,
)


class GCSVersionStore(VersionStore):
    """
    Keeps the version as a plain text object in a GCS bucket.

    The precondition token is the object generation. Writes pass
    ``if_generation_match`` with the generation that was read, or 0 when the
    object did not exist (create only).

    Args:
        client: A ready ``google.cloud.storage.Client``
        bucket: Bucket name
        key: Object name holding the version
    """

    def __init__(self, client: Any, bucket: str, key: str, **kwargs):
        super().__init__(**kwargs)
        self.client = client
        self.bucket_name = bucket
        self.key = key

    @property
    def location(self) -> str:
        return f"gs://{self.bucket_name}/{self.key}"

    @contextmanager
    def session(self, operation: str) -> Iterator[Any]:
        yield self.client.bucket(self.bucket_name)

    def read(self, session: Any, operation: str) -> StoredVersion:
        try:
            blob = session.get_blob(self.key)
            if blob is None:
                logger.debug(f"{self.location} does not exist yet")
                return StoredVersion(self.initial_version, None, exists=False)
            # pin the download to the generation we report as the token
            text = blob.download_as_text(if_generation_match=blob.generation)
        except gexc.NotFound:
            logger.debug(f"{self.location} does not exist yet")
            return StoredVersion(self.initial_version, None, exists=False)
        except gexc.PreconditionFailed as e:
            # replaced between metadata fetch and download
            raise TransientIOError(
                operation, self.location, "object changed while reading"
            ) from e
        except TRANSIENT_ERRORS as e:
            raise TransientIOError(operation, self.location, str(e)) from e
        except gexc.GoogleAPIError as e:
            raise VersionStoreError(operation, self.location, str(e)) from e

        return StoredVersion(self._parse_stored(text, operation), blob.generation)

    def write(
        self, session: Any, operation: str, version: Version, token: Optional[Any]
    ) -> None:
        blob = session.blob(self.key)
        try:
            blob.upload_from_string(
                str(version),
                content_type="text/plain",
                if_generation_match=token if token is not None else 0,
            )
        except gexc.PreconditionFailed as e:
            raise ConflictRejected(operation, self.location, str(e)) from e
        except TRANSIENT_ERRORS as e:
            raise TransientIOError(operation, self.location, str(e)) from e
        except gexc.GoogleAPIError as e:
            raise VersionStoreError(operation, self.location, str(e)) from e

