"""S3 (and S3-compatible, e.g. MinIO) version store."""

import logging
from typing import Any, Dict, Optional

from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionError as BotoConnectionError,
    HTTPClientError,
)

from semverstore.versioning import (
    ConflictRejected,
    TransientIOError,
    Version,
    VersionStoreError,
)
from .base import StoredVersion, VersionStore

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = {"NoSuchKey", "404", "NotFound"}
PRECONDITION_CODES = {"PreconditionFailed", "412", "ConditionalRequestConflict", "409"}
TRANSIENT_CODES = {
    "InternalError",
    "ServiceUnavailable",
    "SlowDown",
    "RequestTimeout",
    "RequestTimeTooSkewed",
    "500",
    "502",
    "503",
    "504",
}


def _error_code(err: ClientError) -> str:
    return str(err.response.get("Error", {}).get("Code", ""))


class S3VersionStore(VersionStore):
    """
    Keeps the version as a plain text object in an S3 bucket.

    The precondition token is the object's ETag. Writes use ``IfMatch`` with
    the ETag that was read, or ``IfNoneMatch="*"`` when the object did not
    exist, so two writers can never both succeed against the same read.

    Args:
        client: A ready boto3 S3 client (see ``semverstore.store.credentials``)
        bucket: Bucket name
        key: Object key holding the version
        server_side_encryption: Optional ``ServerSideEncryption`` value
            (e.g. "AES256" or "aws:kms")
        sse_kms_key_id: KMS key id, when using "aws:kms"
    """

    def __init__(
        self,
        client: Any,
        bucket: str,
        key: str,
        server_side_encryption: Optional[str] = None,
        sse_kms_key_id: Optional[str] = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.client = client
        self.bucket = bucket
        self.key = key
        self.server_side_encryption = server_side_encryption
        self.sse_kms_key_id = sse_kms_key_id

    @property
    def location(self) -> str:
        return f"s3://{self.bucket}/{self.key}"

    def read(self, session: Any, operation: str) -> StoredVersion:
        try:
            resp = self.client.get_object(Bucket=self.bucket, Key=self.key)
            body = resp["Body"].read()
        except ClientError as e:
            if _error_code(e) in NOT_FOUND_CODES:
                logger.debug(f"{self.location} does not exist yet")
                return StoredVersion(self.initial_version, None, exists=False)
            raise self._translate(e, operation) from e
        except (BotoConnectionError, HTTPClientError) as e:
            raise TransientIOError(operation, self.location, str(e)) from e
        except BotoCoreError as e:
            raise VersionStoreError(operation, self.location, str(e)) from e

        version = self._parse_stored(body.decode("utf-8"), operation)
        return StoredVersion(version, resp.get("ETag"))

    def write(
        self, session: Any, operation: str, version: Version, token: Optional[Any]
    ) -> None:
        kwargs: Dict[str, Any] = {
            "Bucket": self.bucket,
            "Key": self.key,
            "Body": str(version).encode("utf-8"),
            "ContentType": "text/plain",
        }
        if token is None:
            kwargs["IfNoneMatch"] = "*"
        else:
            kwargs["IfMatch"] = token
        if self.server_side_encryption:
            kwargs["ServerSideEncryption"] = self.server_side_encryption
            if self.sse_kms_key_id:
                kwargs["SSEKMSKeyId"] = self.sse_kms_key_id

        try:
            self.client.put_object(**kwargs)
        except ClientError as e:
            raise self._translate(e, operation) from e
        except (BotoConnectionError, HTTPClientError) as e:
            raise TransientIOError(operation, self.location, str(e)) from e
        except BotoCoreError as e:
            raise VersionStoreError(operation, self.location, str(e)) from e

    def _translate(self, err: ClientError, operation: str) -> VersionStoreError:
        code = _error_code(err)
        message = err.response.get("Error", {}).get("Message") or code
        if code in PRECONDITION_CODES:
            return ConflictRejected(operation, self.location, message)
        if code in TRANSIENT_CODES:
            return TransientIOError(operation, self.location, message)
        return VersionStoreError(operation, self.location, f"{code}: {message}")

