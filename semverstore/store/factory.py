import logging
from typing import Optional

from semverstore.config import get_max_retries
from semverstore.constants import DriverEnum
from semverstore.model import Source
from semverstore.versioning import ConfigurationError

from .base import VersionStore
from .credentials import (
    authenticated_uri,
    git_environment,
    make_gcs_client,
    make_s3_client,
)
from .gcs import GCSVersionStore
from .git import GitVersionStore
from .s3 import S3VersionStore

logger = logging.getLogger(__name__)


def _require(source: Source, *fields: str) -> None:
    missing = [name for name in fields if not getattr(source, name)]
    if missing:
        raise ConfigurationError(
            f"{source.driver} driver requires: {', '.join(missing)}"
        )


def get_store(source: Source, max_retries: Optional[int] = None) -> VersionStore:
    """
    Selects and builds the version store described by a source.

    Args:
    - source (Source): The configuration record.
    - max_retries (int): Compare-and-set attempts per operation. Defaults to
      the process configuration (see ``semverstore.config.get_max_retries``).

    Returns:
    - VersionStore: A ready store for the configured driver.

    Raises:
    - ConfigurationError: Unknown driver, invalid initial version or missing
      location fields.
    """
    if max_retries is None:
        max_retries = get_max_retries()
    initial_version = source.get_initial_version()
    common = {"initial_version": initial_version, "max_retries": max_retries}

    driver = source.driver
    if driver in (DriverEnum.unspecified.value, DriverEnum.s3.value):
        _require(source, "bucket", "key")
        store: VersionStore = S3VersionStore(
            make_s3_client(source, max_retries),
            bucket=source.bucket,
            key=source.key,
            server_side_encryption=source.server_side_encryption,
            sse_kms_key_id=source.sse_kms_key_id,
            **common,
        )
    elif driver == DriverEnum.git.value:
        _require(source, "uri", "branch", "file")
        store = GitVersionStore(
            uri=authenticated_uri(source.uri, source.username, source.password),
            branch=source.branch,
            file=source.file,
            git_user=source.git_user,
            commit_message=source.commit_message,
            env=git_environment(source.skip_ssl_verification),
            private_key=source.private_key,
            **common,
        )
    elif driver == DriverEnum.gcs.value:
        _require(source, "bucket", "key")
        store = GCSVersionStore(
            make_gcs_client(source), bucket=source.bucket, key=source.key, **common
        )
    else:
        raise ConfigurationError(f"unknown driver: {source.driver}")

    logger.debug(f"Using {store!r} (initial version {initial_version})")
    return store
