from enum import Enum


class DriverEnum(str, Enum):
    """Storage backends a version can be kept in."""

    unspecified = "unspecified"
    s3 = "s3"
    git = "git"
    gcs = "gcs"


# Compare-and-set attempts per operation
MAX_RETRIES = 12

DEFAULT_INITIAL_VERSION = "0.0.0"
DEFAULT_REGION = "us-east-1"
DEFAULT_COMMIT_MESSAGE = "bump to %version%"
