"""
Version stores: one current semantic version kept in an external store.

``VersionStore`` (base.py) defines check/bump/set and the compare-and-set
loop shared by every backend:

- S3VersionStore (s3.py): object in an S3 bucket, ETag preconditions
- GitVersionStore (git.py): file on a git branch, non-fast-forward pushes
- GCSVersionStore (gcs.py): object in a GCS bucket, generation preconditions

``get_store`` (factory.py) builds the right one from a ``Source``.
"""

from .base import StoredVersion, VersionStore
from .factory import get_store
from .gcs import GCSVersionStore
from .git import GitVersionStore
from .s3 import S3VersionStore

__all__ = [
    "VersionStore",
    "StoredVersion",
    "S3VersionStore",
    "GitVersionStore",
    "GCSVersionStore",
    "get_store",
]
