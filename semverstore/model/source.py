"""Pydantic model of the configuration record a store is built from."""

from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from semverstore.constants import (
    DEFAULT_COMMIT_MESSAGE,
    DEFAULT_INITIAL_VERSION,
    DriverEnum,
)
from semverstore.versioning import ConfigurationError, Version, VersionFormatError
from semverstore.versioning import parse_version


class Source(BaseModel):
    """
    Where the version is kept and how to reach it.

    Only the fields of the selected ``driver`` are used. Secrets are kept out
    of ``repr``.
    """

    model_config = ConfigDict(extra="ignore")

    driver: str = DriverEnum.unspecified.value
    initial_version: Optional[str] = None

    # s3 and gcs
    bucket: Optional[str] = None
    key: Optional[str] = None

    # s3
    access_key_id: Optional[str] = Field(default=None, repr=False)
    secret_access_key: Optional[str] = Field(default=None, repr=False)
    session_token: Optional[str] = Field(default=None, repr=False)
    region_name: Optional[str] = None
    endpoint: Optional[str] = None
    disable_ssl: bool = False
    skip_ssl_verification: bool = False
    server_side_encryption: Optional[str] = None
    sse_kms_key_id: Optional[str] = None
    role_arn: Optional[str] = None

    # git
    uri: Optional[str] = None
    branch: Optional[str] = None
    file: Optional[str] = None
    private_key: Optional[str] = Field(default=None, repr=False)
    username: Optional[str] = None
    password: Optional[str] = Field(default=None, repr=False)
    git_user: Optional[str] = None
    commit_message: str = DEFAULT_COMMIT_MESSAGE

    # gcs
    json_key: Optional[str] = Field(default=None, repr=False)

    @field_validator("driver", mode="before")
    @classmethod
    def normalize_driver(cls, v):
        if v is None or str(v).strip() == "":
            return DriverEnum.unspecified.value
        return str(v).strip().lower()

    @field_validator("initial_version", mode="before")
    @classmethod
    def stringify_initial_version(cls, v):
        # YAML reads an unquoted 1.0 as a float
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    def get_initial_version(self) -> Version:
        """
        The version reported while nothing is stored yet.

        Raises:
            ConfigurationError: If ``initial_version`` is not a valid version
        """
        if not self.initial_version:
            return parse_version(DEFAULT_INITIAL_VERSION)
        try:
            return parse_version(self.initial_version)
        except VersionFormatError as e:
            raise ConfigurationError(
                f"invalid initial version ({self.initial_version}): {e}"
            ) from e

    @classmethod
    def from_yaml(cls, path_or_content: Union[str, Path]) -> "Source":
        """Load a source from a YAML file or string content."""
        try:
            if isinstance(path_or_content, Path) or "\n" not in str(path_or_content):
                with open(path_or_content, "r") as f:
                    data = yaml.safe_load(f)
            else:
                data = yaml.safe_load(str(path_or_content))
        except yaml.YAMLError as e:
            raise ConfigurationError(f"source configuration is not valid YAML: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError("source configuration must be a mapping")
        # a host tool payload nests the record under "source"
        if isinstance(data.get("source"), dict):
            data = data["source"]

        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError(f"invalid source configuration:\n{e}") from e
