"""
Credential resolution and transport clients for the store backends.

Credentials are resolved once, when a store is built; the stores themselves
only ever see a ready client (or, for git, a ready URI and environment).
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence
from urllib.parse import quote, urlsplit, urlunsplit

import boto3
from botocore import UNSIGNED
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from semverstore.constants import DEFAULT_REGION, MAX_RETRIES
from semverstore.model import Source
from semverstore.versioning import ConfigurationError

logger = logging.getLogger(__name__)

S3Credentials = Dict[str, str]
CredentialProvider = Callable[[Source], Optional[S3Credentials]]


def static_keys(source: Source) -> Optional[S3Credentials]:
    """Access keys given in the source."""
    if not source.access_key_id and not source.secret_access_key:
        return None
    if not (source.access_key_id and source.secret_access_key):
        raise ConfigurationError(
            "access_key_id and secret_access_key must be given together"
        )
    credentials = {
        "aws_access_key_id": source.access_key_id,
        "aws_secret_access_key": source.secret_access_key,
    }
    if source.session_token:
        credentials["aws_session_token"] = source.session_token
    return credentials


def assumed_role(source: Source) -> Optional[S3Credentials]:
    """
    Temporary credentials for ``role_arn``, obtained with the ambient
    (instance role, environment or profile) credentials.

    Returns None, meaning "fall through to anonymous access", when there are
    no ambient credentials to assume the role with.
    """
    if not source.role_arn:
        return None

    session = boto3.session.Session(region_name=source.region_name or DEFAULT_REGION)
    if session.get_credentials() is None:
        logger.warning(
            f"No instance credentials available to assume {source.role_arn}, "
            "falling back to anonymous access"
        )
        return None

    try:
        resp = session.client("sts").assume_role(
            RoleArn=source.role_arn, RoleSessionName="semverstore"
        )
    except (ClientError, BotoCoreError) as e:
        raise ConfigurationError(f"could not assume role {source.role_arn}: {e}") from e

    creds = resp["Credentials"]
    return {
        "aws_access_key_id": creds["AccessKeyId"],
        "aws_secret_access_key": creds["SecretAccessKey"],
        "aws_session_token": creds["SessionToken"],
    }


# Tried in order; anonymous access when none of them applies
S3_CREDENTIAL_PROVIDERS: Sequence[CredentialProvider] = (static_keys, assumed_role)


def resolve_s3_credentials(
    source: Source,
    providers: Sequence[CredentialProvider] = S3_CREDENTIAL_PROVIDERS,
) -> Optional[S3Credentials]:
    """
    Resolve S3 credentials for a source.

    Returns:
        boto3 client keyword arguments, or None for anonymous access
    """
    for provider in providers:
        credentials = provider(source)
        if credentials is not None:
            logger.debug(f"Using S3 credentials from {provider.__name__}")
            return credentials
    logger.debug("No S3 credentials configured, using anonymous access")
    return None


def s3_endpoint_url(endpoint: Optional[str], disable_ssl: bool = False) -> Optional[str]:
    """Add a scheme to bare "host:port" endpoints."""
    if not endpoint:
        return None
    if "://" in endpoint:
        return endpoint
    scheme = "http" if disable_ssl else "https"
    return f"{scheme}://{endpoint}"


def make_s3_client(source: Source, max_retries: int = MAX_RETRIES) -> Any:
    """
    Build a boto3 S3 client for a source.

    Path-style addressing is always used so that S3-compatible servers
    (MinIO, Ceph) work without DNS bucket names.
    """
    credentials = resolve_s3_credentials(source)
    config = Config(
        region_name=source.region_name or DEFAULT_REGION,
        retries={"max_attempts": max_retries, "mode": "standard"},
        s3={"addressing_style": "path"},
    )
    if credentials is None:
        config = config.merge(Config(signature_version=UNSIGNED))
        credentials = {}

    return boto3.session.Session().client(
        "s3",
        endpoint_url=s3_endpoint_url(source.endpoint, source.disable_ssl),
        use_ssl=not source.disable_ssl,
        verify=False if source.skip_ssl_verification else None,
        config=config,
        **credentials,
    )


def make_gcs_client(source: Source) -> Any:
    """Build a GCS client from a service account JSON key, or default credentials."""
    from google.cloud import storage

    if source.json_key:
        try:
            info = json.loads(source.json_key)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"json_key is not valid JSON: {e.msg}") from e
        return storage.Client.from_service_account_info(info)
    return storage.Client()


def authenticated_uri(
    uri: str, username: Optional[str] = None, password: Optional[str] = None
) -> str:
    """Put a username/password into an http(s) repository URI."""
    if not username:
        return uri
    parts = urlsplit(uri)
    if parts.scheme not in ("http", "https"):
        return uri
    userinfo = quote(username, safe="")
    if password:
        userinfo += ":" + quote(password, safe="")
    host = parts.netloc.rsplit("@", 1)[-1]
    return urlunsplit(
        (parts.scheme, f"{userinfo}@{host}", parts.path, parts.query, parts.fragment)
    )


def git_environment(skip_ssl_verification: bool = False) -> Dict[str, str]:
    env = {}
    if skip_ssl_verification:
        env["GIT_SSL_NO_VERIFY"] = "true"
    return env


def write_private_key(private_key: str, directory: Path) -> Path:
    """Write an SSH private key readable only by the current user."""
    key_path = Path(directory) / "id_semverstore"
    fd = os.open(key_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w") as f:
        f.write(private_key if private_key.endswith("\n") else private_key + "\n")
    return key_path


def ssh_command(key_path: Path) -> str:
    return (
        f"ssh -i '{key_path}' -o IdentitiesOnly=yes "
        "-o StrictHostKeyChecking=no -o UserKnownHostsFile=/dev/null"
    )
