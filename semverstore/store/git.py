"""Git repository version store."""

import logging
import re
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Tuple
from urllib.parse import urlsplit, urlunsplit

from git import Repo
from git.exc import GitCommandError

from semverstore.constants import DEFAULT_COMMIT_MESSAGE
from semverstore.versioning import (
    ConflictRejected,
    TransientIOError,
    Version,
    VersionStoreError,
)
from .base import StoredVersion, VersionStore
from .credentials import ssh_command, write_private_key

logger = logging.getLogger(__name__)

# Push output meaning somebody else moved the branch first
PUSH_CONFLICT_MARKERS = (
    "[rejected]",
    "non-fast-forward",
    "fetch first",
    "stale info",
    "cannot lock ref",
    "failed to update ref",
    "incorrect old value",
)

TRANSIENT_MARKERS = (
    "could not resolve host",
    "connection timed out",
    "connection refused",
    "connection reset",
    "operation timed out",
    "the remote end hung up unexpectedly",
    "early eof",
    "rpc failed",
    "temporary failure",
    "service unavailable",
    "error: 502",
    "error: 503",
    "error: 504",
)

MISSING_BRANCH_MARKERS = ("couldn't find remote ref", "could not find remote ref")


def redact_uri(uri: str) -> str:
    """Drop any user:password part from an http(s) URI."""
    parts = urlsplit(uri)
    if parts.scheme in ("http", "https") and "@" in parts.netloc:
        netloc = parts.netloc.rsplit("@", 1)[1]
        return urlunsplit((parts.scheme, netloc, parts.path, parts.query, ""))
    return uri


def parse_git_user(git_user: str) -> Tuple[str, Optional[str]]:
    """
    Split a "Name <email>" string.

    Returns:
        (name, email); email is None when the string holds a bare name
    """
    match = re.match(r"^\s*(.*?)\s*<([^>]*)>\s*$", git_user)
    if match:
        return match.group(1), match.group(2)
    return git_user.strip(), None


class GitVersionStore(VersionStore):
    """
    Keeps the version in a file on a branch of a git repository.

    The precondition token is the commit the branch pointed to when it was
    fetched. A write commits the new file content on top of that commit and
    pushes it; the remote refuses the push if the branch moved in between
    (non-fast-forward), which is the conflict signal. A branch that does not
    exist yet is created by pushing a root commit, which is likewise refused
    if a concurrent writer created it first.

    Every operation works in its own temporary repository, so one store can
    be used concurrently.

    Args:
        uri: Repository URI, possibly with credentials in it
        branch: Branch holding the version file
        file: Path of the version file inside the repository
        git_user: Committer identity, "Name <email>"
        commit_message: Message template; %version% and %file% are replaced
        env: Extra environment for git commands (e.g. ssl settings)
        private_key: SSH private key; written to a 0600 file for the
            duration of each operation
        work_root: Parent directory for temporary repositories
    """

    def __init__(
        self,
        uri: str,
        branch: str,
        file: str,
        git_user: Optional[str] = None,
        commit_message: str = DEFAULT_COMMIT_MESSAGE,
        env: Optional[Dict[str, str]] = None,
        private_key: Optional[str] = None,
        work_root: Optional[Path] = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.uri = uri
        self.branch = branch
        self.file = file
        self.git_user = git_user
        self.commit_message = commit_message
        self.env = {"GIT_TERMINAL_PROMPT": "0", **(env or {})}
        self.private_key = private_key
        self.work_root = work_root

    @property
    def location(self) -> str:
        return f"{redact_uri(self.uri)}#{self.branch}:{self.file}"

    @contextmanager
    def session(self, operation: str) -> Iterator[Repo]:
        with tempfile.TemporaryDirectory(
            prefix="semverstore-", dir=self.work_root
        ) as tmp:
            work_dir = Path(tmp) / "repo"
            try:
                repo = Repo.init(work_dir)
            except GitCommandError as e:
                raise self._translate(e, operation) from e
            try:
                env = dict(self.env)
                if self.private_key:
                    env["GIT_SSH_COMMAND"] = ssh_command(
                        write_private_key(self.private_key, Path(tmp))
                    )
                repo.git.update_environment(**env)
                try:
                    repo.create_remote("origin", self.uri)
                except GitCommandError as e:
                    # the failed command line holds the URI, credentials included
                    raise self._translate(e, operation) from None
                if self.git_user:
                    name, email = parse_git_user(self.git_user)
                    with repo.config_writer() as cw:
                        cw.set_value("user", "name", name)
                        if email is not None:
                            cw.set_value("user", "email", email)
                logger.debug(f"{operation}: working on {self.location} in {work_dir}")
                yield repo
            finally:
                repo.close()

    def read(self, session: Repo, operation: str) -> StoredVersion:
        repo = session
        remote_ref = f"refs/remotes/origin/{self.branch}"
        try:
            repo.git.fetch("origin", f"+refs/heads/{self.branch}:{remote_ref}")
        except GitCommandError as e:
            if not _matches(e, MISSING_BRANCH_MARKERS):
                raise self._translate(e, operation) from e
            logger.debug(f"branch {self.branch} does not exist yet")
            try:
                self._reset_to_unborn_branch(repo)
            except GitCommandError as reset_error:
                raise self._translate(reset_error, operation) from reset_error
            return StoredVersion(self.initial_version, None, exists=False)

        try:
            repo.git.checkout("-f", "-B", self.branch, remote_ref)
        except GitCommandError as e:
            raise self._translate(e, operation) from e
        token = repo.head.commit.hexsha

        path = Path(repo.working_tree_dir) / self.file
        if not path.is_file():
            return StoredVersion(self.initial_version, token, exists=False)
        return StoredVersion(self._parse_stored(path.read_text(), operation), token)

    def write(
        self, session: Repo, operation: str, version: Version, token: Optional[Any]
    ) -> None:
        repo = session
        path = Path(repo.working_tree_dir) / self.file
        content = f"{version}\n"
        if token is not None and path.is_file() and path.read_text() == content:
            logger.debug(f"{self.location} already holds {version}")
            return

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        message = self.commit_message.replace("%version%", str(version)).replace(
            "%file%", self.file
        )
        try:
            repo.git.add("--", self.file)
            repo.git.commit("-m", message)
        except GitCommandError as e:
            raise VersionStoreError(
                operation, self.location, f"commit failed: {self._stderr(e)}"
            ) from e

        try:
            repo.git.push("origin", f"HEAD:refs/heads/{self.branch}")
        except GitCommandError as e:
            if _matches(e, PUSH_CONFLICT_MARKERS):
                raise ConflictRejected(operation, self.location, "push rejected") from e
            raise self._translate(e, operation) from e

    def _reset_to_unborn_branch(self, repo: Repo) -> None:
        """Point HEAD at an empty, not yet created branch."""
        repo.git.symbolic_ref("HEAD", f"refs/heads/{self.branch}")
        if f"refs/heads/{self.branch}" in [ref.path for ref in repo.heads]:
            repo.git.update_ref("-d", f"refs/heads/{self.branch}")
        repo.git.read_tree("--empty")
        path = Path(repo.working_tree_dir) / self.file
        if path.is_file():
            path.unlink()

    def _stderr(self, err: GitCommandError) -> str:
        stderr = (err.stderr or "").strip()
        # git may echo the remote URL, credentials included
        return stderr.replace(self.uri, redact_uri(self.uri))

    def _translate(self, err: GitCommandError, operation: str) -> VersionStoreError:
        message = self._stderr(err)
        if _matches(err, TRANSIENT_MARKERS):
            return TransientIOError(operation, self.location, message)
        return VersionStoreError(operation, self.location, message)


def _matches(err: GitCommandError, markers: Tuple[str, ...]) -> bool:
    stderr = (err.stderr or "").lower()
    return any(marker in stderr for marker in markers)
