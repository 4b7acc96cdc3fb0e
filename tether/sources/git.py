"""Configuration source backed by a remote git repository.

Each source owns one private clone. Reads check out the branch the
environment resolves to and merge the configured properties files found
under the resolved sub-path; :meth:`GitConfigurationSource.refresh` fetches
from the remote. Reads never touch the network.
"""

from __future__ import annotations

import os
import shutil
import subprocess
import tempfile
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Sequence, Set, Union

import structlog

from ..core.environment import (
    DEFAULT_BRANCH,
    DEFAULT_ENVIRONMENT,
    AllButFirstTokenPathResolver,
    BranchResolver,
    Environment,
    FirstTokenBranchResolver,
    PathResolver,
)
from ..core.errors import MissingEnvironmentError, SourceConstructionError, SynchronizationError
from ..core.source import Snapshot
from .files import ConfigFilesProvider, as_files_provider, read_configuration_files, resolve_sub_path

DEFAULT_LOCAL_REPOSITORY_PATH = "tether-git-config-repository"

_log = structlog.get_logger(__name__)


def _run_git(cwd: Path, args: List[str]) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
        env={**os.environ, "GIT_TERMINAL_PROMPT": "0"},
    )
    return result.stdout.strip()


def _git_error(e: subprocess.CalledProcessError) -> str:
    return (e.stderr or e.stdout or str(e)).strip()


def _normalize_uri(uri: str) -> str:
    # git runs inside the clone directory, so local paths must be absolute
    if "://" not in uri and Path(uri).exists():
        return str(Path(uri).resolve())
    return uri


@dataclass
class GitSourceOptions:
    """Named options for :class:`GitConfigurationSource`.

    Attributes:
        repository_uri: Remote to clone (URL or local path). Required.
        tmp_path: Directory the clone is created in; defaults to the system temp dir.
        local_repository_path_in_temp: Name prefix of the clone directory.
        default_branch: Branch used for the default environment.
        branch_resolver: Maps an environment to a branch name.
        path_resolver: Maps an environment to a sub-path inside the branch.
        config_files_provider: Ordered relative files to read and merge.
        logger: Optional structlog logger.
    """

    repository_uri: str
    tmp_path: Optional[Union[str, Path]] = None
    local_repository_path_in_temp: str = DEFAULT_LOCAL_REPOSITORY_PATH
    default_branch: str = DEFAULT_BRANCH
    branch_resolver: Optional[BranchResolver] = None
    path_resolver: Optional[PathResolver] = None
    config_files_provider: Optional[Union[ConfigFilesProvider, Sequence[Union[str, Path]]]] = None
    logger: Optional[Any] = None

    def validate(self) -> None:
        """Raise ``ValueError`` if a required option is missing."""
        if not self.repository_uri or not str(self.repository_uri).strip():
            raise ValueError("repository_uri is required")
        if not self.local_repository_path_in_temp:
            raise ValueError("local_repository_path_in_temp must not be empty")
        if not self.default_branch:
            raise ValueError("default_branch must not be empty")


class GitConfigurationSource:
    """Configuration source reading properties files from a git repository.

    Construction clones ``options.repository_uri`` into a fresh directory;
    :meth:`close` removes it. Checkout, fetch and reset on the clone are
    serialized by a per-source lock.

    Raises:
        ValueError: If the options are invalid.
        SourceConstructionError: If the clone directory or the clone cannot be created.
    """

    def __init__(self, options: GitSourceOptions):
        options.validate()
        self.options = options
        self.repository_uri = _normalize_uri(str(options.repository_uri).strip())
        self.branch_resolver = options.branch_resolver or FirstTokenBranchResolver(options.default_branch)
        self.path_resolver = options.path_resolver or AllButFirstTokenPathResolver()
        self.config_files_provider = as_files_provider(options.config_files_provider)
        self._log = (options.logger or _log).bind(repository=self.repository_uri)

        self._lock = threading.RLock()
        self._closed = False
        self._branch: Optional[str] = None
        self._remote_branches: Set[str] = set()
        self.work_path: Optional[Path] = None

        tmp_path = Path(options.tmp_path) if options.tmp_path else Path(tempfile.gettempdir())
        try:
            self.work_path = Path(tempfile.mkdtemp(prefix=f"{options.local_repository_path_in_temp}-", dir=tmp_path))
        except OSError as e:
            raise SourceConstructionError(f"Unable to create local clone directory in {tmp_path}: {e}") from e

        self._log.info("git_clone_started", work_path=str(self.work_path))
        try:
            _run_git(self.work_path, ["clone", "--quiet", self.repository_uri, "."])
            self._remote_branches = self._list_remote_branches()
        except subprocess.CalledProcessError as e:
            self.close()
            raise SourceConstructionError(f"Unable to clone {self.repository_uri}: {_git_error(e)}") from e
        except OSError as e:
            self.close()
            raise SourceConstructionError(f"Unable to run git: {e}") from e

        self._branch = self._current_branch()
        self._log.info("git_clone_completed", branch=self._branch)

    def _current_branch(self) -> Optional[str]:
        try:
            return _run_git(self.work_path, ["symbolic-ref", "--quiet", "--short", "HEAD"]) or None
        except subprocess.CalledProcessError:
            # detached HEAD
            return None

    def _list_remote_branches(self) -> Set[str]:
        # refreshed only after clone and fetch
        output = _run_git(self.work_path, ["for-each-ref", "--format=%(refname:strip=3)", "refs/remotes/origin"])
        return {line for line in output.splitlines() if line and line != "HEAD"}

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError(f"Git configuration source for {self.repository_uri} is closed")

    def _checkout(self, environment: Environment, branch: str) -> None:
        if branch not in self._remote_branches:
            raise MissingEnvironmentError(
                environment,
                f"Branch {branch!r} (environment {environment.name!r}) does not exist in {self.repository_uri}",
            )
        if branch == self._branch:
            return
        try:
            _run_git(self.work_path, ["checkout", "--quiet", "--force", "-B", branch, f"refs/remotes/origin/{branch}"])
        except subprocess.CalledProcessError as e:
            raise SynchronizationError(f"Unable to check out branch {branch!r}: {_git_error(e)}") from e
        self._log.debug("git_branch_checked_out", branch=branch, previous=self._branch)
        self._branch = branch

    def get_configuration(self, environment: Optional[Environment] = None) -> Snapshot:
        """Read the merged configuration files for ``environment``.

        Args:
            environment: Environment to read; ``None`` means the default one.

        Returns:
            Read-only merged snapshot.

        Raises:
            MissingEnvironmentError: If the resolved branch does not exist.
            SynchronizationError: If the branch cannot be checked out.
            ConfigurationReadError: If a configured file is missing.
        """
        if environment is None:
            environment = DEFAULT_ENVIRONMENT
        branch = self.branch_resolver(environment)
        sub_path = self.path_resolver(environment)

        with self._lock:
            self._ensure_open()
            self._checkout(environment, branch)
            base = resolve_sub_path(self.work_path, sub_path)
            return read_configuration_files(base, self.config_files_provider(), logger=self._log)

    def refresh(self) -> None:
        """Fetch from the remote and reset the checked-out branch to it.

        Raises:
            SynchronizationError: If the remote is unreachable or the branch vanished.
        """
        with self._lock:
            self._ensure_open()
            try:
                _run_git(self.work_path, ["fetch", "--quiet", "--prune", "origin"])
                self._remote_branches = self._list_remote_branches()
                if self._branch is not None and self._branch in self._remote_branches:
                    _run_git(self.work_path, ["reset", "--quiet", "--hard", f"refs/remotes/origin/{self._branch}"])
            except subprocess.CalledProcessError as e:
                raise SynchronizationError(f"Unable to synchronize with {self.repository_uri}: {_git_error(e)}") from e
            self._log.debug("git_refreshed", branch=self._branch)

    def close(self) -> None:
        """Remove the local clone. Idempotent."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            if self.work_path is None:
                return
            try:
                shutil.rmtree(self.work_path)
            except FileNotFoundError:
                pass
            except OSError as e:
                self._log.warning("git_clone_cleanup_failed", work_path=str(self.work_path), error=str(e))
            else:
                self._log.info("git_clone_removed", work_path=str(self.work_path))

    def __enter__(self) -> "GitConfigurationSource":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"GitConfigurationSource(repository={self.repository_uri!r}, branch={self._branch!r}, work_path={str(self.work_path)!r})"


def create_git_configuration_source(repository_uri: str, **options: Any) -> GitConfigurationSource:
    """Build a :class:`GitConfigurationSource` from keyword options.

    Args:
        repository_uri: Remote to clone.
        **options: Any other :class:`GitSourceOptions` field.

    Returns:
        A source holding a fresh clone of ``repository_uri``.
    """
    return GitConfigurationSource(GitSourceOptions(repository_uri=repository_uri, **options))
