"""Local directory configuration source and the shared file reader."""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Any, Callable, List, Optional, Sequence, Union

import structlog

from ..core.environment import DEFAULT_ENVIRONMENT, DefaultPathResolver, Environment, PathResolver
from ..core.errors import ConfigurationReadError, MissingEnvironmentError
from ..core.merge import merge_snapshots
from ..core.source import Snapshot
from ..properties import load_properties

DEFAULT_CONFIG_FILE = "application.properties"

ConfigFilesProvider = Callable[[], Sequence[Union[str, Path]]]

_log = structlog.get_logger(__name__)


def default_config_files() -> List[Path]:
    """A single ``application.properties`` at the root of the resolved path."""
    return [Path(DEFAULT_CONFIG_FILE)]


def as_files_provider(
    files: Optional[Union[ConfigFilesProvider, Sequence[Union[str, Path]]]],
) -> ConfigFilesProvider:
    """Accept either a provider callable or a plain list of relative paths."""
    if files is None:
        return default_config_files
    if callable(files):
        return files
    paths = [Path(f) for f in files]
    return lambda: list(paths)


def resolve_sub_path(base: Path, sub_path: str) -> Path:
    """Join ``sub_path`` (``/``-separated, relative) onto ``base``."""
    parts = [p for p in PurePosixPath(sub_path.strip("/")).parts if p not in ("", ".")]
    if ".." in parts:
        raise ConfigurationReadError(f"Path escapes configuration root: {sub_path!r}")
    return base.joinpath(*parts)


def read_configuration_files(
    base: Path,
    files: Sequence[Union[str, Path]],
    logger: Optional[Any] = None,
) -> Snapshot:
    """Read and merge properties files relative to ``base``.

    Args:
        base: Directory the file paths are relative to.
        files: Ordered relative paths; later files override earlier ones.
        logger: Optional structlog logger.

    Returns:
        Merged read-only snapshot.

    Raises:
        ConfigurationReadError: If any file is missing or unreadable.
    """
    parts = []
    for relative in files:
        path = base / Path(relative)
        try:
            parts.append((str(relative), load_properties(path)))
        except FileNotFoundError:
            raise ConfigurationReadError(f"Configuration file not found: {path}") from None
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigurationReadError(f"Unable to read configuration file {path}: {e}") from e
    return merge_snapshots(parts, logger=logger)


class FilesConfigurationSource:
    """Configuration source for properties files in a local directory.

    The environment selects a sub-directory of ``root`` through
    ``path_resolver``; ``config_files`` lists the files read there.
    """

    def __init__(
        self,
        root: Union[str, Path],
        path_resolver: Optional[PathResolver] = None,
        config_files: Optional[Union[ConfigFilesProvider, Sequence[Union[str, Path]]]] = None,
        logger: Optional[Any] = None,
    ):
        self.root = Path(root)
        self.path_resolver = path_resolver or DefaultPathResolver()
        self.config_files_provider = as_files_provider(config_files)
        self._log = (logger or _log).bind(source=f"files:{self.root}")

    def get_configuration(self, environment: Optional[Environment] = None) -> Snapshot:
        environment = environment or DEFAULT_ENVIRONMENT
        base = resolve_sub_path(self.root, self.path_resolver(environment))
        if not base.is_dir():
            raise MissingEnvironmentError(environment, f"No configuration directory for environment {environment.name!r}: {base}")
        return read_configuration_files(base, self.config_files_provider(), logger=self._log)

    def refresh(self) -> None:
        # files are re-read on every call
        pass
