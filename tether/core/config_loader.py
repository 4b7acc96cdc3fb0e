"""Configuration loader for tether.yaml files.

Example::

    source:
      type: git
      uri: https://example.com/configs.git
      default_branch: master
      files: [application.properties, otherConfig.properties]
    environment: production
    refresh:
      interval: 60
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .environment import Environment
from .provider import ConfigurationProvider

CONFIG_FILE_NAME = "tether.yaml"

_GIT_OPTION_KEYS = {
    "tmp_path": "tmp_path",
    "local_repository_path_in_temp": "local_repository_path_in_temp",
    "default_branch": "default_branch",
    "files": "config_files_provider",
}


class ConfigLoader:
    """Handles loading and parsing of tether.yaml configuration files."""

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """Initialize config loader.

        Args:
            config_path: Path to tether.yaml file. If None, looks in current
                directory and parent directories.
        """
        self.config_path = self._find_config_file(config_path)
        self._config: Optional[Dict[str, Any]] = None

    def _find_config_file(
        self, config_path: Optional[Union[str, Path]] = None
    ) -> Optional[Path]:
        if config_path is not None:
            path = Path(config_path)
            if path.exists():
                return path
            return None

        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILE_NAME
            if candidate.exists():
                return candidate
            if current == current.parent:
                return None
            current = current.parent

    def load(self) -> Dict[str, Any]:
        """Load the configuration file.

        Returns:
            Parsed configuration dictionary, or empty dict if no config file.

        Raises:
            ValueError: If the config file is not valid YAML or not a mapping.
        """
        if self.config_path is None:
            return {}

        if self._config is not None:
            return self._config

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE_NAME} at {self.config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"{self.config_path} must contain a mapping")
        self._config = data
        return self._config

    def get_source_config(self) -> Dict[str, Any]:
        """Return the ``source`` section.

        Raises:
            ValueError: If no source is declared.
        """
        source = self.load().get("source")
        if not source:
            where = self.config_path or CONFIG_FILE_NAME
            raise ValueError(f"No 'source' section found in {where}")
        return source

    def get_environment(self) -> Environment:
        """Return the declared environment, or the default one."""
        return Environment(str(self.load().get("environment") or ""))

    def get_refresh_interval(self) -> Optional[float]:
        """Return ``refresh.interval`` in seconds, if declared."""
        refresh = self.load().get("refresh") or {}
        interval = refresh.get("interval")
        return float(interval) if interval is not None else None

    def build_source(self) -> Any:
        """Construct the source declared in the ``source`` section.

        Returns:
            A git or files configuration source.

        Raises:
            ValueError: If the section is incomplete or the type is unknown.
            SourceConstructionError: If a git clone fails.
        """
        config = self.get_source_config()
        source_type = config.get("type", "git")

        if source_type == "git":
            from ..sources.git import create_git_configuration_source

            if "uri" not in config:
                raise ValueError("Git source must have a 'uri'")
            options = {
                option: config[key]
                for key, option in _GIT_OPTION_KEYS.items()
                if key in config
            }
            return create_git_configuration_source(config["uri"], **options)

        if source_type == "files":
            from ..sources.files import FilesConfigurationSource

            if "path" not in config:
                raise ValueError("Files source must have a 'path'")
            root = Path(config["path"])
            if not root.is_absolute() and self.config_path is not None:
                root = self.config_path.parent / root
            return FilesConfigurationSource(root, config_files=config.get("files"))

        raise ValueError(f"Unsupported source type: {source_type}")

    def build_provider(self, environment: Optional[Environment] = None) -> ConfigurationProvider:
        """Construct a provider over the declared source.

        Args:
            environment: Overrides the declared environment.

        Returns:
            Provider with a periodic refresh strategy when ``refresh.interval``
            is set. The provider owns its source: closing the provider also
            closes the source and removes a git clone.
        """
        from ..refresh.strategies import PeriodicalRefreshStrategy

        interval = self.get_refresh_interval()
        strategy = PeriodicalRefreshStrategy(interval) if interval else None
        source = self.build_source()
        try:
            return ConfigurationProvider(
                source,
                environment=environment or self.get_environment(),
                refresh_strategy=strategy,
                close_source=True,
            )
        except Exception:
            close = getattr(source, "close", None)
            if close is not None:
                close()
            raise
