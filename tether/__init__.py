"""Tether - live, typed configuration.

Read flat configuration from pluggable sources (including a git repository),
scope it by environment, keep it fresh with a refresh strategy and bind it to
typed views that always reflect the latest snapshot.
"""

from .core.environment import Environment, DEFAULT_ENVIRONMENT
from .core.errors import (
    TetherError,
    SourceConstructionError,
    SynchronizationError,
    ConfigurationReadError,
    MissingEnvironmentError,
    MissingKeyError,
    ConversionError,
)
from .core.provider import ConfigurationProvider
from .core.source import ConfigurationSource, Refreshable
from .refresh import OnInitRefreshStrategy, PeriodicalRefreshStrategy
from .sources import (
    FilesConfigurationSource,
    GitConfigurationSource,
    GitSourceOptions,
    MemoryConfigurationSource,
    create_git_configuration_source,
)

__all__ = [
    "Environment",
    "DEFAULT_ENVIRONMENT",
    "TetherError",
    "SourceConstructionError",
    "SynchronizationError",
    "ConfigurationReadError",
    "MissingEnvironmentError",
    "MissingKeyError",
    "ConversionError",
    "ConfigurationProvider",
    "ConfigurationSource",
    "Refreshable",
    "OnInitRefreshStrategy",
    "PeriodicalRefreshStrategy",
    "FilesConfigurationSource",
    "GitConfigurationSource",
    "GitSourceOptions",
    "MemoryConfigurationSource",
    "create_git_configuration_source",
]
