"""Configuration source implementations.

This package contains the git repository source plus local directory and
in-memory sources satisfying the same contract.
"""

from .files import FilesConfigurationSource
from .git import GitConfigurationSource, GitSourceOptions, create_git_configuration_source
from .memory import MemoryConfigurationSource

__all__ = [
    "FilesConfigurationSource",
    "GitConfigurationSource",
    "GitSourceOptions",
    "MemoryConfigurationSource",
    "create_git_configuration_source",
]
