"""Source protocols for configuration backends."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional, Protocol, runtime_checkable

from .environment import Environment

Snapshot = Mapping[str, str]


@runtime_checkable
class Refreshable(Protocol):
    """Anything whose backing state can be re-synced on demand."""

    def refresh(self) -> None:
        """Re-sync the backing state.

        Raises:
            SynchronizationError: If the backing store cannot be synchronized.
        """
        ...


class ConfigurationSource(Protocol):
    """Protocol defining the interface for configuration sources.

    A source is pull-based: every call returns a fresh, read-only snapshot of
    flat ``key -> value`` pairs. Sources never cache snapshots themselves.
    """

    def get_configuration(self, environment: Optional[Environment] = None) -> Snapshot:
        """Return the snapshot for ``environment``.

        Args:
            environment: Environment to read; ``None`` means the default one.

        Returns:
            Read-only mapping of dot-delimited keys to string values.

        Raises:
            MissingEnvironmentError: If the environment cannot be resolved.
            ConfigurationReadError: If the backing store cannot be read.
        """
        ...


def freeze_snapshot(data: Mapping[str, str]) -> Snapshot:
    """Copy ``data`` into a read-only mapping."""
    return MappingProxyType(dict(data))
