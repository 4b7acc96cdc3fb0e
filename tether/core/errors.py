"""Error taxonomy for configuration sources and bindings."""

from __future__ import annotations

from typing import Any, Optional


class TetherError(Exception):
    """Base class for every error raised by tether."""


class SourceConstructionError(TetherError):
    """A source could not be constructed (bad remote, unusable clone directory)."""


class SynchronizationError(TetherError):
    """A source failed to re-sync its backing store with the remote."""


class ConfigurationReadError(TetherError):
    """The backing store could not be read (e.g. a required file is missing)."""


class MissingEnvironmentError(ConfigurationReadError):
    """The requested environment does not map to an existing location.

    Raised instead of a plain read error so callers can tell an environment
    that is not deployed yet apart from a broken source.
    """

    def __init__(self, environment: Any, message: Optional[str] = None):
        self.environment = environment
        super().__init__(message or f"Missing environment: {environment}")


class MissingKeyError(TetherError, LookupError):
    """A key is absent from the current snapshot."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"No configuration value for key: {key!r}")


class ConversionError(TetherError, ValueError):
    """A value is present but cannot be converted to the requested type."""

    def __init__(self, key: str, value: str, target: Any, reason: Optional[str] = None):
        self.key = key
        self.value = value
        self.target = target
        message = f"Cannot convert {value!r} (key {key!r}) to {_type_name(target)}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


def _type_name(target: Any) -> str:
    return getattr(target, "__name__", None) or str(target)
