from __future__ import annotations

import threading
from typing import Dict, Mapping, Optional

from ..core.environment import DEFAULT_ENVIRONMENT, Environment
from ..core.errors import MissingEnvironmentError
from ..core.source import Snapshot, freeze_snapshot


class MemoryConfigurationSource:
    """Configuration source backed by in-memory mappings.

    ``data`` serves the default environment; ``environments`` maps further
    environment names to their own mappings.
    """

    def __init__(
        self,
        data: Optional[Mapping[str, str]] = None,
        environments: Optional[Mapping[str, Mapping[str, str]]] = None,
    ):
        self._lock = threading.Lock()
        self._data: Dict[str, Dict[str, str]] = {}
        for name, values in (environments or {}).items():
            self._data[Environment(name).name] = dict(values)
        self._data[DEFAULT_ENVIRONMENT.name] = dict(data or {})

    def get_configuration(self, environment: Optional[Environment] = None) -> Snapshot:
        name = (environment or DEFAULT_ENVIRONMENT).name
        with self._lock:
            if name not in self._data:
                raise MissingEnvironmentError(environment)
            return freeze_snapshot(self._data[name])

    def update(self, data: Mapping[str, str], environment: Optional[Environment] = None) -> None:
        """Replace the mapping served for ``environment``."""
        name = (environment or DEFAULT_ENVIRONMENT).name
        with self._lock:
            self._data[name] = dict(data)

    def refresh(self) -> None:
        pass
