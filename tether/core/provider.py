from __future__ import annotations

from typing import Any, Dict, Optional, Type, TypeVar

import structlog

from .binding import Accessor, ValueKind, accessor_table, convert, lookup, view_class
from .environment import DEFAULT_ENVIRONMENT, Environment
from .source import ConfigurationSource, Refreshable, Snapshot

T = TypeVar("T")

_log = structlog.get_logger(__name__)


class ConfigurationProvider:
    """Typed access to a configuration source scoped to one environment.

    Nothing is cached: :meth:`get` and every accessor of a view returned by
    :meth:`bind` read a fresh snapshot from the source, so values follow the
    source's refresh cadence without re-binding.

    Args:
        source: Source to read snapshots from.
        environment: Environment passed to the source on every read.
        refresh_strategy: Optional strategy initialized with ``source`` now
            and shut down by :meth:`close`.
        logger: Optional structlog logger.
        close_source: Also close ``source`` in :meth:`close`; for providers
            that built their own source.
    """

    def __init__(
        self,
        source: ConfigurationSource,
        environment: Environment = DEFAULT_ENVIRONMENT,
        refresh_strategy: Optional[Any] = None,
        logger: Optional[Any] = None,
        close_source: bool = False,
    ):
        self.source = source
        self.close_source = close_source
        self.environment = environment
        self.refresh_strategy = refresh_strategy
        self._log = (logger or _log).bind(environment=environment.name)

        if refresh_strategy is not None:
            if not isinstance(source, Refreshable):
                raise TypeError(f"Source {source!r} is not refreshable")
            refresh_strategy.init(source)

    def snapshot(self) -> Snapshot:
        """Return the current snapshot of the whole environment."""
        return self.source.get_configuration(self.environment)

    def get(self, key: str, type_: Type[T] = str) -> T:  # type: ignore[assignment]
        """Read ``key`` and convert it to ``type_``.

        Args:
            key: Dot-delimited configuration key.
            type_: Target type, e.g. ``int`` or ``List[bool]``.

        Returns:
            Converted value.

        Raises:
            MissingKeyError: If the key is absent.
            ConversionError: If the value cannot be converted.
        """
        return convert(key, lookup(self.snapshot(), key), type_)

    def bind(self, prefix: str, interface: Type[T]) -> T:
        """Bind ``interface`` under ``prefix`` and return a live view.

        Every accessor is checked against the current snapshot before the
        view is returned, so a view is never handed out half-valid.

        Args:
            prefix: Key prefix; ``""`` binds method names as top-level keys.
            interface: Class whose annotated public methods describe the keys.

        Returns:
            Instance of ``interface`` whose accessors read live values.

        Raises:
            MissingKeyError: If a key required by the interface is absent.
            ConversionError: If a value cannot be converted.
        """
        accessors = accessor_table(interface, prefix)
        self._validate(accessors, self.snapshot())
        self._log.debug("configuration_bound", prefix=prefix, interface=interface.__name__)
        return view_class(interface)(self, prefix, accessors)

    def _validate(self, accessors: Dict[str, Accessor], snapshot: Snapshot) -> None:
        for accessor in accessors.values():
            if accessor.kind is ValueKind.INTERFACE:
                self._validate(accessor_table(accessor.target, accessor.key), snapshot)
            else:
                convert(accessor.key, lookup(snapshot, accessor.key), accessor.target)

    def _resolve(self, accessor: Accessor) -> Any:
        if accessor.kind is ValueKind.INTERFACE:
            return self.bind(accessor.key, accessor.target)
        return convert(accessor.key, lookup(self.snapshot(), accessor.key), accessor.target)

    def close(self) -> None:
        """Shut down the refresh strategy, then close an owned source."""
        if self.refresh_strategy is not None:
            self.refresh_strategy.shutdown()
        if self.close_source:
            close = getattr(self.source, "close", None)
            if close is not None:
                close()

    def __enter__(self) -> "ConfigurationProvider":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
