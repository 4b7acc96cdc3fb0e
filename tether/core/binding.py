"""Typed views over flat configuration snapshots.

An interface is any class whose public methods carry return annotations::

    class Database(Protocol):
        def host(self) -> str: ...
        def port(self) -> int: ...
        def replicas(self) -> List[str]: ...

Binding it under the prefix ``"db"`` maps ``host()`` to the key ``db.host``.
The accessor table is computed once per bind; values are never stored, so
every accessor call reads the snapshot that is current at call time.
"""

from __future__ import annotations

import collections.abc
import enum
import inspect
import types
import typing
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from .errors import ConversionError, MissingKeyError

if typing.TYPE_CHECKING:
    from .provider import ConfigurationProvider

_TRUE = "true"
_FALSE = "false"

# origins treated as "comma-delimited sequence of T"
_LIST_ORIGINS = (
    list,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Iterable,
    collections.abc.Collection,
)


class ValueKind(enum.Enum):
    """How an accessor turns a raw string into its return value."""

    SCALAR = "scalar"
    SEQUENCE = "sequence"
    INTERFACE = "interface"


@dataclass(frozen=True)
class Accessor:
    """One row of a bound view's dispatch table.

    Attributes:
        name: Method name on the interface.
        key: Full snapshot key.
        kind: Conversion family.
        target: Annotated return type.
    """

    name: str
    key: str
    kind: ValueKind
    target: Any


def compose_key(prefix: str, name: str) -> str:
    """Join a binding prefix and a method name with ``.``."""
    prefix = prefix.strip(".")
    return f"{prefix}.{name}" if prefix else name


def is_interface(target: Any) -> bool:
    """Whether ``target`` should be bound recursively rather than parsed.

    Only classes whose public methods all take no argument besides ``self``
    and declare a return type qualify.
    """
    if not inspect.isclass(target):
        return False
    if issubclass(target, (str, bytes, int, float, Decimal, enum.Enum)):
        return False
    names = _interface_methods(target)
    return bool(names) and all(_is_accessor(inspect.getattr_static(target, name)) for name in names)


def _is_accessor(function: Callable[..., Any]) -> bool:
    try:
        parameters = inspect.signature(function).parameters
    except (TypeError, ValueError):
        return False
    return len(parameters) == 1 and "return" in getattr(function, "__annotations__", {})


def _interface_methods(interface: type) -> List[str]:
    names = []
    for name in dir(interface):
        if name.startswith("_"):
            continue
        if inspect.isfunction(inspect.getattr_static(interface, name, None)):
            names.append(name)
    return names


def _sequence_parts(target: Any) -> Optional[Tuple[Any, Any]]:
    """Return ``(container, element type)`` if ``target`` is a sequence type."""
    origin = typing.get_origin(target)
    args = typing.get_args(target)
    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return tuple, args[0]
        return None
    if origin in _LIST_ORIGINS:
        return list, (args[0] if args else str)
    if target is list:
        return list, str
    return None


def accessor_table(interface: type, prefix: str) -> Dict[str, Accessor]:
    """Enumerate the accessors of ``interface`` once.

    Args:
        interface: Class whose public methods describe the configuration.
        prefix: Key prefix the interface is bound under.

    Returns:
        Mapping of method name to its accessor row.

    Raises:
        TypeError: If ``interface`` exposes no accessor methods.
    """
    names = _interface_methods(interface)
    if not names:
        raise TypeError(f"{interface!r} has no public methods to bind")

    table: Dict[str, Accessor] = {}
    for name in names:
        method = getattr(interface, name)
        try:
            hints = typing.get_type_hints(method)
        except NameError as e:
            raise TypeError(f"Unresolvable annotation on {interface.__name__}.{name}: {e}") from e
        target = hints.get("return", str)
        if _sequence_parts(target) is not None:
            kind = ValueKind.SEQUENCE
        elif is_interface(target):
            kind = ValueKind.INTERFACE
        else:
            kind = ValueKind.SCALAR
        table[name] = Accessor(name=name, key=compose_key(prefix, name), kind=kind, target=target)
    return table


def convert(key: str, raw: str, target: Any) -> Any:
    """Convert a raw snapshot value to ``target``.

    Args:
        key: Key the value was read from, for error reporting.
        raw: Raw string value.
        target: Requested type.

    Returns:
        Converted value.

    Raises:
        ConversionError: If ``raw`` cannot be represented as ``target``.
    """
    if target is Any or target is str:
        return raw

    parts = _sequence_parts(target)
    if parts is not None:
        container, element = parts
        if raw.strip() == "":
            return container()
        return container(convert(key, item.strip(), element) for item in raw.split(","))

    if target is bool:
        lowered = raw.strip().lower()
        if lowered == _TRUE:
            return True
        if lowered == _FALSE:
            return False
        raise ConversionError(key, raw, target, "expected 'true' or 'false'")

    if inspect.isclass(target) and issubclass(target, enum.Enum):
        try:
            return target[raw.strip()]
        except KeyError:
            raise ConversionError(key, raw, target, "no such member") from None

    if target is int:
        try:
            return int(raw.strip())
        except ValueError:
            raise ConversionError(key, raw, target) from None

    if target is float:
        try:
            return float(raw.strip())
        except ValueError:
            raise ConversionError(key, raw, target) from None

    if target is Decimal:
        try:
            return Decimal(raw.strip())
        except InvalidOperation:
            raise ConversionError(key, raw, target) from None

    raise ConversionError(key, raw, target, "unsupported target type")


def lookup(snapshot: Mapping[str, str], key: str) -> str:
    """Fetch ``key`` from ``snapshot`` or raise :class:`MissingKeyError`."""
    try:
        return snapshot[key]
    except KeyError:
        raise MissingKeyError(key) from None


class BoundView:
    """Base class of every view returned by ``ConfigurationProvider.bind``.

    Holds the provider, the prefix and the dispatch table; never a value.
    """

    def __init__(self, provider: "ConfigurationProvider", prefix: str, accessors: Dict[str, Accessor]):
        self._provider = provider
        self._prefix = prefix
        self._accessors = accessors

    def _resolve(self, name: str) -> Any:
        accessor = self._accessors[name]
        return self._provider._resolve(accessor)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} prefix={self._prefix!r}>"


def _make_method(name: str) -> Callable[..., Any]:
    def accessor(self: BoundView) -> Any:
        return self._resolve(name)

    accessor.__name__ = name
    return accessor


_view_classes: Dict[type, type] = {}


def view_class(interface: type) -> type:
    """Return the generated view class implementing ``interface``.

    The class subclasses both :class:`BoundView` and ``interface`` so that
    ``isinstance(view, interface)`` holds. Classes are cached per interface.
    """
    cls = _view_classes.get(interface)
    if cls is None:
        namespace = {name: _make_method(name) for name in _interface_methods(interface)}

        def exec_body(ns: Dict[str, Any]) -> None:
            ns.update(namespace)

        cls = types.new_class(f"Bound{interface.__name__}", (BoundView, interface), exec_body=exec_body)
        _view_classes[interface] = cls
    return cls
