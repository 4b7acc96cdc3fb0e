"""Merging logic for multiple configuration files."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

import structlog

from .source import Snapshot, freeze_snapshot

_log = structlog.get_logger(__name__)


def merge_snapshots(
    parts: Iterable[Tuple[str, Mapping[str, str]]],
    logger: Optional[Any] = None,
) -> Snapshot:
    """Merge several flat mappings into a single snapshot.

    Parts are merged in order with later parts overriding earlier ones for
    the same keys.

    Args:
        parts: ``(origin, mapping)`` pairs; ``origin`` is only used for logging.
        logger: Optional structlog logger.

    Returns:
        Read-only merged snapshot.
    """
    log = logger or _log
    effective: Dict[str, str] = {}
    origins: Dict[str, str] = {}

    for origin, payload in parts:
        for key, value in payload.items():
            if key in effective:
                log.debug(
                    "configuration_key_overridden",
                    key=key,
                    previous_origin=origins[key],
                    origin=origin,
                )
            # last file wins
            effective[key] = value
            origins[key] = origin

    return freeze_snapshot(effective)
