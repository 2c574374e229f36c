"""Find-or-create and attribute-merge helpers over a MarkerStore.

Marker bookkeeping is best effort: every MarkerError raised by the store is
logged at debug level and swallowed, leaving the marker state unchanged.
"""

from __future__ import annotations

import logging
from pathlib import PurePosixPath
from typing import Any

from pumlsync.errors import MarkerError
from pumlsync.markers.models import (
    DERIVED_MARKER,
    DIAGRAM_MARKER,
    DIAGRAM_SOURCE_ATTRIBUTE,
    ORIGINAL_PATH_ATTRIBUTE,
    TARGET_PATH_ATTRIBUTE,
    Marker,
)
from pumlsync.markers.store import MarkerStore

logger = logging.getLogger(__name__)


def get_marker(store: MarkerStore, path: str, kind: str, create: bool) -> Marker | None:
    """Return the marker of *kind* on *path*, creating it when asked."""
    try:
        markers = store.find(path, kind)
        if markers:
            if len(markers) > 1:
                logger.debug("%d %s markers on %s, using the oldest", len(markers), kind, path)
            return markers[0]
        if create:
            return store.create(path, kind)
    except MarkerError as e:
        logger.debug("marker lookup failed for %s: %s", path, e)
    return None


def get_diagram_marker(store: MarkerStore, path: str, create: bool = False) -> Marker | None:
    return get_marker(store, path, DIAGRAM_MARKER, create)


def update_marker(
    store: MarkerStore,
    path: str,
    text_diagram: str,
    target: str | PurePosixPath | None,
    create: bool,
    marker_attributes: dict[str, Any] | None = None,
) -> Marker | None:
    """Merge *marker_attributes* with the bookkeeping fields and store them.

    Caller attributes are applied first; ``original``, ``diagramSource`` and
    ``target`` always overwrite them. Without an explicit *target* the one
    already recorded on the marker is kept.
    """
    marker = get_diagram_marker(store, path, create)
    if marker is None:
        return None

    if target is None:
        try:
            recorded = store.get_attribute(marker, TARGET_PATH_ATTRIBUTE)
            if isinstance(recorded, str):
                target = recorded
        except MarkerError as e:
            logger.debug("could not read target of %s: %s", path, e)

    attributes: dict[str, Any] = {}
    if marker_attributes:
        attributes.update(marker_attributes)
    attributes[ORIGINAL_PATH_ATTRIBUTE] = path
    attributes[DIAGRAM_SOURCE_ATTRIBUTE] = text_diagram
    attributes[TARGET_PATH_ATTRIBUTE] = str(target) if target is not None else None

    try:
        logger.debug("updating marker for %s: target=%s", path, attributes[TARGET_PATH_ATTRIBUTE])
        return store.set_attributes(marker, attributes)
    except MarkerError as e:
        logger.debug("could not update marker for %s: %s", path, e)
        return marker


def mark_derived(store: MarkerStore, path: str) -> None:
    """Flag *path* as generated output."""
    get_marker(store, path, DERIVED_MARKER, create=True)


def is_derived(store: MarkerStore, path: str) -> bool:
    return get_marker(store, path, DERIVED_MARKER, create=False) is not None
