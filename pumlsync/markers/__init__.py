"""Marker records linking a diagram source file to its rendered target."""

from pumlsync.markers.helpers import (
    get_diagram_marker,
    get_marker,
    is_derived,
    mark_derived,
    update_marker,
)
from pumlsync.markers.memory_store import InMemoryMarkerStore
from pumlsync.markers.models import (
    DERIVED_MARKER,
    DIAGRAM_MARKER,
    DIAGRAM_SOURCE_ATTRIBUTE,
    ORIGINAL_PATH_ATTRIBUTE,
    TARGET_PATH_ATTRIBUTE,
    Marker,
)
from pumlsync.markers.sqlite_store import SQLiteMarkerStore
from pumlsync.markers.store import MarkerStore

__all__ = [
    "DERIVED_MARKER",
    "DIAGRAM_MARKER",
    "DIAGRAM_SOURCE_ATTRIBUTE",
    "InMemoryMarkerStore",
    "Marker",
    "MarkerStore",
    "ORIGINAL_PATH_ATTRIBUTE",
    "SQLiteMarkerStore",
    "TARGET_PATH_ATTRIBUTE",
    "get_diagram_marker",
    "get_marker",
    "is_derived",
    "mark_derived",
    "update_marker",
]
