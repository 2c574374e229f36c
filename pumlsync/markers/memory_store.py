"""In-process MarkerStore, used for dry runs and tests."""

from __future__ import annotations

import itertools
from typing import Any

from pumlsync.errors import MarkerError
from pumlsync.markers.models import Marker


class InMemoryMarkerStore:
    def __init__(self) -> None:
        self._markers: dict[int, Marker] = {}
        self._ids = itertools.count(1)

    def find(self, path: str, kind: str) -> list[Marker]:
        return [
            m.model_copy(deep=True)
            for m in self._markers.values()
            if m.path == path and m.kind == kind
        ]

    def create(self, path: str, kind: str) -> Marker:
        marker = Marker(id=next(self._ids), path=path, kind=kind)
        self._markers[marker.id] = marker
        return marker.model_copy(deep=True)

    def get_attribute(self, marker: Marker, key: str) -> Any:
        if marker.id not in self._markers:
            raise MarkerError(f"Marker {marker.id} does not exist")
        return self._markers[marker.id].attributes.get(key)

    def set_attributes(self, marker: Marker, attributes: dict[str, Any]) -> Marker:
        if marker.id not in self._markers:
            raise MarkerError(f"Marker {marker.id} does not exist")
        cleaned = {k: v for k, v in attributes.items() if v is not None}
        stored = self._markers[marker.id].model_copy(update={"attributes": cleaned})
        self._markers[marker.id] = stored
        return stored.model_copy(deep=True)

    def all(self, kind: str | None = None) -> list[Marker]:
        markers = [m for m in self._markers.values() if kind is None or m.kind == kind]
        return [m.model_copy(deep=True) for m in sorted(markers, key=lambda m: (m.path, m.id))]

    def delete(self, marker: Marker) -> None:
        self._markers.pop(marker.id, None)
