"""Marker store interface."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from pumlsync.markers.models import Marker


@runtime_checkable
class MarkerStore(Protocol):
    """Per-file key-value records. Every method may raise MarkerError."""

    def find(self, path: str, kind: str) -> list[Marker]: ...

    def create(self, path: str, kind: str) -> Marker: ...

    def get_attribute(self, marker: Marker, key: str) -> Any: ...

    def set_attributes(self, marker: Marker, attributes: dict[str, Any]) -> Marker: ...

    def all(self, kind: str | None = None) -> list[Marker]: ...

    def delete(self, marker: Marker) -> None: ...
