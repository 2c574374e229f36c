"""Marker record model."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

DIAGRAM_MARKER = "pumlsync.diagram"
DERIVED_MARKER = "pumlsync.derived"

ORIGINAL_PATH_ATTRIBUTE = "original"
DIAGRAM_SOURCE_ATTRIBUTE = "diagramSource"
TARGET_PATH_ATTRIBUTE = "target"


class Marker(BaseModel):
    """A small key-value record attached to a workspace file."""

    id: int
    path: str
    kind: str
    attributes: dict[str, Any] = Field(default_factory=dict)
