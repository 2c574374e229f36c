"""Diagram-text provider interface."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class DiagramTextProvider(Protocol):
    """A source of diagram text for files on disk."""

    def supports_path(self, path: Path) -> bool: ...

    def get_diagram_text(self, path: Path) -> str | None: ...
