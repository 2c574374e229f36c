"""Renderer interface."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class DiagramRenderer(Protocol):
    """Turns diagram text into image bytes of the requested format."""

    def render(self, text: str, fmt: str) -> bytes: ...
