"""External PlantUML rendering."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pumlsync.render.base import DiagramRenderer
from pumlsync.render.diagram import Diagram
from pumlsync.render.encoding import decode_plantuml, encode_plantuml
from pumlsync.render.jar import PlantUmlJarRenderer
from pumlsync.render.server import PlantUmlServerRenderer

if TYPE_CHECKING:
    from pumlsync.config.models import RendererConfig


def create_renderer(config: RendererConfig) -> DiagramRenderer:
    """Build the renderer backend named by ``config.backend``."""
    if config.backend == "jar":
        return PlantUmlJarRenderer(config.jar_path, java=config.java, timeout=config.timeout)
    return PlantUmlServerRenderer(config.server_url, timeout=config.timeout)


__all__ = [
    "Diagram",
    "DiagramRenderer",
    "PlantUmlJarRenderer",
    "PlantUmlServerRenderer",
    "create_renderer",
    "decode_plantuml",
    "encode_plantuml",
]
