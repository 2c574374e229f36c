"""Transient diagram wrapper: current text plus a lazily rendered raster."""

from __future__ import annotations

import io

from PIL import Image

from pumlsync.errors import RenderError
from pumlsync.render.base import DiagramRenderer


class Diagram:
    """Holds diagram text and renders it to a Pillow image on demand.

    The raster is cached until the text changes.
    """

    def __init__(self, renderer: DiagramRenderer, text: str | None = None) -> None:
        self.renderer = renderer
        self._text = text
        self._image: Image.Image | None = None

    @property
    def text(self) -> str | None:
        return self._text

    @text.setter
    def text(self, value: str | None) -> None:
        if value != self._text:
            self._image = None
        self._text = value

    def get_image(self) -> Image.Image:
        if self._text is None:
            raise RenderError("Diagram has no text")
        if self._image is None:
            data = self.renderer.render(self._text, "png")
            try:
                image = Image.open(io.BytesIO(data))
                image.load()
            except (OSError, Image.DecompressionBombError) as e:
                raise RenderError(f"Renderer returned an unreadable image: {e}") from e
            self._image = image
        return self._image
