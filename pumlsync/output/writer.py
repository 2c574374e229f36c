"""Writes rendered diagrams to their target files, dispatching on extension."""

from __future__ import annotations

import io
import logging
from pathlib import PurePosixPath

from PIL import Image

from pumlsync.errors import UnknownImageFormatError
from pumlsync.markers import update_marker
from pumlsync.render.base import DiagramRenderer
from pumlsync.workspace import Workspace

logger = logging.getLogger(__name__)

VECTOR_EXTENSIONS = {"svg"}
SOURCE_EXTENSIONS = {"puml", "plantuml"}

# Pillow cannot write these modes in the given format.
_FLATTEN_MODES = {"JPEG": ("RGB", "L"), "BMP": ("RGB", "L", "1", "P")}


def file_extension(path: str | PurePosixPath) -> str:
    return PurePosixPath(str(path)).suffix.lstrip(".").lower()


def needs_raster(target_path: str | PurePosixPath) -> bool:
    """True when writing *target_path* encodes the pre-rendered raster."""
    ext = file_extension(target_path)
    return ext not in VECTOR_EXTENSIONS and ext not in SOURCE_EXTENSIONS


def image_format_for(extension: str) -> str:
    """Resolve a file extension to a Pillow codec name.

    Raises UnknownImageFormatError when Pillow has no writer for it.
    """
    Image.init()
    fmt = Image.registered_extensions().get(f".{extension.lower()}", extension.upper())
    if not extension or fmt not in Image.SAVE:
        raise UnknownImageFormatError(extension)
    return fmt


def encode_image(image: Image.Image, extension: str) -> bytes:
    fmt = image_format_for(extension)
    allowed = _FLATTEN_MODES.get(fmt)
    if allowed and image.mode not in allowed:
        image = image.convert("RGB")
    buf = io.BytesIO()
    image.save(buf, format=fmt)
    return buf.getvalue()


def save_diagram_image(
    workspace: Workspace,
    renderer: DiagramRenderer,
    source_path: str | None,
    text_diagram: str,
    image: Image.Image | None,
    target_path: str,
    create: bool,
) -> bool:
    """Write *text_diagram* to *target_path* in the format its extension names.

    ``svg`` targets are re-rendered from the text, ``puml``/``plantuml``
    targets receive the text itself, any other extension encodes *image*
    with the matching image codec. A missing target is only created
    when *create* is set. On success the source's marker is refreshed.

    Returns True when the target was written.
    """
    if not (create or workspace.exists(target_path)):
        logger.debug("target %s does not exist, not creating it", target_path)
        return False

    ext = file_extension(target_path)
    if ext in VECTOR_EXTENSIONS:
        data = renderer.render(text_diagram, ext)
    elif ext in SOURCE_EXTENSIONS:
        data = text_diagram.encode("utf-8")
    else:
        image_format_for(ext)
        if image is None:
            raise ValueError(f"A rendered image is required to write {target_path}")
        data = encode_image(image, ext)

    workspace.write_file(target_path, data)

    if source_path is not None and workspace.exists(source_path):
        update_marker(workspace.store, source_path, text_diagram, target_path, create=False)
    return True
