from pumlsync.output.writer import (
    encode_image,
    file_extension,
    image_format_for,
    needs_raster,
    save_diagram_image,
)

__all__ = [
    "encode_image",
    "file_extension",
    "image_format_for",
    "needs_raster",
    "save_diagram_image",
]
