"""Exception hierarchy for pumlsync."""

from __future__ import annotations


class PumlsyncError(Exception):
    """Base class for all pumlsync errors."""


class MarkerError(PumlsyncError):
    """Raised by marker stores when a lookup, create or update fails."""


class RenderError(PumlsyncError):
    """Raised when the external renderer cannot produce output."""


class ProviderNotFoundError(PumlsyncError):
    """Raised when a configured diagram-text provider cannot be found."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No diagram-text provider found with name '{name}'")


class UnknownImageFormatError(PumlsyncError, LookupError):
    """Raised when a target extension does not name a known image codec."""

    def __init__(self, extension: str):
        self.extension = extension
        super().__init__(f"Unknown image format '{extension}'")
