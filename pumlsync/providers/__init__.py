"""Diagram-text providers and their registry."""

from pumlsync.providers.base import DiagramTextProvider
from pumlsync.providers.builtin import (
    EmbeddedDiagramProvider,
    SourceFileProvider,
    extract_diagram_block,
)
from pumlsync.providers.registry import (
    ENTRY_POINT_GROUP,
    ProviderRegistry,
    build_registry,
    discover_providers,
)

__all__ = [
    "DiagramTextProvider",
    "ENTRY_POINT_GROUP",
    "EmbeddedDiagramProvider",
    "ProviderRegistry",
    "SourceFileProvider",
    "build_registry",
    "discover_providers",
    "extract_diagram_block",
]
