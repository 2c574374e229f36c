"""Ordered registry of diagram-text providers, with entry-point discovery."""

from __future__ import annotations

import importlib.metadata
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from pumlsync.errors import ProviderNotFoundError
from pumlsync.providers.base import DiagramTextProvider
from pumlsync.providers.builtin import EmbeddedDiagramProvider, SourceFileProvider

if TYPE_CHECKING:
    from pumlsync.config.models import ProvidersConfig

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "pumlsync.providers"


class ProviderRegistry:
    """Providers in registration order; the first one with text wins."""

    def __init__(self, providers: list[object] | None = None) -> None:
        self._providers: list[object] = list(providers or [])

    def register(self, provider: object) -> None:
        self._providers.append(provider)

    def __iter__(self):
        return iter(list(self._providers))

    def __len__(self) -> int:
        return len(self._providers)

    def find_diagram_text(self, path: Path) -> tuple[DiagramTextProvider, str] | None:
        """Return ``(provider, text)`` from the first provider that supports
        *path* and yields non-None text, or None.
        """
        for provider in self._providers:
            if not isinstance(provider, DiagramTextProvider):
                continue
            if not provider.supports_path(path):
                continue
            text = provider.get_diagram_text(path)
            if text is not None:
                return provider, text
        return None


def discover_providers() -> dict[str, importlib.metadata.EntryPoint]:
    """Entry points registered under the ``pumlsync.providers`` group."""
    return {ep.name: ep for ep in importlib.metadata.entry_points(group=ENTRY_POINT_GROUP)}


def _builtin(name: str, config: ProvidersConfig) -> object | None:
    if name == "source":
        return SourceFileProvider()
    if name == "embedded":
        return EmbeddedDiagramProvider(config.embedded_suffixes)
    return None


def build_registry(config: ProvidersConfig) -> ProviderRegistry:
    """Build the registry from config: enabled names first, in order, then
    any remaining entry-point providers when discovery is on.
    """
    registry = ProviderRegistry()
    entry_points = discover_providers() if config.discover_entry_points else {}

    for name in config.enabled:
        ep = entry_points.pop(name, None)
        provider = _builtin(name, config)
        if provider is None:
            if ep is None:
                raise ProviderNotFoundError(name)
            provider = ep.load()()
        registry.register(provider)

    for name, ep in entry_points.items():
        try:
            registry.register(ep.load()())
        except Exception:
            logger.exception("Failed to load diagram-text provider '%s'", name)
    return registry
