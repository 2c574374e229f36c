from .loader import load_config
from .models import (
    MarkersConfig,
    ProvidersConfig,
    PumlsyncConfig,
    RendererConfig,
    WatchConfig,
)

__all__ = [
    "MarkersConfig",
    "ProvidersConfig",
    "PumlsyncConfig",
    "RendererConfig",
    "WatchConfig",
    "load_config",
]
