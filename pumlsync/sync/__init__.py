"""Change-driven re-rendering."""

from pumlsync.sync.autosave import (
    AutoSaveListener,
    create_resource_listener,
    render_to_target,
)
from pumlsync.sync.models import (
    DeltaFlag,
    DeltaKind,
    ResourceChangeEvent,
    ResourceDelta,
    SyncReport,
)

__all__ = [
    "AutoSaveListener",
    "DeltaFlag",
    "DeltaKind",
    "ResourceChangeEvent",
    "ResourceDelta",
    "SyncReport",
    "create_resource_listener",
    "render_to_target",
]
