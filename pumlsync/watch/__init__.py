"""Filesystem change notifications for a workspace."""

from pumlsync.watch.watcher import DEFAULT_IGNORE_DIRS, WorkspaceWatcher

__all__ = ["DEFAULT_IGNORE_DIRS", "WorkspaceWatcher"]
