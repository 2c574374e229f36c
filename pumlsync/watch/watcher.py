"""Workspace file watcher that feeds change events to a listener."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from pumlsync.sync.models import (
    DeltaFlag,
    DeltaKind,
    ResourceChangeEvent,
    ResourceDelta,
    SyncReport,
)
from pumlsync.workspace import Workspace

logger = logging.getLogger(__name__)

DEFAULT_IGNORE_DIRS = (".git", ".pumlsync", "node_modules", "__pycache__")

Listener = Callable[[ResourceChangeEvent], SyncReport | None]


class _DeltaHandler(FileSystemEventHandler):
    """Translates watchdog events into resource deltas.

    Content changes are debounced on the trailing edge: a path is delivered
    once it has been quiet for ``debounce_seconds``, so the listener reads
    the file after the last write of a burst. Other deltas go out at once.
    """

    def __init__(
        self,
        workspace: Workspace,
        listener: Listener,
        debounce_seconds: float,
        ignore_dirs: Iterable[str],
    ) -> None:
        super().__init__()
        self._workspace = workspace
        self._listener = listener
        self._debounce = debounce_seconds
        self._ignore = set(ignore_dirs)
        self._pending: dict[str, float] = {}
        self._pending_lock = threading.Lock()
        self._deliver_lock = threading.Lock()

    def _workspace_path(self, raw: str | bytes) -> str | None:
        if not raw:
            return None
        path = Path(raw.decode() if isinstance(raw, bytes) else raw)
        try:
            workspace_path = self._workspace.workspace_path(path)
        except ValueError:
            return None
        if any(part in self._ignore for part in workspace_path.split("/")):
            return None
        return workspace_path

    def _deltas(self, event: FileSystemEvent) -> list[ResourceDelta]:
        is_file = not event.is_directory
        src = self._workspace_path(event.src_path)

        if event.event_type == "modified":
            if src is None or not is_file:
                return []
            if self._debounce > 0:
                with self._pending_lock:
                    self._pending[src] = time.monotonic()
                return []
            return [_content_change(src)]
        if event.event_type == "created" and src is not None:
            return [ResourceDelta(path=src, kind=DeltaKind.ADDED, is_file=is_file)]
        if event.event_type == "deleted" and src is not None:
            return [ResourceDelta(path=src, kind=DeltaKind.REMOVED, is_file=is_file)]
        if event.event_type == "moved":
            dest = self._workspace_path(getattr(event, "dest_path", ""))
            deltas = []
            if src is not None:
                deltas.append(ResourceDelta(path=src, kind=DeltaKind.REMOVED, flags=DeltaFlag.MOVED_TO, is_file=is_file))
            if dest is not None:
                deltas.append(ResourceDelta(path=dest, kind=DeltaKind.ADDED, flags=DeltaFlag.MOVED_FROM, is_file=is_file))
            return deltas
        return []

    def _deliver(self, deltas: list[ResourceDelta]) -> None:
        if not deltas:
            return
        with self._deliver_lock:
            try:
                self._listener(ResourceChangeEvent(deltas=deltas))
            except Exception:
                logger.exception("Change listener failed for %s", ", ".join(d.path for d in deltas))

    def on_any_event(self, event: FileSystemEvent) -> None:
        self._deliver(self._deltas(event))

    def flush(self, now: float | None = None) -> int:
        """Deliver content changes that have been quiet for the debounce window.

        Returns the number of paths delivered.
        """
        now = time.monotonic() if now is None else now
        with self._pending_lock:
            ready = [p for p, last in self._pending.items() if now - last >= self._debounce]
            for path in ready:
                del self._pending[path]
        self._deliver([_content_change(p) for p in ready])
        return len(ready)

    def flush_all(self) -> int:
        """Deliver every pending content change regardless of age."""
        return self.flush(now=float("inf"))


def _content_change(path: str) -> ResourceDelta:
    return ResourceDelta(path=path, kind=DeltaKind.CHANGED, flags=DeltaFlag.CONTENT)


class WorkspaceWatcher:
    """Watches a workspace recursively and delivers changes serially.

    Content changes of a file are held back until it has been quiet for the
    debounce window, which absorbs editors that write a file several times
    on save. A background thread flushes them; ``stop()`` flushes whatever
    is still pending.
    """

    def __init__(
        self,
        workspace: Workspace,
        listener: Listener,
        debounce_seconds: float = 0.5,
        ignore_dirs: Iterable[str] = DEFAULT_IGNORE_DIRS,
    ) -> None:
        self._workspace = workspace
        self._observer: Observer | None = None
        self._flusher: threading.Thread | None = None
        self._stop_event = threading.Event()
        self._flush_interval = min(max(debounce_seconds / 4, 0.02), 0.25)
        self._handler = _DeltaHandler(workspace, listener, debounce_seconds, ignore_dirs)

    @property
    def is_running(self) -> bool:
        return self._observer is not None

    def start(self) -> None:
        """Begin watching the workspace root recursively."""
        if self._observer is not None:
            return
        self._stop_event.clear()
        self._observer = Observer()
        self._observer.schedule(self._handler, str(self._workspace.root), recursive=True)
        self._observer.start()
        self._flusher = threading.Thread(target=self._flush_loop, name="pumlsync-debounce", daemon=True)
        self._flusher.start()
        logger.info("Watching %s for changes", self._workspace.root)

    def _flush_loop(self) -> None:
        while not self._stop_event.wait(self._flush_interval):
            self._handler.flush()

    def stop(self) -> None:
        """Stop watching, deliver pending changes and clean up."""
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=5)
        self._observer = None
        self._stop_event.set()
        if self._flusher is not None:
            self._flusher.join(timeout=5)
            self._flusher = None
        self._handler.flush_all()
        logger.info("Stopped watching %s", self._workspace.root)

    def __enter__(self) -> WorkspaceWatcher:
        self.start()
        return self

    def __exit__(self, *exc) -> None:
        self.stop()
