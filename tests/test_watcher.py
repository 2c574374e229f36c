"""Tests for the workspace watcher: event translation and live watching."""

from __future__ import annotations

import threading
import time
from pathlib import Path

from watchdog.events import (
    DirModifiedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from pumlsync.markers import SQLiteMarkerStore
from pumlsync.providers import ProviderRegistry, SourceFileProvider
from pumlsync.sync import AutoSaveListener, DeltaFlag, DeltaKind, ResourceChangeEvent, render_to_target
from pumlsync.watch import WorkspaceWatcher
from pumlsync.watch.watcher import _DeltaHandler
from pumlsync.workspace import Workspace

NEW_TEXT = "@startuml\nA -> B: new\n@enduml\n"


# ── Helpers ──────────────────────────────────────────────────────────


class Recorder:
    def __init__(self) -> None:
        self.events: list[ResourceChangeEvent] = []

    def __call__(self, event: ResourceChangeEvent) -> None:
        self.events.append(event)

    @property
    def deltas(self):
        return [d for e in self.events for d in e.deltas]


def _handler(workspace, recorder, debounce=0.0, ignore=(".git", ".pumlsync")):
    return _DeltaHandler(workspace, recorder, debounce, ignore)


# ── _DeltaHandler ────────────────────────────────────────────────────


class TestDeltaTranslation:
    def test_modified_file_is_content_change(self, workspace):
        rec = Recorder()
        _handler(workspace, rec).on_any_event(FileModifiedEvent(str(workspace.root / "docs" / "a.puml")))

        [delta] = rec.deltas
        assert delta.path == "/docs/a.puml"
        assert delta.kind is DeltaKind.CHANGED
        assert delta.flags & DeltaFlag.CONTENT
        assert delta.is_content_change

    def test_directory_modification_is_dropped(self, workspace):
        rec = Recorder()
        _handler(workspace, rec).on_any_event(DirModifiedEvent(str(workspace.root / "docs")))
        assert rec.events == []

    def test_created_and_deleted(self, workspace):
        rec = Recorder()
        handler = _handler(workspace, rec)
        handler.on_any_event(FileCreatedEvent(str(workspace.root / "a.puml")))
        handler.on_any_event(FileDeletedEvent(str(workspace.root / "a.puml")))

        assert [d.kind for d in rec.deltas] == [DeltaKind.ADDED, DeltaKind.REMOVED]
        assert not any(d.is_content_change for d in rec.deltas)

    def test_move_becomes_remove_and_add(self, workspace):
        rec = Recorder()
        _handler(workspace, rec).on_any_event(
            FileMovedEvent(str(workspace.root / "a.puml"), str(workspace.root / "docs" / "a.puml"))
        )

        assert len(rec.events) == 1
        removed, added = rec.deltas
        assert (removed.path, removed.kind, removed.flags) == ("/a.puml", DeltaKind.REMOVED, DeltaFlag.MOVED_TO)
        assert (added.path, added.kind, added.flags) == ("/docs/a.puml", DeltaKind.ADDED, DeltaFlag.MOVED_FROM)

    def test_ignored_directories(self, workspace):
        rec = Recorder()
        _handler(workspace, rec).on_any_event(FileModifiedEvent(str(workspace.root / ".pumlsync" / "markers.db")))
        assert rec.events == []

    def test_paths_outside_workspace(self, workspace, tmp_path):
        rec = Recorder()
        _handler(workspace, rec).on_any_event(FileModifiedEvent(str(tmp_path / "other.puml")))
        assert rec.events == []

    def test_debounce_coalesces_content_bursts(self, workspace):
        rec = Recorder()
        handler = _handler(workspace, rec, debounce=0.5)
        path = str(workspace.root / "docs" / "a.puml")
        handler.on_any_event(FileModifiedEvent(path))
        handler.on_any_event(FileModifiedEvent(path))
        handler.on_any_event(FileModifiedEvent(str(workspace.root / "docs" / "b.puml")))

        assert rec.events == []
        assert handler.flush(now=time.monotonic() - 1.0) == 0
        assert handler.flush_all() == 2
        assert sorted(d.path for d in rec.deltas) == ["/docs/a.puml", "/docs/b.puml"]
        assert handler.flush_all() == 0

    def test_debounce_waits_for_quiet_period(self, workspace):
        rec = Recorder()
        handler = _handler(workspace, rec, debounce=0.5)
        handler.on_any_event(FileModifiedEvent(str(workspace.root / "docs" / "a.puml")))

        assert handler.flush() == 0
        assert handler.flush(now=time.monotonic() + 1.0) == 1
        [delta] = rec.deltas
        assert delta.is_content_change

    def test_last_write_of_a_burst_is_rendered(self, tmp_path, mock_renderer):
        """A truncate-then-write save renders the final content, not the empty file."""
        root = tmp_path / "ws"
        (root / "docs").mkdir(parents=True)
        (root / "out").mkdir()
        store = SQLiteMarkerStore(root / ".pumlsync" / "markers.db")
        workspace = Workspace(root, store)
        source = root / "docs" / "seq.puml"
        source.write_text("@startuml\nA -> B: old\n@enduml\n")
        render_to_target(workspace, ProviderRegistry([SourceFileProvider()]), mock_renderer, "/docs/seq.puml", "/out/seq.puml")
        (root / "out" / "seq.puml").write_text("stale")

        listener = AutoSaveListener(workspace, ProviderRegistry([SourceFileProvider()]), mock_renderer)
        handler = _handler(workspace, listener.resource_changed, debounce=0.5)

        def _save():
            source.write_text("")
            handler.on_any_event(FileModifiedEvent(str(source)))
            source.write_text(NEW_TEXT)
            handler.on_any_event(FileModifiedEvent(str(source)))
            handler.flush_all()

        # events arrive on a thread other than the one that opened the store
        worker = threading.Thread(target=_save)
        worker.start()
        worker.join(timeout=5)

        assert (root / "out" / "seq.puml").read_text() == NEW_TEXT
        store.close()

    def test_listener_errors_are_contained(self, workspace, caplog):
        def boom(event):
            raise RuntimeError("listener exploded")

        handler = _handler(workspace, boom)
        handler.on_any_event(FileModifiedEvent(str(workspace.root / "a.puml")))

        assert "Change listener failed" in caplog.text


# ── WorkspaceWatcher ─────────────────────────────────────────────────


class TestWorkspaceWatcher:
    def test_start_stop_idempotent(self, workspace):
        watcher = WorkspaceWatcher(workspace, Recorder())
        watcher.start()
        watcher.start()
        assert watcher.is_running
        watcher.stop()
        watcher.stop()
        assert not watcher.is_running

    def test_detects_content_changes(self, workspace):
        """Writing a file while the watcher runs delivers a content change."""
        target: Path = workspace.root / "docs" / "live.puml"
        target.write_text("@startuml\n@enduml\n")
        rec = Recorder()

        with WorkspaceWatcher(workspace, rec, debounce_seconds=0.05):
            # Give the observer a moment to spin up
            time.sleep(0.3)
            target.write_text("@startuml\nA -> B\n@enduml\n")

            # Poll until the change shows up or we time out (3s)
            deadline = time.monotonic() + 3.0
            found = False
            while time.monotonic() < deadline:
                if any(d.path == "/docs/live.puml" and d.is_content_change for d in rec.deltas):
                    found = True
                    break
                time.sleep(0.1)

        assert found, f"content change not delivered; deltas = {rec.deltas}"

    def test_live_edit_rerenders_with_sqlite_store(self, tmp_path, mock_renderer):
        """The observer thread reads markers from a store opened on this thread."""
        root = tmp_path / "ws"
        (root / "docs").mkdir(parents=True)
        store = SQLiteMarkerStore(root / ".pumlsync" / "markers.db")
        workspace = Workspace(root, store)
        registry = ProviderRegistry([SourceFileProvider()])
        source = root / "docs" / "seq.puml"
        source.write_text("@startuml\nA -> B: old\n@enduml\n")
        render_to_target(workspace, registry, mock_renderer, "/docs/seq.puml", "/out/seq.puml")
        listener = AutoSaveListener(workspace, registry, mock_renderer)
        target = root / "out" / "seq.puml"

        with WorkspaceWatcher(workspace, listener.resource_changed, debounce_seconds=0.1):
            time.sleep(0.3)
            source.write_text(NEW_TEXT)

            deadline = time.monotonic() + 3.0
            while time.monotonic() < deadline and target.read_text() != NEW_TEXT:
                time.sleep(0.1)

        assert target.read_text() == NEW_TEXT
        store.close()
