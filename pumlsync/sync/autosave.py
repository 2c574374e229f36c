"""Change-driven re-rendering of marked diagram sources."""

from __future__ import annotations

import logging
import threading
from typing import Any

from pumlsync.errors import PumlsyncError
from pumlsync.markers import TARGET_PATH_ATTRIBUTE, get_diagram_marker, update_marker
from pumlsync.markers.models import DIAGRAM_MARKER
from pumlsync.output import needs_raster, save_diagram_image
from pumlsync.providers import ProviderRegistry
from pumlsync.render import Diagram, DiagramRenderer
from pumlsync.sync.models import (
    DeltaFlag,
    DeltaKind,
    ResourceChangeEvent,
    ResourceDelta,
    SyncReport,
)
from pumlsync.workspace import Workspace

logger = logging.getLogger(__name__)


class AutoSaveListener:
    """Re-renders a file's diagram into its recorded target when it changes.

    Only content changes of files carrying a diagram marker with a ``target``
    attribute are considered. A failure on one resource is logged and the
    remaining deltas of the event are still processed.

    Events must be delivered one at a time; concurrent calls are serialized
    on an internal lock. The listener never starts threads of its own.
    """

    def __init__(
        self,
        workspace: Workspace,
        registry: ProviderRegistry,
        renderer: DiagramRenderer,
    ) -> None:
        self.workspace = workspace
        self.registry = registry
        self.renderer = renderer
        self._diagram: Diagram | None = None
        self._lock = threading.Lock()

    def resource_changed(self, event: ResourceChangeEvent) -> SyncReport:
        report = SyncReport()
        with self._lock:
            for delta in event.deltas:
                self._visit(delta, report)
        return report

    def sync_all(self) -> SyncReport:
        """Re-render every marked source that records a target."""
        try:
            markers = self.workspace.store.all(DIAGRAM_MARKER)
        except PumlsyncError as e:
            logger.error("Cannot list markers: %s", e)
            return SyncReport()
        deltas = [
            ResourceDelta(path=m.path, kind=DeltaKind.CHANGED, flags=DeltaFlag.CONTENT)
            for m in markers
            if m.attributes.get(TARGET_PATH_ATTRIBUTE) is not None
        ]
        return self.resource_changed(ResourceChangeEvent(deltas=deltas))

    def _visit(self, delta: ResourceDelta, report: SyncReport) -> None:
        if not delta.is_content_change or not delta.is_file:
            return

        marker = get_diagram_marker(self.workspace.store, delta.path, create=False)
        if marker is None:
            return
        target = marker.attributes.get(TARGET_PATH_ATTRIBUTE)
        if target is None:
            return

        logger.debug("updating image for %s @ %s", delta.path, target)
        try:
            found = self.registry.find_diagram_text(self.workspace.file(delta.path))
            if found is None:
                logger.debug("no provider has diagram text for %s", delta.path)
                report.skipped.append(delta.path)
                return
            _provider, text = found

            if self._diagram is None:
                self._diagram = Diagram(self.renderer)
            self._diagram.text = text
            image = self._diagram.get_image() if needs_raster(target) else None

            written = save_diagram_image(
                self.workspace,
                self.renderer,
                delta.path,
                text,
                image,
                str(target),
                create=False,
            )
        except Exception as e:
            logger.exception("Failed to re-render %s -> %s", delta.path, target)
            report.failed.append((delta.path, str(e)))
            return

        if written:
            report.rendered.append(delta.path)
        else:
            report.skipped.append(delta.path)


def create_resource_listener(
    workspace: Workspace,
    registry: ProviderRegistry,
    renderer: DiagramRenderer,
) -> AutoSaveListener:
    return AutoSaveListener(workspace, registry, renderer)


def render_to_target(
    workspace: Workspace,
    registry: ProviderRegistry,
    renderer: DiagramRenderer,
    source_path: str,
    target_path: str,
    marker_attributes: dict[str, Any] | None = None,
) -> str:
    """First render request for *source_path*: write the target (creating it
    if needed) and create or update the source's marker.

    Returns the diagram text that was rendered.
    """
    found = registry.find_diagram_text(workspace.file(source_path))
    if found is None:
        raise PumlsyncError(f"No diagram text found in {source_path}")
    _provider, text = found

    diagram = Diagram(renderer, text)
    image = diagram.get_image() if needs_raster(target_path) else None
    save_diagram_image(workspace, renderer, source_path, text, image, target_path, create=True)
    update_marker(workspace.store, source_path, text, target_path, True, marker_attributes)
    return text
