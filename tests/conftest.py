"""Shared test fixtures for pumlsync."""

import io

import pytest
from unittest.mock import MagicMock
from PIL import Image

from pumlsync.config.models import PumlsyncConfig
from pumlsync.markers import InMemoryMarkerStore
from pumlsync.providers import ProviderRegistry, SourceFileProvider
from pumlsync.render.base import DiagramRenderer
from pumlsync.workspace import Workspace

SEQUENCE_DIAGRAM = "@startuml\nAlice -> Bob: hello\n@enduml\n"


def _png_bytes(mode: str = "RGBA") -> bytes:
    buf = io.BytesIO()
    Image.new(mode, (8, 6), (200, 30, 30, 255) if mode == "RGBA" else (200, 30, 30)).save(buf, "PNG")
    return buf.getvalue()


@pytest.fixture
def png_bytes():
    return _png_bytes()


@pytest.fixture
def mock_renderer(png_bytes):
    """Renderer returning a real PNG for ``png`` and a tiny SVG otherwise."""
    renderer = MagicMock(spec=DiagramRenderer)

    def _render(text: str, fmt: str) -> bytes:
        if fmt == "png":
            return png_bytes
        return f"<svg><!-- {fmt} --><text>{text}</text></svg>".encode()

    renderer.render.side_effect = _render
    return renderer


@pytest.fixture
def store():
    return InMemoryMarkerStore()


@pytest.fixture
def workspace(tmp_path, store):
    root = tmp_path / "ws"
    (root / "docs").mkdir(parents=True)
    (root / "out").mkdir()
    return Workspace(root, store)


@pytest.fixture
def source_file(workspace):
    """A PlantUML source at /docs/seq.puml."""
    path = workspace.root / "docs" / "seq.puml"
    path.write_text(SEQUENCE_DIAGRAM)
    return path


@pytest.fixture
def registry():
    return ProviderRegistry([SourceFileProvider()])


@pytest.fixture
def sample_config():
    return PumlsyncConfig()
