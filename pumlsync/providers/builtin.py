"""Built-in providers: whole-file PlantUML sources and embedded diagram blocks."""

from __future__ import annotations

import logging
import re
from pathlib import Path

logger = logging.getLogger(__name__)

SOURCE_SUFFIXES = (".puml", ".plantuml", ".pu", ".iuml", ".wsd")

_START = re.compile(r"@start(\w+)")
_COMMENT_MARKERS = ("#", "//", "*", "'")


def _read_text(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("cannot read %s: %s", path, e)
        return None


class SourceFileProvider:
    """The whole file is the diagram text."""

    name = "source"

    def __init__(self, suffixes: tuple[str, ...] = SOURCE_SUFFIXES) -> None:
        self.suffixes = tuple(s.lower() for s in suffixes)

    def supports_path(self, path: Path) -> bool:
        return path.suffix.lower() in self.suffixes

    def get_diagram_text(self, path: Path) -> str | None:
        text = _read_text(path)
        if text is None or not text.strip():
            return None
        return text


def extract_diagram_block(text: str) -> str | None:
    """Return the first ``@startXXX`` .. ``@endXXX`` block in *text*.

    When the ``@start`` line sits behind a line comment marker (``#``,
    ``//``, ``*``, ``'``), that marker is stripped from every block line, so
    diagrams embedded in source comments work too.
    """
    lines = text.splitlines()
    for i, line in enumerate(lines):
        m = _START.search(line)
        if m is None:
            continue
        end_tag = f"@end{m.group(1)}"
        for j in range(i, len(lines)):
            if end_tag not in lines[j]:
                continue
            block = lines[i:j + 1]
            marker = line[: m.start()].strip()
            if marker in _COMMENT_MARKERS:
                prefix = re.compile(r"^\s*" + re.escape(marker) + r" ?")
                block = [prefix.sub("", ln, count=1) for ln in block]
            else:
                block[0] = block[0][m.start():]
            return "\n".join(block) + "\n"
        return None
    return None


class EmbeddedDiagramProvider:
    """Diagram text is the first @start/@end block inside a text file."""

    name = "embedded"

    def __init__(self, suffixes: list[str] | tuple[str, ...] = (".md", ".txt")) -> None:
        self.suffixes = tuple(s.lower() for s in suffixes)

    def supports_path(self, path: Path) -> bool:
        return path.suffix.lower() in self.suffixes

    def get_diagram_text(self, path: Path) -> str | None:
        text = _read_text(path)
        if text is None:
            return None
        return extract_diagram_block(text)
