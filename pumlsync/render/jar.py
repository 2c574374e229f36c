"""Renderer that pipes diagram text through a local plantuml.jar."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from pumlsync.errors import RenderError

logger = logging.getLogger(__name__)


class PlantUmlJarRenderer:
    def __init__(self, jar_path: str | Path, java: str = "java", timeout: float = 60.0) -> None:
        self.jar_path = Path(jar_path).expanduser()
        self.java = java
        self.timeout = timeout

    def render(self, text: str, fmt: str) -> bytes:
        if not self.jar_path.is_file():
            raise RenderError(f"PlantUML jar not found at {self.jar_path}")
        cmd = [self.java, "-Djava.awt.headless=true", "-jar", str(self.jar_path), "-pipe", f"-t{fmt}"]
        logger.debug("running %s", " ".join(cmd))
        try:
            proc = subprocess.run(  # noqa: S603
                cmd,
                input=text.encode("utf-8"),
                capture_output=True,
                timeout=self.timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise RenderError(f"Could not run PlantUML: {e}") from e
        if proc.returncode != 0:
            stderr = proc.stderr.decode("utf-8", "replace").strip()
            raise RenderError(f"PlantUML exited with {proc.returncode}: {stderr[:500]}")
        return proc.stdout
