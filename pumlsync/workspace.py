"""Workspace root, workspace-path mapping and the file write primitive."""

from __future__ import annotations

import logging
import shutil
import uuid
from pathlib import Path, PurePosixPath

from pumlsync.markers import MarkerStore, mark_derived

logger = logging.getLogger(__name__)


class Workspace:
    """A directory tree whose files are addressed by workspace paths.

    A workspace path is a POSIX string rooted at the workspace directory,
    e.g. ``/docs/seq.puml``. Marker attributes always hold workspace paths.
    """

    def __init__(self, root: str | Path, store: MarkerStore) -> None:
        self.root = Path(root).resolve()
        self.store = store

    def workspace_path(self, path: str | Path) -> str:
        """Map an absolute (or cwd-relative) filesystem path to a workspace path."""
        resolved = Path(path).resolve()
        if not resolved.is_relative_to(self.root):
            raise ValueError(f"{path} is outside the workspace {self.root}")
        return "/" + resolved.relative_to(self.root).as_posix() if resolved != self.root else "/"

    def file(self, workspace_path: str | PurePosixPath) -> Path:
        """Map a workspace path to a filesystem path inside the root."""
        rel = str(workspace_path).lstrip("/")
        candidate = (self.root / rel).resolve()
        if not candidate.is_relative_to(self.root):
            raise ValueError(f"Workspace path escapes root: {workspace_path}")
        return candidate

    def exists(self, workspace_path: str | PurePosixPath) -> bool:
        return self.file(workspace_path).is_file()

    def write_file(self, workspace_path: str | PurePosixPath, data: bytes) -> Path:
        """Create or replace a file's content, then flag it as derived.

        The content goes to a sibling temp file that replaces the target, so
        readers never see a half-written image. A replaced file keeps its
        permission bits; a new one gets the umask default.
        """
        dest = self.file(workspace_path)
        existed = dest.exists()
        dest.parent.mkdir(parents=True, exist_ok=True)

        tmp = dest.with_name(f".{dest.name}.{uuid.uuid4().hex[:8]}.tmp")
        try:
            with open(tmp, "wb") as f:
                f.write(data)
            if existed:
                shutil.copymode(dest, tmp)
            tmp.replace(dest)
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise

        logger.info("%s %s (%d bytes)", "replaced" if existed else "created", workspace_path, len(data))
        mark_derived(self.store, str(workspace_path))
        return dest
