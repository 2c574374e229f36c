"""Change-notification and report models."""

from __future__ import annotations

from enum import Enum, IntFlag

from pydantic import BaseModel, ConfigDict, Field


class DeltaKind(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    CHANGED = "changed"


class DeltaFlag(IntFlag):
    NONE = 0
    CONTENT = 1
    MOVED_FROM = 2
    MOVED_TO = 4


class ResourceDelta(BaseModel):
    """One changed resource, addressed by workspace path."""

    model_config = ConfigDict(frozen=True)

    path: str
    kind: DeltaKind
    flags: DeltaFlag = DeltaFlag.NONE
    is_file: bool = True

    @property
    def is_content_change(self) -> bool:
        return self.kind is DeltaKind.CHANGED and bool(self.flags & DeltaFlag.CONTENT)


class ResourceChangeEvent(BaseModel):
    """A batch of deltas delivered to a listener in one call."""

    model_config = ConfigDict(frozen=True)

    deltas: list[ResourceDelta] = Field(default_factory=list)


class SyncReport(BaseModel):
    """Outcome of processing one change event."""

    rendered: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    failed: list[tuple[str, str]] = Field(default_factory=list)

    def merge(self, other: SyncReport) -> None:
        self.rendered.extend(other.rendered)
        self.skipped.extend(other.skipped)
        self.failed.extend(other.failed)
