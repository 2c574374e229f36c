from pydantic import BaseModel, Field
from typing import Literal


class RendererConfig(BaseModel):
    backend: Literal["server", "jar"] = "server"
    server_url: str = "https://www.plantuml.com/plantuml"
    timeout: float = 30.0
    jar_path: str = "plantuml.jar"
    java: str = "java"


class WatchConfig(BaseModel):
    debounce_seconds: float = 0.5
    ignore_dirs: list[str] = Field(
        default_factory=lambda: [".git", ".pumlsync", "node_modules", "__pycache__"]
    )


class MarkersConfig(BaseModel):
    store: Literal["sqlite", "memory"] = "sqlite"
    db_path: str = ".pumlsync/markers.db"


class ProvidersConfig(BaseModel):
    enabled: list[str] = Field(default_factory=lambda: ["source", "embedded"])
    discover_entry_points: bool = True
    embedded_suffixes: list[str] = Field(
        default_factory=lambda: [".md", ".txt", ".py", ".java", ".rst", ".adoc"]
    )


class PumlsyncConfig(BaseModel):
    renderer: RendererConfig = Field(default_factory=RendererConfig)
    watch: WatchConfig = Field(default_factory=WatchConfig)
    markers: MarkersConfig = Field(default_factory=MarkersConfig)
    providers: ProvidersConfig = Field(default_factory=ProvidersConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"
