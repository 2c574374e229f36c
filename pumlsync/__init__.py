"""pumlsync: keep rendered PlantUML artifacts in sync with their sources."""

__version__ = "0.1.0"
