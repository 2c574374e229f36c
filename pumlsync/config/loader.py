"""YAML config loading with env var expansion."""

import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import PumlsyncConfig

PROJECT_CONFIG_NAME = "pumlsync.yaml"

_ENV_REF = re.compile(r"\$\{(\w+)\}")


def config_paths(cli_path: str | None = None, root: str | Path = ".") -> list[Path]:
    """Candidate config files, most specific first.

    The project file lives at the workspace root, so ``--root`` picks up the
    watched tree's own ``pumlsync.yaml`` wherever pumlsync is started from.
    """
    paths = [Path(cli_path)] if cli_path else []
    paths.append(Path(root) / PROJECT_CONFIG_NAME)
    paths.append(Path.home() / ".pumlsync" / "config.yaml")
    return paths


def load_config(cli_path: str | None = None, root: str | Path = ".") -> PumlsyncConfig:
    """Load config with resolution order: CLI > workspace root > user-global > defaults.

    An explicit *cli_path* that does not exist is an error rather than a
    silent fall-through to the next candidate.
    """
    if cli_path and not Path(cli_path).is_file():
        raise ValueError(f"Config file not found: {cli_path}")

    for path in config_paths(cli_path, root):
        if not path.is_file():
            continue
        try:
            with open(path) as f:
                raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e
        if raw is None:
            continue
        if not isinstance(raw, dict):
            raise ValueError(f"Invalid config in {path}: expected a mapping, got {type(raw).__name__}")
        try:
            return PumlsyncConfig(**_expand_env_vars(raw))
        except ValidationError as e:
            raise ValueError(f"Invalid config in {path}: {e}") from e

    return PumlsyncConfig()


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ``${VAR}`` references; an unset variable expands to ''."""
    if isinstance(obj, str):
        return _ENV_REF.sub(lambda m: os.environ.get(m.group(1), ""), obj)
    if isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


# Default YAML template for `pumlsync config init`
DEFAULT_CONFIG_TEMPLATE = """\
# pumlsync.yaml

# Diagram renderer
renderer:
  backend: "server"            # server | jar
  server_url: "https://www.plantuml.com/plantuml"
  timeout: 30
  # jar_path: "${PLANTUML_JAR}"
  # java: "java"

# File watching
watch:
  debounce_seconds: 0.5
  ignore_dirs: [".git", ".pumlsync", "node_modules", "__pycache__"]

# Marker store
markers:
  store: "sqlite"              # sqlite | memory
  db_path: ".pumlsync/markers.db"

# Diagram-text providers, consulted in this order
providers:
  enabled: ["source", "embedded"]
  discover_entry_points: true
  embedded_suffixes: [".md", ".txt", ".py", ".java", ".rst", ".adoc"]

# Logging
log_level: "info"              # debug | info | warn | error
log_format: "text"             # text | json
"""
