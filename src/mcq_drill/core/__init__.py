"""Core shared helpers for mcq_drill commands."""

from __future__ import annotations

from .config import (
    TomlConfigError,
    layer_config,
    load_layered,
    read_toml,
    write_template,
)
from .files import (
    SUPPORTED_EXTENSIONS,
    SourceReadError,
    UnsupportedSourceError,
    iter_source_files,
    parse_extensions,
    read_source,
    topic_name_for,
)
from .logging import JsonLogFormatter, configure_logger
from .workspace import (
    WORKSPACE_ENV,
    WorkspaceError,
    WorkspaceLayout,
    ensure_workspace,
)

__all__ = [
    "TomlConfigError",
    "layer_config",
    "load_layered",
    "read_toml",
    "write_template",
    "SUPPORTED_EXTENSIONS",
    "SourceReadError",
    "UnsupportedSourceError",
    "iter_source_files",
    "parse_extensions",
    "read_source",
    "topic_name_for",
    "configure_logger",
    "JsonLogFormatter",
    "ensure_workspace",
    "WorkspaceLayout",
    "WorkspaceError",
    "WORKSPACE_ENV",
]
