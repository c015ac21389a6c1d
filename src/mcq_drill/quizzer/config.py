"""Configuration loader for the mcq-drill command line."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

from mcq_drill.core import config as core_config
from mcq_drill.core import files as files_mod
from mcq_drill.core import workspace as workspace_mod

CONFIG_FILENAME = "mcq_drill.toml"
CONFIG_ENV = "MCQ_DRILL_CONFIG"
ENV_PREFIX = "MCQ_DRILL_"

_DEFAULT_LOG_LEVEL = "INFO"
_VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}

# Every key a config file may set, with the type it must have.
DEFAULT_TABLE: Dict[str, Dict[str, Any]] = {
    "import": {"extensions": list(files_mod.SUPPORTED_EXTENSIONS)},
    "session": {"random": False, "seed": 0},
    "logging": {"level": _DEFAULT_LOG_LEVEL},
}

CONFIG_TEMPLATE = """\
# mcq-drill configuration

[import]
# File extensions picked up when a directory is given. Every file is read
# as comma separated text, whatever its extension.
extensions = ["csv", "txt", "xls", "xlsx"]

[session]
# Practise a shuffled mix of every imported topic by default.
random = false
# Fixed shuffle seed for repeatable runs; 0 leaves the order unseeded.
seed = 0

[logging]
level = "INFO"
"""


class QuizzerConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class QuizzerConfig:
    """Fully resolved configuration for one CLI run."""

    extensions: tuple[str, ...]
    random: bool
    seed: Optional[int]
    log_level: str


@dataclass(frozen=True)
class ConfigOverrides:
    """CLI-sourced overrides applied on top of file/env options."""

    extensions: Optional[Sequence[str]] = None
    random: Optional[bool] = None
    seed: Optional[int] = None
    log_level: Optional[str] = None


@dataclass(frozen=True)
class LoadResult:
    """Result of loading configuration, including workspace context."""

    config: QuizzerConfig
    layout: workspace_mod.WorkspaceLayout
    config_path: Optional[Path]


def default_config_path(layout: workspace_mod.WorkspaceLayout) -> Path:
    return layout.path_for("config") / CONFIG_FILENAME


def load_config(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[ConfigOverrides] = None,
    env: Optional[Mapping[str, str]] = None,
    workspace_path: Optional[Path] = None,
) -> LoadResult:
    """Load configuration applying precedence CLI > env > TOML > defaults."""

    overrides = overrides or ConfigOverrides()
    env_map = os.environ if env is None else env

    try:
        layout = workspace_mod.ensure_workspace(
            env=env_map, path=workspace_path
        )
    except workspace_mod.WorkspaceError as exc:
        raise QuizzerConfigError(str(exc)) from exc

    requested = _resolve_config_path(
        config_path=config_path,
        env_map=env_map,
        default_path=default_config_path(layout),
    )

    table = DEFAULT_TABLE
    loaded_path: Optional[Path] = None
    if requested.exists():
        loaded_path = requested
        try:
            table = core_config.load_layered(DEFAULT_TABLE, requested)
        except core_config.TomlConfigError as exc:
            raise QuizzerConfigError(str(exc)) from exc
    elif config_path is not None or (env_map.get(CONFIG_ENV) or "").strip():
        raise QuizzerConfigError(f"Config file not found: {requested}")

    extensions = files_mod.parse_extensions(
        _pick_first(overrides.extensions, table["import"]["extensions"])
    )
    config = QuizzerConfig(
        extensions=tuple(sorted(extensions)),
        random=bool(_pick_first(overrides.random, table["session"]["random"])),
        seed=_resolve_seed(
            _pick_first(overrides.seed, table["session"]["seed"])
        ),
        log_level=_resolve_log_level(
            _pick_first(
                overrides.log_level,
                env_map.get(f"{ENV_PREFIX}LOG_LEVEL"),
                table["logging"]["level"],
            )
        ),
    )
    return LoadResult(config=config, layout=layout, config_path=loaded_path)


def _resolve_config_path(
    *,
    config_path: Optional[Path],
    env_map: Mapping[str, str],
    default_path: Path,
) -> Path:
    if config_path is not None:
        return Path(config_path).expanduser()
    env_candidate = (env_map.get(CONFIG_ENV) or "").strip()
    if env_candidate:
        return Path(env_candidate).expanduser()
    return default_path


def _pick_first(*values: Any) -> Any:
    for value in values:
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def _resolve_seed(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int):
        raise QuizzerConfigError("session.seed must be an integer.")
    return value or None


def _resolve_log_level(value: Any) -> str:
    level = str(value).strip().upper()
    if level not in _VALID_LOG_LEVELS:
        expected = ", ".join(sorted(_VALID_LOG_LEVELS))
        raise QuizzerConfigError(
            f"Unknown log level '{value}'. Expected one of: {expected}."
        )
    return level
