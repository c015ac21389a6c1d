"""Layered TOML configuration for mcq-drill.

A command declares its settings as a table of defaults. A config file is
layered on top of a copy of that table: every key must already exist in the
defaults, tables must stay tables and each scalar must keep the type of its
default. Anything else is reported with the dotted key that failed.
"""

from __future__ import annotations

import copy
import tomllib
from pathlib import Path
from typing import Any, Dict, Mapping

__all__ = [
    "TomlConfigError",
    "layer_config",
    "load_layered",
    "read_toml",
    "write_template",
]

_TYPE_NAMES = {
    bool: "a boolean",
    int: "an integer",
    float: "a number",
    str: "a string",
    list: "a list",
}


class TomlConfigError(RuntimeError):
    """Raised when a config file cannot be read or does not fit its defaults."""


def read_toml(path: Path) -> Dict[str, Any]:
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise TomlConfigError(f"Config file not found: {path}") from exc
    except OSError as exc:
        raise TomlConfigError(f"Cannot read config {path}: {exc}") from exc
    try:
        return tomllib.loads(raw)
    except tomllib.TOMLDecodeError as exc:
        raise TomlConfigError(f"Failed to parse {path.name}: {exc}") from exc


def layer_config(
    defaults: Mapping[str, Any], document: Mapping[str, Any]
) -> Dict[str, Any]:
    """Return a copy of ``defaults`` with ``document`` applied on top."""
    table = copy.deepcopy(dict(defaults))
    _apply(table, document, prefix="")
    return table


def load_layered(defaults: Mapping[str, Any], path: Path) -> Dict[str, Any]:
    """Read ``path`` and layer it over ``defaults``."""
    document = read_toml(path)
    try:
        return layer_config(defaults, document)
    except TomlConfigError as exc:
        raise TomlConfigError(f"{Path(path).name}: {exc}") from exc


def _apply(
    table: Dict[str, Any], document: Mapping[str, Any], *, prefix: str
) -> None:
    for key, value in document.items():
        dotted = prefix + key
        if key not in table:
            raise TomlConfigError(f"Unknown configuration key '{dotted}'.")
        default = table[key]
        if isinstance(default, dict):
            if not isinstance(value, Mapping):
                raise TomlConfigError(
                    f"Expected table for '{dotted}', "
                    f"found {type(value).__name__}."
                )
            _apply(default, value, prefix=dotted + ".")
            continue
        _check_scalar(dotted, default, value)
        table[key] = value


def _check_scalar(dotted: str, default: Any, value: Any) -> None:
    expected = type(default)
    # bool is a subclass of int; keep the two apart.
    if expected is not bool and isinstance(value, bool):
        ok = False
    else:
        ok = isinstance(value, expected)
    if ok and expected is list:
        ok = all(isinstance(item, str) for item in value)
    if not ok:
        wanted = _TYPE_NAMES.get(expected, expected.__name__)
        if expected is list:
            wanted = "a list of strings"
        raise TomlConfigError(
            f"'{dotted}' must be {wanted}, found {type(value).__name__}."
        )


def write_template(
    path: Path,
    template: str,
    *,
    overwrite: bool = False,
    mode: int = 0o600,
) -> Path:
    """Create ``path`` holding ``template``.

    The template is parsed first so a broken template is never written.
    Without ``overwrite`` an existing file is left alone and
    :class:`TomlConfigError` is raised.
    """
    try:
        tomllib.loads(template)
    except tomllib.TOMLDecodeError as exc:
        raise TomlConfigError(f"Template is not valid TOML: {exc}") from exc

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        with path.open("w" if overwrite else "x", encoding="utf-8") as fh:
            fh.write(template)
    except FileExistsError as exc:
        raise TomlConfigError(f"Config already exists: {path}") from exc
    try:
        path.chmod(mode)
    except PermissionError:  # pragma: no cover - depends on filesystem
        pass
    return path
