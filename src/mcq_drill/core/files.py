"""Source file discovery and reading for question imports.

Question files are always read as delimited text. Spreadsheet extensions are
accepted because authors tend to save exported sheets under them, but no
binary format is ever decoded.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Set

__all__ = [
    "SUPPORTED_EXTENSIONS",
    "SourceReadError",
    "UnsupportedSourceError",
    "parse_extensions",
    "iter_source_files",
    "read_source",
    "topic_name_for",
]

SUPPORTED_EXTENSIONS: tuple[str, ...] = ("csv", "txt", "xls", "xlsx")


class SourceReadError(OSError):
    """Raised when a question file cannot be read into text."""


class UnsupportedSourceError(ValueError):
    """Raised when a file named on the command line has a rejected extension."""


def parse_extensions(
    values: Optional[Sequence[str]],
    *,
    default: Optional[Iterable[str]] = None,
) -> Set[str]:
    """Normalize extension strings to a lowercase set without leading dots.

    Empty or missing ``values`` fall back to ``default`` (which itself
    defaults to :data:`SUPPORTED_EXTENSIONS`).
    """
    fallback = set(default or SUPPORTED_EXTENSIONS)
    if not values:
        return set(fallback)

    normalized: Set[str] = set()
    for item in values:
        if not isinstance(item, str):
            continue
        candidate = item.strip().lower().lstrip(".")
        if candidate:
            normalized.add(candidate)
    return normalized or set(fallback)


def iter_source_files(
    paths: Sequence[Path], extensions: Set[str]
) -> Iterator[Path]:
    """Yield matching files from the given paths, preserving input order.

    Directories are expanded recursively in case-insensitive name order and
    silently skip files with other extensions. A file named directly must
    match, otherwise :class:`UnsupportedSourceError` is raised.
    """
    for raw in paths:
        path = Path(raw)
        if path.is_file():
            if not _matches_extension(path, extensions):
                accepted = ", ".join(sorted(extensions))
                raise UnsupportedSourceError(
                    f"Unsupported file type: {path.name} (expected {accepted})"
                )
            yield path
            continue
        if not path.exists():
            raise FileNotFoundError(f"Input not found: {path}")
        if path.is_dir():
            yield from (
                child
                for child in _sorted_directory_files(path)
                if _matches_extension(child, extensions)
            )


def _sorted_directory_files(root: Path) -> List[Path]:
    return sorted(
        (child for child in root.rglob("*") if child.is_file()),
        key=lambda p: p.name.lower(),
    )


def _matches_extension(path: Path, extensions: Set[str]) -> bool:
    return path.suffix.lower().lstrip(".") in extensions


def read_source(path: Path) -> str:
    """Read a whole question file as UTF-8, replacing undecodable bytes."""
    try:
        with Path(path).open("r", encoding="utf-8", errors="replace") as fh:
            return fh.read()
    except OSError as exc:
        raise SourceReadError(f"Error reading file {path}: {exc}") from exc


def topic_name_for(path: Path) -> str:
    """Default topic name for a file: its name minus the last extension."""
    return Path(path).stem
