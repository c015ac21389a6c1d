"""Header classification and line tokenizing for question tables.

Question tables are hand-written comma separated text: the first row names
the columns, every following row is one question. Authors spell headers
freely ("Option A", "option_1", "Correct Answer (letter)"), so columns are
classified by substring after normalisation rather than by exact name.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import List, Optional, Sequence

__all__ = [
    "FieldRole",
    "LineParseError",
    "OPTION_ROLES",
    "map_header",
    "map_headers",
    "split_header_row",
    "tokenize_line",
]


class FieldRole(Enum):
    """Canonical meaning of a table column."""

    OPTION_1 = "option1"
    OPTION_2 = "option2"
    OPTION_3 = "option3"
    OPTION_4 = "option4"
    QUESTION_TEXT = "question"
    CORRECT_ANSWER = "correct"
    EXPLANATION = "explanation"

    @property
    def is_option(self) -> bool:
        return self in OPTION_ROLES


OPTION_ROLES = frozenset(
    {
        FieldRole.OPTION_1,
        FieldRole.OPTION_2,
        FieldRole.OPTION_3,
        FieldRole.OPTION_4,
    }
)

# Checked in order, first hit wins. "correctanswer" is covered by "correct".
_HEADER_RULES: tuple[tuple[tuple[str, ...], FieldRole], ...] = (
    (("optiona", "option1"), FieldRole.OPTION_1),
    (("optionb", "option2"), FieldRole.OPTION_2),
    (("optionc", "option3"), FieldRole.OPTION_3),
    (("optiond", "option4"), FieldRole.OPTION_4),
    (("question",), FieldRole.QUESTION_TEXT),
    (("correctanswer", "correct"), FieldRole.CORRECT_ANSWER),
    (("explanation",), FieldRole.EXPLANATION),
)

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")

# A quoted field (optionally padded with blanks) that runs up to the next
# comma or the end of the line, or else any non-empty run of non-commas.
_TOKEN_RE = re.compile(r'[ \t]*"((?:[^"]|"")*)"[ \t]*(?=,|$)|([^,]+)')


class LineParseError(ValueError):
    """Raised when a line contains no recognisable field at all."""


def _normalize_header(cell: str) -> str:
    return _NON_ALNUM_RE.sub("", cell.strip().lower())


def map_header(cell: str) -> Optional[FieldRole]:
    """Classify one header cell, or return ``None`` for unmapped columns."""
    normalized = _normalize_header(cell)
    for needles, role in _HEADER_RULES:
        if any(needle in normalized for needle in needles):
            return role
    return None


def map_headers(cells: Sequence[str]) -> List[Optional[FieldRole]]:
    """Return the positional role list for a header row."""
    return [map_header(cell) for cell in cells]


def split_header_row(line: str) -> List[str]:
    """Split the header row on every comma.

    Header cells are plain labels, so no quote handling applies here; the
    resulting cell count is the field count every data row must match.
    """
    return line.split(",")


def tokenize_line(line: str) -> List[str]:
    """Split one data line into trimmed field values.

    ``"a, ""b"" c"`` yields the single value ``a, "b" c``. Empty unquoted
    slots between consecutive commas do not produce a value.
    """
    values: List[str] = []
    for match in _TOKEN_RE.finditer(line):
        quoted, bare = match.group(1), match.group(2)
        if quoted is not None:
            values.append(quoted.replace('""', '"').strip())
        else:
            values.append(bare.strip())
    if not values:
        raise LineParseError(f"No fields found in line: {line!r}")
    return values
