"""Question records built from tokenized table rows.

Parsing is forgiving: a malformed row is dropped and reported as a
:class:`LineDiagnostic` while the rest of the table is still imported. The
correct answer is kept exactly as written because authors use two encodings
for it (the literal option text or a letter label ``A``-``D``); it is
resolved against the options each time an answer is checked.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, List, Optional, Sequence

from .parsing import (
    FieldRole,
    LineParseError,
    map_headers,
    split_header_row,
    tokenize_line,
)

if TYPE_CHECKING:  # pragma: no cover
    from .engine import ResponseEntry

__all__ = [
    "ANSWER_LETTERS",
    "LineDiagnostic",
    "OptionState",
    "ParseResult",
    "QuestionRecord",
    "SkipReason",
    "build_record",
    "correct_option",
    "is_correct_answer",
    "option_label",
    "option_state",
    "parse_question_table",
]

logger = logging.getLogger(__name__)

ANSWER_LETTERS = ("A", "B", "C", "D")

_LINE_SPLIT_RE = re.compile(r"\r?\n")


@dataclass(frozen=True)
class QuestionRecord:
    """One validated multiple-choice question."""

    question_text: str
    options: tuple[str, ...]
    correct_answer: str
    explanation: Optional[str] = None

    def __post_init__(self) -> None:
        if len(self.options) < 2:
            raise ValueError("at least two options are required")
        if not self.correct_answer:
            raise ValueError("correct_answer is required")


class SkipReason(Enum):
    """Why a data line did not become a question."""

    UNPARSEABLE = "unparseable"
    COLUMN_MISMATCH = "column-mismatch"
    INSUFFICIENT_DATA = "insufficient-data"


@dataclass(frozen=True)
class LineDiagnostic:
    """A soft failure for a single input line (1-based line number)."""

    line_number: int
    reason: SkipReason
    detail: str = ""


@dataclass(frozen=True)
class ParseResult:
    records: tuple[QuestionRecord, ...] = ()
    diagnostics: tuple[LineDiagnostic, ...] = ()

    @property
    def skipped(self) -> int:
        return len(self.diagnostics)


def build_record(
    values: Sequence[str], roles: Sequence[Optional[FieldRole]]
) -> Optional[QuestionRecord]:
    """Assemble a record from one row, or ``None`` when data is missing.

    Options are collected in column order, not by option number, so a table
    may list "Option C" before "Option A".
    """
    question_text: Optional[str] = None
    correct_answer: Optional[str] = None
    explanation: Optional[str] = None
    options: List[str] = []
    for role, value in zip(roles, values):
        if role is None:
            continue
        if role is FieldRole.QUESTION_TEXT:
            question_text = value
        elif role.is_option:
            options.append(value)
        elif role is FieldRole.CORRECT_ANSWER:
            correct_answer = value
        elif role is FieldRole.EXPLANATION:
            explanation = value

    if question_text is None or len(options) < 2 or not correct_answer:
        return None
    # An empty question cell still counts as present when the column exists.
    return QuestionRecord(
        question_text=question_text,
        options=tuple(options),
        correct_answer=correct_answer,
        explanation=explanation,
    )


def parse_question_table(text: str) -> ParseResult:
    """Parse a whole table into records plus per-line diagnostics."""
    stripped = (text or "").strip()
    if not stripped:
        return ParseResult()

    lines = _LINE_SPLIT_RE.split(stripped)
    header_cells = split_header_row(lines[0])
    roles = map_headers(header_cells)
    expected = len(header_cells)

    records: List[QuestionRecord] = []
    diagnostics: List[LineDiagnostic] = []
    for offset, line in enumerate(lines[1:], start=2):
        if not line.strip():
            continue
        diagnostic = None
        try:
            values = tokenize_line(line)
        except LineParseError as exc:
            diagnostic = LineDiagnostic(offset, SkipReason.UNPARSEABLE, str(exc))
        else:
            if len(values) != expected:
                diagnostic = LineDiagnostic(
                    offset,
                    SkipReason.COLUMN_MISMATCH,
                    f"expected {expected} fields, found {len(values)}",
                )
            else:
                record = build_record(values, roles)
                if record is not None:
                    records.append(record)
                    continue
                diagnostic = LineDiagnostic(
                    offset,
                    SkipReason.INSUFFICIENT_DATA,
                    "needs question text, two options and a correct answer",
                )
        diagnostics.append(diagnostic)
        logger.warning(
            "Skipping line %d: %s",
            diagnostic.line_number,
            diagnostic.reason.value,
            extra={"line_number": offset, "detail": diagnostic.detail},
        )

    return ParseResult(records=tuple(records), diagnostics=tuple(diagnostics))


def is_correct_answer(selected: Optional[str], record: QuestionRecord) -> bool:
    """Check ``selected`` against the record's correct answer.

    The literal comparison runs first; only when it fails is the stored
    answer read as a letter label indexing into the options.
    """
    if selected is None:
        return False
    if selected == record.correct_answer:
        return True
    letter = record.correct_answer.strip().upper()
    if letter not in ANSWER_LETTERS:
        return False
    index = ANSWER_LETTERS.index(letter)
    return index < len(record.options) and record.options[index] == selected


def correct_option(record: QuestionRecord) -> Optional[str]:
    """First option that counts as correct, or ``None`` if none resolves."""
    for option in record.options:
        if is_correct_answer(option, record):
            return option
    return None


def option_label(index: int) -> str:
    """Display label for the option at ``index`` (``0 -> "A"``)."""
    return chr(ord("A") + index)


class OptionState(Enum):
    """How an option should be highlighted once a question is answered."""

    NEUTRAL = "neutral"
    SELECTED_CORRECT = "selected-correct"
    SELECTED_INCORRECT = "selected-incorrect"
    MISSED_CORRECT = "missed-correct"


def option_state(
    record: QuestionRecord,
    option: str,
    response: Optional["ResponseEntry"],
) -> OptionState:
    if response is None or not response.selected_option:
        return OptionState.NEUTRAL
    selected = response.selected_option == option
    correct = is_correct_answer(option, record)
    if selected and correct:
        return OptionState.SELECTED_CORRECT
    if selected and not response.is_correct:
        return OptionState.SELECTED_INCORRECT
    if not selected and correct:
        return OptionState.MISSED_CORRECT
    return OptionState.NEUTRAL
