"""Rich-powered console front end for a practice session.

The loop renders the engine's current question, reads one command per turn
from an input provider and applies it to the :class:`QuizEngine`. All state
lives in the engine; this module only translates between keystrokes and
engine operations, which keeps it easy to drive from tests with a scripted
provider and a recording console.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Literal, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .engine import (
    EmptySessionError,
    Practice,
    PracticeSession,
    QuestionStatus,
    QuizEngine,
    ScoreSummary,
    Summary,
    TopicSelect,
)
from .records import (
    ANSWER_LETTERS,
    OptionState,
    correct_option,
    option_label,
    option_state,
)

InputProvider = Callable[[], str]
ExitAction = Literal["finished", "back", "quit"]
CommandType = Literal[
    "select", "next", "prev", "explain", "goto", "list", "back", "quit"
]

_GOTO_RE = re.compile(r"^(?:g|goto)\s+(\d+)$")

_OPTION_STYLES = {
    OptionState.SELECTED_CORRECT: ("✔", "bold green"),
    OptionState.SELECTED_INCORRECT: ("✘", "bold red"),
    OptionState.MISSED_CORRECT: ("→", "green"),
    OptionState.NEUTRAL: (" ", ""),
}

_STATUS_STYLES = {
    QuestionStatus.UNANSWERED: ("·", "dim"),
    QuestionStatus.CORRECT: ("✔", "green"),
    QuestionStatus.INCORRECT: ("✘", "red"),
}


@dataclass(frozen=True)
class SessionCommand:
    """Normalized user command parsed from console input."""

    type: CommandType
    argument: Optional[str] = None


@dataclass(frozen=True)
class QuizSessionResult:
    """Return value from ``run_quiz_session``."""

    exit_action: ExitAction
    score: Optional[ScoreSummary]


def parse_session_command(raw: Optional[str]) -> Optional[SessionCommand]:
    """Parse raw user input into a structured command."""

    if raw is None:
        return None
    text = raw.strip()
    if not text:
        return None
    lowered = text.lower()
    if lowered in {"n", "next"}:
        return SessionCommand("next")
    if lowered in {"p", "prev", "previous"}:
        return SessionCommand("prev")
    if lowered in {"e", "explain"}:
        return SessionCommand("explain")
    if lowered in {"l", "list"}:
        return SessionCommand("list")
    if lowered in {"m", "menu", "back"}:
        return SessionCommand("back")
    if lowered in {"q", "quit", "exit"}:
        return SessionCommand("quit")
    match = _GOTO_RE.match(lowered)
    if match:
        return SessionCommand("goto", match.group(1))
    if len(text) == 1 and text.upper() in ANSWER_LETTERS:
        return SessionCommand("select", text.upper())
    return None


def run_quiz_session(
    engine: QuizEngine,
    console: Console,
    input_provider: InputProvider,
) -> QuizSessionResult:
    """Run an interactive session on an engine that is already practising."""

    last_session = engine.session
    while True:
        state = engine.state
        if isinstance(state, TopicSelect):
            return QuizSessionResult("back", _score_of(last_session))
        last_session = state.session
        if isinstance(state, Summary):
            _render_summary(console, state.session.score())
            if _wants_review(console, input_provider):
                try:
                    engine.review_incorrect()
                except EmptySessionError as exc:
                    console.print(f"[yellow]{exc}[/]")
                else:
                    continue
            score = state.session.score()
            engine.reset()
            return QuizSessionResult("finished", score)

        _render_question(console, engine, state.session)
        try:
            raw = input_provider()
        except (EOFError, KeyboardInterrupt, StopIteration):
            console.print("\n[bold yellow]Session interrupted.[/]")
            return _quit(engine, last_session)
        command = parse_session_command(raw)
        if command is None:
            console.print("[red]Unrecognized command. Try again.[/]")
            continue
        if command.type == "quit":
            console.print("\n[bold yellow]Ending session.[/]")
            return _quit(engine, last_session)
        _apply_command(command, engine, state.session, console)


def _score_of(session: Optional[PracticeSession]) -> Optional[ScoreSummary]:
    return session.score() if session is not None else None


def _quit(
    engine: QuizEngine, session: Optional[PracticeSession]
) -> QuizSessionResult:
    if isinstance(engine.state, Practice):
        engine.back()
    return QuizSessionResult("quit", _score_of(session))


def _wants_review(console: Console, input_provider: InputProvider) -> bool:
    console.print(
        Text(
            "Enter r to review incorrect answers, anything else to finish.",
            style="dim",
        )
    )
    try:
        raw = input_provider()
    except (EOFError, KeyboardInterrupt, StopIteration):
        return False
    return (raw or "").strip().lower() in {"r", "review"}


def _apply_command(
    command: SessionCommand,
    engine: QuizEngine,
    session: PracticeSession,
    console: Console,
) -> None:
    if command.type == "select" and command.argument:
        question = engine.current_question().record
        index = ANSWER_LETTERS.index(command.argument)
        if index >= len(question.options):
            console.print(
                "[red]'%s' is not a valid choice for this question.[/red]"
                % command.argument,
            )
            return
        engine.select_option(question.options[index])
        return
    if command.type == "next":
        engine.next()
        return
    if command.type == "prev":
        engine.previous()
        return
    if command.type == "explain":
        engine.toggle_explanation()
        return
    if command.type == "goto" and command.argument:
        try:
            engine.go_to(int(command.argument) - 1)
        except IndexError:
            console.print(f"[red]No question number {command.argument}.[/]")
        return
    if command.type == "list":
        _render_review_list(console, engine, session)
        return
    if command.type == "back":
        engine.back()


def _render_question(
    console: Console, engine: QuizEngine, session: PracticeSession
) -> None:
    record = session.current.record
    response = engine.current_response()

    header = Text.assemble(
        (f"Question {session.current_index + 1}", "bold cyan"),
        (f" / {session.total}", "dim"),
    )
    console.print()
    console.rule(header)
    console.print(Text(record.question_text))

    table = Table(show_header=False, box=box.SIMPLE, expand=True)
    table.add_column("Key", justify="center", style="cyan")
    table.add_column("Choice")
    for idx, option in enumerate(record.options):
        marker, style = _OPTION_STYLES[option_state(record, option, response)]
        indicator = "•" if option == response.selected_option else " "
        row = Text(f"{indicator}{marker} ")
        row.append(option, style=style or None)
        table.add_row(option_label(idx), row)
    console.print(table)

    if response.explanation_visible:
        console.print(
            Panel(
                record.explanation or "No explanation provided.",
                title="Explanation",
                border_style="blue",
            )
        )

    score = session.score()
    letters = ", ".join(
        option_label(idx) for idx in range(len(record.options))
    )
    console.print(
        Text(
            f"Attempted {score.attempted}/{score.total} | "
            f"Correct {score.correct} | Accuracy {score.accuracy}%",
            style="dim",
        )
    )
    console.print(
        Text(
            f"Commands: choices [{letters}], n (next), p (prev), "
            "e (explanation), g <num> (go to), l (list), m (menu), q (quit)",
            style="dim",
        )
    )


def _render_review_list(
    console: Console, engine: QuizEngine, session: PracticeSession
) -> None:
    table = Table(title="Questions", box=box.SIMPLE, expand=True)
    table.add_column("#", justify="right")
    table.add_column("Status", justify="center")
    table.add_column("Question", overflow="fold")
    for idx, status in enumerate(engine.question_statuses()):
        symbol, style = _STATUS_STYLES[status]
        number = Text(str(idx + 1))
        if idx == session.current_index:
            number.stylize("bold blue")
        table.add_row(
            number,
            Text(symbol, style=style),
            session.questions[idx].record.question_text,
        )
    console.print(table)


def _render_summary(console: Console, score: ScoreSummary) -> None:
    console.print()
    console.rule(Text("Session Summary", style="bold magenta"))

    overview = Table(
        show_header=False,
        box=box.MINIMAL_DOUBLE_HEAD,
        expand=False,
    )
    overview.add_column("Metric", style="bold")
    overview.add_column("Value", justify="right")
    overview.add_row("Total questions", str(score.total))
    overview.add_row("Attempted", str(score.attempted))
    overview.add_row("Correct", str(score.correct))
    overview.add_row("Unanswered", str(score.unanswered))
    overview.add_row("Accuracy", f"{score.accuracy}%")
    console.print(overview)

    if not score.incorrect:
        return
    wrong = Table(title="Incorrect answers", box=box.SIMPLE, expand=True)
    wrong.add_column("#", justify="right")
    wrong.add_column("Question", overflow="fold")
    wrong.add_column("Correct answer", overflow="fold")
    for idx, record in enumerate(score.incorrect, start=1):
        wrong.add_row(
            str(idx),
            record.question_text,
            correct_option(record) or record.correct_answer,
        )
    console.print(wrong)
