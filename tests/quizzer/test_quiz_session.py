from __future__ import annotations

import pytest
from rich.console import Console

from fixtures import make_record
from mcq_drill.quizzer.engine import Practice, TopicSelect, start_session
from mcq_drill.quizzer.session import (
    QuizSessionResult,
    SessionCommand,
    parse_session_command,
    run_quiz_session,
)


def make_provider(commands: list[str]):
    iterator = iter(commands)

    def _provider() -> str:
        return next(iterator)

    return _provider


def make_console() -> Console:
    return Console(record=True, width=80, force_terminal=True)


def _records():
    return [
        make_record(
            question="Capital of France?",
            correct="A",
            explanation="Paris is on the Seine.",
        ),
        make_record(question="Capital of Italy?", correct="Rome"),
        make_record(question="Capital of Spain?", correct="D"),
    ]


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("a", SessionCommand("select", "A")),
        (" D ", SessionCommand("select", "D")),
        ("  Next ", SessionCommand("next")),
        ("n", SessionCommand("next")),
        ("p", SessionCommand("prev")),
        ("previous", SessionCommand("prev")),
        ("e", SessionCommand("explain")),
        ("g 3", SessionCommand("goto", "3")),
        ("goto 12", SessionCommand("goto", "12")),
        ("l", SessionCommand("list")),
        ("menu", SessionCommand("back")),
        ("q", SessionCommand("quit")),
        ("exit", SessionCommand("quit")),
    ],
)
def test_parse_session_command_variants(
    raw: str, expected: SessionCommand
) -> None:
    assert parse_session_command(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "   ", "e5", "g", "g x", "?", "ab"])
def test_parse_session_command_rejects_noise(raw) -> None:
    assert parse_session_command(raw) is None


def test_run_quiz_session_finish_flow() -> None:
    console = make_console()
    engine = start_session(_records())
    provider = make_provider(["a", "e", "n", "a", "n", "d", "n", ""])

    result = run_quiz_session(engine, console, provider)

    assert isinstance(result, QuizSessionResult)
    assert result.exit_action == "finished"
    assert result.score.total == 3
    assert result.score.attempted == 3
    assert result.score.correct == 2
    assert result.score.accuracy == 67
    assert isinstance(engine.state, TopicSelect)

    rendered = console.export_text()
    assert "Question 1 / 3" in rendered
    assert "Paris is on the Seine." in rendered
    assert "Session Summary" in rendered
    assert "Incorrect answers" in rendered
    assert "Rome" in rendered
    assert "Ending session" not in rendered


def test_run_quiz_session_quit_returns_to_topic_select() -> None:
    console = make_console()
    engine = start_session(_records())

    result = run_quiz_session(engine, console, make_provider(["a", "quit"]))

    assert result.exit_action == "quit"
    assert result.score.attempted == 1
    assert result.score.correct == 1
    assert isinstance(engine.state, TopicSelect)
    assert "Ending session" in console.export_text()


def test_run_quiz_session_previous_on_first_question_goes_back() -> None:
    engine = start_session(_records())
    result = run_quiz_session(engine, make_console(), make_provider(["p"]))
    assert result.exit_action == "back"
    assert result.score.attempted == 0


def test_run_quiz_session_reports_bad_input() -> None:
    console = make_console()
    records = [make_record(options=("yes", "no"), correct="A")]
    engine = start_session(records)
    provider = make_provider(["zzz", "c", "g 9", "q"])

    result = run_quiz_session(engine, console, provider)

    output = console.export_text()
    assert "Unrecognized command" in output
    assert "'C' is not a valid choice" in output
    assert "No question number 9." in output
    assert result.score.attempted == 0


def test_run_quiz_session_goto_and_list() -> None:
    console = make_console()
    engine = start_session(_records())
    provider = make_provider(["g 3", "d", "l", "m"])

    result = run_quiz_session(engine, console, provider)

    assert result.exit_action == "back"
    assert result.score.correct == 1
    output = console.export_text()
    assert "Question 3 / 3" in output
    assert "Questions" in output
    assert "Capital of Spain?" in output


def test_run_quiz_session_list_follows_review_round() -> None:
    console = make_console()
    engine = start_session(_records())
    provider = make_provider(
        ["b", "n", "b", "n", "a", "n", "r", "l", "q"]
    )

    result = run_quiz_session(engine, console, provider)

    assert result.exit_action == "quit"
    assert result.score.total == 2
    output = console.export_text()
    listing = output[output.rindex("Questions"):]
    assert "Capital of France?" in listing
    assert "Capital of Spain?" in listing
    assert "Capital of Italy?" not in listing


def test_run_quiz_session_explanation_fallback_text() -> None:
    console = make_console()
    engine = start_session([make_record(explanation=None)])
    run_quiz_session(engine, console, make_provider(["e", "q"]))
    assert "No explanation provided." in console.export_text()


def test_run_quiz_session_review_incorrect_round() -> None:
    console = make_console()
    engine = start_session(_records())
    provider = make_provider(
        [
            "b", "n", "b", "n", "a", "n",
            "r",
            "a", "n", "d", "n",
            "",
        ]
    )

    result = run_quiz_session(engine, console, provider)

    assert result.exit_action == "finished"
    assert result.score.total == 2
    assert result.score.correct == 2
    assert console.export_text().count("Session Summary") == 2


def test_run_quiz_session_review_without_mistakes() -> None:
    console = make_console()
    engine = start_session([make_record(correct="B")])

    result = run_quiz_session(engine, console, make_provider(["b", "n", "r"]))

    assert result.exit_action == "finished"
    assert "No incorrect answers to review." in console.export_text()


def test_run_quiz_session_handles_stop_iteration() -> None:
    console = make_console()
    engine = start_session(_records())

    result = run_quiz_session(engine, console, iter(()).__next__)

    assert result.exit_action == "quit"
    assert not isinstance(engine.state, Practice)
    assert "Session interrupted." in console.export_text()


def test_run_quiz_session_without_session() -> None:
    from mcq_drill.quizzer.engine import QuizEngine

    result = run_quiz_session(QuizEngine(), make_console(), lambda: "")
    assert result.exit_action == "back"
    assert result.score is None
