from __future__ import annotations

import logging

import pytest

from fixtures import GEOGRAPHY_CSV, make_record
from mcq_drill.quizzer.engine import ResponseEntry
from mcq_drill.quizzer.records import (
    OptionState,
    QuestionRecord,
    SkipReason,
    correct_option,
    is_correct_answer,
    option_label,
    option_state,
    parse_question_table,
)


def test_parse_question_table_reads_all_rows() -> None:
    result = parse_question_table(GEOGRAPHY_CSV)

    assert result.diagnostics == ()
    assert [r.question_text for r in result.records] == [
        "Capital of France?",
        "Capital of Italy?",
        "Capital of Germany?",
    ]
    first = result.records[0]
    assert first.options == ("Paris", "Rome", "Berlin", "Madrid")
    assert first.correct_answer == "A"
    assert first.explanation == "Paris is on the Seine."
    assert result.records[1].explanation == "Rome, not Milan."


def test_parse_handles_crlf_and_blank_lines() -> None:
    text = (
        "\r\n"
        "question,option1,option2,correct\r\n"
        "\r\n"
        "1+1?,2,3,2\r\n"
        "   \r\n"
        "2+2?,4,5,A\r\n"
    )
    result = parse_question_table(text)
    assert len(result.records) == 2
    assert result.diagnostics == ()


def test_column_mismatch_is_skipped_with_line_number(caplog) -> None:
    text = (
        "Question,Option A,Option B,Correct\n"
        "Ok?,yes,no,A\n"
        "Too many,a,b,c,A\n"
        "Also ok?,yes,no,B\n"
    )
    with caplog.at_level(logging.WARNING, logger="mcq_drill"):
        result = parse_question_table(text)

    assert len(result.records) == 2
    assert len(result.diagnostics) == 1
    diag = result.diagnostics[0]
    assert diag.line_number == 3
    assert diag.reason is SkipReason.COLUMN_MISMATCH
    assert "expected 4" in diag.detail
    assert "Skipping line 3" in caplog.text


def test_insufficient_data_rows_are_skipped() -> None:
    text = (
        "Question,Option A,Option B,Correct\n"
        "No answer?,yes,no,\"\"\n"
        "Fine?,yes,no,A\n"
    )
    result = parse_question_table(text)
    assert [r.question_text for r in result.records] == ["Fine?"]
    assert result.diagnostics[0].reason is SkipReason.INSUFFICIENT_DATA
    assert result.diagnostics[0].line_number == 2


def test_rows_without_two_options_are_rejected() -> None:
    text = "Question,Option A,Notes,Correct\nQ?,yes,extra,A\n"
    result = parse_question_table(text)
    assert result.records == ()
    assert result.skipped == 1


def test_table_without_question_column_yields_nothing() -> None:
    text = "Prompt,Option A,Option B,Correct\nQ?,a,b,A\n"
    assert parse_question_table(text).records == ()


def test_unparseable_line_is_reported() -> None:
    text = "Question,Option A,Option B,Correct\n,,,\nQ?,a,b,A\n"
    result = parse_question_table(text)
    assert len(result.records) == 1
    assert result.diagnostics[0].reason is SkipReason.UNPARSEABLE


def test_empty_text_gives_empty_result() -> None:
    assert parse_question_table("").records == ()
    assert parse_question_table("   \n  ").diagnostics == ()


def test_reordered_option_columns_reorder_options() -> None:
    straight = (
        "Question,Option A,Option B,Option C,Correct\n"
        "Pick?,alpha,beta,gamma,beta\n"
    )
    shuffled = (
        "Option C,Question,Option A,Correct,Option B\n"
        "gamma,Pick?,alpha,beta,beta\n"
    )
    first = parse_question_table(straight).records[0]
    second = parse_question_table(shuffled).records[0]

    assert first.question_text == second.question_text
    assert first.correct_answer == second.correct_answer
    assert first.options == ("alpha", "beta", "gamma")
    assert second.options == ("gamma", "alpha", "beta")


def test_letter_and_literal_answers_resolve_identically() -> None:
    by_letter = make_record(correct="B")
    by_text = make_record(correct="Rome")
    for record in (by_letter, by_text):
        assert is_correct_answer("Rome", record)
        for other in ("Paris", "Berlin", "Madrid"):
            assert not is_correct_answer(other, record)


def test_letter_answer_is_case_and_space_insensitive() -> None:
    record = make_record(correct=" c ")
    assert is_correct_answer("Berlin", record)


def test_literal_match_takes_precedence_over_letter() -> None:
    record = make_record(options=("B", "A", "C"), correct="A")
    # "A" is literal option text; it is correct because it equals the answer.
    assert is_correct_answer("A", record)
    # The letter reading would also make options[0] correct.
    assert is_correct_answer("B", record)


def test_letter_beyond_options_is_not_correct() -> None:
    record = make_record(options=("yes", "no"), correct="D")
    assert not any(is_correct_answer(opt, record) for opt in record.options)
    assert correct_option(record) is None


def test_is_correct_answer_handles_none() -> None:
    assert not is_correct_answer(None, make_record())


def test_correct_option_resolves_letter() -> None:
    assert correct_option(make_record(correct="d")) == "Madrid"
    assert correct_option(make_record(correct="Paris")) == "Paris"


def test_question_record_invariants() -> None:
    with pytest.raises(ValueError):
        QuestionRecord("Q", ("only",), "A")
    with pytest.raises(ValueError):
        QuestionRecord("Q", ("a", "b"), "")


def test_option_label() -> None:
    assert [option_label(i) for i in range(4)] == ["A", "B", "C", "D"]


def test_option_state_for_each_case() -> None:
    record = make_record(correct="B")
    assert option_state(record, "Rome", None) is OptionState.NEUTRAL

    wrong = ResponseEntry(selected_option="Paris", is_correct=False)
    assert option_state(record, "Paris", wrong) is OptionState.SELECTED_INCORRECT
    assert option_state(record, "Rome", wrong) is OptionState.MISSED_CORRECT
    assert option_state(record, "Berlin", wrong) is OptionState.NEUTRAL

    right = ResponseEntry(selected_option="Rome", is_correct=True)
    assert option_state(record, "Rome", right) is OptionState.SELECTED_CORRECT
    assert option_state(record, "Paris", right) is OptionState.NEUTRAL

    hidden_only = ResponseEntry(explanation_visible=True)
    assert option_state(record, "Rome", hidden_only) is OptionState.NEUTRAL
