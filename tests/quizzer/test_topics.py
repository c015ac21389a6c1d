from __future__ import annotations

import pytest

from fixtures import GEOGRAPHY_CSV, make_record
from mcq_drill.quizzer.topics import (
    DuplicateTopicError,
    EmptyContentError,
    EmptyTopicNameError,
    ImportFailure,
    NoValidRecordsError,
    TopicImportError,
    TopicStore,
    import_topic,
)


def test_add_topic_lists_newest_first() -> None:
    store = TopicStore()
    first = store.add_topic("Geography", [make_record()])
    second = store.add_topic("Math", [make_record(question="1+1?")])

    assert [t.name for t in store.list_topics()] == ["Math", "Geography"]
    assert first.id != second.id
    assert store.get(first.id) is first
    assert len(store) == 2
    assert first.id in store


def test_duplicate_name_rejected_case_insensitively() -> None:
    store = TopicStore()
    store.add_topic("Math", [make_record()])

    with pytest.raises(DuplicateTopicError) as excinfo:
        store.add_topic("  mATH ", [make_record()])

    assert excinfo.value.reason is ImportFailure.DUPLICATE_NAME
    assert [t.name for t in store.list_topics()] == ["Math"]


def test_remove_topic_is_idempotent() -> None:
    store = TopicStore()
    topic = store.add_topic("Math", [make_record()])

    store.remove_topic(topic.id)
    store.remove_topic(topic.id)
    store.remove_topic("topic-999")

    assert store.list_topics() == []
    with pytest.raises(KeyError):
        store.get(topic.id)


def test_ids_are_not_reused_after_removal() -> None:
    store = TopicStore()
    first = store.add_topic("A", [make_record()])
    store.remove_topic(first.id)
    second = store.add_topic("A", [make_record()])
    assert second.id != first.id


def test_find_by_name() -> None:
    store = TopicStore()
    topic = store.add_topic("History", [make_record()])
    assert store.find_by_name("history") is topic
    assert store.find_by_name("physics") is None


def test_collect_questions_follows_list_order() -> None:
    store = TopicStore()
    a = store.add_topic("A", [make_record(question="a1"), make_record(question="a2")])
    b = store.add_topic("B", [make_record(question="b1")])
    store.add_topic("C", [make_record(question="c1")])

    collected = store.collect_questions([a.id, b.id, "missing"])
    assert [q.question_text for q in collected] == ["b1", "a1", "a2"]


def test_import_topic_success() -> None:
    store = TopicStore()
    outcome = import_topic(store, "  Geography ", GEOGRAPHY_CSV)

    assert outcome.topic.name == "Geography"
    assert len(outcome.topic.questions) == 3
    assert outcome.diagnostics == ()
    assert store.list_topics() == [outcome.topic]


def test_import_topic_reports_skipped_lines() -> None:
    text = GEOGRAPHY_CSV + "Broken row,only,three\n"
    outcome = import_topic(TopicStore(), "Geo", text)
    assert len(outcome.topic.questions) == 3
    assert [d.line_number for d in outcome.diagnostics] == [5]


def test_import_twice_fails_with_duplicate_name() -> None:
    store = TopicStore()
    import_topic(store, "Math", GEOGRAPHY_CSV)

    with pytest.raises(DuplicateTopicError):
        import_topic(store, "math", GEOGRAPHY_CSV)

    assert [t.name for t in store.list_topics()] == ["Math"]


@pytest.mark.parametrize(
    ("name", "text", "error", "reason"),
    [
        ("Math", "", EmptyContentError, ImportFailure.EMPTY_CONTENT),
        ("Math", "  \n\t", EmptyContentError, ImportFailure.EMPTY_CONTENT),
        ("  ", GEOGRAPHY_CSV, EmptyTopicNameError, ImportFailure.EMPTY_NAME),
        (
            "Math",
            "Question,Option A\nQ?,only\n",
            NoValidRecordsError,
            ImportFailure.NO_VALID_RECORDS,
        ),
    ],
)
def test_import_topic_hard_failures_leave_store_untouched(
    name: str, text: str, error: type, reason: ImportFailure
) -> None:
    store = TopicStore()
    with pytest.raises(error) as excinfo:
        import_topic(store, name, text)

    assert isinstance(excinfo.value, TopicImportError)
    assert excinfo.value.reason is reason
    assert len(store) == 0


def test_no_valid_records_keeps_diagnostics() -> None:
    text = "Question,Option A,Option B,Correct\nQ?,a,b\n"
    with pytest.raises(NoValidRecordsError) as excinfo:
        import_topic(TopicStore(), "Math", text)
    assert len(excinfo.value.diagnostics) == 1
