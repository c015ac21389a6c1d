"""In-memory topic store and the topic import operation."""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

from .errors import QuizError
from .records import LineDiagnostic, QuestionRecord, parse_question_table

__all__ = [
    "DuplicateTopicError",
    "EmptyContentError",
    "EmptyTopicNameError",
    "ImportFailure",
    "ImportOutcome",
    "NoValidRecordsError",
    "Topic",
    "TopicImportError",
    "TopicStore",
    "import_topic",
]

logger = logging.getLogger(__name__)


class ImportFailure(Enum):
    DUPLICATE_NAME = "duplicate-name"
    EMPTY_CONTENT = "empty-content"
    EMPTY_NAME = "empty-name"
    NO_VALID_RECORDS = "no-valid-records"


class TopicImportError(QuizError):
    """Raised when a topic cannot be created; the store is left untouched."""

    reason: ImportFailure


class DuplicateTopicError(TopicImportError):
    reason = ImportFailure.DUPLICATE_NAME

    def __init__(self, name: str) -> None:
        super().__init__(f"Topic with this name already exists: {name}")
        self.name = name


class EmptyContentError(TopicImportError):
    reason = ImportFailure.EMPTY_CONTENT

    def __init__(self) -> None:
        super().__init__("No content to import.")


class EmptyTopicNameError(TopicImportError):
    reason = ImportFailure.EMPTY_NAME

    def __init__(self) -> None:
        super().__init__("Enter a topic name.")


class NoValidRecordsError(TopicImportError):
    reason = ImportFailure.NO_VALID_RECORDS

    def __init__(self, diagnostics: Sequence[LineDiagnostic] = ()) -> None:
        super().__init__("No valid questions parsed from content.")
        self.diagnostics = tuple(diagnostics)


@dataclass(frozen=True)
class Topic:
    id: str
    name: str
    questions: tuple[QuestionRecord, ...]


class TopicStore:
    """Named topics keyed by opaque ids, newest first.

    Topic names are unique ignoring case. Topics are never edited; replace
    one by removing it and importing again.
    """

    def __init__(self) -> None:
        self._topics: Dict[str, Topic] = {}
        self._order: List[str] = []
        self._ids = itertools.count(1)

    def __len__(self) -> int:
        return len(self._order)

    def __iter__(self) -> Iterator[Topic]:
        return iter(self.list_topics())

    def __contains__(self, topic_id: object) -> bool:
        return topic_id in self._topics

    def add_topic(self, name: str, questions: Iterable[QuestionRecord]) -> Topic:
        clean = name.strip()
        if self.find_by_name(clean) is not None:
            raise DuplicateTopicError(clean)
        topic = Topic(
            id=f"topic-{next(self._ids)}",
            name=clean,
            questions=tuple(questions),
        )
        self._topics[topic.id] = topic
        self._order.insert(0, topic.id)
        return topic

    def remove_topic(self, topic_id: str) -> None:
        if self._topics.pop(topic_id, None) is not None:
            self._order.remove(topic_id)

    def get(self, topic_id: str) -> Topic:
        try:
            return self._topics[topic_id]
        except KeyError as exc:
            raise KeyError(f"Unknown topic id '{topic_id}'.") from exc

    def find_by_name(self, name: str) -> Optional[Topic]:
        wanted = name.strip().lower()
        for topic in self._topics.values():
            if topic.name.lower() == wanted:
                return topic
        return None

    def list_topics(self) -> List[Topic]:
        return [self._topics[topic_id] for topic_id in self._order]

    def collect_questions(
        self, topic_ids: Iterable[str]
    ) -> List[QuestionRecord]:
        """Concatenate the questions of the chosen topics in list order."""
        wanted = set(topic_ids)
        questions: List[QuestionRecord] = []
        for topic in self.list_topics():
            if topic.id in wanted:
                questions.extend(topic.questions)
        return questions


@dataclass(frozen=True)
class ImportOutcome:
    topic: Topic
    diagnostics: tuple[LineDiagnostic, ...] = ()


def import_topic(store: TopicStore, name: str, raw_text: str) -> ImportOutcome:
    """Parse ``raw_text`` and add it to ``store`` as topic ``name``.

    Raises a :class:`TopicImportError` subclass for empty content, a blank
    name, a table without a single valid question, or a name already taken.
    Lines that were skipped are reported on the returned outcome.
    """
    if not (raw_text or "").strip():
        raise EmptyContentError()
    if not (name or "").strip():
        raise EmptyTopicNameError()

    parsed = parse_question_table(raw_text)
    if not parsed.records:
        logger.warning(
            "Import produced no questions",
            extra={"topic": name.strip(), "skipped": parsed.skipped},
        )
        raise NoValidRecordsError(parsed.diagnostics)

    topic = store.add_topic(name, parsed.records)
    logger.info(
        "Imported topic",
        extra={
            "topic": topic.name,
            "topic_id": topic.id,
            "questions": len(topic.questions),
            "skipped": parsed.skipped,
        },
    )
    return ImportOutcome(topic=topic, diagnostics=parsed.diagnostics)
