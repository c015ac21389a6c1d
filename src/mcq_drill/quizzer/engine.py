"""Practice session state machine.

The engine moves between three states::

    TopicSelect --start--> Practice --next at last--> Summary
         ^                   |  ^                        |
         +--previous at 0----+  +----review_incorrect----+
         +--back-------------+                           |
         +--reset----------------------------------------+

Responses are stored sparsely by question index. Scores are folded from the
response map on demand instead of being maintained incrementally.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Iterable, List, Optional, Union

from .errors import QuizError
from .records import QuestionRecord, is_correct_answer

__all__ = [
    "EmptySessionError",
    "EngineState",
    "InvalidTransitionError",
    "Practice",
    "PracticeSession",
    "QuestionStatus",
    "QuizEngine",
    "ResponseEntry",
    "ScoreSummary",
    "SessionQuestion",
    "Summary",
    "TopicSelect",
    "start_session",
]

logger = logging.getLogger(__name__)


class EmptySessionError(QuizError):
    """Raised when a session would start without any questions."""

    def __init__(self, message: str = "No questions to practice.") -> None:
        super().__init__(message)


class InvalidTransitionError(QuizError):
    """Raised when an operation is not allowed in the current state."""


@dataclass(frozen=True)
class ResponseEntry:
    selected_option: Optional[str] = None
    is_correct: bool = False
    explanation_visible: bool = False

    @property
    def attempted(self) -> bool:
        return bool(self.selected_option)


_BLANK_RESPONSE = ResponseEntry()


@dataclass(frozen=True)
class SessionQuestion:
    """A question copied into a session under a session-local id."""

    id: str
    record: QuestionRecord


class QuestionStatus(Enum):
    UNANSWERED = "unanswered"
    CORRECT = "correct"
    INCORRECT = "incorrect"


@dataclass(frozen=True)
class ScoreSummary:
    total: int
    attempted: int
    correct: int
    incorrect: tuple[QuestionRecord, ...]
    unanswered: int
    accuracy: int


@dataclass
class PracticeSession:
    """Snapshot of the questions being practised plus the user's answers."""

    questions: tuple[SessionQuestion, ...]
    current_index: int = 0
    responses: Dict[int, ResponseEntry] = field(default_factory=dict)

    @classmethod
    def from_records(
        cls, records: Iterable[QuestionRecord]
    ) -> "PracticeSession":
        token = uuid.uuid4().hex[:8]
        questions = tuple(
            SessionQuestion(id=f"{index}-{token}", record=record)
            for index, record in enumerate(records)
        )
        if not questions:
            raise EmptySessionError()
        return cls(questions=questions)

    @property
    def total(self) -> int:
        return len(self.questions)

    @property
    def current(self) -> SessionQuestion:
        return self.questions[self.current_index]

    @property
    def is_last(self) -> bool:
        return self.current_index == self.total - 1

    def response_at(self, index: int) -> ResponseEntry:
        return self.responses.get(index, _BLANK_RESPONSE)

    def score(self) -> ScoreSummary:
        attempted = 0
        correct = 0
        incorrect: List[QuestionRecord] = []
        for index in sorted(self.responses):
            response = self.responses[index]
            if not response.attempted:
                continue
            attempted += 1
            if response.is_correct:
                correct += 1
            else:
                incorrect.append(self.questions[index].record)
        accuracy = 0
        if attempted:
            # Integer half-up rounding: 66.67 -> 67, 50.5 -> 51.
            accuracy = (200 * correct + attempted) // (2 * attempted)
        return ScoreSummary(
            total=self.total,
            attempted=attempted,
            correct=correct,
            incorrect=tuple(incorrect),
            unanswered=self.total - attempted,
            accuracy=accuracy,
        )

    def status_at(self, index: int) -> QuestionStatus:
        response = self.response_at(index)
        if not response.attempted:
            return QuestionStatus.UNANSWERED
        if response.is_correct:
            return QuestionStatus.CORRECT
        return QuestionStatus.INCORRECT

    def _hide_explanation(self, index: int) -> None:
        existing = self.responses.get(index)
        if existing is not None and existing.explanation_visible:
            self.responses[index] = replace(existing, explanation_visible=False)


@dataclass(frozen=True)
class TopicSelect:
    pass


@dataclass(frozen=True)
class Practice:
    session: PracticeSession


@dataclass(frozen=True)
class Summary:
    session: PracticeSession


EngineState = Union[TopicSelect, Practice, Summary]


class QuizEngine:
    """Drive one practice run at a time.

    Operations that do not fit the current state raise
    :class:`InvalidTransitionError`; a finished session (``Summary``)
    accepts no further answers.
    """

    def __init__(self) -> None:
        self._state: EngineState = TopicSelect()

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def session(self) -> Optional[PracticeSession]:
        if isinstance(self._state, (Practice, Summary)):
            return self._state.session
        return None

    def _set_state(self, state: EngineState) -> None:
        logger.debug(
            "Session state change",
            extra={
                "from_state": type(self._state).__name__,
                "to_state": type(state).__name__,
            },
        )
        self._state = state

    def _practice(self, action: str) -> PracticeSession:
        if not isinstance(self._state, Practice):
            raise InvalidTransitionError(
                f"Cannot {action} while in {type(self._state).__name__}."
            )
        return self._state.session

    # -- transitions -------------------------------------------------------

    def start(self, records: Iterable[QuestionRecord]) -> PracticeSession:
        if not isinstance(self._state, TopicSelect):
            raise InvalidTransitionError(
                f"Cannot start a session while in {type(self._state).__name__}."
            )
        session = PracticeSession.from_records(records)
        self._set_state(Practice(session))
        return session

    def select_option(self, option: str) -> bool:
        session = self._practice("select an option")
        record = session.current.record
        if option not in record.options:
            return False
        index = session.current_index
        session.responses[index] = ResponseEntry(
            selected_option=option,
            is_correct=is_correct_answer(option, record),
            explanation_visible=session.response_at(index).explanation_visible,
        )
        return True

    def toggle_explanation(self) -> ResponseEntry:
        session = self._practice("toggle the explanation")
        index = session.current_index
        current = session.response_at(index)
        updated = replace(
            current, explanation_visible=not current.explanation_visible
        )
        session.responses[index] = updated
        return updated

    def next(self) -> EngineState:
        session = self._practice("move to the next question")
        if session.is_last:
            self._set_state(Summary(session))
        else:
            session.current_index += 1
            session._hide_explanation(session.current_index)
        return self._state

    def previous(self) -> EngineState:
        session = self._practice("move to the previous question")
        if session.current_index == 0:
            self._set_state(TopicSelect())
        else:
            session.current_index -= 1
            session._hide_explanation(session.current_index)
        return self._state

    def go_to(self, index: int) -> SessionQuestion:
        """Jump straight to ``index``; explanation visibility is kept as is."""
        session = self._practice("jump to a question")
        if not 0 <= index < session.total:
            raise IndexError(
                f"Question index {index} out of range 0..{session.total - 1}"
            )
        session.current_index = index
        return session.current

    def back(self) -> None:
        self._practice("leave the session")
        self._set_state(TopicSelect())

    def reset(self) -> None:
        if isinstance(self._state, Practice):
            raise InvalidTransitionError(
                "Use back() to abandon a session in progress."
            )
        if isinstance(self._state, Summary):
            self._set_state(TopicSelect())

    def review_incorrect(self) -> PracticeSession:
        if not isinstance(self._state, Summary):
            raise InvalidTransitionError(
                "Incorrect answers can only be reviewed from the summary."
            )
        incorrect = self._state.session.score().incorrect
        if not incorrect:
            raise EmptySessionError("No incorrect answers to review.")
        session = PracticeSession.from_records(incorrect)
        self._set_state(Practice(session))
        return session

    # -- queries -----------------------------------------------------------

    def current_question(self) -> SessionQuestion:
        return self._practice("read the current question").current

    def current_response(self) -> ResponseEntry:
        session = self._practice("read the current response")
        return session.response_at(session.current_index)

    def score(self) -> ScoreSummary:
        session = self.session
        if session is None:
            raise InvalidTransitionError("No session to score.")
        return session.score()

    def question_statuses(self) -> List[QuestionStatus]:
        session = self.session
        if session is None:
            raise InvalidTransitionError("No session to review.")
        return [session.status_at(index) for index in range(session.total)]


def start_session(records: Iterable[QuestionRecord]) -> QuizEngine:
    """Create an engine and start practising ``records`` right away."""
    engine = QuizEngine()
    engine.start(records)
    return engine
