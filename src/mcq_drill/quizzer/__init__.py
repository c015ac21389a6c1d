from ._main import build_arg_parser, main
from .engine import (
    EmptySessionError,
    InvalidTransitionError,
    Practice,
    PracticeSession,
    QuestionStatus,
    QuizEngine,
    ResponseEntry,
    ScoreSummary,
    SessionQuestion,
    Summary,
    TopicSelect,
    start_session,
)
from .errors import QuizError
from .parsing import (
    FieldRole,
    LineParseError,
    map_header,
    map_headers,
    tokenize_line,
)
from .records import (
    LineDiagnostic,
    OptionState,
    ParseResult,
    QuestionRecord,
    SkipReason,
    correct_option,
    is_correct_answer,
    option_state,
    parse_question_table,
)
from .session import QuizSessionResult, run_quiz_session
from .topics import (
    DuplicateTopicError,
    EmptyContentError,
    EmptyTopicNameError,
    ImportFailure,
    ImportOutcome,
    NoValidRecordsError,
    Topic,
    TopicImportError,
    TopicStore,
    import_topic,
)
from .utils import fisher_yates_shuffle

__all__ = [
    "build_arg_parser",
    "main",
    "EmptySessionError",
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
    "QuizError",
    "FieldRole",
    "LineParseError",
    "map_header",
    "map_headers",
    "tokenize_line",
    "LineDiagnostic",
    "OptionState",
    "ParseResult",
    "QuestionRecord",
    "SkipReason",
    "correct_option",
    "is_correct_answer",
    "option_state",
    "parse_question_table",
    "QuizSessionResult",
    "run_quiz_session",
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
    "fisher_yates_shuffle",
]
