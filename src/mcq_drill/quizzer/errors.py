"""Exception hierarchy shared by the quizzer modules."""


class QuizError(Exception):
    """Base class for whole-operation failures reported to callers."""
