"""Multiple-choice question drills from loosely formatted CSV text."""

__version__ = "0.1.0"
