"""Shared testing fixtures for the mcq_drill test suite."""

from .questions import GEOGRAPHY_CSV, make_record  # noqa: F401
from .workspace import WorkspaceBuilder  # noqa: F401

__all__ = [
    "GEOGRAPHY_CSV",
    "WorkspaceBuilder",
    "make_record",
]
