from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Iterator

import pytest

TESTS_DIR = Path(__file__).resolve().parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))

# Ensure src/ is importable when the package is not installed
ROOT = TESTS_DIR.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from fixtures import WorkspaceBuilder  # noqa: E402
from mcq_drill.core.workspace import WORKSPACE_ENV  # noqa: E402


@pytest.fixture
def workspace(tmp_path: Path) -> WorkspaceBuilder:
    """Provide a helper bound to pytest's per-test tmp directory."""

    return WorkspaceBuilder(tmp_path)


@pytest.fixture(autouse=True)
def _isolated_home(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Iterator[None]:
    """Keep workspace and log files out of the real home directory."""

    monkeypatch.setenv(WORKSPACE_ENV, str(tmp_path / "mcq-home"))
    monkeypatch.delenv("MCQ_DRILL_CONFIG", raising=False)
    monkeypatch.delenv("MCQ_DRILL_LOG_LEVEL", raising=False)
    yield
    logger = logging.getLogger("mcq_drill")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True
