# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-13
# Description: conftest.py
# -----------------------------------------------------------------------------

import os
import sys
from pathlib import Path

import pytest

# add project root to sys.path
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))
sys.path.insert(0, str(Path(__file__).resolve().parent))

# keep test runs from writing ./logs/chat_rag.log
os.environ.setdefault("RAG_LOG_TO_FILE", "0")

from rag_fakes import build_container  # noqa: E402


@pytest.fixture
def container(tmp_path):
    """Fully wired AppContainer over fakes + a SQLite file DB (not started)."""
    return build_container(tmp_path)
