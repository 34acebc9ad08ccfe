"""Shared test fixtures for cctime."""

import os
import sys
from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(scope="session")
def qapp():
    """Create a QGuiApplication for tests that need Qt."""
    os.environ["QT_QPA_PLATFORM"] = "offscreen"
    from PySide6.QtGui import QGuiApplication

    app = QGuiApplication.instance()
    if app is None:
        app = QGuiApplication(sys.argv or ["test"])
    yield app


@pytest.fixture
def fixtures_dir() -> Path:
    """Path to the test fixtures directory."""
    return FIXTURES_DIR


@pytest.fixture
def simple_session_path(fixtures_dir) -> Path:
    return fixtures_dir / "simple_session.jsonl"


@pytest.fixture
def tools_session_path(fixtures_dir) -> Path:
    return fixtures_dir / "session_with_tools.jsonl"


@pytest.fixture
def compaction_session_path(fixtures_dir) -> Path:
    return fixtures_dir / "session_with_compaction.jsonl"


@pytest.fixture
def malformed_session_path(fixtures_dir) -> Path:
    return fixtures_dir / "malformed_session.jsonl"


@pytest.fixture
def tmp_session_dir(tmp_path) -> Path:
    """Create a temporary Claude projects directory structure."""
    projects_dir = tmp_path / ".claude" / "projects"
    project_dir = projects_dir / "-home-wiz-projects-myapp"
    project_dir.mkdir(parents=True)
    return projects_dir


@pytest.fixture
def tmp_session_file(tmp_session_dir, simple_session_path) -> Path:
    """Create a temporary session file in a mock Claude directory."""
    project_dir = tmp_session_dir / "-home-wiz-projects-myapp"
    dest = project_dir / "session_simple001.jsonl"
    dest.write_text(simple_session_path.read_text())
    return dest


@pytest.fixture
def populated_session_dir(tmp_session_dir, fixtures_dir) -> Path:
    """Projects dir holding every well-formed fixture, one project each."""
    layout = {
        "-home-wiz-projects-myapp": ["simple_session.jsonl", "session_with_tools.jsonl"],
        "-home-wiz-projects-other": ["session_with_compaction.jsonl"],
    }
    for project, names in layout.items():
        project_dir = tmp_session_dir / project
        project_dir.mkdir(exist_ok=True)
        for name in names:
            (project_dir / name).write_text((fixtures_dir / name).read_text())
    return tmp_session_dir
