"""Locate session log files under the Claude projects directory."""

import logging
import re
from datetime import datetime
from pathlib import Path

from cctime.types.sessions import SessionFile

logger = logging.getLogger(__name__)

CLAUDE_PROJECTS_DIR = Path.home() / ".claude" / "projects"

_SESSION_FILE_RE = re.compile(r'^session_([a-zA-Z0-9]+)\.jsonl$')
_COMPOSITE_SUFFIX_RE = re.compile(r'^(.+?)::[0-9a-fA-F]{8}$')


def decode_project_dir(encoded: str) -> str:
    """Decode a project directory name to the project path.

    -home-wiz-AI-LLM → /home/wiz/AI/LLM
    """
    if not encoded:
        return ""
    match = _COMPOSITE_SUFFIX_RE.match(encoded)
    if match:
        encoded = match.group(1)
    return encoded.replace("-", "/")


def session_id_from_filename(filename: str) -> str:
    """session_abcd1234.jsonl → abcd1234; anything else → the file stem."""
    match = _SESSION_FILE_RE.match(filename)
    if match:
        return match.group(1)
    return Path(filename).stem


def find_session_files(
    projects_root: str | Path | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
    project: str | None = None,
) -> list[SessionFile]:
    """Find session files, newest first.

    start/end bound the file modification time (inclusive); project keeps
    only projects whose decoded path contains the given substring.
    """
    root = Path(projects_root).expanduser() if projects_root else CLAUDE_PROJECTS_DIR
    if not root.is_dir():
        logger.warning("Projects root does not exist: %s", root)
        return []

    start_ts = start.timestamp() if start else None
    end_ts = end.timestamp() if end else None

    files = []
    for entry in sorted(root.iterdir()):
        if not entry.is_dir():
            continue
        project_path = decode_project_dir(entry.name)
        if project and project not in project_path:
            continue

        # Only .jsonl files directly in the project dir; subdirs hold subagents
        for path in sorted(entry.glob("*.jsonl")):
            try:
                stat = path.stat()
            except OSError as e:
                logger.warning("Cannot stat %s: %s", path, e)
                continue
            if start_ts is not None and stat.st_mtime < start_ts:
                continue
            if end_ts is not None and stat.st_mtime > end_ts:
                continue
            files.append(SessionFile(
                session_id=session_id_from_filename(path.name),
                project_path=project_path,
                file_path=str(path),
                modified_at=stat.st_mtime,
                size=stat.st_size,
            ))

    logger.debug("Found %d session files under %s", len(files), root)
    files.sort(key=lambda f: f.modified_at, reverse=True)
    return files


def list_projects(projects_root: str | Path | None = None) -> list[str]:
    """Unique decoded project paths that have at least one session file."""
    return sorted({f.project_path for f in find_session_files(projects_root)})
