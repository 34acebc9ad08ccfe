"""Session file metadata and usage-streak types."""

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass
class SessionFile:
    session_id: str
    project_path: str
    file_path: str
    modified_at: float  # epoch seconds
    size: int = 0


@dataclass(frozen=True)
class UsageStreak:
    current_streak: int = 0
    longest_streak: int = 0
    longest_start: Optional[date] = None
    longest_end: Optional[date] = None
    total_days_used: int = 0
