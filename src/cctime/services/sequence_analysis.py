"""Longest assistant bursts and burst-duration distribution."""

from dataclasses import dataclass, field
from typing import Iterable, Optional

from cctime.types.turns import Turn

# (label, inclusive upper bound in seconds); the last bucket is open-ended
DURATION_BUCKETS = (
    ("0-10s", 10),
    ("10-30s", 30),
    ("30-60s", 60),
    ("1-5m", 300),
    ("5m+", None),
)


@dataclass
class SequenceAnalysis:
    turns: list[Turn] = field(default_factory=list)
    longest: Optional[Turn] = None
    time_distribution: dict[str, int] = field(default_factory=dict)


def longest_turn(turns: Iterable[Turn]) -> Turn | None:
    """The turn with the longest burst; the earliest one wins ties."""
    longest = None
    for turn in turns:
        if longest is None or turn.burst_duration_ms > longest.burst_duration_ms:
            longest = turn
    return longest


def duration_bucket(duration_ms: int) -> str:
    seconds = duration_ms / 1000
    for label, upper in DURATION_BUCKETS:
        if upper is None or seconds <= upper:
            return label
    return DURATION_BUCKETS[-1][0]


def analyze_sequences(turns: Iterable[Turn]) -> SequenceAnalysis:
    """Summarize how long the assistant worked on each turn."""
    turns = list(turns)
    distribution = {label: 0 for label, _ in DURATION_BUCKETS}
    for turn in turns:
        distribution[duration_bucket(turn.burst_duration_ms)] += 1
    return SequenceAnalysis(
        turns=turns,
        longest=longest_turn(turns),
        time_distribution=distribution,
    )
