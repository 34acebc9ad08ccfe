"""Turn session files into Turns and reports, one file at a time."""

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Callable, Iterable, Optional

from cctime.services.metrics_reducer import (
    DEFAULT_MAX_LATENCY_MS,
    filter_outliers as drop_outliers,
    reduce_turns,
)
from cctime.services.record_decoder import read_log_file
from cctime.services.turn_cache import TurnCache
from cctime.services.turn_segmenter import MAX_BURST_GAP, TurnSegmenter
from cctime.types.metrics import MetricsReport
from cctime.types.sessions import SessionFile
from cctime.types.turns import SegmentationStats, Turn

logger = logging.getLogger(__name__)


@dataclass
class FileResult:
    session_file: SessionFile
    turns: list[Turn] = field(default_factory=list)
    decode_failures: int = 0
    ignored_lines: int = 0
    stats: Optional[SegmentationStats] = None  # None when served from cache
    cached: bool = False


@dataclass
class BatchResult:
    results: list[FileResult] = field(default_factory=list)
    failed_files: list[str] = field(default_factory=list)

    @property
    def turns(self) -> list[Turn]:
        return [t for r in self.results for t in r.turns]

    @property
    def decode_failures(self) -> int:
        return sum(r.decode_failures for r in self.results)

    @property
    def files_processed(self) -> int:
        return len(self.results)

    @property
    def project_paths(self) -> dict[str, str]:
        return {
            r.session_file.session_id: r.session_file.project_path
            for r in self.results
        }


def process_file(
    session_file: SessionFile,
    gap_threshold: timedelta = MAX_BURST_GAP,
) -> FileResult:
    """Decode and segment one session file.

    Bad lines are counted, never raised. OSError from reading propagates.
    """
    decoded = read_log_file(session_file.file_path)
    segmenter = TurnSegmenter(
        session_id=session_file.session_id,
        source_path=session_file.file_path,
        gap_threshold=gap_threshold,
    )
    for event in decoded.events:
        segmenter.process(event)
    segmenter.finish()

    logger.debug(
        "%s: %d events, %d turns, %d rejected lines, %d unanswered",
        session_file.file_path, len(decoded.events), len(segmenter.turns),
        decoded.failure_count, segmenter.stats.unanswered_triggers,
    )
    return FileResult(
        session_file=session_file,
        turns=segmenter.turns,
        decode_failures=decoded.failure_count,
        ignored_lines=decoded.ignored,
        stats=segmenter.stats,
    )


def process_files(
    files: Iterable[SessionFile],
    cache: TurnCache | None = None,
    filter_outliers: bool = True,
    max_latency_ms: int = DEFAULT_MAX_LATENCY_MS,
    gap_threshold: timedelta = MAX_BURST_GAP,
    on_progress: Callable[[int, int], None] | None = None,
) -> BatchResult:
    """Process files sequentially; an unreadable file is skipped, not fatal."""
    files = list(files)
    batch = BatchResult()
    gap_seconds = gap_threshold.total_seconds()

    for i, session_file in enumerate(files, start=1):
        result = None
        if cache is not None:
            hit = cache.get(
                session_file.file_path, session_file.size,
                session_file.modified_at, gap_seconds,
            )
            if hit is not None:
                turns, failures = hit
                result = FileResult(
                    session_file=session_file,
                    turns=turns,
                    decode_failures=failures,
                    cached=True,
                )

        if result is None:
            try:
                result = process_file(session_file, gap_threshold)
            except OSError as e:
                logger.warning("Failed to read %s: %s", session_file.file_path, e)
                batch.failed_files.append(session_file.file_path)
                continue
            if cache is not None:
                cache.put(
                    session_file.file_path, session_file.session_id,
                    session_file.size, session_file.modified_at,
                    result.turns, result.decode_failures, gap_seconds,
                )

        if filter_outliers:
            result.turns = drop_outliers(result.turns, max_latency_ms)
        batch.results.append(result)

        if on_progress is not None:
            on_progress(i, len(files))

    return batch


def build_report(batch: BatchResult) -> MetricsReport:
    """Reduce every turn in a batch into one report."""
    return reduce_turns(batch.turns, project_paths=batch.project_paths)
