"""Services for cctime."""

from cctime.services.record_decoder import decode_line, read_log_file, stream_log_file
from cctime.services.turn_segmenter import segment_turns, TurnSegmenter
from cctime.services.metrics_reducer import reduce_turns, filter_outliers, merge_reports
from cctime.services.streak_analyzer import analyze_streaks
from cctime.services.sequence_analysis import analyze_sequences
from cctime.services.session_finder import find_session_files
from cctime.services.turn_cache import TurnCache
from cctime.services.transcript_processor import process_file, process_files, build_report
from cctime.services.exporter import export_report
from cctime.services.config_manager import ConfigManager

__all__ = [
    "decode_line",
    "read_log_file",
    "stream_log_file",
    "segment_turns",
    "TurnSegmenter",
    "reduce_turns",
    "filter_outliers",
    "merge_reports",
    "analyze_streaks",
    "analyze_sequences",
    "find_session_files",
    "TurnCache",
    "process_file",
    "process_files",
    "build_report",
    "export_report",
    "ConfigManager",
]
