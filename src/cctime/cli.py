"""Command-line interface: response-time reports, exports and streaks."""

import logging
from datetime import date, datetime, time, timedelta, timezone
from pathlib import Path

import click

from cctime.services.config_manager import ConfigManager
from cctime.services.exporter import EXPORT_FORMATS, default_export_path, export_report
from cctime.services.metrics_reducer import calculate_statistics, filter_by_date_range
from cctime.services.sequence_analysis import analyze_sequences
from cctime.services.session_finder import find_session_files, session_id_from_filename
from cctime.services.streak_analyzer import analyze_streaks, format_streak_message
from cctime.services.transcript_processor import BatchResult, build_report, process_files
from cctime.services.turn_cache import TurnCache
from cctime.types.sessions import SessionFile
from cctime.utils.formatting import format_day, format_duration

logger = logging.getLogger(__name__)


def _parse_day(ctx, param, value):
    if value is None:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise click.BadParameter("expected YYYY-MM-DD")


_ANALYSIS_OPTIONS = (
    click.option("--projects-dir", type=click.Path(file_okay=False, path_type=Path),
                 help="Claude projects directory (default from settings)."),
    click.option("--from", "start", callback=_parse_day, help="First day, YYYY-MM-DD (UTC)."),
    click.option("--to", "end", callback=_parse_day, help="Last day, YYYY-MM-DD (UTC)."),
    click.option("--project", help="Only projects whose path contains this text."),
    click.option("--no-filter", is_flag=True, help="Keep turns slower than --max-latency."),
    click.option("--max-latency", type=int, help="Outlier ceiling in ms (default 300000)."),
    click.option("--no-cache", is_flag=True, help="Re-parse every file."),
)


def analysis_options(func):
    """Options shared by every command that reads session logs."""
    for option in reversed(_ANALYSIS_OPTIONS):
        func = option(func)
    return func


@click.group()
@click.option("--debug", is_flag=True, help="Verbose logging.")
@click.option("--config", "config_path", type=click.Path(dir_okay=False),
              help="Settings file (INI).")
@click.pass_context
def cli(ctx, debug, config_path):
    """Response-time analytics for Claude Code session logs."""
    config = ConfigManager(config_path)
    debug = debug or config.get_bool("advanced/debugLogging")
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = config


def _projects_root(config: ConfigManager, projects_dir) -> Path:
    return projects_dir or Path(config.get_string("general/sessionDir")).expanduser()


def _load(config: ConfigManager, projects_dir, start, end, project,
          no_filter, max_latency, no_cache, files=None):
    """Find, process and reduce; returns (batch, report, files)."""
    if start and end and start > end:
        raise click.BadParameter("--from is after --to")

    if files is None:
        root = _projects_root(config, projects_dir)
        start_dt = datetime.combine(start, time.min, timezone.utc) if start else None
        # Files touched after the last day can still hold turns from it
        files = find_session_files(root, start=start_dt, project=project)

    cache = None
    if not no_cache and config.get_bool("cache/enabled"):
        cache = TurnCache()
    try:
        batch = process_files(
            files,
            cache=cache,
            filter_outliers=not no_filter and config.get_bool("analysis/filterOutliers"),
            max_latency_ms=(
                max_latency if max_latency is not None
                else config.get_int("analysis/maxLatencyMs")
            ),
            gap_threshold=timedelta(minutes=config.get_int("analysis/burstGapMinutes")),
        )
    finally:
        if cache is not None:
            cache.close()

    report = build_report(batch)
    if start or end:
        report = filter_by_date_range(
            report,
            start or date.min,
            end or date.max,
        )
    return batch, report, files


def _echo_processing_summary(batch: BatchResult):
    click.echo(
        f"{batch.files_processed} files processed, "
        f"{batch.decode_failures} lines skipped as unparsable"
    )
    if batch.failed_files:
        click.echo(f"{len(batch.failed_files)} files could not be read", err=True)


@cli.command()
@analysis_options
@click.pass_obj
def report(config, projects_dir, start, end, project, no_filter, max_latency, no_cache):
    """Summary, daily breakdown and usage streak."""
    batch, data, files = _load(config, projects_dir, start, end, project,
                               no_filter, max_latency, no_cache)
    _echo_processing_summary(batch)

    summary = data.summary
    if summary.turn_count == 0:
        click.echo("No responses found.")
    else:
        click.echo("")
        click.echo(f"Responses:      {summary.turn_count}")
        click.echo(f"Sessions:       {summary.unique_sessions}")
        click.echo(f"Total time:     {format_duration(summary.total_latency_ms)}")
        click.echo(f"Average:        {format_duration(summary.mean_latency_ms)}")
        click.echo(f"Date range:     {format_day(summary.date_from)} to {format_day(summary.date_to)}")
        click.echo("")
        click.echo(f"{'Date':<12}{'Count':>7}{'Total':>10}{'Avg':>9}{'P50':>9}{'P90':>9}{'P99':>9}")
        for key, b in data.daily.items():
            click.echo(
                f"{key:<12}{b.count:>7}{format_duration(b.total_latency_ms):>10}"
                f"{format_duration(b.mean_latency_ms):>9}{format_duration(b.percentiles.p50):>9}"
                f"{format_duration(b.percentiles.p90):>9}{format_duration(b.percentiles.p99):>9}"
            )

    # Streaks span all usage, not just the reported range
    if start is not None:
        files = find_session_files(_projects_root(config, projects_dir), project=project)
    click.echo("")
    click.echo(format_streak_message(analyze_streaks(f.modified_at for f in files)))


@cli.command()
@analysis_options
@click.option("--format", "fmt", type=click.Choice(EXPORT_FORMATS),
              help="Export format (default from settings).")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path),
              help="Output file (default: timestamped file in the export directory).")
@click.option("--no-stats", is_flag=True, help="Leave out per-session details.")
@click.pass_obj
def export(config, projects_dir, start, end, project, no_filter, max_latency, no_cache,
           fmt, output, no_stats):
    """Write the report as JSON, CSV or Markdown."""
    fmt = fmt or config.get_string("export/defaultFormat")
    batch, data, _ = _load(config, projects_dir, start, end, project,
                           no_filter, max_latency, no_cache)
    _echo_processing_summary(batch)

    if output is None:
        output = default_export_path(fmt, config.get_string("export/defaultPath"))
    include_stats = not no_stats and config.get_bool("export/includeStats")
    try:
        path = export_report(data, fmt, output, include_stats=include_stats)
    except OSError as e:
        raise click.ClickException(f"Export failed: {e}")
    click.echo(f"Exported to {path}")


@cli.command()
@analysis_options
@click.option("--file", "log_file", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="Analyze a single .jsonl file.")
@click.option("--dir", "log_dir", type=click.Path(exists=True, file_okay=False, path_type=Path),
              help="Analyze every .jsonl file in a directory.")
@click.pass_obj
def longest(config, projects_dir, start, end, project, no_filter, max_latency, no_cache,
            log_file, log_dir):
    """Find the longest assistant burst."""
    files = None
    if log_file is not None:
        if log_file.suffix != ".jsonl":
            raise click.BadParameter("must be a .jsonl file", param_hint="--file")
        files = [_session_file(log_file)]
    elif log_dir is not None:
        files = [_session_file(p) for p in sorted(log_dir.glob("*.jsonl"))]
        if not files:
            raise click.ClickException("No .jsonl files found in directory")

    # Long bursts often follow slow first responses; keep them
    batch, _, _ = _load(config, projects_dir, start, end, project,
                        True, max_latency, no_cache, files=files)
    _echo_processing_summary(batch)

    analysis = analyze_sequences(batch.turns)
    if analysis.longest is None:
        click.echo("No assistant bursts found.")
        return

    turn = analysis.longest
    click.echo("")
    click.echo(f"Longest burst:  {format_duration(turn.burst_duration_ms)}")
    click.echo(f"Session:        {turn.session_id}")
    click.echo(f"Started:        {turn.trigger_timestamp.isoformat()}")
    click.echo(f"First response: {format_duration(turn.response_latency_ms)}")
    click.echo(f"Messages:       {turn.activity_count} ({turn.tool_invocation_count} tool calls)")
    click.echo(f"Prompt:         {turn.trigger_text}")
    click.echo("")
    click.echo("Burst durations:")
    for label, count in analysis.time_distribution.items():
        click.echo(f"  {label:<8}{count:>6}")

    stats = calculate_statistics(t.burst_duration_ms for t in analysis.turns)
    click.echo(f"  median {format_duration(stats.median)}, p90 {format_duration(stats.p90)}")


@cli.command()
@click.option("--projects-dir", type=click.Path(file_okay=False, path_type=Path),
              help="Claude projects directory (default from settings).")
@click.pass_obj
def streak(config, projects_dir):
    """Consecutive-day usage streaks."""
    root = _projects_root(config, projects_dir)
    files = find_session_files(root)
    info = analyze_streaks(f.modified_at for f in files)
    click.echo(format_streak_message(info))
    click.echo(f"Days used: {info.total_days_used}")


def _session_file(path: Path) -> SessionFile:
    stat = path.stat()
    return SessionFile(
        session_id=session_id_from_filename(path.name),
        project_path=str(path.parent),
        file_path=str(path),
        modified_at=stat.st_mtime,
        size=stat.st_size,
    )


def main():
    cli(prog_name="cctime")
