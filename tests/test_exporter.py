"""Tests for cctime.services.exporter."""

import csv
import io
from datetime import datetime, timedelta, timezone

import orjson
import pytest

from cctime.services.exporter import (
    MARKDOWN_SESSION_LIMIT,
    default_export_path,
    export_report,
    render_csv,
    render_json,
    render_markdown,
    to_serializable,
)
from cctime.services.metrics_reducer import reduce_turns
from cctime.types.metrics import MetricsReport
from helpers import BASE_TIME, make_turn


@pytest.fixture
def report():
    turns = [
        make_turn(BASE_TIME, 1500, session_id="abcdef1234567890"),
        make_turn(BASE_TIME + timedelta(minutes=5), 1200, session_id="abcdef1234567890"),
        make_turn(BASE_TIME + timedelta(days=1), 4000, session_id="other"),
    ]
    return reduce_turns(turns, project_paths={"abcdef1234567890": "/home/wiz/myapp"})


# ---------------------------------------------------------------------------
# 1. JSON
# ---------------------------------------------------------------------------

def test_json_structure(report):
    data = orjson.loads(render_json(report))
    assert data["summary"]["totalResponses"] == 3
    assert data["summary"]["totalResponseTimeMs"] == 6700
    assert data["summary"]["dateRange"] == {"from": "2026-01-05", "to": "2026-01-06"}
    assert [d["date"] for d in data["daily"]] == ["2026-01-05", "2026-01-06"]
    assert data["daily"][0]["responseCount"] == 2
    assert data["daily"][0]["percentiles"]["p50"] == 1200
    assert len(data["sessions"]) == 2


def test_json_without_stats(report):
    data = to_serializable(report, include_stats=False)
    assert "sessions" not in data


def test_json_empty_report():
    data = orjson.loads(render_json(MetricsReport()))
    assert data["summary"]["totalResponses"] == 0
    assert data["daily"] == []


# ---------------------------------------------------------------------------
# 2. CSV
# ---------------------------------------------------------------------------

def test_csv_rows(report):
    rows = list(csv.reader(io.StringIO(render_csv(report))))
    assert rows[0][0] == "Date"
    assert rows[1][:4] == ["2026-01-05", "2700", "1350.00", "2"]
    assert rows[2][0] == "2026-01-06"
    assert ["Total Responses", "3"] in rows


def test_csv_without_stats(report):
    text = render_csv(report, include_stats=False)
    assert "Summary Statistics" not in text
    assert len(text.strip().splitlines()) == 3


# ---------------------------------------------------------------------------
# 3. Markdown
# ---------------------------------------------------------------------------

def test_markdown(report):
    text = render_markdown(report)
    assert text.startswith("# Response Time Analysis")
    assert "| Jan 5, 2026 |" in text
    assert "## Session Details" in text
    assert "abcdef12..." in text
    assert "| myapp |" in text


def test_markdown_session_limit():
    turns = [
        make_turn(BASE_TIME, 100 + i, session_id=f"s{i:02d}")
        for i in range(MARKDOWN_SESSION_LIMIT + 5)
    ]
    text = render_markdown(reduce_turns(turns))
    assert f"Showing top {MARKDOWN_SESSION_LIMIT} sessions out of {MARKDOWN_SESSION_LIMIT + 5}" in text


# ---------------------------------------------------------------------------
# 4. Files
# ---------------------------------------------------------------------------

def test_export_writes_file(report, tmp_path):
    out = tmp_path / "nested" / "report.json"
    path = export_report(report, "json", out)
    assert path == out
    assert orjson.loads(out.read_bytes())["summary"]["totalResponses"] == 3


def test_export_unknown_format(report, tmp_path):
    with pytest.raises(ValueError):
        export_report(report, "xml", tmp_path / "r.xml")


def test_default_export_path():
    now = datetime(2026, 1, 5, 10, 30, 15, tzinfo=timezone.utc)
    path = default_export_path("markdown", "/tmp/out", now=now)
    assert str(path) == "/tmp/out/cctime-export-2026-01-05T10-30-15.md"
    assert default_export_path("csv", now=now).suffix == ".csv"
