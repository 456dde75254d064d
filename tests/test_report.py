import csv
import io
from datetime import datetime

import pytest

from pwncheck.errors import ExportError
from pwncheck.models import LOOKUP_FAILED, ResultRecord, RunStatistics
from pwncheck.report import (
    default_export_path,
    escape_csv,
    render_csv,
    risk_level,
    summarize,
    write_csv_export,
)


@pytest.fixture
def records():
    return [
        ResultRecord("hunter2", 17, 1),
        ResultRecord("s3cure-and-unique", 0, 2),
        ResultRecord("flaky", LOOKUP_FAILED, 4, error="timed out"),
        ResultRecord('a,"b"', 3, 5),
    ]


def test_summarize_counts_outcomes(records):
    stats = RunStatistics(total=4, api_calls=3, cache_hits=1, breached=2, errors=1)
    report = summarize(records, stats)

    assert report.total == 4
    assert report.safe == 1
    assert report.breached == 2
    assert report.errors == 1
    assert report.api_calls == 3
    assert report.cache_hits == 1
    assert report.cache_efficiency == 0.25
    assert report.cache_efficiency_percent == 25.0


def test_summarize_empty_batch_has_zero_efficiency():
    report = summarize([], RunStatistics())
    assert (report.total, report.safe, report.breached, report.errors) == (0, 0, 0, 0)
    assert report.cache_efficiency == 0.0
    assert report.cache_efficiency_percent == 0.0


def test_summarize_without_stats(records):
    report = summarize(records)
    assert report.api_calls == 0
    assert report.cache_efficiency == 0.0
    assert report.breached == 2


def test_report_as_dict_has_no_passwords(records):
    data = summarize(records, RunStatistics(cache_hits=2)).as_dict()
    assert data["cache_efficiency_percent"] == 50.0
    assert "hunter2" not in repr(data)


def test_export_without_passwords(records):
    assert render_csv(records) == (
        "line_number,pwned_count\n"
        "1,17\n"
        "2,0\n"
        "4,\n"
        "5,3\n"
    )


def test_export_with_passwords_only_for_breached_entries(records):
    rows = list(csv.reader(io.StringIO(render_csv(records, include_passwords=True))))
    assert rows[0] == ["line_number", "pwned_count", "password"]
    assert rows[1] == ["1", "17", "hunter2"]
    assert rows[2] == ["2", "0", ""]
    assert rows[3] == ["4", "", ""]
    assert rows[4] == ["5", "3", 'a,"b"']


def test_export_escapes_commas_and_quotes(records):
    text = render_csv(records, include_passwords=True)
    assert '5,3,"a,""b"""\n' in text


def test_export_quotes_line_breaks():
    text = render_csv([ResultRecord("line\nbreak", 1, 1)], include_passwords=True)
    assert text.endswith('1,1,"line\nbreak"\n')


def test_export_quotes_bare_carriage_return():
    text = render_csv([ResultRecord("a\rb", 1, 1)], include_passwords=True)
    assert text.endswith('1,1,"a\rb"\n')
    assert list(csv.reader(io.StringIO(text, newline="")))[1] == ["1", "1", "a\rb"]


@pytest.mark.parametrize("value,expected", [
    ("plain", "plain"),
    ("", ""),
    ("a,b", '"a,b"'),
    ('say "hi"', '"say ""hi"""'),
    ("cr\r", '"cr\r"'),
    ("lf\n", '"lf\n"'),
])
def test_escape_csv(value, expected):
    assert escape_csv(value) == expected


def test_empty_export_is_header_only():
    assert render_csv([]) == "line_number,pwned_count\n"
    assert render_csv([], include_passwords=True) == "line_number,pwned_count,password\n"


def test_write_csv_export(tmp_path, records):
    path = write_csv_export(records, tmp_path / "out.csv", include_passwords=True)
    assert path.read_text(encoding="utf-8") == render_csv(records, include_passwords=True)


def test_write_csv_export_empty_batch_writes_headers(tmp_path):
    path = write_csv_export([], tmp_path / "empty.csv")
    assert path.read_text(encoding="utf-8") == "line_number,pwned_count\n"


def test_write_failure_raises_export_error_and_keeps_report(tmp_path, records):
    report = summarize(records)
    with pytest.raises(ExportError):
        write_csv_export(records, tmp_path / "missing-dir" / "out.csv")
    assert report.total == 4


def test_default_export_path_is_filesystem_safe(tmp_path):
    path = default_export_path(tmp_path, now=datetime(2026, 10, 17, 9, 5, 3, 123000))
    assert path.parent == tmp_path
    assert path.name == "pwned-password-results-2026-10-17T09-05-03-123.csv"


@pytest.mark.parametrize("count,expected", [
    (LOOKUP_FAILED, "Unknown"),
    (0, "Low"),
    (1, "Medium"),
    (99, "Medium"),
    (100, "High"),
])
def test_risk_level(count, expected):
    assert risk_level(count) == expected
