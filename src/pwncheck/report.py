# src/pwncheck/report.py
"""
Aggregation and CSV export of batch results.

The export never carries more than needed: passwords are only written when
explicitly requested, and even then only for entries confirmed as breached.
"""

import logging
import re
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from .errors import ExportError
from .models import LOOKUP_FAILED, ResultRecord, RunStatistics

logger = logging.getLogger(__name__)

EXPORT_FILENAME_PREFIX = "pwned-password-results"
CSV_HEADERS = ["line_number", "pwned_count"]
_NEEDS_QUOTING = re.compile(r'[",\r\n]')


@dataclass
class Report:
    total: int
    safe: int
    breached: int
    errors: int
    api_calls: int
    cache_hits: int
    cache_efficiency: float  # cache_hits / total, 0.0 for an empty batch
    cancelled: bool = False

    @property
    def cache_efficiency_percent(self) -> float:
        return round(self.cache_efficiency * 100, 1)

    def as_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["cache_efficiency_percent"] = self.cache_efficiency_percent
        return data


def risk_level(count: int) -> str:
    """Map a breach count onto the Low/Medium/High labels used in output."""
    if count == LOOKUP_FAILED:
        return "Unknown"
    if count == 0:
        return "Low"
    if count < 100:
        return "Medium"
    return "High"


def summarize(records: Sequence[ResultRecord], stats: Optional[RunStatistics] = None) -> Report:
    """
    Build the end-of-run report.

    Outcome counts come from the records; api_calls and cache_hits come from
    stats when given (they are not recoverable from records alone).
    """
    total = len(records)
    breached = sum(1 for r in records if r.breached)
    errors = sum(1 for r in records if r.failed)
    safe = total - breached - errors
    api_calls = stats.api_calls if stats else 0
    cache_hits = stats.cache_hits if stats else 0
    return Report(
        total=total,
        safe=safe,
        breached=breached,
        errors=errors,
        api_calls=api_calls,
        cache_hits=cache_hits,
        cache_efficiency=(cache_hits / total) if total > 0 else 0.0,
        cancelled=stats.cancelled if stats else False,
    )


def export_rows(records: Sequence[ResultRecord], include_passwords: bool = False) -> List[List[str]]:
    """Header plus one row per record, as plain strings (before CSV quoting)."""
    headers = list(CSV_HEADERS)
    if include_passwords:
        headers.append("password")
    rows = [headers]
    for r in records:
        row = [str(r.line_number), "" if r.failed else str(r.count)]
        if include_passwords:
            # safe and failed entries never expose the password
            row.append(r.password if r.breached else "")
        rows.append(row)
    return rows


def escape_csv(value: str) -> str:
    """Quote a field containing a comma, quote, CR or LF; inner quotes are doubled."""
    if _NEEDS_QUOTING.search(value):
        return '"' + value.replace('"', '""') + '"'
    return value


def render_csv(records: Sequence[ResultRecord], include_passwords: bool = False) -> str:
    """Render the export as CSV text, one "\\n"-terminated row per record."""
    rows = export_rows(records, include_passwords)
    return "".join(",".join(escape_csv(field) for field in row) + "\n" for row in rows)


def default_export_path(directory: Optional[Union[str, Path]] = None, now: Optional[datetime] = None) -> Path:
    """pwned-password-results-<timestamp>.csv in directory (cwd by default)."""
    now = now or datetime.now()
    stamp = now.isoformat(timespec="milliseconds").replace(":", "-").replace(".", "-")
    base = Path(directory) if directory is not None else Path.cwd()
    return base / f"{EXPORT_FILENAME_PREFIX}-{stamp}.csv"


def write_csv_export(
    records: Sequence[ResultRecord],
    path: Union[str, Path],
    include_passwords: bool = False,
) -> Path:
    """
    Write the CSV export to path and return it.

    Raises ExportError if the file cannot be written; records and any report
    built from them are unaffected.
    """
    path = Path(path)
    text = render_csv(records, include_passwords)
    try:
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(text)
    except OSError as e:
        raise ExportError(f"could not write CSV export to {path}: {e}") from e
    logger.info("Wrote %d row(s) to %s", len(records), path)
    return path
