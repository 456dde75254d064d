#!/usr/bin/env python
# src/pwncheck/main.py
"""
Pwned Password Batch Checker
----------------------------
Checks every password in a text or CSV file against the Pwned Passwords API:
- Only the first 5 characters of each SHA-1 hash are sent (k-anonymity)
- Each hash prefix is fetched once per run; repeats are served from cache
- New API calls are spaced by a fixed delay
- Optional CSV export (passwords only for breached entries, on request)

Run: pwncheck passwords.txt [--export-csv] [--include-passwords]
"""

import argparse
import json
import logging
import os
import signal
import sys
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from colorama import Fore, Style, init

from ._version import __version__
from .checks import run_batch_check
from .config import CheckerConfig
from .errors import ExportError, InputError
from .hibp_helper import BreachLookupClient, RangeClient
from .input_parser import parse_input_file
from .models import PasswordEntry, ResultRecord, RunStatistics
from .report import Report, default_export_path, risk_level, summarize, write_csv_export

init(autoreset=True)

logger = logging.getLogger(__name__)

RISK_COLORS = {
    "Low": Fore.GREEN,
    "Medium": Fore.YELLOW,
    "High": Fore.RED,
    "Unknown": Fore.BLUE,
}

EXIT_OK = 0
EXIT_INPUT_ERROR = 1
EXIT_CONFIG_ERROR = 2
EXIT_INTERRUPTED = 130


class ProgressBar:
    """Single-line progress bar, redrawn in place after every entry."""

    def __init__(self, width: int = 30, stream=None):
        self.width = width
        self.stream = stream or sys.stdout
        self.drawn = False

    def render(self, current: int, total: int, found: int) -> str:
        ratio = min(current / total, 1) if total > 0 else 0
        filled = round(ratio * self.width)
        bar = f"{Fore.GREEN}{'█' * filled}{Style.DIM}{'░' * (self.width - filled)}{Style.RESET_ALL}"
        return (
            f"\r{Fore.CYAN}Progress:{Style.RESET_ALL} [{bar}] {ratio * 100:.1f}% "
            f"({current}/{total}) | {Fore.GREEN}Pwned:{Style.RESET_ALL} {found}"
        )

    def __call__(self, current: int, total: int, found: int) -> None:
        self.stream.write(self.render(current, total, found))
        self.stream.flush()
        self.drawn = True

    def finish(self) -> None:
        if self.drawn:
            self.stream.write("\n")
            self.stream.flush()

# ===============================
# Output Formatting Functions
# ===============================
def colorize_risk(risk_level_name: str, text: Optional[str] = None) -> str:
    """Apply the risk colour to text (defaults to the risk label itself)."""
    color = RISK_COLORS.get(risk_level_name, "")
    return f"{color}{text if text is not None else risk_level_name}{Style.RESET_ALL}"


def format_status(record: ResultRecord) -> str:
    if record.safe:
        mark = f"{Fore.GREEN}✓{Style.RESET_ALL}"
    else:
        mark = f"{Fore.RED}✗{Style.RESET_ALL}"
    return f"{mark} {colorize_risk(risk_level(record.count), record.status)}"


def print_section_header(title: str) -> None:
    """Print a formatted section header."""
    print(f"\n{Fore.CYAN}{Style.BRIGHT}{'=' * 5} {title} {'=' * 5}{Style.RESET_ALL}\n")


def print_results(records: Sequence[ResultRecord]) -> None:
    """Print one status line per record; passwords are never printed."""
    print_section_header("RESULTS")
    print("(Line numbers correspond to your input file)\n")
    for record in records:
        print(f"Line {record.line_number}: {format_status(record)}")


def print_results_summary(report: Report) -> None:
    """
    Print the end-of-run summary.

    Args:
        report: Report built by pwncheck.report.summarize
    """
    print_section_header("SUMMARY")
    print(f"Total passwords checked: {report.total}")
    print(f"Safe passwords: {colorize_risk('Low', str(report.safe))}")
    pwned_risk = "High" if report.breached else "Low"
    print(f"Pwned passwords: {colorize_risk(pwned_risk, str(report.breached))}")
    if report.errors > 0:
        print(f"Errors: {colorize_risk('Unknown', str(report.errors))}")
    print(f"\nAPI calls made: {report.api_calls}")
    print(f"Results from cache: {report.cache_hits}")
    print(f"Cache efficiency: {report.cache_efficiency_percent:.1f}%")
    if report.cancelled:
        print(f"\n{Fore.YELLOW}Run cancelled: summary covers the entries checked so far.{Style.RESET_ALL}")


def results_as_json(records: Sequence[ResultRecord], report: Report) -> Dict[str, Any]:
    """Structured output for --json; contains no passwords."""
    return {
        "summary": report.as_dict(),
        "results": [
            {
                "line_number": r.line_number,
                "pwned_count": None if r.failed else r.count,
                "risk": risk_level(r.count),
                "status": r.status,
            }
            for r in records
        ],
    }

# ===============================
# Main Program Logic
# ===============================
def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="pwncheck",
        description="Check a file of passwords against Have I Been Pwned using k-anonymity.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("file", help="Text file (one password per line) or CSV file (first column)")
    parser.add_argument("--csv", action="store_true",
                        help="Treat the input as CSV regardless of its extension")
    parser.add_argument("--export-csv", action="store_true",
                        help="Export results to a CSV file")
    parser.add_argument("--export-file", type=str, default=None,
                        help="Path of the CSV export (implies --export-csv); "
                             "defaults to a timestamped file in the current directory")
    parser.add_argument("--include-passwords", action="store_true",
                        help="Include breached passwords in the CSV export (sensitive)")
    parser.add_argument("--delay-ms", type=int, default=None,
                        help="Delay after each new API call in milliseconds (default 100, or PWNCHECK_DELAY_MS)")
    parser.add_argument("--timeout", type=float, default=None,
                        help="Request timeout in seconds (default 5, or PWNCHECK_TIMEOUT)")
    parser.add_argument("--json", action="store_true",
                        help="Output results in JSON format instead of formatted text")
    parser.add_argument("--verbose", action="store_true",
                        help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace, env=None) -> CheckerConfig:
    """Environment config with CLI flags layered on top."""
    config = CheckerConfig.from_env(env)
    if args.delay_ms is not None:
        if args.delay_ms < 0:
            raise ValueError("--delay-ms must not be negative")
        config.delay_ms = args.delay_ms
    if args.timeout is not None:
        if args.timeout <= 0:
            raise ValueError("--timeout must be positive")
        config.timeout = args.timeout
    return config


def run_checks(
    entries: Sequence[PasswordEntry],
    config: CheckerConfig,
    on_progress=None,
    cancel_event: Optional[threading.Event] = None,
) -> Tuple[List[ResultRecord], RunStatistics]:
    """
    Run the breach check for entries with a fresh, run-scoped cache.

    Returns:
        (records, stats) as produced by run_batch_check
    """
    with RangeClient.from_config(config) as range_client:
        client = BreachLookupClient(range_client)
        return run_batch_check(
            entries,
            client,
            delay=config.delay,
            on_progress=on_progress,
            cancel_event=cancel_event,
        )


def export_results(records: Sequence[ResultRecord], path: Path, include_passwords: bool, stream=None) -> bool:
    """Write the CSV export and report the outcome; returns False on failure."""
    try:
        written = write_csv_export(records, path, include_passwords=include_passwords)
    except ExportError as e:
        print(f"\n{Fore.RED}❌ Error writing CSV export: {e}{Style.RESET_ALL}", file=sys.stderr)
        return False
    stream = stream or sys.stdout
    print(f"\nCSV export written to: {written}", file=stream)
    if include_passwords:
        print(f"{Fore.YELLOW}⚠️  Export includes passwords. Handle this file as highly sensitive.{Style.RESET_ALL}", file=stream)
    return True


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the batch checker."""
    args = parse_arguments(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        config = build_config(args)
    except ValueError as e:
        print(f"{Fore.RED}Configuration error: {e}{Style.RESET_ALL}", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    logger.debug("Using %s (delay %d ms, timeout %.1fs)", config.api_url, config.delay_ms, config.timeout)

    export_csv = args.export_csv or args.export_file is not None
    export_path = Path(args.export_file) if args.export_file else default_export_path()

    if not args.json:
        print(f"{Fore.CYAN}{Style.BRIGHT}")
        print("=" * 50)
        print("   PWNED PASSWORD BATCH CHECKER")
        print("=" * 50)
        print(f"{Style.RESET_ALL}")

    file_path = Path(args.file).resolve()
    if not file_path.exists():
        print(f"\n{Fore.RED}❌ Error: File does not exist at the specified path{Style.RESET_ALL}\n", file=sys.stderr)
        print(f"   Looking for: {file_path}", file=sys.stderr)
        print("\n💡 Tip: Make sure the file exists and the path is correct.", file=sys.stderr)
        print(f"   Current directory: {os.getcwd()}\n", file=sys.stderr)
        return EXIT_INPUT_ERROR

    if args.include_passwords and not export_csv:
        print(f"\n{Fore.YELLOW}⚠️  --include-passwords is only valid when used with --export-csv.{Style.RESET_ALL}",
              file=sys.stderr)
        print("   Passwords will not be printed to stdout; they are only included in the CSV export.\n",
              file=sys.stderr)

    if not args.json:
        print("Parsing passwords...")
    try:
        entries = parse_input_file(file_path, csv_mode=True if args.csv else None)
    except InputError as e:
        print(f"\n{Fore.RED}❌ Error: {e}{Style.RESET_ALL}", file=sys.stderr)
        return EXIT_INPUT_ERROR

    progress = None
    if not args.json:
        print(f"Found {len(entries)} password(s) to check\n")
        progress = ProgressBar()

    # Ctrl-C stops after the current entry and still reports what was checked
    cancel_event = threading.Event()
    previous_handler = None
    if threading.current_thread() is threading.main_thread():
        previous_handler = signal.signal(signal.SIGINT, lambda signum, frame: cancel_event.set())
    try:
        records, stats = run_checks(entries, config, on_progress=progress, cancel_event=cancel_event)
    finally:
        if previous_handler is not None:
            signal.signal(signal.SIGINT, previous_handler)
        if progress is not None:
            progress.finish()

    report = summarize(records, stats)

    if args.json:
        print(json.dumps(results_as_json(records, report), indent=2))
    else:
        print_results(records)
        print_results_summary(report)

    if export_csv:
        export_results(records, export_path, args.include_passwords,
                       stream=sys.stderr if args.json else sys.stdout)

    return EXIT_INTERRUPTED if report.cancelled else EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
