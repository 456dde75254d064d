# src/pwncheck/checks/batch_check.py
"""
Sequential breach check over a list of PasswordEntry objects.

- One range request in flight at a time; entries are processed in input order.
- A fixed delay follows every new remote query; cache hits never wait.
- A failed lookup is recorded (count = LOOKUP_FAILED) and the batch goes on.
- Plaintext passwords stay in memory; only hash prefixes reach the network.
"""

import logging
import threading
import time
from typing import Callable, List, Optional, Sequence, Tuple

from ..config import DEFAULT_RATE_LIMIT_DELAY_MS
from ..errors import TransportError
from ..models import LOOKUP_FAILED, PasswordEntry, ResultRecord, RunStatistics

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, int], None]

DEFAULT_DELAY = DEFAULT_RATE_LIMIT_DELAY_MS / 1000.0


def _wait(delay: float, sleep: Callable[[float], None], cancel_event: Optional[threading.Event]) -> None:
    if delay <= 0:
        return
    if cancel_event is not None:
        # wakes early if the run is cancelled mid-delay
        cancel_event.wait(delay)
    else:
        sleep(delay)


def run_batch_check(
    entries: Sequence[PasswordEntry],
    client,
    delay: float = DEFAULT_DELAY,
    on_progress: Optional[ProgressCallback] = None,
    cancel_event: Optional[threading.Event] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Tuple[List[ResultRecord], RunStatistics]:
    """
    Check every entry against the breach corpus and return (records, stats).

    Args:
        entries: PasswordEntry objects in input order
        client: BreachLookupClient (needs is_cached(password) and check(password))
        delay: seconds to wait after each new remote query
        on_progress: called as on_progress(index, total, breached_so_far) after every entry
        cancel_event: when set, remaining entries are skipped and stats.cancelled is True
        sleep: sleep function used for the rate-limit delay when no cancel_event is given

    Returns:
        records: one ResultRecord per processed entry, same order as entries
        stats: RunStatistics for the run
    """
    total = len(entries)
    records: List[ResultRecord] = []
    stats = RunStatistics()

    for index, entry in enumerate(entries, start=1):
        if cancel_event is not None and cancel_event.is_set():
            stats.cancelled = True
            logger.info("Batch cancelled after %d of %d entries", stats.total, total)
            break

        # must be decided before check() populates the cache
        was_cached = client.is_cached(entry.password)

        try:
            count = client.check(entry.password)
        except TransportError as e:
            logger.warning("Lookup failed for line %d: %s", entry.line_number, e)
            record = ResultRecord(entry.password, LOOKUP_FAILED, entry.line_number, error=str(e))
            stats.errors += 1
        else:
            record = ResultRecord(entry.password, count, entry.line_number)
            if count > 0:
                stats.breached += 1

        if was_cached:
            stats.cache_hits += 1
        else:
            stats.api_calls += 1

        records.append(record)
        stats.total += 1

        if on_progress is not None:
            on_progress(index, total, stats.breached)

        if not was_cached and index < total:
            _wait(delay, sleep, cancel_event)

    logger.info(
        "Checked %d password(s): %d pwned, %d errors, %d API calls, %d from cache",
        stats.total, stats.breached, stats.errors, stats.api_calls, stats.cache_hits,
    )
    return records, stats
