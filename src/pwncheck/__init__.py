# pwncheck package init
# Exposes the engine entry points so callers can `from pwncheck import ...`
from ._version import __version__

from .errors import (
    PwncheckError,
    TransportError,
    LookupTimeout,
    MalformedResponseError,
    ExportError,
    InputError,
)
from .models import PasswordEntry, ResultRecord, RunStatistics, LOOKUP_FAILED
from .hibp_helper import sha1_hex, split_hash, PrefixCache, RangeClient, BreachLookupClient
from .checks import run_batch_check
from .report import Report, summarize, render_csv, write_csv_export
