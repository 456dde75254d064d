# src/pwncheck/models.py
"""Value types passed between the tokenizer, the batch processor and the report."""

from dataclasses import dataclass, field
from typing import Optional

# Distinguished count for a lookup that failed; never confused with "not found" (0).
LOOKUP_FAILED = -1


@dataclass(frozen=True)
class PasswordEntry:
    """One non-blank input line."""
    password: str = field(repr=False)
    line_number: int

    def __post_init__(self):
        if not self.password:
            raise ValueError("password must be a non-empty string")
        if self.line_number < 1:
            raise ValueError("line_number must be a positive integer")


@dataclass(frozen=True)
class ResultRecord:
    """Outcome of checking one PasswordEntry."""
    password: str = field(repr=False)
    count: int
    line_number: int
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.count == LOOKUP_FAILED

    @property
    def breached(self) -> bool:
        return self.count > 0

    @property
    def safe(self) -> bool:
        return self.count == 0

    @property
    def status(self) -> str:
        if self.failed:
            return f"Error: {self.error or 'lookup failed'}"
        if self.breached:
            return f"PWNED ({self.count:,} times)"
        return "Safe"


@dataclass
class RunStatistics:
    """Counters for a batch run. Written only by run_batch_check."""
    total: int = 0
    api_calls: int = 0
    cache_hits: int = 0
    breached: int = 0
    errors: int = 0
    cancelled: bool = False

    @property
    def safe(self) -> int:
        return self.total - self.breached - self.errors
