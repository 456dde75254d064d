import pytest

from pwncheck.errors import LookupTimeout


class FakeRangeClient:
    """Stands in for RangeClient: serves canned ranges and records every prefix asked for."""

    def __init__(self, ranges=None, failures=None):
        self.ranges = ranges or {}
        # prefix -> list of exceptions to raise on successive calls
        self.failures = failures or {}
        self.calls = []

    def fetch_range(self, prefix):
        self.calls.append(prefix)
        pending = self.failures.get(prefix)
        if pending:
            raise pending.pop(0)
        return dict(self.ranges.get(prefix, {}))


# Synthetic digests so tests can force prefix collisions
SYNTHETIC_DIGESTS = {
    "aaa": "ABCDE" + "1" * 35,
    "bbb": "ABCDE" + "2" * 35,
    "ccc": "ABCDE" + "3" * 35,
    "zzz": "FFFFF" + "9" * 35,
}


def synthetic_hasher(password):
    return SYNTHETIC_DIGESTS[password]


@pytest.fixture
def fake_range():
    return FakeRangeClient(ranges={
        "ABCDE": {"1" * 35: 42, "3" * 35: 0},
        "FFFFF": {"9" * 35: 7},
    })


@pytest.fixture
def timeout_error():
    return LookupTimeout("timed out after 5.0s", prefix="ABCDE")
