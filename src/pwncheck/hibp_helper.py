# src/pwncheck/hibp_helper.py
"""
HIBP helper: k-anonymity lookup + run-scoped prefix cache.

Provides:
- sha1_hex(password) -> 40-char uppercase SHA1 hex
- split_hash(digest) -> (5-char prefix, 35-char suffix)
- PrefixCache: prefix -> {suffix: count}, in memory, one per run
- RangeClient: GET /range/{prefix} against the Pwned Passwords API
- BreachLookupClient.check(password) -> int breach_count (0 if not found),
  raises TransportError on network/API failure

Only the 5-character prefix ever leaves the process.
"""

import hashlib
import logging
import re
import time
from typing import Callable, Dict, Iterator, Optional, Tuple

import requests

from .config import (
    API_URL,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT,
    DIGEST_LENGTH,
    HASH_PREFIX_LENGTH,
    USER_AGENT,
)
from .errors import LookupTimeout, MalformedResponseError, TransportError

logger = logging.getLogger(__name__)

_PREFIX_RE = re.compile(r"^[0-9A-F]{%d}$" % HASH_PREFIX_LENGTH)
_RANGE_LINE_RE = re.compile(r"^([0-9A-Fa-f]+)\s*:\s*([0-9]+)$")

# -----------------------
# Utility helpers
# -----------------------
def sha1_hex(password: str) -> str:
    """Return uppercase SHA-1 hex string for the given password."""
    if password is None:
        raise ValueError("password must be a string")
    return hashlib.sha1(password.encode("utf-8")).hexdigest().upper()


def split_hash(digest: str) -> Tuple[str, str]:
    """Split a 40-char hex digest into (prefix, suffix), both uppercase."""
    if not digest or len(digest) != DIGEST_LENGTH:
        raise ValueError("digest must be a 40-character SHA1 hex string.")
    digest = digest.upper()
    return digest[:HASH_PREFIX_LENGTH], digest[HASH_PREFIX_LENGTH:]


def parse_range_response(text: str) -> Dict[str, int]:
    """
    Parse the plain-text response from the /range endpoint into {suffix: count}.
    Each line is like: 'A1B2C3...:123'. Blank lines (padding) are skipped;
    anything else that is not SUFFIX:COUNT raises MalformedResponseError.
    """
    entries: Dict[str, int] = {}
    for lineno, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        match = _RANGE_LINE_RE.match(line)
        if not match:
            raise MalformedResponseError(f"unexpected range line {lineno}: {line[:60]!r}")
        try:
            count = int(match.group(2))
        except ValueError as e:
            # counts past the interpreter's int digit limit
            raise MalformedResponseError(f"unparseable count on range line {lineno}") from e
        entries[match.group(1).upper()] = count
    return entries

# -----------------------
# Cache
# -----------------------
class PrefixCache:
    """
    In-memory prefix -> {suffix: count} map for a single run.

    Nothing is evicted and nothing is written to disk; the cache lives as
    long as the BreachLookupClient that owns it.
    """

    def __init__(self):
        self._entries: Dict[str, Dict[str, int]] = {}

    def lookup(self, prefix: str) -> Optional[Dict[str, int]]:
        """Return the cached suffix map for prefix, or None if never fetched."""
        return self._entries.get(prefix.upper())

    def store(self, prefix: str, entries: Dict[str, int]) -> None:
        self._entries[prefix.upper()] = dict(entries)

    def __contains__(self, prefix: str) -> bool:
        return prefix.upper() in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

# -----------------------
# Remote range client
# -----------------------
class RangeClient:
    """
    Fetches /range/{prefix} from the Pwned Passwords API.

    Usable as a context manager; the underlying requests.Session is closed
    on exit when the client created it.
    """

    def __init__(
        self,
        api_url: str = API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = USER_AGENT,
        add_padding: bool = True,
        max_retries: int = DEFAULT_MAX_RETRIES,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self._sleep = sleep
        self._owns_session = session is None
        self.session = session if session is not None else requests.Session()
        self.headers = {"User-Agent": user_agent}
        if add_padding:
            self.headers["Add-Padding"] = "true"

    @classmethod
    def from_config(cls, config, session: Optional[requests.Session] = None) -> "RangeClient":
        return cls(
            api_url=config.api_url,
            timeout=config.timeout,
            user_agent=config.user_agent,
            add_padding=config.add_padding,
            max_retries=config.max_retries,
            session=session,
        )

    def range_url(self, prefix: str) -> str:
        return f"{self.api_url}/range/{prefix}"

    def fetch_range(self, prefix: str) -> Dict[str, int]:
        """
        Fetch and parse every suffix sharing prefix.

        Retries transient failures up to max_retries times with linear backoff.
        Raises TransportError (LookupTimeout, MalformedResponseError) once
        attempts are exhausted.
        """
        prefix = prefix.upper()
        if not _PREFIX_RE.match(prefix):
            raise ValueError(f"refusing to query a non-prefix value (expected {HASH_PREFIX_LENGTH} hex chars)")

        url = self.range_url(prefix)
        attempt = 0
        while True:
            try:
                return self._fetch_once(url, prefix)
            except MalformedResponseError:
                raise
            except TransportError as e:
                if attempt >= self.max_retries:
                    raise
                attempt += 1
                logger.warning("range %s failed (%s), retry %d/%d", prefix, e, attempt, self.max_retries)
                self._sleep(1.5 * attempt)

    def _fetch_once(self, url: str, prefix: str) -> Dict[str, int]:
        logger.debug("GET %s", url)
        try:
            resp = self.session.get(url, headers=self.headers, timeout=self.timeout)
        except requests.Timeout as e:
            raise LookupTimeout(f"timed out after {self.timeout}s", prefix=prefix) from e
        except requests.RequestException as e:
            raise TransportError(f"request failed: {e}", prefix=prefix) from e

        if resp.status_code != 200:
            raise TransportError(f"API returned status {resp.status_code}", prefix=prefix)
        try:
            return parse_range_response(resp.text)
        except MalformedResponseError as e:
            e.prefix = prefix
            raise

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "RangeClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

# -----------------------
# Main lookup client
# -----------------------
class BreachLookupClient:
    """
    Resolves breach counts for passwords via k-anonymity.

    - range_client: anything with fetch_range(prefix) -> {suffix: count}
    - cache: PrefixCache owned by this run (a new one is created if omitted)
    - hasher: password -> 40-char hex digest (sha1_hex by default)
    """

    def __init__(
        self,
        range_client,
        cache: Optional[PrefixCache] = None,
        hasher: Callable[[str], str] = sha1_hex,
    ):
        self.range_client = range_client
        self.cache = cache if cache is not None else PrefixCache()
        self.hasher = hasher

    def _split(self, password: str) -> Tuple[str, str]:
        return split_hash(self.hasher(password))

    def is_cached(self, password: str) -> bool:
        """True if this password's prefix group has already been fetched."""
        prefix, _ = self._split(password)
        return prefix in self.cache

    def check(self, password: str) -> int:
        """
        Return how often password appears in the breach corpus (0 if not found).

        On a cache miss only the prefix is sent; the full response is cached
        so later passwords sharing the prefix resolve locally. A failed fetch
        raises TransportError and leaves the cache untouched.
        """
        prefix, suffix = self._split(password)

        entries = self.cache.lookup(prefix)
        if entries is None:
            entries = self.range_client.fetch_range(prefix)
            self.cache.store(prefix, entries)

        return entries.get(suffix, 0)

# -----------------------
# Lightweight CLI test
# -----------------------
if __name__ == "__main__":
    import getpass

    print("HIBP helper quick test (k-anonymity).")
    pw = getpass.getpass("Enter a password to test (or press Enter to test 'password'): ").strip()
    if not pw:
        pw = "password"
    sha = sha1_hex(pw)
    print("Computed SHA1 (first 5 chars):", sha[:5], "...")
    with RangeClient() as rc:
        try:
            count = BreachLookupClient(rc).check(pw)
        except TransportError as e:
            print(f"HIBP lookup failed ({e}).")
        else:
            if count == 0:
                print("Password NOT found in HIBP - good (risk: Low).")
            else:
                level = "High" if count >= 100 else "Medium"
                print(f"Password FOUND {count} times in breaches. Risk: {level}")
