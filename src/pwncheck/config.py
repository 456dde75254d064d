# src/pwncheck/config.py
"""
Runtime configuration for pwncheck.

Defaults live in module constants; CheckerConfig.from_env() lets the
environment override them (PWNCHECK_* variables) and the CLI overrides both.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from ._version import __version__

# -----------------------
# Config / constants
# -----------------------
API_URL = "https://api.pwnedpasswords.com"
HASH_PREFIX_LENGTH = 5
DIGEST_LENGTH = 40
DEFAULT_RATE_LIMIT_DELAY_MS = 100
DEFAULT_TIMEOUT = 5.0
DEFAULT_MAX_RETRIES = 0
USER_AGENT = f"pwncheck/{__version__}"  # be polite and identifiable

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {value}")
    return value


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def _env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name, "").strip().lower()
    if not raw:
        return default
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean (true/false), got {raw!r}")


@dataclass
class CheckerConfig:
    """Settings for one batch run."""
    api_url: str = API_URL
    delay_ms: int = DEFAULT_RATE_LIMIT_DELAY_MS
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = USER_AGENT
    add_padding: bool = True
    max_retries: int = DEFAULT_MAX_RETRIES

    @property
    def delay(self) -> float:
        """Rate-limit delay in seconds."""
        return self.delay_ms / 1000.0

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "CheckerConfig":
        """Build a config from PWNCHECK_* environment variables."""
        if env is None:
            env = os.environ
        return cls(
            api_url=env.get("PWNCHECK_API_URL", "").strip().rstrip("/") or API_URL,
            delay_ms=_env_int(env, "PWNCHECK_DELAY_MS", DEFAULT_RATE_LIMIT_DELAY_MS),
            timeout=_env_float(env, "PWNCHECK_TIMEOUT", DEFAULT_TIMEOUT),
            user_agent=env.get("PWNCHECK_USER_AGENT", "").strip() or USER_AGENT,
            add_padding=_env_bool(env, "PWNCHECK_ADD_PADDING", True),
            max_retries=_env_int(env, "PWNCHECK_MAX_RETRIES", DEFAULT_MAX_RETRIES),
        )
