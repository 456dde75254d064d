# src/pwncheck/input_parser.py
"""
Turns an input file into PasswordEntry objects.

Plain text files hold one password per line. CSV files (by extension, or
forced) contribute only their first field, tokenized by a small state machine:

    START --'"'--> QUOTED --'"'--> QUOTE_PENDING --'"'--> QUOTED (literal ")
      |                                   |
      +--other--> UNQUOTED --','--> done  +--other/end--> done

A quoted field with no closing quote falls back to the raw remainder of the
line after the opening quote (doubled quotes are left as they are).
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

from .errors import InputError
from .models import PasswordEntry

logger = logging.getLogger(__name__)

START, UNQUOTED, QUOTED, QUOTE_PENDING = "start", "unquoted", "quoted", "quote_pending"


def first_csv_field(line: str) -> str:
    """Return the first CSV field of an already-stripped line."""
    state = START
    chars: List[str] = []
    for c in line:
        if state == START:
            if c == '"':
                state = QUOTED
            elif c == ",":
                return ""
            else:
                chars.append(c)
                state = UNQUOTED
        elif state == UNQUOTED:
            if c == ",":
                return "".join(chars)
            chars.append(c)
        elif state == QUOTED:
            if c == '"':
                state = QUOTE_PENDING
            else:
                chars.append(c)
        else:  # QUOTE_PENDING
            if c == '"':
                chars.append('"')
                state = QUOTED
            else:
                return "".join(chars)

    if state == QUOTED:
        # unterminated quote: keep the rest of the line verbatim
        return line[1:]
    return "".join(chars)


def is_csv_path(path: Union[str, Path]) -> bool:
    return str(path).lower().endswith(".csv")


def parse_lines(text: str, csv_mode: bool = False) -> List[PasswordEntry]:
    """
    Split text into PasswordEntry objects.

    Line numbers are 1-based positions in text; blank lines and empty first
    fields produce no entry.
    """
    entries: List[PasswordEntry] = []
    for index, raw in enumerate(text.split("\n"), start=1):
        line = raw.strip()
        if not line:
            continue
        password = first_csv_field(line) if csv_mode else line
        if password:
            entries.append(PasswordEntry(password, index))
    return entries


def parse_input_file(path: Union[str, Path], csv_mode: Optional[bool] = None) -> List[PasswordEntry]:
    """
    Read path (UTF-8) and return its PasswordEntry objects.

    csv_mode defaults to True for *.csv files. Raises InputError if the file
    is missing, unreadable or not valid UTF-8.
    """
    path = Path(path)
    if csv_mode is None:
        csv_mode = is_csv_path(path)
    try:
        text = path.read_text(encoding="utf-8-sig")
    except FileNotFoundError as e:
        raise InputError(f"File does not exist: {path}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise InputError(f"Could not read {path}: {e}") from e
    entries = parse_lines(text, csv_mode=csv_mode)
    logger.debug("Parsed %d entr%s from %s", len(entries), "y" if len(entries) == 1 else "ies", path)
    return entries
