# src/pwncheck/errors.py
"""Exception hierarchy shared by the lookup engine, exporter and CLI."""


class PwncheckError(Exception):
    """Base class for every error raised by pwncheck."""


class TransportError(PwncheckError):
    """A range request failed or returned something we could not use.

    Scoped to a single password: the batch records it and moves on, and the
    prefix stays out of the cache so the next entry sharing it retries.
    """

    def __init__(self, message: str, prefix: str = ""):
        super().__init__(message)
        self.prefix = prefix


class LookupTimeout(TransportError):
    """The range request did not complete within the configured timeout."""


class MalformedResponseError(TransportError):
    """The range response contained a line that is not SUFFIX:COUNT."""


class ExportError(PwncheckError):
    """Writing the CSV export failed."""


class InputError(PwncheckError):
    """The input file is missing or unreadable."""
