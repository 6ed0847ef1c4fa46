"""Exceptions raised by the feature pipeline."""

from typing import Optional


class GuruError(Exception):
    """Base class for pipeline errors."""


class MissingClubError(GuruError, KeyError):
    """A club is not part of the registry or ledger.

    Means the registry was built from a different match set than the one
    being processed.
    """

    def __init__(self, club: str):
        super().__init__(club)
        self.club = club

    def __str__(self):
        return f"Unknown club '{self.club}'"


class LedgerInvariantViolation(GuruError):
    """Ledger counters and score lists went out of sync, or matches arrived out of order."""


class LedgerInUseError(GuruError):
    """A ledger is already bound to another generator."""


class UnparsableRecord(GuruError, ValueError):
    """A persisted match record could not be parsed."""

    def __init__(self, index: Optional[int], reason: str):
        super().__init__(reason if index is None else f"Record {index}: {reason}")
        self.index = index
        self.reason = reason
