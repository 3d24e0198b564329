"""Exception types shared by the store, the sync client and the API."""

from __future__ import annotations


class BudgetBoxError(Exception):
    """Base class for BudgetBox errors."""


class InvalidTransitionError(BudgetBoxError, ValueError):
    """Raised when a sync status change is not in the transition table."""


class AuthenticationError(BudgetBoxError):
    """Bad credentials or a token that belongs to another email."""


class SyncError(BudgetBoxError):
    """The remote service could not be reached or answered with an error."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class StorageError(BudgetBoxError, OSError):
    """The local state document could not be written."""
