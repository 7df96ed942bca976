"""Sync-specific exceptions."""

from typing import Any


class SyncError(Exception):
    """
    Base exception for sync errors.

    Carries the reconciliation step that failed and the HTTP status the
    API layer should answer with.
    """

    status_code = 400

    def __init__(self, message: str, step: str | None = None, details: Any = None):
        super().__init__(message)
        self.message = message
        self.step = step
        self.details = details


class SyncValidationError(SyncError):
    """Raised when the payload is missing required fields."""

    pass


class ReferenceNotFoundError(SyncError):
    """Raised when the payload points at an organization, pipeline or stage that doesn't exist."""

    pass


class IntegrityConflictError(SyncError):
    """Raised when a write would collide with an existing row."""

    pass


class SyncAuthenticationError(SyncError):
    """Raised when the command centre's shared secret is missing or wrong."""

    status_code = 401
