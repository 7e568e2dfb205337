"""Centralized exception hierarchy for the greenhouse log.

All domain and storage exceptions inherit from :class:`GreenhouseLogError` so
that the application call boundary (see
``app/services/application/log_book_service.py``) can catch a single base
class and turn it into a user-visible notification, while tests and callers
can still match on specific subclasses.

Hierarchy
---------
::

    GreenhouseLogError (base)
    ├── ValidationError          (business rule, rejected before storage)
    ├── MalformedDraftError      (draft / sample payload unreadable)
    ├── StorageError             (persistence layer)
    │   ├── StorageInitError     (backend could not be initialized)
    │   ├── StorageWriteError    (write / transaction rejected)
    │   └── StorageReadError     (history unavailable)
    └── ConfigurationError       (missing / invalid config)
"""

from __future__ import annotations


class GreenhouseLogError(Exception):
    """Base exception for all greenhouse log errors.

    Parameters
    ----------
    message:
        Human-readable description, logged by the call boundary.
    detail:
        Optional machine-readable context dict attached to the error for
        structured logging.
    """

    def __init__(self, message: str = "", *, detail: dict | None = None) -> None:
        super().__init__(message)
        self.detail = detail or {}


class ValidationError(GreenhouseLogError):
    """Caller supplied invalid or incomplete input."""


class MalformedDraftError(GreenhouseLogError):
    """A stored draft or sample payload is not a structured record."""


# ── Storage ──────────────────────────────────────────────────────────


class StorageError(GreenhouseLogError):
    """Entry store failure."""


class StorageInitError(StorageError):
    """Backend failed to initialize; the store instance must not be used."""


class StorageWriteError(StorageError):
    """Write rejected; the entry is not considered saved."""


class StorageReadError(StorageError):
    """Read failed; history is unavailable (not the same as empty)."""


class ConfigurationError(GreenhouseLogError):
    """Missing or invalid application configuration."""
