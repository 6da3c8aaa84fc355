"""Exceptions raised by the journal store."""

from __future__ import annotations


class StoicMoodError(Exception):
    """Base class for journal errors."""


class ValidationError(StoicMoodError, ValueError):
    """An entry was rejected before it reached the collection."""


class PersistenceError(StoicMoodError):
    """The collection could not be written to storage (strict stores only)."""
