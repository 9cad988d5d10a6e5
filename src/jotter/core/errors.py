"""Error taxonomy for Jotter."""

from __future__ import annotations


class JotterError(Exception):
    """Base class for every error raised by Jotter."""


class DatabaseOpenError(JotterError):
    """The note store could not be opened."""


class TransactionError(JotterError):
    """A single storage transaction aborted without effect."""


class ValidationError(JotterError, ValueError):
    """A note draft is missing its title or text."""
