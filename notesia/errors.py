"""Store error taxonomy.

Every failure in the persistence layer surfaces as a StoreError subclass with
the underlying sqlite3/OS error chained as ``__cause__``.
"""
from __future__ import annotations


class StoreError(Exception):
    """Base class for timer store failures."""


class OpenFailure(StoreError):
    """Backing file could not be created, opened or brought to the expected schema."""


class WriteFailure(StoreError):
    """An insert could not be completed."""


class ReadFailure(StoreError):
    """A scan could not be completed or a row lacked the expected columns."""
