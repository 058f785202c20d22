"""Error taxonomy for score reporting."""
from __future__ import annotations


class ScoreError(Exception):
    """Base class for every failure surfaced by the scoring service."""


class InvalidRange(ScoreError):
    """Caller supplied a malformed or inverted time range."""


class StorageUnavailable(ScoreError):
    """Backing store could not be reached or the query failed."""
