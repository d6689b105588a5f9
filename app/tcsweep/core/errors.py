"""Exception hierarchy for tcsweep.

Collectors treat ``CollectorSkip`` as a recoverable condition for a single
target. ``RemovalError`` reports a failed removal mechanism to the executor.
``SetupError`` is fatal and aborts the run before any scanning starts.
"""


class TcSweepError(Exception):
    """Base exception for all tcsweep errors."""


class CollectorSkip(TcSweepError):
    """Raised when a single collector target must be skipped.

    Covers access-denied, not-found and timeout conditions for one
    target. Never aborts the whole collection.
    """


class RemovalError(TcSweepError):
    """Raised when a removal mechanism fails for one item."""


class SetupError(TcSweepError):
    """Raised for unrecoverable setup conditions (e.g. missing elevation)."""


class CatalogError(SetupError):
    """Raised when the bundled catalog cannot be loaded or validated."""
