"""Errors raised by the risk reclassification engine."""


class ReclassificationError(Exception):
    """Base class for reclassification failures."""


class StorageError(ReclassificationError):
    """A read or write against the database failed."""


class ConcurrencyConflict(ReclassificationError):
    """The risk's scores changed between the read and the guarded write."""

    def __init__(self, risk_id, message=None):
        self.risk_id = risk_id
        super().__init__(message or f"Risk {risk_id} was modified concurrently")


class InvariantViolation(ReclassificationError):
    """The calculator produced a score outside 1-5. Indicates a logic bug."""
