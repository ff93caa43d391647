"""Exception hierarchy shared by the normalizer, aggregates and dataset store."""
from typing import Optional


class RundashError(Exception):
    """Base class for all rundash errors."""


class ValidationError(RundashError):
    """
    Raised when a single activity record is missing a required field or a
    field cannot be parsed.

    Bulk normalization skips the offending record; a manual add treats it as
    fatal.
    """

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        super().__init__(message or f"Missing required field: {field}")


class ComputationError(RundashError):
    """Impossible arithmetic condition inside the aggregate calculator.

    Aggregate functions return zero/sentinel values for empty input, so this
    is never raised in practice.
    """


class PersistenceError(RundashError):
    """Reading or writing a dataset file failed."""
