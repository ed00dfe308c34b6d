from __future__ import annotations


class RenamerError(Exception):
    """Base class for request-level errors raised by the renamer services."""


class InputValidationError(RenamerError, ValueError):
    """The request itself is malformed (empty batch, missing field)."""


class BatchProcessingError(RenamerError, RuntimeError):
    """The batch response could not be constructed at all."""
