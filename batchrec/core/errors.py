"""Error taxonomy shared by the form, document and HTTP layers."""

from __future__ import annotations


class BatchRecordError(Exception):
    pass


class ValidationFailure(BatchRecordError):
    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(f"{k}: {v}" for k, v in self.errors.items()) or "Validation failed")


class PersistenceError(BatchRecordError):
    pass


class RenderError(BatchRecordError):
    pass


class NotFound(BatchRecordError):
    pass


class InvariantError(BatchRecordError):
    """A record whose shape contradicts its own bmr_type."""
