class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class PreconditionError(DomainError):
    """Raised when jobseeker, position or week is missing at submission time."""


class ReconciliationError(DomainError):
    """Raised when persisted timesheets break the one-per-position-and-week rule."""


class GatewayError(DomainError):
    """Raised by the persistence gateway when a read or write fails."""


class SubmissionInProgressError(DomainError):
    """Raised when a submission is already in flight for the same timesheet."""
