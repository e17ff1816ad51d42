class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AttendanceStateError(DomainError):
    """Raised when a transition is not allowed from the record's current state."""


class AlreadyClockedIn(AttendanceStateError):
    """The day's record already carries a clock-in."""


class NotClockedIn(AttendanceStateError):
    """Clock-out attempted without a clock-in for the day."""


class AlreadyClockedOut(AttendanceStateError):
    """The day's record already carries a clock-out."""


class NothingToApprove(AttendanceStateError):
    """The record has no submission an administrator could review."""


class InvalidTimeOrder(DomainError):
    """Clock-out precedes clock-in; the duration is undefined."""


class NotFoundError(DomainError):
    pass


class AttendanceNotFound(NotFoundError):
    pass


class GeofenceNotFound(NotFoundError):
    pass


class ConcurrencyError(DomainError):
    """Raised by persistence when a concurrent writer won."""


class DuplicateAttendance(ConcurrencyError):
    """An active record for the same (user, date) already exists."""


class StaleRecord(ConcurrencyError):
    """The record changed since it was read."""


class DataIntegrityError(DomainError):
    """Persisted data does not match the domain's enumerations."""
