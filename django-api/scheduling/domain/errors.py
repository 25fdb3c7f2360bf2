"""Domain error codes for the scheduling module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    FORBIDDEN = "FORBIDDEN"
    INVALID_INPUT = "INVALID_INPUT"
    SESSION_TYPE_NOT_FOUND = "SESSION_TYPE_NOT_FOUND"
    SLOT_NOT_FOUND = "SLOT_NOT_FOUND"
    CHILD_NOT_FOUND = "CHILD_NOT_FOUND"
    BOOKING_NOT_FOUND = "BOOKING_NOT_FOUND"
    PAST_SESSION = "PAST_SESSION"
    DUPLICATE_BOOKING = "DUPLICATE_BOOKING"
    SLOT_FULL = "SLOT_FULL"
    CANCELLATION_WINDOW_EXPIRED = "CANCELLATION_WINDOW_EXPIRED"
    BOOKING_NOT_ACTIVE = "BOOKING_NOT_ACTIVE"
    SLOT_HAS_BOOKINGS = "SLOT_HAS_BOOKINGS"
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"


# Not frozen: contextlib assigns __traceback__ on exceptions passing through
# generator-based context managers.
@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ForbiddenError(DomainError):
    """Raised when the caller's role does not grant the requested action."""

    def __init__(self, action: str) -> None:
        super().__init__(
            code=ErrorCode.FORBIDDEN,
            message="You are not allowed to perform this action",
        )
        self.action = action


class InvalidInputError(DomainError):
    """Raised when a request field is malformed or out of range."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_INPUT, message=message)
        self.field = field


class SessionTypeNotFoundError(DomainError):
    def __init__(self, session_type_id: str) -> None:
        super().__init__(
            code=ErrorCode.SESSION_TYPE_NOT_FOUND,
            message="Session type not found",
        )
        self.session_type_id = session_type_id


class SlotNotFoundError(DomainError):
    def __init__(self, slot_id: str) -> None:
        super().__init__(code=ErrorCode.SLOT_NOT_FOUND, message="Session not found")
        self.slot_id = slot_id


class ChildNotFoundError(DomainError):
    """Raised when a child does not exist or belongs to another parent."""

    def __init__(self, child_id: str) -> None:
        super().__init__(code=ErrorCode.CHILD_NOT_FOUND, message="Child not found")
        self.child_id = child_id


class BookingNotFoundError(DomainError):
    """Raised when a booking does not exist or belongs to another parent."""

    def __init__(self, booking_id: str) -> None:
        super().__init__(
            code=ErrorCode.BOOKING_NOT_FOUND, message="Booking not found"
        )
        self.booking_id = booking_id


class PastSessionError(DomainError):
    def __init__(self, slot_id: str) -> None:
        super().__init__(
            code=ErrorCode.PAST_SESSION, message="Cannot book past sessions"
        )
        self.slot_id = slot_id


class DuplicateBookingError(DomainError):
    def __init__(self, slot_id: str, child_id: str) -> None:
        super().__init__(
            code=ErrorCode.DUPLICATE_BOOKING,
            message="Already booked for this session",
        )
        self.slot_id = slot_id
        self.child_id = child_id


class SlotFullError(DomainError):
    def __init__(self, slot_id: str) -> None:
        super().__init__(code=ErrorCode.SLOT_FULL, message="Session is full")
        self.slot_id = slot_id


class CancellationWindowExpiredError(DomainError):
    def __init__(self, booking_id: str, window_hours: int) -> None:
        super().__init__(
            code=ErrorCode.CANCELLATION_WINDOW_EXPIRED,
            message=f"Cannot cancel within {window_hours} hours of session time",
        )
        self.booking_id = booking_id


class BookingNotActiveError(DomainError):
    """Raised when cancelling a booking that is already cancelled."""

    def __init__(self, booking_id: str) -> None:
        super().__init__(
            code=ErrorCode.BOOKING_NOT_ACTIVE,
            message="Booking is already cancelled",
        )
        self.booking_id = booking_id


class SlotHasBookingsError(DomainError):
    """Raised when deleting a slot that still has confirmed bookings."""

    def __init__(self, slot_id: str, confirmed: int) -> None:
        super().__init__(
            code=ErrorCode.SLOT_HAS_BOOKINGS,
            message="Session has confirmed bookings and cannot be deleted",
        )
        self.slot_id = slot_id
        self.confirmed = confirmed


class StorageUnavailableError(DomainError):
    """Raised when the schedule store cannot be reached."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.STORAGE_UNAVAILABLE,
            message="Schedule storage is temporarily unavailable",
        )
