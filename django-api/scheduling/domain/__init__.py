from scheduling.domain.models import (
    Booking,
    BookingDetail,
    BookingStatus,
    Child,
    Identity,
    Role,
    ScheduleSlot,
    SessionType,
    SlotAvailability,
)
from scheduling.domain.value_objects import (
    BookingId,
    Capacity,
    ChildId,
    Credits,
    Duration,
    SessionTypeId,
    SlotId,
    UserId,
)

__all__ = [
    "Booking",
    "BookingDetail",
    "BookingStatus",
    "Child",
    "Identity",
    "Role",
    "ScheduleSlot",
    "SessionType",
    "SlotAvailability",
    "BookingId",
    "Capacity",
    "ChildId",
    "Credits",
    "Duration",
    "SessionTypeId",
    "SlotId",
    "UserId",
]
