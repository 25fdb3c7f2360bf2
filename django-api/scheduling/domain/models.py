"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in scheduling/models.py (persistence layer).
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

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


class Role(Enum):
    TRAINER = "trainer"
    PARENT = "parent"


class BookingStatus(Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class Identity:
    """Upstream-verified caller identity."""

    user_id: UserId
    role: Role


@dataclass(frozen=True)
class SessionType:
    """Domain representation of a bookable SessionType."""

    id: SessionTypeId
    name: str
    description: str
    duration: Duration
    capacity: Capacity
    credits: Credits
    is_active: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class ScheduleSlot:
    """Domain representation of a concrete, time-bounded ScheduleSlot.

    end_time is fixed when the slot is created and is never re-derived
    from the session type's current duration.
    """

    id: SlotId
    session_type_id: SessionTypeId
    start_time: datetime
    end_time: datetime
    recurrence_tag: str | None
    created_at: datetime
    session_type: SessionType | None = None

    def __post_init__(self) -> None:
        if self.end_time <= self.start_time:
            raise ValueError("Slot end_time must be after start_time")


@dataclass(frozen=True)
class Child:
    """Read-only view of a child record owned by the children collaborator."""

    id: ChildId
    parent_id: UserId
    first_name: str
    last_name: str
    is_active: bool


@dataclass(frozen=True)
class Booking:
    """Domain representation of a Booking."""

    id: BookingId
    slot_id: SlotId
    child_id: ChildId
    parent_id: UserId
    status: BookingStatus
    created_at: datetime
    updated_at: datetime

    @property
    def is_confirmed(self) -> bool:
        return self.status is BookingStatus.CONFIRMED


@dataclass(frozen=True)
class SlotAvailability:
    """A slot together with its remaining capacity at read time."""

    slot: ScheduleSlot
    remaining_capacity: int


@dataclass(frozen=True)
class BookingDetail:
    """A booking with its child and slot (slot embeds its session type)."""

    booking: Booking
    child: Child
    slot: ScheduleSlot
