"""Capacity ledger and booking lifecycle rules.

These rules decide; they never persist. Callers must evaluate them inside
the store's per-slot unit of work so that the decision and the write form
one atomic step.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from uuid import uuid4

from scheduling.domain.errors import (
    BookingNotActiveError,
    BookingNotFoundError,
    CancellationWindowExpiredError,
    DuplicateBookingError,
    PastSessionError,
    SlotFullError,
)
from scheduling.domain.models import Booking, BookingStatus, ScheduleSlot
from scheduling.domain.value_objects import BookingId, Capacity, ChildId, UserId

CANCELLATION_WINDOW = timedelta(hours=24)


@dataclass(frozen=True)
class CapacityLedger:
    """Occupancy of a single slot at decision time."""

    capacity: Capacity
    confirmed: int

    @property
    def remaining(self) -> int:
        return max(self.capacity.value - self.confirmed, 0)

    @property
    def is_full(self) -> bool:
        return self.confirmed >= self.capacity.value

    def ensure_available(self, slot: ScheduleSlot) -> None:
        if self.is_full:
            raise SlotFullError(str(slot.id.value))


class BookingLifecycle:
    """State machine for a single booking: nonexistent -> confirmed -> cancelled."""

    def __init__(self, cancellation_window: timedelta = CANCELLATION_WINDOW) -> None:
        self._window = cancellation_window

    @property
    def cancellation_window(self) -> timedelta:
        return self._window

    def admit(
        self,
        slot: ScheduleSlot,
        child_id: ChildId,
        parent_id: UserId,
        now: datetime,
        existing: Booking | None,
        ledger: CapacityLedger,
    ) -> Booking:
        """Return a new confirmed booking or raise the first failing guard.

        Guards run in order: future start, no active booking for the child,
        remaining capacity.
        """
        if slot.start_time <= now:
            raise PastSessionError(str(slot.id.value))
        if existing is not None and existing.is_confirmed:
            raise DuplicateBookingError(str(slot.id.value), str(child_id.value))
        ledger.ensure_available(slot)

        return Booking(
            id=BookingId(uuid4()),
            slot_id=slot.id,
            child_id=child_id,
            parent_id=parent_id,
            status=BookingStatus.CONFIRMED,
            created_at=now,
            updated_at=now,
        )

    def cancel(
        self,
        booking: Booking,
        slot: ScheduleSlot,
        requester: UserId,
        now: datetime,
    ) -> Booking:
        """Return the cancelled booking or raise.

        Cancelling is allowed only while more than the cancellation window
        remains before the slot starts.
        """
        booking_id = str(booking.id.value)
        if booking.parent_id != requester:
            raise BookingNotFoundError(booking_id)
        if not booking.is_confirmed:
            raise BookingNotActiveError(booking_id)
        if slot.start_time - now <= self._window:
            raise CancellationWindowExpiredError(
                booking_id, int(self._window.total_seconds() // 3600)
            )
        return replace(booking, status=BookingStatus.CANCELLED, updated_at=now)
