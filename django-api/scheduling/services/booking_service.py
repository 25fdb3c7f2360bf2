"""Booking service - parent reservations against schedule slots.

Creation and cancellation both run inside the store's per-slot unit of work,
so the capacity decision and the write happen as one step for each slot.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from scheduling.domain import (
    Booking,
    BookingDetail,
    BookingId,
    ChildId,
    Identity,
    SlotId,
)
from scheduling.domain.authorization import Action, authorize
from scheduling.domain.booking_rules import (
    CANCELLATION_WINDOW,
    BookingLifecycle,
    CapacityLedger,
)
from scheduling.domain.errors import (
    BookingNotFoundError,
    ChildNotFoundError,
    DomainError,
    SlotNotFoundError,
)
from scheduling.services.validation import parse_id
from scheduling.stores.interfaces import ChildDirectory, ScheduleStore

logger = logging.getLogger(__name__)


class BookingService:
    """Service for creating, listing and cancelling bookings."""

    def __init__(
        self,
        store: ScheduleStore,
        children: ChildDirectory,
        clock: Callable[[], datetime],
        cancellation_window: timedelta = CANCELLATION_WINDOW,
    ) -> None:
        self._store = store
        self._children = children
        self._clock = clock
        self._lifecycle = BookingLifecycle(cancellation_window)

    def list_bookings(self, identity: Identity | None) -> list[BookingDetail]:
        """Return the caller's bookings, newest first."""
        authorize(identity, Action.LIST_BOOKINGS)
        return self._store.list_bookings_for_parent(identity.user_id)

    def create_booking(
        self, identity: Identity | None, slot_id: str, child_id: str
    ) -> BookingDetail:
        """Reserve a slot for one of the caller's children.

        Raises:
            ForbiddenError: If the caller is not a parent.
            InvalidInputError: If an id is malformed.
            ChildNotFoundError: If the child is unknown, inactive or not the caller's.
            SlotNotFoundError: If the slot does not exist.
            PastSessionError: If the slot has already started.
            DuplicateBookingError: If the child already holds a confirmed booking.
            SlotFullError: If the slot has no capacity left.
        """
        authorize(identity, Action.CREATE_BOOKING)
        slot_key = parse_id(SlotId.from_string, slot_id, "slot_id")
        child_key = parse_id(ChildId.from_string, child_id, "child_id")

        child = self._children.get_child(child_key)
        if child is None or not child.is_active or child.parent_id != identity.user_id:
            raise ChildNotFoundError(child_id)

        try:
            with self._store.locked_slot(slot_key) as slot:
                if slot is None:
                    raise SlotNotFoundError(slot_id)
                confirmed = self._store.count_confirmed([slot_key]).get(slot_key, 0)
                booking = self._lifecycle.admit(
                    slot=slot,
                    child_id=child_key,
                    parent_id=identity.user_id,
                    now=self._clock(),
                    existing=self._store.find_active_booking(slot_key, child_key),
                    ledger=CapacityLedger(slot.session_type.capacity, confirmed),
                )
                self._store.add_booking(booking)
        except DomainError as exc:
            logger.info(
                "Rejected booking for slot %s child %s: %s",
                slot_id,
                child_id,
                exc.code.value,
            )
            raise

        logger.info(
            "Confirmed booking %s for slot %s (%d/%d)",
            booking.id.value,
            slot_id,
            confirmed + 1,
            slot.session_type.capacity.value,
        )
        return BookingDetail(booking=booking, child=child, slot=slot)

    def cancel_booking(self, identity: Identity | None, booking_id: str) -> Booking:
        """Cancel one of the caller's confirmed bookings.

        Raises:
            ForbiddenError: If the caller is not a parent.
            BookingNotFoundError: If the booking is unknown or not the caller's.
            BookingNotActiveError: If the booking is already cancelled.
            CancellationWindowExpiredError: If the session starts within the window.
        """
        authorize(identity, Action.CANCEL_BOOKING)
        key = parse_id(BookingId.from_string, booking_id, "booking_id")
        booking = self._store.get_booking(key)
        if booking is None or booking.parent_id != identity.user_id:
            raise BookingNotFoundError(booking_id)

        with self._store.locked_slot(booking.slot_id) as slot:
            # Re-read under the lock so two cancellations cannot both succeed.
            current = self._store.get_booking(key)
            if slot is None or current is None:
                raise BookingNotFoundError(booking_id)
            cancelled = self._lifecycle.cancel(
                current, slot, identity.user_id, self._clock()
            )
            self._store.update_booking(cancelled)

        logger.info("Cancelled booking %s for slot %s", booking_id, slot.id.value)
        return cancelled
