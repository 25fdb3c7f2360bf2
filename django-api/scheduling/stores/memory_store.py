"""In-process implementation of the ScheduleStore.

Each slot gets its own lock; ``locked_slot`` holds it for the whole unit of
work, so booking decisions on one slot are serialized while other slots
proceed in parallel. Writes made inside a failed unit of work are rolled
back from a snapshot.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime

from scheduling.domain import (
    Booking,
    BookingDetail,
    BookingId,
    Child,
    ChildId,
    ScheduleSlot,
    SessionType,
    SessionTypeId,
    SlotId,
    UserId,
)
from scheduling.domain.errors import DuplicateBookingError
from scheduling.stores.interfaces import ChildDirectory, ScheduleStore


class InMemoryScheduleStore(ScheduleStore):
    """Dictionary-backed store for tests and single-process deployments."""

    def __init__(self) -> None:
        self._session_types: dict[SessionTypeId, SessionType] = {}
        self._slots: dict[SlotId, ScheduleSlot] = {}
        self._bookings: dict[BookingId, Booking] = {}
        self._children: dict[ChildId, Child] = {}
        self._mutex = threading.RLock()
        self._slot_locks: dict[SlotId, threading.Lock] = {}

    def add_child(self, child: Child) -> Child:
        with self._mutex:
            self._children[child.id] = child
        return child

    def get_child(self, child_id: ChildId) -> Child | None:
        with self._mutex:
            return self._children.get(child_id)

    def _slot_lock(self, slot_id: SlotId) -> threading.Lock | None:
        with self._mutex:
            if slot_id not in self._slots:
                return None
            return self._slot_locks.setdefault(slot_id, threading.Lock())

    def _with_session_type(self, slot: ScheduleSlot) -> ScheduleSlot:
        return replace(slot, session_type=self._session_types.get(slot.session_type_id))

    def list_session_types(self, active_only: bool = True) -> list[SessionType]:
        with self._mutex:
            types = [
                session_type
                for session_type in self._session_types.values()
                if session_type.is_active or not active_only
            ]
        return sorted(types, key=lambda session_type: session_type.name)

    def get_session_type(self, session_type_id: SessionTypeId) -> SessionType | None:
        with self._mutex:
            return self._session_types.get(session_type_id)

    def save_session_type(self, session_type: SessionType) -> SessionType:
        with self._mutex:
            self._session_types[session_type.id] = session_type
        return session_type

    def add_slots(self, slots: Sequence[ScheduleSlot]) -> list[ScheduleSlot]:
        with self._mutex:
            taken = {
                (slot.session_type_id, slot.start_time) for slot in self._slots.values()
            }
            fresh = []
            for slot in slots:
                key = (slot.session_type_id, slot.start_time)
                if key in taken:
                    continue
                taken.add(key)
                self._slots[slot.id] = slot
                fresh.append(slot)
        return fresh

    def list_slots(
        self,
        starts_from: datetime | None = None,
        starts_before: datetime | None = None,
        session_type_id: SessionTypeId | None = None,
    ) -> list[ScheduleSlot]:
        with self._mutex:
            slots = [
                self._with_session_type(slot)
                for slot in self._slots.values()
                if (starts_from is None or slot.start_time >= starts_from)
                and (starts_before is None or slot.start_time < starts_before)
                and (session_type_id is None or slot.session_type_id == session_type_id)
            ]
        return sorted(slots, key=lambda slot: (slot.start_time, str(slot.id.value)))

    def get_slot(self, slot_id: SlotId) -> ScheduleSlot | None:
        with self._mutex:
            slot = self._slots.get(slot_id)
            return self._with_session_type(slot) if slot is not None else None

    @contextmanager
    def locked_slot(self, slot_id: SlotId) -> Iterator[ScheduleSlot | None]:
        lock = self._slot_lock(slot_id)
        if lock is None:
            yield None
            return
        with lock:
            with self._mutex:
                bookings = dict(self._bookings)
                slots = dict(self._slots)
            try:
                yield self.get_slot(slot_id)
            except BaseException:
                with self._mutex:
                    self._restore_slot(slot_id, slots, bookings)
                    if slot_id in self._slots:
                        self._slot_locks[slot_id] = lock
                raise

    def _restore_slot(
        self,
        slot_id: SlotId,
        slots: dict[SlotId, ScheduleSlot],
        bookings: dict[BookingId, Booking],
    ) -> None:
        # Only state belonging to the locked slot is rolled back; other slots
        # may have changed concurrently.
        if slot_id in slots:
            self._slots[slot_id] = slots[slot_id]
        for booking_id in [
            key for key, value in self._bookings.items() if value.slot_id == slot_id
        ]:
            del self._bookings[booking_id]
        for booking_id, booking in bookings.items():
            if booking.slot_id == slot_id:
                self._bookings[booking_id] = booking

    def delete_slot(self, slot_id: SlotId) -> None:
        with self._mutex:
            self._slots.pop(slot_id, None)
            self._slot_locks.pop(slot_id, None)
            for booking_id in [
                key for key, value in self._bookings.items() if value.slot_id == slot_id
            ]:
                del self._bookings[booking_id]

    def count_confirmed(self, slot_ids: Sequence[SlotId]) -> dict[SlotId, int]:
        wanted = set(slot_ids)
        counts: dict[SlotId, int] = {}
        with self._mutex:
            for booking in self._bookings.values():
                if booking.is_confirmed and booking.slot_id in wanted:
                    counts[booking.slot_id] = counts.get(booking.slot_id, 0) + 1
        return counts

    def find_active_booking(self, slot_id: SlotId, child_id: ChildId) -> Booking | None:
        with self._mutex:
            for booking in self._bookings.values():
                if (
                    booking.slot_id == slot_id
                    and booking.child_id == child_id
                    and booking.is_confirmed
                ):
                    return booking
        return None

    def add_booking(self, booking: Booking) -> Booking:
        with self._mutex:
            if booking.is_confirmed and self.find_active_booking(
                booking.slot_id, booking.child_id
            ):
                raise DuplicateBookingError(
                    str(booking.slot_id.value), str(booking.child_id.value)
                )
            self._bookings[booking.id] = booking
        return booking

    def get_booking(self, booking_id: BookingId) -> Booking | None:
        with self._mutex:
            return self._bookings.get(booking_id)

    def update_booking(self, booking: Booking) -> Booking:
        with self._mutex:
            self._bookings[booking.id] = booking
        return booking

    def list_bookings_for_parent(self, parent_id: UserId) -> list[BookingDetail]:
        with self._mutex:
            bookings = [
                booking
                for booking in self._bookings.values()
                if booking.parent_id == parent_id
            ]
            details = [
                BookingDetail(
                    booking=booking,
                    child=self._children[booking.child_id],
                    slot=self._with_session_type(self._slots[booking.slot_id]),
                )
                for booking in bookings
            ]
        return sorted(
            details, key=lambda detail: detail.booking.created_at, reverse=True
        )


class InMemoryChildDirectory(ChildDirectory):
    """Child lookups backed by an InMemoryScheduleStore."""

    def __init__(self, store: InMemoryScheduleStore) -> None:
        self._store = store

    def get_child(self, child_id: ChildId) -> Child | None:
        return self._store.get_child(child_id)
