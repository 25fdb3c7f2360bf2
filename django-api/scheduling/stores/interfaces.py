"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from contextlib import AbstractContextManager
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


class ScheduleStore(ABC):
    """Interface for session type, slot and booking persistence."""

    @abstractmethod
    def list_session_types(self, active_only: bool = True) -> list[SessionType]:
        """Return session types ordered by name."""
        ...

    @abstractmethod
    def get_session_type(self, session_type_id: SessionTypeId) -> SessionType | None:
        ...

    @abstractmethod
    def save_session_type(self, session_type: SessionType) -> SessionType:
        """Insert or update a session type."""
        ...

    @abstractmethod
    def add_slots(self, slots: Sequence[ScheduleSlot]) -> list[ScheduleSlot]:
        """Persist slots in one transaction and return the ones inserted.

        Slots whose (session_type_id, start_time) already exists are skipped.
        """
        ...

    @abstractmethod
    def list_slots(
        self,
        starts_from: datetime | None = None,
        starts_before: datetime | None = None,
        session_type_id: SessionTypeId | None = None,
    ) -> list[ScheduleSlot]:
        """Return slots with their session type, ordered by start_time ascending."""
        ...

    @abstractmethod
    def get_slot(self, slot_id: SlotId) -> ScheduleSlot | None:
        ...

    @abstractmethod
    def locked_slot(self, slot_id: SlotId) -> AbstractContextManager[ScheduleSlot | None]:
        """Open a unit of work that holds the slot exclusively.

        Every read and write made inside the block is atomic with respect to
        other locked_slot blocks on the same slot. An exception leaving the
        block discards its writes. Yields None when the slot does not exist.
        """
        ...

    @abstractmethod
    def delete_slot(self, slot_id: SlotId) -> None:
        """Delete a slot together with its non-confirmed bookings."""
        ...

    @abstractmethod
    def count_confirmed(self, slot_ids: Sequence[SlotId]) -> dict[SlotId, int]:
        """Return confirmed booking counts keyed by slot (missing means zero)."""
        ...

    @abstractmethod
    def find_active_booking(self, slot_id: SlotId, child_id: ChildId) -> Booking | None:
        ...

    @abstractmethod
    def add_booking(self, booking: Booking) -> Booking:
        ...

    @abstractmethod
    def get_booking(self, booking_id: BookingId) -> Booking | None:
        ...

    @abstractmethod
    def update_booking(self, booking: Booking) -> Booking:
        ...

    @abstractmethod
    def list_bookings_for_parent(self, parent_id: UserId) -> list[BookingDetail]:
        """Return a parent's bookings, newest first."""
        ...


class ChildDirectory(ABC):
    """Read-only lookup into the children records collaborator."""

    @abstractmethod
    def get_child(self, child_id: ChildId) -> Child | None:
        ...
