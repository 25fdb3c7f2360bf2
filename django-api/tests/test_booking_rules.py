"""Unit tests for the authorization gate, capacity ledger and booking lifecycle.

Run with: pytest tests/test_booking_rules.py -v
"""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from scheduling.domain import (
    BookingStatus,
    Capacity,
    ChildId,
    Identity,
    Role,
    ScheduleSlot,
    SessionTypeId,
    SlotId,
    UserId,
)
from scheduling.domain.authorization import CAPABILITIES, Action, authorize, is_allowed
from scheduling.domain.booking_rules import BookingLifecycle, CapacityLedger
from scheduling.domain.errors import (
    BookingNotActiveError,
    BookingNotFoundError,
    CancellationWindowExpiredError,
    DuplicateBookingError,
    ForbiddenError,
    PastSessionError,
    SlotFullError,
)

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=UTC)


def make_slot(starts_in: timedelta) -> ScheduleSlot:
    start = NOW + starts_in
    return ScheduleSlot(
        id=SlotId(uuid4()),
        session_type_id=SessionTypeId(uuid4()),
        start_time=start,
        end_time=start + timedelta(hours=1),
        recurrence_tag="single",
        created_at=NOW,
    )


@pytest.fixture
def lifecycle() -> BookingLifecycle:
    return BookingLifecycle()


@pytest.fixture
def parent_id() -> UserId:
    return UserId(uuid4())


class TestAuthorizationGate:
    @pytest.mark.parametrize("action", sorted(CAPABILITIES[Role.TRAINER], key=str))
    def test_parent_cannot_use_trainer_actions(self, action):
        parent = Identity(user_id=UserId(uuid4()), role=Role.PARENT)
        with pytest.raises(ForbiddenError):
            authorize(parent, action)

    @pytest.mark.parametrize("action", sorted(CAPABILITIES[Role.PARENT], key=str))
    def test_trainer_cannot_use_parent_actions(self, action):
        trainer = Identity(user_id=UserId(uuid4()), role=Role.TRAINER)
        with pytest.raises(ForbiddenError):
            authorize(trainer, action)

    def test_roles_are_disjoint(self):
        assert not CAPABILITIES[Role.TRAINER] & CAPABILITIES[Role.PARENT]

    def test_missing_identity_is_denied(self):
        assert not is_allowed(None, Action.CREATE_BOOKING)

    def test_trainer_may_create_slots(self):
        trainer = Identity(user_id=UserId(uuid4()), role=Role.TRAINER)
        authorize(trainer, Action.CREATE_SLOT)


class TestCapacityLedger:
    def test_remaining(self):
        assert CapacityLedger(Capacity(3), confirmed=1).remaining == 2

    def test_remaining_never_negative(self):
        # Capacity may have been lowered after bookings were taken.
        assert CapacityLedger(Capacity(2), confirmed=3).remaining == 0

    def test_full_slot_rejects(self):
        with pytest.raises(SlotFullError):
            CapacityLedger(Capacity(2), confirmed=2).ensure_available(
                make_slot(timedelta(days=2))
            )


class TestAdmit:
    def test_admit_returns_confirmed_booking(self, lifecycle, parent_id):
        slot = make_slot(timedelta(days=2))
        child_id = ChildId(uuid4())

        booking = lifecycle.admit(
            slot, child_id, parent_id, NOW, None, CapacityLedger(Capacity(2), 0)
        )

        assert booking.status is BookingStatus.CONFIRMED
        assert booking.slot_id == slot.id
        assert booking.child_id == child_id
        assert booking.created_at == booking.updated_at == NOW

    @pytest.mark.parametrize("starts_in", [timedelta(0), timedelta(minutes=-5)])
    def test_past_or_started_slot_is_rejected(self, lifecycle, parent_id, starts_in):
        with pytest.raises(PastSessionError):
            lifecycle.admit(
                make_slot(starts_in),
                ChildId(uuid4()),
                parent_id,
                NOW,
                None,
                CapacityLedger(Capacity(5), 0),
            )

    def test_past_check_wins_over_full_slot(self, lifecycle, parent_id):
        with pytest.raises(PastSessionError):
            lifecycle.admit(
                make_slot(timedelta(hours=-1)),
                ChildId(uuid4()),
                parent_id,
                NOW,
                None,
                CapacityLedger(Capacity(1), 1),
            )

    def test_duplicate_active_booking_is_rejected(self, lifecycle, parent_id):
        slot = make_slot(timedelta(days=1))
        child_id = ChildId(uuid4())
        existing = lifecycle.admit(
            slot, child_id, parent_id, NOW, None, CapacityLedger(Capacity(5), 0)
        )

        with pytest.raises(DuplicateBookingError):
            lifecycle.admit(
                slot, child_id, parent_id, NOW, existing, CapacityLedger(Capacity(5), 1)
            )


class TestCancel:
    def _booking(self, lifecycle, slot, parent_id):
        return lifecycle.admit(
            slot, ChildId(uuid4()), parent_id, NOW, None, CapacityLedger(Capacity(5), 0)
        )

    def test_cancel_outside_window(self, lifecycle, parent_id):
        slot = make_slot(timedelta(hours=25))
        booking = self._booking(lifecycle, slot, parent_id)
        later = NOW + timedelta(minutes=30)

        cancelled = lifecycle.cancel(booking, slot, parent_id, later)

        assert cancelled.status is BookingStatus.CANCELLED
        assert cancelled.updated_at == later
        assert cancelled.created_at == booking.created_at

    @pytest.mark.parametrize("starts_in", [timedelta(hours=24), timedelta(hours=3)])
    def test_cancel_inside_window_is_rejected(self, lifecycle, parent_id, starts_in):
        slot = make_slot(starts_in)
        booking = self._booking(lifecycle, slot, parent_id)

        with pytest.raises(CancellationWindowExpiredError):
            lifecycle.cancel(booking, slot, parent_id, NOW)

    def test_cancel_by_other_parent_hides_booking(self, lifecycle, parent_id):
        slot = make_slot(timedelta(days=3))
        booking = self._booking(lifecycle, slot, parent_id)

        with pytest.raises(BookingNotFoundError):
            lifecycle.cancel(booking, slot, UserId(uuid4()), NOW)

    def test_cancelled_is_terminal(self, lifecycle, parent_id):
        slot = make_slot(timedelta(days=3))
        cancelled = lifecycle.cancel(
            self._booking(lifecycle, slot, parent_id), slot, parent_id, NOW
        )

        with pytest.raises(BookingNotActiveError):
            lifecycle.cancel(cancelled, slot, parent_id, NOW)

    def test_custom_window(self, parent_id):
        lifecycle = BookingLifecycle(cancellation_window=timedelta(hours=2))
        slot = make_slot(timedelta(hours=3))
        booking = self._booking(lifecycle, slot, parent_id)

        assert lifecycle.cancel(booking, slot, parent_id, NOW).status is BookingStatus.CANCELLED
