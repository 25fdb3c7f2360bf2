"""Unit tests for domain primitives.

These test invariants that must hold at construction time.
Run with: pytest tests/test_domain.py -v
"""

from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

import pytest

from scheduling.domain import (
    Capacity,
    Credits,
    Duration,
    ScheduleSlot,
    SessionTypeId,
    SlotId,
)
from scheduling.domain.errors import (
    CancellationWindowExpiredError,
    ErrorCode,
    InvalidInputError,
)


class TestCredits:
    """Tests for Credits value object."""

    def test_credits_accepts_zero(self):
        assert Credits(0).amount == 0

    def test_credits_rejects_negative_amount(self):
        with pytest.raises(ValueError):
            Credits(-1)

    def test_credits_str_format(self):
        assert str(Credits(3)) == "3 credits"


class TestCapacity:
    """Tests for Capacity value object."""

    def test_capacity_accepts_positive_value(self):
        assert Capacity(8).value == 8

    def test_capacity_rejects_zero(self):
        with pytest.raises(ValueError):
            Capacity(0)

    def test_capacity_rejects_negative_value(self):
        with pytest.raises(ValueError):
            Capacity(-3)


class TestDuration:
    def test_duration_rejects_zero(self):
        with pytest.raises(ValueError):
            Duration(0)


class TestSlotId:
    """Tests for identifier value objects."""

    def test_from_string_valid_uuid(self):
        value = "0b5c9a3e-4a0e-4a8e-9f59-1f0a3f2f8d11"
        assert SlotId.from_string(value).value == UUID(value)

    def test_from_string_invalid_uuid(self):
        with pytest.raises(ValueError):
            SlotId.from_string("not-a-uuid")

    def test_ids_compare_by_value(self):
        value = uuid4()
        assert SlotId(value) == SlotId(value)
        assert hash(SlotId(value)) == hash(SlotId(value))


class TestScheduleSlot:
    def test_slot_requires_end_after_start(self):
        start = datetime(2026, 3, 5, 9, tzinfo=UTC)
        with pytest.raises(ValueError):
            ScheduleSlot(
                id=SlotId(uuid4()),
                session_type_id=SessionTypeId(uuid4()),
                start_time=start,
                end_time=start,
                recurrence_tag=None,
                created_at=start - timedelta(days=1),
            )


class TestDomainErrors:
    def test_error_str_includes_code(self):
        error = CancellationWindowExpiredError("abc", 24)
        assert str(error) == (
            "CANCELLATION_WINDOW_EXPIRED: Cannot cancel within 24 hours of session time"
        )

    def test_invalid_input_carries_field(self):
        error = InvalidInputError("weeks", "Weeks must be between 1 and 52")
        assert error.code is ErrorCode.INVALID_INPUT
        assert error.field == "weeks"
