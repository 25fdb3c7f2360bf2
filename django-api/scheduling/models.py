"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/.
"""

import uuid

from django.db import models
from django.db.models import F, Q
from django.utils import timezone


class SessionType(models.Model):
    """Persistence model for bookable session types."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    duration_minutes = models.PositiveIntegerField()
    capacity = models.PositiveIntegerField()
    credits = models.PositiveIntegerField(default=1)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=Q(duration_minutes__gt=0),
                name="session_type_duration_positive",
            ),
            models.CheckConstraint(
                condition=Q(capacity__gt=0),
                name="session_type_capacity_positive",
            ),
        ]

    def __str__(self) -> str:
        return self.name


class ScheduleSlot(models.Model):
    """Persistence model for concrete schedule slots."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    session_type = models.ForeignKey(
        SessionType, on_delete=models.PROTECT, related_name="slots"
    )
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()
    recurrence_tag = models.CharField(max_length=64, blank=True, null=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["start_time"]
        constraints = [
            models.UniqueConstraint(
                fields=["session_type", "start_time"],
                name="unique_slot_per_session_type_start",
            ),
            models.CheckConstraint(
                condition=Q(end_time__gt=F("start_time")),
                name="slot_ends_after_start",
            ),
        ]
        indexes = [
            models.Index(fields=["start_time"], name="slot_start_time_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.session_type.name} - {self.start_time}"


class Child(models.Model):
    """Persistence model for children, owned by the parent-facing records service."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    parent_id = models.UUIDField()
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["first_name"]
        indexes = [
            models.Index(fields=["parent_id"], name="child_parent_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Booking(models.Model):
    """Persistence model for bookings."""

    class Status(models.TextChoices):
        CONFIRMED = "confirmed", "Confirmed"
        CANCELLED = "cancelled", "Cancelled"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    slot = models.ForeignKey(
        ScheduleSlot, on_delete=models.CASCADE, related_name="bookings"
    )
    child = models.ForeignKey(Child, on_delete=models.PROTECT, related_name="bookings")
    parent_id = models.UUIDField()
    status = models.CharField(
        max_length=16, choices=Status.choices, default=Status.CONFIRMED
    )
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["slot", "child"],
                condition=Q(status="confirmed"),
                name="unique_confirmed_booking_per_child",
            ),
        ]
        indexes = [
            models.Index(fields=["slot", "status"], name="booking_slot_status_idx"),
            models.Index(
                fields=["parent_id", "-created_at"], name="booking_parent_created_idx"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.child} - {self.slot} ({self.status})"
