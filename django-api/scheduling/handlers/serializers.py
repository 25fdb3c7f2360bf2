"""Serializers for transforming domain models to API responses and parsing input."""

from rest_framework import serializers


class SessionTypeSerializer(serializers.Serializer):
    """Serializer for SessionType domain model."""

    id = serializers.UUIDField(source="id.value")
    name = serializers.CharField()
    description = serializers.CharField()
    duration_minutes = serializers.IntegerField(source="duration.minutes")
    capacity = serializers.IntegerField(source="capacity.value")
    credits = serializers.IntegerField(source="credits.amount")
    is_active = serializers.BooleanField()
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()


class SlotSerializer(serializers.Serializer):
    """Serializer for ScheduleSlot domain model with its session type."""

    id = serializers.UUIDField(source="id.value")
    session_type_id = serializers.UUIDField(source="session_type_id.value")
    start_time = serializers.DateTimeField()
    end_time = serializers.DateTimeField()
    recurrence_tag = serializers.CharField(allow_null=True)
    session_type = SessionTypeSerializer()


class SlotAvailabilitySerializer(serializers.Serializer):
    id = serializers.UUIDField(source="slot.id.value")
    session_type_id = serializers.UUIDField(source="slot.session_type_id.value")
    start_time = serializers.DateTimeField(source="slot.start_time")
    end_time = serializers.DateTimeField(source="slot.end_time")
    recurrence_tag = serializers.CharField(source="slot.recurrence_tag", allow_null=True)
    remaining_capacity = serializers.IntegerField()
    session_type = SessionTypeSerializer(source="slot.session_type")


class ChildSummarySerializer(serializers.Serializer):
    id = serializers.UUIDField(source="id.value")
    first_name = serializers.CharField()
    last_name = serializers.CharField()


class BookingSerializer(serializers.Serializer):
    """Serializer for Booking domain model."""

    id = serializers.UUIDField(source="id.value")
    slot_id = serializers.UUIDField(source="slot_id.value")
    child_id = serializers.UUIDField(source="child_id.value")
    parent_id = serializers.UUIDField(source="parent_id.value")
    status = serializers.CharField(source="status.value")
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()


class BookingDetailSerializer(serializers.Serializer):
    """Serializer for a booking with its child, slot and session type."""

    id = serializers.UUIDField(source="booking.id.value")
    status = serializers.CharField(source="booking.status.value")
    created_at = serializers.DateTimeField(source="booking.created_at")
    updated_at = serializers.DateTimeField(source="booking.updated_at")
    child = ChildSummarySerializer()
    slot = SlotSerializer()


class SessionTypeInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    duration_minutes = serializers.IntegerField(min_value=1)
    capacity = serializers.IntegerField(min_value=1)
    credits = serializers.IntegerField(min_value=0, required=False, default=1)
    is_active = serializers.BooleanField(required=False)


class RecurrenceInputSerializer(serializers.Serializer):
    kind = serializers.ChoiceField(choices=["single", "weekly"], default="single")
    weekdays = serializers.ListField(
        child=serializers.IntegerField(min_value=0, max_value=6), required=False
    )
    weeks = serializers.IntegerField(min_value=1, required=False)


class SlotCreateSerializer(serializers.Serializer):
    session_type_id = serializers.UUIDField()
    start_date = serializers.DateField()
    start_time = serializers.TimeField()
    recurrence = RecurrenceInputSerializer(required=False)


class SlotFilterSerializer(serializers.Serializer):
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    session_type_id = serializers.UUIDField(required=False)


class BookingCreateSerializer(serializers.Serializer):
    slot_id = serializers.UUIDField()
    child_id = serializers.UUIDField()
