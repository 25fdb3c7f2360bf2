"""Service wiring for the HTTP handlers."""

from datetime import timedelta
from zoneinfo import ZoneInfo

from django.conf import settings
from django.utils import timezone

from scheduling.conf import get_setting
from scheduling.services import BookingService, ScheduleService
from scheduling.stores.django_store import DjangoChildDirectory, DjangoScheduleStore


def get_schedule_service() -> ScheduleService:
    return ScheduleService(
        DjangoScheduleStore(),
        clock=timezone.now,
        tz=ZoneInfo(settings.SCHEDULE_TIME_ZONE),
        default_weeks=get_setting("DEFAULT_RECURRENCE_WEEKS"),
        max_weeks=get_setting("MAX_RECURRENCE_WEEKS"),
    )


def get_booking_service() -> BookingService:
    return BookingService(
        DjangoScheduleStore(),
        DjangoChildDirectory(),
        clock=timezone.now,
        cancellation_window=timedelta(hours=get_setting("CANCELLATION_WINDOW_HOURS")),
    )
