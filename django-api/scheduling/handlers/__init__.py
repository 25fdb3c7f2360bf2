from scheduling.handlers.views import (
    BookingDetailView,
    BookingListView,
    HealthView,
    SessionTypeDetailView,
    SessionTypeListView,
    SlotDetailView,
    SlotListView,
)

__all__ = [
    "BookingDetailView",
    "BookingListView",
    "HealthView",
    "SessionTypeDetailView",
    "SessionTypeListView",
    "SlotDetailView",
    "SlotListView",
]
