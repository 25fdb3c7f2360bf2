from django.urls import path

from scheduling.handlers import (
    BookingDetailView,
    BookingListView,
    HealthView,
    SessionTypeDetailView,
    SessionTypeListView,
    SlotDetailView,
    SlotListView,
)

urlpatterns = [
    path("health", HealthView.as_view(), name="health"),
    path(
        "schedule/session-types",
        SessionTypeListView.as_view(),
        name="session-type-list",
    ),
    path(
        "schedule/session-types/<str:session_type_id>",
        SessionTypeDetailView.as_view(),
        name="session-type-detail",
    ),
    path("schedule/slots", SlotListView.as_view(), name="slot-list"),
    path("schedule/slots/<str:slot_id>", SlotDetailView.as_view(), name="slot-detail"),
    path("bookings", BookingListView.as_view(), name="booking-list"),
    path("bookings/<str:booking_id>", BookingDetailView.as_view(), name="booking-detail"),
]
