"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses (see handlers/errors.py)
- Never contain business logic
- Never expose internal error details
"""

from typing import Any

from django.core.cache import cache
from django.utils import timezone
from rest_framework import serializers, status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from scheduling.cache_keys import SESSION_TYPES_LIST
from scheduling.conf import get_setting
from scheduling.domain.authorization import Action
from scheduling.domain.errors import InvalidInputError
from scheduling.handlers import dependencies
from scheduling.handlers.authentication import identity_of
from scheduling.handlers.permissions import AuthorizationGatePermission
from scheduling.handlers.serializers import (
    BookingCreateSerializer,
    BookingDetailSerializer,
    BookingSerializer,
    SessionTypeInputSerializer,
    SessionTypeSerializer,
    SlotAvailabilitySerializer,
    SlotCreateSerializer,
    SlotFilterSerializer,
    SlotSerializer,
)


def _first_error(errors: Any, prefix: str = "") -> tuple[str, str]:
    if isinstance(errors, dict):
        key, value = next(iter(errors.items()))
        return _first_error(value, f"{prefix}.{key}" if prefix else str(key))
    if isinstance(errors, list):
        return _first_error(errors[0], prefix)
    return prefix, str(errors)


def validated(
    serializer_class: type[serializers.Serializer], data: Any, partial: bool = False
) -> dict[str, Any]:
    """Validate request input, raising InvalidInputError for the first bad field."""
    serializer = serializer_class(data=data, partial=partial)
    if not serializer.is_valid():
        field, message = _first_error(serializer.errors)
        raise InvalidInputError(field, message)
    return dict(serializer.validated_data)


class GatedAPIView(APIView):
    permission_classes = [AuthorizationGatePermission]
    gate_actions: dict[str, Action] = {}


class SessionTypeListView(GatedAPIView):
    """Handler for GET/POST /api/schedule/session-types"""

    gate_actions = {"POST": Action.CREATE_SESSION_TYPE}

    def get(self, request: Request) -> Response:
        data = cache.get(SESSION_TYPES_LIST)
        if data is None:
            session_types = dependencies.get_schedule_service().list_session_types()
            data = list(SessionTypeSerializer(session_types, many=True).data)
            cache.set(SESSION_TYPES_LIST, data, get_setting("SESSION_TYPE_CACHE_TTL"))
        return Response(data)

    def post(self, request: Request) -> Response:
        data = validated(SessionTypeInputSerializer, request.data)
        data.pop("is_active", None)
        session_type = dependencies.get_schedule_service().create_session_type(
            identity_of(request), **data
        )
        return Response(
            SessionTypeSerializer(session_type).data, status=status.HTTP_201_CREATED
        )


class SessionTypeDetailView(GatedAPIView):
    """Handler for PATCH/DELETE /api/schedule/session-types/{session_type_id}"""

    gate_actions = {
        "PATCH": Action.UPDATE_SESSION_TYPE,
        "DELETE": Action.DELETE_SESSION_TYPE,
    }

    def patch(self, request: Request, session_type_id: str) -> Response:
        changes = validated(SessionTypeInputSerializer, request.data, partial=True)
        session_type = dependencies.get_schedule_service().update_session_type(
            identity_of(request), session_type_id, changes
        )
        return Response(SessionTypeSerializer(session_type).data)

    def delete(self, request: Request, session_type_id: str) -> Response:
        dependencies.get_schedule_service().deactivate_session_type(
            identity_of(request), session_type_id
        )
        return Response({"message": "Session type deactivated successfully"})


class SlotListView(GatedAPIView):
    """Handler for GET/POST /api/schedule/slots"""

    gate_actions = {"POST": Action.CREATE_SLOT}

    def get(self, request: Request) -> Response:
        filters = validated(SlotFilterSerializer, request.query_params)
        if "session_type_id" in filters:
            filters["session_type_id"] = str(filters["session_type_id"])
        slots = dependencies.get_schedule_service().list_slots(**filters)
        return Response(SlotAvailabilitySerializer(slots, many=True).data)

    def post(self, request: Request) -> Response:
        data = validated(SlotCreateSerializer, request.data)
        recurrence = data.get("recurrence")
        slots = dependencies.get_schedule_service().create_slots(
            identity_of(request),
            session_type_id=str(data["session_type_id"]),
            start_date=data["start_date"],
            start_time=data["start_time"],
            recurrence=dict(recurrence) if recurrence is not None else None,
        )
        return Response(
            {"slots": SlotSerializer(slots, many=True).data, "count": len(slots)},
            status=status.HTTP_201_CREATED,
        )


class SlotDetailView(GatedAPIView):
    """Handler for DELETE /api/schedule/slots/{slot_id}"""

    gate_actions = {"DELETE": Action.DELETE_SLOT}

    def delete(self, request: Request, slot_id: str) -> Response:
        dependencies.get_schedule_service().delete_slot(identity_of(request), slot_id)
        return Response({"message": "Session deleted successfully"})


class BookingListView(GatedAPIView):
    """Handler for GET/POST /api/bookings"""

    gate_actions = {"GET": Action.LIST_BOOKINGS, "POST": Action.CREATE_BOOKING}

    def get(self, request: Request) -> Response:
        bookings = dependencies.get_booking_service().list_bookings(identity_of(request))
        return Response(BookingDetailSerializer(bookings, many=True).data)

    def post(self, request: Request) -> Response:
        data = validated(BookingCreateSerializer, request.data)
        booking = dependencies.get_booking_service().create_booking(
            identity_of(request),
            slot_id=str(data["slot_id"]),
            child_id=str(data["child_id"]),
        )
        return Response(
            BookingDetailSerializer(booking).data, status=status.HTTP_201_CREATED
        )


class BookingDetailView(GatedAPIView):
    """Handler for DELETE /api/bookings/{booking_id}"""

    gate_actions = {"DELETE": Action.CANCEL_BOOKING}

    def delete(self, request: Request, booking_id: str) -> Response:
        booking = dependencies.get_booking_service().cancel_booking(
            identity_of(request), booking_id
        )
        return Response(
            {
                "message": "Booking cancelled successfully",
                "booking": BookingSerializer(booking).data,
            }
        )


class HealthView(APIView):
    """Handler for GET /api/health"""

    authentication_classes: list = []
    permission_classes: list = []

    def get(self, request: Request) -> Response:
        return Response({"status": "ok", "timestamp": timezone.now().isoformat()})
