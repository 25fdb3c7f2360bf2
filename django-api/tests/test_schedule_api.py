"""Integration tests for the schedule endpoints.

Run with: pytest tests/test_schedule_api.py -v
"""

from datetime import timedelta
from uuid import uuid4

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from scheduling import models as orm


@pytest.fixture
def session_type_row():
    return orm.SessionType.objects.create(
        name="Junior Sprint", duration_minutes=60, capacity=4, credits=1
    )


@pytest.fixture
def next_monday():
    today = timezone.localdate()
    return today + timedelta(days=7 - today.weekday())


@pytest.mark.django_db
class TestSessionTypes:
    """Tests for /api/schedule/session-types"""

    def test_list_active_session_types_by_name(self, api_client: APIClient):
        orm.SessionType.objects.create(name="Zumba", duration_minutes=30, capacity=5)
        orm.SessionType.objects.create(name="Agility", duration_minutes=45, capacity=5)
        orm.SessionType.objects.create(
            name="Retired", duration_minutes=45, capacity=5, is_active=False
        )

        response = api_client.get("/api/schedule/session-types")

        assert response.status_code == 200
        assert [item["name"] for item in response.json()] == ["Agility", "Zumba"]

    def test_trainer_creates_session_type(self, trainer_client: APIClient):
        response = trainer_client.post(
            "/api/schedule/session-types",
            {"name": "Speed", "duration_minutes": 50, "capacity": 8, "credits": 2},
            format="json",
        )

        assert response.status_code == 201
        body = response.json()
        assert body["capacity"] == 8
        assert body["is_active"] is True
        assert orm.SessionType.objects.filter(name="Speed").exists()

    def test_parent_cannot_create_session_type(self, parent_client: APIClient):
        response = parent_client.post(
            "/api/schedule/session-types",
            {"name": "Speed", "duration_minutes": 50, "capacity": 8},
            format="json",
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"

    def test_anonymous_cannot_create_session_type(self, api_client: APIClient):
        response = api_client.post(
            "/api/schedule/session-types",
            {"name": "Speed", "duration_minutes": 50, "capacity": 8},
            format="json",
        )

        assert response.status_code == 401

    def test_invalid_capacity(self, trainer_client: APIClient):
        response = trainer_client.post(
            "/api/schedule/session-types",
            {"name": "Speed", "duration_minutes": 50, "capacity": 0},
            format="json",
        )

        assert response.status_code == 400
        assert response.json()["error"]["field"] == "capacity"

    def test_patch_session_type(self, trainer_client: APIClient, session_type_row):
        response = trainer_client.patch(
            f"/api/schedule/session-types/{session_type_row.id}",
            {"capacity": 6},
            format="json",
        )

        assert response.status_code == 200
        session_type_row.refresh_from_db()
        assert session_type_row.capacity == 6
        assert session_type_row.name == "Junior Sprint"

    def test_patch_capacity_below_confirmed_bookings(
        self, trainer_client: APIClient, session_type_row
    ):
        start = timezone.now() + timedelta(days=3)
        slot = orm.ScheduleSlot.objects.create(
            session_type=session_type_row, start_time=start, end_time=start + timedelta(hours=1)
        )
        parent_id = uuid4()
        for name in ("Ada", "Grace", "Alan"):
            child = orm.Child.objects.create(parent_id=parent_id, first_name=name, last_name="B")
            orm.Booking.objects.create(slot=slot, child=child, parent_id=parent_id)

        response = trainer_client.patch(
            f"/api/schedule/session-types/{session_type_row.id}",
            {"capacity": 2},
            format="json",
        )

        assert response.status_code == 400
        assert response.json()["error"]["field"] == "capacity"
        session_type_row.refresh_from_db()
        assert session_type_row.capacity == 4

    def test_delete_deactivates(self, trainer_client: APIClient, session_type_row):
        response = trainer_client.delete(f"/api/schedule/session-types/{session_type_row.id}")

        assert response.status_code == 200
        session_type_row.refresh_from_db()
        assert session_type_row.is_active is False

    def test_delete_unknown_session_type(self, trainer_client: APIClient):
        response = trainer_client.delete(f"/api/schedule/session-types/{uuid4()}")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "SESSION_TYPE_NOT_FOUND"


@pytest.mark.django_db
class TestCreateSlots:
    """Tests for POST /api/schedule/slots"""

    def test_weekly_recurrence(self, trainer_client: APIClient, session_type_row, next_monday):
        response = trainer_client.post(
            "/api/schedule/slots",
            {
                "session_type_id": str(session_type_row.id),
                "start_date": next_monday.isoformat(),
                "start_time": "09:00",
                "recurrence": {"kind": "weekly", "weekdays": [0, 2], "weeks": 2},
            },
            format="json",
        )

        assert response.status_code == 201
        body = response.json()
        assert body["count"] == 4
        starts = [slot["start_time"] for slot in body["slots"]]
        assert starts == sorted(starts)
        assert body["slots"][0]["session_type"]["name"] == "Junior Sprint"

    def test_single_slot_by_default(self, trainer_client: APIClient, session_type_row, next_monday):
        response = trainer_client.post(
            "/api/schedule/slots",
            {
                "session_type_id": str(session_type_row.id),
                "start_date": next_monday.isoformat(),
                "start_time": "17:30",
            },
            format="json",
        )

        assert response.status_code == 201
        assert response.json()["count"] == 1
        assert response.json()["slots"][0]["recurrence_tag"] == "single"

    def test_parent_is_forbidden_before_validation(self, parent_client: APIClient):
        response = parent_client.post("/api/schedule/slots", {}, format="json")

        assert response.status_code == 403
        assert not orm.ScheduleSlot.objects.exists()

    def test_weekly_without_weekdays(self, trainer_client: APIClient, session_type_row, next_monday):
        response = trainer_client.post(
            "/api/schedule/slots",
            {
                "session_type_id": str(session_type_row.id),
                "start_date": next_monday.isoformat(),
                "start_time": "09:00",
                "recurrence": {"kind": "weekly"},
            },
            format="json",
        )

        assert response.status_code == 400
        assert response.json()["error"]["field"] == "weekdays"

    def test_bad_weekday_reports_nested_field(
        self, trainer_client: APIClient, session_type_row, next_monday
    ):
        response = trainer_client.post(
            "/api/schedule/slots",
            {
                "session_type_id": str(session_type_row.id),
                "start_date": next_monday.isoformat(),
                "start_time": "09:00",
                "recurrence": {"kind": "weekly", "weekdays": [9]},
            },
            format="json",
        )

        assert response.status_code == 400
        assert response.json()["error"]["field"].startswith("recurrence.weekdays")

    def test_unknown_session_type(self, trainer_client: APIClient, next_monday):
        response = trainer_client.post(
            "/api/schedule/slots",
            {
                "session_type_id": str(uuid4()),
                "start_date": next_monday.isoformat(),
                "start_time": "09:00",
            },
            format="json",
        )

        assert response.status_code == 404


@pytest.mark.django_db
class TestListSlots:
    """Tests for GET /api/schedule/slots"""

    def test_lists_slots_with_remaining_capacity(self, api_client: APIClient, session_type_row):
        start = timezone.now() + timedelta(days=3)
        slot = orm.ScheduleSlot.objects.create(
            session_type=session_type_row, start_time=start, end_time=start + timedelta(hours=1)
        )
        child = orm.Child.objects.create(parent_id=uuid4(), first_name="A", last_name="B")
        orm.Booking.objects.create(slot=slot, child=child, parent_id=child.parent_id)

        response = api_client.get("/api/schedule/slots")

        assert response.status_code == 200
        (item,) = response.json()
        assert item["id"] == str(slot.id)
        assert item["remaining_capacity"] == 3
        assert item["session_type"]["duration_minutes"] == 60

    def test_filters_by_date_range(self, api_client: APIClient, session_type_row):
        base = timezone.now().replace(hour=10, minute=0, second=0, microsecond=0)
        for days in (2, 5, 9):
            start = base + timedelta(days=days)
            orm.ScheduleSlot.objects.create(
                session_type=session_type_row, start_time=start, end_time=start + timedelta(hours=1)
            )

        response = api_client.get(
            "/api/schedule/slots",
            {
                "start_date": (base + timedelta(days=2)).date().isoformat(),
                "end_date": (base + timedelta(days=5)).date().isoformat(),
            },
        )

        assert response.status_code == 200
        assert len(response.json()) == 2

    def test_invalid_filter(self, api_client: APIClient):
        response = api_client.get("/api/schedule/slots", {"start_date": "tomorrow"})

        assert response.status_code == 400
        assert response.json()["error"]["field"] == "start_date"


@pytest.mark.django_db
class TestDeleteSlot:
    """Tests for DELETE /api/schedule/slots/{id}"""

    def _slot(self, session_type_row):
        start = timezone.now() + timedelta(days=3)
        return orm.ScheduleSlot.objects.create(
            session_type=session_type_row, start_time=start, end_time=start + timedelta(hours=1)
        )

    def test_trainer_deletes_empty_slot(self, trainer_client: APIClient, session_type_row):
        slot = self._slot(session_type_row)

        response = trainer_client.delete(f"/api/schedule/slots/{slot.id}")

        assert response.status_code == 200
        assert not orm.ScheduleSlot.objects.exists()

    def test_slot_with_confirmed_booking_is_kept(self, trainer_client: APIClient, session_type_row):
        slot = self._slot(session_type_row)
        child = orm.Child.objects.create(parent_id=uuid4(), first_name="A", last_name="B")
        orm.Booking.objects.create(slot=slot, child=child, parent_id=child.parent_id)

        response = trainer_client.delete(f"/api/schedule/slots/{slot.id}")

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "SLOT_HAS_BOOKINGS"
        assert orm.ScheduleSlot.objects.filter(pk=slot.id).exists()

    def test_parent_cannot_delete_slot(self, parent_client: APIClient, session_type_row):
        slot = self._slot(session_type_row)

        response = parent_client.delete(f"/api/schedule/slots/{slot.id}")

        assert response.status_code == 403
        assert orm.ScheduleSlot.objects.filter(pk=slot.id).exists()


@pytest.mark.django_db
def test_health(api_client: APIClient):
    response = api_client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
