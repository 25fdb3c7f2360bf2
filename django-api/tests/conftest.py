"""Pytest configuration and shared fixtures."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest
from rest_framework.test import APIClient

from scheduling.domain import Child, ChildId, Identity, Role, UserId
from scheduling.services import BookingService, ScheduleService
from scheduling.stores.memory_store import InMemoryChildDirectory, InMemoryScheduleStore

# A Monday.
NOW = datetime(2026, 3, 2, 12, 0, tzinfo=UTC)


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture
def trainer() -> Identity:
    return Identity(user_id=UserId(uuid4()), role=Role.TRAINER)


@pytest.fixture
def parent() -> Identity:
    return Identity(user_id=UserId(uuid4()), role=Role.PARENT)


@pytest.fixture
def other_parent() -> Identity:
    return Identity(user_id=UserId(uuid4()), role=Role.PARENT)


@pytest.fixture
def store() -> InMemoryScheduleStore:
    return InMemoryScheduleStore()


@pytest.fixture
def schedule_service(store, clock) -> ScheduleService:
    return ScheduleService(store, clock=clock, tz=UTC)


@pytest.fixture
def booking_service(store, clock) -> BookingService:
    return BookingService(store, InMemoryChildDirectory(store), clock=clock)


@pytest.fixture
def make_child(store):
    def _make_child(owner: Identity, active: bool = True) -> Child:
        return store.add_child(
            Child(
                id=ChildId(uuid4()),
                parent_id=owner.user_id,
                first_name="Ada",
                last_name="Lovelace",
                is_active=active,
            )
        )

    return _make_child


@pytest.fixture
def child(make_child, parent) -> Child:
    return make_child(parent)


@pytest.fixture
def session_type(schedule_service, trainer):
    return schedule_service.create_session_type(
        trainer, name="Junior Sprint", duration_minutes=60, capacity=2
    )


@pytest.fixture
def slot(schedule_service, trainer, session_type):
    """A single slot three days after NOW at 09:00 UTC."""
    (created,) = schedule_service.create_slots(
        trainer, str(session_type.id.value), "2026-03-05", "09:00"
    )
    return created


def client_for(identity: Identity) -> APIClient:
    client = APIClient()
    client.credentials(
        HTTP_X_USER_ID=str(identity.user_id.value),
        HTTP_X_USER_ROLE=identity.role.value,
    )
    return client


@pytest.fixture
def trainer_client(trainer) -> APIClient:
    return client_for(trainer)


@pytest.fixture
def parent_client(parent) -> APIClient:
    return client_for(parent)


@pytest.fixture
def other_parent_client(other_parent) -> APIClient:
    return client_for(other_parent)
