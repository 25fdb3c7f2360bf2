"""Django ORM implementation of the ScheduleStore.

Booking decisions are serialized per slot with ``SELECT ... FOR UPDATE`` on
the slot row inside ``transaction.atomic()``. The conditional unique
constraint on confirmed bookings and the unique (session_type, start_time)
constraint on slots back the same invariants at the database level.
"""

import logging
import uuid
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import Count

from scheduling import models as orm
from scheduling.domain import (
    Booking,
    BookingDetail,
    BookingId,
    BookingStatus,
    Capacity,
    Child,
    ChildId,
    Credits,
    Duration,
    ScheduleSlot,
    SessionType,
    SessionTypeId,
    SlotId,
    UserId,
)
from scheduling.domain.errors import DuplicateBookingError, StorageUnavailableError
from scheduling.stores.interfaces import ChildDirectory, ScheduleStore
from scheduling.stores.retry import retry_reads

logger = logging.getLogger(__name__)


@contextmanager
def storage_errors() -> Iterator[None]:
    """Translate database outages into StorageUnavailableError.

    Integrity errors pass through untouched; callers map them to domain
    conflicts.
    """
    try:
        yield
    except IntegrityError:
        raise
    except DatabaseError as exc:
        logger.exception("Schedule storage failure")
        raise StorageUnavailableError() from exc


def _session_type_to_domain(row: orm.SessionType) -> SessionType:
    return SessionType(
        id=SessionTypeId(row.id),
        name=row.name,
        description=row.description,
        duration=Duration(row.duration_minutes),
        capacity=Capacity(row.capacity),
        credits=Credits(row.credits),
        is_active=row.is_active,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _slot_to_domain(row: orm.ScheduleSlot) -> ScheduleSlot:
    return ScheduleSlot(
        id=SlotId(row.id),
        session_type_id=SessionTypeId(row.session_type_id),
        start_time=row.start_time,
        end_time=row.end_time,
        recurrence_tag=row.recurrence_tag,
        created_at=row.created_at,
        session_type=_session_type_to_domain(row.session_type),
    )


def _child_to_domain(row: orm.Child) -> Child:
    return Child(
        id=ChildId(row.id),
        parent_id=UserId(row.parent_id),
        first_name=row.first_name,
        last_name=row.last_name,
        is_active=row.is_active,
    )


def _booking_to_domain(row: orm.Booking) -> Booking:
    return Booking(
        id=BookingId(row.id),
        slot_id=SlotId(row.slot_id),
        child_id=ChildId(row.child_id),
        parent_id=UserId(row.parent_id),
        status=BookingStatus(row.status),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class DjangoScheduleStore(ScheduleStore):
    """PostgreSQL-backed schedule store using Django ORM."""

    @retry_reads
    @storage_errors()
    def list_session_types(self, active_only: bool = True) -> list[SessionType]:
        rows = orm.SessionType.objects.order_by("name")
        if active_only:
            rows = rows.filter(is_active=True)
        return [_session_type_to_domain(row) for row in rows]

    @retry_reads
    @storage_errors()
    def get_session_type(self, session_type_id: SessionTypeId) -> SessionType | None:
        row = orm.SessionType.objects.filter(pk=session_type_id.value).first()
        return _session_type_to_domain(row) if row is not None else None

    @storage_errors()
    def save_session_type(self, session_type: SessionType) -> SessionType:
        row, _ = orm.SessionType.objects.update_or_create(
            id=session_type.id.value,
            defaults={
                "name": session_type.name,
                "description": session_type.description,
                "duration_minutes": session_type.duration.minutes,
                "capacity": session_type.capacity.value,
                "credits": session_type.credits.amount,
                "is_active": session_type.is_active,
            },
        )
        return _session_type_to_domain(row)

    @storage_errors()
    def add_slots(self, slots: Sequence[ScheduleSlot]) -> list[ScheduleSlot]:
        if not slots:
            return []

        with transaction.atomic():
            existing = self._existing_slot_keys(slots)
            fresh = [
                slot
                for slot in slots
                if (slot.session_type_id.value, slot.start_time) not in existing
            ]
            # A concurrent request may insert the same start times between the
            # read above and this insert; those rows are skipped here and left
            # out of the result below.
            orm.ScheduleSlot.objects.bulk_create(
                [
                    orm.ScheduleSlot(
                        id=slot.id.value,
                        session_type_id=slot.session_type_id.value,
                        start_time=slot.start_time,
                        end_time=slot.end_time,
                        recurrence_tag=slot.recurrence_tag,
                        created_at=slot.created_at,
                    )
                    for slot in fresh
                ],
                ignore_conflicts=True,
            )
            saved = set(
                orm.ScheduleSlot.objects.filter(
                    id__in=[slot.id.value for slot in fresh]
                ).values_list("id", flat=True)
            )
        return [slot for slot in fresh if slot.id.value in saved]

    def _existing_slot_keys(
        self, slots: Sequence[ScheduleSlot]
    ) -> set[tuple[uuid.UUID, datetime]]:
        return set(
            orm.ScheduleSlot.objects.filter(
                session_type_id__in={slot.session_type_id.value for slot in slots},
                start_time__in=[slot.start_time for slot in slots],
            ).values_list("session_type_id", "start_time")
        )

    @retry_reads
    @storage_errors()
    def list_slots(
        self,
        starts_from: datetime | None = None,
        starts_before: datetime | None = None,
        session_type_id: SessionTypeId | None = None,
    ) -> list[ScheduleSlot]:
        rows = orm.ScheduleSlot.objects.select_related("session_type").order_by(
            "start_time", "id"
        )
        if starts_from is not None:
            rows = rows.filter(start_time__gte=starts_from)
        if starts_before is not None:
            rows = rows.filter(start_time__lt=starts_before)
        if session_type_id is not None:
            rows = rows.filter(session_type_id=session_type_id.value)
        return [_slot_to_domain(row) for row in rows]

    @retry_reads
    @storage_errors()
    def get_slot(self, slot_id: SlotId) -> ScheduleSlot | None:
        row = (
            orm.ScheduleSlot.objects.select_related("session_type")
            .filter(pk=slot_id.value)
            .first()
        )
        return _slot_to_domain(row) if row is not None else None

    @contextmanager
    def locked_slot(self, slot_id: SlotId) -> Iterator[ScheduleSlot | None]:
        with storage_errors(), transaction.atomic():
            row = (
                orm.ScheduleSlot.objects.select_related("session_type")
                .select_for_update(of=("self",))
                .filter(pk=slot_id.value)
                .first()
            )
            yield _slot_to_domain(row) if row is not None else None

    @storage_errors()
    def delete_slot(self, slot_id: SlotId) -> None:
        orm.ScheduleSlot.objects.filter(pk=slot_id.value).delete()

    @storage_errors()
    def count_confirmed(self, slot_ids: Sequence[SlotId]) -> dict[SlotId, int]:
        rows = (
            orm.Booking.objects.filter(
                slot_id__in=[slot_id.value for slot_id in slot_ids],
                status=orm.Booking.Status.CONFIRMED,
            )
            .order_by()
            .values("slot_id")
            .annotate(total=Count("id"))
        )
        return {SlotId(row["slot_id"]): row["total"] for row in rows}

    @storage_errors()
    def find_active_booking(self, slot_id: SlotId, child_id: ChildId) -> Booking | None:
        row = orm.Booking.objects.filter(
            slot_id=slot_id.value,
            child_id=child_id.value,
            status=orm.Booking.Status.CONFIRMED,
        ).first()
        return _booking_to_domain(row) if row is not None else None

    @storage_errors()
    def add_booking(self, booking: Booking) -> Booking:
        try:
            with transaction.atomic():
                orm.Booking.objects.create(
                    id=booking.id.value,
                    slot_id=booking.slot_id.value,
                    child_id=booking.child_id.value,
                    parent_id=booking.parent_id.value,
                    status=booking.status.value,
                    created_at=booking.created_at,
                    updated_at=booking.updated_at,
                )
        except IntegrityError as exc:
            raise DuplicateBookingError(
                str(booking.slot_id.value), str(booking.child_id.value)
            ) from exc
        return booking

    @retry_reads
    @storage_errors()
    def get_booking(self, booking_id: BookingId) -> Booking | None:
        row = orm.Booking.objects.filter(pk=booking_id.value).first()
        return _booking_to_domain(row) if row is not None else None

    @storage_errors()
    def update_booking(self, booking: Booking) -> Booking:
        orm.Booking.objects.filter(pk=booking.id.value).update(
            status=booking.status.value,
            updated_at=booking.updated_at,
        )
        return booking

    @retry_reads
    @storage_errors()
    def list_bookings_for_parent(self, parent_id: UserId) -> list[BookingDetail]:
        rows = (
            orm.Booking.objects.select_related("child", "slot__session_type")
            .filter(parent_id=parent_id.value)
            .order_by("-created_at")
        )
        return [
            BookingDetail(
                booking=_booking_to_domain(row),
                child=_child_to_domain(row.child),
                slot=_slot_to_domain(row.slot),
            )
            for row in rows
        ]


class DjangoChildDirectory(ChildDirectory):
    """Reads child records from the shared database."""

    @retry_reads
    @storage_errors()
    def get_child(self, child_id: ChildId) -> Child | None:
        row = orm.Child.objects.filter(pk=child_id.value).first()
        return _child_to_domain(row) if row is not None else None
