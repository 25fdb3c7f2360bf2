"""Schedule service - session types and slots.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors
"""

import logging
from collections.abc import Callable
from contextlib import ExitStack
from dataclasses import replace
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Any
from uuid import uuid4

from scheduling.domain import (
    Capacity,
    Credits,
    Duration,
    Identity,
    ScheduleSlot,
    SessionType,
    SessionTypeId,
    SlotAvailability,
    SlotId,
)
from scheduling.domain.authorization import Action, authorize
from scheduling.domain.booking_rules import CapacityLedger
from scheduling.domain.errors import (
    InvalidInputError,
    SessionTypeNotFoundError,
    SlotHasBookingsError,
    SlotNotFoundError,
)
from scheduling.domain.recurrence import (
    DEFAULT_WEEKS,
    MAX_WEEKS,
    Recurrence,
    generate_slot_times,
    parse_start_date,
    parse_start_time,
    recurrence_from_dict,
)
from scheduling.services.validation import build_value, parse_id
from scheduling.stores.interfaces import ScheduleStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

EDITABLE_SESSION_TYPE_FIELDS = frozenset(
    {"name", "description", "duration_minutes", "capacity", "credits", "is_active"}
)


class ScheduleService:
    """Service for trainer-managed session types and schedule slots."""

    def __init__(
        self,
        store: ScheduleStore,
        clock: Clock,
        tz: tzinfo,
        default_weeks: int = DEFAULT_WEEKS,
        max_weeks: int = MAX_WEEKS,
    ) -> None:
        self._store = store
        self._clock = clock
        self._tz = tz
        self._default_weeks = default_weeks
        self._max_weeks = max_weeks

    def list_session_types(self) -> list[SessionType]:
        """Return active session types ordered by name."""
        return self._store.list_session_types(active_only=True)

    def create_session_type(
        self,
        identity: Identity | None,
        name: str,
        duration_minutes: int,
        capacity: int,
        credits: int = 1,
        description: str = "",
    ) -> SessionType:
        """Create a session type.

        Raises:
            ForbiddenError: If the caller is not the trainer.
            InvalidInputError: If a field is blank or out of range.
        """
        authorize(identity, Action.CREATE_SESSION_TYPE)
        now = self._clock()
        session_type = SessionType(
            id=SessionTypeId(uuid4()),
            name=self._clean_name(name),
            description=description or "",
            duration=build_value(Duration, duration_minutes, "duration_minutes"),
            capacity=build_value(Capacity, capacity, "capacity"),
            credits=build_value(Credits, credits, "credits"),
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        saved = self._store.save_session_type(session_type)
        logger.info("Created session type %s (%s)", saved.id.value, saved.name)
        return saved

    def update_session_type(
        self, identity: Identity | None, session_type_id: str, changes: dict[str, Any]
    ) -> SessionType:
        """Apply an administrative edit to a session type.

        Existing slots keep the end_time they were created with.

        Raises:
            ForbiddenError: If the caller is not the trainer.
            InvalidInputError: If the id or a changed field is invalid, or the
                new capacity is below the confirmed bookings of an existing slot.
            SessionTypeNotFoundError: If the session type does not exist.
        """
        authorize(identity, Action.UPDATE_SESSION_TYPE)
        unknown = set(changes) - EDITABLE_SESSION_TYPE_FIELDS
        if unknown:
            field = sorted(unknown)[0]
            raise InvalidInputError(field, f"{field} cannot be changed")

        current = self._get_session_type(session_type_id)
        updates: dict[str, Any] = {"updated_at": self._clock()}
        if "name" in changes:
            updates["name"] = self._clean_name(changes["name"])
        if "description" in changes:
            updates["description"] = changes["description"] or ""
        if "duration_minutes" in changes:
            updates["duration"] = build_value(
                Duration, changes["duration_minutes"], "duration_minutes"
            )
        if "capacity" in changes:
            updates["capacity"] = build_value(Capacity, changes["capacity"], "capacity")
        if "credits" in changes:
            updates["credits"] = build_value(Credits, changes["credits"], "credits")
        if "is_active" in changes:
            if not isinstance(changes["is_active"], bool):
                raise InvalidInputError("is_active", "is_active must be a boolean")
            updates["is_active"] = changes["is_active"]

        updated = replace(current, **updates)
        if updated.capacity.value < current.capacity.value:
            saved = self._save_reduced_capacity(updated)
        else:
            saved = self._store.save_session_type(updated)
        logger.info("Updated session type %s", saved.id.value)
        return saved

    def deactivate_session_type(
        self, identity: Identity | None, session_type_id: str
    ) -> SessionType:
        """Soft-delete a session type; its slots stay valid."""
        authorize(identity, Action.DELETE_SESSION_TYPE)
        current = self._get_session_type(session_type_id)
        saved = self._store.save_session_type(
            replace(current, is_active=False, updated_at=self._clock())
        )
        logger.info("Deactivated session type %s", saved.id.value)
        return saved

    def create_slots(
        self,
        identity: Identity | None,
        session_type_id: str,
        start_date: date | str,
        start_time: time | str,
        recurrence: Recurrence | dict[str, Any] | None = None,
    ) -> list[ScheduleSlot]:
        """Expand a recurrence into slots and persist them.

        Start times that already exist for the session type are skipped, so
        repeating a request does not duplicate slots.

        Raises:
            ForbiddenError: If the caller is not the trainer.
            InvalidInputError: If the date, time or recurrence is malformed.
            SessionTypeNotFoundError: If the session type is missing or inactive.
        """
        authorize(identity, Action.CREATE_SLOT)
        session_type = self._get_session_type(session_type_id)
        if not session_type.is_active:
            raise SessionTypeNotFoundError(session_type_id)

        if not isinstance(recurrence, (dict, type(None))):
            descriptor = recurrence
        else:
            descriptor = recurrence_from_dict(
                recurrence, self._default_weeks, self._max_weeks
            )

        times = generate_slot_times(
            parse_start_date(start_date),
            parse_start_time(start_time),
            descriptor,
            session_type.duration.minutes,
            self._tz,
        )
        now = self._clock()
        slots = [
            ScheduleSlot(
                id=SlotId(uuid4()),
                session_type_id=session_type.id,
                start_time=slot_times.start_time,
                end_time=slot_times.end_time,
                recurrence_tag=descriptor.tag,
                created_at=now,
                session_type=session_type,
            )
            for slot_times in times
        ]
        created = self._store.add_slots(slots)
        logger.info(
            "Created %d of %d slots for session type %s (%s)",
            len(created),
            len(slots),
            session_type.id.value,
            descriptor.tag,
        )
        return created

    def list_slots(
        self,
        start_date: date | str | None = None,
        end_date: date | str | None = None,
        session_type_id: str | None = None,
    ) -> list[SlotAvailability]:
        """Return slots ascending by start time with remaining capacity.

        ``start_date`` and ``end_date`` are inclusive calendar days in the
        deployment time zone.
        """
        starts_from = None
        starts_before = None
        first_day = None
        if start_date is not None:
            first_day = self._parse_filter_date(start_date, "start_date")
            starts_from = datetime.combine(first_day, time.min, tzinfo=self._tz)
        if end_date is not None:
            last_day = self._parse_filter_date(end_date, "end_date")
            if first_day is not None and last_day < first_day:
                raise InvalidInputError("end_date", "end_date is before start_date")
            starts_before = datetime.combine(
                last_day + timedelta(days=1), time.min, tzinfo=self._tz
            )
        type_key = None
        if session_type_id is not None:
            type_key = parse_id(SessionTypeId.from_string, session_type_id, "session_type_id")

        slots = self._store.list_slots(starts_from, starts_before, type_key)
        counts = self._store.count_confirmed([slot.id for slot in slots])
        return [
            SlotAvailability(
                slot=slot,
                remaining_capacity=CapacityLedger(
                    slot.session_type.capacity, counts.get(slot.id, 0)
                ).remaining,
            )
            for slot in slots
        ]

    def delete_slot(self, identity: Identity | None, slot_id: str) -> None:
        """Delete a slot that has no confirmed bookings.

        Raises:
            ForbiddenError: If the caller is not the trainer.
            SlotNotFoundError: If the slot does not exist.
            SlotHasBookingsError: If confirmed bookings still reference the slot.
        """
        authorize(identity, Action.DELETE_SLOT)
        key = parse_id(SlotId.from_string, slot_id, "slot_id")
        with self._store.locked_slot(key) as slot:
            if slot is None:
                raise SlotNotFoundError(slot_id)
            confirmed = self._store.count_confirmed([key]).get(key, 0)
            if confirmed:
                raise SlotHasBookingsError(slot_id, confirmed)
            self._store.delete_slot(key)
        logger.info("Deleted slot %s", slot_id)

    def _save_reduced_capacity(self, session_type: SessionType) -> SessionType:
        # Every slot of the type stays locked until the new capacity is saved,
        # so no booking can be admitted against the old limit in between.
        # Locks are taken in id order to match any other multi-slot caller.
        slot_ids = sorted(
            (slot.id for slot in self._store.list_slots(session_type_id=session_type.id)),
            key=lambda slot_id: str(slot_id.value),
        )
        with ExitStack() as stack:
            for slot_id in slot_ids:
                stack.enter_context(self._store.locked_slot(slot_id))
            counts = self._store.count_confirmed(slot_ids)
            busiest = max(counts.values(), default=0)
            if busiest > session_type.capacity.value:
                logger.info(
                    "Rejected capacity %d for session type %s: a slot holds %d bookings",
                    session_type.capacity.value,
                    session_type.id.value,
                    busiest,
                )
                raise InvalidInputError(
                    "capacity",
                    f"Capacity cannot be lower than the {busiest} confirmed "
                    "bookings on an existing slot",
                )
            return self._store.save_session_type(session_type)

    def _get_session_type(self, session_type_id: str) -> SessionType:
        key = parse_id(SessionTypeId.from_string, session_type_id, "session_type_id")
        session_type = self._store.get_session_type(key)
        if session_type is None:
            raise SessionTypeNotFoundError(session_type_id)
        return session_type

    @staticmethod
    def _clean_name(name: object) -> str:
        if not isinstance(name, str) or not name.strip():
            raise InvalidInputError("name", "Name is required")
        return name.strip()

    @staticmethod
    def _parse_filter_date(value: date | str, field: str) -> date:
        if isinstance(value, date):
            return value
        try:
            return date.fromisoformat(value)
        except (TypeError, ValueError):
            raise InvalidInputError(field, "Invalid date, expected YYYY-MM-DD")
