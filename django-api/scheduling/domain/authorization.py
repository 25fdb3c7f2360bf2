"""Role-based authorization gate.

Every mutating operation asks the gate first, before touching any other
guard or the store.
"""

from enum import Enum

from scheduling.domain.errors import ForbiddenError
from scheduling.domain.models import Identity, Role


class Action(Enum):
    CREATE_SESSION_TYPE = "create_session_type"
    UPDATE_SESSION_TYPE = "update_session_type"
    DELETE_SESSION_TYPE = "delete_session_type"
    CREATE_SLOT = "create_slot"
    DELETE_SLOT = "delete_slot"
    CREATE_BOOKING = "create_booking"
    CANCEL_BOOKING = "cancel_booking"
    LIST_BOOKINGS = "list_bookings"


CAPABILITIES: dict[Role, frozenset[Action]] = {
    Role.TRAINER: frozenset(
        {
            Action.CREATE_SESSION_TYPE,
            Action.UPDATE_SESSION_TYPE,
            Action.DELETE_SESSION_TYPE,
            Action.CREATE_SLOT,
            Action.DELETE_SLOT,
        }
    ),
    Role.PARENT: frozenset(
        {
            Action.CREATE_BOOKING,
            Action.CANCEL_BOOKING,
            Action.LIST_BOOKINGS,
        }
    ),
}


def is_allowed(identity: Identity | None, action: Action) -> bool:
    if identity is None:
        return False
    return action in CAPABILITIES.get(identity.role, frozenset())


def authorize(identity: Identity | None, action: Action) -> None:
    """Raise ForbiddenError unless the identity's role grants the action."""
    if not is_allowed(identity, action):
        raise ForbiddenError(action.value)
