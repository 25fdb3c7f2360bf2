"""Input coercion shared by the services."""

from collections.abc import Callable
from typing import TypeVar

from scheduling.domain.errors import InvalidInputError

T = TypeVar("T")


def parse_id(factory: Callable[[str], T], value: object, field: str) -> T:
    """Build an identifier value object, mapping malformed input to InvalidInputError."""
    try:
        return factory(str(value))
    except (TypeError, ValueError):
        raise InvalidInputError(field, f"Invalid {field} format")


def build_value(factory: Callable[[int], T], value: object, field: str) -> T:
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidInputError(field, f"{field} must be an integer")
    try:
        return factory(value)
    except ValueError as exc:
        raise InvalidInputError(field, str(exc))
