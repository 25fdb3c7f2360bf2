"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from typing import Self
from uuid import UUID


@dataclass(frozen=True)
class SessionTypeId:
    """Unique identifier for a SessionType."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))


@dataclass(frozen=True)
class SlotId:
    """Unique identifier for a ScheduleSlot."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))


@dataclass(frozen=True)
class BookingId:
    """Unique identifier for a Booking."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))


@dataclass(frozen=True)
class ChildId:
    """Unique identifier for a Child."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))


@dataclass(frozen=True)
class UserId:
    """Identifier of an upstream-authenticated user (trainer or parent)."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))


@dataclass(frozen=True)
class Capacity:
    """Positive integer representing the maximum number of participants."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 1:
            raise ValueError("Capacity must be at least 1")


@dataclass(frozen=True)
class Duration:
    """Session length in whole minutes."""

    minutes: int

    def __post_init__(self) -> None:
        if self.minutes < 1:
            raise ValueError("Duration must be at least 1 minute")


@dataclass(frozen=True)
class Credits:
    """Price of a session expressed in booking credits."""

    amount: int

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError("Credits cannot be negative")

    def __str__(self) -> str:
        return f"{self.amount} credits"
