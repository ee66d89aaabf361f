"""Domain primitives that enforce validity at creation time."""

import re
from dataclasses import dataclass
from typing import Self
from uuid import UUID, uuid4

PASS_CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
PASS_CODE_LENGTH = 6

_PASS_CODE_RE = re.compile(rf"^[A-Z0-9]{{{PASS_CODE_LENGTH}}}$")


@dataclass(frozen=True)
class Identifier:
    """UUID-backed identifier shared by all aggregates."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value)))

    @classmethod
    def new(cls) -> Self:
        return cls(value=uuid4())

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class EventId(Identifier):
    """Unique identifier for an Event."""


@dataclass(frozen=True)
class RegistrationId(Identifier):
    """Unique identifier for a Registration."""


@dataclass(frozen=True)
class PassId(Identifier):
    """Unique identifier for a Pass."""


@dataclass(frozen=True)
class ProductId(Identifier):
    """Unique identifier for a DigitalProduct."""


@dataclass(frozen=True)
class PaymentId(Identifier):
    """Unique identifier for a Payment."""


@dataclass(frozen=True)
class AnalyticsId(Identifier):
    """Unique identifier for a SalesAnalytics record."""


@dataclass(frozen=True)
class ScheduledEmailId(Identifier):
    """Unique identifier for a ScheduledEmail."""


@dataclass(frozen=True)
class UpdateId(Identifier):
    """Unique identifier for an Update."""


@dataclass(frozen=True)
class UserId(Identifier):
    """Unique identifier for a User profile."""


@dataclass(frozen=True)
class FileId(Identifier):
    """Unique identifier for a StoredFile."""


@dataclass(frozen=True)
class Money:
    """Amount in minor currency units (paise, cents)."""

    amount: int

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")

    def __add__(self, other: "Money") -> "Money":
        return Money(self.amount + other.amount)

    def __str__(self) -> str:
        return f"{self.amount / 100:.2f}"


@dataclass(frozen=True)
class ParticipantLimit:
    """Positive cap on registered participants."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValueError("Participant limit must be an integer")
        if self.value < 1:
            raise ValueError("Participant limit must be at least 1")


@dataclass(frozen=True)
class PassCode:
    """Six character uppercase alphanumeric entry code."""

    value: str

    def __post_init__(self) -> None:
        if not _PASS_CODE_RE.match(self.value):
            raise ValueError("Pass code must be 6 uppercase letters or digits")

    def __str__(self) -> str:
        return self.value
