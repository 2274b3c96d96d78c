# event_registration/core/capacity.py
from dataclasses import dataclass
from typing import Optional, Union

UNLIMITED = "unlimited"

SlotCount = Union[int, str]


@dataclass(frozen=True)
class Capacity:
    """
    Seat limit of an event: either Unlimited (limit is None) or Bounded(n).

    Stored on the event row as a nullable integer column; zero is a real
    bound (nobody can register), never a synonym for unlimited.
    """

    limit: Optional[int] = None

    def __post_init__(self):
        if self.limit is not None and self.limit < 0:
            raise ValueError("Capacity limit cannot be negative")

    @classmethod
    def unlimited(cls) -> "Capacity":
        return cls(None)

    @classmethod
    def bounded(cls, limit: int) -> "Capacity":
        return cls(limit)

    @property
    def is_unlimited(self) -> bool:
        return self.limit is None

    def remaining(self, taken: int) -> SlotCount:
        if self.is_unlimited:
            return UNLIMITED
        return max(0, self.limit - taken)

    def has_room(self, taken: int) -> bool:
        return self.is_unlimited or taken < self.limit

    def __str__(self) -> str:
        return UNLIMITED if self.is_unlimited else str(self.limit)
