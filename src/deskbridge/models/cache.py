from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    value: T
    captured_at: float

    def is_fresh(self, now: float, ttl: float) -> bool:
        return now - self.captured_at <= ttl
