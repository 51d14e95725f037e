from dataclasses import dataclass
import enum
import threading
from typing import Generic, Optional, TypeVar


T = TypeVar("T")


class SearchStatus(str, enum.Enum):
    RUNNING = "running"
    FOUND = "found"
    EXHAUSTED = "exhausted"
    CANCELLED = "cancelled"

    def __str__(self):
        return self.value


@dataclass(frozen=True, slots=True)
class SearchSnapshot:
    """Immutable view of search progress for the UI."""

    version: int
    status: SearchStatus
    start_seed: int
    current_seed: int
    seeds_tried: int
    seeds_total: int
    elapsed: float
    workers: int = 1
    found_seed: Optional[int] = None

    @property
    def rate(self) -> float:
        """Seeds per second."""
        if self.elapsed <= 0:
            return 0.0
        return self.seeds_tried / self.elapsed

    @property
    def percent(self) -> float:
        if not self.seeds_total:
            return 0.0
        return self.seeds_tried / self.seeds_total * 100

    @property
    def eta(self) -> Optional[float]:
        """Seconds until the range is exhausted at the current rate."""
        if self.rate <= 0:
            return None
        return (self.seeds_total - self.seeds_tried) / self.rate


class LatestSlot(Generic[T]):
    """Thread-safe, size=1, latest-wins slot. The consumer only ever sees the newest item."""

    def __init__(self) -> None:
        self._condition = threading.Condition()
        self._value: Optional[T] = None
        self._has_value = False
        self._closed = False
        self._published = 0

    @property
    def closed(self) -> bool:
        with self._condition:
            return self._closed

    @property
    def published(self) -> int:
        """Number of items published so far, including overwritten ones."""
        with self._condition:
            return self._published

    def publish(self, item: T) -> None:
        with self._condition:
            if self._closed:
                return
            self._value = item
            self._has_value = True
            self._published += 1
            self._condition.notify()

    def close(self) -> None:
        """No more items will be published. Wakes every waiting consumer."""
        with self._condition:
            self._closed = True
            self._condition.notify_all()

    def get(self, timeout: Optional[float] = None) -> Optional[T]:
        """Block until an item is available or the slot is closed. Returns None once closed and drained."""
        with self._condition:
            ok = self._condition.wait_for(lambda: self._has_value or self._closed, timeout)
            if not ok:
                raise TimeoutError("slot get() timed out")
            if not self._has_value:
                return None
            item = self._value
            self._value = None
            self._has_value = False
            return item
