"""Thread-safe work queues and surface maps.

HTTP completion callbacks may push into these from transport threads while
the orchestrator drains them, so every mutation happens under a lock or
through ``queue.Queue``.
"""

import queue
import threading
from typing import Any, Generic, Iterable, Iterator, List, Optional, TypeVar


T = TypeVar('T')


class AuditQueue(Generic[T]):
    """FIFO queue with a lifetime push counter.

    ``total_pushed`` counts every push ever made and is never decremented by
    pops; only ``reset_counter`` zeroes it.
    """

    def __init__(self, name: str):
        self.name = name
        self._queue: 'queue.Queue[T]' = queue.Queue()
        self._lock = threading.Lock()
        self._total_pushed = 0

    def push(self, item: T) -> None:
        with self._lock:
            self._queue.put_nowait(item)
            self._total_pushed += 1

    def pop(self) -> Optional[T]:
        """Pop the oldest item, or None if the queue is empty."""
        try:
            return self._queue.get_nowait()
        except queue.Empty:
            return None

    def empty(self) -> bool:
        return self._queue.empty()

    def __len__(self) -> int:
        return self._queue.qsize()

    @property
    def total_pushed(self) -> int:
        with self._lock:
            return self._total_pushed

    def clear(self) -> None:
        """Drop queued items; the lifetime counter is left alone."""
        while self.pop() is not None:
            pass

    def reset_counter(self) -> None:
        with self._lock:
            self._total_pushed = 0


class SurfaceMap:
    """Insertion-ordered set of URLs."""

    def __init__(self, urls: Optional[Iterable[str]] = None):
        self._lock = threading.RLock()
        self._urls = dict.fromkeys(urls or ())

    def add(self, url: str) -> bool:
        """Add ``url``; returns True if it was not already present."""
        with self._lock:
            if url in self._urls:
                return False
            self._urls[url] = None
            return True

    def update(self, urls: Iterable[str]) -> None:
        with self._lock:
            for url in urls:
                self._urls.setdefault(url, None)

    def replace(self, urls: Iterable[str]) -> None:
        with self._lock:
            self._urls = dict.fromkeys(urls)

    def clear(self) -> None:
        with self._lock:
            self._urls.clear()

    def issubset(self, other: 'SurfaceMap') -> bool:
        with self._lock:
            mine = list(self._urls)
        return all(url in other for url in mine)

    def to_list(self) -> List[str]:
        with self._lock:
            return list(self._urls)

    def sorted(self) -> List[str]:
        return sorted(self.to_list())

    def __contains__(self, url: Any) -> bool:
        with self._lock:
            return url in self._urls

    def __len__(self) -> int:
        with self._lock:
            return len(self._urls)

    def __iter__(self) -> Iterator[str]:
        return iter(self.to_list())
