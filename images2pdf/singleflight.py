import threading
from contextlib import contextmanager
from typing import Iterator

from .errors import BusyError


class SingleFlight:
    """Non-blocking guard: a second ``hold()`` while one is active raises BusyError."""

    def __init__(self, name: str):
        self.name = name
        self._lock = threading.Lock()

    @property
    def active(self) -> bool:
        return self._lock.locked()

    @contextmanager
    def hold(self) -> Iterator[None]:
        if not self._lock.acquire(blocking=False):
            raise BusyError(f"A {self.name} is already running")
        try:
            yield
        finally:
            self._lock.release()
