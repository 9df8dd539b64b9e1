from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from functools import lru_cache
from uuid import UUID
from weakref import WeakValueDictionary

from .errors import BusyError


class _UserLock:
    __slots__ = ("lock", "__weakref__")

    def __init__(self) -> None:
        self.lock = threading.Lock()


class UserLocks:
    """In-process mutex per user id.

    Entries are only kept alive by the callers currently holding or waiting
    on them, so the registry does not grow with the number of users served.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: WeakValueDictionary[UUID, _UserLock] = WeakValueDictionary()

    def _entry(self, user_id: UUID) -> _UserLock:
        with self._guard:
            entry = self._locks.get(user_id)
            if entry is None:
                entry = _UserLock()
                self._locks[user_id] = entry
            return entry

    @contextmanager
    def hold(self, user_id: UUID, timeout: float) -> Iterator[None]:
        entry = self._entry(user_id)
        if not entry.lock.acquire(timeout=timeout):
            raise BusyError("Account is busy, please retry")
        try:
            yield
        finally:
            entry.lock.release()

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


@lru_cache(maxsize=1)
def get_user_locks() -> UserLocks:
    return UserLocks()
