"""
At-most-once construction cache.

Used wherever creating a value is expensive or must not happen twice, such
as resolving a platform's tools (which spawns a probe process). Reads of
values that already exist take no lock.
"""

import logging
import threading
from typing import Callable, Dict, Generic, Hashable, Optional, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class SingleFlightCache(Generic[K, V]):
    """
    Cache whose factory runs at most once per key, even under concurrency.

    Callers racing on a key that has not been created yet wait for the first
    caller's factory and then all observe the same value. If the factory
    raises, nothing is cached and the next caller tries again.

    Example:
        >>> cache = SingleFlightCache()
        >>> cache.get_or_create("arm", lambda: object()) is cache.get_or_create("arm", object)
        True
    """

    def __init__(self):
        self._values: Dict[K, V] = {}
        self._key_locks: Dict[K, threading.Lock] = {}
        self._lock = threading.Lock()

    def get(self, key: K) -> Optional[V]:
        return self._values.get(key)

    def get_or_create(self, key: K, factory: Callable[[], V]) -> V:
        try:
            return self._values[key]
        except KeyError:
            pass

        with self._lock:
            key_lock = self._key_locks.setdefault(key, threading.Lock())

        with key_lock:
            if key in self._values:
                return self._values[key]
            value = factory()
            self._values[key] = value

        with self._lock:
            self._key_locks.pop(key, None)
        return value

    def __contains__(self, key: K) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def clear(self) -> None:
        with self._lock:
            self._values.clear()
