"""Process-local read cache for stock levels, with invalidation fan-out.

Every successful stock mutation invalidates the link's entry and the
all-stock key and notifies subscribers. Optimistic values written before a
mutation is confirmed are rolled back if the mutation fails.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

logger = logging.getLogger(__name__)

ALL_STOCK_KEY = "stock:*"

_MISSING = object()
_LEVELS: dict[str, int] = {}
_SUBSCRIBERS: list[Callable[[str], None]] = []
_LOCK = threading.Lock()


def stock_key(link_id: str) -> str:
    return f"stock:{link_id}"


def get_cached_level(link_id: str) -> Optional[int]:
    with _LOCK:
        return _LEVELS.get(link_id)


def set_cached_level(link_id: str, quantity: int) -> None:
    with _LOCK:
        _LEVELS[link_id] = quantity


def subscribe(callback: Callable[[str], None]) -> Callable[[], None]:
    """Register a callback receiving invalidated keys. Returns an unsubscribe function."""
    with _LOCK:
        _SUBSCRIBERS.append(callback)

    def unsubscribe() -> None:
        with _LOCK:
            if callback in _SUBSCRIBERS:
                _SUBSCRIBERS.remove(callback)

    return unsubscribe


def invalidate(link_id: str) -> None:
    with _LOCK:
        _LEVELS.pop(link_id, None)
        subscribers = list(_SUBSCRIBERS)

    for key in (stock_key(link_id), ALL_STOCK_KEY):
        for callback in subscribers:
            try:
                callback(key)
            except Exception:
                logger.exception(f"Stock cache subscriber failed for key {key}")


def clear() -> None:
    with _LOCK:
        _LEVELS.clear()
        _SUBSCRIBERS.clear()


class OptimisticPatch:
    """An apply/undo pair over one cached level."""

    def __init__(self, link_id: str, value: Optional[int]):
        self.link_id = link_id
        self.value = value
        self._previous = _MISSING
        self.applied = False

    def apply(self) -> None:
        if self.value is None:
            return
        with _LOCK:
            self._previous = _LEVELS.get(self.link_id, _MISSING)
            _LEVELS[self.link_id] = self.value
        self.applied = True

    def undo(self) -> None:
        if not self.applied:
            return
        with _LOCK:
            if self._previous is _MISSING:
                _LEVELS.pop(self.link_id, None)
            else:
                _LEVELS[self.link_id] = self._previous
        self.applied = False


@contextmanager
def optimistic(link_id: str, value: Optional[int]) -> Iterator[OptimisticPatch]:
    """Apply locally, let the caller confirm remotely, roll back on failure."""
    patch = OptimisticPatch(link_id, value)
    patch.apply()
    try:
        yield patch
    except Exception:
        patch.undo()
        logger.debug(f"Rolled back optimistic stock value for link {link_id}")
        raise
