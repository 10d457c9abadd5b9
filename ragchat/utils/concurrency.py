"""Asyncio coordination helpers shared by the memory store and synthesizer."""

from __future__ import annotations

import asyncio
import weakref


class KeyedLock:
    """Hands out one :class:`asyncio.Lock` per key.

    Locks are held in a ``WeakValueDictionary`` so a key's lock disappears
    once no coroutine references it.  Two callers asking for the same key
    while either still holds a reference always get the same lock object.
    """

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def get(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    def __len__(self) -> int:
        return len(self._locks)


def generation_semaphore(limit: int) -> asyncio.Semaphore | None:
    """Return a semaphore bounding in-flight generations, or ``None`` if unbounded."""
    if limit <= 0:
        return None
    return asyncio.Semaphore(limit)
