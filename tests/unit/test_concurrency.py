"""Unit tests for the asyncio coordination helpers."""

from __future__ import annotations

import asyncio
import gc

import pytest

from ragchat.utils.concurrency import KeyedLock, generation_semaphore


class TestKeyedLock:
    def test_same_key_same_lock(self) -> None:
        locks = KeyedLock()
        first = locks.get("a")

        assert locks.get("a") is first
        assert locks.get("b") is not first

    def test_unreferenced_locks_are_dropped(self) -> None:
        locks = KeyedLock()
        lock = locks.get("a")
        assert len(locks) == 1

        del lock
        gc.collect()

        assert len(locks) == 0

    @pytest.mark.asyncio
    async def test_serialises_same_key(self) -> None:
        locks = KeyedLock()
        order: list[str] = []

        async def worker(name: str) -> None:
            async with locks.get("user"):
                order.append(f"{name}-start")
                await asyncio.sleep(0.01)
                order.append(f"{name}-end")

        await asyncio.gather(worker("one"), worker("two"))

        assert order == ["one-start", "one-end", "two-start", "two-end"]


class TestGenerationSemaphore:
    def test_unbounded_when_not_positive(self) -> None:
        assert generation_semaphore(0) is None
        assert generation_semaphore(-3) is None

    def test_bounded(self) -> None:
        assert isinstance(generation_semaphore(4), asyncio.Semaphore)
