"""
Tests for src/utils/async_utils.py
"""

import asyncio

import pytest

from src.utils.async_utils import create_safe_task, drain_tasks


def _track(tasks, coro, name="test"):
    task = create_safe_task(coro, name)
    tasks.add(task)
    task.add_done_callback(tasks.discard)
    return task


class TestSafeTask:
    """Tests for create_safe_task."""

    @pytest.mark.asyncio
    async def test_failure_is_logged_not_raised(self):
        async def boom():
            raise ValueError("boom")

        task = create_safe_task(boom(), "Boom")
        await task

        assert task.exception() is None


class TestDrainTasks:
    """Tests for drain_tasks."""

    @pytest.mark.asyncio
    async def test_waits_for_tasks_added_while_waiting(self):
        tasks = set()
        done = []

        async def child():
            await asyncio.sleep(0.01)
            done.append("child")

        async def parent():
            await asyncio.sleep(0)
            _track(tasks, child())
            done.append("parent")

        _track(tasks, parent())
        waited = await drain_tasks(tasks)

        assert sorted(done) == ["child", "parent"]
        assert waited == 2
        assert tasks == set()

    @pytest.mark.asyncio
    async def test_cancel(self):
        tasks = set()
        _track(tasks, asyncio.sleep(60))

        assert await drain_tasks(tasks, cancel=True) == 1
        assert tasks == set()

    @pytest.mark.asyncio
    async def test_empty(self):
        assert await drain_tasks(set()) == 0
