"""Tests for in-flight task tracking and shutdown draining."""

import asyncio

import pytest

from src.services.background_tasks import (
    drain_background_tasks,
    pending_task_count,
    run_tracked,
    track_background_task,
)


class TestRunTracked:
    @pytest.mark.asyncio
    async def test_runs_and_untracks(self):
        calls = []

        async def work(sender_id, *, image_url):
            calls.append((sender_id, image_url))

        await run_tracked(work, "9001", image_url="https://a/1.jpg")
        await asyncio.sleep(0)

        assert calls == [("9001", "https://a/1.jpg")]
        assert pending_task_count() == 0

    @pytest.mark.asyncio
    async def test_work_outlives_cancelled_caller(self):
        finished = asyncio.Event()

        async def work():
            await asyncio.sleep(0.05)
            finished.set()

        caller = asyncio.create_task(run_tracked(work))
        await asyncio.sleep(0.01)
        caller.cancel()
        await asyncio.gather(caller, return_exceptions=True)

        assert pending_task_count() == 1
        assert await drain_background_tasks(1.0) == (1, 0)
        assert finished.is_set()


class TestDrainBackgroundTasks:
    @pytest.mark.asyncio
    async def test_nothing_pending(self, mock_logfire):
        assert await drain_background_tasks(1.0) == (0, 0)
        mock_logfire.info.assert_not_called()

    @pytest.mark.asyncio
    async def test_waits_for_running_tasks(self):
        finished = []

        async def work():
            await asyncio.sleep(0.02)
            finished.append(1)

        track_background_task(asyncio.create_task(work()))

        assert await drain_background_tasks(1.0) == (1, 0)
        assert finished == [1]

    @pytest.mark.asyncio
    async def test_cancels_tasks_after_timeout(self, mock_logfire):
        task = asyncio.create_task(asyncio.sleep(10))
        track_background_task(task)

        assert await drain_background_tasks(0.01) == (0, 1)
        assert task.cancelled()
        assert pending_task_count() == 0
        warnings = [call.args[0] for call in mock_logfire.warning.call_args_list]
        assert "Cancelling remaining tasks after timeout" in warnings
