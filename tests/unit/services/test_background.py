"""Unit tests for the background sync runner."""

import asyncio

import pytest

from order_sync_service.services.background import BackgroundSyncRunner


class TestBackgroundSyncRunner:
    @pytest.mark.asyncio
    async def test_launch_runs_task(self) -> None:
        runner = BackgroundSyncRunner()
        done = asyncio.Event()

        async def job() -> str:
            done.set()
            return "ok"

        task = runner.launch("sync_1", job())
        assert task.get_name() == "order-sync:sync_1"
        assert await task == "ok"
        assert done.is_set()

    @pytest.mark.asyncio
    async def test_tracks_active_jobs_until_done(self) -> None:
        runner = BackgroundSyncRunner()
        release = asyncio.Event()

        async def job() -> None:
            await release.wait()

        task = runner.launch("sync_1", job())
        assert runner.active_jobs == ["sync_1"]

        release.set()
        await task
        await asyncio.sleep(0)
        assert runner.active_jobs == []

    @pytest.mark.asyncio
    async def test_failed_task_is_released(self) -> None:
        runner = BackgroundSyncRunner()

        async def job() -> None:
            raise RuntimeError("boom")

        task = runner.launch("sync_1", job())
        with pytest.raises(RuntimeError):
            await task
        await asyncio.sleep(0)
        assert runner.active_jobs == []

    @pytest.mark.asyncio
    async def test_drain_waits_for_tasks(self) -> None:
        runner = BackgroundSyncRunner()
        finished: list[str] = []

        async def job(job_id: str) -> None:
            await asyncio.sleep(0.01)
            finished.append(job_id)

        runner.launch("sync_1", job("sync_1"))
        runner.launch("sync_2", job("sync_2"))
        await runner.drain(timeout=5)

        assert sorted(finished) == ["sync_1", "sync_2"]

    @pytest.mark.asyncio
    async def test_drain_gives_up_after_timeout(self) -> None:
        runner = BackgroundSyncRunner()

        task = runner.launch("sync_1", asyncio.sleep(10))
        await runner.drain(timeout=0.01)

        assert not task.done()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    @pytest.mark.asyncio
    async def test_cancel_pending_waits_for_cleanup(self) -> None:
        runner = BackgroundSyncRunner()
        cleaned_up: list[str] = []

        async def job() -> None:
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cleaned_up.append("sync_1")
                raise

        task = runner.launch("sync_1", job())
        await asyncio.sleep(0)
        await runner.cancel_pending()

        assert task.cancelled()
        assert cleaned_up == ["sync_1"]

    @pytest.mark.asyncio
    async def test_cancel_pending_without_tasks(self) -> None:
        await BackgroundSyncRunner().cancel_pending()

    @pytest.mark.asyncio
    async def test_drain_without_tasks(self) -> None:
        await BackgroundSyncRunner().drain(timeout=0.01)
