import pytest

from bizconnect.payment_return.deferred import DeferredRunner

@pytest.mark.asyncio
async def test_scheduled_task_runs_after_delay():
    runner = DeferredRunner()
    done = []

    async def job():
        done.append("ran")

    task = runner.schedule(0, job, name="job")
    assert runner.pending == 1
    await task
    assert done == ["ran"]
    assert runner.pending == 0

@pytest.mark.asyncio
async def test_failing_task_is_logged_not_raised(caplog):
    runner = DeferredRunner()

    async def boom():
        raise RuntimeError("boom")

    await runner.schedule(0, boom, name="boom-task")
    assert "deferred task failed name=boom-task" in caplog.text

@pytest.mark.asyncio
async def test_shutdown_cancels_pending_tasks():
    runner = DeferredRunner()
    done = []

    async def job():
        done.append("ran")

    task = runner.schedule(30, job, name="later")
    await runner.shutdown()
    assert task.cancelled()
    assert done == []
    assert runner.pending == 0
