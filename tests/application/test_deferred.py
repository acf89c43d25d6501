import asyncio

import pytest

from flashdrill.application.deferred import schedule_miss
from flashdrill.application.session_queue import SessionQueue, SessionState


@pytest.fixture
def queue(scheduler):
    q = SessionQueue(scheduler)
    q.initialize([1, 2, 3])
    return q


@pytest.mark.asyncio
async def test_deferred_miss_commits_after_delay(queue, scheduler):
    deferred = schedule_miss(queue, 0.01)

    assert queue.state == SessionState.SUSPENDED
    assert not deferred.done

    await asyncio.sleep(0.05)

    assert deferred.done
    assert not deferred.cancelled
    assert queue.snapshot() == (2, 3, 1)
    assert scheduler.get_stats(1).total_attempts == 1
    assert deferred.cancel() is False


@pytest.mark.asyncio
async def test_cancelled_miss_never_fires(queue, scheduler):
    deferred = schedule_miss(queue, 0.01)

    assert deferred.cancel() is True
    await asyncio.sleep(0.05)

    assert deferred.cancelled
    assert not deferred.done
    assert queue.snapshot() == (1, 2, 3)
    assert queue.state == SessionState.ACTIVE
    assert scheduler.get_stats(1).total_attempts == 0
    assert deferred.cancel() is False


@pytest.mark.asyncio
async def test_second_miss_refused_while_pending(queue):
    first = schedule_miss(queue, 10)

    assert schedule_miss(queue, 10) is None

    first.cancel()


@pytest.mark.asyncio
async def test_schedule_on_empty_queue(scheduler):
    assert schedule_miss(SessionQueue(scheduler), 0.01) is None


@pytest.mark.asyncio
async def test_reset_before_fire_makes_commit_a_noop(queue, scheduler):
    schedule_miss(queue, 0.01)
    queue.reset()

    await asyncio.sleep(0.05)

    assert len(queue) == 0
    assert scheduler.get_stats(1).total_attempts == 0
