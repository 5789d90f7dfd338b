from __future__ import annotations

import asyncio
import threading

import pytest

from host.timers import AsyncioScheduler, ManualScheduler, SchedulerError, create_scheduler


def test_manual_scheduler_runs_due_timers_in_deadline_order() -> None:
    scheduler = ManualScheduler()
    fired = []
    scheduler.call_later(2.0, lambda: fired.append('late'))
    scheduler.call_later(0.5, lambda: fired.append('early'))
    scheduler.call_later(0.5, lambda: fired.append('early-second'))

    assert scheduler.advance(1.0) == 2
    assert fired == ['early', 'early-second']
    assert scheduler.now() == 1.0

    scheduler.advance(1.0)
    assert fired == ['early', 'early-second', 'late']


def test_manual_scheduler_runs_timers_scheduled_during_advance() -> None:
    scheduler = ManualScheduler()
    fired = []

    def first() -> None:
        fired.append(('first', scheduler.now()))
        scheduler.call_later(1.0, lambda: fired.append(('nested', scheduler.now())))

    scheduler.call_later(0.5, first)
    scheduler.advance(2.0)

    assert fired == [('first', 0.5), ('nested', 1.5)]


def test_call_every_repeats_until_cancelled() -> None:
    scheduler = ManualScheduler()
    ticks = []
    handle = scheduler.call_every(5.0, lambda: ticks.append(scheduler.now()))

    scheduler.advance(16.0)
    assert ticks == [5.0, 10.0, 15.0]

    handle.cancel()
    scheduler.advance(20.0)
    assert ticks == [5.0, 10.0, 15.0]
    assert scheduler.pending() == 0


def test_failing_callback_is_logged_and_repeating_timer_survives(caplog) -> None:
    scheduler = ManualScheduler()
    calls = []

    def explode() -> None:
        calls.append(1)
        raise RuntimeError("boom")

    scheduler.call_every(1.0, explode, name="exploder")
    scheduler.advance(3.0)

    assert len(calls) == 3
    assert "Timer callback 'exploder' failed: boom" in caplog.text


def test_manual_scheduler_rejects_bad_arguments() -> None:
    scheduler = ManualScheduler()
    with pytest.raises(SchedulerError):
        scheduler.advance(-1.0)
    with pytest.raises(SchedulerError):
        scheduler.call_every(0, lambda: None)


def test_run_until_idle_drains_one_shot_timers() -> None:
    scheduler = ManualScheduler()
    fired = []
    scheduler.call_later(0.5, lambda: scheduler.call_later(2.0, lambda: fired.append('done')))

    scheduler.run_until_idle()
    assert fired == ['done']
    assert scheduler.now() == 2.5


def test_asyncio_scheduler_runs_on_the_event_loop() -> None:
    async def run() -> list:
        scheduler = AsyncioScheduler()
        fired = []
        scheduler.call_later(0.01, lambda: fired.append('once'))
        handle = scheduler.call_every(0.01, lambda: fired.append('tick'))
        await asyncio.sleep(0.1)
        handle.cancel()
        count = len(fired)
        await asyncio.sleep(0.05)
        assert len(fired) == count
        return fired

    fired = asyncio.run(run())
    assert 'once' in fired
    assert fired.count('tick') >= 1


def test_asyncio_scheduler_requires_a_loop() -> None:
    with pytest.raises(SchedulerError, match="running event loop"):
        AsyncioScheduler()
    with pytest.raises(SchedulerError):
        create_scheduler('asyncio')

    loop = asyncio.new_event_loop()
    try:
        assert AsyncioScheduler(loop).loop is loop
    finally:
        loop.close()


def test_asyncio_background_jobs_run_off_the_loop(caplog) -> None:
    async def run() -> list:
        scheduler = AsyncioScheduler()
        threads = []

        def explode() -> None:
            raise RuntimeError("tracker down")

        scheduler.run_in_background(lambda: threads.append(threading.get_ident()), name="record")
        scheduler.run_in_background(explode, name="exploder")
        await asyncio.sleep(0.1)
        return threads

    threads = asyncio.run(run())

    assert len(threads) == 1
    assert threads[0] != threading.get_ident()
    assert "Background job 'exploder' failed: tracker down" in caplog.text


def test_manual_background_jobs_run_inline(caplog) -> None:
    scheduler = ManualScheduler()
    ran = []

    scheduler.run_in_background(lambda: ran.append(scheduler.now()))
    scheduler.run_in_background(lambda: 1 / 0, name="divide")

    assert ran == [0.0]
    assert "Timer callback 'divide' failed" in caplog.text


def test_create_scheduler() -> None:
    assert isinstance(create_scheduler('manual'), ManualScheduler)
    with pytest.raises(SchedulerError):
        create_scheduler('threads')
