# tests/test_event_loop.py
"""
Tests for bot_core.scheduler.EventLoop with a manual clock.

Covers:
- mailbox ordering and posting from callbacks
- one-shot and repeating timers, cancellation
- run_in_worker result/error delivery on the loop thread
- top-level exception handling
- run_forever / stop with tick hooks
"""

from __future__ import annotations

import threading
from typing import Any, List, Optional

import pytest

from bot_core.scheduler import EventLoop
from bot_core.testing.fakes import advance, make_test_loop


def test_post_runs_in_order() -> None:
    loop, _ = make_test_loop()
    seen: List[int] = []

    for i in range(3):
        loop.post(seen.append, i)
    loop.run_pending()

    assert seen == [0, 1, 2]


def test_callbacks_posted_during_a_pass_run_next_pass() -> None:
    loop, _ = make_test_loop()
    seen: List[str] = []

    def first() -> None:
        seen.append("first")
        loop.post(seen.append, "second")

    loop.post(first)
    loop.run_pending()
    assert seen == ["first"]

    loop.run_pending()
    assert seen == ["first", "second"]


def test_call_later_fires_when_due() -> None:
    loop, clock = make_test_loop()
    seen: List[str] = []

    loop.call_later(2.0, seen.append, "ding")
    advance(loop, clock, 1.9)
    assert seen == []

    advance(loop, clock, 0.1)
    assert seen == ["ding"]


def test_timers_fire_in_deadline_order() -> None:
    loop, clock = make_test_loop()
    seen: List[int] = []

    loop.call_later(3.0, seen.append, 3)
    loop.call_later(1.0, seen.append, 1)
    loop.call_later(2.0, seen.append, 2)
    advance(loop, clock, 5.0)

    assert seen == [1, 2, 3]


def test_cancelled_timer_never_fires() -> None:
    loop, clock = make_test_loop()
    seen: List[str] = []

    handle = loop.call_later(1.0, seen.append, "nope")
    handle.cancel()
    advance(loop, clock, 2.0)

    assert seen == []
    assert loop.next_due() is None


def test_call_every_repeats_until_cancelled() -> None:
    loop, clock = make_test_loop()
    ticks: List[float] = []

    handle = loop.call_every(1.0, lambda: ticks.append(clock()))
    advance(loop, clock, 3.0)
    assert len(ticks) == 3

    handle.cancel()
    advance(loop, clock, 3.0)
    assert len(ticks) == 3


def test_call_every_can_cancel_itself() -> None:
    loop, clock = make_test_loop()
    count = {"n": 0}
    holder: dict = {}

    def tick() -> None:
        count["n"] += 1
        if count["n"] == 2:
            holder["handle"].cancel()

    holder["handle"] = loop.call_every(1.0, tick)
    advance(loop, clock, 10.0)

    assert count["n"] == 2


def test_call_every_rejects_non_positive_period() -> None:
    loop, _ = make_test_loop()

    with pytest.raises(ValueError):
        loop.call_every(0, lambda: None)


def test_run_in_worker_delivers_result_on_loop() -> None:
    loop, _ = make_test_loop()
    results: List[Any] = []

    loop.run_in_worker(lambda a, b: a + b, 2, 3, on_done=lambda r, e: results.append((r, e)))
    assert results == []  # nothing until the loop runs

    loop.run_pending()
    assert results == [(5, None)]


def test_run_in_worker_delivers_error() -> None:
    loop, _ = make_test_loop()
    results: List[Any] = []

    def boom() -> None:
        raise RuntimeError("network down")

    loop.run_in_worker(boom, on_done=lambda r, e: results.append((r, e)))
    loop.run_pending()

    assert results[0][0] is None
    assert isinstance(results[0][1], RuntimeError)


def test_failing_callback_is_logged_and_loop_continues(caplog) -> None:
    loop, _ = make_test_loop()
    seen: List[str] = []

    def broken() -> None:
        raise ValueError("handler bug")

    loop.post(broken)
    loop.post(seen.append, "after")
    loop.run_pending()

    assert seen == ["after"]
    assert "Unhandled exception in event loop callback" in caplog.text


def test_run_forever_pumps_tick_hooks_until_stopped() -> None:
    loop = EventLoop(idle_sleep_s=0.001)
    ticks = {"n": 0}

    def hook() -> None:
        ticks["n"] += 1
        if ticks["n"] == 5:
            loop.stop()

    loop.add_tick_hook(hook)
    loop.run_forever()
    loop.close()

    assert ticks["n"] == 5


def test_post_from_another_thread_reaches_loop() -> None:
    loop = EventLoop(idle_sleep_s=0.001)
    seen: List[Optional[str]] = []

    def record_and_stop(value: str) -> None:
        seen.append(value)
        loop.stop()

    worker = threading.Thread(target=lambda: loop.post(record_and_stop, "from-thread"))
    worker.start()
    worker.join()
    loop.run_forever()
    loop.close()

    assert seen == ["from-thread"]
