# src/bot_core/scheduler.py
"""
Single-threaded event loop for the bot.

All chat, command and timer callbacks run here, one at a time, to
completion. The only work that leaves this thread is blocking I/O handed
to `run_in_worker`; its completion is posted back to the mailbox so that
state is only ever mutated on the loop thread.

Public surface:
    post(fn, *args)                    thread-safe enqueue
    call_later(delay, fn, *args)       one-shot timer -> TimerHandle
    call_every(period, fn, *args)      repeating timer -> TimerHandle
    run_in_worker(fn, *args, on_done)  blocking work on a thread pool
    add_tick_hook(fn)                  called once per loop iteration
    run_pending()                      drain mailbox + due timers once
    run_forever() / stop()
"""

from __future__ import annotations

import heapq
import itertools
import logging
import queue
import time
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any, Callable, List, Optional, Tuple

log = logging.getLogger(__name__)

Clock = Callable[[], float]
DoneCallback = Callable[[Any, Optional[BaseException]], None]


class TimerHandle:
    """Handle for a scheduled callback. Cancelling is idempotent."""

    __slots__ = ("when", "fn", "args", "period", "cancelled")

    def __init__(
        self,
        when: float,
        fn: Callable[..., Any],
        args: Tuple[Any, ...],
        period: Optional[float] = None,
    ) -> None:
        self.when = when
        self.fn = fn
        self.args = args
        self.period = period
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def repeating(self) -> bool:
        return self.period is not None


class EventLoop:
    def __init__(
        self,
        *,
        clock: Clock = time.monotonic,
        executor: Optional[Executor] = None,
        max_workers: int = 4,
        idle_sleep_s: float = 0.05,
    ) -> None:
        self._clock = clock
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="bot-worker"
        )
        self._idle_sleep_s = idle_sleep_s

        self._mailbox: "queue.SimpleQueue[Tuple[Callable[..., Any], Tuple[Any, ...]]]" = (
            queue.SimpleQueue()
        )
        self._timers: List[Tuple[float, int, TimerHandle]] = []
        self._seq = itertools.count()
        self._tick_hooks: List[Callable[[], None]] = []
        self._running = False

    # ------------------------------------------------------------------
    # Scheduling API
    # ------------------------------------------------------------------

    def now(self) -> float:
        return self._clock()

    def post(self, fn: Callable[..., Any], *args: Any) -> None:
        """Enqueue `fn(*args)` for the loop thread. Safe from any thread."""
        self._mailbox.put((fn, args))

    def call_later(self, delay: float, fn: Callable[..., Any], *args: Any) -> TimerHandle:
        handle = TimerHandle(self.now() + max(0.0, delay), fn, args)
        self._push(handle)
        return handle

    def call_every(self, period: float, fn: Callable[..., Any], *args: Any) -> TimerHandle:
        """Run `fn(*args)` every `period` seconds, first after one period."""
        if period <= 0:
            raise ValueError("period must be positive")
        handle = TimerHandle(self.now() + period, fn, args, period=period)
        self._push(handle)
        return handle

    def run_in_worker(
        self,
        fn: Callable[..., Any],
        *args: Any,
        on_done: DoneCallback,
    ) -> None:
        """
        Run blocking `fn(*args)` on the worker pool.

        `on_done(result, error)` is posted back to the loop thread; exactly
        one of the two is set.
        """
        future = self._executor.submit(fn, *args)
        future.add_done_callback(lambda f: self.post(self._deliver, f, on_done))

    def add_tick_hook(self, fn: Callable[[], None]) -> None:
        self._tick_hooks.append(fn)

    def next_due(self) -> Optional[float]:
        """Deadline of the earliest live timer, if any."""
        self._drop_cancelled_head()
        return self._timers[0][0] if self._timers else None

    # ------------------------------------------------------------------
    # Running
    # ------------------------------------------------------------------

    def run_pending(self) -> int:
        """
        Run everything that is ready right now: mailbox items first, then
        timers whose deadline has passed. Returns the number of callbacks run.
        """
        ran = 0

        # Only items present at entry; callbacks that post go to the next pass.
        for _ in range(self._mailbox.qsize()):
            try:
                fn, args = self._mailbox.get_nowait()
            except queue.Empty:
                break
            self._invoke(fn, args)
            ran += 1

        now = self.now()
        while self._timers and self._timers[0][0] <= now:
            _, _, handle = heapq.heappop(self._timers)
            if handle.cancelled:
                continue
            self._invoke(handle.fn, handle.args)
            ran += 1
            if handle.period is not None and not handle.cancelled:
                handle.when += handle.period
                self._push(handle)

        return ran

    def run_forever(self) -> None:
        self._running = True
        log.info("Event loop started")
        while self._running:
            for hook in list(self._tick_hooks):
                self._invoke(hook, ())
            if self.run_pending() == 0:
                time.sleep(self._sleep_budget())
        log.info("Event loop stopped")

    def stop(self) -> None:
        """Ask run_forever to return after the current iteration."""
        self._running = False

    def close(self) -> None:
        self._executor.shutdown(wait=False)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _push(self, handle: TimerHandle) -> None:
        heapq.heappush(self._timers, (handle.when, next(self._seq), handle))

    def _drop_cancelled_head(self) -> None:
        while self._timers and self._timers[0][2].cancelled:
            heapq.heappop(self._timers)

    def _sleep_budget(self) -> float:
        due = self.next_due()
        if due is None:
            return self._idle_sleep_s
        return min(self._idle_sleep_s, max(0.0, due - self.now()))

    @staticmethod
    def _deliver(future: Future, on_done: DoneCallback) -> None:
        error = future.exception()
        if error is not None:
            on_done(None, error)
        else:
            on_done(future.result(), None)

    @staticmethod
    def _invoke(fn: Callable[..., Any], args: Tuple[Any, ...]) -> None:
        # Top-level handler: a failing callback is logged and the loop goes on.
        try:
            fn(*args)
        except Exception:
            log.exception("Unhandled exception in event loop callback %r", fn)
