"""Run tasks on worker threads and collect their results in task order."""

from __future__ import annotations

import itertools
import threading
from abc import ABC, abstractmethod
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any


@dataclass
class Result:
    """The outcome of one task."""

    routine: int
    task: int
    value: Any


class Parallelizable(ABC):
    """Work that can be split into numbered tasks and collected in order."""

    @abstractmethod
    def parallel_do(self, routine: int, task: int) -> Any:
        """Do one task on the given worker and return its value."""

    @abstractmethod
    def parallel_collect(self, result: Result) -> None:
        """Consume a task result; called in task order."""


def serial(worker: Parallelizable, tasks: int, routines: int = 0, window: int = 0) -> None:
    """Run `tasks` tasks on up to `routines` threads, collecting results in order.

    With a positive window, at most max(routines, window) tasks run ahead of
    the next result to collect. The first error raised by a task or by
    collection is re-raised.
    """
    if tasks <= 0:
        return
    routines = max(routines, 1)
    routines = min(routines, tasks)
    channel_len = max(routines, window)
    has_window = window > 0

    ids = itertools.count()
    lock = threading.Lock()
    local = threading.local()

    def init() -> None:
        with lock:
            local.routine = next(ids)

    def run(task: int) -> Result:
        routine = local.routine
        return Result(routine, task, worker.parallel_do(routine, task))

    pool = ThreadPoolExecutor(max_workers=routines, initializer=init)
    pending: dict[Future, int] = {}
    cache: dict[int, Result] = {}
    dispatched = 0

    def dispatch() -> None:
        nonlocal dispatched
        if dispatched < tasks:
            pending[pool.submit(run, dispatched)] = dispatched
            dispatched += 1

    try:
        for _ in range(min(channel_len, tasks)):
            dispatch()
        collected = 0
        while collected < tasks:
            done, _ = wait(list(pending), return_when=FIRST_COMPLETED)
            for fut in done:
                task = pending.pop(fut)
                cache[task] = fut.result()
                if not has_window:
                    dispatch()
            while collected in cache:
                worker.parallel_collect(cache.pop(collected))
                collected += 1
                if has_window:
                    dispatch()
    finally:
        pool.shutdown(wait=True, cancel_futures=True)