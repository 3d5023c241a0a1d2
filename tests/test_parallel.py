import threading

import pytest

from zgstorage.parallel import Parallelizable, Result, serial


class Squares(Parallelizable):
    def __init__(self):
        self.result = []
        self.tasks_seen = []
        self.routines = set()
        self._lock = threading.Lock()

    def parallel_do(self, routine, task):
        with self._lock:
            self.routines.add(routine)
        return task * task

    def parallel_collect(self, result):
        self.tasks_seen.append(result.task)
        self.result.append(result.value)


@pytest.mark.parametrize("routines,window", [(4, 16), (4, 0), (1, 0), (0, 0), (8, 3)])
def test_serial_collects_in_order(routines, window):
    worker = Squares()
    serial(worker, 100, routines, window)
    assert len(worker.result) == 100
    assert worker.result == [i * i for i in range(100)]
    assert worker.tasks_seen == list(range(100))
    assert worker.routines <= set(range(max(routines, 1)))


def test_serial_with_no_tasks():
    worker = Squares()
    serial(worker, 0, 4, 0)
    assert worker.result == []


class Failing(Squares):
    def parallel_do(self, routine, task):
        if task == 5:
            raise RuntimeError("task failed")
        return task


def test_serial_propagates_task_error():
    worker = Failing()
    with pytest.raises(RuntimeError, match="task failed"):
        serial(worker, 20, 2, 0)
    assert 5 not in worker.tasks_seen


class FailingCollect(Squares):
    def parallel_collect(self, result):
        if result.task == 3:
            raise ValueError("collect failed")
        super().parallel_collect(result)


def test_serial_propagates_collect_error():
    worker = FailingCollect()
    with pytest.raises(ValueError, match="collect failed"):
        serial(worker, 10, 3, 0)
    assert worker.tasks_seen == [0, 1, 2]


def test_result_fields():
    result = Result(routine=1, task=2, value="x")
    assert (result.routine, result.task, result.value) == (1, 2, "x")