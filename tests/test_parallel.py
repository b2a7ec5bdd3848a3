import threading

import pytest

from link_mlp.parallel import ParallelLoop


def test_parallel_covers_every_index_once():
    loop = ParallelLoop(max_workers=4, min_width=1)
    seen = []
    lock = threading.Lock()

    def body(start, stop):
        with lock:
            seen.extend(range(start, stop))

    loop.run(10, body, parallel=True)
    assert sorted(seen) == list(range(10))


def test_narrow_layers_run_sequentially():
    loop = ParallelLoop(max_workers=4, min_width=64)
    calls = []
    loop.run(10, lambda start, stop: calls.append((start, stop)), parallel=True)
    assert calls == [(0, 10)]


def test_sequential_when_parallel_disabled():
    loop = ParallelLoop(max_workers=4, min_width=1)
    calls = []
    loop.run(10, lambda start, stop: calls.append((start, stop)), parallel=False)
    assert calls == [(0, 10)]


def test_worker_exception_propagates():
    loop = ParallelLoop(max_workers=2, min_width=1)

    def body(start, stop):
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        loop.run(4, body, parallel=True)


def test_thread_pool_is_reused_until_closed():
    loop = ParallelLoop(max_workers=2, min_width=1)
    assert loop._executor is None

    loop.run(4, lambda start, stop: None, parallel=True)
    executor = loop._executor
    assert executor is not None
    loop.run(6, lambda start, stop: None, parallel=True)
    assert loop._executor is executor

    loop.close()
    assert loop._executor is None

    # a later parallel run starts a fresh pool
    seen = []
    lock = threading.Lock()

    def body(start, stop):
        with lock:
            seen.extend(range(start, stop))

    loop.run(5, body, parallel=True)
    assert sorted(seen) == list(range(5))
    loop.close()


def test_sequential_runs_start_no_pool():
    loop = ParallelLoop(max_workers=4, min_width=64)
    loop.run(10, lambda start, stop: None, parallel=True)
    assert loop._executor is None


def test_invalid_worker_count():
    with pytest.raises(ValueError):
        ParallelLoop(max_workers=0)
