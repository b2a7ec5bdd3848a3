"""Data-parallel fan-out of a layer's per-neuron work."""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional

from link_mlp.config import DEFAULT_MAX_WORKERS, PARALLEL_MIN_WIDTH


class ParallelLoop:
    """
    Runs `body(start, stop)` over contiguous slices of `range(count)`.

    Each call is a barrier: it returns only after every slice has finished,
    so the caller can chain layers without further synchronization. Slices
    must write disjoint slots; no locking is done here.
    """

    def __init__(self, max_workers: Optional[int] = None, min_width: int = PARALLEL_MIN_WIDTH):
        self.max_workers = max_workers if max_workers is not None else DEFAULT_MAX_WORKERS
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {self.max_workers}")
        self.min_width = min_width
        self._executor: Optional[ThreadPoolExecutor] = None

    def _get_executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=self.max_workers,
                                                thread_name_prefix='link_mlp')
            logging.debug(f"Started thread pool with {self.max_workers} workers")
        return self._executor

    def run(self, count: int, body: Callable[[int, int], None], parallel: bool = True):
        # Use sequential execution for narrow layers
        # Thread dispatch overhead outweighs the work below min_width neurons
        if not parallel or self.max_workers == 1 or count < max(self.min_width, 2):
            body(0, count)
            return

        chunks = min(self.max_workers, count)
        bounds = [count * c // chunks for c in range(chunks + 1)]
        logging.debug(f"Running {count} neurons in {chunks} parallel slices")

        executor = self._get_executor()
        futures = [executor.submit(body, bounds[c], bounds[c + 1]) for c in range(chunks)]
        for future in futures:
            # Re-raises any exception from the worker
            future.result()

    def close(self):
        """Shut down the worker threads. A later parallel run starts a new pool."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
