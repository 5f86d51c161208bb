"""
Background execution of an optimization run.

The search is CPU-bound and single-threaded; callers with an interactive loop
start it as one unit of work on a worker thread, poll percentage updates from a
thread-safe queue and may request cancellation. Exactly one result is produced
per run.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from queue import Empty, Queue
from typing import List, Optional

from .annealing import OptimizationResult, SeatingOptimizer
from .data_models import SeatingProblem

logger = logging.getLogger(__name__)


class OptimizationHandle:
    """Handle on an optimization running in the background"""

    def __init__(self, future: Future, progress: Queue, cancel_event: threading.Event,
                 executor: ThreadPoolExecutor):
        self._future = future
        self._progress = progress
        self._cancel_event = cancel_event
        self._executor = executor
        self._last_progress = 0.0

    def cancel(self) -> None:
        """Ask the search to stop; result() then returns the best layout so far"""
        logger.info("Cancellation requested")
        self._cancel_event.set()

    @property
    def cancel_requested(self) -> bool:
        return self._cancel_event.is_set()

    def done(self) -> bool:
        return self._future.done()

    def progress_updates(self) -> List[float]:
        """Drain and return the percentages reported since the last call"""
        updates = []
        while True:
            try:
                updates.append(self._progress.get_nowait())
            except Empty:
                break
        if updates:
            self._last_progress = updates[-1]
        return updates

    @property
    def last_progress(self) -> float:
        """Most recent percentage drained by progress_updates()"""
        return self._last_progress

    def result(self, timeout: Optional[float] = None) -> OptimizationResult:
        """
        Wait for the run to finish.

        Raises:
            concurrent.futures.TimeoutError: If the run is still going after timeout
            InvalidInputError: If the optimizer rejected its inputs
        """
        try:
            return self._future.result(timeout)
        finally:
            if self._future.done():
                self._executor.shutdown(wait=False)


def start_optimization(optimizer: SeatingOptimizer, problem: SeatingProblem) -> OptimizationHandle:
    """
    Run optimizer.solve(problem) on a dedicated worker thread.

    Args:
        optimizer: Configured optimizer; must not be shared with another run
        problem: Inputs of the run; the caller must not mutate them until done

    Returns:
        OptimizationHandle for progress, cancellation and the result
    """
    progress: Queue = Queue()
    cancel_event = threading.Event()
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="seating-optimizer")

    future = executor.submit(
        optimizer.solve,
        problem,
        progress_callback=progress.put,
        cancel_event=cancel_event,
    )
    return OptimizationHandle(future, progress, cancel_event, executor)
