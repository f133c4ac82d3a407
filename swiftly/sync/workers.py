"""Fixed-size worker pool draining a shared queue."""

import logging
import queue
import threading
from collections.abc import Iterable
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_STOP = object()


class WorkerPool(Generic[T]):
    """Pool of worker threads processing items from one queue.

    Each worker takes one item at a time and processes it completely before
    taking the next, so at most ``max_workers`` items are in flight. A
    failing item never stops the other workers.

    Usage:
        pool = WorkerPool(upload_one, max_workers=4)
        pool.run(entries)  # returns when every entry was processed
    """

    def __init__(self, handler: Callable[[T], None], max_workers: int):
        """Initialize the worker pool.

        Args:
            handler: Callable invoked once per item
            max_workers: Number of worker threads
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self._handler = handler
        self._max_workers = max_workers
        self._queue: queue.Queue = queue.Queue(maxsize=max_workers)

    @property
    def max_workers(self) -> int:
        return self._max_workers

    def _worker_loop(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                try:
                    self._handler(item)
                except Exception:
                    logger.exception("Unhandled error in worker")
            finally:
                self._queue.task_done()

    def run(self, items: Iterable[T]) -> None:
        """Process all items and wait for the workers to finish.

        Args:
            items: Work items, enqueued in order by the calling thread
        """
        workers = [
            threading.Thread(
                target=self._worker_loop, name=f"swiftly-worker-{i}", daemon=True
            )
            for i in range(self._max_workers)
        ]
        for worker in workers:
            worker.start()
        logger.debug("Started %d worker(s)", len(workers))

        try:
            for item in items:
                self._queue.put(item)
        finally:
            # One stop marker per worker closes the queue
            for _ in workers:
                self._queue.put(_STOP)
            for worker in workers:
                worker.join()
        logger.debug("All workers finished")
