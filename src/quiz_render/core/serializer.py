"""
Single-worker FIFO that runs render attempts strictly one after another.

Job ids are pushed onto an unbounded ``queue.Queue`` and consumed by one
daemon thread, so at most one render is ever in flight and jobs are attempted
in submission order. A failing attempt never stops the worker.
"""

from __future__ import annotations

import logging
import queue as _queue
import threading
from collections.abc import Callable

from quiz_render.core.errors import JobNotFoundError

logger = logging.getLogger(__name__)


class ExecutionSerializer:
    def __init__(self, handler: Callable[[str], None], name: str = "render-worker") -> None:
        self._handler = handler
        self._queue: _queue.Queue[str | None] = _queue.Queue()
        self._name = name
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def pending(self) -> int:
        """Approximate number of ids waiting for their turn."""
        return self._queue.qsize()

    def start(self) -> None:
        with self._lock:
            if self.running:
                return
            self._thread = threading.Thread(target=self._worker, name=self._name, daemon=True)
            self._thread.start()

    def submit(self, job_id: str) -> None:
        self._queue.put(job_id)

    def join(self) -> None:
        """Block until every submitted id has been handled."""
        self._queue.join()

    def stop(self, timeout: float | None = None) -> None:
        """Let the worker handle every id submitted so far, then exit."""
        with self._lock:
            thread = self._thread
            if thread is None:
                return
            self._queue.put(None)
            thread.join(timeout)
            if not thread.is_alive():
                self._thread = None

    def _worker(self) -> None:
        while True:
            job_id = self._queue.get()
            try:
                if job_id is None:
                    break
                self._handler(job_id)
            except JobNotFoundError:
                logger.info("Skipping render job %s: cancelled before its turn", job_id)
            except Exception:
                logger.exception("Render job %s raised in the worker", job_id)
            finally:
                self._queue.task_done()


__all__ = ["ExecutionSerializer"]
