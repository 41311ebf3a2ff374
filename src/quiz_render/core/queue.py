"""Public entry point of the render job queue."""

from __future__ import annotations

import logging
import uuid

from quiz_render.core.delivery import TelegramNotifier
from quiz_render.core.engine import RenderEngine
from quiz_render.core.errors import JobNotFoundError, NotCancellableError
from quiz_render.core.jobs import (
    ACTIVE_STATES,
    InProgressJob,
    JobRecord,
    JobStore,
    QueuedJob,
    RenderInput,
)
from quiz_render.core.orchestrator import RenderOrchestrator
from quiz_render.core.serializer import ExecutionSerializer

logger = logging.getLogger(__name__)


class RenderQueue:
    """
    Creates render jobs and runs them one at a time in creation order.

    ``create_job`` returns as soon as the job is stored and queued; the render
    itself happens on the serializer's worker thread. Call :meth:`start`
    before jobs are expected to run and :meth:`close` on shutdown.
    """

    def __init__(
        self,
        engine: RenderEngine,
        notifier: TelegramNotifier,
        *,
        serve_url: str,
        composition_id: str = "QuizVideo",
        codec: str = "gif",
        store: JobStore | None = None,
    ) -> None:
        self.codec = codec
        self.store = store if store is not None else JobStore()
        self.orchestrator = RenderOrchestrator(
            self.store,
            engine,
            notifier,
            serve_url=serve_url,
            composition_id=composition_id,
            codec=codec,
        )
        self.serializer = ExecutionSerializer(self.orchestrator.process)

    def start(self) -> None:
        self.serializer.start()

    def close(self, timeout: float | None = None) -> None:
        """
        Drop every queued job, cancel whatever is rendering and stop the worker.

        Queued jobs are removed first so the worker skips them instead of
        starting a new render after the current one is cancelled.
        """
        dropped = 0
        for _, job in self.store.list():
            if isinstance(job, QueuedJob):
                job.cancel()
                dropped += 1
        if dropped:
            logger.info("Dropped %d queued render job(s) on shutdown", dropped)
        # a job claimed while the queued ones were being dropped shows up here
        for _, job in self.store.list():
            if isinstance(job, InProgressJob):
                job.cancel()
        self.serializer.stop(timeout)

    def wait_idle(self) -> None:
        """Block until every job created so far has been attempted."""
        self.serializer.join()

    def create_job(self, job_input: RenderInput) -> str:
        job_id = uuid.uuid4().hex

        def cancel() -> None:
            # only removes the job while this exact queued record is stored
            self.store.discard(job_id, expected=queued)

        queued = QueuedJob(input=job_input, cancel=cancel)
        self.store.set(job_id, queued)
        self.serializer.submit(job_id)
        logger.info("Render job %s queued", job_id)
        return job_id

    def get_job(self, job_id: str) -> JobRecord | None:
        return self.store.get(job_id)

    def list_jobs(self) -> list[tuple[str, JobRecord]]:
        return self.store.list()

    def cancel_job(self, job_id: str) -> None:
        """
        Cancel a queued or in-progress job.

        A queued job is removed from the store and skipped when its turn
        comes. An in-progress job has its render aborted and ends up failed.

        Raises:
            JobNotFoundError: no job with this id.
            NotCancellableError: the job already completed or failed.

        """
        job = self.store.get(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        if not isinstance(job, ACTIVE_STATES):
            raise NotCancellableError(job_id, job.status)
        logger.info("Cancelling %s render job %s", job.status, job_id)
        job.cancel()
        if isinstance(job, QueuedJob):
            # the worker may have picked the job up between lookup and cancel
            current = self.store.get(job_id)
            if isinstance(current, InProgressJob):
                current.cancel()

    def counts(self) -> dict[str, int]:
        """Number of stored jobs per status."""
        out: dict[str, int] = {}
        for _, job in self.store.list():
            out[job.status] = out.get(job.status, 0) + 1
        return out


__all__ = ["RenderQueue"]
