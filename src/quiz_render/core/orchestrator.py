"""Drives a single job through the rendering engine and the notifier."""

from __future__ import annotations

import logging

from quiz_render.core.delivery import DeliveryResult, TelegramNotifier
from quiz_render.core.engine import CancelSignal, RenderEngine, make_cancel_signal
from quiz_render.core.errors import (
    JobNotFoundError,
    RenderEngineError,
    RenderOutputMissingError,
    RenderQueueError,
)
from quiz_render.core.jobs import (
    CompletedJob,
    FailedJob,
    InProgressJob,
    JobStore,
    QueuedJob,
    RenderInput,
)

logger = logging.getLogger(__name__)


class RenderOrchestrator:
    """
    Runs the render attempt of one job at a time.

    ``process`` is called by the execution serializer's worker thread only,
    so at most one job is ever written to by this class at once.
    """

    def __init__(
        self,
        store: JobStore,
        engine: RenderEngine,
        notifier: TelegramNotifier,
        *,
        serve_url: str,
        composition_id: str,
        codec: str,
    ) -> None:
        self._store = store
        self._engine = engine
        self._notifier = notifier
        self._serve_url = serve_url
        self._composition_id = composition_id
        self._codec = codec

    def process(self, job_id: str) -> None:
        """
        Render a queued job to completion or failure.

        Raises:
            JobNotFoundError: the job left the store (or stopped being queued)
                before its turn came, which happens when it is cancelled while
                queued.

        """
        job = self._store.get(job_id)
        if not isinstance(job, QueuedJob):
            raise JobNotFoundError(job_id)

        signal = make_cancel_signal()
        started = InProgressJob(input=job.input, cancel=signal.cancel, progress=0.0)
        if not self._store.replace(job_id, started, expected=job):
            raise JobNotFoundError(job_id)
        logger.info("Render job %s started", job_id)

        try:
            buffer = self._render(job_id, job.input, signal)
        except Exception as exc:  # noqa: BLE001
            error = exc if isinstance(exc, RenderQueueError) else RenderEngineError(str(exc))
            if error is not exc:
                error.__cause__ = exc
            logger.error("Render job %s failed: %s", job_id, error, exc_info=exc)
            self._store.replace(job_id, FailedJob(input=job.input, error=error))
            return

        completed = CompletedJob(input=job.input, buffer=buffer)
        if not self._store.replace(job_id, completed):
            return
        logger.info("Render job %s completed (%d bytes)", job_id, len(buffer))

        result = self._deliver(job_id, job.input, buffer)
        self._store.replace(
            job_id,
            CompletedJob(
                input=job.input,
                buffer=buffer,
                telegram_sent=result.sent,
                telegram_error=result.error,
            ),
            expected=completed,
        )

    def _render(self, job_id: str, job_input: RenderInput, signal: CancelSignal) -> bytes:
        composition = self._engine.select_composition(
            self._serve_url,
            self._composition_id,
            job_input.input_props(),
        )

        def on_progress(progress: float) -> None:
            current = self._store.get(job_id)
            if not isinstance(current, InProgressJob):
                return
            value = min(max(float(progress), current.progress), 1.0)
            if value == current.progress:
                return
            logger.debug("%s render progress: %.3f", job_id, value)
            self._store.replace(
                job_id,
                InProgressJob(input=current.input, cancel=current.cancel, progress=value),
                expected=current,
            )

        output = self._engine.render_media(
            cancel_signal=signal,
            serve_url=self._serve_url,
            composition=composition,
            codec=self._codec,
            on_progress=on_progress,
        )
        # an engine that finishes despite a cancel request still yields a cancelled job
        signal.raise_if_cancelled()
        if output is None or not output.buffer:
            msg = "Render output buffer is empty"
            raise RenderOutputMissingError(msg)
        return output.buffer

    def _deliver(self, job_id: str, job_input: RenderInput, buffer: bytes) -> DeliveryResult:
        try:
            return self._notifier.deliver(buffer, job_input.chat_id, job_id)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Notifier raised while delivering job %s", job_id)
            return DeliveryResult(sent=False, error=str(exc) or type(exc).__name__)


__all__ = ["RenderOrchestrator"]
