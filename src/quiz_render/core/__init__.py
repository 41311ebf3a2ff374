"""Render job queue: job records, execution, and delivery."""

from quiz_render.core.delivery import DeliveryResult, TelegramNotifier
from quiz_render.core.engine import CancelSignal, Composition, RenderEngine, RenderOutput
from quiz_render.core.jobs import (
    CompletedJob,
    FailedJob,
    InProgressJob,
    JobRecord,
    JobStore,
    QueuedJob,
    RenderInput,
)
from quiz_render.core.queue import RenderQueue

__all__ = [
    "CancelSignal",
    "CompletedJob",
    "Composition",
    "DeliveryResult",
    "FailedJob",
    "InProgressJob",
    "JobRecord",
    "JobStore",
    "QueuedJob",
    "RenderEngine",
    "RenderInput",
    "RenderOutput",
    "RenderQueue",
    "TelegramNotifier",
]
