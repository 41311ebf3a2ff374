"""Exceptions raised by the render queue."""


class RenderQueueError(Exception):
    """Base class for every render queue error."""


class ValidationError(RenderQueueError):
    """Job creation input is malformed."""


class JobNotFoundError(RenderQueueError, LookupError):
    """No job is stored under the requested id."""

    def __init__(self, job_id: str) -> None:
        super().__init__(f"Render job {job_id} not found")
        self.job_id = job_id


class NotCancellableError(RenderQueueError):
    """The job already reached a terminal state."""

    def __init__(self, job_id: str, status: str) -> None:
        super().__init__(f"Render job {job_id} is {status} and cannot be cancelled")
        self.job_id = job_id
        self.status = status


class RenderOutputMissingError(RenderQueueError):
    """The engine finished without producing an artifact."""


class RenderEngineError(RenderQueueError):
    """The rendering engine raised while selecting or rendering."""


class RenderCancelledError(RenderEngineError):
    """The render was aborted through its cancel signal."""


class DeliveryError(RenderQueueError):
    """Uploading a finished artifact failed. Recorded, never propagated."""


__all__ = [
    "DeliveryError",
    "JobNotFoundError",
    "NotCancellableError",
    "RenderCancelledError",
    "RenderEngineError",
    "RenderOutputMissingError",
    "RenderQueueError",
    "ValidationError",
]
