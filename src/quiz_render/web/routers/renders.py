from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import Response

from quiz_render.core.engine import extension_for, media_type_for
from quiz_render.core.errors import JobNotFoundError, NotCancellableError, ValidationError
from quiz_render.core.jobs import CompletedJob
from quiz_render.core.queue import RenderQueue
from quiz_render.web.constants import (
    INVALID_QUIZ_DATA,
    JOB_CANCELLED,
    JOB_NOT_CANCELLABLE,
    JOB_NOT_FOUND,
    JOB_NOT_READY,
)
from quiz_render.web.schemas import job_status, job_summary, parse_render_request

router = APIRouter(
    prefix="/renders",
    tags=["renders"],
)


def get_render_queue(request: Request) -> RenderQueue:
    return request.app.state.render_queue


QueueDep = Annotated[RenderQueue, Depends(get_render_queue)]


@router.post("")
async def create_render(request: Request, queue: QueueDep) -> dict:
    """Queue a quiz video render and return its job id without waiting for it."""
    try:
        body = await request.json()
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=INVALID_QUIZ_DATA,
        ) from exc
    try:
        job_input = parse_render_request(body, max_questions=request.app.state.max_questions)
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return {"jobId": queue.create_job(job_input)}


@router.get("")
async def list_renders(queue: QueueDep) -> dict:
    return {"jobs": [job_summary(job_id, job) for job_id, job in queue.list_jobs()]}


@router.get("/{job_id}")
async def get_render(job_id: str, queue: QueueDep) -> dict:
    job = queue.get_job(job_id)
    if job is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=JOB_NOT_FOUND,
        )
    return job_status(job)


@router.get("/{job_id}/file")
async def get_render_file(job_id: str, queue: QueueDep) -> Response:
    """Download the artifact of a completed render."""
    job = queue.get_job(job_id)
    if job is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=JOB_NOT_FOUND,
        )
    if not isinstance(job, CompletedJob):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=JOB_NOT_READY,
        )
    filename = f"{job_id}{extension_for(queue.codec)}"
    return Response(
        content=job.buffer,
        media_type=media_type_for(queue.codec),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.delete("/{job_id}")
async def cancel_render(job_id: str, queue: QueueDep) -> dict:
    try:
        queue.cancel_job(job_id)
    except JobNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=JOB_NOT_FOUND,
        ) from exc
    except NotCancellableError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=JOB_NOT_CANCELLABLE,
        ) from exc
    return {"message": JOB_CANCELLED}


__all__ = ["get_render_queue", "router"]
