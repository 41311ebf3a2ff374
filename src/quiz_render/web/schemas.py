"""Request parsing and JSON projections of job records."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from quiz_render.core.errors import ValidationError
from quiz_render.core.jobs import (
    CompletedJob,
    FailedJob,
    InProgressJob,
    JobRecord,
    QueuedJob,
    QuizData,
    RenderInput,
)
from quiz_render.web.constants import (
    INVALID_CHAT_ID,
    INVALID_QUIZ_DATA,
    MISSING_CHAT_ID,
    TOO_MANY_QUESTIONS,
)


def parse_render_request(body: Any, max_questions: int | None = None) -> RenderInput:
    """
    Build the job input from a ``POST /renders`` body.

    Raises:
        ValidationError: ``quizData`` is missing, malformed or has more than
            ``max_questions`` questions, or ``chatId`` is absent, empty, zero
            or neither a string nor an integer.

    """
    if not isinstance(body, dict):
        raise ValidationError(INVALID_QUIZ_DATA)
    quiz_data = body.get("quizData")
    if not isinstance(quiz_data, dict) or not isinstance(quiz_data.get("questions"), list):
        raise ValidationError(INVALID_QUIZ_DATA)
    if max_questions is not None and len(quiz_data["questions"]) > max_questions:
        raise ValidationError(TOO_MANY_QUESTIONS.format(max_questions))
    chat_id = body.get("chatId")
    if not chat_id:
        raise ValidationError(MISSING_CHAT_ID)
    if isinstance(chat_id, bool) or not isinstance(chat_id, (str, int)):
        raise ValidationError(INVALID_CHAT_ID)
    try:
        quiz = QuizData.model_validate(quiz_data)
    except PydanticValidationError as exc:
        msg = f"{INVALID_QUIZ_DATA}: {exc.error_count()} invalid field(s)"
        raise ValidationError(msg) from exc
    return RenderInput(quiz_data=quiz, chat_id=chat_id)


def job_status(job: JobRecord) -> dict[str, Any]:
    """Projection for ``GET /renders/{job_id}``. Never includes the buffer or the input."""
    if isinstance(job, QueuedJob):
        return {"status": job.status}
    if isinstance(job, InProgressJob):
        return {"status": job.status, "progress": job.progress}
    if isinstance(job, CompletedJob):
        return {
            "status": job.status,
            "telegramSent": job.telegram_sent,
            "telegramError": job.telegram_error,
        }
    if isinstance(job, FailedJob):
        return {
            "status": job.status,
            "error": {"message": str(job.error), "kind": job.kind},
        }
    msg = f"Unexpected job record: {job!r}"
    raise TypeError(msg)


def job_summary(job_id: str, job: JobRecord) -> dict[str, Any]:
    """Projection used by ``GET /renders``."""
    summary: dict[str, Any] = {"id": job_id, "status": job.status}
    if isinstance(job, QueuedJob):
        pass
    elif isinstance(job, InProgressJob):
        summary["progress"] = job.progress
    elif isinstance(job, CompletedJob):
        summary["telegramSent"] = job.telegram_sent
        if job.telegram_error:
            summary["telegramError"] = job.telegram_error
    elif isinstance(job, FailedJob):
        summary["error"] = {"message": str(job.error) or "Unknown error"}
    else:
        msg = f"Unexpected job record: {job!r}"
        raise TypeError(msg)
    return summary


__all__ = ["job_status", "job_summary", "parse_render_request"]
