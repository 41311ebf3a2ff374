"""
Job records and the in-memory job store.

A job record is one of four frozen dataclasses. Transitions never patch a
record: a new record replaces the old one in the store under a lock, so
readers only ever see a whole state.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, ClassVar, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

MAX_OPTIONS = 4
MAX_QUESTIONS = 50


class Question(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    question: str
    options: tuple[str, ...] = Field(min_length=2, max_length=MAX_OPTIONS)
    correct_answer_index: int = Field(alias="correctAnswerIndex", ge=0, lt=MAX_OPTIONS)

    @model_validator(mode="after")
    def check_answer_in_options(self) -> Question:
        if self.correct_answer_index >= len(self.options):
            msg = "correctAnswerIndex must point at one of the options"
            raise ValueError(msg)
        return self


class QuizData(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    questions: tuple[Question, ...]


class RenderInput(BaseModel):
    """Immutable payload of a render job: what to render and where to send it."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    quiz_data: QuizData = Field(alias="quizData")
    chat_id: str | int | None = Field(default=None, alias="chatId")

    def input_props(self) -> dict[str, Any]:
        """Props handed to the engine when selecting the composition."""
        return {"quizData": self.quiz_data.model_dump(by_alias=True)}


@dataclass(frozen=True)
class QueuedJob:
    input: RenderInput
    cancel: Callable[[], None] = field(repr=False, compare=False)

    status: ClassVar[str] = "queued"


@dataclass(frozen=True)
class InProgressJob:
    input: RenderInput
    cancel: Callable[[], None] = field(repr=False, compare=False)
    progress: float = 0.0

    status: ClassVar[str] = "in-progress"


@dataclass(frozen=True)
class CompletedJob:
    input: RenderInput
    buffer: bytes = field(repr=False)
    telegram_sent: bool | None = None
    telegram_error: str | None = None

    status: ClassVar[str] = "completed"


@dataclass(frozen=True)
class FailedJob:
    input: RenderInput
    error: BaseException

    status: ClassVar[str] = "failed"

    @property
    def kind(self) -> str:
        return type(self.error).__name__


JobRecord = Union[QueuedJob, InProgressJob, CompletedJob, FailedJob]

ACTIVE_STATES = (QueuedJob, InProgressJob)
TERMINAL_STATES = (CompletedJob, FailedJob)


class JobStore:
    """
    Thread-safe registry of job records keyed by job id.

    Iteration order is insertion order; replacing a record keeps its slot.
    When ``max_finished`` is set, the oldest terminal records are evicted
    once more than that many have accumulated.
    """

    def __init__(self, max_finished: int | None = None) -> None:
        self._jobs: dict[str, JobRecord] = {}
        self._finished: dict[str, None] = {}
        self._lock = threading.Lock()
        self._max_finished = max_finished

    def get(self, job_id: str) -> JobRecord | None:
        with self._lock:
            return self._jobs.get(job_id)

    def set(self, job_id: str, record: JobRecord) -> None:
        with self._lock:
            self._write(job_id, record)

    def replace(
        self,
        job_id: str,
        record: JobRecord,
        expected: JobRecord | None = None,
    ) -> bool:
        """
        Replace the record of a job that is still stored.

        Returns False without writing when the job is gone, or when
        ``expected`` is given and is no longer the stored record.
        """
        with self._lock:
            current = self._jobs.get(job_id)
            if current is None:
                return False
            if expected is not None and current is not expected:
                return False
            self._write(job_id, record)
            return True

    def discard(self, job_id: str, expected: JobRecord | None = None) -> bool:
        """Remove a job, guarded like :meth:`replace`."""
        with self._lock:
            current = self._jobs.get(job_id)
            if current is None:
                return False
            if expected is not None and current is not expected:
                return False
            del self._jobs[job_id]
            self._finished.pop(job_id, None)
            return True

    def list(self) -> list[tuple[str, JobRecord]]:
        with self._lock:
            return list(self._jobs.items())

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    def _write(self, job_id: str, record: JobRecord) -> None:
        self._jobs[job_id] = record
        if not isinstance(record, TERMINAL_STATES):
            return
        # re-inserting moves the id to the newest end
        self._finished.pop(job_id, None)
        self._finished[job_id] = None
        if self._max_finished is None:
            return
        while len(self._finished) > self._max_finished:
            oldest = next(iter(self._finished))
            del self._finished[oldest]
            del self._jobs[oldest]


__all__ = [
    "ACTIVE_STATES",
    "MAX_QUESTIONS",
    "TERMINAL_STATES",
    "CompletedJob",
    "FailedJob",
    "InProgressJob",
    "JobRecord",
    "JobStore",
    "QueuedJob",
    "Question",
    "QuizData",
    "RenderInput",
]
