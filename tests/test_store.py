"""Tests for job records and the in-memory job store."""

import pytest
from conftest import make_input
from pydantic import ValidationError

from quiz_render.core.jobs import (
    CompletedJob,
    FailedJob,
    InProgressJob,
    JobStore,
    QueuedJob,
    Question,
    RenderInput,
)


def _noop():
    pass


def test_set_get_and_missing():
    store = JobStore()
    record = QueuedJob(input=make_input(), cancel=_noop)
    store.set("a", record)
    assert store.get("a") is record
    assert store.get("missing") is None


def test_replace_requires_present_job():
    store = JobStore()
    done = CompletedJob(input=make_input(), buffer=b"x")
    assert store.replace("a", done) is False
    assert store.get("a") is None


def test_replace_guarded_by_expected_record():
    store = JobStore()
    queued = QueuedJob(input=make_input(), cancel=_noop)
    other = QueuedJob(input=make_input(), cancel=_noop)
    store.set("a", queued)
    started = InProgressJob(input=queued.input, cancel=_noop)
    assert store.replace("a", started, expected=other) is False
    assert store.get("a") is queued
    assert store.replace("a", started, expected=queued) is True
    assert store.get("a") is started


def test_discard_guarded_by_expected_record():
    store = JobStore()
    queued = QueuedJob(input=make_input(), cancel=_noop)
    started = InProgressJob(input=queued.input, cancel=_noop)
    store.set("a", started)
    assert store.discard("a", expected=queued) is False
    assert store.get("a") is started
    assert store.discard("a") is True
    assert store.discard("a") is False


def test_list_keeps_insertion_order_across_replacements():
    store = JobStore()
    for job_id in ("a", "b", "c"):
        store.set(job_id, QueuedJob(input=make_input(job_id), cancel=_noop))
    store.replace("a", CompletedJob(input=make_input("a"), buffer=b"x"))
    assert [job_id for job_id, _ in store.list()] == ["a", "b", "c"]
    assert isinstance(store.list()[0][1], CompletedJob)


def test_finished_jobs_evicted_oldest_first():
    store = JobStore(max_finished=2)
    store.set("active", QueuedJob(input=make_input(), cancel=_noop))
    for job_id in ("a", "b", "c"):
        store.set(job_id, FailedJob(input=make_input(), error=RuntimeError(job_id)))
    assert [job_id for job_id, _ in store.list()] == ["active", "b", "c"]
    assert len(store) == 3


def test_records_are_immutable():
    record = CompletedJob(input=make_input(), buffer=b"x")
    with pytest.raises(AttributeError):
        record.telegram_sent = True  # type: ignore[misc]


def test_failed_job_kind_is_error_class_name():
    record = FailedJob(input=make_input(), error=KeyError("k"))
    assert record.status == "failed"
    assert record.kind == "KeyError"


def test_render_input_accepts_wire_names():
    job_input = RenderInput.model_validate(
        {
            "quizData": {
                "questions": [
                    {"question": "Q?", "options": ["a", "b"], "correctAnswerIndex": 1},
                ],
            },
            "chatId": 7,
        },
    )
    assert job_input.chat_id == 7
    assert job_input.quiz_data.questions[0].correct_answer_index == 1
    (question,) = job_input.input_props()["quizData"]["questions"]
    assert question["question"] == "Q?"
    assert list(question["options"]) == ["a", "b"]
    assert question["correctAnswerIndex"] == 1


def test_question_answer_must_point_at_an_option():
    with pytest.raises(ValidationError):
        Question(question="Q?", options=("a", "b"), correct_answer_index=2)
