"""Shared fixtures: a scriptable fake engine, a recording notifier, and a running queue."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

import pytest

from quiz_render.core.delivery import DeliveryResult
from quiz_render.core.engine import CancelSignal, Composition, RenderOutput
from quiz_render.core.jobs import InProgressJob, Question, QuizData, RenderInput
from quiz_render.core.queue import RenderQueue


def make_input(title: str = "What is 2 + 2?", chat_id: str | int | None = "42") -> RenderInput:
    question = Question(question=title, options=("3", "4", "5"), correct_answer_index=1)
    return RenderInput(quiz_data=QuizData(questions=(question,)), chat_id=chat_id)


def wait_for(predicate: Callable[[], bool], timeout: float = 5.0) -> None:
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            msg = "condition not met in time"
            raise AssertionError(msg)
        time.sleep(0.005)


class FakeEngine:
    """
    Engine keyed on the first question's text.

    ``fail``, ``empty`` and ``gate`` script what happens for a given title;
    every other title renders instantly with two progress reports.
    """

    def __init__(self) -> None:
        self.started: list[str] = []
        self.failures: dict[str, Exception] = {}
        self.empty: set[str] = set()
        self.gates: dict[str, tuple[threading.Event, threading.Event]] = {}
        self.observe: Callable[[], int] | None = None
        self.observed: list[int] = []
        self._lock = threading.Lock()
        self._in_flight = 0
        self.max_in_flight = 0

    def gate(self, title: str) -> tuple[threading.Event, threading.Event]:
        """Make ``title`` block until released (or cancelled). Returns (started, release)."""
        events = (threading.Event(), threading.Event())
        self.gates[title] = events
        return events

    def select_composition(self, serve_url, composition_id, input_props):
        return Composition(
            id=composition_id,
            width=1,
            height=1,
            fps=1,
            duration_in_frames=1,
            props=input_props,
        )

    def render_media(self, *, cancel_signal: CancelSignal, serve_url, composition, codec, on_progress):
        title = composition.props["quizData"]["questions"][0]["question"]
        with self._lock:
            self._in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self._in_flight)
            self.started.append(title)
        try:
            if self.observe is not None:
                self.observed.append(self.observe())
            if title in self.gates:
                started, release = self.gates[title]
                started.set()
                while not release.wait(0.005):
                    cancel_signal.raise_if_cancelled()
                cancel_signal.raise_if_cancelled()
            if title in self.failures:
                raise self.failures[title]
            on_progress(0.5)
            on_progress(1.0)
            if title in self.empty:
                return RenderOutput(buffer=b"")
            return RenderOutput(buffer=f"video:{title}".encode())
        finally:
            with self._lock:
                self._in_flight -= 1


class RecordingNotifier:
    def __init__(self, result: DeliveryResult | None = None) -> None:
        self.result = result or DeliveryResult(sent=True)
        self.calls: list[tuple[bytes, str | int | None, str]] = []

    def deliver(self, artifact, chat_id, job_id):
        self.calls.append((artifact, chat_id, job_id))
        return self.result


def count_in_progress(queue: RenderQueue) -> int:
    return sum(isinstance(job, InProgressJob) for _, job in queue.list_jobs())


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def render_queue(engine, notifier):
    queue = RenderQueue(engine, notifier, serve_url="test://bundle")
    queue.start()
    yield queue
    for started, release in engine.gates.values():
        release.set()
    queue.close(timeout=5.0)
