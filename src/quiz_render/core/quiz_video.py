import io
import math
from collections.abc import Iterator
from typing import Any

import numpy as np
from PIL import Image, ImageDraw, ImageFont
from pydantic import ValidationError

from quiz_render.core.engine import CancelSignal, Composition, ProgressCallback, RenderOutput
from quiz_render.core.errors import RenderEngineError
from quiz_render.core.jobs import Question, QuizData

QUIZ_COMPOSITION_ID = "QuizVideo"
SUPPORTED_CODECS = ("gif", "webp")

# Timeline, in seconds
INTRO_SECONDS = 2.0
QUESTION_SECONDS = 9.0
OPTIONS_DELAY_SECONDS = 1.5
REVEAL_AT_SECONDS = 6.5
REVEAL_DELAY_SECONDS = 0.5
SLIDE_OUT_SECONDS = 1.0

GRADIENT_START = (0x93, 0x70, 0xDB)  # purple, top left
GRADIENT_END = (0x41, 0x69, 0xE1)  # blue, bottom right
QUESTION_TEXT = (255, 255, 255)
OPTION_BACKGROUND = (255, 255, 255)
OPTION_TEXT = (0x33, 0x33, 0x33)
CORRECT_HIGHLIGHT = (0x22, 0xC5, 0x5E)
CORRECT_TEXT = (255, 255, 255)
COUNTDOWN_TRACK = (255, 255, 255)
COUNTDOWN_ARC = (0xFA, 0xCC, 0x15)


def _gradient(width: int, height: int) -> Image.Image:
    """Diagonal purple-to-blue background."""
    ys, xs = np.mgrid[0:height, 0:width]
    t = (xs / max(width - 1, 1) + ys / max(height - 1, 1)) / 2.0
    start = np.array(GRADIENT_START, dtype=np.float64)
    end = np.array(GRADIENT_END, dtype=np.float64)
    arr = start + (end - start) * t[..., None]
    return Image.fromarray(np.rint(arr).astype(np.uint8), "RGB")


def _font(size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    return ImageFont.load_default(size=max(8, size))


def _wrap(draw: ImageDraw.ImageDraw, text: str, font: Any, max_width: float) -> list[str]:
    """Greedy word wrap measured with the actual font."""
    lines: list[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}".strip()
        if current and draw.textlength(candidate, font=font) > max_width:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines or [""]


def _draw_centered_lines(
    draw: ImageDraw.ImageDraw,
    lines: list[str],
    font: Any,
    center_x: float,
    top: float,
    fill: tuple[int, int, int],
    line_height: float,
) -> float:
    y = top
    for line in lines:
        draw.text((center_x, y), line, font=font, fill=fill, anchor="ma")
        y += line_height
    return y


class QuizVideoEngine:
    """
    In-process renderer for the ``QuizVideo`` composition.

    Frames are drawn with Pillow on a numpy-generated gradient and encoded
    as an animated GIF (or WebP). ``serve_url`` is accepted for interface
    compatibility; everything this engine needs is bundled with it.
    """

    def __init__(self, *, width: int = 360, height: int = 640, fps: int = 10) -> None:
        self.width = width
        self.height = height
        self.fps = fps

    @property
    def intro_frames(self) -> int:
        return max(1, round(INTRO_SECONDS * self.fps))

    @property
    def question_frames(self) -> int:
        return max(1, round(QUESTION_SECONDS * self.fps))

    def select_composition(
        self,
        serve_url: str,  # noqa: ARG002
        composition_id: str,
        input_props: dict[str, Any],
    ) -> Composition:
        if composition_id != QUIZ_COMPOSITION_ID:
            msg = f"Could not find composition with ID {composition_id}"
            raise RenderEngineError(msg)
        try:
            quiz = QuizData.model_validate(input_props.get("quizData"))
        except ValidationError as exc:
            msg = f"Invalid props for {composition_id}: {exc}"
            raise RenderEngineError(msg) from exc
        return Composition(
            id=composition_id,
            width=self.width,
            height=self.height,
            fps=self.fps,
            duration_in_frames=self.intro_frames + len(quiz.questions) * self.question_frames,
            props={"quiz": quiz},
        )

    def render_media(
        self,
        *,
        cancel_signal: CancelSignal,
        serve_url: str,  # noqa: ARG002
        composition: Composition,
        codec: str,
        on_progress: ProgressCallback,
    ) -> RenderOutput:
        if codec not in SUPPORTED_CODECS:
            msg = f"Unsupported codec {codec!r}, expected one of {SUPPORTED_CODECS}"
            raise RenderEngineError(msg)

        # Frames are drawn lazily while the encoder consumes them, so the
        # GIF writer only ever holds its own palette-reduced copies.
        frames = self._iter_frames(composition, cancel_signal, on_progress)
        first = next(frames)
        bio = io.BytesIO()
        first.save(
            bio,
            format=codec.upper(),
            save_all=True,
            append_images=frames,
            loop=0,
            duration=round(1000 / composition.fps),
        )
        cancel_signal.raise_if_cancelled()
        return RenderOutput(buffer=bio.getvalue())

    def _iter_frames(
        self,
        composition: Composition,
        cancel_signal: CancelSignal,
        on_progress: ProgressCallback,
    ) -> Iterator[Image.Image]:
        background = _gradient(composition.width, composition.height)
        total = composition.duration_in_frames
        for index in range(total):
            cancel_signal.raise_if_cancelled()
            frame = self.render_frame(composition, index, background=background)
            on_progress((index + 1) / total)
            yield frame

    def render_frame(
        self,
        composition: Composition,
        index: int,
        background: Image.Image | None = None,
    ) -> Image.Image:
        """Draw frame ``index`` of the composition."""
        if background is None:
            background = _gradient(composition.width, composition.height)
        quiz: QuizData = composition.props["quiz"]
        if index < self.intro_frames:
            return self._intro_frame(background, len(quiz.questions))
        offset = index - self.intro_frames
        question_index, local = divmod(offset, self.question_frames)
        return self._question_frame(
            background,
            quiz.questions[question_index],
            question_index,
            local / composition.fps,
        )

    def _intro_frame(self, background: Image.Image, count: int) -> Image.Image:
        frame = background.copy()
        draw = ImageDraw.Draw(frame)
        w, h = frame.size
        title = _font(w // 8)
        sub = _font(w // 18)
        draw.text((w / 2, h * 0.38), "Quiz Time!", font=title, fill=QUESTION_TEXT, anchor="mm")
        noun = "question" if count == 1 else "questions"
        draw.text((w / 2, h * 0.5), f"{count} {noun}", font=sub, fill=QUESTION_TEXT, anchor="mm")
        return frame

    def _question_frame(
        self,
        background: Image.Image,
        question: Question,
        question_index: int,
        t: float,
    ) -> Image.Image:
        w, h = background.size
        slide_start = QUESTION_SECONDS - SLIDE_OUT_SECONDS
        slide = min(max((t - slide_start) / SLIDE_OUT_SECONDS, 0.0), 1.0)
        shift = -slide * h * 0.6

        frame = background.copy()
        draw = ImageDraw.Draw(frame)
        margin = w * 0.08

        if t < REVEAL_AT_SECONDS:
            self._draw_countdown(draw, w, h, t)

        q_font = _font(w // 14)
        q_lines = _wrap(draw, f"{question_index + 1}. {question.question}", q_font, w - 2 * margin)
        y = _draw_centered_lines(draw, q_lines, q_font, w / 2, h * 0.3 + shift, QUESTION_TEXT, w / 11)

        if t >= OPTIONS_DELAY_SECONDS:
            reveal = t >= REVEAL_AT_SECONDS + REVEAL_DELAY_SECONDS
            o_font = _font(w // 20)
            box_h = h * 0.07
            gap = h * 0.025
            y += gap
            for i, option in enumerate(question.options):
                correct = reveal and i == question.correct_answer_index
                draw.rounded_rectangle(
                    (margin, y, w - margin, y + box_h),
                    radius=box_h / 2,
                    fill=CORRECT_HIGHLIGHT if correct else OPTION_BACKGROUND,
                )
                draw.text(
                    (w / 2, y + box_h / 2),
                    option,
                    font=o_font,
                    fill=CORRECT_TEXT if correct else OPTION_TEXT,
                    anchor="mm",
                )
                y += box_h + gap

        if slide > 0:
            frame = Image.blend(frame, background, slide)
        return frame

    def _draw_countdown(self, draw: ImageDraw.ImageDraw, w: int, h: int, t: float) -> None:
        remaining = max(REVEAL_AT_SECONDS - t, 0.0)
        radius = w * 0.09
        cx, cy = w / 2, h * 0.15
        box = (cx - radius, cy - radius, cx + radius, cy + radius)
        stroke = max(2, int(radius / 6))
        draw.ellipse(box, outline=COUNTDOWN_TRACK, width=stroke)
        sweep = 360.0 * remaining / REVEAL_AT_SECONDS
        if sweep > 0:
            draw.arc(box, start=-90, end=-90 + sweep, fill=COUNTDOWN_ARC, width=stroke)
        draw.text(
            (cx, cy),
            str(math.ceil(remaining)),
            font=_font(int(radius)),
            fill=QUESTION_TEXT,
            anchor="mm",
        )


__all__ = ["QUIZ_COMPOSITION_ID", "SUPPORTED_CODECS", "QuizVideoEngine"]
