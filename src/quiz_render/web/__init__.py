from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from importlib.metadata import version
from os import getenv

from fastapi import FastAPI
from fastapi.middleware.gzip import GZipMiddleware

from quiz_render.config import Settings, get_settings
from quiz_render.core.delivery import TelegramNotifier
from quiz_render.core.jobs import MAX_QUESTIONS, JobStore
from quiz_render.core.queue import RenderQueue
from quiz_render.core.quiz_video import QuizVideoEngine
from quiz_render.utils.logger import configure_logging
from quiz_render.web.routers import api_router

logger = logging.getLogger(__name__)


def build_render_queue(settings: Settings) -> RenderQueue:
    """Wire the built-in engine, the Telegram notifier and a job store from settings."""
    engine = QuizVideoEngine(
        width=settings.frame_width,
        height=settings.frame_height,
        fps=settings.fps,
    )
    notifier = TelegramNotifier(
        settings.telegram_bot_token,
        codec=settings.codec,
        api_base=settings.telegram_api_base,
        timeout=settings.telegram_timeout,
    )
    return RenderQueue(
        engine,
        notifier,
        serve_url=settings.serve_url,
        composition_id=settings.composition_id,
        codec=settings.codec,
        store=JobStore(max_finished=settings.max_finished_jobs),
    )


def create_app(
    render_queue: RenderQueue | None = None,
    *,
    max_questions: int | None = MAX_QUESTIONS,
) -> FastAPI:
    """
    Build the HTTP application around a render queue.

    When no queue is given one is built from :func:`get_settings` at startup,
    and the question limit is taken from the same settings.
    The queue's worker is started with the app and stopped on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        queue = render_queue
        app.state.max_questions = max_questions
        if queue is None:
            settings = get_settings()
            configure_logging(settings.log_level)
            queue = build_render_queue(settings)
            app.state.max_questions = settings.max_questions
        app.state.render_queue = queue
        queue.start()
        logger.info("Render worker started")
        try:
            yield
        finally:
            queue.close(timeout=5.0)
            logger.info("Render worker stopped")

    app = FastAPI(
        title="Quiz Render",
        version=version("quiz-render"),
        lifespan=lifespan,
    )

    # Add middleware to compress responses larger than 500 bytes
    app.add_middleware(GZipMiddleware, minimum_size=500)

    app.include_router(
        api_router,
    )
    return app


app = create_app()


def run(
    *,
    port: int | None = None,
    host: str | None = None,
    reload: bool = False,
) -> None:
    """
    Start the render server with uvicorn.

    Args:
        port: Port to listen on (keyword-only). Defaults to the ``PORT``
            environment variable if set, otherwise the configured port (3000).
        host: Host address to bind (keyword-only). Defaults to the configured
            host ('127.0.0.1').
        reload: Enable auto-reload when code changes are detected (keyword-only).

    Example:
        >>> run()  # Runs on 127.0.0.1:3000
        >>> run(port=8000, host='0.0.0.0')

    """
    settings = get_settings()
    env_port = getenv("PORT")
    if env_port and not port:
        port = int(env_port)
    if port is None:
        port = settings.port

    if not host:
        host = settings.host

    import uvicorn  # noqa: PLC0415

    uvicorn.run("quiz_render.web:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    run()
