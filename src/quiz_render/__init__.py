"""Quiz Render: a render job queue that turns quizzes into videos and sends them to Telegram."""

from quiz_render.core.queue import RenderQueue
from quiz_render.web import app as web_app
from quiz_render.web import run as start_api


def main() -> None:
    """
    Main entry point for the quiz-render CLI.

    Parses command-line arguments and starts the web server.
    """
    import argparse  # noqa: PLC0415

    parser = argparse.ArgumentParser(
        "quiz-render",
        description="Quiz Render: render quiz videos and deliver them to Telegram",
    )

    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Host to run the web server on (default: HOST env var or 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to run the web server on (default: PORT env var or 3000)",
    )

    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for the web server",
    )

    args = parser.parse_args()

    return start_api(
        port=args.port,
        host=args.host,
        reload=args.reload,
    )


__all__ = ["RenderQueue", "main", "web_app"]
