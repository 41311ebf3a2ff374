"""
Best-effort delivery of finished renders to a Telegram chat.

Delivery never raises and never changes whether a job counts as completed:
every outcome is folded into a :class:`DeliveryResult` and stored on the
completed job record.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from quiz_render.core.engine import extension_for, media_type_for
from quiz_render.core.errors import DeliveryError

logger = logging.getLogger(__name__)

TELEGRAM_API_BASE = "https://api.telegram.org"
DISABLED_ERROR = "Telegram delivery disabled: TELEGRAM_BOT_TOKEN is not configured"
MISSING_DESTINATION_ERROR = "missing destination"
EMPTY_ARTIFACT_ERROR = "empty artifact"

# Bot API method and multipart field per codec. h264 output only comes
# from a pluggable MP4 engine, never from the built-in one.
UPLOAD_METHODS: dict[str, tuple[str, str]] = {
    "gif": ("sendAnimation", "animation"),
    "h264": ("sendVideo", "video"),
}
FALLBACK_METHOD = ("sendDocument", "document")


@dataclass(frozen=True)
class DeliveryResult:
    sent: bool
    error: str | None = None


class TelegramNotifier:
    """Uploads artifacts through the Telegram Bot API."""

    def __init__(
        self,
        token: str | None,
        *,
        codec: str = "gif",
        api_base: str = TELEGRAM_API_BASE,
        timeout: float = 60.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._token = token or None
        self._codec = codec
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        if self._token is None:
            logger.warning(
                "Missing TELEGRAM_BOT_TOKEN. Automatic delivery of renders is disabled.",
            )

    @property
    def enabled(self) -> bool:
        return self._token is not None

    def deliver(
        self,
        artifact: bytes,
        chat_id: str | int | None,
        job_id: str,
    ) -> DeliveryResult:
        """Upload ``artifact`` to ``chat_id``. Always returns, never raises."""
        if not self.enabled:
            return DeliveryResult(sent=False, error=DISABLED_ERROR)
        if chat_id is None or chat_id == "":
            logger.warning("Skipping delivery for job %s: no destination", job_id)
            return DeliveryResult(sent=False, error=MISSING_DESTINATION_ERROR)
        if not artifact:
            return DeliveryResult(sent=False, error=EMPTY_ARTIFACT_ERROR)

        logger.info("Sending render of job %s to chat %s", job_id, chat_id)
        try:
            self._upload(artifact, chat_id, job_id)
        except DeliveryError as exc:
            logger.error("Delivery of job %s to chat %s failed: %s", job_id, chat_id, exc)
            return DeliveryResult(sent=False, error=str(exc))
        logger.info("Delivered job %s to chat %s", job_id, chat_id)
        return DeliveryResult(sent=True)

    def _upload(self, artifact: bytes, chat_id: str | int, job_id: str) -> None:
        method, field = UPLOAD_METHODS.get(self._codec, FALLBACK_METHOD)
        url = f"{self._api_base}/bot{self._token}/{method}"
        filename = f"{job_id}{extension_for(self._codec)}"
        data = {
            "chat_id": str(chat_id),
            "caption": f"Your quiz video ({job_id}) is ready!",
        }
        files = {field: (filename, artifact, media_type_for(self._codec))}
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.post(url, data=data, files=files)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise DeliveryError(str(exc) or type(exc).__name__) from exc
        try:
            body = response.json()
        except ValueError as exc:
            msg = f"HTTP {response.status_code}: response was not JSON"
            raise DeliveryError(msg) from exc

        if response.is_success and isinstance(body, dict) and body.get("ok"):
            return
        description = body.get("description") if isinstance(body, dict) else None
        raise DeliveryError(description or f"HTTP {response.status_code}")


__all__ = ["DeliveryResult", "TelegramNotifier"]
