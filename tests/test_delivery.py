"""Tests for the Telegram notifier, using httpx.MockTransport instead of the network."""

import logging

import httpx
import pytest

from quiz_render.core.delivery import (
    DISABLED_ERROR,
    MISSING_DESTINATION_ERROR,
    DeliveryResult,
    TelegramNotifier,
)


class Recorder:
    def __init__(self, response: httpx.Response | Exception):
        self.response = response
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


def _notifier(recorder, codec="gif"):
    return TelegramNotifier(
        "123:secret",
        codec=codec,
        api_base="https://telegram.test",
        transport=httpx.MockTransport(recorder),
    )


def test_disabled_without_token_warns_once(caplog):
    with caplog.at_level(logging.WARNING, logger="quiz_render.core.delivery"):
        notifier = TelegramNotifier(None)
        first = notifier.deliver(b"video", "42", "job")
        second = notifier.deliver(b"video", "42", "job")
    assert not notifier.enabled
    assert first == second == DeliveryResult(sent=False, error=DISABLED_ERROR)
    assert sum("TELEGRAM_BOT_TOKEN" in r.getMessage() for r in caplog.records) == 1


@pytest.mark.parametrize("chat_id", [None, ""])
def test_missing_destination_skips_network(chat_id):
    recorder = Recorder(httpx.Response(200, json={"ok": True}))
    result = _notifier(recorder).deliver(b"video", chat_id, "job")
    assert result == DeliveryResult(sent=False, error=MISSING_DESTINATION_ERROR)
    assert recorder.requests == []


def test_successful_upload():
    recorder = Recorder(httpx.Response(200, json={"ok": True, "result": {}}))
    result = _notifier(recorder).deliver(b"GIF89a-bytes", 42, "abc")

    assert result == DeliveryResult(sent=True)
    (request,) = recorder.requests
    assert request.method == "POST"
    assert request.url == "https://telegram.test/bot123:secret/sendAnimation"
    body = request.content
    assert b'name="chat_id"' in body
    assert b"42" in body
    assert b"Your quiz video (abc) is ready!" in body
    assert b'name="animation"; filename="abc.gif"' in body
    assert b"GIF89a-bytes" in body


def test_video_codec_uses_send_video():
    recorder = Recorder(httpx.Response(200, json={"ok": True}))
    _notifier(recorder, codec="h264").deliver(b"mp4", "1", "abc")
    assert recorder.requests[0].url.path.endswith("/sendVideo")
    assert b'name="video"; filename="abc.mp4"' in recorder.requests[0].content


def test_api_error_uses_description():
    recorder = Recorder(
        httpx.Response(400, json={"ok": False, "description": "Bad Request: chat not found"}),
    )
    result = _notifier(recorder).deliver(b"video", "42", "job")
    assert result == DeliveryResult(sent=False, error="Bad Request: chat not found")


def test_api_error_without_description_reports_status():
    recorder = Recorder(httpx.Response(500, json={"ok": False}))
    result = _notifier(recorder).deliver(b"video", "42", "job")
    assert result == DeliveryResult(sent=False, error="HTTP 500")


def test_non_json_response_is_an_error():
    recorder = Recorder(httpx.Response(502, text="<html>bad gateway</html>"))
    result = _notifier(recorder).deliver(b"video", "42", "job")
    assert result == DeliveryResult(sent=False, error="HTTP 502: response was not JSON")


def test_transport_error_is_captured():
    recorder = Recorder(httpx.ConnectError("connection refused"))
    result = _notifier(recorder).deliver(b"video", "42", "job")
    assert result == DeliveryResult(sent=False, error="connection refused")
