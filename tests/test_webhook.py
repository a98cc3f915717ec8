"""Tests for cache-refresh webhook notifications."""

import json

import httpx

from foliogen.config.models import WebhookSettings
from foliogen.notify import WebhookNotifier, build_url


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_build_url_variants() -> None:
    assert build_url(WebhookSettings(), "concert") == "http://localhost:3001/api/v1/webhooks/refresh/concert"
    assert (
        build_url(WebhookSettings(url="https://cache.example/hooks/{type}/go"), "events")
        == "https://cache.example/hooks/events/go"
    )
    assert (
        build_url(WebhookSettings(url="https://cache.example/hooks/"), "nature")
        == "https://cache.example/hooks/refresh/nature"
    )
    assert (
        build_url(WebhookSettings(url="https://cache.example/refresh/all"), "portrait")
        == "https://cache.example/refresh/all"
    )
    assert (
        build_url(WebhookSettings(base="https://api.example/webhooks/"), "featured")
        == "https://api.example/webhooks/refresh/featured"
    )


def test_notify_posts_payload_with_secret() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    notifier = WebhookNotifier(WebhookSettings(secret="s3cret"), client=_client(handler))

    assert notifier.notify("concert", {"written": True}) is True

    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == "http://localhost:3001/api/v1/webhooks/refresh/concert"
    assert request.headers["x-webhook-secret"] == "s3cret"
    body = json.loads(request.content)
    assert body["type"] == "concert"
    assert body["source"] == "manifest-generator"
    assert body["written"] is True
    assert body["timestamp"].endswith("Z")


def test_notify_omits_secret_header_when_unset() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(204)

    assert WebhookNotifier(WebhookSettings(), client=_client(handler)).notify("events") is True
    assert "x-webhook-secret" not in seen[0].headers


def test_notify_reports_error_status_as_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    assert WebhookNotifier(WebhookSettings(), client=_client(handler)).notify("nature") is False


def test_notify_swallows_transport_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    assert WebhookNotifier(WebhookSettings(), client=_client(handler)).notify("portrait") is False


def test_notify_swallows_malformed_url() -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover - must not run
        return httpx.Response(200)

    settings = WebhookSettings(url="http://exa mple.com:badport/hook")

    assert WebhookNotifier(settings, client=_client(handler)).notify("concert", {}) is False
    assert WebhookNotifier(settings).notify("concert", {}) is False


def test_disabled_notifier_never_sends() -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover - must not run
        raise AssertionError("request sent while disabled")

    notifier = WebhookNotifier(WebhookSettings(disabled=True), client=_client(handler))

    assert notifier.enabled is False
    assert notifier.notify("concert") is False
