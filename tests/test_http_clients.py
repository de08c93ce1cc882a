"""Tests for HTTP-based adapters."""

import asyncio
import json

import httpx
import pytest

from fleetfox.adapters.config_source import HttpxConfigSource
from fleetfox.adapters.image_probe import HttpxImageProbe
from fleetfox.adapters.webhook_client import HttpxWebhookClient
from fleetfox.domain.outcomes import TransportErrorKind, WebhookTransportError
from fleetfox.services.runtime_config import ConfigLoadError
from tests.conftest import WEBHOOK_URL


def test_webhook_client_posts_json_once() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"status": "pass"})

    async_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = HttpxWebhookClient(http_client=async_client)

    response = asyncio.run(client.post_batch(WEBHOOK_URL, {"task_id": "T1"}, 30.0))

    assert len(requests) == 1
    assert requests[0].method == "POST"
    assert json.loads(requests[0].content) == {"task_id": "T1"}
    assert response.status_code == 200
    assert response.content_type == "application/json"
    assert json.loads(response.text) == {"status": "pass"}


def test_webhook_client_returns_error_statuses() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="Internal Server Error")

    async_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = HttpxWebhookClient(http_client=async_client)

    response = asyncio.run(client.post_batch(WEBHOOK_URL, {}, 30.0))

    assert response.status_code == 500
    assert response.text == "Internal Server Error"


@pytest.mark.parametrize(
    ("error", "kind"),
    [
        (httpx.ReadTimeout("timed out"), TransportErrorKind.TIMEOUT),
        (
            httpx.ConnectError("connection refused"),
            TransportErrorKind.NETWORK_UNREACHABLE,
        ),
        (httpx.ConnectError("blocked by CORS policy"), TransportErrorKind.CORS),
    ],
)
def test_webhook_client_classifies_transport_failures(
    error: httpx.TransportError, kind: TransportErrorKind
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise error

    async_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = HttpxWebhookClient(http_client=async_client)

    with pytest.raises(WebhookTransportError) as exc_info:
        asyncio.run(client.post_batch(WEBHOOK_URL, {}, 30.0))

    assert exc_info.value.kind is kind


def test_image_probe_checks_remote_urls() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("missing.jpg"):
            return httpx.Response(404)
        return httpx.Response(200)

    async_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    probe = HttpxImageProbe(http_client=async_client)

    assert asyncio.run(probe.is_reachable("https://cdn.example.com/ok.jpg"))
    assert not asyncio.run(probe.is_reachable("https://cdn.example.com/missing.jpg"))


def test_image_probe_falls_back_to_get() -> None:
    methods: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        methods.append(request.method)
        if request.method == "HEAD":
            return httpx.Response(405)
        return httpx.Response(200, content=b"jpeg")

    async_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    probe = HttpxImageProbe(http_client=async_client)

    assert asyncio.run(probe.is_reachable("https://cdn.example.com/ok.jpg"))
    assert methods == ["HEAD", "GET"]


def test_image_probe_treats_network_errors_as_unreachable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline")

    async_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    probe = HttpxImageProbe(http_client=async_client)

    assert not asyncio.run(probe.is_reachable("https://cdn.example.com/ok.jpg"))


def test_image_probe_validates_data_urls() -> None:
    probe = HttpxImageProbe(http_client=httpx.AsyncClient())

    assert asyncio.run(probe.is_reachable("data:image/jpeg;base64,ZmFrZQ=="))
    assert not asyncio.run(probe.is_reachable("data:image/jpeg;base64,@@@"))
    assert not asyncio.run(probe.is_reachable("data:image/jpeg;base64,"))
    assert not asyncio.run(probe.is_reachable("blob:https://example.com/1"))


def test_config_source_bypasses_caches() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"SUPABASE_URL": "https://example.supabase.co"})

    async_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    source = HttpxConfigSource(
        url="https://fleetfox.example.com/api/config", http_client=async_client
    )

    payload = asyncio.run(source.fetch())

    assert payload == {"SUPABASE_URL": "https://example.supabase.co"}
    assert seen[0].headers["Cache-Control"] == "no-cache"
    assert "t" in seen[0].url.params


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="boom"),
        httpx.Response(200, text="<html></html>"),
        httpx.Response(200, json=["not", "an", "object"]),
    ],
)
def test_config_source_rejects_bad_responses(response: httpx.Response) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return response

    async_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    source = HttpxConfigSource(
        url="https://fleetfox.example.com/api/config", http_client=async_client
    )

    with pytest.raises(ConfigLoadError):
        asyncio.run(source.fetch())
