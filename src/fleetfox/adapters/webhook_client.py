"""Workflow webhook client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from fleetfox.domain.outcomes import TransportErrorKind, WebhookTransportError


@dataclass(frozen=True)
class WebhookResponse:
    """Raw response of a webhook call."""

    status_code: int
    content_type: str
    text: str


class WebhookClient(Protocol):
    """Interface for posting batches to the workflow webhook."""

    async def post_batch(
        self, url: str, payload: dict[str, object], timeout: float
    ) -> WebhookResponse:
        """POST the batch once and return the raw response."""


@dataclass
class HttpxWebhookClient(WebhookClient):
    """Webhook client using httpx."""

    http_client: httpx.AsyncClient

    @classmethod
    def create(cls) -> "HttpxWebhookClient":
        """Create a webhook client with a managed httpx session."""
        return cls(http_client=httpx.AsyncClient())

    async def post_batch(
        self, url: str, payload: dict[str, object], timeout: float
    ) -> WebhookResponse:
        """POST the batch as JSON with a single attempt."""
        try:
            response = await self.http_client.post(url, json=payload, timeout=timeout)
        except httpx.TimeoutException as exc:
            raise WebhookTransportError(
                TransportErrorKind.TIMEOUT,
                "Request timed out. The webhook took too long to respond.",
            ) from exc
        except httpx.TransportError as exc:
            raise WebhookTransportError(
                _classify_transport_error(exc), str(exc) or type(exc).__name__
            ) from exc
        return WebhookResponse(
            status_code=response.status_code,
            content_type=response.headers.get("content-type", ""),
            text=response.text,
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _classify_transport_error(exc: Exception) -> TransportErrorKind:
    if "cors" in str(exc).lower():
        return TransportErrorKind.CORS
    return TransportErrorKind.NETWORK_UNREACHABLE
