"""Tests for the scrape service client."""

import json

import httpx
import pytest

from scrap_ai import client as client_module
from scrap_ai.client import ScrapeClient
from scrap_ai.errors import MissingParameterError, ParseError, ScrapeRequestError
from scrap_ai.webhooks.events import is_links_event
from scrap_ai.webhooks.security import (
    SIGNATURE_HEADER,
    TIMESTAMP_HEADER,
    WebhookVerificationOptions,
    create_signature_headers,
)

API_URL = "https://scrape.example.com/prod"

# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def captured():
    """Requests seen by the mock transport."""
    return []


def make_client(captured, response=None, api_key="test_key"):
    """Build a client whose transport records requests."""

    def handle(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        if response is not None:
            return response
        return httpx.Response(202, json={"status": "queued"})

    return ScrapeClient(
        api_key,
        base_url=API_URL,
        transport=httpx.MockTransport(handle),
    )


# ============================================================================
# Initialization Tests
# ============================================================================


class TestScrapeClientInit:
    """Tests for client initialization."""

    def test_init_with_api_key(self):
        client = ScrapeClient("my_key", base_url=API_URL, timeout=5.0)

        assert client.api_key == "my_key"
        assert client.base_url == API_URL
        assert client.timeout == 5.0
        assert client.is_configured is True

    def test_not_configured_without_key(self, monkeypatch):
        monkeypatch.setattr(client_module.settings, "SCRAP_API_KEY", None)

        assert ScrapeClient().is_configured is False


# ============================================================================
# scrape Tests
# ============================================================================


class TestScrape:
    """Tests for job submission."""

    @pytest.mark.asyncio
    async def test_posts_job(self, captured):
        """Test the request body and headers."""
        client = make_client(captured)

        result = await client.scrape(
            "https://example.com",
            "What is this website about?",
            "https://app.example.com/api/scrape-callback",
            job_id="test_id",
        )
        await client.close()

        assert result == {"status": "queued"}
        assert len(captured) == 1
        request = captured[0]
        assert request.method == "POST"
        assert str(request.url) == API_URL
        assert request.headers["x-api-key"] == "test_key"
        assert request.headers["content-type"] == "application/json"
        assert json.loads(request.content) == {
            "url": "https://example.com",
            "prompt": "What is this website about?",
            "callbackUrl": "https://app.example.com/api/scrape-callback",
            "id": "test_id",
        }

    @pytest.mark.asyncio
    async def test_job_id_optional(self, captured):
        async with make_client(captured) as client:
            await client.scrape("https://example.com", "prompt", "https://cb")

        assert "id" not in json.loads(captured[0].content)

    @pytest.mark.asyncio
    async def test_missing_api_key(self, captured, monkeypatch):
        """Test submitting without an API key is a caller error."""
        monkeypatch.setattr(client_module.settings, "SCRAP_API_KEY", None)
        client = make_client(captured, api_key=None)

        with pytest.raises(MissingParameterError):
            await client.scrape("https://example.com", "prompt", "https://cb")

        assert captured == []

    @pytest.mark.asyncio
    async def test_error_status(self, captured):
        """Test a rejected request raises with the status."""
        client = make_client(captured, response=httpx.Response(403, text="Forbidden"))

        with pytest.raises(ScrapeRequestError) as exc_info:
            await client.scrape("https://example.com", "prompt", "https://cb")
        await client.close()

        assert exc_info.value.status == 403
        assert len(captured) == 1

    @pytest.mark.asyncio
    async def test_text_acknowledgement(self, captured):
        """Test a plain-text success body is returned as text."""
        client = make_client(captured, response=httpx.Response(200, text="ok"))

        result = await client.scrape("https://example.com", "prompt", "https://cb")
        await client.close()

        assert result == "ok"

    @pytest.mark.asyncio
    async def test_empty_acknowledgement(self, captured):
        client = make_client(captured, response=httpx.Response(204))

        result = await client.scrape("https://example.com", "prompt", "https://cb")
        await client.close()

        assert result is None

    @pytest.mark.asyncio
    async def test_transport_error(self):
        """Test connection failures are wrapped and not retried."""
        calls = []

        def handle(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        client = ScrapeClient("k", base_url=API_URL, transport=httpx.MockTransport(handle))

        with pytest.raises(ScrapeRequestError) as exc_info:
            await client.scrape("https://example.com", "prompt", "https://cb")
        await client.close()

        assert exc_info.value.status is None
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, captured):
        client = make_client(captured)
        await client.scrape("https://example.com", "prompt", "https://cb")

        await client.close()
        await client.close()


# ============================================================================
# Webhook helper Tests
# ============================================================================


class TestWebhookHelpers:
    """Tests for verify_webhook and parse_webhook_body."""

    def test_verify_webhook_uses_api_key(self):
        body = '{"webhook":"w","data":{"type":"links","data":{"links":[],"host":"h"}},"headers":{}}'
        headers = create_signature_headers(body, "test_key")
        client = ScrapeClient("test_key", base_url=API_URL)

        options = WebhookVerificationOptions(
            body=body,
            signature=headers[SIGNATURE_HEADER],
            timestamp=headers[TIMESTAMP_HEADER],
        )

        assert client.verify_webhook(options) is True
        assert is_links_event(client.parse_webhook_body(body))

    def test_verify_webhook_wrong_key(self):
        body = '{"a":1}'
        headers = create_signature_headers(body, "other_key")
        client = ScrapeClient("test_key", base_url=API_URL)

        options = WebhookVerificationOptions(
            body=body,
            signature=headers[SIGNATURE_HEADER],
            timestamp=headers[TIMESTAMP_HEADER],
        )

        assert client.verify_webhook(options) is False

    def test_verify_webhook_without_key_raises(self, monkeypatch):
        monkeypatch.setattr(client_module.settings, "SCRAP_API_KEY", None)
        client = ScrapeClient(base_url=API_URL)

        with pytest.raises(MissingParameterError):
            client.verify_webhook(
                WebhookVerificationOptions(body="{}", signature="a" * 64, timestamp="1")
            )

    def test_parse_webhook_body(self):
        client = ScrapeClient("test_key", base_url=API_URL)
        body = '{"webhook":"w","data":{"type":"scraped","data":{"url":"http://x","results":"r"}},"headers":{}}'

        event = client.parse_webhook_body(body)

        assert event.event_type == "scraped"
        assert event.data.data.url == "http://x"

    def test_parse_webhook_body_invalid_json(self):
        client = ScrapeClient("test_key", base_url=API_URL)

        with pytest.raises(ParseError):
            client.parse_webhook_body("not json")
