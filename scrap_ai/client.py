"""Scrape service API client.

This module provides an async client that submits scrape jobs to the
scrape service and helpers for handling the callbacks it sends back.

Example:
    async with ScrapeClient(api_key) as client:
        await client.scrape(
            "https://example.com",
            "What is this website about?",
            "https://my.app/api/scrape-callback",
        )

    # Later, in the callback handler:
    if client.verify_webhook(WebhookVerificationOptions(body, signature, timestamp)):
        event = client.parse_webhook_body(body)
"""

from typing import Any

import httpx
import structlog

from scrap_ai.config import settings
from scrap_ai.errors import MissingParameterError, ScrapeRequestError
from scrap_ai.webhooks.events import WebhookEvent, parse_event
from scrap_ai.webhooks.security import WebhookVerificationOptions, verify_webhook

logger = structlog.get_logger(__name__)


class ScrapeClient:
    """Async client for the scrape service.

    The API key authenticates outbound requests and is also the secret the
    service signs callbacks with.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the scrape client.

        Args:
            api_key: Scrape service API key. If not provided, reads from
                the SCRAP_API_KEY environment variable.
            base_url: Job submission URL (defaults to SCRAP_API_URL).
            timeout: HTTP timeout in seconds (defaults to SCRAP_REQUEST_TIMEOUT).
            transport: Optional httpx transport, mainly for tests.
        """
        self.api_key = api_key or settings.SCRAP_API_KEY
        self.base_url = base_url or settings.SCRAP_API_URL
        self.timeout = timeout if timeout is not None else settings.SCRAP_REQUEST_TIMEOUT
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._logger = logger.bind(component="scrape_client")

    @property
    def is_configured(self) -> bool:
        """Check if API key is configured."""
        return bool(self.api_key)

    async def __aenter__(self) -> "ScrapeClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create httpx client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                headers={
                    "Content-Type": "application/json",
                    "x-api-key": self.api_key or "",
                },
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def scrape(
        self,
        url: str,
        prompt: str,
        callback_url: str,
        *,
        job_id: str | None = None,
    ) -> Any:
        """Submit a scrape job.

        Results are not returned here; the service POSTs them to
        ``callback_url`` as signed webhooks.

        Args:
            url: The URL of the website to scrape.
            prompt: The prompt to use for the scrape.
            callback_url: The URL to send the scrape results to.
            job_id: Optional caller-chosen job identifier.

        Returns:
            The service's acknowledgement: decoded JSON, or the raw text
            when the body is not JSON.

        Raises:
            MissingParameterError: If the API key is not configured.
            ScrapeRequestError: If the request fails or is rejected.
        """
        if not self.api_key:
            raise MissingParameterError(["api_key"], message="SCRAP_API_KEY not configured")

        body: dict[str, Any] = {"url": url, "prompt": prompt, "callbackUrl": callback_url}
        if job_id is not None:
            body["id"] = job_id

        client = await self._get_client()
        self._logger.debug("scrape_request", url=url, job_id=job_id)

        try:
            response = await client.post(self.base_url, json=body)
        except httpx.HTTPError as e:
            self._logger.error("scrape_request_failed", url=url, error=str(e))
            raise ScrapeRequestError(f"Scrape request failed: {e}") from e

        if not response.is_success:
            self._logger.error(
                "scrape_request_rejected",
                url=url,
                status=response.status_code,
            )
            raise ScrapeRequestError(
                f"Scrape API error {response.status_code}: {response.text}",
                status=response.status_code,
            )

        self._logger.info("scrape_request_accepted", url=url, job_id=job_id)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    def verify_webhook(self, options: WebhookVerificationOptions) -> bool:
        """Verify that a webhook request is authentic and recent.

        Args:
            options: Webhook verification options.

        Returns:
            True if the webhook is valid.

        Raises:
            MissingParameterError: If required parameters are missing.
        """
        return verify_webhook(options, self.api_key or "")

    def parse_webhook_body(self, body: str | bytes) -> WebhookEvent:
        """Parse and validate a webhook body.

        Raises:
            ParseError, UnknownVariantError, SchemaValidationError
        """
        return parse_event(body)
