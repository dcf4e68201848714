"""Scrape callback receiver endpoints.

Provides a FastAPI router that accepts signed callbacks from the scrape
service, verifies them against the raw request body, and hands the parsed
event to an application handler.
"""

import inspect
from collections.abc import Awaitable, Callable

import structlog
from fastapi import APIRouter, FastAPI, HTTPException, Request

from scrap_ai.config import DEFAULT_MAX_AGE_MS, Settings
from scrap_ai.config import settings as default_settings
from scrap_ai.errors import MissingParameterError, WebhookPayloadError
from scrap_ai.observability import configure_logging
from scrap_ai.webhooks.events import WebhookEvent, parse_event
from scrap_ai.webhooks.security import (
    SIGNATURE_HEADER,
    TIMESTAMP_HEADER,
    Secret,
    verify_signature,
)

logger = structlog.get_logger(__name__)

DEFAULT_CALLBACK_PATH = "/api/scrape-callback"

# Type for callback event handlers
EventHandler = Callable[[WebhookEvent], Awaitable[None] | None]


def create_callback_router(
    secret: Secret,
    handler: EventHandler,
    *,
    path: str = DEFAULT_CALLBACK_PATH,
    max_age_ms: int = DEFAULT_MAX_AGE_MS,
) -> APIRouter:
    """Create a router with a single callback endpoint.

    Args:
        secret: Shared secret (the scrape API key).
        handler: Sync or async function called with each verified event.
        path: Route path for the callback endpoint.
        max_age_ms: Replay window for callback timestamps.

    Returns:
        Router to include in a FastAPI application.
    """
    router = APIRouter(tags=["Callbacks"])

    @router.post(path)
    async def receive_callback(request: Request) -> dict[str, str]:
        """Verify, parse and dispatch a scrape callback."""
        raw_body = await request.body()
        signature = request.headers.get(SIGNATURE_HEADER)
        timestamp = request.headers.get(TIMESTAMP_HEADER)

        if not signature or not timestamp:
            logger.warning(
                "callback_headers_missing",
                has_signature=bool(signature),
                has_timestamp=bool(timestamp),
            )
            raise HTTPException(
                status_code=400,
                detail=f"Missing {SIGNATURE_HEADER} or {TIMESTAMP_HEADER} header",
            )

        try:
            body = raw_body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise HTTPException(status_code=400, detail="Body is not valid UTF-8") from e

        try:
            is_valid = verify_signature(
                body, signature, timestamp, secret, max_age_ms=max_age_ms
            )
        except MissingParameterError as e:
            if "secret" in e.params:
                raise
            raise HTTPException(status_code=400, detail=e.message) from e

        if not is_valid:
            raise HTTPException(status_code=401, detail="Invalid webhook signature")

        try:
            event = parse_event(raw_body)
        except WebhookPayloadError as e:
            raise HTTPException(status_code=422, detail=e.to_dict()) from e

        logger.info(
            "callback_received",
            webhook=event.webhook,
            event_type=event.event_type,
        )

        result = handler(event)
        if inspect.isawaitable(result):
            await result

        return {"status": "ok"}

    return router


def create_app(
    handler: EventHandler,
    *,
    settings: Settings | None = None,
    path: str = DEFAULT_CALLBACK_PATH,
) -> FastAPI:
    """Create a FastAPI application that receives scrape callbacks.

    Args:
        handler: Function called with each verified event.
        settings: Settings providing the API key and replay window
            (defaults to the environment).
        path: Route path for the callback endpoint.

    Returns:
        Configured FastAPI application.

    Raises:
        MissingParameterError: If no API key is configured.
    """
    config = settings or default_settings
    if not config.SCRAP_API_KEY:
        raise MissingParameterError(["secret"], message="SCRAP_API_KEY not configured")

    configure_logging(config.LOG_LEVEL)

    app = FastAPI(title="Scrape Callback Receiver")
    app.include_router(
        create_callback_router(
            config.SCRAP_API_KEY,
            handler,
            path=path,
            max_age_ms=config.SCRAP_WEBHOOK_MAX_AGE_MS,
        )
    )
    return app
