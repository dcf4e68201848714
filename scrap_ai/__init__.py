"""scrap-ai: submit scrape jobs and verify the callbacks they produce."""

from scrap_ai.client import ScrapeClient
from scrap_ai.errors import (
    MissingParameterError,
    ParseError,
    SchemaValidationError,
    ScrapAIError,
    ScrapeRequestError,
    UnknownVariantError,
    WebhookPayloadError,
)
from scrap_ai.webhooks import (
    WebhookEvent,
    WebhookVerificationOptions,
    generate_signature,
    is_explore_event,
    is_links_event,
    is_scraped_event,
    parse_event,
    verify_webhook,
)

__version__ = "0.1.0"

__all__ = [
    "ScrapeClient",
    # Errors
    "MissingParameterError",
    "ParseError",
    "SchemaValidationError",
    "ScrapAIError",
    "ScrapeRequestError",
    "UnknownVariantError",
    "WebhookPayloadError",
    # Webhooks
    "WebhookEvent",
    "WebhookVerificationOptions",
    "generate_signature",
    "is_explore_event",
    "is_links_event",
    "is_scraped_event",
    "parse_event",
    "verify_webhook",
]
