"""Webhook verification and event parsing for scrape callbacks.

This module provides:
- HMAC signature generation and verification
- Event models for the links / scraped / explore callbacks
- parse_event: raw body to typed event
"""

from scrap_ai.webhooks.events import (
    EVENT_VARIANTS,
    EventPayload,
    ExploreData,
    ExploreEvent,
    ExploreWebhookEvent,
    LinksData,
    LinksEvent,
    LinksWebhookEvent,
    ScrapedData,
    ScrapedEvent,
    ScrapedWebhookEvent,
    WebhookEvent,
    is_explore_event,
    is_links_event,
    is_scraped_event,
    parse_event,
)
from scrap_ai.webhooks.security import (
    SIGNATURE_HEADER,
    TIMESTAMP_HEADER,
    WebhookVerificationOptions,
    create_signature_headers,
    generate_signature,
    timing_safe_equal,
    verify_from_headers,
    verify_signature,
    verify_webhook,
)

__all__ = [
    # Events
    "EVENT_VARIANTS",
    "EventPayload",
    "ExploreData",
    "ExploreEvent",
    "ExploreWebhookEvent",
    "LinksData",
    "LinksEvent",
    "LinksWebhookEvent",
    "ScrapedData",
    "ScrapedEvent",
    "ScrapedWebhookEvent",
    "WebhookEvent",
    "is_explore_event",
    "is_links_event",
    "is_scraped_event",
    "parse_event",
    # Security
    "SIGNATURE_HEADER",
    "TIMESTAMP_HEADER",
    "WebhookVerificationOptions",
    "create_signature_headers",
    "generate_signature",
    "timing_safe_equal",
    "verify_from_headers",
    "verify_signature",
    "verify_webhook",
]
