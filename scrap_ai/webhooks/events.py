"""Webhook event types and payload models.

This module defines the callbacks the scrape service delivers once a job
makes progress. Every callback body is an envelope::

    {"webhook": "<name>", "data": {"type": "<variant>", "data": {...}}, "headers": {...}}

where ``data.type`` selects exactly one of the registered variants:

- links: links discovered on a host
- scraped: the scrape result for a single URL
- explore: progress counts while exploring a site
"""

import json
from typing import Annotated, Any, Literal

import structlog
from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError

from scrap_ai.errors import ParseError, SchemaValidationError, UnknownVariantError

logger = structlog.get_logger(__name__)

_EXACT = ConfigDict(extra="forbid", frozen=True)

Count = Annotated[StrictInt, Field(ge=0)]


# ============================================================================
# Variant payloads
# ============================================================================


class LinksData(BaseModel):
    """Links found on a host, in discovery order."""

    model_config = _EXACT

    links: list[StrictStr] = Field(..., description="Discovered link URLs")
    host: StrictStr = Field(..., description="Host the links were found on")


class ScrapedData(BaseModel):
    """Result of scraping one URL with the job prompt."""

    model_config = _EXACT

    url: StrictStr = Field(..., description="Scraped URL")
    results: StrictStr = Field(..., description="Scrape output for the prompt")


class ExploreData(BaseModel):
    """Exploration progress.

    Each field is either a count or the list of URLs themselves.
    """

    model_config = _EXACT

    explored: Count | list[StrictStr] = Field(
        ..., description="URLs processed so far"
    )
    found: Count | list[StrictStr] = Field(
        ..., description="URLs discovered so far"
    )


class LinksEvent(BaseModel):
    model_config = _EXACT

    type: Literal["links"]
    data: LinksData


class ScrapedEvent(BaseModel):
    model_config = _EXACT

    type: Literal["scraped"]
    data: ScrapedData


class ExploreEvent(BaseModel):
    model_config = _EXACT

    type: Literal["explore"]
    data: ExploreData


EventPayload = LinksEvent | ScrapedEvent | ExploreEvent


# ============================================================================
# Envelopes
# ============================================================================


class _WebhookEnvelope(BaseModel):
    """Fields shared by every callback envelope."""

    model_config = ConfigDict(frozen=True)

    webhook: StrictStr = Field(..., description="Webhook event name")
    headers: dict[StrictStr, StrictStr] = Field(..., description="Headers echoed by the service")

    @property
    def event_type(self) -> str:
        """Variant tag of the wrapped payload."""
        return self.data.type  # type: ignore[attr-defined]

    def to_json_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return self.model_dump(mode="json")


class LinksWebhookEvent(_WebhookEnvelope):
    data: LinksEvent


class ScrapedWebhookEvent(_WebhookEnvelope):
    data: ScrapedEvent


class ExploreWebhookEvent(_WebhookEnvelope):
    data: ExploreEvent


WebhookEvent = LinksWebhookEvent | ScrapedWebhookEvent | ExploreWebhookEvent

# One validator per tag
EVENT_VARIANTS: dict[str, type[_WebhookEnvelope]] = {
    "links": LinksWebhookEvent,
    "scraped": ScrapedWebhookEvent,
    "explore": ExploreWebhookEvent,
}


# ============================================================================
# Parsing
# ============================================================================


def _format_loc(loc: tuple[int | str, ...]) -> str:
    return ".".join(str(part) for part in loc) or "$"


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not a valid JSON value")


def _ensure_text(value: Any) -> None:
    """Raise UnicodeEncodeError if any decoded string holds a lone surrogate."""
    if isinstance(value, str):
        value.encode("utf-8")
    elif isinstance(value, dict):
        for key, item in value.items():
            key.encode("utf-8")
            _ensure_text(item)
    elif isinstance(value, list):
        for item in value:
            _ensure_text(item)


def parse_event(raw: str | bytes) -> WebhookEvent:
    """Parse and validate a raw webhook body.

    Args:
        raw: The webhook body as received.

    Returns:
        The envelope model for the variant named by ``data.type``.

    Raises:
        ParseError: If the body is not valid JSON or not valid Unicode text.
        UnknownVariantError: If ``data.type`` is not a registered variant.
        SchemaValidationError: If the body does not match the variant's
            shape. ``field`` names the first offending field.
    """
    try:
        document = json.loads(raw, parse_constant=_reject_constant)
        _ensure_text(document)
    except ValueError as e:
        raise ParseError(f"Webhook body is not valid JSON: {e}") from e

    if not isinstance(document, dict):
        raise SchemaValidationError("Webhook body must be a JSON object", field="$")

    payload = document.get("data")
    if not isinstance(payload, dict):
        raise SchemaValidationError("Webhook body has no 'data' object", field="data")

    variant = payload.get("type")
    if not isinstance(variant, str):
        raise SchemaValidationError(
            "Webhook event has no string 'type'", field="data.type"
        )

    model = EVENT_VARIANTS.get(variant)
    if model is None:
        logger.warning("webhook_event_unknown_variant", variant=variant)
        raise UnknownVariantError(variant)

    try:
        event = model.model_validate(document)
    except ValidationError as e:
        errors = [
            {"field": _format_loc(err["loc"]), "message": err["msg"], "type": err["type"]}
            for err in e.errors()
        ]
        first = errors[0]
        logger.warning(
            "webhook_event_invalid",
            variant=variant,
            field=first["field"],
            error_count=len(errors),
        )
        raise SchemaValidationError(
            f"Invalid {variant!r} event at {first['field']}: {first['message']}",
            field=first["field"],
            details={"errors": errors},
        ) from e

    logger.debug("webhook_event_parsed", variant=variant, webhook=event.webhook)
    return event  # type: ignore[return-value]


# ============================================================================
# Predicates
# ============================================================================


def _payload(event: WebhookEvent | EventPayload) -> EventPayload:
    if isinstance(event, _WebhookEnvelope):
        return event.data  # type: ignore[attr-defined]
    return event


def is_links_event(event: WebhookEvent | EventPayload) -> bool:
    """Check whether an event (envelope or payload) is a links event."""
    return isinstance(_payload(event), LinksEvent)


def is_scraped_event(event: WebhookEvent | EventPayload) -> bool:
    """Check whether an event (envelope or payload) is a scraped event."""
    return isinstance(_payload(event), ScrapedEvent)


def is_explore_event(event: WebhookEvent | EventPayload) -> bool:
    """Check whether an event (envelope or payload) is an explore event."""
    return isinstance(_payload(event), ExploreEvent)
