"""Exception hierarchy for the scrape client and webhook handling.

Exception Hierarchy:
    ScrapAIError (base)
    ├── MissingParameterError - Required input absent (caller bug)
    ├── WebhookPayloadError - Callback body could not be decoded
    │   ├── ParseError - Body is not well-formed JSON
    │   ├── UnknownVariantError - Unrecognized event type
    │   └── SchemaValidationError - Known event type, invalid shape
    └── ScrapeRequestError - Outbound job submission failed

Authenticity failures (stale timestamp, bad signature) are deliberately
absent: webhook verification reports them as a plain ``False``.
"""

from typing import Any


class ScrapAIError(Exception):
    """Base exception for all scrap-ai errors.

    Attributes:
        message: Human-readable error message.
        details: Additional error details.
    """

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/API responses."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class MissingParameterError(ScrapAIError):
    """A required parameter was empty or absent.

    Raised synchronously to interrupt the caller. This signals a bug in
    the calling code, never an inauthentic webhook.

    Attributes:
        params: Names of the missing parameters.
    """

    def __init__(
        self,
        params: list[str],
        *,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message or f"Missing required parameters: {', '.join(params)}",
            details=details,
        )
        self.params = list(params)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        base = super().to_dict()
        base["params"] = self.params
        return base


class WebhookPayloadError(ScrapAIError):
    """Base class for errors decoding a webhook body."""


class ParseError(WebhookPayloadError):
    """The webhook body is not well-formed JSON."""


class UnknownVariantError(WebhookPayloadError):
    """The event ``type`` discriminator matches no registered variant.

    Attributes:
        variant: The unrecognized discriminator value.
    """

    def __init__(
        self,
        variant: str,
        *,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(f"Unknown webhook event type: {variant!r}", details=details)
        self.variant = variant

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        base = super().to_dict()
        base["variant"] = self.variant
        return base


class SchemaValidationError(WebhookPayloadError):
    """The event type is known but the payload does not match its shape.

    Attributes:
        field: Dotted path of the first missing or mismatched field.
    """

    def __init__(
        self,
        message: str,
        *,
        field: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=details)
        self.field = field

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        base = super().to_dict()
        base["field"] = self.field
        return base


class ScrapeRequestError(ScrapAIError):
    """Submitting a scrape job to the remote service failed.

    Attributes:
        status: HTTP status code, or None for transport failures.
    """

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=details)
        self.status = status

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        base = super().to_dict()
        base["status"] = self.status
        return base
