"""Webhook security utilities.

Provides HMAC signature generation and verification for scrape callbacks
so receivers can prove a callback came from the scrape service, is recent,
and has not been tampered with.

The signature is computed over the raw request body exactly as received.
Never parse and re-serialize the body before verifying it: a different key
order or whitespace produces a different signature.
"""

import hashlib
import hmac
import math
import re
import time
from collections.abc import Mapping
from dataclasses import dataclass

import structlog

from scrap_ai.config import DEFAULT_MAX_AGE_MS
from scrap_ai.errors import MissingParameterError

logger = structlog.get_logger(__name__)

# Header names set by the scrape service on every callback
SIGNATURE_HEADER = "x-webhook-signature"
TIMESTAMP_HEADER = "x-webhook-timestamp"

_NUMBER_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)

Secret = str | bytes


@dataclass(frozen=True)
class WebhookVerificationOptions:
    """Inputs for verifying a single webhook callback.

    Attributes:
        body: The raw request body, exactly as received.
        signature: Value of the x-webhook-signature header.
        timestamp: Value of the x-webhook-timestamp header (epoch ms).
        max_age_ms: Maximum accepted age of the callback. Defaults to
            five minutes (300000 ms).
    """

    body: str
    signature: str
    timestamp: str
    max_age_ms: int = DEFAULT_MAX_AGE_MS


def _key_bytes(secret: Secret) -> bytes:
    return secret.encode("utf-8") if isinstance(secret, str) else bytes(secret)


def _current_time_ms() -> int:
    return int(time.time() * 1000)


def generate_signature(body: str, secret: Secret, timestamp: str) -> str:
    """Generate HMAC-SHA256 signature for a webhook body.

    The signature is computed as:
    HMAC-SHA256(secret, timestamp + "." + body)

    Args:
        body: Raw webhook body.
        secret: Shared secret (the API key).
        timestamp: Timestamp string (epoch milliseconds) sent alongside.

    Returns:
        Lowercase hex digest (64 characters).
    """
    signed_payload = f"{timestamp}.{body}"

    return hmac.new(
        _key_bytes(secret),
        signed_payload.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def create_signature_headers(
    body: str,
    secret: Secret,
    *,
    timestamp: str | int | None = None,
) -> dict[str, str]:
    """Create HTTP headers with signature for a webhook body.

    Args:
        body: Raw body that will be sent.
        secret: Shared secret.
        timestamp: Optional epoch-ms timestamp (defaults to now).

    Returns:
        Dictionary of headers to include in the callback request.
    """
    timestamp_str = str(_current_time_ms() if timestamp is None else timestamp)
    signature = generate_signature(body, secret, timestamp_str)

    logger.debug(
        "webhook_signature_generated",
        timestamp=timestamp_str,
        body_length=len(body),
    )

    return {
        SIGNATURE_HEADER: signature,
        TIMESTAMP_HEADER: timestamp_str,
    }


def timing_safe_equal(left: str | bytes, right: str | bytes) -> bool:
    """Compare two values in time independent of where they differ.

    Every byte is visited regardless of earlier mismatches. Inputs of
    different byte length compare unequal.
    """
    a = left.encode("utf-8") if isinstance(left, str) else bytes(left)
    b = right.encode("utf-8") if isinstance(right, str) else bytes(right)

    if len(a) != len(b):
        return False

    result = 0
    for x, y in zip(a, b):
        result |= x ^ y
    return result == 0


def _parse_timestamp_ms(timestamp: str) -> float | None:
    """Parse a decimal epoch-ms string, returning None if it is not a number."""
    candidate = timestamp.strip()
    if not _NUMBER_RE.fullmatch(candidate):
        return None
    value = float(candidate)
    if not math.isfinite(value):
        return None
    return value


def verify_webhook(
    options: WebhookVerificationOptions,
    secret: Secret,
    *,
    now_ms: int | None = None,
) -> bool:
    """Verify that a webhook callback is authentic and recent.

    Malformed timestamps, stale timestamps, and signature mismatches all
    yield ``False``; the caller cannot tell them apart.

    Args:
        options: Body, signature, timestamp and max age of the callback.
        secret: Shared secret (the API key).
        now_ms: Current time in epoch milliseconds (defaults to the clock).

    Returns:
        True if the webhook is valid, False otherwise.

    Raises:
        MissingParameterError: If body, signature, timestamp or secret
            is empty.
    """
    missing = [
        name
        for name, value in (
            ("body", options.body),
            ("signature", options.signature),
            ("timestamp", options.timestamp),
            ("secret", secret),
        )
        if not value
    ]
    if missing:
        raise MissingParameterError(
            missing,
            message="Missing required webhook verification parameters: "
            + ", ".join(missing),
        )

    timestamp_ms = _parse_timestamp_ms(options.timestamp)
    if timestamp_ms is None:
        logger.warning("webhook_timestamp_invalid")
        return False

    current = _current_time_ms() if now_ms is None else now_ms
    age_ms = abs(current - timestamp_ms)

    if age_ms > options.max_age_ms:
        logger.warning(
            "webhook_signature_expired",
            timestamp=options.timestamp,
            age_ms=age_ms,
            max_age_ms=options.max_age_ms,
        )
        return False

    expected_signature = generate_signature(options.body, secret, options.timestamp)

    try:
        is_valid = timing_safe_equal(options.signature, expected_signature)
    except Exception:  # noqa: BLE001
        is_valid = False

    if not is_valid:
        logger.warning("webhook_signature_invalid", timestamp=options.timestamp)
    else:
        logger.debug("webhook_signature_verified", timestamp=options.timestamp)

    return is_valid


def verify_signature(
    body: str,
    signature: str,
    timestamp: str,
    secret: Secret,
    *,
    max_age_ms: int = DEFAULT_MAX_AGE_MS,
    now_ms: int | None = None,
) -> bool:
    """Verify a webhook from its individual parts.

    Same contract as :func:`verify_webhook`.
    """
    return verify_webhook(
        WebhookVerificationOptions(
            body=body,
            signature=signature,
            timestamp=timestamp,
            max_age_ms=max_age_ms,
        ),
        secret,
        now_ms=now_ms,
    )


def verify_from_headers(
    body: str,
    headers: Mapping[str, str],
    secret: Secret,
    *,
    max_age_ms: int = DEFAULT_MAX_AGE_MS,
    now_ms: int | None = None,
) -> bool:
    """Verify webhook signature from request headers.

    Header names are matched case-insensitively.

    Args:
        body: Raw webhook body.
        headers: Request headers.
        secret: Shared secret.
        max_age_ms: Maximum accepted age of the callback.
        now_ms: Current time in epoch milliseconds (defaults to the clock).

    Returns:
        True if signature is valid.

    Raises:
        MissingParameterError: If a required header or the body is missing.
    """
    lowered = {key.lower(): value for key, value in headers.items()}

    return verify_signature(
        body,
        lowered.get(SIGNATURE_HEADER, ""),
        lowered.get(TIMESTAMP_HEADER, ""),
        secret,
        max_age_ms=max_age_ms,
        now_ms=now_ms,
    )
