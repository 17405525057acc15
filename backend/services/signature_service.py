"""
PayMongo webhook signature verification and event parsing.

Two signature header forms are accepted:
    - bare hex digest: HMAC-SHA256(secret, raw_body)
    - PayMongo form "t=<ts>,te=<sig>,li=<sig>": HMAC-SHA256(secret, "<ts>." + raw_body),
      matched against the live (li) or test (te) signature

Verification always runs over the exact raw bytes, before any JSON parsing,
and compares digests with hmac.compare_digest.
"""
import hashlib
import hmac
import json
import logging
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from domain.constants import SIGNATURE_LIVE_KEY, SIGNATURE_TEST_KEY, SIGNATURE_TIMESTAMP_KEY
from domain.errors import InvalidSignatureError, MalformedPayloadError, WebhookConfigurationError
from models import WebhookEvent

logger = logging.getLogger(__name__)


# ════════════════════════════════════════════════════════════════════
# Signatures
# ════════════════════════════════════════════════════════════════════


def compute_signature(raw_body: bytes, secret: str, timestamp: Optional[str] = None) -> str:
    """HMAC-SHA256 hex digest of the body, prefixed with "<timestamp>." when given."""
    message = raw_body if timestamp is None else f"{timestamp}.".encode("utf-8") + raw_body
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def parse_signature_header(header: str) -> Optional[dict]:
    """
    Split a "t=...,te=...,li=..." header into its parts.

    Returns None for a bare digest (no "=" pairs).
    """
    if "=" not in header:
        return None
    parts = {}
    for item in header.split(","):
        key, sep, value = item.strip().partition("=")
        if sep:
            parts[key.strip()] = value.strip()
    return parts


def _header_bytes(value: str) -> bytes:
    # Header values may carry any latin-1 character; compare_digest only takes ASCII str
    return value.encode("utf-8", "surrogateescape")


def verify_signature(raw_body: bytes, signature: Optional[str], secret: str) -> None:
    """
    Raise InvalidSignatureError unless `signature` matches the body.
    """
    if not signature:
        logger.warning("Webhook received without signature header")
        raise InvalidSignatureError("Missing webhook signature")

    parts = parse_signature_header(signature)
    if parts is None:
        expected = compute_signature(raw_body, secret)
        if hmac.compare_digest(expected.encode(), _header_bytes(signature.strip())):
            return
        raise InvalidSignatureError()

    timestamp = parts.get(SIGNATURE_TIMESTAMP_KEY)
    candidates = [
        parts[key] for key in (SIGNATURE_LIVE_KEY, SIGNATURE_TEST_KEY) if parts.get(key)
    ]
    if not timestamp or not candidates:
        raise InvalidSignatureError("Incomplete webhook signature header")

    expected = compute_signature(raw_body, secret, timestamp=timestamp)
    # Evaluate every candidate so timing does not depend on which one matched
    matched = [hmac.compare_digest(expected.encode(), _header_bytes(candidate)) for candidate in candidates]
    if not any(matched):
        raise InvalidSignatureError()


# ════════════════════════════════════════════════════════════════════
# Event Parsing
# ════════════════════════════════════════════════════════════════════


def _unwrap_envelope(payload: dict) -> dict:
    """
    Normalize the provider envelope to the flat {type, data} form.

    PayMongo delivers {"data": {"id": "evt_...", "attributes": {"type", "data", "created_at"}}};
    the flat form is passed through unchanged.
    """
    if isinstance(payload.get("type"), str):
        return payload

    outer = payload.get("data")
    if isinstance(outer, dict):
        attributes = outer.get("attributes")
        if isinstance(attributes, dict) and isinstance(attributes.get("type"), str):
            return {
                "type": attributes["type"],
                "data": attributes.get("data") or {},
                "id": outer.get("id"),
                "created_at": attributes.get("created_at"),
            }

    raise MalformedPayloadError("Webhook payload has no event type")


def parse_event(raw_body: bytes) -> WebhookEvent:
    """Parse an already verified body into a WebhookEvent."""
    try:
        payload = json.loads(raw_body)
    except (UnicodeDecodeError, ValueError):
        raise MalformedPayloadError("Webhook body is not valid JSON")

    if not isinstance(payload, dict):
        raise MalformedPayloadError("Webhook body must be a JSON object")

    try:
        return WebhookEvent.model_validate(_unwrap_envelope(payload))
    except PydanticValidationError as e:
        raise MalformedPayloadError(f"Webhook payload failed validation ({e.error_count()} errors)")


def construct_event(raw_body: bytes, signature: Optional[str], secret: Optional[str]) -> WebhookEvent:
    """
    Verify a delivery and return its event.

    Fails closed: without a configured secret nothing is accepted.
    """
    if not secret:
        logger.error(
            "PAYMONGO_WEBHOOK_SECRET not configured — rejecting webhook. "
            "Set PAYMONGO_WEBHOOK_SECRET in .env to accept PayMongo webhooks."
        )
        raise WebhookConfigurationError()

    verify_signature(raw_body, signature, secret)
    return parse_event(raw_body)
