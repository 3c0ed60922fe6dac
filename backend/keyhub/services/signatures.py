"""
HMAC signing for webhook payloads and OAuth state round-trips.

Verification helpers return a bool and never raise, whatever the caller
passes in: a wrong-length, non-hex or non-string signature simply fails.
"""
import base64
import binascii
import hashlib
import hmac
import json
import logging
import time
from typing import Optional, Union

logger = logging.getLogger(__name__)

Payload = Union[str, bytes]

FACEBOOK_SIGNATURE_PREFIX = "sha256="


def _to_bytes(value: Payload) -> bytes:
    if isinstance(value, bytes):
        return value
    if isinstance(value, str):
        return value.encode('utf-8')
    raise TypeError(f"expected str or bytes, got {type(value).__name__}")


def sign_payload(payload: Payload, secret: Payload) -> str:
    """HMAC-SHA256 of payload keyed with secret, as lowercase hex."""
    return hmac.new(_to_bytes(secret), _to_bytes(payload), hashlib.sha256).hexdigest()


def verify_signature(payload: Payload, signature, secret: Optional[Payload]) -> bool:
    """
    Constant-time check of signature against the expected HMAC of payload.

    False for an empty secret, a missing signature, or anything that is not
    a hex string of the right length.
    """
    if not secret or not signature or not isinstance(signature, (str, bytes)):
        return False
    try:
        expected = sign_payload(payload, secret).encode('ascii')
        supplied = _to_bytes(signature).strip().lower()
    except (TypeError, UnicodeError):
        return False
    return hmac.compare_digest(supplied, expected)


def verify_webhook_signature(
    raw_body: Payload,
    signature,
    secret: Optional[Payload],
    allow_unsigned: bool = False,
    source: str = "webhook",
) -> bool:
    """
    Verify an inbound webhook.

    With no secret configured the request is rejected, unless allow_unsigned
    is set, in which case it is accepted and a warning is logged.
    """
    if not secret:
        if allow_unsigned:
            logger.warning(
                "Webhook secret not configured - accepting unsigned request",
                extra={'source': source},
            )
            return True
        logger.error(
            "Webhook secret not configured - rejecting request",
            extra={'source': source},
        )
        return False

    verified = verify_signature(raw_body, signature, secret)
    if not verified:
        logger.warning("Webhook signature verification failed", extra={'source': source})
    return verified


def verify_facebook_signature(raw_body: Payload, header, app_secret: Optional[Payload]) -> bool:
    """Check an X-Hub-Signature-256 header ("sha256=<hex>")."""
    if not header or not isinstance(header, str) or not header.startswith(FACEBOOK_SIGNATURE_PREFIX):
        return False
    return verify_signature(raw_body, header[len(FACEBOOK_SIGNATURE_PREFIX):], app_secret)


# ========================================
# OAuth state tokens
# ========================================

def _b64encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b'=').decode('ascii')


def _b64decode(data: str) -> bytes:
    padding = '=' * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def encode_oauth_state(data: dict, secret: Payload, issued_at: Optional[float] = None) -> str:
    """
    Serialize data into a signed state token: ``<base64url json>.<hex hmac>``.

    An ``iat`` timestamp is embedded so the callback can reject stale tokens.
    """
    if not secret:
        raise ValueError("OAuth state secret is not configured")
    body = dict(data)
    body['iat'] = int(issued_at if issued_at is not None else time.time())
    encoded = _b64encode(json.dumps(body, separators=(',', ':'), sort_keys=True).encode('utf-8'))
    return f"{encoded}.{sign_payload(encoded, secret)}"


def decode_oauth_state(token, secret: Optional[Payload], max_age: Optional[int] = None, now: Optional[float] = None) -> Optional[dict]:
    """
    Return the data of a state token, or None if it is malformed, tampered with,
    or older than max_age seconds.
    """
    if not token or not isinstance(token, str) or token.count('.') != 1:
        return None
    encoded, signature = token.split('.')
    if not verify_signature(encoded, signature, secret):
        logger.warning("OAuth state signature mismatch")
        return None

    try:
        data = json.loads(_b64decode(encoded).decode('utf-8'))
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None
    if not isinstance(data, dict):
        return None

    if max_age is not None:
        issued_at = data.get('iat')
        current = now if now is not None else time.time()
        if not isinstance(issued_at, (int, float)) or current - issued_at > max_age:
            logger.info("OAuth state expired")
            return None

    return data
