"""
Inbound webhooks - Facebook lead ads and Vapi call events
"""
import hmac
import logging

from flask import Blueprint, jsonify, request

from keyhub.config import ALLOW_UNSIGNED_WEBHOOKS, FB_APP_SECRET, FB_WEBHOOK_VERIFY_TOKEN, VAPI_WEBHOOK_SECRET
from keyhub.services.signatures import verify_facebook_signature, verify_webhook_signature
from keyhub.services.webhooks import create_facebook_leads, process_vapi_event

logger = logging.getLogger(__name__)

webhooks_bp = Blueprint("webhooks", __name__, url_prefix="/api/webhooks")

VAPI_SIGNATURE_HEADER = 'X-Vapi-Signature'
FACEBOOK_SIGNATURE_HEADER = 'X-Hub-Signature-256'


@webhooks_bp.get("/facebook")
def facebook_verify():
    """Subscription handshake: echo hub.challenge when the verify token matches."""
    if not FB_WEBHOOK_VERIFY_TOKEN:
        logger.error("FB_WEBHOOK_VERIFY_TOKEN not configured")
        return "Server configuration error", 500

    mode = request.args.get('hub.mode')
    token = request.args.get('hub.verify_token') or ''
    challenge = request.args.get('hub.challenge') or ''

    if mode == 'subscribe' and hmac.compare_digest(token.encode('utf-8'), FB_WEBHOOK_VERIFY_TOKEN.encode('utf-8')):
        logger.info("Facebook webhook verified")
        return challenge, 200

    logger.warning("Facebook webhook verification failed")
    return "Forbidden", 403


@webhooks_bp.post("/facebook")
def facebook_leads():
    """Create leads from leadgen notifications."""
    raw_body = request.get_data()

    if FB_APP_SECRET:
        verified = verify_facebook_signature(raw_body, request.headers.get(FACEBOOK_SIGNATURE_HEADER), FB_APP_SECRET)
        if not verified:
            logger.warning("Facebook webhook signature verification failed")
    else:
        verified = verify_webhook_signature(
            raw_body, None, None, allow_unsigned=ALLOW_UNSIGNED_WEBHOOKS, source='facebook'
        )
    if not verified:
        return jsonify({'error': 'Invalid signature'}), 401

    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        return jsonify({'error': 'Invalid JSON body'}), 400

    created = create_facebook_leads(body)
    return jsonify({'status': 'ok', 'created': len(created)}), 200


@webhooks_bp.post("/vapi")
def vapi_events():
    """Update voice call records from Vapi status and end-of-call events."""
    raw_body = request.get_data()
    verified = verify_webhook_signature(
        raw_body,
        request.headers.get(VAPI_SIGNATURE_HEADER),
        VAPI_WEBHOOK_SECRET,
        allow_unsigned=ALLOW_UNSIGNED_WEBHOOKS,
        source='vapi',
    )
    if not verified:
        return jsonify({'error': 'Invalid signature'}), 401

    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify({'error': 'Invalid JSON body'}), 400

    applied = process_vapi_event(payload)
    return jsonify({'status': 'ok', 'applied': applied}), 200
