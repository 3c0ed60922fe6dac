"""
Google Calendar OAuth client - consent URL, code exchange, token storage and revocation
"""
import logging
from datetime import timedelta
from urllib.parse import urlencode

import requests

from keyhub.config import (
    GOOGLE_AUTH_URL,
    GOOGLE_CALENDAR_CLIENT_ID,
    GOOGLE_CALENDAR_CLIENT_SECRET,
    GOOGLE_CALENDAR_SCOPES,
    GOOGLE_REVOKE_URL,
    GOOGLE_TOKEN_URL,
    get_calendar_redirect_uri,
)
from keyhub.extensions import get_db
from keyhub.utils.dates import utc_now
from keyhub.utils.exceptions import ExternalAPIError
from keyhub.utils.retry import retry_with_backoff

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 15


def is_configured() -> bool:
    return bool(GOOGLE_CALENDAR_CLIENT_ID and GOOGLE_CALENDAR_CLIENT_SECRET)


def build_auth_url(state: str, login_hint: str = None) -> str:
    """Consent URL; offline access with a forced prompt so Google issues a refresh token."""
    params = {
        "client_id": GOOGLE_CALENDAR_CLIENT_ID,
        "redirect_uri": get_calendar_redirect_uri(),
        "response_type": "code",
        "scope": " ".join(GOOGLE_CALENDAR_SCOPES),
        "access_type": "offline",
        "include_granted_scopes": "true",
        "prompt": "consent",
        "state": state,
    }
    if login_hint:
        params["login_hint"] = login_hint
    return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"


@retry_with_backoff(max_retries=2, initial_delay=0.5)
def _post_token_request(payload: dict) -> dict:
    response = requests.post(GOOGLE_TOKEN_URL, data=payload, timeout=REQUEST_TIMEOUT)
    response.raise_for_status()
    return response.json()


def exchange_code(code: str) -> dict:
    """Trade an authorization code for tokens. Raises ExternalAPIError on failure."""
    try:
        return _post_token_request({
            "code": code,
            "client_id": GOOGLE_CALENDAR_CLIENT_ID,
            "client_secret": GOOGLE_CALENDAR_CLIENT_SECRET,
            "redirect_uri": get_calendar_redirect_uri(),
            "grant_type": "authorization_code",
        })
    except (requests.exceptions.RequestException, ValueError) as e:
        raise ExternalAPIError("Google", details={'error': type(e).__name__}) from e


def _integration_ref(uid: str):
    return (
        get_db()
        .collection('users')
        .document(uid)
        .collection('integrations')
        .document('googleCalendar')
    )


def save_calendar_tokens(uid: str, tokens: dict) -> None:
    now = utc_now()
    expires_in = tokens.get('expires_in')
    _integration_ref(uid).set({
        'userId': uid,
        'accessToken': tokens['access_token'],
        'refreshToken': tokens['refresh_token'],
        'expiresAt': now + timedelta(seconds=int(expires_in)) if expires_in else None,
        'scope': tokens.get('scope'),
        'calendarId': 'primary',
        'enabled': True,
        'lastSyncAt': None,
        'lastSyncStatus': 'pending',
        'lastSyncError': None,
        'createdAt': now,
        'updatedAt': now,
    })


def disconnect_calendar(uid: str) -> bool:
    """
    Revoke the stored token with Google and delete the integration.

    Returns False when there was nothing to disconnect. A failed revocation
    is logged and does not stop the local delete.
    """
    ref = _integration_ref(uid)
    doc = ref.get()
    if not doc.exists:
        return False

    data = doc.to_dict() or {}
    token = data.get('refreshToken') or data.get('accessToken')
    if token:
        try:
            response = requests.post(GOOGLE_REVOKE_URL, params={'token': token}, timeout=REQUEST_TIMEOUT)
            if response.status_code != 200:
                logger.warning("Google token revocation refused", extra={'uid': uid, 'status': response.status_code})
        except requests.exceptions.RequestException as e:
            logger.warning("Google token revocation failed", extra={'uid': uid, 'error': str(e)})

    ref.delete()
    return True
