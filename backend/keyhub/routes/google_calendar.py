"""
Google Calendar OAuth routes
"""
import logging
from urllib.parse import urlencode

from flask import Blueprint, jsonify, redirect, request

from keyhub.config import APP_URL, OAUTH_STATE_MAX_AGE_SECONDS, OAUTH_STATE_SECRET
from keyhub.extensions import require_firebase_auth
from keyhub.services import google_calendar
from keyhub.services.signatures import decode_oauth_state, encode_oauth_state
from keyhub.utils.exceptions import ConfigurationError, ExternalAPIError
from keyhub.utils.validation import CalendarAuthRequest, validate_request

logger = logging.getLogger(__name__)

google_calendar_bp = Blueprint('google_calendar', __name__, url_prefix='/api/google-calendar')

DEFAULT_RETURN_PATH = '/portal/settings'


def _frontend_url(path: str, **params) -> str:
    url = f"{APP_URL}{path}"
    if params:
        sep = "&" if "?" in url else "?"
        url = f"{url}{sep}{urlencode(params)}"
    return url


@google_calendar_bp.get("/auth")
@require_firebase_auth
def calendar_auth():
    """
    Start the Google Calendar consent flow for the signed-in user.
    Query (optional): ?returnUrl=/portal/settings

    The user id travels in a signed, time-limited state token so the
    callback cannot be pointed at another account.
    """
    if not google_calendar.is_configured():
        logger.error("Google Calendar OAuth credentials not configured")
        raise ConfigurationError('Google Calendar integration', 'GOOGLE_CALENDAR_CLIENT_ID')
    if not OAUTH_STATE_SECRET:
        logger.error("OAUTH_STATE_SECRET not configured")
        raise ConfigurationError('Google Calendar integration', 'OAUTH_STATE_SECRET')

    data = validate_request(CalendarAuthRequest, request.args.to_dict())
    uid = request.firebase_user['uid']

    state = encode_oauth_state({'uid': uid, 'returnUrl': data['returnUrl']}, OAUTH_STATE_SECRET)
    auth_url = google_calendar.build_auth_url(state, login_hint=request.firebase_user.get('email'))

    logger.info("Google Calendar OAuth started", extra={'uid': uid})
    return jsonify({'authUrl': auth_url})


@google_calendar_bp.get("/callback")
def calendar_callback():
    """Handle the redirect back from Google; always answers with a redirect to the app."""
    error = request.args.get('error')
    code = request.args.get('code')
    state = request.args.get('state')

    if error:
        logger.info("Google OAuth declined", extra={'error': error})
        return redirect(_frontend_url(DEFAULT_RETURN_PATH, calendarError=error))

    if not code or not state:
        return redirect(_frontend_url(DEFAULT_RETURN_PATH, calendarError='missing_params'))

    state_data = decode_oauth_state(state, OAUTH_STATE_SECRET, max_age=OAUTH_STATE_MAX_AGE_SECONDS)
    if not state_data or not state_data.get('uid'):
        return redirect(_frontend_url(DEFAULT_RETURN_PATH, calendarError='invalid_state'))

    uid = state_data['uid']
    return_path = state_data.get('returnUrl') or DEFAULT_RETURN_PATH

    try:
        tokens = google_calendar.exchange_code(code)
    except ExternalAPIError as e:
        logger.error("Google Calendar token exchange failed", extra={'uid': uid, **e.details})
        return redirect(_frontend_url(return_path, calendarError='server_error'))

    if not tokens.get('access_token') or not tokens.get('refresh_token'):
        return redirect(_frontend_url(return_path, calendarError='missing_tokens'))

    google_calendar.save_calendar_tokens(uid, tokens)
    logger.info("Google Calendar connected", extra={'uid': uid})
    return redirect(_frontend_url(return_path, calendarConnected='true'))


@google_calendar_bp.post("/disconnect")
@require_firebase_auth
def calendar_disconnect():
    """Remove the signed-in user's Google Calendar integration."""
    uid = request.firebase_user['uid']
    removed = google_calendar.disconnect_calendar(uid)
    logger.info("Google Calendar disconnected", extra={'uid': uid, 'removed': removed})
    return jsonify({'success': True, 'removed': removed})
