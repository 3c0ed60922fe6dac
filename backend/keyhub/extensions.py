"""
Flask extensions and initialization
"""
import functools
import logging
import os
import time

import firebase_admin
from firebase_admin import credentials, firestore, auth as fb_auth
from flask import Flask, request, jsonify
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from keyhub.config import CORS_ORIGINS, FIREBASE_PROJECT_ID, FIREBASE_STORAGE_BUCKET, FLASK_SECRET
from keyhub.services.permissions import check_permission, is_active, parse_role, parse_status
from keyhub.utils.exceptions import AuthenticationError, AuthorizationError

logger = logging.getLogger(__name__)

# Global Firestore client
db = None
limiter = None


def init_firebase(app=None):
    """Initialize Firebase and set up Firestore client."""
    global db
    if firebase_admin._apps:  # already initialized
        db = firestore.client()
        return

    cred = None
    cred_path = os.environ.get("GOOGLE_APPLICATION_CREDENTIALS")
    if cred_path and os.path.exists(cred_path):
        cred = credentials.Certificate(cred_path)
        logger.info("Using Firebase credentials file", extra={'path': cred_path})

    options = {
        'projectId': FIREBASE_PROJECT_ID,
        'storageBucket': FIREBASE_STORAGE_BUCKET,
    }
    try:
        if cred:
            firebase_admin.initialize_app(cred, options)
        else:
            # Cloud environments supply application default credentials
            logger.warning("No Firebase credentials file found, using application default credentials")
            firebase_admin.initialize_app(options=options)
        db = firestore.client()
        logger.info("Firestore client initialized", extra={'project': FIREBASE_PROJECT_ID})
    except Exception:
        logger.exception("Firebase initialization failed; Firebase-dependent routes will return 500")
        db = None


def get_db():
    """Returns the Firestore client instance."""
    global db
    if db is None:
        if firebase_admin._apps:
            db = firestore.client()
        else:
            raise RuntimeError("Firestore DB not initialized. Call init_firebase() first.")
    return db


def require_firebase_auth(fn):
    """
    Decorator to require Firebase authentication for an endpoint.
    Extracts and verifies the Firebase ID token from the Authorization header
    and stores the decoded token on request.firebase_user.
    Includes retry logic for transient network errors.
    """
    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        # CORS preflight
        if request.method == 'OPTIONS':
            return fn(*args, **kwargs)

        auth_header = request.headers.get('Authorization', '')
        if not auth_header.startswith('Bearer '):
            raise AuthenticationError("Missing Authorization header")

        id_token = auth_header.split(' ', 1)[1].strip()

        max_retries = 3
        retry_delay = 0.5  # seconds
        for attempt in range(max_retries):
            try:
                decoded = fb_auth.verify_id_token(id_token)
                break
            except (ValueError, fb_auth.InvalidIdTokenError, fb_auth.ExpiredIdTokenError,
                    fb_auth.RevokedIdTokenError, fb_auth.UserDisabledError) as token_error:
                logger.info("Token verification failed", extra={'reason': type(token_error).__name__})
                raise AuthenticationError("Invalid or expired token") from token_error
            except (ConnectionError, OSError, fb_auth.CertificateFetchError) as network_error:
                if attempt < max_retries - 1:
                    logger.warning(
                        "Network error during token verification, retrying",
                        extra={'attempt': attempt + 1, 'error': str(network_error)},
                    )
                    time.sleep(retry_delay * (attempt + 1))
                    continue
                logger.error("Token verification failed after retries", extra={'error': str(network_error)})
                return jsonify({
                    'error': 'Network error during authentication. Please try again.',
                    'retry': True
                }), 503

        request.firebase_user = decoded
        return fn(*args, **kwargs)
    return wrapper


def load_user_profile(uid):
    """Fetch users/{uid} from Firestore; None when the document does not exist."""
    user_doc = get_db().collection('users').document(uid).get()
    if not user_doc.exists:
        return None
    return user_doc.to_dict() or {}


def snapshot_to_dict(doc):
    """Firestore snapshot as a dict with its document id under 'id'."""
    data = doc.to_dict() or {}
    data['id'] = doc.id
    return data


def load_collection(name):
    """All documents of a top-level collection as dicts."""
    return [snapshot_to_dict(doc) for doc in get_db().collection(name).stream()]


def require_permission(permission):
    """
    Decorator to require a role permission for an endpoint.
    Must be used after @require_firebase_auth.

    Role and status are always read from the user document, never from the
    request or token claims. Accounts that are not active are refused.

    Example:
        @campaigns_bp.get("/summary")
        @require_firebase_auth
        @require_permission('manage_campaigns')
        def summary():
            ...
    """
    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            if request.method == 'OPTIONS':
                return fn(*args, **kwargs)

            firebase_user = getattr(request, 'firebase_user', None) or {}
            uid = firebase_user.get('uid')
            if not uid:
                raise AuthenticationError()

            try:
                profile = load_user_profile(uid)
            except RuntimeError as e:
                logger.error("Database unavailable while checking permissions", extra={'error': str(e)})
                return jsonify({'error': 'Database not available'}), 500

            role = parse_role((profile or {}).get('role'))
            status = parse_status((profile or {}).get('status'))

            if not is_active(profile) or not check_permission(role, permission):
                logger.info(
                    "Permission denied",
                    extra={'uid': uid, 'permission': permission,
                           'role': role.value if role else None,
                           'status': status.value if status else None},
                )
                raise AuthorizationError(details={'required_permission': permission})

            request.user_role = role
            request.user_profile = profile
            return fn(*args, **kwargs)
        return wrapper
    return decorator


def init_app_extensions(app: Flask, init_db: bool = True):
    """Initializes Flask extensions like CORS, Rate Limiting, and Firebase."""
    global limiter
    limiter = Limiter(
        app=app,
        key_func=get_remote_address,
        default_limits=["1000 per day", "200 per hour"],
        storage_uri="memory://",
        strategy="fixed-window",
        headers_enabled=True
    )
    app.limiter = limiter

    cors_config = {
        "origins": CORS_ORIGINS,
        "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
        "allow_headers": ["Content-Type", "Authorization", "X-Requested-With"],
        "supports_credentials": True,
        "max_age": 3600,
    }
    CORS(app, resources={r"/api/*": cors_config}, supports_credentials=True)
    app.secret_key = FLASK_SECRET

    if init_db:
        init_firebase(app)
