"""
User routes - profile bootstrap after sign-up
"""
import logging

from flask import Blueprint, jsonify, request

from keyhub.extensions import get_db, require_firebase_auth
from keyhub.models.users import create_user_data
from keyhub.utils.validation import RegisterUserRequest, validate_request

logger = logging.getLogger(__name__)

users_bp = Blueprint('users', __name__, url_prefix='/api/users')


@users_bp.post("/register")
@require_firebase_auth
def register():
    """
    Create users/{uid} for a freshly signed-up account.
    Body: { "displayName": "...", "phone"?: "..." }

    Every new account starts as pending/pending; role and status in the body
    are not accepted. Calling it again for an existing profile changes nothing.
    """
    data = validate_request(RegisterUserRequest, request.get_json(silent=True) or {})
    uid = request.firebase_user['uid']

    user_ref = get_db().collection('users').document(uid)
    existing = user_ref.get()
    if existing.exists:
        profile = existing.to_dict() or {}
        return jsonify({'created': False, 'role': profile.get('role'), 'status': profile.get('status')}), 200

    user_data = create_user_data(
        uid,
        request.firebase_user.get('email'),
        data['displayName'],
        phone=data.get('phone'),
    )
    user_ref.set(user_data)

    logger.info("User profile created", extra={'uid': uid})
    return jsonify({'created': True, 'role': user_data['role'], 'status': user_data['status']}), 201
