"""
Admin endpoints - role assignment and custom claim sync
"""
import logging

from firebase_admin import auth as fb_auth
from firebase_admin.exceptions import FirebaseError
from flask import Blueprint, jsonify, request

from keyhub.extensions import get_db, require_firebase_auth, require_permission
from keyhub.models.users import custom_claims_for_role, update_user_role_data
from keyhub.utils.exceptions import NotFoundError
from keyhub.utils.validation import SetRoleRequest, validate_request

logger = logging.getLogger(__name__)

admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


@admin_bp.post("/set-role")
@require_firebase_auth
@require_permission('manage_users')
def set_role():
    """
    Assign a role to a user.
    Body: { "uid": "<firebase_uid>", "role": "<role>" }

    Writes the role to users/{uid} and mirrors it into the user's custom
    claims so storage rules can read it from the ID token.
    """
    data = validate_request(SetRoleRequest, request.get_json(silent=True) or {})
    uid = data['uid']
    caller_uid = request.firebase_user['uid']

    user_ref = get_db().collection('users').document(uid)
    if not user_ref.get().exists:
        raise NotFoundError('User')

    user_ref.update(update_user_role_data(data['role'], approved_by=caller_uid))
    fb_auth.set_custom_user_claims(uid, custom_claims_for_role(data['role']))

    logger.info("User role updated", extra={'uid': uid, 'role': data['role'], 'by': caller_uid})
    return jsonify({'success': True, 'uid': uid, 'role': data['role']}), 200


@admin_bp.post("/sync-claims")
@require_firebase_auth
@require_permission('manage_users')
def sync_claims():
    """
    Re-apply custom claims for every user document.
    Returns: { "synced": N, "failed": N, "results": [ { "uid", "role", "success", "error"? } ] }
    """
    results = []
    for user_doc in get_db().collection('users').stream():
        uid = user_doc.id
        role = (user_doc.to_dict() or {}).get('role') or 'pending'
        try:
            fb_auth.set_custom_user_claims(uid, custom_claims_for_role(role))
            results.append({'uid': uid, 'role': role, 'success': True})
        except (FirebaseError, ValueError) as e:
            logger.warning("Failed to sync claims", extra={'uid': uid, 'error': str(e)})
            results.append({'uid': uid, 'role': role, 'success': False, 'error': str(e)})

    synced = sum(1 for r in results if r['success'])
    failed = len(results) - synced
    logger.info("Custom claims synced", extra={'synced': synced, 'failed': failed})
    return jsonify({'success': True, 'synced': synced, 'failed': failed, 'results': results}), 200
