"""
User data models and schemas
"""
from typing import Optional, Dict, Any
from datetime import datetime, timezone

from keyhub.models.enums import UserRole, UserStatus
from keyhub.services.permissions import is_admin, is_internal, parse_role


def create_user_data(
    uid: str,
    email: str,
    display_name: str,
    phone: Optional[str] = None,
    role: str = UserRole.PENDING.value,
    status: str = UserStatus.PENDING.value,
    partner_id: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Create a new user data structure for Firestore

    New sign-ups start as pending/pending until an admin approves them.

    Args:
        uid: Firebase user ID
        email: User email address
        display_name: Display name
        phone: Optional phone number
        role: Initial role
        status: Initial account status
        partner_id: Partner company ID for partner users

    Returns:
        Dictionary with user data structure
    """
    user_data = {
        'uid': uid,
        'email': email,
        'displayName': display_name,
        'phone': phone,
        'role': role,
        'status': status,
        'createdAt': datetime.now(timezone.utc).isoformat(),
        'approvedAt': None,
        'approvedBy': None,
    }

    if partner_id:
        user_data['partnerId'] = partner_id

    return user_data


def update_user_role_data(role: str, approved_by: Optional[str] = None) -> Dict[str, Any]:
    """
    Create update data for a role change

    Assigning any role other than pending activates the account.
    """
    parsed = parse_role(role)
    if parsed is None:
        raise ValueError(f"Invalid role: {role}")

    update_data = {
        'role': parsed.value,
        'updatedAt': datetime.now(timezone.utc).isoformat(),
    }
    if parsed != UserRole.PENDING:
        update_data['status'] = UserStatus.ACTIVE.value
        update_data['approvedAt'] = update_data['updatedAt']
        update_data['approvedBy'] = approved_by
    return update_data


def custom_claims_for_role(role) -> Dict[str, Any]:
    """Custom auth claims mirrored onto the user's ID token for storage rules"""
    parsed = parse_role(role)
    return {
        'role': parsed.value if parsed else None,
        'isAdmin': is_admin(parsed),
        'isInternal': is_internal(parsed),
    }
