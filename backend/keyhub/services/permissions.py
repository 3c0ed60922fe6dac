"""
Role policy - what each user role is allowed to do.

Every predicate takes a role (a ``UserRole`` member, its raw string value, or
None) and returns a bool. Roles outside the closed ``UserRole`` set are
treated as having no permissions; nothing here raises.
"""
from typing import Iterable, Optional, Union

from keyhub.models.enums import UserRole, UserStatus

RoleLike = Union[UserRole, str, None]

ADMIN_ROLES = frozenset({UserRole.OWNER, UserRole.ADMIN})
INTERNAL_ROLES = frozenset({
    UserRole.OWNER,
    UserRole.ADMIN,
    UserRole.SALES_REP,
    UserRole.CONTRACTOR,
    UserRole.PM,
})
EXTERNAL_ROLES = frozenset({UserRole.SUBSCRIBER, UserRole.PARTNER})
CONTRACTOR_MANAGER_ROLES = frozenset({UserRole.OWNER, UserRole.ADMIN, UserRole.PM})
FIELD_ROLES = frozenset({UserRole.OWNER, UserRole.ADMIN, UserRole.PM, UserRole.CONTRACTOR})


def parse_role(value: RoleLike) -> Optional[UserRole]:
    """Map a stored role string to ``UserRole``; unknown or empty values give None."""
    if isinstance(value, UserRole):
        return value
    if not isinstance(value, str) or not value:
        return None
    try:
        return UserRole(value)
    except ValueError:
        return None


def parse_status(value) -> Optional[UserStatus]:
    """Map a stored status string to ``UserStatus``; unknown values give None."""
    if isinstance(value, UserStatus):
        return value
    if not isinstance(value, str) or not value:
        return None
    try:
        return UserStatus(value)
    except ValueError:
        return None


def _in(role: RoleLike, allowed: Iterable[UserRole]) -> bool:
    parsed = parse_role(role)
    return parsed is not None and parsed in allowed


def has_role(role: RoleLike, allowed_roles: Iterable[RoleLike]) -> bool:
    """True iff role is a known role and exactly matches one of allowed_roles."""
    parsed = parse_role(role)
    if parsed is None:
        return False
    allowed = {parse_role(r) for r in allowed_roles}
    return parsed in allowed


def is_admin(role: RoleLike) -> bool:
    return _in(role, ADMIN_ROLES)


def is_internal(role: RoleLike) -> bool:
    return _in(role, INTERNAL_ROLES)


def is_partner(role: RoleLike) -> bool:
    return parse_role(role) == UserRole.PARTNER


def can_access_dashboard(role: RoleLike) -> bool:
    # subscriber and partner users get their own portals
    return _in(role, INTERNAL_ROLES)


def can_manage_users(role: RoleLike) -> bool:
    return is_admin(role)


def can_view_all_jobs(role: RoleLike) -> bool:
    return is_admin(role)


def can_view_financials(role: RoleLike) -> bool:
    return is_admin(role)


def can_manage_campaigns(role: RoleLike) -> bool:
    return is_admin(role)


def can_view_all_contractors(role: RoleLike) -> bool:
    return _in(role, CONTRACTOR_MANAGER_ROLES)


def can_manage_partner_requests(role: RoleLike) -> bool:
    return is_admin(role)


def can_manage_inventory(role: RoleLike) -> bool:
    return is_admin(role)


def can_view_inventory(role: RoleLike) -> bool:
    return _in(role, FIELD_ROLES)


def can_count_inventory(role: RoleLike) -> bool:
    return _in(role, FIELD_ROLES)


def can_upload_receipts(role: RoleLike) -> bool:
    return _in(role, FIELD_ROLES)


def can_verify_receipts(role: RoleLike) -> bool:
    return is_admin(role)


def can_add_receipts_to_pl(role: RoleLike) -> bool:
    return is_admin(role)


def is_active(user: Optional[dict]) -> bool:
    """True iff the user document's status is active."""
    if not user:
        return False
    return parse_status(user.get('status')) == UserStatus.ACTIVE


def has_dashboard_access(user: Optional[dict]) -> bool:
    """
    User-level dashboard gate.

    An account that is not active has no dashboard access whatever its role.
    """
    return is_active(user) and can_access_dashboard(user.get('role'))


# Permission names used by the route decorators
ROLE_PERMISSIONS = {
    'access_dashboard': can_access_dashboard,
    'manage_users': can_manage_users,
    'view_all_jobs': can_view_all_jobs,
    'view_financials': can_view_financials,
    'manage_campaigns': can_manage_campaigns,
    'view_all_contractors': can_view_all_contractors,
    'manage_partner_requests': can_manage_partner_requests,
    'manage_inventory': can_manage_inventory,
    'view_inventory': can_view_inventory,
    'count_inventory': can_count_inventory,
    'upload_receipts': can_upload_receipts,
    'verify_receipts': can_verify_receipts,
    'add_receipts_to_pl': can_add_receipts_to_pl,
}


def check_permission(role: RoleLike, permission: str) -> bool:
    """Look up a named permission; unknown permission names are denied."""
    predicate = ROLE_PERMISSIONS.get(permission)
    if predicate is None:
        return False
    return predicate(role)
