"""
Permission checking utilities for escrow operations.
"""

from domain.models.user import ADMIN_LEVEL_ADMIN, User
from services import error_codes
from services.errors import AuthorizationError, NotFoundError


def has_admin_permission(user: User | None) -> bool:
    """
    Check if a user may perform admin operations.

    Suspended admins lose their permissions until reinstated.
    """
    if user is None or user.suspended:
        return False
    return user.admin_level >= ADMIN_LEVEL_ADMIN


def require_active_user(user_repo, user_id: str) -> User:
    """
    Load a user that is allowed to act.

    Raises:
        NotFoundError: Unknown user
        AuthorizationError: User is suspended
    """
    user = user_repo.get_by_id(user_id)
    if user is None:
        raise NotFoundError(f"User {user_id} not found", code=error_codes.USER_NOT_FOUND)
    if user.suspended:
        raise AuthorizationError(
            f"User {user_id} is suspended", code=error_codes.USER_SUSPENDED
        )
    return user


def require_admin(user_repo, user_id: str) -> User:
    """Load an active user with admin_level >= 1."""
    user = require_active_user(user_repo, user_id)
    if not has_admin_permission(user):
        raise AuthorizationError(
            "Admin access required", code=error_codes.ADMIN_REQUIRED
        )
    return user
