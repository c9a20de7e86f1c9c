"""
Permission decorators for role-based access control.
Extends the require_login and require_store decorators with role checks.
"""

from functools import wraps
from flask import g, current_app

from crediario.exceptions import AuthenticationError, PermissionDeniedError
from crediario.models import ELEVATED_ROLES


def require_role(*allowed_roles):
    """
    Decorator to restrict access to specific roles.

    Usage:
        @require_role('OWNER')
        @require_role('OWNER', 'MANAGER')

    Args:
        *allowed_roles: Variable number of role strings (OWNER, MANAGER, SELLER)

    Returns:
        Decorator function
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            # Must be logged in
            if not g.get('user'):
                raise AuthenticationError()

            # Must have store selected
            if not g.get('store_id'):
                raise PermissionDeniedError('Select a store first')

            user_role = g.get('user_role')
            if not user_role or user_role not in allowed_roles:
                current_app.logger.info(
                    f"User {g.user.id} with role {user_role} denied {f.__name__} in store {g.store_id}"
                )
                raise PermissionDeniedError()

            return f(*args, **kwargs)

        return decorated_function
    return decorator


def require_elevated_role(f):
    """Shortcut for OWNER or MANAGER."""
    return require_role(*ELEVATED_ROLES)(f)
