"""Middleware for authentication and store context."""
from functools import wraps
from flask import session, g, current_app
from crediario.database import get_session
from crediario.exceptions import AuthenticationError, PermissionDeniedError
from crediario.models import AppUser, Store, StoreMember


def load_user_and_store():
    """
    Load current user and store into g (Flask's per-request global).

    Called before each request to establish user and store context.
    Sets g.user, g.user_id, g.store_id and g.user_role if authenticated.
    """
    g.user = None
    g.user_id = None
    g.store_id = None
    g.user_role = None

    user_id = session.get('user_id')
    if not user_id:
        return

    db_session = get_session()
    user = db_session.query(AppUser).filter_by(id=user_id, active=True).first()
    if not user:
        session.clear()
        return

    g.user = user
    g.user_id = user.id

    store_id = session.get('store_id')
    if not store_id:
        return

    # Verify user still has access to this store
    member = db_session.query(StoreMember).join(Store).filter(
        StoreMember.user_id == user.id,
        StoreMember.store_id == store_id,
        StoreMember.active.is_(True),
        Store.active.is_(True)
    ).first()

    if member:
        g.store_id = member.store_id
        g.user_role = member.role
    else:
        current_app.logger.warning(f"User {user.id} lost access to store {store_id}; clearing it from session")
        session.pop('store_id', None)


def require_login(f):
    """
    Decorator: Require user to be logged in.

    Raises AuthenticationError (401) when there is no valid session.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if g.get('user') is None:
            raise AuthenticationError()
        return f(*args, **kwargs)
    return decorated_function


def require_store(f):
    """
    Decorator: Require a store to be selected.

    Must be used AFTER require_login.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if g.get('store_id') is None:
            raise PermissionDeniedError('Select a store first')
        return f(*args, **kwargs)
    return decorated_function
