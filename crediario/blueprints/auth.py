"""
Authentication blueprint for the multi-tenant API.
Handles login, logout, current context and store selection.
"""

from flask import Blueprint, jsonify, session, g
from flask_wtf.csrf import generate_csrf
from sqlalchemy import func
import logging

from crediario.database import db_session
from crediario.exceptions import AuthenticationError, PermissionDeniedError
from crediario.forms import validate_json
from crediario.forms.auth_forms import LoginForm, SelectStoreForm
from crediario.middleware import require_login
from crediario.models import AppUser, AuditAction, Store, StoreMember
from crediario.services.audit_service import log_action

logger = logging.getLogger(__name__)


auth_bp = Blueprint('auth', __name__, url_prefix='/auth')


def _active_memberships(user_id: int):
    """Active store memberships of a user, ordered by store name."""
    return db_session.query(StoreMember).join(Store).filter(
        StoreMember.user_id == user_id,
        StoreMember.active.is_(True),
        Store.active.is_(True)
    ).order_by(Store.name).all()


def _context_payload(user, memberships, store_id=None):
    current = next((m for m in memberships if m.store_id == store_id), None)
    return {
        'user': user.to_summary(),
        'store': current.store.to_dict() if current else None,
        'role': current.role if current else None,
        'stores': [
            {'id': m.store_id, 'name': m.store.name, 'role': m.role}
            for m in memberships
        ],
    }


@auth_bp.route('/csrf-token', methods=['GET'])
def csrf_token():
    """Token to send back in the X-CSRFToken header on mutating requests."""
    return jsonify({'csrfToken': generate_csrf()})


@auth_bp.route('/login', methods=['POST'])
def login():
    """Validate email + password and open a session."""
    form = validate_json(LoginForm)
    email = (form.email.data or '').strip()

    user = db_session.query(AppUser).filter(
        func.lower(AppUser.email) == email.lower()
    ).first()

    if not user or not user.active or not user.check_password(form.password.data):
        logger.info(f"Failed login attempt for {email}")
        raise AuthenticationError('Invalid email or password')

    memberships = _active_memberships(user.id)

    # Pick the requested store, or the only one the user belongs to
    store_id = None
    if form.storeId.data is not None:
        if not any(m.store_id == form.storeId.data for m in memberships):
            raise PermissionDeniedError('You do not have access to this store')
        store_id = form.storeId.data
    elif len(memberships) == 1:
        store_id = memberships[0].store_id

    session.clear()
    session['user_id'] = user.id
    if store_id:
        session['store_id'] = store_id
    session.permanent = True

    if store_id:
        log_action(db_session, AuditAction.USER_LOGIN, 'user', user.id, store_id=store_id, user_id=user.id)
        db_session.commit()

    logger.info(f"User {user.id} logged in (store={store_id})")
    return jsonify(_context_payload(user, memberships, store_id))


@auth_bp.route('/logout', methods=['POST'])
def logout():
    """Close the session."""
    if g.get('user') and g.get('store_id'):
        log_action(db_session, AuditAction.USER_LOGOUT, 'user', g.user.id)
        db_session.commit()
    session.clear()
    return '', 204


@auth_bp.route('/me', methods=['GET'])
@require_login
def me():
    """Current user, selected store and role."""
    return jsonify(_context_payload(g.user, _active_memberships(g.user.id), g.get('store_id')))


@auth_bp.route('/select-store', methods=['POST'])
@require_login
def select_store():
    """Switch the session to another store the user belongs to."""
    form = validate_json(SelectStoreForm)
    memberships = _active_memberships(g.user.id)

    if not any(m.store_id == form.storeId.data for m in memberships):
        raise PermissionDeniedError('You do not have access to this store')

    session['store_id'] = form.storeId.data
    return jsonify(_context_payload(g.user, memberships, form.storeId.data))
