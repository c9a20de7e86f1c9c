"""
Audit logging service for tracking ledger mutations.
"""
from crediario.models.audit_log import AuditLog, AuditAction
from flask import request, g, has_request_context
from datetime import datetime
import json
import logging

logger = logging.getLogger(__name__)


def log_action(
    session,
    action: AuditAction,
    resource_type: str = None,
    resource_id: int = None,
    details: dict = None,
    store_id: int = None,
    user_id: int = None
):
    """
    Add an audit entry to the current transaction.

    User and store default to the request context (g.user / g.store_id).
    The caller commits; a rollback discards the entry together with the
    change it describes.

    Args:
        session: Database session
        action: AuditAction enum value
        resource_type: Type of resource affected (e.g., 'client', 'sale')
        resource_id: ID of the affected resource
        details: Dict with additional details (will be JSON encoded)
    """
    if user_id is None and has_request_context() and g.get('user'):
        user_id = g.user.id
    if store_id is None and has_request_context():
        store_id = g.get('store_id')

    if not user_id or not store_id:
        logger.warning(f"Cannot log action {action}: missing user_id or store_id")
        return None

    ip_address = None
    user_agent = None
    if has_request_context():
        ip_address = request.remote_addr
        user_agent = request.headers.get('User-Agent', '')[:255]

    details_json = json.dumps(details, default=str) if details else None

    audit_entry = AuditLog(
        store_id=store_id,
        user_id=user_id,
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        details=details_json,
        ip_address=ip_address,
        user_agent=user_agent,
        created_at=datetime.utcnow()
    )
    session.add(audit_entry)

    logger.info(f"Audit log: {action.value} by user {user_id} on {resource_type} {resource_id}")
    return audit_entry


def get_audit_logs(
    session,
    store_id: int,
    limit: int = 100,
    offset: int = 0,
    action_filter: AuditAction = None,
    resource_type_filter: str = None,
    resource_id_filter: int = None
):
    """
    Retrieve audit logs for a store with optional filters, newest first.
    """
    query = session.query(AuditLog).filter(
        AuditLog.store_id == store_id
    )

    if action_filter:
        query = query.filter(AuditLog.action == action_filter)

    if resource_type_filter:
        query = query.filter(AuditLog.resource_type == resource_type_filter)

    if resource_id_filter:
        query = query.filter(AuditLog.resource_id == resource_id_filter)

    query = query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
    query = query.limit(limit).offset(offset)

    return query.all()
