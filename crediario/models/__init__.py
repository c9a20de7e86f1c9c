"""Models package - exports all SQLAlchemy models."""
# Tenancy and users
from crediario.models.app_user import AppUser
from crediario.models.store import Store
from crediario.models.store_member import StoreMember, UserRole, ELEVATED_ROLES

# Ledger
from crediario.models.client import Client
from crediario.models.sale import Sale
from crediario.models.payment import Payment
from crediario.models.audit_log import AuditLog, AuditAction

__all__ = [
    'AppUser', 'Store', 'StoreMember', 'UserRole', 'ELEVATED_ROLES',
    'Client', 'Sale', 'Payment',
    'AuditLog', 'AuditAction',
]
