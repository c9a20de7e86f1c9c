"""Client registry service - Multi-Tenant."""
import logging
from typing import Any, Dict, Optional

from sqlalchemy import func, or_

from crediario.exceptions import BusinessLogicError, LedgerError, NotFoundError, ValidationError
from crediario.models import AuditAction, Client, Sale
from crediario.services.audit_service import log_action
from crediario.utils.pagination import page_offset, pagination_meta

logger = logging.getLogger(__name__)

# debit_balance is deliberately absent: only the ledger services write it
EDITABLE_FIELDS = ('name', 'phone', 'birth_date', 'observations')


def _validate_client_name(session, store_id: int, name: str, exclude_id: Optional[int] = None) -> None:
    """Client names are unique per store (case-insensitive)."""
    query = session.query(Client).filter(
        Client.store_id == store_id,
        func.lower(Client.name) == name.lower()
    )
    if exclude_id:
        query = query.filter(Client.id != exclude_id)

    if query.first():
        raise ValidationError({'name': [f"A client named '{name}' already exists"]})


def get_client(client_id: int, session, store_id: int) -> Client:
    client = session.query(Client).filter(
        Client.id == client_id,
        Client.store_id == store_id
    ).first()
    if not client:
        raise NotFoundError('Client not found')
    return client


def list_clients(
    session,
    store_id: int,
    page: int = 1,
    limit: int = 10,
    search: Optional[str] = None
) -> Dict[str, Any]:
    """Paginated list of the store's clients ordered by name."""
    query = session.query(Client).filter(Client.store_id == store_id)

    if search:
        query = query.filter(or_(
            Client.name.icontains(search, autoescape=True),
            Client.phone.contains(search, autoescape=True)
        ))

    total = query.count()
    clients = query.order_by(Client.name, Client.id).offset(
        page_offset(page, limit)
    ).limit(limit).all()

    return {
        'clients': clients,
        'pagination': pagination_meta(total, page, limit)
    }


def create_client(data: Dict[str, Any], session, store_id: int) -> Client:
    """Create a client with a zero debit balance."""
    _validate_client_name(session, store_id, data['name'])

    try:
        client = Client(
            store_id=store_id,
            name=data['name'],
            phone=data['phone'],
            birth_date=data.get('birth_date'),
            observations=data.get('observations') or None
        )
        session.add(client)
        session.flush()

        log_action(session, AuditAction.CLIENT_CREATED, 'client', client.id, {'name': client.name}, store_id=store_id)
        session.commit()
    except LedgerError:
        session.rollback()
        raise
    except Exception:
        session.rollback()
        logger.exception(f"Error creating client for store {store_id}")
        raise

    return client


def update_client(client_id: int, changes: Dict[str, Any], session, store_id: int) -> Client:
    """Update contact fields of a client; the balance is not editable here."""
    if 'debit_balance' in changes:
        raise ValidationError({'debitBalance': ['Debit balance is maintained by sales and payments']})

    client = get_client(client_id, session, store_id)
    if 'name' in changes:
        _validate_client_name(session, store_id, changes['name'], exclude_id=client.id)

    try:
        for key in EDITABLE_FIELDS:
            if key in changes:
                setattr(client, key, changes[key])

        log_action(session, AuditAction.CLIENT_UPDATED, 'client', client.id, {'changes': sorted(changes)}, store_id=store_id)
        session.commit()
    except LedgerError:
        session.rollback()
        raise
    except Exception:
        session.rollback()
        logger.exception(f"Error updating client {client_id}")
        raise

    return client


def delete_client(client_id: int, session, store_id: int) -> None:
    """Delete a client that has no sales left."""
    client = get_client(client_id, session, store_id)

    sales_count = session.query(func.count(Sale.id)).filter(
        Sale.client_id == client.id,
        Sale.store_id == store_id
    ).scalar()
    if sales_count:
        raise BusinessLogicError(
            f'Client "{client.name}" cannot be deleted because it has {sales_count} sale(s)',
            status_code=409
        )

    try:
        name = client.name
        session.delete(client)
        log_action(session, AuditAction.CLIENT_DELETED, 'client', client_id, {'name': name}, store_id=store_id)
        session.commit()
    except Exception:
        session.rollback()
        logger.exception(f"Error deleting client {client_id}")
        raise

    logger.info(f"Client {client_id} deleted from store {store_id}")
