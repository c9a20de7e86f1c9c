"""
Sale ledger service - Multi-Tenant.

Keeps every client's debit balance equal to the unpaid value of their sales:
creating a sale either books a payment or increments the balance, deleting it
reverses whatever is still outstanding. Balance changes are issued as SQL
increments so concurrent writers never lose updates.
"""
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import selectinload

from crediario.exceptions import LedgerError, NotFoundError, ValidationError
from crediario.models import AuditAction, Client, Payment, Sale
from crediario.services.audit_service import log_action
from crediario.services.client_service import get_client
from crediario.utils.formatters import money
from crediario.utils.pagination import page_offset, pagination_meta

logger = logging.getLogger(__name__)

# Fields a partial update may carry
UPDATABLE_FIELDS = ('value', 'description', 'is_paid', 'due_date', 'client_id')


def parse_amount(raw) -> Decimal:
    """money() for caller input; unusable amounts become a field error on 'value'."""
    try:
        return money(raw)
    except ValueError:
        raise ValidationError({'value': ['Not a valid amount']})


def adjust_debit_balance(session, client_id: int, store_id: int, delta: Decimal) -> None:
    """
    Atomically add delta (may be negative) to a client's debit balance.

    Issued as UPDATE ... SET debit_balance = debit_balance + :delta, never as
    read-modify-write.
    """
    delta = money(delta)
    if delta == 0:
        return
    updated = session.query(Client).filter(
        Client.id == client_id,
        Client.store_id == store_id
    ).update(
        {Client.debit_balance: Client.debit_balance + delta},
        synchronize_session='fetch'
    )
    if updated != 1:
        raise NotFoundError('Client not found')
    logger.debug(f"Client {client_id} debit balance adjusted by {delta}")


def sum_payments(session, sale_id: int) -> Decimal:
    """Total value of the payments recorded for a sale."""
    total = session.query(
        func.coalesce(func.sum(Payment.value), 0)
    ).filter(Payment.sale_id == sale_id).scalar()
    return money(total)


def lock_sale(session, sale_id: int, store_id: int) -> Sale:
    """Fetch a sale of the store with a row lock, or raise NotFoundError."""
    sale = session.query(Sale).filter(
        Sale.id == sale_id,
        Sale.store_id == store_id
    ).with_for_update().first()
    if not sale:
        raise NotFoundError('Sale not found')
    return sale


def _sale_query(session, store_id: int):
    """Base tenant-scoped query with the relations every response embeds."""
    return session.query(Sale).options(
        selectinload(Sale.client),
        selectinload(Sale.user),
        selectinload(Sale.payments)
    ).filter(Sale.store_id == store_id)


def create_sale(data: Dict[str, Any], session, store_id: int, user_id: int) -> Sale:
    """
    Create a sale and apply its effect on the ledger in one transaction.

    Steps:
    1. Validate value and client ownership
    2. Insert the sale
    3. Paid sale: insert a payment for the full value (balance untouched)
       Unpaid sale: increment the client's debit balance by the value
    4. Commit and return the sale with client, creator and payments

    Args:
        data: value, description, is_paid, due_date, client_id
        session: SQLAlchemy session
        store_id: Store ID (REQUIRED for tenant scoping)
        user_id: Creator user ID

    Raises:
        ValidationError: value below zero
        NotFoundError: client absent or owned by another store
    """
    try:
        value = parse_amount(data['value'])
        if value < 0:
            raise ValidationError({'value': ['Value must be zero or greater']})

        client = get_client(data['client_id'], session, store_id)
        is_paid = bool(data.get('is_paid', False))

        sale = Sale(
            store_id=store_id,
            client_id=client.id,
            user_id=user_id,
            value=value,
            description=data.get('description') or '',
            is_paid=is_paid,
            due_date=data['due_date']
        )
        session.add(sale)
        session.flush()

        if is_paid:
            session.add(Payment(
                sale_id=sale.id,
                value=value,
                pay_date=datetime.now(timezone.utc)
            ))
        else:
            adjust_debit_balance(session, client.id, store_id, value)

        log_action(
            session, AuditAction.SALE_CREATED, 'sale', sale.id,
            {'value': value, 'is_paid': is_paid, 'client_id': client.id},
            store_id=store_id, user_id=user_id
        )

        session.commit()
        sale_id = sale.id

    except LedgerError:
        session.rollback()
        raise
    except Exception:
        session.rollback()
        logger.exception(f"Error creating sale for store {store_id}")
        raise

    from crediario.blueprints.metrics import sales_created_total
    sales_created_total.labels(paid=str(is_paid).lower()).inc()

    logger.info(f"Sale {sale_id} created (value={value}, paid={is_paid}) for client {client.id}")
    return get_sale(sale_id, session, store_id)


def update_sale(sale_id: int, changes: Dict[str, Any], session, store_id: int) -> Sale:
    """
    Apply a partial update and keep the ledger reconciled.

    Only keys present in changes are touched. Balance effects:
    - value: the outstanding amount moves by (new - old); it may not drop
      below what has already been paid
    - is_paid false -> true: a payment for the remaining amount is booked
    - is_paid true -> false: rejected; remove payments instead
    - client_id: the outstanding amount moves to the new client

    Raises:
        NotFoundError: sale or new client not in the store
        ValidationError: value below payments, or un-paying a paid sale
    """
    unknown = set(changes) - set(UPDATABLE_FIELDS)
    if unknown:
        raise ValidationError({field: ['Field cannot be updated'] for field in sorted(unknown)})

    try:
        sale = lock_sale(session, sale_id, store_id)

        total_paid = sum_payments(session, sale.id)
        old_value = money(sale.value)
        old_outstanding = old_value - total_paid
        old_client_id = sale.client_id

        new_value = parse_amount(changes['value']) if 'value' in changes else old_value
        if new_value < 0:
            raise ValidationError({'value': ['Value must be zero or greater']})
        if new_value < total_paid:
            raise ValidationError({'value': [f'Value cannot be lower than the amount already paid ({total_paid})']})
        new_outstanding = new_value - total_paid

        new_client_id = changes.get('client_id', old_client_id)
        if new_client_id != old_client_id:
            get_client(new_client_id, session, store_id)

        mark_paid = False
        if 'is_paid' in changes:
            wants_paid = bool(changes['is_paid'])
            if wants_paid and not sale.is_paid:
                mark_paid = True
            elif not wants_paid and sale.is_paid:
                raise ValidationError({'isPaid': ['A paid sale cannot be marked as unpaid; remove its payments instead']})

        if mark_paid and new_outstanding > 0:
            session.add(Payment(
                sale_id=sale.id,
                value=new_outstanding,
                pay_date=datetime.now(timezone.utc)
            ))
        final_outstanding = Decimal('0.00') if mark_paid else new_outstanding

        if new_client_id == old_client_id:
            adjust_debit_balance(session, old_client_id, store_id, final_outstanding - old_outstanding)
        else:
            adjust_debit_balance(session, old_client_id, store_id, -old_outstanding)
            adjust_debit_balance(session, new_client_id, store_id, final_outstanding)

        if mark_paid:
            sale.is_paid = True
        elif 'value' in changes:
            sale.is_paid = final_outstanding == 0 and (sale.is_paid or total_paid > 0)

        sale.value = new_value
        sale.client_id = new_client_id
        if 'description' in changes:
            sale.description = changes['description'] or ''
        if 'due_date' in changes:
            sale.due_date = changes['due_date']

        log_action(
            session, AuditAction.SALE_UPDATED, 'sale', sale.id,
            {
                'changes': sorted(changes),
                'old_value': old_value,
                'new_value': new_value,
                'old_client_id': old_client_id,
                'new_client_id': new_client_id,
            },
            store_id=store_id
        )

        session.commit()

    except LedgerError:
        session.rollback()
        raise
    except Exception:
        session.rollback()
        logger.exception(f"Error updating sale {sale_id}")
        raise

    logger.info(f"Sale {sale_id} updated ({', '.join(sorted(changes)) or 'no fields'})")
    return get_sale(sale_id, session, store_id)


def delete_sale(sale_id: int, session, store_id: int) -> Dict[str, Any]:
    """
    Delete a sale and reverse its unpaid remainder (tenant-scoped).

    Steps:
    1. Lock the sale and validate store ownership
    2. total_paid = sum of the sale's payments
    3. debit_to_remove = value - total_paid
    4. Decrement the client's debit balance by debit_to_remove
    5. Delete the payments, then the sale
    6. Commit transaction

    Returns:
        dict with the reversed amount

    Raises:
        NotFoundError: sale absent or owned by another store
    """
    try:
        sale = lock_sale(session, sale_id, store_id)

        total_paid = sum_payments(session, sale.id)
        debit_to_remove = money(sale.value) - total_paid
        client_id = sale.client_id

        adjust_debit_balance(session, client_id, store_id, -debit_to_remove)

        payments = session.query(Payment).filter(Payment.sale_id == sale.id).all()
        for payment in payments:
            session.delete(payment)

        session.delete(sale)

        log_action(
            session, AuditAction.SALE_DELETED, 'sale', sale_id,
            {'value': sale.value, 'total_paid': total_paid, 'debit_removed': debit_to_remove, 'client_id': client_id},
            store_id=store_id
        )

        session.commit()

    except LedgerError:
        session.rollback()
        raise
    except Exception:
        session.rollback()
        logger.exception(f"Error deleting sale {sale_id}")
        raise

    from crediario.blueprints.metrics import sales_deleted_total
    sales_deleted_total.inc()

    logger.info(f"Sale {sale_id} deleted; client {client_id} balance reduced by {debit_to_remove}")
    return {
        'sale_id': sale_id,
        'client_id': client_id,
        'total_paid': total_paid,
        'debit_removed': debit_to_remove,
        'payments_removed': len(payments)
    }


def get_sale(sale_id: int, session, store_id: int) -> Sale:
    """Fetch one sale with its relations or raise NotFoundError."""
    sale = _sale_query(session, store_id).filter(Sale.id == sale_id).first()
    if not sale:
        raise NotFoundError('Sale not found')
    return sale


def list_sales(
    session,
    store_id: int,
    page: int = 1,
    limit: int = 10,
    search: Optional[str] = None,
    is_paid: Optional[bool] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None
) -> Dict[str, Any]:
    """
    Paginated, filtered list of the store's sales, newest first.

    Args:
        search: case-insensitive match on description or client name
        is_paid: paid-status filter (None = all)
        start_date / end_date: inclusive bounds on sale_date

    Returns:
        {'sales': [Sale], 'pagination': {...}}
    """
    query = session.query(Sale).join(Client, Sale.client_id == Client.id).filter(
        Sale.store_id == store_id
    )

    if search:
        query = query.filter(or_(
            Sale.description.icontains(search, autoescape=True),
            Client.name.icontains(search, autoescape=True)
        ))

    if is_paid is not None:
        query = query.filter(Sale.is_paid == is_paid)

    if start_date:
        query = query.filter(Sale.sale_date >= start_date)

    if end_date:
        query = query.filter(Sale.sale_date <= end_date)

    total = query.count()

    sales = query.options(
        selectinload(Sale.client),
        selectinload(Sale.user),
        selectinload(Sale.payments)
    ).order_by(
        Sale.sale_date.desc(), Sale.id.desc()
    ).offset(page_offset(page, limit)).limit(limit).all()

    return {
        'sales': sales,
        'pagination': pagination_meta(total, page, limit)
    }


def list_sales_by_client(client_id: int, session, store_id: int) -> List[Sale]:
    """All sales of one client, most recently created first."""
    get_client(client_id, session, store_id)

    return _sale_query(session, store_id).filter(
        Sale.client_id == client_id
    ).order_by(Sale.created_at.desc(), Sale.id.desc()).all()
