"""Payment service - applies payments against open sales (Multi-Tenant)."""
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from crediario.exceptions import BusinessLogicError, LedgerError, NotFoundError, ValidationError
from crediario.models import AuditAction, Payment, Sale
from crediario.services.audit_service import log_action
from crediario.services.sale_service import adjust_debit_balance, lock_sale, parse_amount, sum_payments
from crediario.utils.formatters import money

logger = logging.getLogger(__name__)


def record_payment(
    sale_id: int,
    value: Decimal,
    session,
    store_id: int,
    pay_date: Optional[datetime] = None
) -> Payment:
    """
    Register a payment for a sale (partial or full).

    Args:
        sale_id: Sale ID
        value: Payment amount (> 0, at most the outstanding amount)
        session: SQLAlchemy session
        store_id: Store ID (REQUIRED for tenant scoping)
        pay_date: Payment date/time (defaults to now)

    Returns:
        Payment object

    Raises:
        ValidationError: non-positive value
        NotFoundError: sale absent or owned by another store
        BusinessLogicError: nothing outstanding, or value above the outstanding amount
    """
    value = parse_amount(value)
    if value <= 0:
        raise ValidationError({'value': ['Value must be greater than 0']})

    try:
        # Step 1: Lock sale row and validate store
        sale = lock_sale(session, sale_id, store_id)

        # Step 2: Validate against the outstanding amount
        outstanding = money(sale.value) - sum_payments(session, sale.id)
        if outstanding <= 0:
            raise BusinessLogicError(f'Sale #{sale_id} has no outstanding amount')
        if value > outstanding:
            raise BusinessLogicError(
                f'Payment of {value} exceeds the outstanding amount of {outstanding}',
                payload={'outstanding': float(outstanding)}
            )

        # Step 3: Create payment record
        payment = Payment(
            sale_id=sale.id,
            value=value,
            pay_date=pay_date or datetime.now(timezone.utc)
        )
        session.add(payment)
        session.flush()

        # Step 4: Update client balance and sale status
        adjust_debit_balance(session, sale.client_id, store_id, -value)
        if value == outstanding:
            sale.is_paid = True

        log_action(
            session, AuditAction.PAYMENT_RECORDED, 'payment', payment.id,
            {'sale_id': sale.id, 'value': value, 'outstanding_before': outstanding},
            store_id=store_id
        )

        session.commit()

    except LedgerError:
        session.rollback()
        raise
    except Exception:
        session.rollback()
        logger.exception(f"Error recording payment for sale {sale_id}")
        raise

    from crediario.blueprints.metrics import payments_recorded_total
    payments_recorded_total.inc()

    logger.info(f"Payment {payment.id} of {value} applied to sale {sale_id}")
    return payment


def list_payments(sale_id: int, session, store_id: int) -> List[Payment]:
    """Payments of a sale, newest first."""
    sale = session.query(Sale).filter(
        Sale.id == sale_id,
        Sale.store_id == store_id
    ).first()
    if not sale:
        raise NotFoundError('Sale not found')

    return session.query(Payment).filter(
        Payment.sale_id == sale.id
    ).order_by(Payment.pay_date.desc(), Payment.id.desc()).all()


def delete_payment(payment_id: int, sale_id: int, session, store_id: int) -> dict:
    """
    Remove a payment and put its value back on the client's balance.

    The sale is no longer considered paid afterwards.
    """
    try:
        sale = lock_sale(session, sale_id, store_id)

        payment = session.query(Payment).filter(
            Payment.id == payment_id,
            Payment.sale_id == sale.id
        ).first()
        if not payment:
            raise NotFoundError('Payment not found')

        value = money(payment.value)
        adjust_debit_balance(session, sale.client_id, store_id, value)
        sale.is_paid = False
        session.delete(payment)

        log_action(
            session, AuditAction.PAYMENT_DELETED, 'payment', payment_id,
            {'sale_id': sale.id, 'value': value},
            store_id=store_id
        )

        session.commit()

    except LedgerError:
        session.rollback()
        raise
    except Exception:
        session.rollback()
        logger.exception(f"Error deleting payment {payment_id}")
        raise

    logger.info(f"Payment {payment_id} removed from sale {sale_id}; {value} returned to balance")
    return {'payment_id': payment_id, 'sale_id': sale_id, 'value': value}
