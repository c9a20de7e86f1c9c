"""
Sales API blueprint - Multi-Tenant.

Every route is scoped to the store selected in the caller's session; a sale of
another store is reported as not found.
"""
from flask import Blueprint, request, jsonify, g, current_app
from typing import Any, Dict, Optional

from crediario.database import get_session
from crediario.decorators.permissions import require_elevated_role
from crediario.exceptions import ValidationError
from crediario.forms import validate_json, provided_fields
from crediario.forms.sale_forms import SaleForm, SaleUpdateForm, PaymentForm
from crediario.middleware import require_login, require_store
from crediario.services import sale_service, payment_service
from crediario.utils.formatters import parse_datetime_param
from crediario.utils.pagination import resolve_page

sales_bp = Blueprint('sales', __name__, url_prefix='/sales')

# JSON field -> service field
SALE_FIELDS = {
    'value': 'value',
    'description': 'description',
    'isPaid': 'is_paid',
    'dueDate': 'due_date',
    'clientId': 'client_id',
}


def _form_to_data(form, fields=None) -> Dict[str, Any]:
    """Translate validated form fields into service keyword data."""
    names = fields if fields is not None else SALE_FIELDS.keys()
    return {SALE_FIELDS[name]: getattr(form, name).data for name in names}


def _parse_date_arg(name: str, end_of_day: bool = False):
    raw = request.args.get(name, '').strip()
    if not raw:
        return None
    try:
        return parse_datetime_param(raw, end_of_day=end_of_day)
    except ValueError:
        raise ValidationError({name: ['Not a valid date value.']})


def _parse_is_paid_arg() -> Optional[bool]:
    raw = request.args.get('isPaid')
    if raw is None or raw == '':
        return None
    return raw == 'true'


@sales_bp.route('', methods=['POST'])
@require_login
@require_store
def create_sale():
    """Create a sale; unpaid sales raise the client's debit balance."""
    form = validate_json(SaleForm)
    sale = sale_service.create_sale(_form_to_data(form), get_session(), g.store_id, g.user_id)
    return jsonify(sale.to_dict()), 201


@sales_bp.route('', methods=['GET'])
@require_login
@require_store
def list_sales():
    """List sales with pagination and filters (tenant-scoped)."""
    page, limit = resolve_page(
        request.args.get('page'),
        request.args.get('limit'),
        default_limit=current_app.config.get('DEFAULT_PAGE_SIZE', 10),
        max_limit=current_app.config.get('MAX_PAGE_SIZE', 100)
    )
    search = request.args.get('search', '').strip() or None
    is_paid = _parse_is_paid_arg()
    start_date = _parse_date_arg('startDate')
    end_date = _parse_date_arg('endDate', end_of_day=True)

    current_app.logger.info(
        f"Listing sales store={g.store_id} page={page} limit={limit} search={search!r} "
        f"is_paid={is_paid} start={start_date} end={end_date}"
    )

    result = sale_service.list_sales(
        get_session(), g.store_id,
        page=page, limit=limit, search=search, is_paid=is_paid,
        start_date=start_date, end_date=end_date
    )
    return jsonify({
        'sales': [sale.to_dict() for sale in result['sales']],
        'pagination': result['pagination']
    })


@sales_bp.route('/<int:sale_id>', methods=['GET'])
@require_login
@require_store
def get_sale(sale_id: int):
    """Sale detail with client, creator and payments."""
    sale = sale_service.get_sale(sale_id, get_session(), g.store_id)
    return jsonify(sale.to_dict())


@sales_bp.route('/client/<int:client_id>', methods=['GET'])
@require_login
@require_store
def list_client_sales(client_id: int):
    """All sales of one client."""
    sales = sale_service.list_sales_by_client(client_id, get_session(), g.store_id)
    return jsonify([sale.to_dict() for sale in sales])


@sales_bp.route('/<int:sale_id>', methods=['PATCH'])
@require_login
@require_store
@require_elevated_role
def update_sale(sale_id: int):
    """Partial update (OWNER / MANAGER only)."""
    form = validate_json(SaleUpdateForm)
    changes = _form_to_data(form, fields=provided_fields(form))
    sale = sale_service.update_sale(sale_id, changes, get_session(), g.store_id)
    return jsonify(sale.to_dict())


@sales_bp.route('/<int:sale_id>', methods=['DELETE'])
@require_login
@require_store
def delete_sale(sale_id: int):
    """Delete a sale, reversing its outstanding amount."""
    sale_service.delete_sale(sale_id, get_session(), g.store_id)
    return '', 204


@sales_bp.route('/<int:sale_id>/payments', methods=['GET'])
@require_login
@require_store
def list_payments(sale_id: int):
    payments = payment_service.list_payments(sale_id, get_session(), g.store_id)
    return jsonify([payment.to_dict() for payment in payments])


@sales_bp.route('/<int:sale_id>/payments', methods=['POST'])
@require_login
@require_store
def record_payment(sale_id: int):
    """Apply a payment against the sale's outstanding amount."""
    form = validate_json(PaymentForm)
    payment = payment_service.record_payment(
        sale_id, form.value.data, get_session(), g.store_id,
        pay_date=form.payDate.data
    )
    return jsonify(payment.to_dict()), 201


@sales_bp.route('/<int:sale_id>/payments/<int:payment_id>', methods=['DELETE'])
@require_login
@require_store
@require_elevated_role
def delete_payment(sale_id: int, payment_id: int):
    payment_service.delete_payment(payment_id, sale_id, get_session(), g.store_id)
    return '', 204
