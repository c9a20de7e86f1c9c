"""Clients API blueprint - Multi-Tenant."""
from flask import Blueprint, request, jsonify, g, current_app

from crediario.database import get_session
from crediario.decorators.permissions import require_elevated_role
from crediario.exceptions import ValidationError
from crediario.forms import json_formdata, validate_json, provided_fields
from crediario.forms.client_forms import ClientForm, ClientUpdateForm
from crediario.middleware import require_login, require_store
from crediario.services import client_service
from crediario.utils.pagination import resolve_page

clients_bp = Blueprint('clients', __name__, url_prefix='/clients')

CLIENT_FIELDS = {
    'name': 'name',
    'phone': 'phone',
    'birthDate': 'birth_date',
    'observations': 'observations',
}


@clients_bp.route('', methods=['GET'])
@require_login
@require_store
def list_clients():
    """List clients (tenant-scoped) with search and pagination."""
    page, limit = resolve_page(
        request.args.get('page'),
        request.args.get('limit'),
        default_limit=current_app.config.get('DEFAULT_PAGE_SIZE', 10),
        max_limit=current_app.config.get('MAX_PAGE_SIZE', 100)
    )
    search = request.args.get('search', '').strip() or None

    result = client_service.list_clients(get_session(), g.store_id, page=page, limit=limit, search=search)
    return jsonify({
        'clients': [client.to_dict() for client in result['clients']],
        'pagination': result['pagination']
    })


@clients_bp.route('', methods=['POST'])
@require_login
@require_store
def create_client():
    form = validate_json(ClientForm)
    data = {CLIENT_FIELDS[name]: getattr(form, name).data for name in CLIENT_FIELDS}
    client = client_service.create_client(data, get_session(), g.store_id)
    return jsonify(client.to_dict()), 201


@clients_bp.route('/<int:client_id>', methods=['GET'])
@require_login
@require_store
def get_client(client_id: int):
    client = client_service.get_client(client_id, get_session(), g.store_id)
    return jsonify(client.to_dict())


@clients_bp.route('/<int:client_id>', methods=['PATCH'])
@require_login
@require_store
def update_client(client_id: int):
    """Update contact data; debitBalance is read-only."""
    if 'debitBalance' in json_formdata():
        raise ValidationError({'debitBalance': ['Debit balance is maintained by sales and payments']})

    form = validate_json(ClientUpdateForm)
    changes = {CLIENT_FIELDS[name]: getattr(form, name).data for name in provided_fields(form)}
    client = client_service.update_client(client_id, changes, get_session(), g.store_id)
    return jsonify(client.to_dict())


@clients_bp.route('/<int:client_id>', methods=['DELETE'])
@require_login
@require_store
@require_elevated_role
def delete_client(client_id: int):
    client_service.delete_client(client_id, get_session(), g.store_id)
    return '', 204
