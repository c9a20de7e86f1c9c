"""
Integration tests for the flask CLI commands.
"""

import uuid
from datetime import date
from decimal import Decimal

from crediario.cli_commands import generate_slug
from crediario.models import AppUser, Client, Store, StoreMember
from crediario.services.sale_service import create_sale


class TestSlug:

    def test_generate_slug(self):
        assert generate_slug('Loja do João & Filhos') == 'loja-do-joao-filhos'


class TestStoreCommands:

    def test_create_store(self, app, session):
        suffix = str(uuid.uuid4())[:8]
        email = f'cli-{suffix}@test.com'
        runner = app.test_cli_runner()

        result = runner.invoke(args=[
            'create-store',
            '--name', f'Loja {suffix}',
            '--email', email,
            '--owner-name', 'Dona Loja',
            '--password', 'secret123',
        ])

        assert result.exit_code == 0, result.output
        user = session.query(AppUser).filter_by(email=email).one()
        store = session.query(Store).filter_by(slug=f'loja-{suffix}').one()
        member = session.query(StoreMember).filter_by(user_id=user.id, store_id=store.id).one()
        assert member.role == 'OWNER'

    def test_create_store_rejects_bad_email(self, app):
        result = app.test_cli_runner().invoke(args=[
            'create-store',
            '--name', 'Bad Email Store',
            '--email', 'not-an-email',
            '--owner-name', 'Someone',
            '--password', 'secret123',
        ])

        assert result.exit_code != 0

    def test_add_member(self, app, session, store1):
        email = f'seller-{str(uuid.uuid4())[:8]}@test.com'

        result = app.test_cli_runner().invoke(args=[
            'add-member', '--store', store1.slug, '--email', email,
            '--role', 'MANAGER', '--password', 'secret123',
        ])

        assert result.exit_code == 0, result.output
        user = session.query(AppUser).filter_by(email=email).one()
        member = session.query(StoreMember).filter_by(user_id=user.id, store_id=store1.id).one()
        assert member.role == 'MANAGER'


class TestCheckBalances:

    def test_balances_match(self, app, session, store1, owner1, client_store1):
        create_sale({
            'value': Decimal('80.00'),
            'due_date': date(2026, 12, 31),
            'client_id': client_store1.id,
        }, session, store1.id, owner1.id)

        result = app.test_cli_runner().invoke(args=['check-balances', '--store', store1.slug])

        assert result.exit_code == 0, result.output
        assert 'All client balances match' in result.output

    def test_drift_is_reported(self, app, session, store1, client_store1):
        session.get(Client, client_store1.id).debit_balance = Decimal('12.34')
        session.commit()

        result = app.test_cli_runner().invoke(args=['check-balances', '--store', store1.slug])

        assert result.exit_code != 0
        assert f'Client {client_store1.id}' in result.output
        assert 'expected 0.00' in result.output
