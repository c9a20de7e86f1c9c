"""
Flask CLI commands for database and store management.

Commands:
- flask init-db: Create all tables
- flask create-store: Create a store and its owner
- flask add-member: Attach an existing user to a store with a role
- flask check-balances: Compare stored debit balances with the sales ledger
"""

import click
import re
from sqlalchemy import func

from crediario.database import db_session, create_all
from crediario.models import AppUser, Client, Payment, Sale, Store, StoreMember, UserRole
from crediario.utils.formatters import money

EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'


def generate_slug(name: str) -> str:
    """Generate URL-safe slug from a store name."""
    import unicodedata

    slug = unicodedata.normalize('NFKD', name)
    slug = slug.encode('ascii', 'ignore').decode('ascii')
    slug = re.sub(r'[^a-z0-9]+', '-', slug.lower()).strip('-')
    return slug[:80]


def unique_store_slug(session, name: str) -> str:
    """Slug for a new store, suffixed until unused."""
    slug = generate_slug(name) or 'store'
    base_slug = slug
    counter = 1
    while session.query(Store).filter_by(slug=slug).first():
        slug = f"{base_slug}-{counter}"
        counter += 1
    return slug


def outstanding_by_client(session, store_id: int):
    """
    Expected debit balance per client: sum of (sale value - payments).

    Returns:
        dict client_id -> Decimal
    """
    paid = session.query(
        Payment.sale_id.label('sale_id'),
        func.sum(Payment.value).label('paid')
    ).group_by(Payment.sale_id).subquery()

    rows = session.query(
        Sale.client_id,
        func.sum(Sale.value - func.coalesce(paid.c.paid, 0))
    ).outerjoin(paid, paid.c.sale_id == Sale.id).filter(
        Sale.store_id == store_id
    ).group_by(Sale.client_id).all()

    return {client_id: money(total) for client_id, total in rows}


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    def init_db_command():
        """Create database tables."""
        create_all()
        click.echo(click.style('Database tables created.', fg='green'))

    @app.cli.command('create-store')
    @click.option('--name', prompt=True, help='Store name')
    @click.option('--email', prompt=True, help='Owner email address')
    @click.option('--owner-name', prompt=True, help='Owner display name')
    @click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Owner password')
    def create_store(name, email, owner_name, password):
        """Create a store and its OWNER user."""
        if not re.match(EMAIL_PATTERN, email):
            raise click.BadParameter('Invalid email. Use user@example.com', param_hint='--email')

        if len(password) < 6:
            raise click.BadParameter('Password must have at least 6 characters.', param_hint='--password')

        try:
            user = db_session.query(AppUser).filter(func.lower(AppUser.email) == email.lower()).first()
            if not user:
                user = AppUser(email=email, name=owner_name, active=True)
                user.set_password(password)
                db_session.add(user)
                db_session.flush()

            store = Store(slug=unique_store_slug(db_session, name), name=name, active=True)
            db_session.add(store)
            db_session.flush()

            db_session.add(StoreMember(user_id=user.id, store_id=store.id, role=UserRole.OWNER.value, active=True))
            db_session.commit()
        except Exception:
            db_session.rollback()
            raise

        click.echo(click.style(f'Store "{store.name}" created (id={store.id}, slug={store.slug}).', fg='green'))
        click.echo(f'   Owner: {user.email} (id={user.id})')

    @app.cli.command('add-member')
    @click.option('--store', 'store_slug', required=True, help='Store slug')
    @click.option('--email', required=True, help='User email address')
    @click.option('--role', type=click.Choice([r.value for r in UserRole]), default=UserRole.SELLER.value)
    @click.option('--name', default=None, help='Display name for a new user')
    @click.option('--password', default=None, help='Password for a new user')
    def add_member(store_slug, email, role, name, password):
        """Attach a user to a store, creating the user if needed."""
        store = db_session.query(Store).filter_by(slug=store_slug).first()
        if not store:
            raise click.ClickException(f'Store "{store_slug}" not found')

        try:
            user = db_session.query(AppUser).filter(func.lower(AppUser.email) == email.lower()).first()
            if not user:
                if not password:
                    raise click.ClickException('New users need --password')
                user = AppUser(email=email, name=name or email, active=True)
                user.set_password(password)
                db_session.add(user)
                db_session.flush()

            member = db_session.query(StoreMember).filter_by(user_id=user.id, store_id=store.id).first()
            if member:
                member.role = role
                member.active = True
            else:
                db_session.add(StoreMember(user_id=user.id, store_id=store.id, role=role, active=True))
            db_session.commit()
        except Exception:
            db_session.rollback()
            raise

        click.echo(click.style(f'{user.email} is now {role} of "{store.name}".', fg='green'))

    @app.cli.command('check-balances')
    @click.option('--store', 'store_slug', required=True, help='Store slug')
    def check_balances(store_slug):
        """Report clients whose debit balance drifted from their sales."""
        store = db_session.query(Store).filter_by(slug=store_slug).first()
        if not store:
            raise click.ClickException(f'Store "{store_slug}" not found')

        expected = outstanding_by_client(db_session, store.id)
        drifted = 0
        for client in db_session.query(Client).filter(Client.store_id == store.id).order_by(Client.id):
            want = expected.get(client.id, money(0))
            have = money(client.debit_balance)
            if want != have:
                drifted += 1
                click.echo(f'Client {client.id} "{client.name}": stored {have}, expected {want}')

        if drifted:
            raise click.ClickException(f'{drifted} client(s) out of balance')
        click.echo(click.style('All client balances match their sales.', fg='green'))
