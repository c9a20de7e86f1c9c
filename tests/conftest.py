import pytest
from datetime import date
import uuid

from crediario import create_app
from crediario.database import create_all, get_session
from crediario.models import AppUser, Client, Store, StoreMember


@pytest.fixture(scope='session')
def app():
    """Create application instance for testing."""
    app = create_app('config.TestConfig')
    with app.app_context():
        create_all()
    return app


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def session(app):
    """Create database session for testing."""
    session = get_session()
    yield session
    session.rollback()
    session.remove()


def _persist(session, obj):
    """Commit obj and detach it so request teardown and rollbacks leave it readable."""
    session.add(obj)
    session.commit()
    session.refresh(obj)
    session.expunge(obj)
    return obj


def _make_store(session, label):
    suffix = str(uuid.uuid4())[:8]
    return _persist(session, Store(
        slug=f'test-store-{label}-{suffix}',
        name=f'Test Store {label} {suffix}',
        active=True
    ))


def _make_member(session, store, role, label):
    suffix = str(uuid.uuid4())[:8]
    user = AppUser(
        email=f'{label}-{suffix}@test.com',
        name=f'{label.title()} User',
        active=True
    )
    user.set_password('password123')
    session.add(user)
    session.flush()

    session.add(StoreMember(
        user_id=user.id,
        store_id=store.id,
        role=role,
        active=True
    ))
    return _persist(session, user)


def _make_client(session, store, name):
    return _persist(session, Client(
        store_id=store.id,
        name=name,
        phone='11987654321',
        birth_date=date(1990, 5, 17),
        debit_balance=0
    ))


def _login(app, user, store):
    """Test client whose session is bound to user and store."""
    test_client = app.test_client()
    with test_client.session_transaction() as sess:
        sess['user_id'] = user.id
        sess['store_id'] = store.id
    return test_client


@pytest.fixture(scope='function')
def store1(session):
    """Create first test store."""
    return _make_store(session, 'one')


@pytest.fixture(scope='function')
def store2(session):
    """Create second test store for isolation tests."""
    return _make_store(session, 'two')


@pytest.fixture(scope='function')
def owner1(session, store1):
    """OWNER of store1."""
    return _make_member(session, store1, 'OWNER', 'owner1')


@pytest.fixture(scope='function')
def manager1(session, store1):
    """MANAGER of store1."""
    return _make_member(session, store1, 'MANAGER', 'manager1')


@pytest.fixture(scope='function')
def seller1(session, store1):
    """SELLER of store1."""
    return _make_member(session, store1, 'SELLER', 'seller1')


@pytest.fixture(scope='function')
def owner2(session, store2):
    """OWNER of store2."""
    return _make_member(session, store2, 'OWNER', 'owner2')


@pytest.fixture(scope='function')
def client_store1(session, store1):
    """Ledger client of store1 with a zero balance."""
    return _make_client(session, store1, 'Maria Souza')


@pytest.fixture(scope='function')
def other_client_store1(session, store1):
    """Second ledger client of store1."""
    return _make_client(session, store1, 'Ana Pereira')


@pytest.fixture(scope='function')
def client_store2(session, store2):
    """Ledger client of store2 with a zero balance."""
    return _make_client(session, store2, 'Joao Lima')


@pytest.fixture(scope='function')
def balance(session):
    """Return a function reading a client's debit balance from the database."""
    def read(client_id):
        session.expire_all()
        return session.get(Client, client_id).debit_balance
    return read


@pytest.fixture(scope='function')
def owner_client(app, owner1, store1):
    """HTTP client authenticated as the store1 owner."""
    return _login(app, owner1, store1)


@pytest.fixture(scope='function')
def manager_client(app, manager1, store1):
    """HTTP client authenticated as the store1 manager."""
    return _login(app, manager1, store1)


@pytest.fixture(scope='function')
def seller_client(app, seller1, store1):
    """HTTP client authenticated as a store1 seller."""
    return _login(app, seller1, store1)


@pytest.fixture(scope='function')
def owner2_client(app, owner2, store2):
    """HTTP client authenticated as the store2 owner."""
    return _login(app, owner2, store2)
