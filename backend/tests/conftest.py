"""
Pytest fixtures for Comanda backend tests.

Provides test database setup, one user and principal per role, dining
tables, and a test client.
"""

from decimal import Decimal

import pytest

from comanda import create_app
from comanda.constants import Channel, Role
from comanda.extensions import db
from comanda.models import DiningTable, User
from comanda.services import cash_service, order_service
from comanda.services.session_service import resolve_principal


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


def _make_user(db_session, name: str, role: str, *, is_active: bool = True) -> User:
    user = User(name=name, email=f"{name.lower()}@comanda.test", role=role, is_active=is_active)
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope='function')
def cashier_user(db_session):
    return _make_user(db_session, "Cashier", Role.CASHIER)


@pytest.fixture(scope='function')
def second_cashier_user(db_session):
    return _make_user(db_session, "Cashier2", Role.CASHIER)


@pytest.fixture(scope='function')
def waiter_user(db_session):
    return _make_user(db_session, "Waiter", Role.WAITER)


@pytest.fixture(scope='function')
def kitchen_user(db_session):
    return _make_user(db_session, "Kitchen", Role.KITCHEN)


@pytest.fixture(scope='function')
def cashier(cashier_user):
    return resolve_principal(cashier_user.id)


@pytest.fixture(scope='function')
def second_cashier(second_cashier_user):
    return resolve_principal(second_cashier_user.id)


@pytest.fixture(scope='function')
def waiter(waiter_user):
    return resolve_principal(waiter_user.id)


@pytest.fixture(scope='function')
def kitchen(kitchen_user):
    return resolve_principal(kitchen_user.id)


@pytest.fixture(scope='function')
def table(db_session):
    """Dining table number 1."""
    table = DiningTable(number=1, is_active=True)
    db_session.add(table)
    db_session.commit()
    return table


@pytest.fixture(scope='function')
def second_table(db_session):
    table = DiningTable(number=2, label="Terrace 2", zone="Terrace", is_active=True)
    db_session.add(table)
    db_session.commit()
    return table


BURGERS = [{"product_name": "Burger", "quantity": 2, "unit_price": "10.00"}]


@pytest.fixture(scope='function')
def counter_order(cashier):
    """COUNTER order: two burgers at 10.00, total 20.00."""
    return order_service.create_order(cashier, Channel.COUNTER, BURGERS)


@pytest.fixture(scope='function')
def table_order(waiter, table):
    """TABLE order on table 1: 2 x 10.00 plus 1 x 5.00, total 25.00."""
    return order_service.create_order(
        waiter,
        Channel.TABLE,
        [
            {"product_name": "Burger", "quantity": 2, "unit_price": "10.00"},
            {"product_name": "Soda", "quantity": 1, "unit_price": "5.00"},
        ],
        table_id=table.id,
    )


@pytest.fixture(scope='function')
def open_cash_session(cashier):
    return cash_service.open_session(cashier, Decimal("50.00"))


def auth_headers(user) -> dict:
    """Helper to create principal headers for a user."""
    return {'X-User-Id': str(user.id)}


@pytest.fixture(scope='function')
def cashier_headers(cashier_user):
    return auth_headers(cashier_user)


@pytest.fixture(scope='function')
def waiter_headers(waiter_user):
    return auth_headers(waiter_user)


@pytest.fixture(scope='function')
def kitchen_headers(kitchen_user):
    return auth_headers(kitchen_user)
