"""
Pytest fixtures for stockroom backend tests.

Provides an app backed by a fresh in-memory SQLite database per test,
a test client, and helpers to sign up users and post receipts.
"""

import pytest
from stockroom import create_app
from stockroom.extensions import db
from stockroom.services import auth_service

TEST_CONFIG = {
    'TESTING': True,
    'SECRET_KEY': 'test-secret',
    'JWT_SECRET_KEY': 'test-jwt-secret-that-is-long-enough-for-hs256',
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    # bcrypt's minimum cost keeps signup fast
    'BCRYPT_ROUNDS': 4,
}

DEFAULT_PASSWORD = "Password123!"


@pytest.fixture(scope='function')
def app():
    """Create application with an empty schema."""
    app = create_app(TEST_CONFIG)

    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


def signup(client, loginid: str, email: str | None = None, password: str = DEFAULT_PASSWORD):
    """Helper to register a user through the API."""
    return client.post('/auth/signup', json={
        'loginid': loginid,
        'email': email or f'{loginid}@stockroom.test',
        'password': password,
    })


def get_auth_token(client, loginid: str, password: str = DEFAULT_PASSWORD) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/auth/login', json={
        'loginid': loginid,
        'password': password,
    })
    if response.status_code == 200:
        return response.get_json().get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def user_headers(client):
    """Headers for a freshly signed-up plain user."""
    response = signup(client, 'alice')
    assert response.status_code == 201
    return auth_headers(response.get_json()['token'])


@pytest.fixture(scope='function')
def admin_headers(app, client):
    """Headers for an admin created the way the CLI does it."""
    with app.app_context():
        auth_service.create_user('root', 'root@stockroom.test', DEFAULT_PASSWORD, role='admin')
    return auth_headers(get_auth_token(client, 'root'))


def post_receipt(client, headers, *, order_no, products, order_type='received', supplier='Acme Supply', **extra):
    """Helper to post a receipt."""
    body = {
        'order_no': order_no,
        'supplier': supplier,
        'order_type': order_type,
        'products': products,
    }
    body.update(extra)
    return client.post('/orders/receipt', json=body, headers=headers)


def line(sku, quantity, unit_price=2.5, **fields):
    """Build a receipt line item; product fields default to a creatable product."""
    item = {
        'SKUcode': sku,
        'name': f'Product {sku}',
        'category': 'General',
        'price': 4.0,
        'quantity': quantity,
        'unitPrice': unit_price,
    }
    item.update(fields)
    return item


def products_by_sku(client, headers) -> dict:
    response = client.get('/products', headers=headers)
    assert response.status_code == 200
    return {p['SKUcode']: p for p in response.get_json()['products']}
