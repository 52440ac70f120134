"""
Pytest fixtures for storefront backend tests.

Provides test database setup, order/attempt factories, and test client.
"""

import pytest
from storefront import create_app
from storefront.extensions import db
from storefront.services import attempt_service, order_service


CARD_PAYLOAD = {"token": "tok_visa_4242", "brand": "visa", "last4": "4242", "expiry": "12/29"}
PAYPAL_PAYLOAD = {"email": "buyer@example.com", "transaction_id": "PAY-7X1"}
CRYPTO_PAYLOAD = {"address": "bc1qxy2kgdygjrsqtzq2n0yrf2493p83kkfjhx0wlh", "tx_id": "f4184fc5", "chain": "bitcoin"}
BANK_PAYLOAD = {"account": "DE89370400440532013000", "swift": "COBADEFFXXX", "proof_reference": "proof/2024/001.pdf"}

PAYLOADS = {
    "card": CARD_PAYLOAD,
    "paypal": PAYPAL_PAYLOAD,
    "crypto": CRYPTO_PAYLOAD,
    "bank": BANK_PAYLOAD,
}


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


@pytest.fixture(scope='function')
def make_order(db_session):
    """Factory: order at ORDER_RECEIVED for a customer."""
    def _make(customer_id="cust-1", amount_cents=12000, currency="USD"):
        return order_service.create_order(
            customer_id=customer_id,
            amount_cents=amount_cents,
            currency=currency,
            actor_id=customer_id,
        )
    return _make


@pytest.fixture(scope='function')
def make_attempt(db_session):
    """Factory: attempt for an existing order using the default payload of its method."""
    def _make(order, method="paypal", amount_cents=None, payload=None):
        return attempt_service.create_attempt(
            order_id=order.id,
            method=method,
            amount_cents=amount_cents if amount_cents is not None else order.amount_cents,
            method_payload=dict(payload if payload is not None else PAYLOADS[method]),
            customer_id=order.customer_id,
        )
    return _make


def actor_headers(actor_id: str) -> dict:
    """Helper to create acting identity headers."""
    return {'X-Actor-Id': actor_id}
