from datetime import date

import pytest

from dashboard import create_app
from dashboard.extensions import db, page_cache
from dashboard.models import Customer, Invoice, User
from dashboard.settings import Config
from dashboard.utils.passwords import hash_password


USER_EMAIL = "user@nextmail.com"
USER_PASSWORD = "123456"


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret-key"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    RATELIMIT_ENABLED = False
    RATELIMIT_STORAGE_URI = "memory://"


@pytest.fixture
def app():
    app = create_app(TestConfig)
    page_cache.clear()

    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()
    page_cache.clear()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def user_id(app):
    with app.app_context():
        user = User(name="User", email=USER_EMAIL, password=hash_password(USER_PASSWORD))
        db.session.add(user)
        db.session.commit()
        return user.id


@pytest.fixture
def customer_id(app):
    with app.app_context():
        customer = Customer(name="Delba de Oliveira", email="delba@oliveira.com")
        db.session.add(customer)
        db.session.commit()
        return customer.id


@pytest.fixture
def other_customer_id(app):
    with app.app_context():
        customer = Customer(name="Lee Robinson", email="lee@robinson.com")
        db.session.add(customer)
        db.session.commit()
        return customer.id


@pytest.fixture
def make_invoice(app):
    def _make(customer_id, amount=4500, status="pending", on=date(2022, 11, 14)):
        with app.app_context():
            invoice = Invoice(customer_id=customer_id, amount=amount, status=status, date=on)
            db.session.add(invoice)
            db.session.commit()
            return invoice.id

    return _make


@pytest.fixture
def auth_client(client, user_id):
    resp = client.post("/login", data={"email": USER_EMAIL, "password": USER_PASSWORD})
    assert resp.status_code == 302
    return client
