"""Pytest fixtures for storefront tests."""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from storefront.core.config import Settings
from storefront.db.models import Category, Product, Role, User
from storefront.db.session import Base, make_engine, make_session_factory
from storefront.main import create_app
from storefront.security.utils import create_access_token, hash_password
from storefront.services.pagination import Page

PASSWORD = "secret123"


@pytest.fixture
def password():
    return PASSWORD


@pytest.fixture(scope="session")
def password_hash():
    """bcrypt is slow on purpose; hash the shared test password once."""
    return hash_password(PASSWORD)


@pytest.fixture
def settings():
    return Settings(
        DATABASE_URL="sqlite://",
        JWT_SECRET="test-secret-key-with-at-least-32-bytes",
        LOG_LEVEL="warn",
        DEFAULT_PAGE_SIZE=10,
        MAX_PAGE_SIZE=100,
    )


@pytest.fixture
def engine(settings):
    engine = make_engine(settings.DATABASE_URL)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def page():
    return Page(10, 100)


@pytest.fixture
def seed(session_factory, password_hash):
    """Two users, one category and two products; returns their ids."""
    session = session_factory()
    try:
        buyer = User(username="buyer", email="buyer@example.com", password_hash=password_hash, role=Role.USER)
        other = User(username="other", email="other@example.com", password_hash=password_hash, role=Role.USER)
        admin = User(username="admin", email="admin@example.com", password_hash=password_hash, role=Role.ADMIN)
        category = Category(name="Books", description="Printed books", slug="books")
        session.add_all([buyer, other, admin, category])
        session.flush()
        p1 = Product(name="Widget", description="A small widget", price=Decimal("10.00"), sku="WID-001",
                     stock=5, category_id=category.id, images=[])
        p2 = Product(name="Gadget", description="A shiny gadget", price=Decimal("2.50"), sku="GAD-001",
                     stock=100, category_id=category.id, images=[])
        session.add_all([p1, p2])
        session.commit()
        return {
            "buyer": buyer.id,
            "other": other.id,
            "admin": admin.id,
            "category": category.id,
            "p1": p1.id,
            "p2": p2.id,
        }
    finally:
        session.close()


@pytest.fixture
def client(settings, engine, seed):
    app = create_app(settings, engine=engine)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_header(settings):
    def _header(user_id, username="user", role=Role.USER):
        token = create_access_token(settings, user_id, username, role.value)
        return {"Authorization": f"Bearer {token}"}
    return _header


@pytest.fixture
def buyer_headers(seed, auth_header):
    return auth_header(seed["buyer"], "buyer")


@pytest.fixture
def other_headers(seed, auth_header):
    return auth_header(seed["other"], "other")


@pytest.fixture
def admin_headers(seed, auth_header):
    return auth_header(seed["admin"], "admin", Role.ADMIN)
