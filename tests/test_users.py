"""Tests for registration, login and user management."""

import jwt
import pytest

from storefront.core.errors import ConflictError, InternalError, NotFoundError, UnauthorizedError
from storefront.db.models import Order, PaymentMethod, Role
from storefront.db.session import Base
from storefront.repositories.users import UserRepository
from storefront.schemas import RegisterPayload, UserUpdate
from storefront.security.utils import verify_password
from storefront.services.users import UserService


@pytest.fixture
def users(db, settings, page):
    return UserService(db, settings, page)


def test_register_defaults_to_user_role(users, seed):
    user = users.register(RegisterPayload(username="newbie", email="newbie@example.com", password="hunter22"))

    assert user.id is not None
    assert user.role == Role.USER
    assert user.password_hash != "hunter22"
    assert verify_password("hunter22", user.password_hash)


def test_register_conflicts(users, seed):
    with pytest.raises(ConflictError, match="email buyer@example.com"):
        users.register(RegisterPayload(username="someone", email="buyer@example.com", password="hunter22"))
    with pytest.raises(ConflictError, match="username buyer"):
        users.register(RegisterPayload(username="buyer", email="fresh@example.com", password="hunter22"))


def test_login_issues_token_with_identity_claims(users, settings, seed, password):
    token, user = users.login("buyer@example.com", password)

    claims = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    assert claims["user_id"] == seed["buyer"]
    assert claims["username"] == "buyer"
    assert claims["role"] == "user"
    assert users.validate_token(token)["user_id"] == user.id


@pytest.mark.parametrize("email,password", [
    ("buyer@example.com", "wrong-password"),
    ("nobody@example.com", "secret123"),
])
def test_login_rejects_bad_credentials(users, seed, email, password):
    with pytest.raises(UnauthorizedError):
        users.login(email, password)


def test_validate_token_rejects_garbage_and_foreign_signatures(users, settings, seed):
    with pytest.raises(UnauthorizedError):
        users.validate_token("not-a-token")

    forged = jwt.encode({"user_id": seed["admin"], "type": "access"}, "another-secret-of-sufficient-length",
                        algorithm="HS256")
    with pytest.raises(UnauthorizedError):
        users.validate_token(forged)


def test_update_rehashes_password(users, seed):
    user = users.update(seed["buyer"], UserUpdate(password="brand-new-pass"))

    assert verify_password("brand-new-pass", user.password_hash)
    assert user.username == "buyer"


def test_update_conflict(users, seed):
    with pytest.raises(ConflictError):
        users.update(seed["buyer"], UserUpdate(email="other@example.com"))


def test_list_and_delete(users, seed):
    rows, total, page, per_page = users.list(1, 2)
    assert total == 3 and len(rows) == 2 and per_page == 2

    users.delete(seed["other"])
    with pytest.raises(NotFoundError):
        users.get(seed["other"])


def test_delete_user_with_orders_fails_cleanly(db, users, seed):
    db.add(Order(user_id=seed["buyer"], total_amount=0, payment_method=PaymentMethod.PAYPAL))
    db.commit()

    with pytest.raises(InternalError):
        users.delete(seed["buyer"])

    assert users.get(seed["buyer"]).username == "buyer"


@pytest.mark.parametrize("call", [
    lambda repo: repo.get_by_id(1),
    lambda repo: repo.get_by_email("buyer@example.com"),
    lambda repo: repo.get_by_username("buyer"),
    lambda repo: repo.list(10, 0),
])
def test_reads_raise_internal_error(db, engine, seed, call):
    Base.metadata.drop_all(engine)

    with pytest.raises(InternalError):
        call(UserRepository(db))
