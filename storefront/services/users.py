import logging
from typing import List, Tuple

import jwt
from sqlalchemy.orm import Session

from storefront.core.config import Settings
from storefront.core.errors import ConflictError, UnauthorizedError
from storefront.db.models import Role, User
from storefront.repositories.users import UserRepository
from storefront.schemas import RegisterPayload, UserUpdate
from storefront.security.utils import create_access_token, decode_token, hash_password, verify_password
from storefront.services.pagination import Page

logger = logging.getLogger(__name__)


class UserService:

    def __init__(self, db: Session, settings: Settings, page: Page):
        self.users = UserRepository(db)
        self.settings = settings
        self.page = page

    def register(self, payload: RegisterPayload) -> User:
        if self.users.get_by_email(payload.email):
            raise ConflictError('User', 'email', payload.email)
        if self.users.get_by_username(payload.username):
            raise ConflictError('User', 'username', payload.username)
        user = User(
            username=payload.username,
            email=payload.email,
            password_hash=hash_password(payload.password),
            role=Role.USER,
        )
        user = self.users.save(user)
        logger.info('Registered user %s (%s)', user.id, user.username)
        return user

    def login(self, email: str, password: str) -> Tuple[str, User]:
        user = self.users.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            logger.warning('Rejected login for %s', email)
            raise UnauthorizedError('Invalid email or password')
        token = create_access_token(self.settings, user.id, user.username, user.role.value)
        return token, user

    def validate_token(self, token: str) -> dict:
        try:
            claims = decode_token(self.settings, token)
        except jwt.ExpiredSignatureError:
            raise UnauthorizedError('Token expired')
        except jwt.PyJWTError:
            raise UnauthorizedError('Invalid token')
        if claims.get('type') != 'access' or 'user_id' not in claims:
            raise UnauthorizedError('Invalid token')
        return claims

    def get(self, user_id: int) -> User:
        return self.users.get_by_id(user_id)

    def list(self, page: int, per_page: int) -> Tuple[List[User], int, int, int]:
        page, per_page = self.page.normalize(page, per_page)
        rows, total = self.users.list(per_page, self.page.offset(page, per_page))
        return rows, total, page, per_page

    def update(self, user_id: int, payload: UserUpdate) -> User:
        user = self.users.get_by_id(user_id)
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        if 'email' in changes and changes['email'] != user.email and self.users.get_by_email(changes['email']):
            raise ConflictError('User', 'email', changes['email'])
        if 'username' in changes and changes['username'] != user.username \
                and self.users.get_by_username(changes['username']):
            raise ConflictError('User', 'username', changes['username'])
        password = changes.pop('password', None)
        if password:
            user.password_hash = hash_password(password)
        for k, v in changes.items():
            setattr(user, k, v)
        return self.users.save(user)

    def delete(self, user_id: int) -> None:
        self.users.delete(user_id)
