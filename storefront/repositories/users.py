import logging
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from storefront.core.errors import ConflictError, InternalError, NotFoundError
from storefront.db.models import User
from storefront.repositories.base import Repository, is_unique_violation

logger = logging.getLogger(__name__)


class UserRepository(Repository):

    def get_by_id(self, user_id: int) -> User:
        with self.reading('user by id'):
            user = self.db.get(User, user_id)
        if user is None:
            raise NotFoundError('User', user_id)
        return user

    def get_by_email(self, email: str) -> Optional[User]:
        with self.reading('user by email'):
            return self.db.query(User).filter(User.email == email).first()

    def get_by_username(self, username: str) -> Optional[User]:
        with self.reading('user by username'):
            return self.db.query(User).filter(User.username == username).first()

    def list(self, limit: int, offset: int) -> Tuple[List[User], int]:
        with self.reading('user list'):
            rows = self.db.execute(select(User).order_by(User.id).limit(limit).offset(offset)).scalars().all()
            total = self.db.scalar(select(func.count()).select_from(User))
        return list(rows), total or 0

    def save(self, user: User) -> User:
        """Insert or update ``user``; a unique collision becomes a ConflictError."""
        self.db.add(user)
        try:
            self.commit('user')
        except InternalError as exc:
            cause = exc.cause
            if isinstance(cause, IntegrityError) and is_unique_violation(cause):
                field = 'username' if 'username' in str(cause.orig).lower() else 'email'
                raise ConflictError('User', field, getattr(user, field)) from cause
            raise
        self.db.refresh(user)
        return user

    def delete(self, user_id: int) -> None:
        user = self.get_by_id(user_id)
        self.db.delete(user)
        self.commit('user delete')
