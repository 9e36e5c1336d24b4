import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.core.deadline import Deadline
from storefront.core.errors import AppError, InternalError

logger = logging.getLogger(__name__)


def is_unique_violation(err: IntegrityError) -> bool:
    msg = str(err.orig).lower()
    return 'unique' in msg or 'duplicate' in msg


class Repository:
    """Shared plumbing for the SQLAlchemy-backed repositories."""

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def transaction(self, name: str, deadline: Optional[Deadline] = None) -> Iterator[Session]:
        """All-or-nothing unit of work on the request session.

        Commits when the block exits cleanly. On any exception the session is
        rolled back; application errors propagate as they are and storage
        errors are wrapped into ``InternalError``.
        """
        try:
            if deadline is not None:
                deadline.check(name)
                self._apply_statement_timeout(deadline.remaining())
            yield self.db
            if deadline is not None:
                deadline.check(name)
            self.db.commit()
        except AppError:
            self.db.rollback()
            raise
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception('Transaction %s failed', name)
            raise InternalError(exc) from exc
        except BaseException:
            self.db.rollback()
            raise

    @contextmanager
    def reading(self, name: str) -> Iterator[Session]:
        try:
            yield self.db
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception('Query %s failed', name)
            raise InternalError(exc) from exc

    def commit(self, name: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception('Commit failed for %s', name)
            raise InternalError(exc) from exc

    def _apply_statement_timeout(self, seconds: float) -> None:
        bind = self.db.get_bind()
        if bind.dialect.name != 'postgresql':
            return
        ms = max(1, int(seconds * 1000))
        self.db.execute(text(f'SET LOCAL statement_timeout = {ms}'))
