import logging
from typing import List, Tuple

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError

from storefront.core.errors import ConflictError, InternalError, InvalidInputError, NotFoundError
from storefront.db.models import Product, now_utc
from storefront.repositories.base import Repository, is_unique_violation

logger = logging.getLogger(__name__)


class ProductRepository(Repository):

    def get_by_id(self, product_id: int) -> Product:
        with self.reading('product by id'):
            obj = self.db.get(Product, product_id)
        if obj is None:
            raise NotFoundError('Product', product_id)
        return obj

    def get_by_sku(self, sku: str) -> Product:
        with self.reading('product by sku'):
            obj = self.db.query(Product).filter(Product.sku == sku).first()
        if obj is None:
            raise NotFoundError('Product', f'sku={sku}')
        return obj

    def sku_taken(self, sku: str) -> bool:
        with self.reading('product sku'):
            return self.db.query(Product.id).filter(Product.sku == sku).first() is not None

    def _page(self, stmt, limit: int, offset: int) -> Tuple[List[Product], int]:
        with self.reading('product list'):
            total = self.db.scalar(select(func.count()).select_from(stmt.subquery()))
            rows = self.db.execute(stmt.order_by(Product.id).limit(limit).offset(offset)).scalars().all()
        return list(rows), total or 0

    def list(self, limit: int, offset: int) -> Tuple[List[Product], int]:
        return self._page(select(Product), limit, offset)

    def list_by_category(self, category_id: int, limit: int, offset: int) -> Tuple[List[Product], int]:
        return self._page(select(Product).where(Product.category_id == category_id), limit, offset)

    def search(self, query: str, limit: int, offset: int) -> Tuple[List[Product], int]:
        pattern = f'%{query}%'
        stmt = select(Product).where(or_(Product.name.ilike(pattern), Product.description.ilike(pattern)))
        return self._page(stmt, limit, offset)

    def save(self, obj: Product) -> Product:
        self.db.add(obj)
        try:
            self.commit('product')
        except InternalError as exc:
            cause = exc.cause
            if isinstance(cause, IntegrityError) and is_unique_violation(cause):
                raise ConflictError('Product', 'sku', obj.sku) from cause
            raise
        self.db.refresh(obj)
        return obj

    def delete(self, product_id: int) -> None:
        obj = self.get_by_id(product_id)
        self.db.delete(obj)
        self.commit('product delete')

    def adjust_stock(self, product_id: int, delta: int) -> int:
        """Add ``delta`` to the product's stock and return the new value.

        The floor check lives in the UPDATE's WHERE clause, so the read and
        the write are one statement and concurrent adjustments of the same
        row cannot lose updates or drive stock below zero. Runs inside the
        caller's transaction and does not commit.
        """
        result = self.db.execute(
            update(Product)
            .where(Product.id == product_id, Product.stock + delta >= 0)
            .values(stock=Product.stock + delta, updated_at=now_utc())
            .execution_options(synchronize_session='fetch')
        )
        if result.rowcount == 0:
            exists = self.db.scalar(select(Product.id).where(Product.id == product_id))
            if exists is None:
                raise NotFoundError('Product', product_id)
            raise InvalidInputError(f'Insufficient stock for product ID: {product_id}')
        return self.db.scalar(select(Product.stock).where(Product.id == product_id))

    def update_stock(self, product_id: int, delta: int) -> int:
        """Standalone stock adjustment committed as its own transaction."""
        with self.transaction('stock update'):
            try:
                return self.adjust_stock(product_id, delta)
            except InvalidInputError:
                raise InvalidInputError('Insufficient stock')
