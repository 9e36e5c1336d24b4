import logging
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from storefront.core.errors import ConflictError, InternalError, InvalidInputError, NotFoundError
from storefront.db.models import Category, Product
from storefront.repositories.base import Repository, is_unique_violation

logger = logging.getLogger(__name__)


class CategoryRepository(Repository):

    def get_by_id(self, category_id: int) -> Category:
        with self.reading('category by id'):
            obj = self.db.get(Category, category_id)
        if obj is None:
            raise NotFoundError('Category', category_id)
        return obj

    def get_by_slug(self, slug: str) -> Category:
        obj = self.find_by_slug(slug)
        if obj is None:
            raise NotFoundError('Category', f'slug={slug}')
        return obj

    def find_by_name(self, name: str) -> Optional[Category]:
        with self.reading('category by name'):
            return self.db.query(Category).filter(Category.name == name).first()

    def find_by_slug(self, slug: str) -> Optional[Category]:
        with self.reading('category by slug'):
            return self.db.query(Category).filter(Category.slug == slug).first()

    def list(self, limit: int, offset: int) -> Tuple[List[Category], int]:
        with self.reading('category list'):
            rows = self.db.execute(select(Category).order_by(Category.id).limit(limit).offset(offset)).scalars().all()
            total = self.db.scalar(select(func.count()).select_from(Category))
        return list(rows), total or 0

    def has_products(self, category_id: int) -> bool:
        with self.reading('category products'):
            return self.db.scalar(select(Product.id).where(Product.category_id == category_id).limit(1)) is not None

    def save(self, obj: Category) -> Category:
        self.db.add(obj)
        try:
            self.commit('category')
        except InternalError as exc:
            cause = exc.cause
            if isinstance(cause, IntegrityError) and is_unique_violation(cause):
                field = 'slug' if 'slug' in str(cause.orig).lower() else 'name'
                raise ConflictError('Category', field, getattr(obj, field)) from cause
            raise
        self.db.refresh(obj)
        return obj

    def delete(self, category_id: int) -> None:
        """Delete an empty category; one still holding products is rejected."""
        obj = self.get_by_id(category_id)
        if self.has_products(category_id):
            raise InvalidInputError(f'Category {category_id} still has products')
        self.db.delete(obj)
        try:
            self.commit('category delete')
        except InternalError as exc:
            # a product inserted concurrently still trips the foreign key
            if isinstance(exc.cause, IntegrityError):
                raise InvalidInputError(f'Category {category_id} still has products') from exc.cause
            raise
