import logging
from typing import List, Tuple

from sqlalchemy.orm import Session

from storefront.core.errors import ConflictError, InvalidInputError, NotFoundError
from storefront.db.models import Product
from storefront.repositories.categories import CategoryRepository
from storefront.repositories.products import ProductRepository
from storefront.schemas import ProductCreate, ProductUpdate
from storefront.services.pagination import Page

logger = logging.getLogger(__name__)


class ProductService:

    def __init__(self, db: Session, page: Page):
        self.products = ProductRepository(db)
        self.categories = CategoryRepository(db)
        self.page = page

    def _require_category(self, category_id: int) -> None:
        try:
            self.categories.get_by_id(category_id)
        except NotFoundError:
            logger.error('Failed to find category %s for product', category_id)
            raise InvalidInputError('Invalid category ID')

    def get(self, product_id: int) -> Product:
        return self.products.get_by_id(product_id)

    def get_by_sku(self, sku: str) -> Product:
        return self.products.get_by_sku(sku)

    def list(self, page: int, per_page: int) -> Tuple[List[Product], int, int, int]:
        page, per_page = self.page.normalize(page, per_page)
        rows, total = self.products.list(per_page, self.page.offset(page, per_page))
        return rows, total, page, per_page

    def list_by_category(self, category_id: int, page: int, per_page: int) -> Tuple[List[Product], int, int, int]:
        self.categories.get_by_id(category_id)
        page, per_page = self.page.normalize(page, per_page)
        rows, total = self.products.list_by_category(category_id, per_page, self.page.offset(page, per_page))
        return rows, total, page, per_page

    def search(self, query: str, page: int, per_page: int) -> Tuple[List[Product], int, int, int]:
        page, per_page = self.page.normalize(page, per_page)
        rows, total = self.products.search(query or '', per_page, self.page.offset(page, per_page))
        return rows, total, page, per_page

    def create(self, payload: ProductCreate) -> Product:
        if self.products.sku_taken(payload.sku):
            raise ConflictError('Product', 'sku', payload.sku)
        self._require_category(payload.category_id)
        obj = Product(**payload.model_dump())
        return self.products.save(obj)

    def update(self, product_id: int, payload: ProductUpdate) -> Product:
        obj = self.products.get_by_id(product_id)
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        if 'sku' in changes and changes['sku'] != obj.sku and self.products.sku_taken(changes['sku']):
            raise ConflictError('Product', 'sku', changes['sku'])
        if 'category_id' in changes and changes['category_id'] != obj.category_id:
            self._require_category(changes['category_id'])
        for k, v in changes.items():
            setattr(obj, k, v)
        return self.products.save(obj)

    def delete(self, product_id: int) -> None:
        self.products.delete(product_id)

    def update_stock(self, product_id: int, delta: int) -> int:
        try:
            stock = self.products.update_stock(product_id, delta)
        except Exception:
            logger.error('Failed to update stock of product %s by %s', product_id, delta)
            raise
        logger.info('Stock of product %s adjusted by %s to %s', product_id, delta, stock)
        return stock
