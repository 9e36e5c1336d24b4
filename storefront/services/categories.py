from typing import List, Tuple

from sqlalchemy.orm import Session

from storefront.core.errors import ConflictError
from storefront.db.models import Category
from storefront.repositories.categories import CategoryRepository
from storefront.schemas import CategoryCreate, CategoryUpdate
from storefront.services.pagination import Page


class CategoryService:

    def __init__(self, db: Session, page: Page):
        self.categories = CategoryRepository(db)
        self.page = page

    def get(self, category_id: int) -> Category:
        return self.categories.get_by_id(category_id)

    def get_by_slug(self, slug: str) -> Category:
        return self.categories.get_by_slug(slug)

    def list(self, page: int, per_page: int) -> Tuple[List[Category], int, int, int]:
        page, per_page = self.page.normalize(page, per_page)
        rows, total = self.categories.list(per_page, self.page.offset(page, per_page))
        return rows, total, page, per_page

    def create(self, payload: CategoryCreate) -> Category:
        if self.categories.find_by_name(payload.name):
            raise ConflictError('Category', 'name', payload.name)
        if self.categories.find_by_slug(payload.slug):
            raise ConflictError('Category', 'slug', payload.slug)
        return self.categories.save(Category(**payload.model_dump()))

    def update(self, category_id: int, payload: CategoryUpdate) -> Category:
        obj = self.categories.get_by_id(category_id)
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        if 'name' in changes and changes['name'] != obj.name and self.categories.find_by_name(changes['name']):
            raise ConflictError('Category', 'name', changes['name'])
        if 'slug' in changes and changes['slug'] != obj.slug and self.categories.find_by_slug(changes['slug']):
            raise ConflictError('Category', 'slug', changes['slug'])
        for k, v in changes.items():
            setattr(obj, k, v)
        return self.categories.save(obj)

    def delete(self, category_id: int) -> None:
        self.categories.delete(category_id)
