from typing import Optional

from fastapi import APIRouter, Depends

from storefront.api.deps import get_category_service, require_admin
from storefront.core import responses
from storefront.db.models import User
from storefront.schemas import CategoryCreate, CategoryRead, CategoryUpdate
from storefront.services.categories import CategoryService

router = APIRouter()


@router.get('')
def list_categories(page: Optional[int] = None, per_page: Optional[int] = None,
                    categories: CategoryService = Depends(get_category_service)):
    rows, total, page, per_page = categories.list(page, per_page)
    return responses.paginated('Categories retrieved successfully', [CategoryRead.model_validate(c) for c in rows],
                               page, per_page, total)


@router.get('/slug/{slug}')
def get_category_by_slug(slug: str, categories: CategoryService = Depends(get_category_service)):
    return responses.success('Category retrieved successfully', CategoryRead.model_validate(categories.get_by_slug(slug)))


@router.get('/{category_id}')
def get_category(category_id: int, categories: CategoryService = Depends(get_category_service)):
    return responses.success('Category retrieved successfully', CategoryRead.model_validate(categories.get(category_id)))


@router.post('', status_code=201)
def create_category(payload: CategoryCreate, _: User = Depends(require_admin),
                    categories: CategoryService = Depends(get_category_service)):
    obj = categories.create(payload)
    return responses.success('Category created successfully', CategoryRead.model_validate(obj), status_code=201)


@router.put('/{category_id}')
def update_category(category_id: int, payload: CategoryUpdate, _: User = Depends(require_admin),
                    categories: CategoryService = Depends(get_category_service)):
    obj = categories.update(category_id, payload)
    return responses.success('Category updated successfully', CategoryRead.model_validate(obj))


@router.delete('/{category_id}')
def delete_category(category_id: int, _: User = Depends(require_admin),
                    categories: CategoryService = Depends(get_category_service)):
    categories.delete(category_id)
    return responses.success('Category deleted successfully')
