from typing import Optional

from fastapi import APIRouter, Depends

from storefront.api.deps import get_product_service, require_admin
from storefront.core import responses
from storefront.db.models import User
from storefront.schemas import ProductCreate, ProductRead, ProductUpdate, StockAdjust, StockRead
from storefront.services.products import ProductService

router = APIRouter()


def _page(message, result):
    rows, total, page, per_page = result
    return responses.paginated(message, [ProductRead.model_validate(p) for p in rows], page, per_page, total)


@router.get('')
def list_products(page: Optional[int] = None, per_page: Optional[int] = None,
                  products: ProductService = Depends(get_product_service)):
    return _page('Products retrieved successfully', products.list(page, per_page))


@router.get('/search')
def search_products(q: str = '', page: Optional[int] = None, per_page: Optional[int] = None,
                    products: ProductService = Depends(get_product_service)):
    return _page('Products retrieved successfully', products.search(q, page, per_page))


@router.get('/sku/{sku}')
def get_product_by_sku(sku: str, products: ProductService = Depends(get_product_service)):
    return responses.success('Product retrieved successfully', ProductRead.model_validate(products.get_by_sku(sku)))


@router.get('/category/{category_id}')
def list_products_by_category(category_id: int, page: Optional[int] = None, per_page: Optional[int] = None,
                              products: ProductService = Depends(get_product_service)):
    return _page('Products retrieved successfully', products.list_by_category(category_id, page, per_page))


@router.get('/{product_id}')
def get_product(product_id: int, products: ProductService = Depends(get_product_service)):
    return responses.success('Product retrieved successfully', ProductRead.model_validate(products.get(product_id)))


@router.post('', status_code=201)
def create_product(payload: ProductCreate, _: User = Depends(require_admin),
                   products: ProductService = Depends(get_product_service)):
    obj = products.create(payload)
    return responses.success('Product created successfully', ProductRead.model_validate(obj), status_code=201)


@router.put('/{product_id}')
def update_product(product_id: int, payload: ProductUpdate, _: User = Depends(require_admin),
                   products: ProductService = Depends(get_product_service)):
    obj = products.update(product_id, payload)
    return responses.success('Product updated successfully', ProductRead.model_validate(obj))


@router.patch('/{product_id}/stock')
def update_stock(product_id: int, payload: StockAdjust, _: User = Depends(require_admin),
                 products: ProductService = Depends(get_product_service)):
    stock = products.update_stock(product_id, payload.quantity)
    return responses.success('Product stock updated successfully', StockRead(product_id=product_id, stock=stock))


@router.delete('/{product_id}')
def delete_product(product_id: int, _: User = Depends(require_admin),
                   products: ProductService = Depends(get_product_service)):
    products.delete(product_id)
    return responses.success('Product deleted successfully')
