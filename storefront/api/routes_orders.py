from typing import Optional

from fastapi import APIRouter, Depends

from storefront.api.deps import ensure_self_or_admin, get_current_user, get_order_service, require_admin
from storefront.core import responses
from storefront.core.errors import ForbiddenError
from storefront.db.models import OrderStatus, Role, User
from storefront.schemas import AddOrderItem, OrderCreate, OrderItemRead, OrderRead, OrderStatusUpdate, OrderUpdate
from storefront.services.orders import OrderService

router = APIRouter()


def _page(message, result):
    rows, total, page, per_page = result
    return responses.paginated(message, [OrderRead.model_validate(o) for o in rows], page, per_page, total)


def _owned(orders: OrderService, order_id: int, user: User):
    order = orders.get(order_id)
    ensure_self_or_admin(user, order.user_id)
    return order


@router.post('', status_code=201)
def create_order(payload: OrderCreate, user: User = Depends(get_current_user),
                 orders: OrderService = Depends(get_order_service)):
    order = orders.create(user.id, payload.items, payload.payment_method, payload.shipping_info)
    return responses.success('Order created successfully', OrderRead.model_validate(order), status_code=201)


@router.get('')
def list_orders(page: Optional[int] = None, per_page: Optional[int] = None,
                user: User = Depends(get_current_user), orders: OrderService = Depends(get_order_service)):
    if user.role == Role.ADMIN:
        return _page('Orders retrieved successfully', orders.list(page, per_page))
    return _page('Orders retrieved successfully', orders.list_by_user(user.id, page, per_page))


@router.get('/user/{user_id}')
def list_orders_by_user(user_id: int, page: Optional[int] = None, per_page: Optional[int] = None,
                        user: User = Depends(get_current_user), orders: OrderService = Depends(get_order_service)):
    ensure_self_or_admin(user, user_id)
    return _page('Orders retrieved successfully', orders.list_by_user(user_id, page, per_page))


@router.get('/status/{status}')
def list_orders_by_status(status: OrderStatus, page: Optional[int] = None, per_page: Optional[int] = None,
                          _: User = Depends(require_admin), orders: OrderService = Depends(get_order_service)):
    return _page('Orders retrieved successfully', orders.list_by_status(status, page, per_page))


@router.get('/{order_id}')
def get_order(order_id: int, user: User = Depends(get_current_user),
              orders: OrderService = Depends(get_order_service)):
    order = _owned(orders, order_id, user)
    return responses.success('Order retrieved successfully', OrderRead.model_validate(order))


@router.put('/{order_id}')
def update_order(order_id: int, payload: OrderUpdate, user: User = Depends(get_current_user),
                 orders: OrderService = Depends(get_order_service)):
    _owned(orders, order_id, user)
    if payload.status is not None and user.role != Role.ADMIN:
        raise ForbiddenError('Only admins can change order status')
    order = orders.update(order_id, payload)
    return responses.success('Order updated successfully', OrderRead.model_validate(order))


@router.delete('/{order_id}')
def delete_order(order_id: int, user: User = Depends(get_current_user),
                 orders: OrderService = Depends(get_order_service)):
    _owned(orders, order_id, user)
    orders.delete(order_id)
    return responses.success('Order deleted successfully')


@router.post('/{order_id}/items', status_code=201)
def add_order_item(order_id: int, payload: AddOrderItem, user: User = Depends(get_current_user),
                   orders: OrderService = Depends(get_order_service)):
    _owned(orders, order_id, user)
    item = orders.add_item(order_id, payload.product_id, payload.quantity, payload.price)
    return responses.success('Item added to order successfully', OrderItemRead.model_validate(item), status_code=201)


@router.patch('/{order_id}/status')
def update_order_status(order_id: int, payload: OrderStatusUpdate, _: User = Depends(require_admin),
                        orders: OrderService = Depends(get_order_service)):
    orders.update_status(order_id, payload.status)
    return responses.success('Order status updated successfully', {'id': order_id, 'status': payload.status})
