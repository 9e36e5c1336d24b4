"""Order workflow.

``OrderService.create`` validates the buyer and every line item, prices the
order from the catalog, and hands the whole order graph to the repository,
which persists it and decrements stock in a single transaction. The stock
check done here only exists to fail fast with a readable message; the
repository's conditional decrement is what actually guards inventory.
"""
import logging
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from storefront.core.deadline import Deadline
from storefront.core.errors import InvalidInputError, NotFoundError
from storefront.db.models import Order, OrderItem, OrderStatus, PaymentMethod, ShippingInfo
from storefront.repositories.orders import OrderRepository
from storefront.repositories.products import ProductRepository
from storefront.repositories.users import UserRepository
from storefront.schemas import OrderItemCreate, OrderUpdate, ShippingInfoIn
from storefront.services.pagination import Page

logger = logging.getLogger(__name__)


class OrderService:

    def __init__(self, db: Session, page: Page):
        self.orders = OrderRepository(db)
        self.products = ProductRepository(db)
        self.users = UserRepository(db)
        self.page = page

    def create(self, buyer_id: int, items: Sequence[OrderItemCreate], payment_method: PaymentMethod,
               shipping: Optional[ShippingInfoIn] = None, timeout: Optional[float] = None) -> Order:
        try:
            buyer = self.users.get_by_id(buyer_id)
        except NotFoundError:
            logger.error('Failed to find user %s for order creation', buyer_id)
            raise InvalidInputError('Invalid user ID')

        if not items:
            raise InvalidInputError('Order must have at least one item')

        order_items: List[OrderItem] = []
        total = Decimal('0.00')
        for req in items:
            try:
                product = self.products.get_by_id(req.product_id)
            except NotFoundError:
                logger.error('Failed to find product %s for order item', req.product_id)
                raise InvalidInputError(f'Invalid product ID: {req.product_id}')

            if product.stock < req.quantity:
                raise InvalidInputError(f'Insufficient stock for product: {product.name}')

            # always the catalog price; whatever the client sent is ignored
            order_items.append(OrderItem(product_id=product.id, product=product,
                                         quantity=req.quantity, price=product.price))
            total += product.price * req.quantity

        order = Order(
            user_id=buyer.id,
            user=buyer,
            status=OrderStatus.PENDING,
            total_amount=total,
            payment_method=payment_method,
        )
        shipping_row = ShippingInfo(**shipping.model_dump()) if shipping is not None else None

        try:
            return self.orders.create(order, order_items, shipping_row, deadline=Deadline.after(timeout))
        except Exception:
            logger.error('Failed to create order for user %s', buyer_id)
            raise

    def add_item(self, order_id: int, product_id: int, quantity: int, price: Optional[Decimal] = None,
                 timeout: Optional[float] = None) -> OrderItem:
        if quantity <= 0:
            raise InvalidInputError('Quantity must be greater than zero')
        if price is not None and price <= 0:
            raise InvalidInputError('Price must be greater than zero')
        try:
            return self.orders.add_item(order_id, product_id, quantity, price, deadline=Deadline.after(timeout))
        except Exception:
            logger.error('Failed to add product %s to order %s', product_id, order_id)
            raise

    def get(self, order_id: int) -> Order:
        return self.orders.get(order_id)

    def update(self, order_id: int, patch: OrderUpdate) -> Order:
        shipping = patch.shipping_info.model_dump() if patch.shipping_info is not None else None
        try:
            return self.orders.update(order_id, patch.status, patch.payment_method, shipping)
        except Exception:
            logger.error('Failed to update order %s', order_id)
            raise

    def update_status(self, order_id: int, status: OrderStatus) -> None:
        try:
            self.orders.update_status(order_id, status)
        except Exception:
            logger.error('Failed to update order %s status to %s', order_id, status)
            raise

    def delete(self, order_id: int, timeout: Optional[float] = None) -> None:
        try:
            self.orders.delete(order_id, deadline=Deadline.after(timeout))
        except Exception:
            logger.error('Failed to delete order %s', order_id)
            raise

    def list(self, page: int, per_page: int) -> Tuple[List[Order], int, int, int]:
        page, per_page = self.page.normalize(page, per_page)
        rows, total = self.orders.list(per_page, self.page.offset(page, per_page))
        return rows, total, page, per_page

    def list_by_user(self, user_id: int, page: int, per_page: int) -> Tuple[List[Order], int, int, int]:
        self.users.get_by_id(user_id)
        page, per_page = self.page.normalize(page, per_page)
        rows, total = self.orders.list_by_user(user_id, per_page, self.page.offset(page, per_page))
        return rows, total, page, per_page

    def list_by_status(self, status: OrderStatus, page: int, per_page: int) -> Tuple[List[Order], int, int, int]:
        page, per_page = self.page.normalize(page, per_page)
        rows, total = self.orders.list_by_status(status, per_page, self.page.offset(page, per_page))
        return rows, total, page, per_page
