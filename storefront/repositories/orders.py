"""Order persistence.

Each write here is one transaction on the request session: ``create``,
``add_item`` and ``delete`` either apply every row change they describe,
stock decrements included, or leave the database untouched.
"""
import logging
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import joinedload, selectinload

from storefront.core.deadline import Deadline, check_deadline
from storefront.core.errors import InvalidInputError, NotFoundError
from storefront.db.models import Order, OrderItem, OrderStatus, PaymentMethod, Product, ShippingInfo, now_utc
from storefront.repositories.base import Repository
from storefront.repositories.products import ProductRepository

logger = logging.getLogger(__name__)

_DETAILS = (
    joinedload(Order.user),
    selectinload(Order.items).selectinload(OrderItem.product),
    selectinload(Order.shipping_info),
)


class OrderRepository(Repository):

    def __init__(self, db):
        super().__init__(db)
        self.products = ProductRepository(db)

    # --- reads ---
    def get(self, order_id: int) -> Order:
        with self.reading('order by id'):
            order = self.db.execute(select(Order).options(*_DETAILS).where(Order.id == order_id)).scalars().first()
        if order is None:
            raise NotFoundError('Order', order_id)
        return order

    def _page(self, where: Iterable, limit: int, offset: int) -> Tuple[List[Order], int]:
        where = list(where)
        with self.reading('order list'):
            total = self.db.scalar(select(func.count(Order.id)).where(*where))
            rows = self.db.execute(
                select(Order).options(*_DETAILS).where(*where).order_by(Order.id).limit(limit).offset(offset)
            ).scalars().unique().all()
        return list(rows), total or 0

    def list(self, limit: int, offset: int) -> Tuple[List[Order], int]:
        return self._page([], limit, offset)

    def list_by_user(self, user_id: int, limit: int, offset: int) -> Tuple[List[Order], int]:
        return self._page([Order.user_id == user_id], limit, offset)

    def list_by_status(self, status: OrderStatus, limit: int, offset: int) -> Tuple[List[Order], int]:
        return self._page([Order.status == status], limit, offset)

    # --- writes ---
    def create(self, order: Order, items: List[OrderItem], shipping: Optional[ShippingInfo] = None,
               deadline: Optional[Deadline] = None) -> Order:
        with self.transaction('order create', deadline):
            self.db.add(order)
            self.db.flush()  # assigns order.id

            for item in items:
                check_deadline(deadline, 'order create')
                item.order_id = order.id
                order.items.append(item)
                self.db.flush()
                # authoritative floor check; the caller's pre-check may be stale
                self.products.adjust_stock(item.product_id, -item.quantity)

            if shipping is not None and shipping.address:
                shipping.order_id = order.id
                order.shipping_info = shipping
                self.db.flush()

        logger.info('Created order %s for user %s with %d item(s)', order.id, order.user_id, len(items))
        return order

    def add_item(self, order_id: int, product_id: int, quantity: int, price: Optional[Decimal] = None,
                 deadline: Optional[Deadline] = None) -> OrderItem:
        with self.transaction('order add item', deadline):
            if self.db.scalar(select(Order.id).where(Order.id == order_id)) is None:
                raise NotFoundError('Order', order_id)
            product = self.db.get(Product, product_id)
            if product is None:
                raise NotFoundError('Product', product_id)
            if product.stock < quantity:
                raise InvalidInputError('Insufficient stock')

            unit_price = Decimal(price) if price is not None else product.price
            item = OrderItem(order_id=order_id, product_id=product_id, quantity=quantity, price=unit_price)
            self.db.add(item)
            self.db.flush()

            check_deadline(deadline, 'order add item')
            self.products.adjust_stock(product_id, -quantity)
            self.db.execute(
                update(Order)
                .where(Order.id == order_id)
                .values(total_amount=Order.total_amount + unit_price * quantity, updated_at=now_utc())
                .execution_options(synchronize_session='fetch')
            )
        return item

    def update(self, order_id: int, status: Optional[OrderStatus] = None,
               payment_method: Optional[PaymentMethod] = None, shipping: Optional[dict] = None) -> Order:
        with self.transaction('order update'):
            order = self.db.get(Order, order_id)
            if order is None:
                raise NotFoundError('Order', order_id)
            if status:
                order.status = status
            if payment_method:
                order.payment_method = payment_method
            if shipping and shipping.get('address'):
                if order.shipping_info is None:
                    order.shipping_info = ShippingInfo(**shipping)
                else:
                    for k, v in shipping.items():
                        setattr(order.shipping_info, k, v)
            order.updated_at = now_utc()
        return self.get(order_id)

    def update_status(self, order_id: int, status: OrderStatus) -> None:
        with self.transaction('order status'):
            result = self.db.execute(
                update(Order)
                .where(Order.id == order_id)
                .values(status=status, updated_at=now_utc())
                .execution_options(synchronize_session='fetch')
            )
            if result.rowcount == 0:
                raise NotFoundError('Order', order_id)

    def delete(self, order_id: int, deadline: Optional[Deadline] = None) -> None:
        """Remove shipping, then items, then the order. Stock is left as is."""
        with self.transaction('order delete', deadline):
            self.db.execute(delete(ShippingInfo).where(ShippingInfo.order_id == order_id)
                            .execution_options(synchronize_session='fetch'))
            self.db.execute(delete(OrderItem).where(OrderItem.order_id == order_id)
                            .execution_options(synchronize_session='fetch'))
            check_deadline(deadline, 'order delete')
            result = self.db.execute(delete(Order).where(Order.id == order_id)
                                     .execution_options(synchronize_session='fetch'))
            if result.rowcount == 0:
                raise NotFoundError('Order', order_id)
