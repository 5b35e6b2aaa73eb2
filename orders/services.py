"""
Order workflow: creating orders and changing their items and status.

Every mutation runs in one transaction. Stock moves through
inventory.services.adjust_stock so each sale or return reaches the ledger.
"""
import logging
from decimal import Decimal

from django.db import transaction

from catalog.models import Product
from inventory.models import StockChangeType
from inventory.services import adjust_stock
from pos.exceptions import (
    InsufficientStockError, NotFoundError, UnavailableError,
    UnmodifiableStateError, ValidationError
)
from tables.models import Table

from .models import Order, OrderItem, OrderItemStatus, OrderStatus

logger = logging.getLogger(__name__)


def hydrated_orders():
    return Order.objects.select_related('table', 'employee', 'payment').prefetch_related('items__product')


def get_order(order_id, for_update=False):
    orders = Order.objects.select_for_update() if for_update else hydrated_orders()
    try:
        return orders.get(pk=order_id)
    except Order.DoesNotExist:
        raise NotFoundError("Order not found")


def _get_product(product_id, quantity):
    try:
        product = Product.objects.get(pk=product_id)
    except Product.DoesNotExist:
        raise NotFoundError(f"Product with ID {product_id} not found")
    if not product.is_available:
        raise UnavailableError(f'Product "{product.name}" is not available')
    if product.quantity_in_stock < quantity:
        raise InsufficientStockError(
            f'Insufficient stock for "{product.name}". Available: {product.quantity_in_stock}'
        )
    return product


def _require_modifiable(order):
    if not order.can_be_modified():
        raise UnmodifiableStateError(f"Order cannot be modified in {order.status} status")


def _require_non_negative_total(order):
    if order.calculate_final_amount() < 0:
        raise ValidationError("Discount cannot exceed the order total plus tax")


def create_order(table_id, items, employee=None, discount=0, tax=0,
                 customer_name='', customer_phone='', notes=''):
    """
    Open an order on a table, book the sale of every line against stock and
    seat the table. Any failure leaves the database untouched.
    """
    if not table_id or not items:
        raise ValidationError("Table and items are required")

    with transaction.atomic():
        try:
            table = Table.objects.get(pk=table_id)
        except Table.DoesNotExist:
            raise NotFoundError("Table not found")

        lines = []
        total_amount = Decimal('0.00')
        for item in items:
            quantity = item['quantity']
            product = _get_product(item['product_id'], quantity)
            lines.append((product, quantity, item.get('notes') or ''))
            total_amount += product.price * quantity

        order = Order(
            table=table,
            employee=employee,
            customer_name=customer_name or '',
            customer_phone=customer_phone or '',
            total_amount=total_amount,
            discount=discount or 0,
            tax=tax or 0,
            notes=notes or '',
            status=OrderStatus.PENDING,
        )
        _require_non_negative_total(order)
        order.save()

        for product, quantity, item_notes in lines:
            OrderItem.objects.create(
                order=order,
                product=product,
                quantity=quantity,
                unit_price=product.price,
                notes=item_notes,
            )
            adjust_stock(product, -quantity, StockChangeType.SALE, f"Order #{order.id}",
                         employee=employee, order=order)

        table.seat()

    logger.info("Order %s created on table %s: %d line(s), total %s",
                order.id, table.number, len(lines), order.final_amount)
    return get_order(order.id)


def update_order_status(order, status):
    if status not in OrderStatus.values:
        raise ValidationError(f"Status must be one of: {', '.join(OrderStatus.values)}")

    with transaction.atomic():
        previous = order.status
        order.status = status
        order.save(update_fields=['status', 'updated_at'])
        if status == OrderStatus.COMPLETED:
            order.table.free()

    logger.info("Order %s status changed from %s to %s", order.id, previous, status)
    return order


def update_order(order, **changes):
    """
    Update customer details, pricing adjustments, notes or status.

    Allowed while the order is modifiable; a cancellation is always allowed.
    """
    status = changes.pop('status', None)
    if not order.can_be_modified() and status != OrderStatus.CANCELLED:
        raise UnmodifiableStateError(f"Order cannot be modified in {order.status} status")

    with transaction.atomic():
        for field in ('customer_name', 'customer_phone', 'discount', 'tax', 'notes'):
            if changes.get(field) is not None:
                setattr(order, field, changes[field])
        _require_non_negative_total(order)
        order.save()
        if status and status != order.status:
            update_order_status(order, status)

    return get_order(order.id)


def add_item(order_id, product_id, quantity, notes='', employee=None):
    with transaction.atomic():
        order = get_order(order_id, for_update=True)
        _require_modifiable(order)
        product = _get_product(product_id, quantity)

        item = OrderItem.objects.create(
            order=order,
            product=product,
            quantity=quantity,
            unit_price=product.price,
            notes=notes or '',
        )
        adjust_stock(product, -quantity, StockChangeType.SALE, f"Order #{order.id}",
                     employee=employee, order=order)

        order.total_amount += item.subtotal
        order.save(update_fields=['total_amount', 'updated_at'])

    logger.info("Added %d x product %s to order %s", quantity, product.id, order.id)
    return item


def remove_item(order_id, item_id, employee=None):
    with transaction.atomic():
        order = get_order(order_id, for_update=True)
        _require_modifiable(order)
        try:
            item = order.items.select_related('product').get(pk=item_id)
        except OrderItem.DoesNotExist:
            raise NotFoundError("Order item not found")

        adjust_stock(item.product, item.quantity, StockChangeType.ADJUSTMENT,
                     f"Removed from Order #{order.id}", employee=employee, order=order)

        order.total_amount -= item.subtotal
        _require_non_negative_total(order)
        order.save(update_fields=['total_amount', 'updated_at'])
        item.delete()

    logger.info("Removed item %s from order %s", item_id, order.id)
    return order


def update_item_status(order, item_id, status):
    if status not in OrderItemStatus.values:
        raise ValidationError(f"Status must be one of: {', '.join(OrderItemStatus.values)}")
    try:
        item = order.items.get(pk=item_id)
    except OrderItem.DoesNotExist:
        raise NotFoundError("Order item not found")
    item.status = status
    item.save(update_fields=['status', 'subtotal', 'updated_at'])
    return item


def delete_order(order):
    """Delete a pending or cancelled order. Stock already sold is not returned."""
    if not order.can_be_deleted():
        raise UnmodifiableStateError("Only pending or cancelled orders can be deleted")
    order_id = order.id
    order.delete()
    logger.info("Order %s deleted", order_id)
