import logging

from django.db import IntegrityError, transaction

from orders.models import Order, OrderStatus
from pos.exceptions import ConflictError, InsufficientPaymentError, NotFoundError, ValidationError

from .models import Payment, PaymentMethod

logger = logging.getLogger(__name__)


def create_payment(order_id, payment_method, amount_paid, processed_by=None,
                   transaction_id='', notes=''):
    """
    Settle an order: record the payment with its change, complete the order
    and free its table, all in one transaction.
    """
    if order_id is None or payment_method is None or amount_paid is None:
        raise ValidationError("Order ID, payment method and amount paid are required")
    if payment_method not in PaymentMethod.values:
        raise ValidationError(f"Payment method must be one of: {', '.join(PaymentMethod.values)}")

    with transaction.atomic():
        try:
            order = Order.objects.select_for_update().select_related('table').get(pk=order_id)
        except Order.DoesNotExist:
            raise NotFoundError("Order not found")

        if Payment.objects.filter(order=order).exists():
            raise ConflictError("Payment already exists for this order")

        if amount_paid < order.final_amount:
            raise InsufficientPaymentError(
                f"Insufficient payment. Required: {order.final_amount}, Paid: {amount_paid}"
            )

        payment = Payment(
            order=order,
            payment_method=payment_method,
            amount_paid=amount_paid,
            processed_by=processed_by,
            transaction_id=transaction_id or '',
            notes=notes or '',
        )
        payment.change_given = payment.calculate_change(order.final_amount)
        try:
            payment.save()
        except IntegrityError:
            raise ConflictError("Payment already exists for this order")

        order.status = OrderStatus.COMPLETED
        order.save(update_fields=['status', 'updated_at'])
        order.table.free()

    logger.info("Payment %s recorded for order %s: %s paid by %s, change %s",
                payment.receipt_number, order.id, amount_paid, payment_method, payment.change_given)
    return payment
