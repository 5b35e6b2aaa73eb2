import logging

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from catalog.models import Product
from pos.exceptions import InsufficientStockError, ValidationError

from .models import StockChangeType, StockLedgerEntry

logger = logging.getLogger(__name__)


def adjust_stock(product, delta, change_type, reason='', employee=None, order=None):
    """
    Apply a signed stock change to a product and record it in the ledger.

    The update is a single conditional UPDATE, so a concurrent request can
    never push stock below zero. Runs inside the caller's transaction when
    there is one; on failure nothing is written.

    Returns the new ledger entry; ``product.quantity_in_stock`` is refreshed.
    """
    if not delta:
        raise ValidationError("Quantity change cannot be zero")
    if change_type not in StockChangeType.values:
        raise ValidationError(f"Change type must be one of: {', '.join(StockChangeType.values)}")

    with transaction.atomic():
        updated = Product.objects.filter(
            pk=product.pk,
            quantity_in_stock__gte=-delta,
        ).update(
            quantity_in_stock=F('quantity_in_stock') + delta,
            updated_at=timezone.now(),
        )
        if not updated:
            product.refresh_from_db(fields=['quantity_in_stock'])
            raise InsufficientStockError(
                f'Insufficient stock for "{product.name}". Available: {product.quantity_in_stock}'
            )

        # The row stays locked by the UPDATE until the transaction ends
        product.refresh_from_db(fields=['quantity_in_stock', 'updated_at'])
        quantity_after = product.quantity_in_stock

        entry = StockLedgerEntry.objects.create(
            product=product,
            change_type=change_type,
            quantity_change=delta,
            quantity_before=quantity_after - delta,
            quantity_after=quantity_after,
            reason=reason or '',
            performed_by=employee,
            order=order,
        )

    logger.debug("Stock of product %s changed by %+d (%s): %d -> %d",
                 product.pk, delta, change_type, entry.quantity_before, entry.quantity_after)
    if delta < 0 and product.is_low_stock:
        logger.warning("Product %s (%s) is low on stock: %d left, reorder level %d",
                       product.pk, product.name, quantity_after, product.reorder_level)
    return entry
