from django.core.exceptions import ValidationError
from django.db import models


class StockChangeType(models.TextChoices):
	RESTOCK = 'restock', 'Restock'
	SALE = 'sale', 'Sale'
	WASTAGE = 'wastage', 'Wastage'
	ADJUSTMENT = 'adjustment', 'Adjustment'


class StockLedgerEntry(models.Model):
	"""
	Immutable record of one change to a product's stock level.

	Entries are written by inventory.services.adjust_stock in the same
	transaction as the stock update; they are never edited or deleted.
	"""
	product = models.ForeignKey('catalog.Product', on_delete=models.CASCADE, related_name='ledger_entries')
	change_type = models.CharField(max_length=10, choices=StockChangeType.choices)
	quantity_change = models.IntegerField()
	quantity_before = models.PositiveIntegerField()
	quantity_after = models.PositiveIntegerField()
	reason = models.TextField(blank=True, default='')
	performed_by = models.ForeignKey('staff.Employee', on_delete=models.SET_NULL, null=True, blank=True,
		related_name='inventory_actions')
	order = models.ForeignKey('orders.Order', on_delete=models.SET_NULL, null=True, blank=True,
		related_name='ledger_entries')
	created_at = models.DateTimeField(auto_now_add=True, db_index=True)

	class Meta:
		ordering = ['-created_at', '-id']
		verbose_name_plural = 'Stock ledger entries'
		indexes = [
			models.Index(fields=['change_type']),
		]

	def __str__(self):
		return f"{self.get_change_type_display()} {self.quantity_change:+d} {self.product_id}"

	def save(self, *args, **kwargs):
		if not self._state.adding:
			raise ValidationError("Stock ledger entries cannot be modified")
		if self.quantity_change == 0:
			raise ValidationError("Quantity change cannot be zero")
		if self.quantity_before < 0 or self.quantity_after < 0:
			raise ValidationError("Stock quantities cannot be negative")
		if self.quantity_after != self.quantity_before + self.quantity_change:
			raise ValidationError("Quantity after must equal quantity before plus the change")
		super().save(*args, **kwargs)

	def delete(self, *args, **kwargs):
		raise ValidationError("Stock ledger entries cannot be deleted")

	@property
	def is_increase(self):
		return self.quantity_change > 0

	@property
	def is_decrease(self):
		return self.quantity_change < 0
