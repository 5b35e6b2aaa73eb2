from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

CENTS = Decimal('0.01')


class OrderStatus(models.TextChoices):
	PENDING = 'pending', 'Pending'
	CONFIRMED = 'confirmed', 'Confirmed'
	PREPARING = 'preparing', 'Preparing'
	READY = 'ready', 'Ready'
	SERVED = 'served', 'Served'
	COMPLETED = 'completed', 'Completed'
	CANCELLED = 'cancelled', 'Cancelled'


MODIFIABLE_STATUSES = [OrderStatus.PENDING, OrderStatus.CONFIRMED]
DELETABLE_STATUSES = [OrderStatus.PENDING, OrderStatus.CANCELLED]
CLOSED_STATUSES = [OrderStatus.COMPLETED, OrderStatus.CANCELLED]


class OrderItemStatus(models.TextChoices):
	PENDING = 'pending', 'Pending'
	PREPARING = 'preparing', 'Preparing'
	READY = 'ready', 'Ready'
	SERVED = 'served', 'Served'


class OrderQuerySet(models.QuerySet):
	def active(self):
		return self.exclude(status__in=CLOSED_STATUSES)


class Order(models.Model):
	table = models.ForeignKey('tables.Table', on_delete=models.PROTECT, related_name='orders')
	employee = models.ForeignKey('staff.Employee', on_delete=models.SET_NULL, null=True, blank=True,
		related_name='orders')
	customer_name = models.CharField(max_length=100, blank=True, default='')
	customer_phone = models.CharField(max_length=20, blank=True, default='')
	order_date = models.DateTimeField(default=timezone.now, db_index=True)
	total_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
	discount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'),
		validators=[MinValueValidator(0)])
	tax = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'),
		validators=[MinValueValidator(0)])
	final_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
	status = models.CharField(max_length=10, choices=OrderStatus.choices, default=OrderStatus.PENDING)
	notes = models.TextField(blank=True, default='')
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	objects = OrderQuerySet.as_manager()

	class Meta:
		ordering = ['-order_date', '-id']
		indexes = [
			models.Index(fields=['status']),
		]

	def __str__(self):
		return f"Order #{self.id} (Table {self.table.number})"

	def calculate_final_amount(self):
		amount = Decimal(self.total_amount) - Decimal(self.discount) + Decimal(self.tax)
		return amount.quantize(CENTS)

	def save(self, *args, **kwargs):
		self.final_amount = self.calculate_final_amount()
		update_fields = kwargs.get('update_fields')
		if update_fields is not None and 'final_amount' not in update_fields:
			kwargs['update_fields'] = list(update_fields) + ['final_amount']
		super().save(*args, **kwargs)

	def can_be_modified(self):
		return self.status in MODIFIABLE_STATUSES

	def can_be_deleted(self):
		return self.status in DELETABLE_STATUSES

	def is_completed(self):
		return self.status == OrderStatus.COMPLETED

	def is_cancelled(self):
		return self.status == OrderStatus.CANCELLED


class OrderItemQuerySet(models.QuerySet):
	def active(self):
		return self.exclude(order__status__in=CLOSED_STATUSES)


class OrderItem(models.Model):
	order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='items')
	product = models.ForeignKey('catalog.Product', on_delete=models.PROTECT, related_name='order_items')
	quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
	unit_price = models.DecimalField(max_digits=10, decimal_places=2)
	subtotal = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
	notes = models.TextField(blank=True, default='')
	status = models.CharField(max_length=10, choices=OrderItemStatus.choices, default=OrderItemStatus.PENDING)
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	objects = OrderItemQuerySet.as_manager()

	class Meta:
		ordering = ['id']

	def __str__(self):
		return f"{self.quantity} x {self.product.name} for Order #{self.order_id}"

	def save(self, *args, **kwargs):
		self.subtotal = (Decimal(self.unit_price) * self.quantity).quantize(CENTS)
		super().save(*args, **kwargs)
