import logging
import random
import time
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import IntegrityError, models, transaction
from django.utils import timezone

logger = logging.getLogger(__name__)

RECEIPT_NUMBER_ATTEMPTS = 5


class PaymentMethod(models.TextChoices):
	CASH = 'cash', 'Cash'
	CARD = 'card', 'Card'
	MOBILE_PAYMENT = 'mobile_payment', 'Mobile payment'
	OTHER = 'other', 'Other'


def generate_receipt_number():
	return f"RCP-{int(time.time() * 1000)}-{random.randint(0, 999):03d}"


class Payment(models.Model):
	order = models.OneToOneField('orders.Order', on_delete=models.PROTECT, related_name='payment')
	payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices)
	amount_paid = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
	change_given = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
	payment_date = models.DateTimeField(default=timezone.now, db_index=True)
	processed_by = models.ForeignKey('staff.Employee', on_delete=models.SET_NULL, null=True, blank=True,
		related_name='payments_processed')
	transaction_id = models.CharField(max_length=100, blank=True, default='')
	receipt_number = models.CharField(max_length=50, unique=True)
	notes = models.TextField(blank=True, default='')
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:
		ordering = ['-payment_date', '-id']
		indexes = [
			models.Index(fields=['payment_method']),
		]

	def __str__(self):
		return f"Payment {self.receipt_number} for Order #{self.order_id}"

	def save(self, *args, **kwargs):
		if not self._state.adding or self.receipt_number:
			return super().save(*args, **kwargs)

		# Receipt numbers are time based; regenerate on the rare collision
		for attempt in range(1, RECEIPT_NUMBER_ATTEMPTS + 1):
			self.receipt_number = generate_receipt_number()
			try:
				with transaction.atomic():
					return super().save(*args, **kwargs)
			except IntegrityError as exc:
				if 'receipt_number' not in str(exc) or attempt == RECEIPT_NUMBER_ATTEMPTS:
					raise
				logger.warning("Receipt number %s already taken, retrying", self.receipt_number)

	def calculate_change(self, amount_due):
		return max(Decimal('0.00'), Decimal(self.amount_paid) - Decimal(amount_due))

	def is_sufficient(self, amount_due):
		return Decimal(self.amount_paid) >= Decimal(amount_due)
