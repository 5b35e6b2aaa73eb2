from django.core.validators import MinValueValidator
from django.db import models


class TableStatus(models.TextChoices):
	FREE = 'free', 'Free'
	OCCUPIED = 'occupied', 'Occupied'
	RESERVED = 'reserved', 'Reserved'


class Table(models.Model):
	number = models.CharField(max_length=10, unique=True)
	capacity = models.PositiveIntegerField(default=4, validators=[MinValueValidator(1)])
	status = models.CharField(max_length=10, choices=TableStatus.choices, default=TableStatus.FREE)
	location = models.CharField(max_length=50, blank=True, default='')
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:
		ordering = ['number']
		indexes = [
			models.Index(fields=['status']),
		]

	def __str__(self):
		return f"Table {self.number}"

	def is_available(self):
		return self.status == TableStatus.FREE

	def _set_status(self, new_status, **conditions):
		updated = Table.objects.filter(pk=self.pk, **conditions).update(status=new_status)
		if updated:
			self.status = new_status
		return bool(updated)

	def occupy(self):
		"""Move a free table to occupied. Returns False and changes nothing otherwise."""
		return self._set_status(TableStatus.OCCUPIED, status=TableStatus.FREE)

	def seat(self):
		"""Mark the table occupied whatever its current state (a reserved party arriving)."""
		return self._set_status(TableStatus.OCCUPIED)

	def free(self):
		return self._set_status(TableStatus.FREE)
