from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone


class EmployeeRole(models.TextChoices):
	WAITER = 'waiter', 'Waiter'
	CHEF = 'chef', 'Chef'
	CASHIER = 'cashier', 'Cashier'
	MANAGER = 'manager', 'Manager'


class Employee(models.Model):
	name = models.CharField(max_length=100)
	email = models.EmailField(max_length=100, unique=True, null=True, blank=True)
	phone = models.CharField(max_length=20, blank=True, default='')
	role = models.CharField(max_length=10, choices=EmployeeRole.choices, default=EmployeeRole.WAITER)
	salary = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True,
		validators=[MinValueValidator(0)])
	hire_date = models.DateField(default=timezone.localdate)
	is_active = models.BooleanField(default=True)
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:
		ordering = ['name']
		indexes = [
			models.Index(fields=['role']),
			models.Index(fields=['is_active']),
		]

	def __str__(self):
		return f"{self.name} ({self.get_role_display()})"

	def activate(self):
		self.is_active = True
		self.save(update_fields=['is_active', 'updated_at'])

	def deactivate(self):
		self.is_active = False
		self.save(update_fields=['is_active', 'updated_at'])

	@property
	def years_of_service(self):
		return (timezone.localdate() - self.hire_date).days // 365
