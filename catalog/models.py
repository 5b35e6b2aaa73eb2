from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models


class CategoryType(models.TextChoices):
	MEAL = 'meal', 'Meal'
	DRINK = 'drink', 'Drink'
	DESSERT = 'dessert', 'Dessert'
	APPETIZER = 'appetizer', 'Appetizer'


class Category(models.Model):
	name = models.CharField(max_length=100, unique=True)
	type = models.CharField(max_length=10, choices=CategoryType.choices, default=CategoryType.MEAL)
	description = models.TextField(blank=True, default='')
	is_active = models.BooleanField(default=True)
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:
		ordering = ['name']
		verbose_name_plural = 'Categories'

	def __str__(self):
		return self.name


class ProductQuerySet(models.QuerySet):
	def low_stock(self):
		return self.filter(quantity_in_stock__lte=models.F('reorder_level'))

	def out_of_stock(self):
		return self.filter(quantity_in_stock=0)

	def available(self):
		return self.filter(is_available=True, quantity_in_stock__gt=0)


class Product(models.Model):
	name = models.CharField(max_length=100)
	category = models.ForeignKey(Category, on_delete=models.PROTECT, related_name='products')
	description = models.TextField(blank=True, default='')
	price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
	cost_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True,
		validators=[MinValueValidator(0)])
	# Changed only through inventory.services.adjust_stock
	quantity_in_stock = models.PositiveIntegerField(default=0)
	reorder_level = models.PositiveIntegerField(default=10)
	unit = models.CharField(max_length=20, blank=True, default='')
	is_available = models.BooleanField(default=True)
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	objects = ProductQuerySet.as_manager()

	class Meta:
		ordering = ['name']
		indexes = [
			models.Index(fields=['is_available']),
			models.Index(fields=['name']),
		]

	def __str__(self):
		return self.name

	@property
	def is_low_stock(self):
		return self.quantity_in_stock <= self.reorder_level

	@property
	def is_out_of_stock(self):
		return self.quantity_in_stock == 0

	@property
	def profit_margin(self):
		if not self.cost_price:
			return Decimal('0.00')
		margin = (self.price - self.cost_price) / self.cost_price * 100
		return margin.quantize(Decimal('0.01'))

	def set_availability(self, available):
		self.is_available = available
		self.save(update_fields=['is_available', 'updated_at'])
