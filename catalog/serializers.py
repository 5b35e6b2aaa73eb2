from django.db import transaction
from rest_framework import serializers

from inventory.models import StockChangeType
from inventory.services import adjust_stock

from .models import Category, CategoryType, Product


class CategorySerializer(serializers.ModelSerializer):
    type = serializers.ChoiceField(choices=CategoryType.choices, default=CategoryType.MEAL)
    product_count = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = Category
        fields = ['id', 'name', 'type', 'description', 'is_active', 'product_count',
                  'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Category name cannot be empty")
        return value


class CategorySummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ['id', 'name', 'type']


class ProductSerializer(serializers.ModelSerializer):
    category = CategorySummarySerializer(read_only=True)
    category_id = serializers.PrimaryKeyRelatedField(
        queryset=Category.objects.all(), source='category', write_only=True,
        help_text="ID of the owning category"
    )
    is_low_stock = serializers.BooleanField(read_only=True)
    is_out_of_stock = serializers.BooleanField(read_only=True)
    profit_margin = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)

    class Meta:
        model = Product
        fields = ['id', 'name', 'category', 'category_id', 'description', 'price', 'cost_price',
                  'quantity_in_stock', 'reorder_level', 'unit', 'is_available',
                  'is_low_stock', 'is_out_of_stock', 'profit_margin', 'created_at', 'updated_at']
        # Stock moves only through the stock endpoints so every change reaches the ledger
        read_only_fields = ['id', 'quantity_in_stock', 'created_at', 'updated_at']
        extra_kwargs = {
            'price': {'min_value': 0},
            'cost_price': {'min_value': 0},
        }

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Product name cannot be empty")
        return value


class CreateProductSerializer(ProductSerializer):
    quantity_in_stock = serializers.IntegerField(
        min_value=0, required=False, default=0,
        help_text="Opening stock, booked as a restock ledger entry"
    )

    def create(self, validated_data):
        initial_stock = validated_data.pop('quantity_in_stock', 0)
        with transaction.atomic():
            product = super().create(validated_data)
            if initial_stock:
                adjust_stock(product, initial_stock, StockChangeType.RESTOCK, "Initial stock",
                             employee=self.context.get('employee'))
        return product


class StockUpdateSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(help_text="Signed stock change (negative to remove stock)")
    change_type = serializers.ChoiceField(choices=StockChangeType.choices, default=StockChangeType.ADJUSTMENT)
    reason = serializers.CharField(required=False, allow_blank=True, default='')
    employee_id = serializers.IntegerField(required=False, allow_null=True)

    def validate_quantity(self, value):
        if value == 0:
            raise serializers.ValidationError("Quantity is required and cannot be zero")
        return value


class RestockSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1, help_text="Units received")
    reason = serializers.CharField(required=False, allow_blank=True, default='Stock replenishment')
    employee_id = serializers.IntegerField(required=False, allow_null=True)


class AvailabilitySerializer(serializers.Serializer):
    is_available = serializers.BooleanField()
