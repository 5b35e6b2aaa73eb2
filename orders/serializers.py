from typing import Optional

from rest_framework import serializers

from catalog.serializers import CategorySummarySerializer
from catalog.models import Product
from staff.serializers import EmployeeSummarySerializer
from tables.models import Table

from .models import Order, OrderItem, OrderItemStatus, OrderStatus


class OrderProductSerializer(serializers.ModelSerializer):
    category = CategorySummarySerializer(read_only=True)

    class Meta:
        model = Product
        fields = ['id', 'name', 'price', 'category']


class OrderTableSerializer(serializers.ModelSerializer):
    class Meta:
        model = Table
        fields = ['id', 'number', 'location', 'status']


class OrderItemSerializer(serializers.ModelSerializer):
    product = OrderProductSerializer(read_only=True)

    class Meta:
        model = OrderItem
        fields = ['id', 'product', 'quantity', 'unit_price', 'subtotal', 'notes', 'status']
        read_only_fields = fields


class OrderPaymentSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    payment_method = serializers.CharField()
    amount_paid = serializers.DecimalField(max_digits=10, decimal_places=2)
    change_given = serializers.DecimalField(max_digits=10, decimal_places=2)
    receipt_number = serializers.CharField()
    payment_date = serializers.DateTimeField()


class OrderSerializer(serializers.ModelSerializer):
    table = OrderTableSerializer(read_only=True)
    employee = EmployeeSummarySerializer(read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)
    payment = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = ['id', 'table', 'employee', 'customer_name', 'customer_phone', 'order_date',
                  'total_amount', 'discount', 'tax', 'final_amount', 'status', 'notes',
                  'items', 'payment', 'created_at', 'updated_at']
        read_only_fields = fields

    def get_payment(self, order) -> Optional[dict]:
        payment = getattr(order, 'payment', None)
        if payment is None:
            return None
        return OrderPaymentSerializer(payment).data


class OrderLineSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1)
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class CreateOrderSerializer(serializers.Serializer):
    table_id = serializers.IntegerField(help_text="ID of the table being served")
    items = OrderLineSerializer(many=True, allow_empty=False)
    employee_id = serializers.IntegerField(required=False, allow_null=True,
                                           help_text="Waiter; defaults to the X-Employee-Id header")
    customer_name = serializers.CharField(required=False, allow_blank=True, default='')
    customer_phone = serializers.CharField(required=False, allow_blank=True, default='')
    discount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False, default=0)
    tax = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False, default=0)
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class UpdateOrderSerializer(serializers.Serializer):
    customer_name = serializers.CharField(required=False, allow_blank=True)
    customer_phone = serializers.CharField(required=False, allow_blank=True)
    discount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    tax = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=OrderStatus.choices, required=False)


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices)


class AddItemSerializer(OrderLineSerializer):
    pass


class OrderItemStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderItemStatus.choices)
