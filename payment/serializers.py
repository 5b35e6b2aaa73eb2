from rest_framework import serializers

from orders.serializers import OrderItemSerializer, OrderTableSerializer
from orders.models import Order
from staff.serializers import EmployeeSummarySerializer

from .models import Payment, PaymentMethod


class PaymentOrderSerializer(serializers.ModelSerializer):
    table = OrderTableSerializer(read_only=True)

    class Meta:
        model = Order
        fields = ['id', 'table', 'customer_name', 'total_amount', 'discount', 'tax',
                  'final_amount', 'status', 'order_date']


class PaymentSerializer(serializers.ModelSerializer):
    order = PaymentOrderSerializer(read_only=True)
    processed_by = EmployeeSummarySerializer(read_only=True)

    class Meta:
        model = Payment
        fields = ['id', 'order', 'payment_method', 'amount_paid', 'change_given', 'payment_date',
                  'processed_by', 'transaction_id', 'receipt_number', 'notes',
                  'created_at', 'updated_at']
        read_only_fields = fields


class CreatePaymentSerializer(serializers.Serializer):
    order_id = serializers.IntegerField(help_text="Order being settled")
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices)
    amount_paid = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0,
                                           help_text="Amount tendered by the customer")
    processed_by = serializers.IntegerField(required=False, allow_null=True,
                                            help_text="Cashier; defaults to the X-Employee-Id header")
    transaction_id = serializers.CharField(required=False, allow_blank=True, default='', max_length=100)
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class UpdatePaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payment
        fields = ['transaction_id', 'notes']


class ReceiptSerializer(serializers.Serializer):
    receipt_number = serializers.CharField()
    payment_date = serializers.DateTimeField()
    order_id = serializers.IntegerField(source='order.id')
    table = serializers.CharField(source='order.table.number')
    customer_name = serializers.CharField(source='order.customer_name')
    items = OrderItemSerializer(source='order.items', many=True)
    subtotal = serializers.DecimalField(source='order.total_amount', max_digits=10, decimal_places=2)
    discount = serializers.DecimalField(source='order.discount', max_digits=10, decimal_places=2)
    tax = serializers.DecimalField(source='order.tax', max_digits=10, decimal_places=2)
    total = serializers.DecimalField(source='order.final_amount', max_digits=10, decimal_places=2)
    amount_paid = serializers.DecimalField(max_digits=10, decimal_places=2)
    change_given = serializers.DecimalField(max_digits=10, decimal_places=2)
    payment_method = serializers.CharField()
    cashier = serializers.CharField(source='processed_by.name', default=None)
