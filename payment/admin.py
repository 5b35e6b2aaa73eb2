from django.contrib import admin
from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ['receipt_number', 'order', 'payment_method', 'amount_paid', 'change_given', 'payment_date']
    list_filter = ['payment_method', 'payment_date']
    search_fields = ['receipt_number', 'transaction_id']
    readonly_fields = ['receipt_number', 'change_given', 'created_at', 'updated_at']
