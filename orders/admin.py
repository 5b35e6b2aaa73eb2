from django.contrib import admin
from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ['product', 'quantity', 'unit_price', 'subtotal']


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['id', 'table', 'employee', 'status', 'order_date', 'final_amount']
    list_filter = ['status', 'order_date']
    search_fields = ['customer_name', 'table__number']
    readonly_fields = ['total_amount', 'final_amount', 'created_at', 'updated_at']
    inlines = [OrderItemInline]


@admin.register(OrderItem)
class OrderItemAdmin(admin.ModelAdmin):
    list_display = ['order', 'product', 'quantity', 'unit_price', 'subtotal', 'status']
    list_filter = ['status', 'order__status']
    search_fields = ['product__name']
