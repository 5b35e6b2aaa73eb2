from django.contrib import admin
from .models import StockLedgerEntry


@admin.register(StockLedgerEntry)
class StockLedgerEntryAdmin(admin.ModelAdmin):
    list_display = ['id', 'product', 'change_type', 'quantity_change', 'quantity_before',
                    'quantity_after', 'performed_by', 'order', 'created_at']
    list_filter = ['change_type', 'created_at']
    search_fields = ['product__name', 'reason']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
