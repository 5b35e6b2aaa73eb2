from rest_framework import serializers

from .models import StockLedgerEntry


class StockLedgerEntrySerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    performed_by_name = serializers.CharField(source='performed_by.name', read_only=True, default=None)

    class Meta:
        model = StockLedgerEntry
        fields = ['id', 'product', 'product_name', 'change_type', 'quantity_change',
                  'quantity_before', 'quantity_after', 'reason', 'performed_by',
                  'performed_by_name', 'order', 'created_at']
        read_only_fields = fields


class StockAlertSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField()
    category = serializers.CharField(source='category.name')
    quantity_in_stock = serializers.IntegerField()
    reorder_level = serializers.IntegerField()
    unit = serializers.CharField()
    shortage = serializers.SerializerMethodField()
    status = serializers.SerializerMethodField()

    def get_shortage(self, product) -> int:
        return max(0, product.reorder_level - product.quantity_in_stock)

    def get_status(self, product) -> str:
        return 'OUT_OF_STOCK' if product.is_out_of_stock else 'LOW_STOCK'
