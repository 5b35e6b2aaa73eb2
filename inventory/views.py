import logging
from datetime import timedelta

from django.db.models import Count, Sum
from django.shortcuts import get_object_or_404
from django.utils import timezone
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework.views import APIView

from catalog.models import Product
from pos.exceptions import ValidationError
from pos.responses import success
from pos.utils import parse_date

from .models import StockChangeType, StockLedgerEntry
from .serializers import StockAlertSerializer, StockLedgerEntrySerializer

logger = logging.getLogger(__name__)


def ledger_entries():
    return StockLedgerEntry.objects.select_related('product', 'performed_by')


class LedgerListView(APIView):
    @extend_schema(
        summary="List stock ledger entries",
        parameters=[
            OpenApiParameter('product_id', OpenApiTypes.INT),
            OpenApiParameter('change_type', OpenApiTypes.STR, enum=StockChangeType.values),
            OpenApiParameter('employee_id', OpenApiTypes.INT),
            OpenApiParameter('start_date', OpenApiTypes.DATE),
            OpenApiParameter('end_date', OpenApiTypes.DATE),
        ],
        responses={200: StockLedgerEntrySerializer(many=True)},
    )
    def get(self, request):
        params = request.query_params
        entries = ledger_entries()
        if params.get('product_id'):
            entries = entries.filter(product_id=params['product_id'])
        if params.get('change_type'):
            entries = entries.filter(change_type=params['change_type'])
        if params.get('employee_id'):
            entries = entries.filter(performed_by_id=params['employee_id'])
        if params.get('start_date'):
            entries = entries.filter(created_at__date__gte=parse_date(params['start_date'], 'start_date'))
        if params.get('end_date'):
            entries = entries.filter(created_at__date__lte=parse_date(params['end_date'], 'end_date'))
        return success(StockLedgerEntrySerializer(entries, many=True).data)


class LedgerDetailView(APIView):
    @extend_schema(summary="Get a stock ledger entry", responses={200: StockLedgerEntrySerializer})
    def get(self, request, entry_id):
        entry = get_object_or_404(ledger_entries(), id=entry_id)
        return success(StockLedgerEntrySerializer(entry).data)


class ProductLedgerView(APIView):
    @extend_schema(summary="Stock history of a product", responses={200: StockLedgerEntrySerializer(many=True)})
    def get(self, request, product_id):
        product = get_object_or_404(Product, id=product_id)
        entries = ledger_entries().filter(product=product)
        return success(StockLedgerEntrySerializer(entries, many=True).data,
                       product={'id': product.id, 'name': product.name,
                                'quantity_in_stock': product.quantity_in_stock})


class LedgerByTypeView(APIView):
    @extend_schema(summary="Stock ledger entries of one change type", responses={200: StockLedgerEntrySerializer(many=True)})
    def get(self, request, change_type):
        if change_type not in StockChangeType.values:
            raise ValidationError(f"Invalid change type. Must be one of: {', '.join(StockChangeType.values)}")
        entries = ledger_entries().filter(change_type=change_type)
        return success(StockLedgerEntrySerializer(entries, many=True).data)


class WastageView(APIView):
    @extend_schema(summary="Wastage recorded in the last 7 days", responses={200: StockLedgerEntrySerializer(many=True)})
    def get(self, request):
        since = timezone.now() - timedelta(days=7)
        entries = ledger_entries().filter(change_type=StockChangeType.WASTAGE, created_at__gte=since)
        total = entries.aggregate(total=Sum('quantity_change'))['total'] or 0
        return success(StockLedgerEntrySerializer(entries, many=True).data, total_wasted=abs(total))


class RestockHistoryView(APIView):
    @extend_schema(summary="Restock history", responses={200: StockLedgerEntrySerializer(many=True)})
    def get(self, request):
        entries = ledger_entries().filter(change_type=StockChangeType.RESTOCK)
        return success(StockLedgerEntrySerializer(entries, many=True).data)


class InventoryStatisticsView(APIView):
    @extend_schema(summary="Stock ledger statistics", responses={200: OpenApiTypes.OBJECT})
    def get(self, request):
        entries = StockLedgerEntry.objects.all()
        since = timezone.now() - timedelta(days=7)
        wastage = entries.filter(change_type=StockChangeType.WASTAGE, created_at__gte=since)
        by_type = {change_type: 0 for change_type in StockChangeType.values}
        for row in entries.values('change_type').annotate(count=Count('id')).order_by():
            by_type[row['change_type']] = row['count']
        return success({
            'total_entries': entries.count(),
            'today_entries': entries.filter(created_at__date=timezone.localdate()).count(),
            'wastage_last_7_days': {
                'entries': wastage.count(),
                'quantity': abs(wastage.aggregate(total=Sum('quantity_change'))['total'] or 0),
            },
            'by_type': by_type,
        })


class StockAlertsView(APIView):
    @extend_schema(summary="Low stock alerts", responses={200: StockAlertSerializer(many=True)})
    def get(self, request):
        products = Product.objects.select_related('category').low_stock().order_by('quantity_in_stock', 'name')
        data = StockAlertSerializer(products, many=True).data
        out_of_stock = sum(1 for alert in data if alert['status'] == 'OUT_OF_STOCK')
        if data:
            logger.info("%d product(s) at or below reorder level, %d out of stock", len(data), out_of_stock)
        return success(data, out_of_stock=out_of_stock)
