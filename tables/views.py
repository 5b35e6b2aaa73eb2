import logging

from django.db.models import Count, Sum
from django.shortcuts import get_object_or_404
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework.views import APIView

from orders.models import Order
from orders.serializers import OrderSerializer
from pos.exceptions import ConflictError, ValidationError
from pos.responses import created, success

from .models import Table, TableStatus
from .serializers import TableSerializer, TableStatusSerializer

logger = logging.getLogger(__name__)


def check_number_is_unique(number, table=None):
    tables = Table.objects.filter(number=number)
    if table is not None:
        tables = tables.exclude(pk=table.pk)
    if tables.exists():
        raise ConflictError(f"Table number {number} already exists")


class TableListView(APIView):
    @extend_schema(
        summary="List tables",
        parameters=[
            OpenApiParameter('status', OpenApiTypes.STR, enum=TableStatus.values),
            OpenApiParameter('location', OpenApiTypes.STR),
        ],
        responses={200: TableSerializer(many=True)},
    )
    def get(self, request):
        tables = Table.objects.all()
        if request.query_params.get('status'):
            tables = tables.filter(status=request.query_params['status'])
        if request.query_params.get('location'):
            tables = tables.filter(location=request.query_params['location'])
        return success(TableSerializer(tables, many=True).data)

    @extend_schema(summary="Create a table", request=TableSerializer, responses={201: TableSerializer})
    def post(self, request):
        serializer = TableSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        check_number_is_unique(serializer.validated_data['number'])
        table = serializer.save()
        return created(TableSerializer(table).data, "Table created successfully")


class AvailableTablesView(APIView):
    @extend_schema(
        summary="List free tables",
        parameters=[OpenApiParameter('capacity', OpenApiTypes.INT, description='Minimum number of seats')],
        responses={200: TableSerializer(many=True)},
    )
    def get(self, request):
        tables = Table.objects.filter(status=TableStatus.FREE)
        capacity = request.query_params.get('capacity')
        if capacity:
            if not capacity.isdigit():
                raise ValidationError("capacity must be a positive integer")
            tables = tables.filter(capacity__gte=int(capacity))
        return success(TableSerializer(tables.order_by('capacity', 'number'), many=True).data)


class TableStatisticsView(APIView):
    @extend_schema(summary="Table statistics", responses={200: OpenApiTypes.OBJECT})
    def get(self, request):
        by_status = {status: 0 for status in TableStatus.values}
        for row in Table.objects.values('status').annotate(count=Count('id')).order_by():
            by_status[row['status']] = row['count']
        return success({
            'total': sum(by_status.values()),
            'by_status': by_status,
            'total_capacity': Table.objects.aggregate(total=Sum('capacity'))['total'] or 0,
        })


class TableDetailView(APIView):
    @extend_schema(summary="Get a table with its active orders", responses={200: TableSerializer})
    def get(self, request, table_id):
        table = get_object_or_404(Table, id=table_id)
        data = TableSerializer(table).data
        active_orders = (
            Order.objects.filter(table=table).active()
            .select_related('table', 'employee').prefetch_related('items__product')
        )
        data['active_orders'] = OrderSerializer(active_orders, many=True).data
        return success(data)

    @extend_schema(summary="Update a table", request=TableSerializer, responses={200: TableSerializer})
    def put(self, request, table_id):
        table = get_object_or_404(Table, id=table_id)
        serializer = TableSerializer(table, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        if 'number' in serializer.validated_data:
            check_number_is_unique(serializer.validated_data['number'], table)
        serializer.save()
        return success(serializer.data, message="Table updated successfully")

    @extend_schema(summary="Delete a table", responses={200: OpenApiTypes.OBJECT})
    def delete(self, request, table_id):
        table = get_object_or_404(Table, id=table_id)
        if table.orders.exists():
            raise ConflictError("Cannot delete table with existing orders")
        table.delete()
        logger.info("Table %s deleted", table.number)
        return success(message="Table deleted successfully")


def require_no_active_orders(table):
    active = table.orders.active().count()
    if active:
        raise ValidationError(f"Cannot free table with {active} active order(s)")


class TableStatusView(APIView):
    @extend_schema(summary="Set table status", request=TableStatusSerializer, responses={200: TableSerializer})
    def patch(self, request, table_id):
        serializer = TableStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        table = get_object_or_404(Table, id=table_id)
        if serializer.validated_data['status'] == TableStatus.FREE:
            require_no_active_orders(table)
        table.status = serializer.validated_data['status']
        table.save(update_fields=['status', 'updated_at'])
        return success(TableSerializer(table).data, message=f"Table status updated to {table.status}")


class OccupyTableView(APIView):
    @extend_schema(summary="Mark a free table occupied", request=None, responses={200: TableSerializer})
    def patch(self, request, table_id):
        table = get_object_or_404(Table, id=table_id)
        if not table.occupy():
            raise ValidationError(f"Table is not available (current status: {table.status})")
        return success(TableSerializer(table).data, message="Table marked as occupied")


class FreeTableView(APIView):
    @extend_schema(summary="Mark a table free", request=None, responses={200: TableSerializer})
    def patch(self, request, table_id):
        table = get_object_or_404(Table, id=table_id)
        require_no_active_orders(table)
        table.free()
        return success(TableSerializer(table).data, message="Table marked as free")
