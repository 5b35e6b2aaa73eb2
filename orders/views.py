from django.db.models import Count, Sum
from django.shortcuts import get_object_or_404
from django.utils import timezone
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema
from rest_framework.views import APIView

from pos.authentication import acting_employee
from pos.exceptions import ValidationError
from pos.responses import created, success
from pos.utils import parse_date
from staff.services import resolve_employee
from tables.models import Table

from . import services
from .models import Order, OrderStatus
from .serializers import (
    AddItemSerializer, CreateOrderSerializer, OrderItemSerializer,
    OrderItemStatusSerializer, OrderSerializer, OrderStatusSerializer,
    UpdateOrderSerializer
)


class OrderListView(APIView):
    @extend_schema(
        summary="List orders",
        parameters=[
            OpenApiParameter('status', OpenApiTypes.STR, enum=OrderStatus.values),
            OpenApiParameter('date', OpenApiTypes.DATE),
            OpenApiParameter('table_id', OpenApiTypes.INT),
            OpenApiParameter('employee_id', OpenApiTypes.INT),
        ],
        responses={200: OrderSerializer(many=True)},
    )
    def get(self, request):
        params = request.query_params
        orders = services.hydrated_orders()
        if params.get('status'):
            orders = orders.filter(status=params['status'])
        if params.get('date'):
            orders = orders.filter(order_date__date=parse_date(params['date'], 'date'))
        if params.get('table_id'):
            orders = orders.filter(table_id=params['table_id'])
        if params.get('employee_id'):
            orders = orders.filter(employee_id=params['employee_id'])
        return success(OrderSerializer(orders, many=True).data)

    @extend_schema(
        summary="Create an order",
        description="Open an order on a table. Stock is taken for every line and the table is marked occupied.",
        request=CreateOrderSerializer,
        responses={201: OrderSerializer},
        examples=[
            OpenApiExample(
                'Create Order Example',
                summary='Two burgers for table 1',
                value={'table_id': 1, 'items': [{'product_id': 1, 'quantity': 2}], 'tax': '2.00'}
            )
        ]
    )
    def post(self, request):
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        employee = resolve_employee(data.pop('employee_id', None), default=acting_employee(request))
        order = services.create_order(employee=employee, **data)
        return created(OrderSerializer(order).data, "Order created successfully")


class OrderStatisticsView(APIView):
    @extend_schema(summary="Order statistics", responses={200: OpenApiTypes.OBJECT})
    def get(self, request):
        today = timezone.localdate()
        by_status = {status: 0 for status in OrderStatus.values}
        for row in Order.objects.values('status').annotate(count=Count('id')).order_by():
            by_status[row['status']] = row['count']
        today_revenue = Order.objects.filter(
            status=OrderStatus.COMPLETED, order_date__date=today
        ).aggregate(total=Sum('final_amount'))['total'] or 0
        return success({
            'total': sum(by_status.values()),
            'by_status': by_status,
            'today_orders': Order.objects.filter(order_date__date=today).count(),
            'today_revenue': f"{today_revenue:.2f}",
        })


class OrdersByStatusView(APIView):
    @extend_schema(summary="List orders in one status", responses={200: OrderSerializer(many=True)})
    def get(self, request, status):
        if status not in OrderStatus.values:
            raise ValidationError(f"Invalid status. Must be one of: {', '.join(OrderStatus.values)}")
        orders = services.hydrated_orders().filter(status=status)
        return success(OrderSerializer(orders, many=True).data)


class TableOrdersView(APIView):
    @extend_schema(summary="Active orders of a table", responses={200: OrderSerializer(many=True)})
    def get(self, request, table_id):
        table = get_object_or_404(Table, id=table_id)
        orders = services.hydrated_orders().filter(table=table).active()
        return success(OrderSerializer(orders, many=True).data)


class OrderDetailView(APIView):
    @extend_schema(summary="Get an order", responses={200: OrderSerializer})
    def get(self, request, order_id):
        return success(OrderSerializer(services.get_order(order_id)).data)

    @extend_schema(
        summary="Update an order",
        description="Change customer details, discount, tax, notes or status. Only pending or "
                    "confirmed orders can be changed, except that any order can be cancelled.",
        request=UpdateOrderSerializer,
        responses={200: OrderSerializer},
    )
    def put(self, request, order_id):
        serializer = UpdateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = services.update_order(services.get_order(order_id), **serializer.validated_data)
        return success(OrderSerializer(order).data, message="Order updated successfully")

    @extend_schema(summary="Delete a pending or cancelled order", responses={200: OpenApiTypes.OBJECT})
    def delete(self, request, order_id):
        services.delete_order(services.get_order(order_id))
        return success(message="Order deleted successfully")


class OrderStatusView(APIView):
    @extend_schema(
        summary="Change order status",
        request=OrderStatusSerializer,
        responses={200: OrderSerializer},
        examples=[OpenApiExample('Serve Example', value={'status': 'served'})]
    )
    def patch(self, request, order_id):
        serializer = OrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        status = serializer.validated_data['status']
        services.update_order_status(services.get_order(order_id), status)
        order = services.get_order(order_id)
        return success(OrderSerializer(order).data, message=f"Order status updated to {status}")


class OrderItemsView(APIView):
    @extend_schema(
        summary="Add an item to an order",
        request=AddItemSerializer,
        responses={201: OrderItemSerializer},
        examples=[OpenApiExample('Add Item Example', value={'product_id': 1, 'quantity': 1, 'notes': 'No onions'})]
    )
    def post(self, request, order_id):
        serializer = AddItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        item = services.add_item(order_id, data['product_id'], data['quantity'], data['notes'],
                                 employee=acting_employee(request))
        order = services.get_order(order_id)
        return created({'item': OrderItemSerializer(item).data, 'order': OrderSerializer(order).data},
                       "Item added to order successfully")


class OrderItemDetailView(APIView):
    @extend_schema(summary="Remove an item from an order", responses={200: OrderSerializer})
    def delete(self, request, order_id, item_id):
        services.remove_item(order_id, item_id, employee=acting_employee(request))
        order = services.get_order(order_id)
        return success(OrderSerializer(order).data, message="Item removed from order successfully")


class OrderItemStatusView(APIView):
    @extend_schema(summary="Change the kitchen status of an order item", request=OrderItemStatusSerializer,
                   responses={200: OrderItemSerializer})
    def patch(self, request, order_id, item_id):
        serializer = OrderItemStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        item = services.update_item_status(services.get_order(order_id), item_id,
                                           serializer.validated_data['status'])
        return success(OrderItemSerializer(item).data, message=f"Item status updated to {item.status}")
