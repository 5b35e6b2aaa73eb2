import logging
from decimal import Decimal

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

from . import services
from .models import Payment, PaymentMethod
from .serializers import (
    CreatePaymentSerializer, PaymentSerializer, ReceiptSerializer, UpdatePaymentSerializer
)

logger = logging.getLogger(__name__)


def payments():
    return Payment.objects.select_related('order__table', 'processed_by')


def total_of(queryset):
    return queryset.aggregate(total=Sum('amount_paid'))['total'] or Decimal('0')


class PaymentListView(APIView):
    @extend_schema(
        summary="List payments",
        parameters=[
            OpenApiParameter('payment_method', OpenApiTypes.STR, enum=PaymentMethod.values),
            OpenApiParameter('date', OpenApiTypes.DATE),
            OpenApiParameter('employee_id', OpenApiTypes.INT),
        ],
        responses={200: PaymentSerializer(many=True)},
    )
    def get(self, request):
        params = request.query_params
        queryset = payments()
        if params.get('payment_method'):
            queryset = queryset.filter(payment_method=params['payment_method'])
        if params.get('date'):
            queryset = queryset.filter(payment_date__date=parse_date(params['date'], 'date'))
        if params.get('employee_id'):
            queryset = queryset.filter(processed_by_id=params['employee_id'])
        return success(PaymentSerializer(queryset, many=True).data)

    @extend_schema(
        summary="Take payment for an order",
        description="Record the payment, compute change, complete the order and free its table.",
        request=CreatePaymentSerializer,
        responses={201: PaymentSerializer},
        examples=[
            OpenApiExample(
                'Cash Payment Example',
                summary='Cash payment with change',
                value={'order_id': 1, 'payment_method': 'cash', 'amount_paid': '25.00'}
            )
        ]
    )
    def post(self, request):
        serializer = CreatePaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        processed_by = resolve_employee(data.pop('processed_by', None), default=acting_employee(request))
        payment = services.create_payment(processed_by=processed_by, **data)
        return created(PaymentSerializer(payments().get(pk=payment.pk)).data, "Payment processed successfully")


class DailyPaymentsView(APIView):
    @extend_schema(summary="Today's payments", responses={200: PaymentSerializer(many=True)})
    def get(self, request):
        queryset = payments().filter(payment_date__date=timezone.localdate())
        return success(PaymentSerializer(queryset, many=True).data, total=f"{total_of(queryset):.2f}")


class PaymentStatisticsView(APIView):
    @extend_schema(summary="Payment statistics", responses={200: OpenApiTypes.OBJECT})
    def get(self, request):
        queryset = Payment.objects.all()
        today = queryset.filter(payment_date__date=timezone.localdate())
        by_method = {method: {'count': 0, 'total': '0.00'} for method in PaymentMethod.values}
        rows = queryset.values('payment_method').annotate(count=Count('id'), total=Sum('amount_paid')).order_by()
        for row in rows:
            by_method[row['payment_method']] = {'count': row['count'], 'total': f"{row['total']:.2f}"}
        return success({
            'total_payments': queryset.count(),
            'total_amount': f"{total_of(queryset):.2f}",
            'today_payments': today.count(),
            'today_amount': f"{total_of(today):.2f}",
            'by_method': by_method,
        })


class PaymentsByMethodView(APIView):
    @extend_schema(summary="Payments with one method", responses={200: PaymentSerializer(many=True)})
    def get(self, request, method):
        if method not in PaymentMethod.values:
            raise ValidationError(f"Invalid payment method. Must be one of: {', '.join(PaymentMethod.values)}")
        queryset = payments().filter(payment_method=method)
        return success(PaymentSerializer(queryset, many=True).data, total=f"{total_of(queryset):.2f}")


class PaymentByReceiptView(APIView):
    @extend_schema(summary="Find a payment by receipt number", responses={200: PaymentSerializer})
    def get(self, request, receipt_number):
        payment = get_object_or_404(payments(), receipt_number=receipt_number)
        return success(PaymentSerializer(payment).data)


class PaymentDetailView(APIView):
    @extend_schema(summary="Get a payment", responses={200: PaymentSerializer})
    def get(self, request, payment_id):
        return success(PaymentSerializer(get_object_or_404(payments(), id=payment_id)).data)

    @extend_schema(
        summary="Update a payment",
        description="Only the notes and the external transaction ID can be changed.",
        request=UpdatePaymentSerializer,
        responses={200: PaymentSerializer},
    )
    def put(self, request, payment_id):
        payment = get_object_or_404(payments(), id=payment_id)
        serializer = UpdatePaymentSerializer(payment, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return success(PaymentSerializer(payment).data, message="Payment updated successfully")

    @extend_schema(summary="Delete a payment", responses={200: OpenApiTypes.OBJECT})
    def delete(self, request, payment_id):
        payment = get_object_or_404(Payment, id=payment_id)
        payment.delete()
        logger.warning("Payment %s for order %s deleted", payment.receipt_number, payment.order_id)
        return success(message="Payment deleted successfully")


class ReceiptView(APIView):
    @extend_schema(summary="Printable receipt for a payment", responses={200: ReceiptSerializer})
    def get(self, request, payment_id):
        payment = get_object_or_404(
            Payment.objects.select_related('order__table', 'processed_by').prefetch_related('order__items__product'),
            id=payment_id,
        )
        return success(ReceiptSerializer(payment).data)
