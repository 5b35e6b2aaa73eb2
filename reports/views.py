from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework.views import APIView

from pos.exceptions import ValidationError
from pos.responses import success
from pos.utils import parse_date, parse_int

from . import services
from .cache import ReportCache

DATE_RANGE_PARAMETERS = [
    OpenApiParameter('start_date', OpenApiTypes.DATE),
    OpenApiParameter('end_date', OpenApiTypes.DATE),
]


def date_range(params):
    start_date = parse_date(params['start_date'], 'start_date') if params.get('start_date') else None
    end_date = parse_date(params['end_date'], 'end_date') if params.get('end_date') else None
    if start_date and end_date and start_date > end_date:
        raise ValidationError("start_date must not be after end_date")
    return start_date, end_date


class ReportView(APIView):
    """Base view for cached reports."""
    report_name = None

    def get_report(self, params):
        raise NotImplementedError

    def get(self, request):
        params = {key: request.query_params.get(key) for key in request.query_params}
        report = ReportCache().get_or_compute(self.report_name, params, lambda: self.get_report(params))
        return success(report)


class DailySalesReportView(ReportView):
    report_name = 'daily'

    @extend_schema(summary="Daily sales report", parameters=[OpenApiParameter('date', OpenApiTypes.DATE)],
                   responses={200: OpenApiTypes.OBJECT})
    def get(self, request):
        return super().get(request)

    def get_report(self, params):
        day = parse_date(params['date'], 'date') if params.get('date') else None
        return services.daily_sales(day)


class MonthlySalesReportView(ReportView):
    report_name = 'monthly'

    @extend_schema(
        summary="Monthly sales report",
        parameters=[OpenApiParameter('year', OpenApiTypes.INT), OpenApiParameter('month', OpenApiTypes.INT)],
        responses={200: OpenApiTypes.OBJECT},
    )
    def get(self, request):
        return super().get(request)

    def get_report(self, params):
        return services.monthly_sales(parse_int(params.get('year'), 'year'), parse_int(params.get('month'), 'month'))


class EmployeePerformanceReportView(ReportView):
    report_name = 'employees'

    @extend_schema(
        summary="Employee performance report",
        parameters=DATE_RANGE_PARAMETERS + [OpenApiParameter('employee_id', OpenApiTypes.INT)],
        responses={200: OpenApiTypes.OBJECT},
    )
    def get(self, request):
        return super().get(request)

    def get_report(self, params):
        start_date, end_date = date_range(params)
        return services.employee_performance(start_date, end_date, parse_int(params.get('employee_id'), 'employee_id'))


class MostSoldItemsReportView(ReportView):
    report_name = 'most-sold'

    @extend_schema(
        summary="Most sold items",
        parameters=DATE_RANGE_PARAMETERS + [OpenApiParameter('limit', OpenApiTypes.INT, default=20)],
        responses={200: OpenApiTypes.OBJECT},
    )
    def get(self, request):
        return super().get(request)

    def get_report(self, params):
        start_date, end_date = date_range(params)
        limit = parse_int(params.get('limit'), 'limit', default=20)
        if limit < 1:
            raise ValidationError("limit must be a positive integer")
        return services.most_sold_items(start_date, end_date, limit)


class SalesByCategoryReportView(ReportView):
    report_name = 'categories'

    @extend_schema(summary="Sales by category", parameters=DATE_RANGE_PARAMETERS,
                   responses={200: OpenApiTypes.OBJECT})
    def get(self, request):
        return super().get(request)

    def get_report(self, params):
        return services.sales_by_category(*date_range(params))


class RevenueOverTimeReportView(ReportView):
    report_name = 'revenue'

    @extend_schema(
        summary="Revenue over time",
        description="Completed-order revenue grouped by day, week (starting Sunday) or month.",
        parameters=[
            OpenApiParameter('start_date', OpenApiTypes.DATE, required=True),
            OpenApiParameter('end_date', OpenApiTypes.DATE, required=True),
            OpenApiParameter('interval', OpenApiTypes.STR, enum=services.REVENUE_INTERVALS, default='daily'),
        ],
        responses={200: OpenApiTypes.OBJECT},
    )
    def get(self, request):
        return super().get(request)

    def get_report(self, params):
        start_date, end_date = date_range(params)
        return services.revenue_over_time(start_date, end_date, params.get('interval') or 'daily')
