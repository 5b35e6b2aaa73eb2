from datetime import timedelta
from decimal import Decimal
from unittest import mock

import redis
from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from catalog.models import Category, Product
from inventory.models import StockChangeType
from inventory.services import adjust_stock
from orders.models import OrderStatus
from orders.services import create_order, update_order_status
from payment.services import create_payment
from staff.models import Employee
from tables.models import Table

from . import services
from .cache import ReportCache


class ReportCacheTests(TestCase):
    """Test the Redis report cache with a mocked client"""

    def setUp(self):
        patcher = mock.patch('reports.cache.redis.Redis')
        self.redis_class = patcher.start()
        self.addCleanup(patcher.stop)
        self.redis_client = self.redis_class.return_value

    def test_make_key_sorts_params(self):
        key = ReportCache.make_key('most-sold', {'limit': 5, 'end_date': '2024-01-31', 'start_date': None})

        self.assertEqual(key, 'report:most-sold:end_date=2024-01-31&limit=5')

    def test_miss_computes_and_stores(self):
        self.redis_client.get.return_value = None
        compute = mock.Mock(return_value={'total': '1.00'})

        report = ReportCache(timeout=60).get_or_compute('daily', {'date': '2024-01-01'}, compute)

        self.assertEqual(report, {'total': '1.00'})
        compute.assert_called_once_with()
        self.redis_client.setex.assert_called_once_with('report:daily:date=2024-01-01', 60, '{"total": "1.00"}')

    def test_hit_skips_compute(self):
        self.redis_client.get.return_value = '{"total": "2.00"}'
        compute = mock.Mock()

        report = ReportCache(timeout=60).get_or_compute('daily', {}, compute)

        self.assertEqual(report, {'total': '2.00'})
        compute.assert_not_called()

    def test_redis_failure_falls_back_to_compute(self):
        self.redis_client.get.side_effect = redis.ConnectionError("down")
        self.redis_client.setex.side_effect = redis.ConnectionError("down")

        with self.assertLogs('reports.cache', level='WARNING'):
            report = ReportCache(timeout=60).get_or_compute('daily', {}, lambda: {'total': '3.00'})

        self.assertEqual(report, {'total': '3.00'})

    def test_zero_timeout_disables_cache(self):
        report = ReportCache(timeout=0).get_or_compute('daily', {}, lambda: {'total': '4.00'})

        self.assertEqual(report, {'total': '4.00'})
        self.redis_client.get.assert_not_called()
        self.redis_client.setex.assert_not_called()


class ReportDataMixin:
    def create_sales(self):
        category = Category.objects.create(name="Mains", type='meal')
        drinks = Category.objects.create(name="Drinks", type='drink')
        self.burger = Product.objects.create(name="Burger", category=category, price=Decimal('10.00'))
        self.cola = Product.objects.create(name="Cola", category=drinks, price=Decimal('2.50'))
        adjust_stock(self.burger, 20, StockChangeType.RESTOCK)
        adjust_stock(self.cola, 20, StockChangeType.RESTOCK)
        self.table = Table.objects.create(number="1")
        self.waiter = Employee.objects.create(name="Sam", role='waiter')
        self.cashier = Employee.objects.create(name="Kim", role='cashier')

        # Paid: 2 burgers + 2 colas = 25.00, plus 2.00 tax
        paid = create_order(self.table.id, [
            {'product_id': self.burger.id, 'quantity': 2},
            {'product_id': self.cola.id, 'quantity': 2},
        ], employee=self.waiter, tax=Decimal('2.00'))
        create_payment(paid.id, 'cash', Decimal('30.00'), processed_by=self.cashier)

        # Cancelled: 1 burger
        cancelled = create_order(self.table.id, [{'product_id': self.burger.id, 'quantity': 1}],
                                 employee=self.waiter, discount=Decimal('1.00'))
        update_order_status(cancelled, OrderStatus.CANCELLED)

        # Completed without payment: 3 colas
        served = create_order(self.table.id, [{'product_id': self.cola.id, 'quantity': 3}])
        update_order_status(served, OrderStatus.COMPLETED)


class ReportServiceTests(ReportDataMixin, TestCase):
    def setUp(self):
        self.create_sales()
        self.today = timezone.localdate()

    def test_daily_sales(self):
        report = services.daily_sales()

        summary = report['summary']
        self.assertEqual(summary['total_orders'], 3)
        self.assertEqual(summary['completed_orders'], 2)
        self.assertEqual(summary['cancelled_orders'], 1)
        self.assertEqual(summary['total_revenue'], '34.50')
        self.assertEqual(summary['total_discount'], '1.00')
        self.assertEqual(summary['total_tax'], '2.00')
        self.assertEqual(summary['average_order_value'], '17.25')
        self.assertEqual(report['payments_by_method'], {'cash': '27.00'})
        self.assertEqual(report['top_selling_items'][0], {'name': "Cola", 'quantity': 5, 'revenue': '12.50'})

    def test_daily_sales_for_empty_day(self):
        report = services.daily_sales(self.today - timedelta(days=30))

        self.assertEqual(report['summary']['total_orders'], 0)
        self.assertEqual(report['summary']['average_order_value'], '0.00')

    def test_monthly_sales(self):
        report = services.monthly_sales(self.today.year, self.today.month)

        self.assertEqual(report['summary']['total_revenue'], '34.50')
        self.assertEqual(report['daily_breakdown'][str(self.today.day)], {'orders': 2, 'revenue': '34.50'})
        self.assertEqual(report['sales_by_category']['Drinks'], {'quantity': 5, 'revenue': '12.50'})

    def test_employee_performance(self):
        report = services.employee_performance(self.today, self.today)

        rows = {row['employee_name']: row for row in report['employees']}
        self.assertEqual(rows['Sam']['orders_handled'], 2)
        self.assertEqual(rows['Sam']['completed_orders'], 1)
        self.assertEqual(rows['Sam']['revenue_generated'], '27.00')
        self.assertEqual(rows['Sam']['items_sold'], 5)
        self.assertEqual(rows['Kim']['payments_processed'], 1)
        self.assertEqual(rows['Kim']['payments_total'], '30.00')

    def test_most_sold_items(self):
        report = services.most_sold_items(self.today, self.today, limit=1)

        self.assertEqual(len(report['items']), 1)
        top = report['items'][0]
        self.assertEqual(top['product_name'], "Cola")
        self.assertEqual(top['total_quantity_sold'], 5)
        self.assertEqual(top['times_ordered'], 2)
        self.assertEqual(top['average_quantity_per_order'], '2.50')

    def test_sales_by_category(self):
        report = services.sales_by_category(self.today, self.today)

        self.assertEqual(report['total_revenue'], '32.50')
        first = report['categories'][0]
        self.assertEqual(first['category_name'], "Mains")
        self.assertEqual(first['total_revenue'], '20.00')
        self.assertEqual(first['revenue_percentage'], '61.54')

    def test_revenue_over_time(self):
        report = services.revenue_over_time(self.today, self.today, 'monthly')

        self.assertEqual(report['periods'], [
            {'period': f"{self.today.year}-{self.today.month:02d}", 'orders': 2, 'revenue': '34.50'}
        ])


@override_settings(REPORT_CACHE_TIMEOUT=0)
class ReportAPITests(ReportDataMixin, APITestCase):
    """Test report API endpoints"""

    def setUp(self):
        self.client.defaults['HTTP_X_API_KEY'] = 'demo'
        self.create_sales()

    def test_daily_report(self):
        response = self.client.get(reverse('report_daily'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['summary']['total_revenue'], '34.50')

    def test_revenue_requires_dates(self):
        response = self.client.get(reverse('report_revenue'))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], "Start date and end date are required")

    def test_revenue_rejects_unknown_interval(self):
        today = timezone.localdate().isoformat()
        response = self.client.get(reverse('report_revenue'),
                                   {'start_date': today, 'end_date': today, 'interval': 'hourly'})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_monthly_rejects_bad_month(self):
        response = self.client.get(reverse('report_monthly'), {'month': 13})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_monthly_rejects_zero_month_and_year(self):
        response = self.client.get(reverse('report_monthly'), {'month': 0})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.get(reverse('report_monthly'), {'year': 0, 'month': 1})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_most_sold_limit(self):
        response = self.client.get(reverse('report_most_sold'), {'limit': 1})

        self.assertEqual(len(response.data['data']['items']), 1)

    def test_employees_and_categories(self):
        self.assertEqual(self.client.get(reverse('report_employees')).status_code, status.HTTP_200_OK)
        self.assertEqual(self.client.get(reverse('report_categories')).status_code, status.HTTP_200_OK)
