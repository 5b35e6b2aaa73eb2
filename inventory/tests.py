from decimal import Decimal

from django.core.exceptions import ValidationError as DjangoValidationError
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from catalog.models import Category, Product
from pos.exceptions import InsufficientStockError, ValidationError
from staff.models import Employee

from .models import StockChangeType, StockLedgerEntry
from .services import adjust_stock


class AdjustStockTests(TestCase):
    """Test stock changes and their ledger entries"""

    def setUp(self):
        category = Category.objects.create(name="Mains")
        self.product = Product.objects.create(name="Burger", category=category, price=Decimal('10.00'))
        self.employee = Employee.objects.create(name="Alex", role='manager')

    def test_restock_writes_one_entry(self):
        entry = adjust_stock(self.product, 5, StockChangeType.RESTOCK, "Delivery", employee=self.employee)

        self.assertEqual(self.product.quantity_in_stock, 5)
        self.assertEqual(StockLedgerEntry.objects.count(), 1)
        self.assertEqual(entry.quantity_before, 0)
        self.assertEqual(entry.quantity_after, 5)
        self.assertEqual(entry.performed_by, self.employee)
        self.assertTrue(entry.is_increase)

    def test_sale_cannot_go_below_zero(self):
        adjust_stock(self.product, 2, StockChangeType.RESTOCK)

        with self.assertRaises(InsufficientStockError):
            adjust_stock(self.product, -3, StockChangeType.SALE)

        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity_in_stock, 2)
        self.assertEqual(StockLedgerEntry.objects.count(), 1)

    def test_sale_of_exact_stock(self):
        adjust_stock(self.product, 2, StockChangeType.RESTOCK)
        entry = adjust_stock(self.product, -2, StockChangeType.SALE)

        self.assertEqual(entry.quantity_after, 0)
        self.assertTrue(self.product.is_out_of_stock)

    def test_zero_delta_is_rejected(self):
        with self.assertRaises(ValidationError):
            adjust_stock(self.product, 0, StockChangeType.ADJUSTMENT)

    def test_unknown_change_type_is_rejected(self):
        with self.assertRaises(ValidationError):
            adjust_stock(self.product, 1, 'theft')

    def test_low_stock_warning_is_logged(self):
        adjust_stock(self.product, 12, StockChangeType.RESTOCK)

        with self.assertLogs('inventory.services', level='WARNING') as logs:
            adjust_stock(self.product, -3, StockChangeType.SALE)

        self.assertIn("low on stock", logs.output[0])

    def test_entries_are_immutable(self):
        entry = adjust_stock(self.product, 1, StockChangeType.RESTOCK)

        entry.reason = "Edited"
        with self.assertRaises(DjangoValidationError):
            entry.save()
        with self.assertRaises(DjangoValidationError):
            entry.delete()
        self.assertEqual(StockLedgerEntry.objects.count(), 1)

    def test_inconsistent_entry_is_rejected(self):
        with self.assertRaises(DjangoValidationError):
            StockLedgerEntry.objects.create(
                product=self.product, change_type=StockChangeType.ADJUSTMENT,
                quantity_change=2, quantity_before=0, quantity_after=3
            )


class InventoryAPITests(APITestCase):
    """Test stock ledger API endpoints"""

    def setUp(self):
        self.client.defaults['HTTP_X_API_KEY'] = 'demo'
        category = Category.objects.create(name="Drinks", type='drink')
        self.cola = Product.objects.create(name="Cola", category=category, price=Decimal('2.00'), reorder_level=5)
        self.water = Product.objects.create(name="Water", category=category, price=Decimal('1.50'), reorder_level=5)
        adjust_stock(self.cola, 20, StockChangeType.RESTOCK)
        adjust_stock(self.cola, -4, StockChangeType.WASTAGE, "Expired")
        adjust_stock(self.water, 3, StockChangeType.RESTOCK)

    def test_list_filters_by_change_type(self):
        response = self.client.get(reverse('ledger_list'), {'change_type': 'restock'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 2)

    def test_list_with_bad_date(self):
        response = self.client.get(reverse('ledger_list'), {'start_date': 'yesterday'})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_logs_by_product(self):
        response = self.client.get(reverse('ledger_by_product', kwargs={'product_id': self.cola.id}))

        self.assertEqual(response.data['count'], 2)
        self.assertEqual(response.data['product']['quantity_in_stock'], 16)

    def test_logs_by_invalid_type(self):
        response = self.client.get(reverse('ledger_by_type', kwargs={'change_type': 'theft'}))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_wastage(self):
        response = self.client.get(reverse('inventory_wastage'))

        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['total_wasted'], 4)

    def test_statistics(self):
        response = self.client.get(reverse('inventory_statistics'))

        data = response.data['data']
        self.assertEqual(data['total_entries'], 3)
        self.assertEqual(data['by_type']['restock'], 2)
        self.assertEqual(data['wastage_last_7_days']['quantity'], 4)

    def test_alerts(self):
        response = self.client.get(reverse('inventory_alerts'))

        self.assertEqual(response.data['count'], 1)
        alert = response.data['data'][0]
        self.assertEqual(alert['name'], "Water")
        self.assertEqual(alert['shortage'], 2)
        self.assertEqual(alert['status'], 'LOW_STOCK')
