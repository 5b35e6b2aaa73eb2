from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from inventory.models import StockChangeType, StockLedgerEntry
from inventory.services import adjust_stock
from orders.models import Order, OrderItem
from staff.models import Employee
from tables.models import Table

from .models import Category, Product


class ProductModelTests(TestCase):
    def setUp(self):
        self.category = Category.objects.create(name="Mains", type='meal')

    def test_profit_margin(self):
        product = Product.objects.create(
            name="Burger", category=self.category, price=Decimal('10.00'), cost_price=Decimal('4.00')
        )
        self.assertEqual(product.profit_margin, Decimal('150.00'))

    def test_profit_margin_without_cost(self):
        product = Product.objects.create(name="Burger", category=self.category, price=Decimal('10.00'))
        self.assertEqual(product.profit_margin, Decimal('0.00'))

    def test_stock_flags(self):
        product = Product.objects.create(
            name="Burger", category=self.category, price=Decimal('10.00'), reorder_level=5
        )
        self.assertTrue(product.is_out_of_stock)
        self.assertTrue(product.is_low_stock)

        adjust_stock(product, 6, StockChangeType.RESTOCK)
        self.assertFalse(product.is_out_of_stock)
        self.assertFalse(product.is_low_stock)
        self.assertEqual(list(Product.objects.low_stock()), [])


class CategoryAPITests(APITestCase):
    """Test category API endpoints"""

    def setUp(self):
        self.client.defaults['HTTP_X_API_KEY'] = 'demo'
        self.category = Category.objects.create(name="Drinks", type='drink')

    def test_create_category(self):
        response = self.client.post(reverse('category_list'), {'name': "Desserts", 'type': 'dessert'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Category.objects.count(), 2)

    def test_create_category_with_invalid_type(self):
        response = self.client.post(reverse('category_list'), {'name': "Snacks", 'type': 'snack'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'validation_error')

    def test_delete_category_with_products_conflicts(self):
        Product.objects.create(name="Cola", category=self.category, price=Decimal('2.00'))

        response = self.client.delete(reverse('category_detail', kwargs={'category_id': self.category.id}))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'conflict')
        self.assertTrue(Category.objects.filter(id=self.category.id).exists())

    def test_delete_empty_category(self):
        response = self.client.delete(reverse('category_detail', kwargs={'category_id': self.category.id}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Category.objects.exists())

    def test_deactivate_category(self):
        response = self.client.patch(reverse('category_deactivate', kwargs={'category_id': self.category.id}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.category.refresh_from_db()
        self.assertFalse(self.category.is_active)


class ProductAPITests(APITestCase):
    """Test product and stock API endpoints"""

    def setUp(self):
        self.client.defaults['HTTP_X_API_KEY'] = 'demo'
        self.category = Category.objects.create(name="Mains", type='meal')
        self.employee = Employee.objects.create(name="Alex", role='manager')
        self.product = Product.objects.create(
            name="Burger", category=self.category, price=Decimal('10.00'), reorder_level=2
        )
        adjust_stock(self.product, 5, StockChangeType.RESTOCK, "Initial stock")

    def test_create_product_books_initial_stock(self):
        response = self.client.post(reverse('product_list'), {
            'name': "Pizza",
            'category_id': self.category.id,
            'price': '12.00',
            'quantity_in_stock': 7
        }, format='json', HTTP_X_EMPLOYEE_ID=str(self.employee.id))

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        product = Product.objects.get(name="Pizza")
        self.assertEqual(product.quantity_in_stock, 7)

        entry = StockLedgerEntry.objects.get(product=product)
        self.assertEqual(entry.change_type, StockChangeType.RESTOCK)
        self.assertEqual(entry.quantity_before, 0)
        self.assertEqual(entry.quantity_after, 7)
        self.assertEqual(entry.reason, "Initial stock")
        self.assertEqual(entry.performed_by, self.employee)

    def test_create_product_with_negative_price(self):
        response = self.client.post(reverse('product_list'), {
            'name': "Pizza", 'category_id': self.category.id, 'price': '-1.00'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('price', response.data['errors'])

    def test_update_never_touches_stock(self):
        url = reverse('product_detail', kwargs={'product_id': self.product.id})
        response = self.client.put(url, {'price': '11.00', 'quantity_in_stock': 500}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.product.refresh_from_db()
        self.assertEqual(self.product.price, Decimal('11.00'))
        self.assertEqual(self.product.quantity_in_stock, 5)

    def test_stock_adjustment_writes_ledger(self):
        url = reverse('product_stock', kwargs={'product_id': self.product.id})
        response = self.client.patch(url, {
            'quantity': -2, 'change_type': 'wastage', 'reason': "Dropped", 'employee_id': self.employee.id
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['quantity_in_stock'], 3)

        entry = StockLedgerEntry.objects.filter(product=self.product).first()
        self.assertEqual(entry.change_type, StockChangeType.WASTAGE)
        self.assertEqual(entry.quantity_change, -2)
        self.assertEqual(entry.quantity_before, 5)
        self.assertEqual(entry.quantity_after, 3)
        self.assertEqual(entry.performed_by, self.employee)

    def test_stock_adjustment_below_zero_is_rejected(self):
        url = reverse('product_stock', kwargs={'product_id': self.product.id})
        response = self.client.patch(url, {'quantity': -6}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'insufficient_stock')
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity_in_stock, 5)
        self.assertEqual(StockLedgerEntry.objects.filter(product=self.product).count(), 1)

    def test_zero_stock_adjustment_is_rejected(self):
        url = reverse('product_stock', kwargs={'product_id': self.product.id})
        response = self.client.patch(url, {'quantity': 0}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_stock_adjustment_with_unknown_employee(self):
        url = reverse('product_stock', kwargs={'product_id': self.product.id})
        response = self.client.patch(url, {'quantity': 1, 'employee_id': 999}, format='json')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_restock(self):
        url = reverse('product_restock', kwargs={'product_id': self.product.id})
        response = self.client.patch(url, {'quantity': 10}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity_in_stock, 15)

    def test_low_and_out_of_stock_lists(self):
        Product.objects.create(name="Soup", category=self.category, price=Decimal('5.00'))
        adjust_stock(self.product, -3, StockChangeType.SALE)

        low = self.client.get(reverse('product_low_stock'))
        out = self.client.get(reverse('product_out_of_stock'))

        self.assertEqual({p['name'] for p in low.data['data']}, {"Burger", "Soup"})
        self.assertEqual([p['name'] for p in out.data['data']], ["Soup"])

    def test_list_filters(self):
        Product.objects.create(name="Veggie Burger", category=self.category, price=Decimal('9.00'))

        response = self.client.get(reverse('product_list'), {'search': 'veggie'})
        self.assertEqual(response.data['count'], 1)

        response = self.client.get(reverse('product_list'), {'min_price': '9.50'})
        self.assertEqual([p['name'] for p in response.data['data']], ["Burger"])

        response = self.client.get(reverse('product_list'), {'sort_by': 'price', 'order': 'desc'})
        self.assertEqual([p['name'] for p in response.data['data']], ["Burger", "Veggie Burger"])

    def test_statistics(self):
        response = self.client.get(reverse('product_statistics'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['total'], 1)
        self.assertEqual(response.data['data']['inventory_value'], '50.00')

    def test_detail_includes_recent_stock_changes(self):
        response = self.client.get(reverse('product_detail', kwargs={'product_id': self.product.id}))

        self.assertEqual(len(response.data['data']['recent_stock_changes']), 1)

    def test_delete_product_in_order_conflicts(self):
        table = Table.objects.create(number="1")
        order = Order.objects.create(table=table)
        OrderItem.objects.create(order=order, product=self.product, quantity=1, unit_price=self.product.price)

        response = self.client.delete(reverse('product_detail', kwargs={'product_id': self.product.id}))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'conflict')

    def test_set_availability(self):
        url = reverse('product_availability', kwargs={'product_id': self.product.id})
        response = self.client.patch(url, {'is_available': False}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.product.refresh_from_db()
        self.assertFalse(self.product.is_available)
        self.assertEqual(self.client.get(reverse('product_available')).data['count'], 0)
