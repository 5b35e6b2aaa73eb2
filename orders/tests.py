from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from catalog.models import Category, Product
from inventory.models import StockChangeType, StockLedgerEntry
from inventory.services import adjust_stock
from pos.exceptions import InsufficientStockError, UnmodifiableStateError, ValidationError
from staff.models import Employee
from tables.models import Table, TableStatus

from . import services
from .models import Order, OrderItem, OrderStatus


class OrderModelTests(TestCase):
    def setUp(self):
        self.table = Table.objects.create(number="1")

    def test_final_amount_recomputed_on_save(self):
        order = Order.objects.create(
            table=self.table, total_amount=Decimal('20.00'), discount=Decimal('1.50'), tax=Decimal('2.01')
        )
        self.assertEqual(order.final_amount, Decimal('20.51'))

        order.discount = Decimal('0.00')
        order.save(update_fields=['discount'])
        order.refresh_from_db()
        self.assertEqual(order.final_amount, Decimal('22.01'))

    def test_item_subtotal(self):
        category = Category.objects.create(name="Mains")
        product = Product.objects.create(name="Burger", category=category, price=Decimal('10.00'))
        order = Order.objects.create(table=self.table)

        item = OrderItem.objects.create(order=order, product=product, quantity=3, unit_price=Decimal('9.99'))

        self.assertEqual(item.subtotal, Decimal('29.97'))

    def test_modifiable_states(self):
        order = Order(table=self.table)
        for state in OrderStatus.values:
            order.status = state
            self.assertEqual(order.can_be_modified(), state in ('pending', 'confirmed'))
            self.assertEqual(order.can_be_deleted(), state in ('pending', 'cancelled'))


class OrderServiceTests(TestCase):
    """Test the order workflow directly"""

    def setUp(self):
        category = Category.objects.create(name="Mains")
        self.burger = Product.objects.create(name="Burger", category=category, price=Decimal('10.00'))
        self.fries = Product.objects.create(name="Fries", category=category, price=Decimal('3.00'))
        adjust_stock(self.burger, 5, StockChangeType.RESTOCK)
        adjust_stock(self.fries, 1, StockChangeType.RESTOCK)
        self.table = Table.objects.create(number="1")

    def test_failed_line_rolls_back_everything(self):
        with self.assertRaises(InsufficientStockError):
            services.create_order(self.table.id, [
                {'product_id': self.burger.id, 'quantity': 2},
                {'product_id': self.fries.id, 'quantity': 2},
            ])

        self.assertFalse(Order.objects.exists())
        self.burger.refresh_from_db()
        self.assertEqual(self.burger.quantity_in_stock, 5)
        self.assertEqual(StockLedgerEntry.objects.filter(change_type=StockChangeType.SALE).count(), 0)
        self.table.refresh_from_db()
        self.assertEqual(self.table.status, TableStatus.FREE)

    def test_reserved_table_is_seated(self):
        self.table.status = TableStatus.RESERVED
        self.table.save()

        services.create_order(self.table.id, [{'product_id': self.burger.id, 'quantity': 1}])

        self.table.refresh_from_db()
        self.assertEqual(self.table.status, TableStatus.OCCUPIED)

    def test_cannot_modify_served_order(self):
        order = services.create_order(self.table.id, [{'product_id': self.burger.id, 'quantity': 1}])
        services.update_order_status(order, OrderStatus.SERVED)

        with self.assertRaises(UnmodifiableStateError):
            services.add_item(order.id, self.burger.id, 1)
        with self.assertRaises(UnmodifiableStateError):
            services.update_order(order, notes="Too late")

        cancelled = services.update_order(order, status=OrderStatus.CANCELLED)
        self.assertEqual(cancelled.status, OrderStatus.CANCELLED)

    def test_remove_item_cannot_leave_negative_total(self):
        order = services.create_order(self.table.id, [
            {'product_id': self.burger.id, 'quantity': 1},
            {'product_id': self.fries.id, 'quantity': 1},
        ], discount=Decimal('12.00'))
        burger_line = order.items.get(product=self.burger)

        with self.assertRaises(ValidationError):
            services.remove_item(order.id, burger_line.id)

        order.refresh_from_db()
        self.assertEqual(order.total_amount, Decimal('13.00'))
        self.assertEqual(order.final_amount, Decimal('1.00'))
        self.assertTrue(order.items.filter(pk=burger_line.pk).exists())
        self.burger.refresh_from_db()
        self.assertEqual(self.burger.quantity_in_stock, 4)


class OrderAPITests(APITestCase):
    """Test order API endpoints"""

    def setUp(self):
        self.client.defaults['HTTP_X_API_KEY'] = 'demo'
        category = Category.objects.create(name="Mains")
        self.burger = Product.objects.create(name="Burger", category=category, price=Decimal('10.00'))
        self.cake = Product.objects.create(name="Cake", category=category, price=Decimal('4.50'))
        adjust_stock(self.burger, 5, StockChangeType.RESTOCK, "Initial stock")
        adjust_stock(self.cake, 3, StockChangeType.RESTOCK, "Initial stock")
        self.table = Table.objects.create(number="1")
        self.waiter = Employee.objects.create(name="Sam", role='waiter')

    def create_order(self, **extra):
        data = {'table_id': self.table.id, 'items': [{'product_id': self.burger.id, 'quantity': 2}], 'tax': '2.00'}
        data.update(extra)
        return self.client.post(reverse('order_list'), data, format='json')

    def test_create_order(self):
        response = self.client.post(reverse('order_list'), {
            'table_id': self.table.id,
            'items': [{'product_id': self.burger.id, 'quantity': 2}],
            'tax': '2.00'
        }, format='json', HTTP_X_EMPLOYEE_ID=str(self.waiter.id))

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data['data']
        self.assertEqual(data['status'], 'pending')
        self.assertEqual(data['total_amount'], '20.00')
        self.assertEqual(data['final_amount'], '22.00')
        self.assertEqual(data['employee']['id'], self.waiter.id)
        self.assertEqual(data['items'][0]['product']['name'], "Burger")
        self.assertIsNone(data['payment'])

        self.burger.refresh_from_db()
        self.assertEqual(self.burger.quantity_in_stock, 3)
        entry = StockLedgerEntry.objects.get(change_type=StockChangeType.SALE)
        self.assertEqual(entry.quantity_change, -2)
        self.assertEqual(entry.reason, f"Order #{data['id']}")
        self.assertEqual(entry.order_id, data['id'])
        self.table.refresh_from_db()
        self.assertEqual(self.table.status, TableStatus.OCCUPIED)

    def test_create_order_requires_items(self):
        response = self.create_order(items=[])

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'validation_error')

    def test_create_order_for_unknown_table(self):
        response = self.create_order(table_id=999)

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_create_order_with_unknown_employee(self):
        response = self.create_order(employee_id=999)

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(Order.objects.exists())

    def test_create_order_with_unavailable_product(self):
        self.burger.set_availability(False)

        response = self.create_order()

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'unavailable')

    def test_create_order_with_insufficient_stock(self):
        response = self.create_order(items=[{'product_id': self.burger.id, 'quantity': 6}])

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'insufficient_stock')
        self.assertFalse(Order.objects.exists())

    def test_add_and_remove_item(self):
        order_id = self.create_order().data['data']['id']

        response = self.client.post(reverse('order_items', kwargs={'order_id': order_id}),
                                    {'product_id': self.cake.id, 'quantity': 2}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['order']['total_amount'], '29.00')
        item_id = response.data['data']['item']['id']

        self.cake.refresh_from_db()
        self.assertEqual(self.cake.quantity_in_stock, 1)

        response = self.client.delete(reverse('order_item_detail', kwargs={'order_id': order_id, 'item_id': item_id}))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['total_amount'], '20.00')
        self.assertEqual(response.data['data']['final_amount'], '22.00')

        self.cake.refresh_from_db()
        self.assertEqual(self.cake.quantity_in_stock, 3)
        entry = StockLedgerEntry.objects.filter(product=self.cake).first()
        self.assertEqual(entry.change_type, StockChangeType.ADJUSTMENT)
        self.assertEqual(entry.reason, f"Removed from Order #{order_id}")

    def test_add_item_to_completed_order(self):
        order_id = self.create_order().data['data']['id']
        self.client.patch(reverse('order_status', kwargs={'order_id': order_id}), {'status': 'completed'}, format='json')

        response = self.client.post(reverse('order_items', kwargs={'order_id': order_id}),
                                    {'product_id': self.cake.id, 'quantity': 1}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'unmodifiable_state')

    def test_completing_order_frees_table(self):
        order_id = self.create_order().data['data']['id']

        response = self.client.patch(reverse('order_status', kwargs={'order_id': order_id}),
                                     {'status': 'completed'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.table.refresh_from_db()
        self.assertEqual(self.table.status, TableStatus.FREE)

    def test_invalid_status(self):
        order_id = self.create_order().data['data']['id']

        response = self.client.patch(reverse('order_status', kwargs={'order_id': order_id}),
                                     {'status': 'lost'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_order_discount(self):
        order_id = self.create_order().data['data']['id']

        response = self.client.put(reverse('order_detail', kwargs={'order_id': order_id}),
                                   {'discount': '5.00', 'customer_name': "Lee"}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['final_amount'], '17.00')
        self.assertEqual(response.data['data']['customer_name'], "Lee")

    def test_create_order_with_discount_above_total(self):
        response = self.create_order(discount='30.00')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'validation_error')
        self.assertFalse(Order.objects.exists())
        self.burger.refresh_from_db()
        self.assertEqual(self.burger.quantity_in_stock, 5)

    def test_update_order_with_discount_above_total(self):
        order_id = self.create_order().data['data']['id']

        response = self.client.put(reverse('order_detail', kwargs={'order_id': order_id}),
                                   {'discount': '22.01'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        order = Order.objects.get(pk=order_id)
        self.assertEqual(order.discount, Decimal('0.00'))
        self.assertEqual(order.final_amount, Decimal('22.00'))

    def test_item_status(self):
        data = self.create_order().data['data']
        url = reverse('order_item_status', kwargs={'order_id': data['id'], 'item_id': data['items'][0]['id']})

        response = self.client.patch(url, {'status': 'preparing'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['status'], 'preparing')

    def test_delete_order_rules(self):
        order_id = self.create_order().data['data']['id']
        self.client.patch(reverse('order_status', kwargs={'order_id': order_id}), {'status': 'served'}, format='json')

        response = self.client.delete(reverse('order_detail', kwargs={'order_id': order_id}))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        self.client.patch(reverse('order_status', kwargs={'order_id': order_id}), {'status': 'cancelled'}, format='json')
        response = self.client.delete(reverse('order_detail', kwargs={'order_id': order_id}))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Order.objects.exists())

        # Sold stock is not returned on delete
        self.burger.refresh_from_db()
        self.assertEqual(self.burger.quantity_in_stock, 3)

    def test_queries(self):
        self.create_order()
        order_id = self.create_order(items=[{'product_id': self.cake.id, 'quantity': 1}]).data['data']['id']
        self.client.patch(reverse('order_status', kwargs={'order_id': order_id}), {'status': 'completed'}, format='json')

        by_status = self.client.get(reverse('orders_by_status', kwargs={'status': 'pending'}))
        self.assertEqual(by_status.data['count'], 1)

        by_table = self.client.get(reverse('orders_by_table', kwargs={'table_id': self.table.id}))
        self.assertEqual(by_table.data['count'], 1)

        stats = self.client.get(reverse('order_statistics')).data['data']
        self.assertEqual(stats['total'], 2)
        self.assertEqual(stats['by_status']['completed'], 1)
        self.assertEqual(stats['today_orders'], 2)
        self.assertEqual(stats['today_revenue'], '6.50')
