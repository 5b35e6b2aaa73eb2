from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from orders.models import Order, OrderStatus

from .models import Table, TableStatus


class TableModelTests(TestCase):
    def test_occupy_only_from_free(self):
        table = Table.objects.create(number="1")

        self.assertTrue(table.occupy())
        self.assertEqual(table.status, TableStatus.OCCUPIED)
        self.assertFalse(table.occupy())

        table.refresh_from_db()
        self.assertEqual(table.status, TableStatus.OCCUPIED)

    def test_occupy_reserved_table_changes_nothing(self):
        table = Table.objects.create(number="2", status=TableStatus.RESERVED)

        self.assertFalse(table.occupy())
        table.refresh_from_db()
        self.assertEqual(table.status, TableStatus.RESERVED)

    def test_seat_and_free(self):
        table = Table.objects.create(number="3", status=TableStatus.RESERVED)

        table.seat()
        table.refresh_from_db()
        self.assertEqual(table.status, TableStatus.OCCUPIED)

        table.free()
        table.refresh_from_db()
        self.assertTrue(table.is_available())


class TableAPITests(APITestCase):
    """Test table API endpoints"""

    def setUp(self):
        self.client.defaults['HTTP_X_API_KEY'] = 'demo'
        self.table = Table.objects.create(number="1", capacity=2, location="Window")

    def test_create_table(self):
        response = self.client.post(reverse('table_list'), {'number': "7", 'capacity': 6}, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Table.objects.get(number="7").status, TableStatus.FREE)

    def test_create_duplicate_number_conflicts(self):
        response = self.client.post(reverse('table_list'), {'number': "1"}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'conflict')

    def test_create_with_zero_capacity(self):
        response = self.client.post(reverse('table_list'), {'number': "8", 'capacity': 0}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('capacity', response.data['errors'])

    def test_available_with_capacity(self):
        Table.objects.create(number="2", capacity=6)
        Table.objects.create(number="3", capacity=8, status=TableStatus.OCCUPIED)

        response = self.client.get(reverse('table_available'), {'capacity': 4})

        self.assertEqual([t['number'] for t in response.data['data']], ["2"])

    def test_statistics(self):
        Table.objects.create(number="2", capacity=4, status=TableStatus.RESERVED)

        response = self.client.get(reverse('table_statistics'))

        data = response.data['data']
        self.assertEqual(data['total'], 2)
        self.assertEqual(data['by_status']['reserved'], 1)
        self.assertEqual(data['total_capacity'], 6)

    def test_occupy_endpoint(self):
        url = reverse('table_occupy', kwargs={'table_id': self.table.id})

        self.assertEqual(self.client.patch(url).status_code, status.HTTP_200_OK)
        response = self.client.patch(url)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_free_blocked_by_active_order(self):
        self.table.seat()
        order = Order.objects.create(table=self.table, total_amount=Decimal('5.00'))
        url = reverse('table_free', kwargs={'table_id': self.table.id})

        response = self.client.patch(url)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        order.status = OrderStatus.CANCELLED
        order.save()
        response = self.client.patch(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.table.refresh_from_db()
        self.assertEqual(self.table.status, TableStatus.FREE)

    def test_set_status_free_blocked_by_active_order(self):
        self.table.seat()
        Order.objects.create(table=self.table, total_amount=Decimal('5.00'))
        url = reverse('table_status', kwargs={'table_id': self.table.id})

        response = self.client.patch(url, {'status': 'free'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.table.refresh_from_db()
        self.assertEqual(self.table.status, TableStatus.OCCUPIED)

        response = self.client.patch(url, {'status': 'reserved'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_detail_includes_active_orders(self):
        Order.objects.create(table=self.table)
        Order.objects.create(table=self.table, status=OrderStatus.COMPLETED)

        response = self.client.get(reverse('table_detail', kwargs={'table_id': self.table.id}))

        self.assertEqual(len(response.data['data']['active_orders']), 1)

    def test_delete_table_with_orders_conflicts(self):
        Order.objects.create(table=self.table, status=OrderStatus.COMPLETED)

        response = self.client.delete(reverse('table_detail', kwargs={'table_id': self.table.id}))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'conflict')

    def test_set_invalid_status(self):
        url = reverse('table_status', kwargs={'table_id': self.table.id})
        response = self.client.patch(url, {'status': 'closed'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
