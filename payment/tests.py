from decimal import Decimal
from unittest import mock

from django.db import IntegrityError
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from catalog.models import Category, Product
from inventory.models import StockChangeType
from inventory.services import adjust_stock
from orders.models import Order, OrderStatus
from orders.services import create_order
from staff.models import Employee
from tables.models import Table, TableStatus

from .models import Payment, generate_receipt_number


class PaymentModelTests(TestCase):
    """Test change calculation and receipt numbers"""

    def setUp(self):
        self.table = Table.objects.create(number="1")
        self.order = Order.objects.create(table=self.table, total_amount=Decimal('20.00'), tax=Decimal('2.00'))

    def test_calculate_change(self):
        payment = Payment(order=self.order, payment_method='cash', amount_paid=Decimal('25.00'))

        self.assertEqual(payment.calculate_change(self.order.final_amount), Decimal('3.00'))
        self.assertTrue(payment.is_sufficient(self.order.final_amount))

    def test_exact_payment_gives_no_change(self):
        payment = Payment(order=self.order, payment_method='card', amount_paid=Decimal('22.00'))

        self.assertEqual(payment.calculate_change(self.order.final_amount), Decimal('0.00'))

    def test_short_payment_is_insufficient(self):
        payment = Payment(order=self.order, payment_method='cash', amount_paid=Decimal('21.99'))

        self.assertFalse(payment.is_sufficient(self.order.final_amount))
        self.assertEqual(payment.calculate_change(self.order.final_amount), Decimal('0.00'))

    def test_receipt_number_format(self):
        receipt_number = generate_receipt_number()

        self.assertRegex(receipt_number, r'^RCP-\d{13}-\d{3}$')

    def test_receipt_number_collision_is_retried(self):
        other_order = Order.objects.create(table=self.table)
        Payment.objects.create(order=other_order, payment_method='cash', amount_paid=Decimal('0.00'),
                               receipt_number="RCP-1-001")

        with mock.patch('payment.models.generate_receipt_number', side_effect=["RCP-1-001", "RCP-1-002"]):
            payment = Payment.objects.create(order=self.order, payment_method='cash', amount_paid=Decimal('22.00'))

        self.assertEqual(payment.receipt_number, "RCP-1-002")
        self.assertEqual(Payment.objects.count(), 2)

    def test_receipt_number_collisions_give_up(self):
        other_order = Order.objects.create(table=self.table)
        Payment.objects.create(order=other_order, payment_method='cash', amount_paid=Decimal('0.00'),
                               receipt_number="RCP-1-001")

        with mock.patch('payment.models.generate_receipt_number', return_value="RCP-1-001"):
            with self.assertRaises(IntegrityError):
                Payment.objects.create(order=self.order, payment_method='cash', amount_paid=Decimal('22.00'))


class PaymentAPITests(APITestCase):
    """Test payment API endpoints"""

    def setUp(self):
        self.client.defaults['HTTP_X_API_KEY'] = 'demo'
        category = Category.objects.create(name="Mains")
        self.burger = Product.objects.create(name="Burger", category=category, price=Decimal('10.00'))
        adjust_stock(self.burger, 5, StockChangeType.RESTOCK, "Initial stock")
        self.table = Table.objects.create(number="1")
        self.cashier = Employee.objects.create(name="Kim", role='cashier')
        self.order = create_order(self.table.id, [{'product_id': self.burger.id, 'quantity': 2}],
                                  tax=Decimal('2.00'))

    def pay(self, amount, **extra):
        data = {'order_id': self.order.id, 'payment_method': 'cash', 'amount_paid': amount}
        data.update(extra)
        return self.client.post(reverse('payment_list'), data, format='json')

    def test_payment_completes_order_and_frees_table(self):
        self.table.refresh_from_db()
        self.assertEqual(self.table.status, TableStatus.OCCUPIED)

        response = self.client.post(reverse('payment_list'), {
            'order_id': self.order.id,
            'payment_method': 'cash',
            'amount_paid': '25.00'
        }, format='json', HTTP_X_EMPLOYEE_ID=str(self.cashier.id))

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data['data']
        self.assertEqual(data['change_given'], '3.00')
        self.assertEqual(data['processed_by']['id'], self.cashier.id)
        self.assertTrue(data['receipt_number'].startswith('RCP-'))

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.COMPLETED)
        self.table.refresh_from_db()
        self.assertEqual(self.table.status, TableStatus.FREE)
        self.burger.refresh_from_db()
        self.assertEqual(self.burger.quantity_in_stock, 3)

    def test_exact_payment(self):
        response = self.pay('22.00', payment_method='card')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['change_given'], '0.00')

    def test_insufficient_payment(self):
        response = self.pay('21.99')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'insufficient_payment')
        self.assertFalse(Payment.objects.exists())
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.PENDING)

    def test_duplicate_payment_conflicts(self):
        self.assertEqual(self.pay('22.00').status_code, status.HTTP_201_CREATED)

        response = self.pay('30.00')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'conflict')
        self.assertEqual(Payment.objects.count(), 1)

    def test_unknown_order(self):
        response = self.pay('22.00', order_id=999)

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_invalid_method(self):
        response = self.pay('22.00', payment_method='cheque')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('payment_method', response.data['errors'])

    def test_missing_amount(self):
        response = self.client.post(reverse('payment_list'),
                                    {'order_id': self.order.id, 'payment_method': 'cash'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'validation_error')

    def test_receipt(self):
        payment_id = self.pay('25.00').data['data']['id']

        response = self.client.get(reverse('payment_receipt', kwargs={'payment_id': payment_id}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        receipt = response.data['data']
        self.assertEqual(receipt['subtotal'], '20.00')
        self.assertEqual(receipt['tax'], '2.00')
        self.assertEqual(receipt['total'], '22.00')
        self.assertEqual(receipt['change_given'], '3.00')
        self.assertEqual(len(receipt['items']), 1)
        self.assertIsNone(receipt['cashier'])

    def test_lookup_by_receipt_number(self):
        receipt_number = self.pay('22.00').data['data']['receipt_number']

        response = self.client.get(reverse('payment_by_receipt', kwargs={'receipt_number': receipt_number}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['order']['id'], self.order.id)

    def test_update_only_changes_notes_and_transaction_id(self):
        payment_id = self.pay('22.00').data['data']['id']

        response = self.client.put(reverse('payment_detail', kwargs={'payment_id': payment_id}),
                                   {'notes': "Tip left", 'amount_paid': '100.00'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        payment = Payment.objects.get(id=payment_id)
        self.assertEqual(payment.notes, "Tip left")
        self.assertEqual(payment.amount_paid, Decimal('22.00'))

    def test_daily_and_statistics(self):
        self.pay('25.00')

        daily = self.client.get(reverse('payment_daily'))
        self.assertEqual(daily.data['count'], 1)
        self.assertEqual(daily.data['total'], '25.00')

        stats = self.client.get(reverse('payment_statistics')).data['data']
        self.assertEqual(stats['total_payments'], 1)
        self.assertEqual(stats['by_method']['cash']['count'], 1)
        self.assertEqual(stats['by_method']['card']['total'], '0.00')

    def test_payments_by_invalid_method(self):
        response = self.client.get(reverse('payments_by_method', kwargs={'method': 'barter'}))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
