from datetime import timedelta

from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from .models import Employee


class EmployeeModelTests(TestCase):
    def test_years_of_service(self):
        employee = Employee.objects.create(
            name="Sam",
            role='waiter',
            hire_date=timezone.localdate() - timedelta(days=365 * 3 + 5)
        )
        self.assertEqual(employee.years_of_service, 3)

    def test_activate_and_deactivate(self):
        employee = Employee.objects.create(name="Sam", role='waiter')
        employee.deactivate()
        employee.refresh_from_db()
        self.assertFalse(employee.is_active)

        employee.activate()
        employee.refresh_from_db()
        self.assertTrue(employee.is_active)


class EmployeeAPITests(APITestCase):
    """Test employee API endpoints"""

    def setUp(self):
        self.client.defaults['HTTP_X_API_KEY'] = 'demo'
        self.chef = Employee.objects.create(name="Jo", role='chef')

    def test_create_employee(self):
        response = self.client.post(reverse('employee_list'), {
            'name': "  Kim  ",
            'email': "kim@example.com",
            'role': 'cashier',
            'salary': '2100.00'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['data']['name'], "Kim")
        self.assertEqual(Employee.objects.filter(role='cashier').count(), 1)

    def test_create_employee_with_invalid_role(self):
        response = self.client.post(reverse('employee_list'), {'name': "Kim", 'role': 'janitor'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['error'], 'validation_error')
        self.assertIn('role', response.data['errors'])

    def test_list_filters_by_role(self):
        Employee.objects.create(name="Sam", role='waiter')

        response = self.client.get(reverse('employee_list'), {'role': 'chef'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['data'][0]['name'], "Jo")

    def test_employees_by_invalid_role(self):
        response = self.client.get(reverse('employees_by_role', kwargs={'role': 'pilot'}))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'validation_error')

    def test_deactivate_employee(self):
        response = self.client.patch(reverse('employee_deactivate', kwargs={'employee_id': self.chef.id}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.chef.refresh_from_db()
        self.assertFalse(self.chef.is_active)

    def test_missing_employee_returns_not_found(self):
        response = self.client.get(reverse('employee_detail', kwargs={'employee_id': 999}))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'not_found')


class AuthenticationTests(APITestCase):
    """Test API key and acting employee headers"""

    def test_missing_api_key(self):
        response = self.client.get(reverse('employee_list'))

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data['success'])

    def test_wrong_api_key(self):
        response = self.client.get(reverse('employee_list'), HTTP_X_API_KEY='wrong')

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['message'], 'Invalid API key')

    def test_inactive_acting_employee_is_rejected(self):
        employee = Employee.objects.create(name="Former", role='waiter', is_active=False)

        response = self.client.get(
            reverse('employee_list'), HTTP_X_API_KEY='demo', HTTP_X_EMPLOYEE_ID=str(employee.id)
        )

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_schema_is_public(self):
        response = self.client.get(reverse('schema'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
