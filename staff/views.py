import logging

from django.shortcuts import get_object_or_404
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework.views import APIView

from pos.exceptions import ValidationError
from pos.responses import created, success

from .models import Employee, EmployeeRole
from .serializers import EmployeeSerializer

logger = logging.getLogger(__name__)


class EmployeeListView(APIView):
    @extend_schema(
        summary="List employees",
        parameters=[
            OpenApiParameter('role', OpenApiTypes.STR, enum=EmployeeRole.values),
            OpenApiParameter('is_active', OpenApiTypes.BOOL),
        ],
        responses={200: EmployeeSerializer(many=True)},
    )
    def get(self, request):
        employees = Employee.objects.all()
        role = request.query_params.get('role')
        if role:
            employees = employees.filter(role=role)
        is_active = request.query_params.get('is_active')
        if is_active is not None:
            employees = employees.filter(is_active=is_active.lower() == 'true')
        return success(EmployeeSerializer(employees, many=True).data)

    @extend_schema(
        summary="Create an employee",
        request=EmployeeSerializer,
        responses={201: EmployeeSerializer},
    )
    def post(self, request):
        serializer = EmployeeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        employee = serializer.save()
        logger.info("Employee %s created as %s", employee.pk, employee.role)
        return created(EmployeeSerializer(employee).data, "Employee created successfully")


class EmployeesByRoleView(APIView):
    @extend_schema(summary="List employees by role", responses={200: EmployeeSerializer(many=True)})
    def get(self, request, role):
        if role not in EmployeeRole.values:
            raise ValidationError(f"Invalid role. Must be one of: {', '.join(EmployeeRole.values)}")
        employees = Employee.objects.filter(role=role, is_active=True)
        return success(EmployeeSerializer(employees, many=True).data)


class EmployeeDetailView(APIView):
    @extend_schema(summary="Get an employee", responses={200: EmployeeSerializer})
    def get(self, request, employee_id):
        employee = get_object_or_404(Employee, id=employee_id)
        return success(EmployeeSerializer(employee).data)

    @extend_schema(summary="Update an employee", request=EmployeeSerializer, responses={200: EmployeeSerializer})
    def put(self, request, employee_id):
        employee = get_object_or_404(Employee, id=employee_id)
        serializer = EmployeeSerializer(employee, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return success(serializer.data, message="Employee updated successfully")

    @extend_schema(summary="Delete an employee", responses={200: OpenApiTypes.OBJECT})
    def delete(self, request, employee_id):
        employee = get_object_or_404(Employee, id=employee_id)
        # Orders, payments and ledger entries keep their history with a null reference
        employee.delete()
        logger.info("Employee %s deleted", employee_id)
        return success(message="Employee deleted successfully")


class EmployeeActivationView(APIView):
    activate = True

    @extend_schema(summary="Activate or deactivate an employee", request=None, responses={200: EmployeeSerializer})
    def patch(self, request, employee_id):
        employee = get_object_or_404(Employee, id=employee_id)
        if self.activate:
            employee.activate()
        else:
            employee.deactivate()
        state = 'activated' if self.activate else 'deactivated'
        return success(EmployeeSerializer(employee).data, message=f"Employee {state} successfully")
