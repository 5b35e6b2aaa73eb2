from rest_framework import serializers

from .models import Employee, EmployeeRole


class EmployeeSerializer(serializers.ModelSerializer):
    role = serializers.ChoiceField(choices=EmployeeRole.choices, default=EmployeeRole.WAITER)
    years_of_service = serializers.IntegerField(read_only=True)

    class Meta:
        model = Employee
        fields = ['id', 'name', 'email', 'phone', 'role', 'salary', 'hire_date',
                  'is_active', 'years_of_service', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Employee name cannot be empty")
        return value


class EmployeeSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Employee
        fields = ['id', 'name', 'role']
