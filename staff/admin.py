from django.contrib import admin
from .models import Employee


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'role', 'email', 'hire_date', 'is_active']
    list_filter = ['role', 'is_active']
    search_fields = ['name', 'email']
    readonly_fields = ['created_at', 'updated_at']
