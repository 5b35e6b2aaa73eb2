from django.contrib import admin
from .models import Table


@admin.register(Table)
class TableAdmin(admin.ModelAdmin):
    list_display = ['id', 'number', 'capacity', 'status', 'location']
    list_filter = ['status', 'location']
    search_fields = ['number']
