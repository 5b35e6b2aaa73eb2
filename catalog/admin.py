from django.contrib import admin
from .models import Category, Product


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'type', 'is_active']
    list_filter = ['type', 'is_active']
    search_fields = ['name']


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'category', 'price', 'quantity_in_stock', 'reorder_level', 'is_available']
    list_filter = ['category', 'is_available']
    search_fields = ['name']
    # Stock changes go through the stock endpoints so they reach the ledger
    readonly_fields = ['quantity_in_stock', 'created_at', 'updated_at']
