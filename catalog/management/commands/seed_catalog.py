from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from catalog.models import Category, Product
from inventory.models import StockChangeType, StockLedgerEntry
from inventory.services import adjust_stock
from orders.models import Order
from payment.models import Payment
from staff.models import Employee
from tables.models import Table


class Command(BaseCommand):
    help = 'Seed the database with categories, products, tables and employees'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Clear existing orders, catalog, tables and employees before seeding',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        if options['clear']:
            self.stdout.write('Clearing existing catalog data...')
            Payment.objects.all().delete()
            Order.objects.all().delete()
            # Ledger entries refuse single deletes; the queryset delete bypasses that
            StockLedgerEntry.objects.all().delete()
            Product.objects.all().delete()
            Category.objects.all().delete()
            Table.objects.all().delete()
            Employee.objects.all().delete()
            self.stdout.write(
                self.style.SUCCESS('Successfully cleared catalog data')
            )

        categories = {}
        for name, category_type in [
            ("Mains", "meal"),
            ("Starters", "appetizer"),
            ("Drinks", "drink"),
            ("Desserts", "dessert"),
        ]:
            categories[name], _ = Category.objects.get_or_create(name=name, defaults={'type': category_type})

        manager, _ = Employee.objects.get_or_create(
            email="manager@example.com",
            defaults={'name': "Alex Manager", 'role': 'manager'}
        )

        products = [
            {"name": "Burger", "category": "Mains", "price": "10.00", "cost_price": "4.00", "stock": 40},
            {"name": "Pizza Margherita", "category": "Mains", "price": "12.00", "cost_price": "4.50", "stock": 30},
            {"name": "Caesar Salad", "category": "Starters", "price": "9.00", "cost_price": "3.00", "stock": 20},
            {"name": "Garlic Bread", "category": "Starters", "price": "4.50", "cost_price": "1.20", "stock": 25},
            {"name": "Flat White", "category": "Drinks", "price": "3.50", "cost_price": "0.80", "stock": 100},
            {"name": "Iced Tea", "category": "Drinks", "price": "3.00", "cost_price": "0.60", "stock": 60},
            {"name": "Chocolate Cake", "category": "Desserts", "price": "4.50", "cost_price": "1.50", "stock": 8},
        ]

        created_items = []
        for item_data in products:
            product, created = Product.objects.get_or_create(
                name=item_data['name'],
                defaults={
                    'category': categories[item_data['category']],
                    'price': Decimal(item_data['price']),
                    'cost_price': Decimal(item_data['cost_price']),
                }
            )
            if created:
                adjust_stock(product, item_data['stock'], StockChangeType.RESTOCK, "Initial stock", employee=manager)
                created_items.append(product)
                self.stdout.write(
                    f"Created: {product.name} - {product.price} ({product.quantity_in_stock} in stock)"
                )
            else:
                self.stdout.write(
                    f"Already exists: {product.name}"
                )

        for number, capacity, location in [
            ("1", 2, "Window"),
            ("2", 4, "Window"),
            ("3", 4, "Main hall"),
            ("4", 6, "Main hall"),
            ("5", 8, "Terrace"),
        ]:
            Table.objects.get_or_create(number=number, defaults={'capacity': capacity, 'location': location})

        for name, email, role in [
            ("Sam Waiter", "waiter@example.com", 'waiter'),
            ("Jo Chef", "chef@example.com", 'chef'),
            ("Kim Cashier", "cashier@example.com", 'cashier'),
        ]:
            Employee.objects.get_or_create(email=email, defaults={'name': name, 'role': role})

        self.stdout.write(
            self.style.SUCCESS(f'\nTotal new products created: {len(created_items)}')
        )

        self.stdout.write("\nAll products in database:")
        self.stdout.write("-" * 60)
        for product in Product.objects.select_related('category').order_by('category__name', 'name'):
            self.stdout.write(
                f"ID: {product.id:2d} | {product.name:20s} | {product.category.name:10s} | "
                f"{product.price:6.2f} | stock: {product.quantity_in_stock:3d}"
            )
