import logging
from decimal import Decimal

from django.db.models import Count, DecimalField, ExpressionWrapper, F, Sum
from django.shortcuts import get_object_or_404
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema
from rest_framework.views import APIView

from inventory.models import StockChangeType
from inventory.serializers import StockLedgerEntrySerializer
from inventory.services import adjust_stock
from orders.models import OrderItem
from pos.authentication import acting_employee
from pos.exceptions import ConflictError
from pos.responses import created, success
from staff.services import resolve_employee

from .models import Category, Product
from .serializers import (
    AvailabilitySerializer, CategorySerializer, CreateProductSerializer,
    ProductSerializer, RestockSerializer, StockUpdateSerializer
)

logger = logging.getLogger(__name__)

PRODUCT_SORT_FIELDS = {'name', 'price', 'quantity_in_stock', 'created_at'}


# Categories

class CategoryListView(APIView):
    @extend_schema(
        summary="List categories",
        parameters=[
            OpenApiParameter('type', OpenApiTypes.STR),
            OpenApiParameter('is_active', OpenApiTypes.BOOL),
        ],
        responses={200: CategorySerializer(many=True)},
    )
    def get(self, request):
        categories = Category.objects.annotate(product_count=Count('products'))
        category_type = request.query_params.get('type')
        if category_type:
            categories = categories.filter(type=category_type)
        is_active = request.query_params.get('is_active')
        if is_active is not None:
            categories = categories.filter(is_active=is_active.lower() == 'true')
        return success(CategorySerializer(categories, many=True).data)

    @extend_schema(summary="Create a category", request=CategorySerializer, responses={201: CategorySerializer})
    def post(self, request):
        serializer = CategorySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        category = serializer.save()
        return created(CategorySerializer(category).data, "Category created successfully")


class CategoryDetailView(APIView):
    def get_category(self, category_id):
        return get_object_or_404(Category.objects.annotate(product_count=Count('products')), id=category_id)

    @extend_schema(summary="Get a category", responses={200: CategorySerializer})
    def get(self, request, category_id):
        return success(CategorySerializer(self.get_category(category_id)).data)

    @extend_schema(summary="Update a category", request=CategorySerializer, responses={200: CategorySerializer})
    def put(self, request, category_id):
        category = self.get_category(category_id)
        serializer = CategorySerializer(category, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return success(serializer.data, message="Category updated successfully")

    @extend_schema(summary="Delete a category", responses={200: OpenApiTypes.OBJECT})
    def delete(self, request, category_id):
        category = self.get_category(category_id)
        if category.product_count:
            raise ConflictError(
                f"Cannot delete category with {category.product_count} product(s). "
                "Move or delete the products first."
            )
        category.delete()
        return success(message="Category deleted successfully")


class CategoryActivationView(APIView):
    activate = True

    @extend_schema(summary="Activate or deactivate a category", request=None, responses={200: CategorySerializer})
    def patch(self, request, category_id):
        category = get_object_or_404(Category, id=category_id)
        category.is_active = self.activate
        category.save(update_fields=['is_active', 'updated_at'])
        state = 'activated' if self.activate else 'deactivated'
        return success(CategorySerializer(category).data, message=f"Category {state} successfully")


# Products

class ProductListView(APIView):
    @extend_schema(
        summary="List products",
        parameters=[
            OpenApiParameter('category_id', OpenApiTypes.INT),
            OpenApiParameter('is_available', OpenApiTypes.BOOL),
            OpenApiParameter('search', OpenApiTypes.STR, description='Case-insensitive match on name'),
            OpenApiParameter('low_stock', OpenApiTypes.BOOL),
            OpenApiParameter('min_price', OpenApiTypes.DECIMAL),
            OpenApiParameter('max_price', OpenApiTypes.DECIMAL),
            OpenApiParameter('sort_by', OpenApiTypes.STR, enum=sorted(PRODUCT_SORT_FIELDS)),
            OpenApiParameter('order', OpenApiTypes.STR, enum=['asc', 'desc']),
        ],
        responses={200: ProductSerializer(many=True)},
    )
    def get(self, request):
        params = request.query_params
        products = Product.objects.select_related('category')

        if params.get('category_id'):
            products = products.filter(category_id=params['category_id'])
        if params.get('is_available') is not None:
            products = products.filter(is_available=params['is_available'].lower() == 'true')
        if params.get('search'):
            products = products.filter(name__icontains=params['search'])
        if params.get('min_price'):
            products = products.filter(price__gte=Decimal(params['min_price']))
        if params.get('max_price'):
            products = products.filter(price__lte=Decimal(params['max_price']))
        if params.get('low_stock') == 'true':
            products = products.low_stock()

        sort_by = params.get('sort_by')
        if sort_by in PRODUCT_SORT_FIELDS:
            products = products.order_by(f"-{sort_by}" if params.get('order') == 'desc' else sort_by)

        return success(ProductSerializer(products, many=True).data)

    @extend_schema(
        summary="Create a product",
        description="Create a menu product. Opening stock is recorded in the stock ledger as a restock.",
        request=CreateProductSerializer,
        responses={201: ProductSerializer},
        examples=[
            OpenApiExample(
                'Create Product Example',
                value={'name': 'Burger', 'category_id': 1, 'price': '10.00',
                       'cost_price': '4.00', 'quantity_in_stock': 5, 'reorder_level': 2}
            )
        ]
    )
    def post(self, request):
        serializer = CreateProductSerializer(data=request.data, context={'employee': acting_employee(request)})
        serializer.is_valid(raise_exception=True)
        product = serializer.save()
        logger.info("Product %s created with %d in stock", product.pk, product.quantity_in_stock)
        return created(ProductSerializer(product).data, "Product created successfully")


class ProductSubsetView(APIView):
    """Read-only product lists: available, low stock, out of stock."""
    subset = 'available'

    @extend_schema(summary="List a subset of products", responses={200: ProductSerializer(many=True)})
    def get(self, request):
        products = Product.objects.select_related('category')
        if self.subset == 'available':
            products = products.available()
        elif self.subset == 'low_stock':
            products = products.low_stock().order_by('quantity_in_stock')
        else:
            products = products.out_of_stock()
        return success(ProductSerializer(products, many=True).data)


class ProductStatisticsView(APIView):
    @extend_schema(summary="Product statistics", responses={200: OpenApiTypes.OBJECT})
    def get(self, request):
        products = Product.objects.all()
        inventory_value = products.aggregate(
            total=Sum(ExpressionWrapper(F('quantity_in_stock') * F('price'),
                                        output_field=DecimalField(max_digits=14, decimal_places=2)))
        )['total'] or Decimal('0')
        by_category = (
            Category.objects.annotate(count=Count('products'))
            .values('id', 'name', 'type', 'count')
            .order_by('name')
        )
        return success({
            'total': products.count(),
            'available': products.filter(is_available=True).count(),
            'unavailable': products.filter(is_available=False).count(),
            'low_stock': products.low_stock().count(),
            'out_of_stock': products.out_of_stock().count(),
            'inventory_value': f"{inventory_value:.2f}",
            'by_category': list(by_category),
        })


class ProductDetailView(APIView):
    @extend_schema(summary="Get a product with its recent stock history", responses={200: ProductSerializer})
    def get(self, request, product_id):
        product = get_object_or_404(Product.objects.select_related('category'), id=product_id)
        data = ProductSerializer(product).data
        recent = product.ledger_entries.select_related('performed_by')[:10]
        data['recent_stock_changes'] = StockLedgerEntrySerializer(recent, many=True).data
        return success(data)

    @extend_schema(summary="Update a product", request=ProductSerializer, responses={200: ProductSerializer})
    def put(self, request, product_id):
        product = get_object_or_404(Product, id=product_id)
        serializer = ProductSerializer(product, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return success(serializer.data, message="Product updated successfully")

    @extend_schema(summary="Delete a product", responses={200: OpenApiTypes.OBJECT})
    def delete(self, request, product_id):
        product = get_object_or_404(Product, id=product_id)
        if OrderItem.objects.filter(product=product).active().exists():
            raise ConflictError("Cannot delete product that is in active orders")
        if OrderItem.objects.filter(product=product).exists():
            raise ConflictError("Cannot delete product referenced by past orders; mark it unavailable instead")
        product.delete()
        logger.info("Product %s deleted", product_id)
        return success(message="Product deleted successfully")


class ProductStockView(APIView):
    @extend_schema(
        summary="Adjust product stock",
        description="Apply a signed stock change and record it in the stock ledger.",
        request=StockUpdateSerializer,
        responses={200: ProductSerializer},
        examples=[
            OpenApiExample('Wastage Example', value={'quantity': -2, 'change_type': 'wastage', 'reason': 'Dropped'})
        ]
    )
    def patch(self, request, product_id):
        serializer = StockUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        product = get_object_or_404(Product.objects.select_related('category'), id=product_id)
        employee = resolve_employee(data.get('employee_id'), default=acting_employee(request))
        entry = adjust_stock(product, data['quantity'], data['change_type'], data['reason'], employee=employee)
        logger.info("Stock of product %s adjusted by %+d (%s)", product.pk, entry.quantity_change, entry.change_type)
        return success(ProductSerializer(product).data, message="Stock updated successfully")


class ProductRestockView(APIView):
    @extend_schema(summary="Restock a product", request=RestockSerializer, responses={200: ProductSerializer})
    def patch(self, request, product_id):
        serializer = RestockSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        product = get_object_or_404(Product.objects.select_related('category'), id=product_id)
        employee = resolve_employee(data.get('employee_id'), default=acting_employee(request))
        adjust_stock(product, data['quantity'], StockChangeType.RESTOCK,
                     data['reason'] or "Stock replenishment", employee=employee)
        return success(ProductSerializer(product).data,
                       message=f"Product restocked with {data['quantity']} units")


class ProductAvailabilityView(APIView):
    @extend_schema(summary="Set product availability", request=AvailabilitySerializer, responses={200: ProductSerializer})
    def patch(self, request, product_id):
        serializer = AvailabilitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        product = get_object_or_404(Product.objects.select_related('category'), id=product_id)
        product.set_availability(serializer.validated_data['is_available'])
        state = 'available' if product.is_available else 'unavailable'
        return success(ProductSerializer(product).data, message=f"Product marked as {state}")
