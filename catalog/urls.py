from django.urls import path
from . import views

urlpatterns = [
    path('categories/', views.CategoryListView.as_view(), name='category_list'),
    path('categories/<int:category_id>/', views.CategoryDetailView.as_view(), name='category_detail'),
    path('categories/<int:category_id>/activate/', views.CategoryActivationView.as_view(activate=True), name='category_activate'),
    path('categories/<int:category_id>/deactivate/', views.CategoryActivationView.as_view(activate=False), name='category_deactivate'),

    path('products/', views.ProductListView.as_view(), name='product_list'),
    path('products/available/', views.ProductSubsetView.as_view(subset='available'), name='product_available'),
    path('products/low-stock/', views.ProductSubsetView.as_view(subset='low_stock'), name='product_low_stock'),
    path('products/out-of-stock/', views.ProductSubsetView.as_view(subset='out_of_stock'), name='product_out_of_stock'),
    path('products/statistics/', views.ProductStatisticsView.as_view(), name='product_statistics'),
    path('products/<int:product_id>/', views.ProductDetailView.as_view(), name='product_detail'),
    path('products/<int:product_id>/stock/', views.ProductStockView.as_view(), name='product_stock'),
    path('products/<int:product_id>/restock/', views.ProductRestockView.as_view(), name='product_restock'),
    path('products/<int:product_id>/availability/', views.ProductAvailabilityView.as_view(), name='product_availability'),
]
