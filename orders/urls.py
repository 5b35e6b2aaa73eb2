from django.urls import path
from . import views

urlpatterns = [
    path('', views.OrderListView.as_view(), name='order_list'),
    path('statistics/', views.OrderStatisticsView.as_view(), name='order_statistics'),
    path('status/<str:status>/', views.OrdersByStatusView.as_view(), name='orders_by_status'),
    path('table/<int:table_id>/', views.TableOrdersView.as_view(), name='orders_by_table'),
    path('<int:order_id>/', views.OrderDetailView.as_view(), name='order_detail'),
    path('<int:order_id>/status/', views.OrderStatusView.as_view(), name='order_status'),
    path('<int:order_id>/items/', views.OrderItemsView.as_view(), name='order_items'),
    path('<int:order_id>/items/<int:item_id>/', views.OrderItemDetailView.as_view(), name='order_item_detail'),
    path('<int:order_id>/items/<int:item_id>/status/', views.OrderItemStatusView.as_view(), name='order_item_status'),
]
