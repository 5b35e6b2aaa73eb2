from django.urls import path
from . import views

urlpatterns = [
    path('logs/', views.LedgerListView.as_view(), name='ledger_list'),
    path('logs/<int:entry_id>/', views.LedgerDetailView.as_view(), name='ledger_detail'),
    path('logs/product/<int:product_id>/', views.ProductLedgerView.as_view(), name='ledger_by_product'),
    path('logs/type/<str:change_type>/', views.LedgerByTypeView.as_view(), name='ledger_by_type'),
    path('wastage/', views.WastageView.as_view(), name='inventory_wastage'),
    path('restock/', views.RestockHistoryView.as_view(), name='inventory_restock'),
    path('statistics/', views.InventoryStatisticsView.as_view(), name='inventory_statistics'),
    path('alerts/', views.StockAlertsView.as_view(), name='inventory_alerts'),
]
