from django.urls import path
from . import views

urlpatterns = [
    path('', views.PaymentListView.as_view(), name='payment_list'),
    path('daily/', views.DailyPaymentsView.as_view(), name='payment_daily'),
    path('statistics/', views.PaymentStatisticsView.as_view(), name='payment_statistics'),
    path('method/<str:method>/', views.PaymentsByMethodView.as_view(), name='payments_by_method'),
    path('receipt/<str:receipt_number>/', views.PaymentByReceiptView.as_view(), name='payment_by_receipt'),
    path('<int:payment_id>/', views.PaymentDetailView.as_view(), name='payment_detail'),
    path('<int:payment_id>/receipt/', views.ReceiptView.as_view(), name='payment_receipt'),
]
