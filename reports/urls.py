from django.urls import path
from . import views

urlpatterns = [
    path('daily/', views.DailySalesReportView.as_view(), name='report_daily'),
    path('monthly/', views.MonthlySalesReportView.as_view(), name='report_monthly'),
    path('employees/', views.EmployeePerformanceReportView.as_view(), name='report_employees'),
    path('most-sold/', views.MostSoldItemsReportView.as_view(), name='report_most_sold'),
    path('categories/', views.SalesByCategoryReportView.as_view(), name='report_categories'),
    path('revenue/', views.RevenueOverTimeReportView.as_view(), name='report_revenue'),
]
