from django.urls import path
from . import views

urlpatterns = [
    path('', views.TableListView.as_view(), name='table_list'),
    path('available/', views.AvailableTablesView.as_view(), name='table_available'),
    path('statistics/', views.TableStatisticsView.as_view(), name='table_statistics'),
    path('<int:table_id>/', views.TableDetailView.as_view(), name='table_detail'),
    path('<int:table_id>/status/', views.TableStatusView.as_view(), name='table_status'),
    path('<int:table_id>/occupy/', views.OccupyTableView.as_view(), name='table_occupy'),
    path('<int:table_id>/free/', views.FreeTableView.as_view(), name='table_free'),
]
