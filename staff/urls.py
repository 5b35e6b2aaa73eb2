from django.urls import path
from . import views

urlpatterns = [
    path('', views.EmployeeListView.as_view(), name='employee_list'),
    path('role/<str:role>/', views.EmployeesByRoleView.as_view(), name='employees_by_role'),
    path('<int:employee_id>/', views.EmployeeDetailView.as_view(), name='employee_detail'),
    path('<int:employee_id>/activate/', views.EmployeeActivationView.as_view(activate=True), name='employee_activate'),
    path('<int:employee_id>/deactivate/', views.EmployeeActivationView.as_view(activate=False), name='employee_deactivate'),
]
