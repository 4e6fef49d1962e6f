# staff/urls.py
from django.urls import path
from . import views

app_name = 'staff'

urlpatterns = [
    # Employees
    path('employees/', views.employee_list, name='employee_list'),
    path('employees/create/', views.employee_create, name='employee_create'),
    path('employees/<uuid:employee_id>/update/', views.employee_update, name='employee_update'),

    # Task logs
    path('tasks/', views.task_log_list, name='task_log_list'),
    path('tasks/create/', views.task_log_create, name='task_log_create'),
    path('tasks/preview/', views.task_preview, name='task_preview'),

    # Statistics
    path('stats/', views.staff_stats, name='staff_stats'),
]
