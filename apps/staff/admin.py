# staff/admin.py

from django.contrib import admin
from .models import Employee, TaskLog


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ['name', 'role', 'hourly_cost', 'salary', 'daily_hours', 'daily_target', 'is_active']
    list_filter = ['is_active']
    search_fields = ['name', 'role']


@admin.register(TaskLog)
class TaskLogAdmin(admin.ModelAdmin):
    list_display = [
        'date', 'employee', 'description', 'hours', 'labor_cost',
        'production_cost', 'billing_type', 'billable_value', 'status'
    ]
    list_filter = ['status', 'billing_type', 'date']
    search_fields = ['description', 'employee__name']
    date_hierarchy = 'date'

    def has_change_permission(self, request, obj=None):
        # Costs are frozen at logging time
        return False

    def has_delete_permission(self, request, obj=None):
        return False
