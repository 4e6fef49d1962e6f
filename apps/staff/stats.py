# staff/stats.py
"""
Statistics functions for staff and logged work
"""

from django.utils import timezone
from django.db.models import Count, Sum
from decimal import Decimal
import logging

logger = logging.getLogger(__name__)


# =============================================================================
# STAFF STATISTICS
# =============================================================================

def get_staff_statistics(filters=None):
    """
    Roster and productivity statistics.

    Args:
        filters (dict): Optional filters
            - date_range: Tuple of (start_date, end_date) for task logs
            - employee: Employee id

    Returns:
        dict: roster counts, billing target, totals and per-employee efficiency
    """
    from staff.models import Employee, TaskLog
    from staff.utils import summarize_employee_logs

    today = timezone.localdate()

    employees = Employee.objects.filter(is_active=True)
    logs = TaskLog.objects.all()

    if filters:
        if filters.get('date_range'):
            start_date, end_date = filters['date_range']
            logs = logs.filter(date__gte=start_date, date__lte=end_date)
        if filters.get('employee'):
            logs = logs.filter(employee_id=filters['employee'])
            employees = employees.filter(id=filters['employee'])

    totals = logs.aggregate(
        hours=Sum('hours'),
        labor_cost=Sum('labor_cost'),
        production_cost=Sum('production_cost'),
        billable_value=Sum('billable_value'),
    )
    log_list = list(logs)

    per_employee = []
    for employee in employees:
        summary = summarize_employee_logs(employee, log_list)
        per_employee.append({
            'employee_id': summary['employee_id'],
            'name': summary['name'],
            'role': summary['role'],
            'effective_hourly_cost': float(summary['effective_hourly_cost']),
            'log_count': summary['log_count'],
            'hours': float(summary['hours']),
            'labor_cost': float(summary['labor_cost']),
            'production_cost': float(summary['production_cost']),
            'efficiency': float(summary['efficiency']),
            'is_profitable': summary['is_profitable'],
        })

    return {
        'total_employees': employees.count(),
        'hourly_employees': employees.filter(hourly_cost__gt=0).count(),
        'salaried_employees': employees.filter(hourly_cost=0, salary__gt=0).count(),
        'billing_target': float(employees.aggregate(total=Sum('daily_target'))['total'] or 0),

        'total_logs': len(log_list),
        'logs_today': logs.filter(date=today).count(),
        'total_hours': float(totals['hours'] or 0),
        'total_labor_cost': float(totals['labor_cost'] or 0),
        'total_production_cost': float(totals['production_cost'] or 0),
        'total_billable_value': float(totals['billable_value'] or 0),

        'by_status': dict(
            logs.order_by().values('status')
            .annotate(count=Count('id'))
            .values_list('status', 'count')
        ),
        'by_billing_type': dict(
            logs.order_by().values('billing_type')
            .annotate(count=Count('id'))
            .values_list('billing_type', 'count')
        ),

        'profitable_tasks': sum(1 for log in log_list if log.profit_or_loss >= Decimal('0')),
        'money_losing_tasks': sum(1 for log in log_list if log.profit_or_loss < Decimal('0')),

        'per_employee': per_employee,
    }
