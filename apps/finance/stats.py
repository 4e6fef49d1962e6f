# finance/stats.py
"""
Statistics functions for firm finances.
Loads records and delegates the math to finance/utils.py
"""

from django.utils import timezone
from django.db.models import Sum, Count
from datetime import timedelta
from decimal import Decimal
import logging

from utils.utils import decimal_to_float

logger = logging.getLogger(__name__)


def _floats(data):
    return {
        key: decimal_to_float(value) if isinstance(value, Decimal) else value
        for key, value in data.items()
    }


# =============================================================================
# OVERHEAD
# =============================================================================

def get_overhead_statistics():
    """
    Monthly total and both overhead normalizations.

    Returns:
        dict: monthly_total, custom_expense_total, hourly_overhead,
              daily_fixed_overhead, total_daily_staff_hours, line_items
    """
    from finance.models import FinancialSettings
    from finance.utils import (
        calculate_monthly_total, calculate_hourly_overhead,
        calculate_daily_fixed_overhead, calculate_total_daily_staff_hours
    )
    from staff.models import Employee

    settings = FinancialSettings.get_instance()
    custom_expenses = list(settings.custom_expenses.all())
    employees = list(Employee.objects.filter(is_active=True))

    monthly_total = calculate_monthly_total(settings, custom_expenses)

    return {
        'monthly_total': float(monthly_total),
        'custom_expense_total': float(sum((e.amount for e in custom_expenses), Decimal('0'))),
        'hourly_overhead': float(calculate_hourly_overhead(monthly_total, employees)),
        'daily_fixed_overhead': float(calculate_daily_fixed_overhead(monthly_total)),
        'total_daily_staff_hours': float(calculate_total_daily_staff_hours(employees)),
        'line_items': {field: float(amount) for field, amount in settings.get_fixed_expenses().items()},
        'custom_expenses': [
            {'id': str(e.id), 'name': e.name, 'amount': float(e.amount)}
            for e in custom_expenses
        ],
    }


# =============================================================================
# BURN
# =============================================================================

def get_burn_statistics(today=None):
    """
    Today's burn metrics with runway and burn health.
    """
    from finance.models import FinancialSettings
    from finance.utils import (
        calculate_monthly_total, calculate_daily_burn_metrics,
        calculate_cash_runway_days, assess_burn_health, format_runway
    )
    from staff.models import TaskLog

    today = today or timezone.localdate()
    settings = FinancialSettings.get_instance()
    monthly_total = calculate_monthly_total(settings, settings.custom_expenses.all())

    todays_logs = list(TaskLog.objects.filter(date=today))
    burn = calculate_daily_burn_metrics(todays_logs, monthly_total, today)
    runway_days = calculate_cash_runway_days(settings.cash_on_hand, burn['total_daily_burn'])
    health = assess_burn_health(burn)

    stats = _floats(burn)
    stats.update({
        'date': today.isoformat(),
        'cash_on_hand': float(settings.cash_on_hand),
        'debt': float(settings.debt),
        'runway_days': runway_days,
        'runway_display': format_runway(runway_days),
        'burn_health': _floats(health),
    })
    return stats


# =============================================================================
# WEEKLY PROFIT & LOSS
# =============================================================================

def get_weekly_pnl_statistics(week='fiscal', today=None):
    """
    Weekly P&L for the fiscal (Wed-Tue) or calendar (Mon-Sun) week.
    """
    from finance.models import FinancialSettings, IncomeEntry
    from finance.utils import (
        calculate_monthly_total, calculate_daily_fixed_overhead,
        calculate_weekly_profit_and_loss, get_week_range
    )
    from staff.models import Employee, TaskLog

    week_start, week_end = get_week_range(week, today)

    settings = FinancialSettings.get_instance()
    monthly_total = calculate_monthly_total(settings, settings.custom_expenses.all())

    # Pad the date filter by a day either side; the noon-anchored window check decides
    start_date = week_start.date() - timedelta(days=1)
    end_date = week_end.date() + timedelta(days=1)

    task_logs = list(TaskLog.objects.filter(date__range=(start_date, end_date)).select_related('employee'))
    income_entries = list(IncomeEntry.objects.filter(date__range=(start_date, end_date)))

    pnl = calculate_weekly_profit_and_loss(
        task_logs,
        income_entries,
        list(Employee.objects.all()),
        calculate_daily_fixed_overhead(monthly_total),
        week_start,
        week_end
    )

    stats = _floats({k: v for k, v in pnl.items() if k not in ('week_start', 'week_end', 'cost_drivers')})
    stats.update({
        'week': 'calendar' if week == 'calendar' else 'fiscal',
        'week_start': week_start.isoformat(),
        'week_end': week_end.isoformat(),
        'cost_drivers': [_floats(driver) for driver in pnl['cost_drivers']],
        'income_entries': [
            {
                'id': str(entry.id),
                'date': entry.date.isoformat(),
                'amount': float(entry.amount),
                'client_name': entry.client_name,
                'category': entry.category,
                'method': entry.method,
            }
            for entry in income_entries
            if week_start.date() <= entry.date <= week_end.date()
        ],
    })
    return stats


# =============================================================================
# CASHBOX
# =============================================================================

def get_cashbox_statistics():
    """
    Cashbox balance and ledger totals.
    """
    from finance.models import FinancialSettings, CashTransaction
    from finance.utils import summarize_cashbox

    settings = FinancialSettings.get_instance()
    transactions = CashTransaction.objects.all()

    stats = _floats(summarize_cashbox(transactions))
    stats['balance'] = float(settings.cashbox_balance)
    stats['by_category'] = {
        row['category']: {'count': row['count'], 'total': float(row['total'] or 0)}
        for row in transactions.order_by().values('category').annotate(count=Count('id'), total=Sum('amount'))
    }
    return stats
