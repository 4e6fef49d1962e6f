# finance/utils.py

"""
Finance Utility Functions

Pure utility functions for the firm's money math:
- Fixed overhead apportionment (monthly total, hourly and daily overhead)
- Daily burn metrics, cash runway and burn health
- Weekly profit & loss windows
- Smart expense routing
- Cashbox ledger folding and totals
- Input validation

NO DATABASE WRITES - Only calculations and validation.
For workflows with DB writes, see finance/services.py
"""

from datetime import datetime, time, timedelta
from decimal import Decimal, ROUND_FLOOR
import logging

from django.utils import timezone

from utils.utils import to_decimal
from staff.utils import get_daily_hours, summarize_employee_logs

logger = logging.getLogger(__name__)

OPERATING_DAYS_PER_MONTH = Decimal('20')
FALLBACK_MONTHLY_STAFF_HOURS = Decimal('160')
DAYS_PER_WEEK = 7
OVERHEAD_DUPLICATION_FACTOR = Decimal('2.5')

BURN_STATUS_HEALTHY = 'HEALTHY'
BURN_STATUS_RISK = 'RISK: HIGH OVERHEAD'

FIXED_EXPENSE_FIELDS = (
    'monthly_lease',
    'payroll',
    'case_management',
    'phone',
    'wifi',
    'printer',
    'postage',
    'efile',
    'supplies',
    'chargebacks',
    'staff_lunch',
    'other_monthly_expenses',
)


# =============================================================================
# FIXED OVERHEAD APPORTIONMENT
# =============================================================================

def calculate_monthly_total(financials, custom_expenses=()):
    """
    Sum of every fixed monthly line item plus every custom expense.
    Missing values count as 0.
    """
    named_total = sum(
        (to_decimal(getattr(financials, field, None)) for field in FIXED_EXPENSE_FIELDS),
        Decimal('0')
    ) if financials is not None else Decimal('0')

    custom_total = sum(
        (to_decimal(getattr(expense, 'amount', None)) for expense in custom_expenses),
        Decimal('0')
    )
    return named_total + custom_total


def calculate_total_daily_staff_hours(employees):
    """Sum of each employee's daily hours (8 when unset)."""
    return sum((get_daily_hours(employee) for employee in employees), Decimal('0'))


def calculate_hourly_overhead(monthly_total, employees):
    """
    Fixed overhead per staff hour, used to cost logged work.

    monthly_total / (total daily staff hours * 20), or monthly_total / 160
    when there are no staff hours (one 8-hour employee for 20 days).
    """
    monthly_total = to_decimal(monthly_total)
    monthly_staff_hours = calculate_total_daily_staff_hours(employees) * OPERATING_DAYS_PER_MONTH
    if monthly_staff_hours > 0:
        return monthly_total / monthly_staff_hours
    return monthly_total / FALLBACK_MONTHLY_STAFF_HOURS


def calculate_daily_fixed_overhead(monthly_total):
    """
    Fixed overhead per operating day, used for burn metrics.

    Always monthly_total / 20 and independent of staff hours, so it does not
    agree with calculate_hourly_overhead. Both figures are kept.
    """
    return to_decimal(monthly_total) / OPERATING_DAYS_PER_MONTH


# =============================================================================
# DAILY BURN
# =============================================================================

def calculate_daily_burn_metrics(task_logs, monthly_total, today=None):
    """
    Burn metrics for one day.

    Args:
        task_logs: TaskLogs (any day; filtered to `today`)
        monthly_total: Result of calculate_monthly_total
        today: date (defaults to the firm's local date)

    Returns:
        dict: {
            'daily_payroll', 'total_daily_hours', 'daily_fixed_overhead',
            'total_daily_burn', 'hourly_burn_rate' (None with no hours logged)
        }
    """
    today = today or timezone.localdate()
    todays_logs = [log for log in task_logs if log.date == today]

    daily_payroll = sum((to_decimal(log.labor_cost) for log in todays_logs), Decimal('0'))
    total_daily_hours = sum((to_decimal(log.hours) for log in todays_logs), Decimal('0'))
    daily_fixed_overhead = calculate_daily_fixed_overhead(monthly_total)
    total_daily_burn = daily_payroll + daily_fixed_overhead

    if total_daily_hours > 0:
        hourly_burn_rate = total_daily_burn / total_daily_hours
    else:
        hourly_burn_rate = None

    return {
        'daily_payroll': daily_payroll,
        'total_daily_hours': total_daily_hours,
        'daily_fixed_overhead': daily_fixed_overhead,
        'total_daily_burn': total_daily_burn,
        'hourly_burn_rate': hourly_burn_rate,
    }


def calculate_cash_runway_days(cash_on_hand, total_daily_burn):
    """
    Days of operation left at the current burn.

    Returns:
        int: floor(cash / burn); 0 when cash is negative
        None: unbounded runway (no burn)
    """
    cash_on_hand = to_decimal(cash_on_hand)
    total_daily_burn = to_decimal(total_daily_burn)

    if cash_on_hand < 0:
        return 0
    if total_daily_burn <= 0:
        return None
    return int((cash_on_hand / total_daily_burn).to_integral_value(rounding=ROUND_FLOOR))


def format_runway(runway_days):
    return '∞' if runway_days is None else f"{runway_days} Days"


def assess_burn_health(burn_metrics):
    """
    Flag burn that is mostly fixed overhead.

    Risk when total burn exceeds 2.5x the day's payroll (and payroll > 0).
    Health ratio is payroll as a percentage of total burn.
    """
    daily_payroll = to_decimal(burn_metrics.get('daily_payroll'))
    total_daily_burn = to_decimal(burn_metrics.get('total_daily_burn'))

    overhead_duplication_risk = (
        daily_payroll > 0 and total_daily_burn > daily_payroll * OVERHEAD_DUPLICATION_FACTOR
    )

    if daily_payroll > 0 and total_daily_burn > 0:
        health_ratio = (daily_payroll / total_daily_burn) * 100
    else:
        health_ratio = Decimal('0')

    return {
        'overhead_duplication_risk': overhead_duplication_risk,
        'health_ratio': health_ratio,
        'status': BURN_STATUS_RISK if overhead_duplication_risk else BURN_STATUS_HEALTHY,
    }


# =============================================================================
# SMART EXPENSE ROUTING
# =============================================================================

# Exhaustive synonym table: normalized expense name -> FinancialSettings field
EXPENSE_ROUTING_TABLE = {
    'lease': 'monthly_lease',
    'rent': 'monthly_lease',
    'office lease': 'monthly_lease',
    'payroll': 'payroll',
    'staff': 'payroll',
    'labor': 'payroll',
    'clio': 'case_management',
    'case management': 'case_management',
    'phone': 'phone',
    'phones': 'phone',
    'wifi': 'wifi',
    'internet': 'wifi',
    'frontier': 'wifi',
    'printer': 'printer',
    'printing': 'printer',
    'kirbo': 'printer',
    'postage': 'postage',
    'stamps': 'postage',
    'mail': 'postage',
    'efile': 'efile',
    'filing fees': 'efile',
    'supplies': 'supplies',
    'office supplies': 'supplies',
    'chargebacks': 'chargebacks',
    'lunch': 'staff_lunch',
    'staff lunch': 'staff_lunch',
    'meals': 'staff_lunch',
}


def normalize_expense_name(name):
    return (name or '').strip().casefold()


def route_expense_name(name):
    """
    Named FinancialSettings field for an expense name, or None when the
    expense should be kept as a custom expense.
    """
    return EXPENSE_ROUTING_TABLE.get(normalize_expense_name(name))


# =============================================================================
# WEEK WINDOWS
# =============================================================================

def _day_start(day):
    return timezone.make_aware(datetime.combine(day, time.min))


def _day_end(day):
    return timezone.make_aware(datetime.combine(day, time.max))


def get_fiscal_week_range(today=None):
    """
    Wednesday-to-Tuesday week containing `today`.

    Returns:
        tuple: (start, end) aware datetimes, Wednesday 00:00:00 through
        Tuesday 23:59:59.999999
    """
    today = today or timezone.localdate()
    days_since_wednesday = (today.weekday() - 2) % 7
    start = today - timedelta(days=days_since_wednesday)
    end = start + timedelta(days=DAYS_PER_WEEK - 1)
    return _day_start(start), _day_end(end)


def get_calendar_week_range(today=None):
    """Monday-to-Sunday week containing `today`."""
    today = today or timezone.localdate()
    start = today - timedelta(days=today.weekday())
    end = start + timedelta(days=DAYS_PER_WEEK - 1)
    return _day_start(start), _day_end(end)


def get_week_range(week='fiscal', today=None):
    if week == 'calendar':
        return get_calendar_week_range(today)
    return get_fiscal_week_range(today)


def anchor_to_noon(value):
    """
    Aware local datetime for a record date. Bare dates sit at 12:00 so they
    never fall across a window boundary after a timezone shift.
    """
    if isinstance(value, datetime):
        if timezone.is_naive(value):
            return timezone.make_aware(value)
        return timezone.localtime(value)
    return timezone.make_aware(datetime.combine(value, time(12, 0)))


def is_within_window(value, start, end):
    if value is None:
        return False
    return start <= anchor_to_noon(value) <= end


# =============================================================================
# WEEKLY PROFIT & LOSS
# =============================================================================

def calculate_efficiency_ratio(income, expenses):
    """
    Income per dollar of expense for display.
    The denominator floor of 1 only guards division; it is not a default expense.
    """
    return to_decimal(income) / max(to_decimal(expenses), Decimal('1'))


def calculate_weekly_profit_and_loss(task_logs, income_entries, employees, daily_fixed_overhead,
                                     week_start, week_end):
    """
    Profit & loss for one week window.

    Returns:
        dict: {
            'week_start', 'week_end', 'income', 'income_count',
            'labor_cost', 'production_cost', 'fixed_overhead', 'expenses',
            'net', 'efficiency_ratio', 'is_profitable', 'cost_drivers'
        }
    """
    weekly_logs = [log for log in task_logs if is_within_window(log.date, week_start, week_end)]
    weekly_income = [entry for entry in income_entries if is_within_window(entry.date, week_start, week_end)]

    income = sum((to_decimal(entry.amount) for entry in weekly_income), Decimal('0'))
    labor_cost = sum((to_decimal(log.labor_cost) for log in weekly_logs), Decimal('0'))
    production_cost = sum((to_decimal(log.production_cost) for log in weekly_logs), Decimal('0'))
    fixed_overhead = to_decimal(daily_fixed_overhead) * DAYS_PER_WEEK
    expenses = labor_cost + fixed_overhead
    net = income - expenses

    cost_drivers = [
        summary for summary in (summarize_employee_logs(employee, weekly_logs) for employee in employees)
        if summary['log_count']
    ]
    cost_drivers.sort(key=lambda summary: summary['labor_cost'], reverse=True)

    return {
        'week_start': week_start,
        'week_end': week_end,
        'income': income,
        'income_count': len(weekly_income),
        'labor_cost': labor_cost,
        'production_cost': production_cost,
        'fixed_overhead': fixed_overhead,
        'expenses': expenses,
        'net': net,
        'efficiency_ratio': calculate_efficiency_ratio(income, expenses),
        'is_profitable': net > 0,
        'cost_drivers': cost_drivers,
    }


# =============================================================================
# CASHBOX
# =============================================================================

def signed_amount(direction, amount):
    """+amount for a deposit, -amount for a withdrawal."""
    amount = to_decimal(amount)
    return amount if direction == 'in' else -amount


def derive_cashbox_balance(transactions, opening_balance=Decimal('0')):
    """Fold the ledger into a balance."""
    return sum(
        (signed_amount(tx.direction, tx.amount) for tx in transactions),
        to_decimal(opening_balance)
    )


def summarize_cashbox(transactions):
    """
    Ledger totals.

    Returns:
        dict: {'cash_in', 'check_in', 'total_in', 'total_out', 'net', 'count'}
    """
    cash_in = Decimal('0')
    check_in = Decimal('0')
    total_out = Decimal('0')
    count = 0

    for tx in transactions:
        count += 1
        amount = to_decimal(tx.amount)
        if tx.direction == 'in':
            if tx.payment_method == 'check':
                check_in += amount
            else:
                cash_in += amount
        else:
            total_out += amount

    total_in = cash_in + check_in
    return {
        'cash_in': cash_in,
        'check_in': check_in,
        'total_in': total_in,
        'total_out': total_out,
        'net': total_in - total_out,
        'count': count,
    }


# =============================================================================
# VALIDATION HELPERS
# =============================================================================

def validate_expense_data(expense_data):
    """
    Validate a free-text expense before routing.

    Returns:
        dict: {'valid': bool, 'errors': list, 'warnings': list, 'routed_field': str or None}
    """
    errors = []
    warnings = []

    name = normalize_expense_name(expense_data.get('name'))
    if not name:
        errors.append("Expense name is required")

    raw_amount = expense_data.get('amount')
    amount = to_decimal(raw_amount, default=None)
    if amount is None:
        errors.append("Expense amount is required")
    elif amount < 0:
        errors.append("Expense amount cannot be negative")

    routed_field = route_expense_name(name) if name else None
    if routed_field:
        warnings.append(f"'{expense_data.get('name')}' updates {routed_field} instead of adding a custom expense")

    return {
        'valid': len(errors) == 0,
        'errors': errors,
        'warnings': warnings,
        'routed_field': routed_field,
    }


def validate_cash_transaction_data(tx_data, deposit_categories, withdrawal_categories):
    """
    Validate a cashbox entry before recording.

    Returns:
        dict: {'valid': bool, 'errors': list, 'warnings': list}
    """
    errors = []
    warnings = []

    direction = tx_data.get('direction')
    if direction not in ('in', 'out'):
        errors.append("Type must be 'in' or 'out'")

    if tx_data.get('payment_method', 'cash') not in ('cash', 'check'):
        errors.append("Payment method must be 'cash' or 'check'")

    amount = to_decimal(tx_data.get('amount'))
    if amount <= 0:
        errors.append("Amount must be greater than zero")

    if not (tx_data.get('description') or '').strip():
        errors.append("Description is required")

    category = tx_data.get('category')
    if direction in ('in', 'out'):
        allowed = deposit_categories if direction == 'in' else withdrawal_categories
        if category not in allowed:
            errors.append(f"Invalid category '{category}' for this transaction type")

    return {
        'valid': len(errors) == 0,
        'errors': errors,
        'warnings': warnings
    }
