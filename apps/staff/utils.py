# staff/utils.py

"""
Staff Utility Functions

Pure utility functions for staff operations:
- Effective hourly cost resolution (direct rate vs annualized salary)
- Task valuation at logging time (labor, overhead, production cost, value)
- Flat-fee value apportionment
- Efficiency ratios
- Input validation

NO DATABASE WRITES - Only calculations and validation.
For workflows with DB writes, see staff/services.py
"""

from decimal import Decimal
import logging

from utils.utils import to_decimal

logger = logging.getLogger(__name__)

DEFAULT_DAILY_HOURS = Decimal('8')
WORK_DAYS_PER_WEEK = Decimal('5')
WEEKS_PER_YEAR = Decimal('52')
ANNUAL_WORK_HOURS = Decimal('2080')
DAILY_TARGET_MULTIPLIER = Decimal('3')

BILLING_BILLABLE = 'billable'
BILLING_FLAT_FEE = 'flat_fee'


# =============================================================================
# COST BASIS
# =============================================================================

def get_daily_hours(employee):
    """Hours per day for an employee; unset or zero means 8."""
    daily_hours = to_decimal(getattr(employee, 'daily_hours', None))
    return daily_hours if daily_hours > 0 else DEFAULT_DAILY_HOURS


def calculate_effective_hourly_cost(employee):
    """
    Resolve the hourly cost basis for an employee.

    Args:
        employee: Employee (or any object with hourly_cost, salary, daily_hours)

    Returns:
        Decimal: hourly_cost if set, else salary / 52 / weekly hours, else 0.
        A zero result means the cost is unknown, not that the labor is free.

    Examples:
        hourly_cost=30, salary=90000          → 30
        hourly_cost=0, salary=52000, hours=8  → 25
        hourly_cost=0, salary=None            → 0
    """
    hourly_cost = to_decimal(getattr(employee, 'hourly_cost', None))
    if hourly_cost > 0:
        return hourly_cost

    salary = to_decimal(getattr(employee, 'salary', None))
    if salary > 0:
        weekly_hours = get_daily_hours(employee) * WORK_DAYS_PER_WEEK
        return salary / WEEKS_PER_YEAR / weekly_hours

    return Decimal('0')


def calculate_default_daily_target(hourly_cost, salary):
    """
    Billing target for a new employee with none given: three times their
    hourly rate, or salary / 2080 when no rate is set.

    Examples:
        hourly_cost=30, salary=None   → 90
        hourly_cost=0, salary=52000   → 75
    """
    rate = to_decimal(hourly_cost)
    if rate <= 0:
        rate = to_decimal(salary) / ANNUAL_WORK_HOURS
    return rate * DAILY_TARGET_MULTIPLIER


# =============================================================================
# TASK VALUATION
# =============================================================================

def calculate_flat_fee_value(hours, client):
    """
    Proportional slice of a flat-fee case's contracted value.

    The task consumes hours / estimated_hours of the flat fee, regardless of
    how far along the case is. Missing or zero estimated hours count as 1.
    """
    hours = to_decimal(hours)
    estimated_hours = to_decimal(getattr(client, 'estimated_hours', None))
    if estimated_hours <= 0:
        estimated_hours = Decimal('1')
    flat_fee_amount = to_decimal(getattr(client, 'flat_fee_amount', None))
    return (hours / estimated_hours) * flat_fee_amount


def calculate_task_valuation(employee, hours, hourly_overhead, billing_type=BILLING_BILLABLE,
                             billable_rate=None, client=None):
    """
    Value a unit of work at logging time.

    Args:
        employee: Employee doing the work
        hours: Hours spent
        hourly_overhead: Fixed overhead per staff hour (finance.utils.calculate_hourly_overhead)
        billing_type: 'billable' or 'flat_fee'
        billable_rate: Hourly rate for billable work
        client: Flat-fee Client the work is charged against

    Returns:
        dict: {
            'effective_hourly_cost', 'labor_cost', 'overhead_cost',
            'production_cost', 'billable_value', 'profit_or_loss',
            'is_profitable'
        }
    """
    hours = to_decimal(hours)
    effective_hourly_cost = calculate_effective_hourly_cost(employee) if employee is not None else Decimal('0')

    labor_cost = hours * effective_hourly_cost
    overhead_cost = hours * to_decimal(hourly_overhead)
    production_cost = labor_cost + overhead_cost

    if billing_type == BILLING_BILLABLE:
        billable_value = hours * to_decimal(billable_rate)
    elif client is not None:
        billable_value = calculate_flat_fee_value(hours, client)
    else:
        billable_value = Decimal('0')

    profit_or_loss = billable_value - production_cost

    return {
        'effective_hourly_cost': effective_hourly_cost,
        'labor_cost': labor_cost,
        'overhead_cost': overhead_cost,
        'production_cost': production_cost,
        'billable_value': billable_value,
        'profit_or_loss': profit_or_loss,
        # Break-even counts as profitable
        'is_profitable': profit_or_loss >= 0,
    }


# =============================================================================
# EFFICIENCY
# =============================================================================

def calculate_efficiency(labor_cost, production_cost):
    """
    Production-to-labor ratio for an employee's logged work.

    Returns:
        dict: {'efficiency': Decimal (1.00 with no labor), 'is_profitable': bool}
    """
    labor_cost = to_decimal(labor_cost)
    production_cost = to_decimal(production_cost)

    if labor_cost > 0:
        efficiency = (production_cost / labor_cost).quantize(Decimal('0.01'))
    else:
        efficiency = Decimal('1.00')

    return {
        'efficiency': efficiency,
        'is_profitable': efficiency >= 1,
    }


def summarize_employee_logs(employee, task_logs):
    """
    Totals for one employee over a collection of task logs.
    """
    employee_logs = [log for log in task_logs if log.employee_id == employee.id]

    hours = sum((to_decimal(log.hours) for log in employee_logs), Decimal('0'))
    labor_cost = sum((to_decimal(log.labor_cost) for log in employee_logs), Decimal('0'))
    production_cost = sum((to_decimal(log.production_cost) for log in employee_logs), Decimal('0'))

    summary = {
        'employee_id': str(employee.id),
        'name': employee.name,
        'role': employee.role,
        'effective_hourly_cost': calculate_effective_hourly_cost(employee),
        'log_count': len(employee_logs),
        'hours': hours,
        'labor_cost': labor_cost,
        'production_cost': production_cost,
    }
    summary.update(calculate_efficiency(labor_cost, production_cost))
    return summary


# =============================================================================
# VALIDATION HELPERS
# =============================================================================

def validate_employee_data(employee_data):
    """
    Validate employee data before creation.
    Pure validation - no DB writes.

    Returns:
        dict: {'valid': bool, 'errors': list of str, 'warnings': list of str}
    """
    errors = []
    warnings = []

    if not (employee_data.get('name') or '').strip():
        errors.append("Name is required")

    hourly_cost = to_decimal(employee_data.get('hourly_cost'))
    salary = to_decimal(employee_data.get('salary'))

    if hourly_cost <= 0 and salary <= 0:
        errors.append("Either an hourly cost or a salary is required")
    if hourly_cost < 0 or salary < 0:
        errors.append("Cost values cannot be negative")
    if hourly_cost > 0 and salary > 0:
        warnings.append("Hourly cost takes precedence over salary")

    daily_hours = to_decimal(employee_data.get('daily_hours'))
    if daily_hours > 24:
        errors.append("Daily hours cannot exceed 24")

    return {
        'valid': len(errors) == 0,
        'errors': errors,
        'warnings': warnings
    }


def validate_task_log_data(task_data):
    """
    Validate task log data before logging.
    Pure validation - no DB writes.

    Returns:
        dict: {'valid': bool, 'errors': list of str, 'warnings': list of str}
    """
    errors = []
    warnings = []

    if not task_data.get('employee'):
        errors.append("Employee is required")
    if not (task_data.get('description') or '').strip():
        errors.append("Description is required")

    hours = to_decimal(task_data.get('hours'))
    if hours <= 0:
        errors.append("Hours spent must be greater than zero")

    billing_type = task_data.get('billing_type') or BILLING_BILLABLE
    if billing_type not in (BILLING_BILLABLE, BILLING_FLAT_FEE):
        errors.append(f"Unknown billing type: {billing_type}")
    elif billing_type == BILLING_FLAT_FEE and not task_data.get('client'):
        errors.append("A case is required for flat fee work")
    elif billing_type == BILLING_BILLABLE:
        if to_decimal(task_data.get('billable_rate')) < 0:
            errors.append("Billable rate cannot be negative")
        elif to_decimal(task_data.get('billable_rate')) == 0:
            warnings.append("No billable rate entered; task value will be zero")

    return {
        'valid': len(errors) == 0,
        'errors': errors,
        'warnings': warnings
    }
