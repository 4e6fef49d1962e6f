# staff/services.py

"""
Staff Services

Staff workflows with database operations:
- Employee creation and updates
- Task logging (costs frozen at logging time)
- Flat-fee hours write-through to the client record

For pure calculations without DB writes, see staff/utils.py
"""

from decimal import Decimal, ROUND_HALF_UP
from django.db import transaction
from django.utils import timezone
from django.core.exceptions import ValidationError
import logging

from staff.models import Employee, TaskLog
from staff.utils import (
    BILLING_FLAT_FEE, calculate_task_valuation, calculate_default_daily_target,
    validate_employee_data, validate_task_log_data
)
from utils.utils import to_decimal

logger = logging.getLogger(__name__)

CENTS = Decimal('0.01')


def _to_cents(value):
    return to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


# =============================================================================
# EMPLOYEE SERVICE
# =============================================================================

class EmployeeService:

    EDITABLE_FIELDS = ('name', 'role', 'hourly_cost', 'salary', 'daily_hours', 'daily_target', 'is_active')

    @staticmethod
    @transaction.atomic
    def create_employee(*, name, role='', hourly_cost=None, salary=None, daily_hours=None,
                        daily_target=None, is_active=True):
        """
        Create an employee.

        Either hourly_cost or salary must be set; hourly_cost wins when both are.
        Without a daily_target the employee gets three times their hourly rate.
        """
        validation = validate_employee_data({
            'name': name,
            'hourly_cost': hourly_cost,
            'salary': salary,
            'daily_hours': daily_hours,
        })
        if not validation['valid']:
            raise ValidationError(validation['errors'])

        for warning in validation['warnings']:
            logger.info(f"Employee {name}: {warning}")

        daily_target = to_decimal(daily_target)
        if daily_target <= 0:
            daily_target = _to_cents(calculate_default_daily_target(hourly_cost, salary))

        employee = Employee.objects.create(
            name=name.strip(),
            role=(role or '').strip(),
            hourly_cost=to_decimal(hourly_cost),
            salary=to_decimal(salary, default=None),
            daily_hours=to_decimal(daily_hours) or Decimal('8'),
            daily_target=daily_target,
            is_active=is_active,
        )
        return employee

    @staticmethod
    @transaction.atomic
    def update_employee(employee, data):
        """
        Partial update. Past task logs keep the costs they were logged with.
        """
        merged = {
            'name': data.get('name', employee.name),
            'hourly_cost': data.get('hourly_cost', employee.hourly_cost),
            'salary': data.get('salary', employee.salary),
            'daily_hours': data.get('daily_hours', employee.daily_hours),
        }
        validation = validate_employee_data(merged)
        if not validation['valid']:
            raise ValidationError(validation['errors'])

        for field in EmployeeService.EDITABLE_FIELDS:
            if field not in data:
                continue
            value = data[field]
            if field in ('hourly_cost', 'daily_target'):
                value = to_decimal(value)
            elif field == 'salary':
                value = to_decimal(value, default=None)
            elif field == 'daily_hours':
                value = to_decimal(value) or Decimal('8')
            elif field in ('name', 'role'):
                value = (value or '').strip()
            setattr(employee, field, value)

        employee.save()
        logger.info(f"Employee updated: {employee.name}")
        return employee


# =============================================================================
# TASK LOGGING SERVICE
# =============================================================================

class TaskLoggingService:
    """
    Logs work against the firm's burn. Labor cost, production cost and value
    are computed once here and stored; they are never recomputed.
    """

    @staticmethod
    def get_current_hourly_overhead():
        """Fixed overhead per staff hour from the current settings and staff."""
        from finance.models import FinancialSettings
        from finance.utils import calculate_monthly_total, calculate_hourly_overhead

        settings = FinancialSettings.get_instance()
        monthly_total = calculate_monthly_total(settings, settings.custom_expenses.all())
        # Former staff keep their logs but no longer share the overhead
        employees = Employee.objects.filter(is_active=True)
        return calculate_hourly_overhead(monthly_total, employees)

    @staticmethod
    def preview_task(*, employee, hours, billing_type='billable', billable_rate=None, client=None):
        """Valuation of a task without writing anything."""
        return calculate_task_valuation(
            employee,
            hours,
            TaskLoggingService.get_current_hourly_overhead(),
            billing_type=billing_type,
            billable_rate=billable_rate,
            client=client,
        )

    @staticmethod
    @transaction.atomic
    def log_task(*, employee, hours, description, date=None, billing_type='billable',
                 billable_rate=None, client=None, status='completed'):
        """
        Log a task and freeze its costs.

        For flat-fee work the client's hours_logged grows by `hours` in the
        same transaction. There is no cap; overrun past the estimate is kept.

        Returns:
            tuple: (TaskLog, valuation dict)
        """
        from clients.models import Client

        validation = validate_task_log_data({
            'employee': employee,
            'description': description,
            'hours': hours,
            'billing_type': billing_type,
            'client': client,
            'billable_rate': billable_rate,
        })
        if not validation['valid']:
            raise ValidationError(validation['errors'])

        hours = to_decimal(hours)

        if billing_type == BILLING_FLAT_FEE:
            client = Client.objects.select_for_update().get(pk=client.pk)
            if client.billing_type != 'flat_fee':
                raise ValidationError("Selected case is not a flat fee case")
        else:
            client = None

        valuation = TaskLoggingService.preview_task(
            employee=employee,
            hours=hours,
            billing_type=billing_type,
            billable_rate=billable_rate,
            client=client,
        )

        task_log = TaskLog.objects.create(
            employee=employee,
            date=date or timezone.localdate(),
            description=description.strip(),
            hours=hours,
            labor_cost=_to_cents(valuation['labor_cost']),
            production_cost=_to_cents(valuation['production_cost']),
            billing_type=billing_type,
            client=client,
            billable_value=_to_cents(valuation['billable_value']),
            status=status or 'completed',
        )

        if client is not None:
            client.hours_logged = to_decimal(client.hours_logged) + hours
            client.save(update_fields=['hours_logged', 'updated_at', 'updated_from_ip'])
            logger.info(f"Case {client.name}: hours logged now {client.hours_logged} of {client.estimated_hours}")

        outcome = 'profitable' if valuation['is_profitable'] else 'money-losing'
        logger.info(
            f"Task logged for {employee.name}: {hours}h, production cost "
            f"{task_log.production_cost}, value {task_log.billable_value} ({outcome})"
        )
        return task_log, valuation
