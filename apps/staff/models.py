# staff/models.py

from django.db import models
from django.core.validators import MinValueValidator
from django.core.exceptions import ValidationError
from decimal import Decimal
import logging

from utils.models import BaseModel

logger = logging.getLogger(__name__)


# =============================================================================
# EMPLOYEE
# =============================================================================

class Employee(BaseModel):
    """A member of staff whose time is logged against the firm's burn."""

    PAY_TYPE_CHOICES = (
        ('hourly', 'Hourly'),
        ('salary', 'Salary'),
    )

    name = models.CharField("Name", max_length=150, db_index=True)
    role = models.CharField("Role", max_length=100, blank=True)

    # -------------------------------------------------------------------------
    # COST BASIS
    # -------------------------------------------------------------------------

    hourly_cost = models.DecimalField(
        "Hourly Cost",
        max_digits=10,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text="Direct cost to the firm per hour (takes precedence over salary)"
    )
    salary = models.DecimalField(
        "Annual Salary",
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text="Annualized salary, used when no hourly cost is set"
    )
    daily_hours = models.DecimalField(
        "Daily Hours",
        max_digits=4,
        decimal_places=2,
        default=Decimal('8.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text="Hours this person works per day (8 when unset)"
    )
    daily_target = models.DecimalField(
        "Daily Target",
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="Target billing or revenue per day"
    )

    is_active = models.BooleanField("Active", default=True, db_index=True)

    class Meta:
        verbose_name = "Employee"
        verbose_name_plural = "Employees"
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.role})" if self.role else self.name

    @property
    def pay_type(self):
        return 'hourly' if self.hourly_cost and self.hourly_cost > 0 else 'salary'

    @property
    def effective_hourly_cost(self):
        from staff.utils import calculate_effective_hourly_cost
        return calculate_effective_hourly_cost(self)


# =============================================================================
# TASK LOG
# =============================================================================

class TaskLog(BaseModel):
    """
    A unit of logged work. Costs and value are frozen at logging time and
    never recomputed, even if the employee's rate or the overhead changes.
    """

    STATUS_CHOICES = (
        ('completed', 'Completed'),
        ('blocked', 'Blocked'),
        ('in_progress', 'In Progress'),
    )

    BILLING_TYPE_CHOICES = (
        ('billable', 'Billable (Hourly)'),
        ('flat_fee', 'Flat Fee Case'),
    )

    employee = models.ForeignKey(
        Employee,
        verbose_name="Employee",
        on_delete=models.PROTECT,
        related_name='task_logs'
    )
    date = models.DateField("Date", db_index=True)
    description = models.CharField("Description", max_length=500)
    hours = models.DecimalField(
        "Hours",
        max_digits=7,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )

    # -------------------------------------------------------------------------
    # FROZEN COSTS
    # -------------------------------------------------------------------------

    labor_cost = models.DecimalField(
        "Labor Cost",
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="hours x employee effective hourly cost at logging time"
    )
    production_cost = models.DecimalField(
        "Production Cost",
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="labor cost + hours x fixed overhead per hour at logging time"
    )

    # -------------------------------------------------------------------------
    # BILLING
    # -------------------------------------------------------------------------

    billing_type = models.CharField(
        "Billing Type",
        max_length=10,
        choices=BILLING_TYPE_CHOICES,
        default='billable'
    )
    client = models.ForeignKey(
        'clients.Client',
        verbose_name="Flat Fee Case",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='task_logs'
    )
    billable_value = models.DecimalField(
        "Billable Value",
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="Value of the work at logging time"
    )

    status = models.CharField(
        "Status",
        max_length=20,
        choices=STATUS_CHOICES,
        default='completed'
    )

    class Meta:
        verbose_name = "Task Log"
        verbose_name_plural = "Task Logs"
        ordering = ['-date', '-created_at']
        indexes = [
            models.Index(fields=['employee', 'date']),
        ]

    def __str__(self):
        return f"{self.employee.name} - {self.date} - {self.hours}h"

    def delete(self, *args, **kwargs):
        """Rejected before the deletion collector opens its transaction."""
        raise ValidationError("Task logs are append-only and cannot be deleted")

    @property
    def profit_or_loss(self):
        return self.billable_value - self.production_cost
