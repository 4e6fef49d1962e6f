# core/metrics.py

"""
Firm Metrics Engine

One pure function over a FirmSnapshot that assembles every derived figure
the command center shows:
- Monthly fixed total and hourly overhead
- Today's burn, cash runway and burn health
- Billing target
- Client portfolio counts and flat-fee totals
- Open tickets
- Cashbox totals
- Per-employee productivity

NO DATABASE ACCESS - callers load the snapshot (core/repository.py).
"""

from decimal import Decimal
import logging

from django.utils import timezone

from utils.utils import to_decimal
from finance.utils import (
    calculate_monthly_total, calculate_hourly_overhead, calculate_daily_fixed_overhead,
    calculate_daily_burn_metrics, calculate_cash_runway_days, format_runway,
    assess_burn_health, summarize_cashbox
)
from staff.utils import summarize_employee_logs
from clients.utils import summarize_client_portfolio

logger = logging.getLogger(__name__)

OPEN_TICKET_STATUSES = ('open', 'in_progress')


def calculate_billing_target(employees):
    """Sum of every employee's daily billing target."""
    return sum((to_decimal(getattr(e, 'daily_target', None)) for e in employees), Decimal('0'))


def count_open_tickets(tickets):
    return sum(1 for ticket in tickets if ticket.status in OPEN_TICKET_STATUSES)


def compute_firm_metrics(snapshot, today=None):
    """
    Derive the firm's metrics from one snapshot.

    Args:
        snapshot: core.repository.FirmSnapshot
        today: date the burn is measured for (defaults to the firm's local date)

    Returns:
        dict: {
            'date', 'monthly_total', 'hourly_overhead', 'daily_fixed_overhead',
            'burn', 'runway_days', 'runway_display', 'burn_health',
            'billing_target', 'clients', 'open_tickets', 'cashbox',
            'cash_on_hand', 'debt', 'staff'
        }
    """
    today = today or timezone.localdate()
    financials = snapshot.financials
    active_employees = snapshot.active_employees

    monthly_total = calculate_monthly_total(financials, snapshot.custom_expenses)
    burn = calculate_daily_burn_metrics(snapshot.task_logs, monthly_total, today)

    cash_on_hand = to_decimal(getattr(financials, 'cash_on_hand', None))
    runway_days = calculate_cash_runway_days(cash_on_hand, burn['total_daily_burn'])

    cashbox = summarize_cashbox(snapshot.cash_transactions)
    cashbox['balance'] = to_decimal(getattr(financials, 'cashbox_balance', None))

    return {
        'date': today,
        'monthly_total': monthly_total,
        'hourly_overhead': calculate_hourly_overhead(monthly_total, active_employees),
        'daily_fixed_overhead': calculate_daily_fixed_overhead(monthly_total),
        'burn': burn,
        'runway_days': runway_days,
        'runway_display': format_runway(runway_days),
        'burn_health': assess_burn_health(burn),
        'billing_target': calculate_billing_target(active_employees),
        'clients': summarize_client_portfolio(snapshot.clients),
        'open_tickets': count_open_tickets(snapshot.tickets),
        'cashbox': cashbox,
        'cash_on_hand': cash_on_hand,
        'debt': to_decimal(getattr(financials, 'debt', None)),
        'staff': [summarize_employee_logs(employee, snapshot.task_logs) for employee in snapshot.employees],
    }
