# clients/utils.py

"""
Client Utility Functions

Pure utility functions for client files:
- Flat-fee progress (display clamp) and value per budgeted hour
- Communication discipline (14-day update rule)
- Portfolio summaries
- Input validation

NO DATABASE WRITES - Only calculations and validation.
For workflows with DB writes, see clients/services.py
"""

from datetime import timedelta
from decimal import Decimal
import logging

from django.utils import timezone

from utils.utils import to_decimal

logger = logging.getLogger(__name__)

COMMUNICATION_INTERVAL_DAYS = 14
PAYMENT_TERM_DAYS = 30
MAX_PROGRESS = Decimal('100')


# =============================================================================
# FLAT FEE CASES
# =============================================================================

def _budgeted_hours(client):
    estimated_hours = to_decimal(getattr(client, 'estimated_hours', None))
    return estimated_hours if estimated_hours > 0 else Decimal('1')


def calculate_progress_percentage(client):
    """
    Share of budgeted hours used, clamped to 100 for display.
    The stored hours_logged is never clamped. Hourly clients show 0.
    """
    if getattr(client, 'billing_type', None) != 'flat_fee':
        return Decimal('0')
    hours_logged = to_decimal(getattr(client, 'hours_logged', None))
    return min(hours_logged / _budgeted_hours(client) * 100, MAX_PROGRESS)


def is_over_budget(client):
    return to_decimal(getattr(client, 'hours_logged', None)) > to_decimal(getattr(client, 'estimated_hours', None))


def calculate_value_per_hour(client):
    """Flat fee divided by budgeted hours (missing estimate counts as 1)."""
    return to_decimal(getattr(client, 'flat_fee_amount', None)) / _budgeted_hours(client)


# =============================================================================
# COMMUNICATION
# =============================================================================

def days_since_communication(client, now=None):
    """Whole days since the last update; None when there has never been one."""
    last_communication = getattr(client, 'last_communication', None)
    if not last_communication:
        return None
    now = now or timezone.now()
    return (now - last_communication).days


def is_communication_overdue(client, now=None):
    """Rule #1: every client gets an update every 14 days."""
    days = days_since_communication(client, now)
    return days is not None and days > COMMUNICATION_INTERVAL_DAYS


def default_next_payment_due(today=None):
    today = today or timezone.localdate()
    return today + timedelta(days=PAYMENT_TERM_DAYS)


# =============================================================================
# PORTFOLIO
# =============================================================================

def summarize_client_portfolio(clients, now=None):
    """
    Counts and flat-fee totals over a collection of clients.

    At-risk counts both 'risk' and 'churned' clients.
    """
    clients = list(clients)
    flat_fee_clients = [c for c in clients if c.billing_type == 'flat_fee']

    return {
        'total_clients': len(clients),
        'active_clients': sum(1 for c in clients if c.status == 'active'),
        'at_risk_clients': sum(1 for c in clients if c.status in ('risk', 'churned')),
        'churned_clients': sum(1 for c in clients if c.status == 'churned'),
        'communication_overdue': sum(1 for c in clients if is_communication_overdue(c, now)),
        'flat_fee_cases': len(flat_fee_clients),
        'flat_fee_contract_value': sum(
            (to_decimal(c.flat_fee_amount) for c in flat_fee_clients), Decimal('0')
        ),
        'flat_fee_hours_budgeted': sum(
            (to_decimal(c.estimated_hours) for c in flat_fee_clients), Decimal('0')
        ),
        'flat_fee_hours_logged': sum(
            (to_decimal(c.hours_logged) for c in flat_fee_clients), Decimal('0')
        ),
        'over_budget_cases': sum(1 for c in flat_fee_clients if is_over_budget(c)),
    }


# =============================================================================
# VALIDATION HELPERS
# =============================================================================

def validate_client_data(client_data):
    """
    Validate client intake data.
    Pure validation - no DB writes.

    Returns:
        dict: {'valid': bool, 'errors': list of str, 'warnings': list of str}
    """
    errors = []
    warnings = []

    if not (client_data.get('name') or '').strip() or not (client_data.get('sponsor_name') or '').strip():
        errors.append("Please enter at least the Client Name and Sponsor Name.")

    billing_type = client_data.get('billing_type') or 'flat_fee'
    if billing_type not in ('hourly', 'flat_fee'):
        errors.append(f"Unknown billing type: {billing_type}")
    elif billing_type == 'flat_fee':
        if to_decimal(client_data.get('flat_fee_amount')) <= 0 or to_decimal(client_data.get('estimated_hours')) <= 0:
            errors.append(
                "For flat fee cases, please enter the Flat Fee Amount and Estimated Hours to complete."
            )

    for field in ('flat_fee_amount', 'estimated_hours', 'retainer_fee', 'monthly_fee'):
        if to_decimal(client_data.get(field)) < 0:
            errors.append(f"{field.replace('_', ' ').capitalize()} cannot be negative")

    return {
        'valid': len(errors) == 0,
        'errors': errors,
        'warnings': warnings
    }


def validate_case_type_data(case_type_data):
    errors = []

    if not (case_type_data.get('name') or '').strip():
        errors.append("Case type name is required")

    estimated_hours = to_decimal(case_type_data.get('estimated_hours'), default=None)
    if estimated_hours is None:
        errors.append("Estimated hours are required")
    elif estimated_hours < 0:
        errors.append("Estimated hours cannot be negative")

    return {
        'valid': len(errors) == 0,
        'errors': errors,
        'warnings': []
    }
