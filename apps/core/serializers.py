# core/serializers.py

"""
JSON shapes for firm records.

Used by the JSON endpoints and by the snapshot cache. Money and hours are
floats, dates ISO strings, identities strings.
"""

from datetime import date, datetime
from decimal import Decimal
import logging

from utils.utils import decimal_to_float

logger = logging.getLogger(__name__)


def to_json_safe(value):
    """Recursively convert Decimals, dates and UUIDs for json.dumps."""
    if isinstance(value, Decimal):
        return decimal_to_float(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: to_json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_safe(item) for item in value]
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


def _iso(value):
    return value.isoformat() if value else None


# =============================================================================
# STAFF
# =============================================================================

def serialize_employee(employee):
    return {
        'id': str(employee.id),
        'name': employee.name,
        'role': employee.role,
        'hourly_cost': decimal_to_float(employee.hourly_cost),
        'salary': decimal_to_float(employee.salary),
        'daily_hours': decimal_to_float(employee.daily_hours),
        'daily_target': decimal_to_float(employee.daily_target),
        'is_active': employee.is_active,
        'pay_type': employee.pay_type,
        'effective_hourly_cost': decimal_to_float(employee.effective_hourly_cost),
    }


def serialize_task_log(task_log):
    return {
        'id': str(task_log.id),
        'employee_id': str(task_log.employee_id),
        'date': _iso(task_log.date),
        'description': task_log.description,
        'hours': decimal_to_float(task_log.hours),
        'labor_cost': decimal_to_float(task_log.labor_cost),
        'production_cost': decimal_to_float(task_log.production_cost),
        'billing_type': task_log.billing_type,
        'client_id': str(task_log.client_id) if task_log.client_id else None,
        'billable_value': decimal_to_float(task_log.billable_value),
        'status': task_log.status,
        'created_at': _iso(task_log.created_at),
    }


# =============================================================================
# FINANCE
# =============================================================================

def serialize_custom_expense(expense):
    return {
        'id': str(expense.id),
        'name': expense.name,
        'amount': decimal_to_float(expense.amount),
    }


def serialize_financials(settings, custom_expenses, employees):
    """
    Financial settings with fixed_overhead_hourly derived on every read.
    """
    from finance.utils import FIXED_EXPENSE_FIELDS, calculate_monthly_total, calculate_hourly_overhead

    custom_expenses = list(custom_expenses)
    monthly_total = calculate_monthly_total(settings, custom_expenses)

    data = {field: decimal_to_float(getattr(settings, field)) for field in FIXED_EXPENSE_FIELDS}
    data.update({
        'id': settings.pk,
        'fixed_overhead_hourly': decimal_to_float(calculate_hourly_overhead(monthly_total, employees)),
        'monthly_total': decimal_to_float(monthly_total),
        'custom_expenses': [serialize_custom_expense(expense) for expense in custom_expenses],
        'cash_on_hand': decimal_to_float(settings.cash_on_hand),
        'debt': decimal_to_float(settings.debt),
        'cashbox_balance': decimal_to_float(settings.cashbox_balance),
    })
    return data


def serialize_cash_transaction(tx):
    return {
        'id': str(tx.id),
        'date': _iso(tx.date),
        'direction': tx.direction,
        'payment_method': tx.payment_method,
        'category': tx.category,
        'amount': decimal_to_float(tx.amount),
        'description': tx.description,
        'counterparty': tx.counterparty,
        'performed_by': tx.performed_by,
    }


def serialize_income_entry(entry):
    return {
        'id': str(entry.id),
        'date': _iso(entry.date),
        'amount': decimal_to_float(entry.amount),
        'client_name': entry.client_name,
        'description': entry.description,
        'category': entry.category,
        'method': entry.method,
        'notes': entry.notes,
    }


# =============================================================================
# CLIENTS
# =============================================================================

def serialize_client(client):
    from clients.utils import (
        calculate_progress_percentage, calculate_value_per_hour,
        days_since_communication, is_communication_overdue
    )

    return {
        'id': str(client.id),
        'name': client.name,
        'sponsor_name': client.sponsor_name,
        'case_type': client.case_type,
        'status': client.status,
        'billing_type': client.billing_type,
        'retainer_fee': decimal_to_float(client.retainer_fee),
        'monthly_fee': decimal_to_float(client.monthly_fee),
        'flat_fee_amount': decimal_to_float(client.flat_fee_amount),
        'estimated_hours': decimal_to_float(client.estimated_hours),
        'hours_logged': decimal_to_float(client.hours_logged),
        'progress': decimal_to_float(calculate_progress_percentage(client)),
        'value_per_hour': decimal_to_float(calculate_value_per_hour(client)),
        'last_communication': _iso(client.last_communication),
        'days_since_communication': days_since_communication(client),
        'communication_overdue': is_communication_overdue(client),
        'next_payment_due': _iso(client.next_payment_due),
        'notes': client.notes,
    }


def serialize_case_type(case_type):
    return {
        'id': str(case_type.id),
        'name': case_type.name,
        'estimated_hours': decimal_to_float(case_type.estimated_hours),
    }


# =============================================================================
# SUPPORT
# =============================================================================

def serialize_ticket(ticket):
    return {
        'id': str(ticket.id),
        'ticket_number': ticket.ticket_number,
        'subject': ticket.subject,
        'description': ticket.description,
        'priority': ticket.priority,
        'status': ticket.status,
        'submitted_by': ticket.submitted_by,
        'resolution': ticket.resolution,
        'resolved_at': _iso(ticket.resolved_at),
        'created_at': _iso(ticket.created_at),
    }


# =============================================================================
# SNAPSHOT
# =============================================================================

def serialize_snapshot(snapshot):
    """
    The seven cached collections, keyed the way the cache blob stores them.
    """
    financials = None
    if snapshot.financials is not None:
        financials = serialize_financials(
            snapshot.financials,
            snapshot.custom_expenses,
            snapshot.active_employees
        )

    return {
        'employees': [serialize_employee(employee) for employee in snapshot.employees],
        'taskLogs': [serialize_task_log(log) for log in snapshot.task_logs],
        'financials': financials,
        'clients': [serialize_client(client) for client in snapshot.clients],
        'cashboxTransactions': [serialize_cash_transaction(tx) for tx in snapshot.cash_transactions],
        'tickets': [serialize_ticket(ticket) for ticket in snapshot.tickets],
        'caseTypes': [serialize_case_type(case_type) for case_type in snapshot.case_types],
    }
