# core/utils.py

"""
Snapshot blob helpers.

Normalizes records from a stored `law-firm-os-data` blob so they can be
written back into the store:
- camelCase keys become snake_case model fields
- Legacy field names are mapped (clio, type, senderOrRecipient, ...)
- Legacy values are mapped ('in-progress')
- ISO date / datetime strings are parsed

NO DATABASE WRITES - see core/services.py for the import workflow.
"""

from datetime import datetime, time
import re
import logging

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from utils.utils import to_decimal

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r'(?<=[a-z0-9])(?=[A-Z])')

# collection -> {legacy key: model field}
FIELD_ALIASES = {
    'financials': {
        'clio': 'case_management',
    },
    'cashboxTransactions': {
        'type': 'direction',
        'sender_or_recipient': 'counterparty',
    },
    'taskLogs': {
        'employee_id': 'employee',
        'client_id': 'client',
    },
}

# collection -> {field: {legacy value: value}}
VALUE_ALIASES = {
    'taskLogs': {
        'status': {'in-progress': 'in_progress'},
    },
    'tickets': {
        'status': {'in-progress': 'in_progress'},
    },
}

# Derived or identity keys never written back
IGNORED_FIELDS = {'id', 'fixed_overhead_hourly', 'monthly_total', 'custom_expenses', 'pay_type',
                  'effective_hourly_cost', 'progress', 'value_per_hour', 'days_since_communication',
                  'communication_overdue', 'updated_at'}


def camel_to_snake(name):
    """'senderOrRecipient' -> 'sender_or_recipient'; snake_case passes through."""
    return _CAMEL_BOUNDARY.sub('_', name).lower()


def normalize_record(collection, record):
    """
    Map one blob record onto model field names and values.

    Returns:
        tuple: (legacy_id or None, {field: value})
    """
    field_aliases = FIELD_ALIASES.get(collection, {})
    value_aliases = VALUE_ALIASES.get(collection, {})

    legacy_id = record.get('id')
    fields = {}
    for key, value in record.items():
        field = camel_to_snake(key)
        field = field_aliases.get(field, field)
        if field in IGNORED_FIELDS:
            continue
        if field in value_aliases and value in value_aliases[field]:
            value = value_aliases[field][value]
        fields[field] = value

    return (str(legacy_id) if legacy_id is not None else None), fields


def parse_record_date(value):
    """ISO date (or datetime) string to date; None when missing or unreadable."""
    if not value:
        return None
    if hasattr(value, 'year'):
        return value.date() if isinstance(value, datetime) else value
    parsed = parse_date(str(value)[:10])
    if parsed is None:
        logger.warning(f"Unreadable date in snapshot: {value!r}")
    return parsed


def parse_record_datetime(value):
    """
    ISO datetime string to an aware datetime. Bare dates sit at 12:00 local.
    """
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip().replace('Z', '+00:00')
        if len(text) <= 10:
            day = parse_record_date(text)
            if day is None:
                return None
            parsed = datetime.combine(day, time(12, 0))
        else:
            parsed = parse_datetime(text)
            if parsed is None:
                logger.warning(f"Unreadable datetime in snapshot: {value!r}")
                return None
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed


def pick_decimal_fields(fields, names):
    """Coerce the named numeric fields to Decimal in place (missing -> 0)."""
    for name in names:
        if name in fields:
            fields[name] = to_decimal(fields[name])
    return fields
