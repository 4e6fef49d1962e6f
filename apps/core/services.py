# core/services.py

"""
Core Services

Handles store-wide workflows:
- Firm initialization (financial settings singleton, default case types)
- Importing a stored `law-firm-os-data` blob into the store
"""

from django.db import transaction
import logging

from .utils import (
    normalize_record, parse_record_date, parse_record_datetime, pick_decimal_fields
)

logger = logging.getLogger(__name__)

IMPORT_ORDER = (
    'caseTypes',
    'employees',
    'financials',
    'customExpenses',
    'clients',
    'taskLogs',
    'cashboxTransactions',
    'incomeEntries',
    'tickets',
)


# =============================================================================
# FIRM INITIALIZATION
# =============================================================================

class FirmSetupService:

    @staticmethod
    @transaction.atomic
    def initialize():
        """
        Make sure the financial settings singleton and default case types exist.

        Returns:
            dict: {'financials': FinancialSettings, 'case_types_created': int}
        """
        from finance.models import FinancialSettings
        from clients.services import CaseTypeService

        financials = FinancialSettings.get_instance()
        created = CaseTypeService.seed_default_case_types()

        logger.info(f"Firm initialized; {created} case types created")
        return {'financials': financials, 'case_types_created': created}


# =============================================================================
# SNAPSHOT IMPORT
# =============================================================================

def _model_fields(model):
    return {field.name for field in model._meta.concrete_fields}


def _build(model, fields):
    allowed = _model_fields(model)
    dropped = sorted(set(fields) - allowed)
    if dropped:
        logger.debug(f"Ignoring unknown {model.__name__} fields: {', '.join(dropped)}")
    return model(**{key: value for key, value in fields.items() if key in allowed})


class SnapshotImportService:
    """
    Load a snapshot blob (camelCase or snake_case records) into the store.

    Records get fresh identities; references between records (task log ->
    employee / client) are re-linked through the blob's own ids. Frozen task
    log costs and client hours are taken as stored, never recomputed.
    """

    def __init__(self):
        self.id_map = {}
        self.counts = {name: 0 for name in IMPORT_ORDER}
        self.skipped = {name: 0 for name in IMPORT_ORDER}

    @transaction.atomic
    def import_snapshot(self, data):
        """
        Args:
            data: dict keyed by collection name

        Returns:
            dict: {'imported': {collection: count}, 'skipped': {collection: count}}
        """
        collections = dict(data)

        financials = collections.get('financials')
        if isinstance(financials, dict) and 'customExpenses' not in collections:
            nested = financials.get('customExpenses', financials.get('custom_expenses'))
            if nested:
                collections['customExpenses'] = nested

        for name in IMPORT_ORDER:
            records = collections.get(name)
            if not records:
                continue
            handler = getattr(self, f"_import_{name}")
            if name == 'financials':
                handler(records)
            else:
                for record in records:
                    handler(record)

        logger.info(f"Snapshot import complete: {self.counts}")
        return {'imported': self.counts, 'skipped': self.skipped}

    def _remember(self, collection, legacy_id, instance):
        if legacy_id:
            self.id_map[(collection, legacy_id)] = instance
        self.counts[collection] += 1

    # -------------------------------------------------------------------------
    # PER-COLLECTION HANDLERS
    # -------------------------------------------------------------------------

    def _import_caseTypes(self, record):
        from clients.models import CaseType

        legacy_id, fields = normalize_record('caseTypes', record)
        pick_decimal_fields(fields, ('estimated_hours',))
        case_type = _build(CaseType, fields)
        case_type.save()
        self._remember('caseTypes', legacy_id, case_type)

    def _import_employees(self, record):
        from staff.models import Employee

        legacy_id, fields = normalize_record('employees', record)
        pick_decimal_fields(fields, ('hourly_cost', 'daily_hours', 'daily_target'))
        if fields.get('salary') in (None, ''):
            fields['salary'] = None
        else:
            pick_decimal_fields(fields, ('salary',))
        employee = _build(Employee, fields)
        employee.save()
        self._remember('employees', legacy_id, employee)

    def _import_financials(self, record):
        from finance.models import FinancialSettings
        from finance.utils import FIXED_EXPENSE_FIELDS

        _, fields = normalize_record('financials', record)
        numeric = FIXED_EXPENSE_FIELDS + ('cash_on_hand', 'debt', 'cashbox_balance')
        pick_decimal_fields(fields, numeric)

        settings = FinancialSettings.get_instance()
        for field in numeric:
            if field in fields:
                setattr(settings, field, fields[field])
        settings.change_reason = "Imported from snapshot"
        settings.save()
        self.counts['financials'] += 1

    def _import_customExpenses(self, record):
        from finance.models import FinancialSettings, CustomExpense

        legacy_id, fields = normalize_record('customExpenses', record)
        pick_decimal_fields(fields, ('amount',))
        expense = _build(CustomExpense, fields)
        expense.settings = FinancialSettings.get_instance()
        expense.save()
        self._remember('customExpenses', legacy_id, expense)

    def _import_clients(self, record):
        from clients.models import Client

        legacy_id, fields = normalize_record('clients', record)
        pick_decimal_fields(fields, (
            'retainer_fee', 'monthly_fee', 'flat_fee_amount', 'estimated_hours', 'hours_logged'
        ))
        fields['last_communication'] = parse_record_datetime(fields.get('last_communication'))
        fields['next_payment_due'] = parse_record_date(fields.get('next_payment_due'))
        fields['notes'] = fields.get('notes') or ''
        fields['case_type'] = fields.get('case_type') or 'General'
        client = _build(Client, fields)
        client.save()
        self._remember('clients', legacy_id, client)

    def _import_taskLogs(self, record):
        from staff.models import TaskLog

        legacy_id, fields = normalize_record('taskLogs', record)
        employee = self.id_map.get(('employees', str(fields.pop('employee', None))))
        if employee is None:
            logger.warning(f"Skipping task log {legacy_id}: unknown employee")
            self.skipped['taskLogs'] += 1
            return

        client_ref = fields.pop('client', None)
        client = self.id_map.get(('clients', str(client_ref))) if client_ref else None

        pick_decimal_fields(fields, ('hours', 'labor_cost', 'production_cost', 'billable_value'))
        fields['date'] = parse_record_date(fields.get('date'))
        fields['created_at'] = parse_record_datetime(fields.get('created_at'))

        task_log = _build(TaskLog, fields)
        task_log.employee = employee
        task_log.client = client
        task_log.save()
        self._remember('taskLogs', legacy_id, task_log)

    def _import_cashboxTransactions(self, record):
        from finance.models import CashTransaction

        legacy_id, fields = normalize_record('cashboxTransactions', record)
        pick_decimal_fields(fields, ('amount',))
        fields['date'] = parse_record_datetime(fields.get('date'))
        tx = _build(CashTransaction, fields)
        tx.save()
        self._remember('cashboxTransactions', legacy_id, tx)

    def _import_incomeEntries(self, record):
        from finance.models import IncomeEntry

        legacy_id, fields = normalize_record('incomeEntries', record)
        pick_decimal_fields(fields, ('amount',))
        fields['date'] = parse_record_date(fields.get('date'))
        fields['notes'] = fields.get('notes') or ''
        entry = _build(IncomeEntry, fields)
        entry.save()
        self._remember('incomeEntries', legacy_id, entry)

    def _import_tickets(self, record):
        from support.models import SupportTicket

        legacy_id, fields = normalize_record('tickets', record)
        fields['created_at'] = parse_record_datetime(fields.get('created_at'))
        fields['resolved_at'] = parse_record_datetime(fields.get('resolved_at'))
        fields['resolution'] = fields.get('resolution') or ''
        ticket = _build(SupportTicket, fields)
        ticket.save()
        self._remember('tickets', legacy_id, ticket)
