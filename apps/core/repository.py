# core/repository.py

"""
Record Store repository.

Loads every firm collection into an immutable FirmSnapshot and lets
callers subscribe to record changes. The metrics engine only ever sees
snapshots; persistence stays behind this class.
"""

from dataclasses import dataclass, field
from datetime import datetime
from threading import RLock
import logging

from django.apps import apps
from django.db.models.signals import post_save, post_delete
from django.utils import timezone

logger = logging.getLogger(__name__)

# collection name -> model label
COLLECTIONS = {
    'employees': 'staff.Employee',
    'taskLogs': 'staff.TaskLog',
    'financials': 'finance.FinancialSettings',
    'customExpenses': 'finance.CustomExpense',
    'clients': 'clients.Client',
    'cashboxTransactions': 'finance.CashTransaction',
    'incomeEntries': 'finance.IncomeEntry',
    'tickets': 'support.SupportTicket',
    'caseTypes': 'clients.CaseType',
}

ACTION_CREATED = 'created'
ACTION_UPDATED = 'updated'
ACTION_DELETED = 'deleted'


@dataclass(frozen=True)
class FirmSnapshot:
    """Every firm collection as loaded at one moment."""

    employees: tuple = ()
    task_logs: tuple = ()
    financials: object = None
    custom_expenses: tuple = ()
    clients: tuple = ()
    cash_transactions: tuple = ()
    income_entries: tuple = ()
    tickets: tuple = ()
    case_types: tuple = ()
    taken_at: datetime = field(default_factory=timezone.now)

    @property
    def active_employees(self):
        return tuple(e for e in self.employees if getattr(e, 'is_active', True))


class FirmRepository:
    """
    Snapshot loader with a subscribe/unsubscribe contract.

    Subscribers are called as callback(collection_name, instance, action)
    after every create, update or delete of a firm record.
    """

    def __init__(self):
        self._subscribers = []
        self._lock = RLock()
        self._connected = False

    # -------------------------------------------------------------------------
    # READS
    # -------------------------------------------------------------------------

    def snapshot(self):
        from staff.models import Employee, TaskLog
        from finance.models import FinancialSettings, CustomExpense, CashTransaction, IncomeEntry
        from clients.models import Client, CaseType
        from support.models import SupportTicket

        financials = FinancialSettings.get_instance()

        return FirmSnapshot(
            employees=tuple(Employee.objects.all()),
            task_logs=tuple(TaskLog.objects.all()),
            financials=financials,
            custom_expenses=tuple(CustomExpense.objects.filter(settings=financials)),
            clients=tuple(Client.objects.all()),
            cash_transactions=tuple(CashTransaction.objects.all()),
            income_entries=tuple(IncomeEntry.objects.all()),
            tickets=tuple(SupportTicket.objects.all()),
            case_types=tuple(CaseType.objects.all()),
        )

    # -------------------------------------------------------------------------
    # SUBSCRIPTIONS
    # -------------------------------------------------------------------------

    def subscribe(self, callback):
        """
        Register a change callback.

        Returns:
            callable: unsubscribe; safe to call more than once
        """
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe():
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    @property
    def subscriber_count(self):
        return len(self._subscribers)

    def notify(self, collection_name, instance, action):
        with self._lock:
            subscribers = list(self._subscribers)

        for callback in subscribers:
            try:
                callback(collection_name, instance, action)
            except Exception as e:
                # A failing subscriber must not fail the write that triggered it
                logger.error(f"Subscriber {callback!r} failed on {collection_name} {action}: {e}", exc_info=True)

    # -------------------------------------------------------------------------
    # SIGNAL WIRING
    # -------------------------------------------------------------------------

    def _make_save_handler(self, collection_name):
        def handler(sender, instance, created, **kwargs):
            if kwargs.get('raw', False):
                return
            self.notify(collection_name, instance, ACTION_CREATED if created else ACTION_UPDATED)
        return handler

    def _make_delete_handler(self, collection_name):
        def handler(sender, instance, **kwargs):
            self.notify(collection_name, instance, ACTION_DELETED)
        return handler

    def connect(self):
        """Hook the repository to model signals for every collection."""
        if self._connected:
            return

        for collection_name, label in COLLECTIONS.items():
            model = apps.get_model(label)
            save_handler = self._make_save_handler(collection_name)
            delete_handler = self._make_delete_handler(collection_name)
            post_save.connect(save_handler, sender=model, weak=False, dispatch_uid=f"repo-save-{label}")
            post_delete.connect(delete_handler, sender=model, weak=False, dispatch_uid=f"repo-delete-{label}")

        self._connected = True
        logger.debug(f"Firm repository connected to {len(COLLECTIONS)} collections")

    def disconnect(self):
        if not self._connected:
            return

        for label in COLLECTIONS.values():
            model = apps.get_model(label)
            post_save.disconnect(sender=model, dispatch_uid=f"repo-save-{label}")
            post_delete.disconnect(sender=model, dispatch_uid=f"repo-delete-{label}")

        self._connected = False


firm_repository = FirmRepository()


def get_repository():
    return firm_repository
