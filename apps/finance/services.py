# finance/services.py

"""
Finance Services

Financial workflows with database operations:
- Financial settings updates
- Smart expense routing (named field vs custom expense)
- Cashbox transactions (ledger insert + balance change in one transaction)
- Cashbox reconciliation
- Income recording

For pure calculations without DB writes, see finance/utils.py
"""

from decimal import Decimal
from django.db import transaction
from django.utils import timezone
from django.core.exceptions import ValidationError
import logging

from finance.models import FinancialSettings, CustomExpense, CashTransaction, IncomeEntry
from finance.utils import (
    FIXED_EXPENSE_FIELDS, route_expense_name, derive_cashbox_balance,
    signed_amount, validate_expense_data, validate_cash_transaction_data
)
from utils.models import AUDIT_FIELDS
from utils.utils import to_decimal

logger = logging.getLogger(__name__)


# =============================================================================
# FINANCIAL SETTINGS SERVICE
# =============================================================================

class FinancialSettingsService:
    """Updates to the FinancialSettings singleton."""

    # cashbox_balance moves only through CashboxService
    EDITABLE_FIELDS = FIXED_EXPENSE_FIELDS + ('cash_on_hand', 'debt')

    @staticmethod
    @transaction.atomic
    def update_financials(data):
        """
        Apply a partial update to the financial settings.

        Args:
            data: dict of field -> amount; unknown keys are ignored

        Returns:
            FinancialSettings: the updated singleton
        """
        settings = FinancialSettings.objects.select_for_update().get(
            pk=FinancialSettings.get_instance().pk
        )

        changed = []
        for field in FinancialSettingsService.EDITABLE_FIELDS:
            if field not in data:
                continue
            value = to_decimal(data[field], default=None)
            if value is None:
                raise ValidationError({field: "Enter a number."})
            if value < 0 and field in FIXED_EXPENSE_FIELDS:
                raise ValidationError({field: "Expense amounts cannot be negative."})
            setattr(settings, field, value)
            changed.append(field)

        if changed:
            settings.save()
            logger.info(f"Financial settings updated: {', '.join(changed)}")

        return settings


# =============================================================================
# EXPENSE ROUTING SERVICE
# =============================================================================

class ExpenseRoutingService:
    """
    Adds free-text expenses. Names found in the routing table overwrite the
    matching named field; anything else becomes a CustomExpense.
    """

    @staticmethod
    @transaction.atomic
    def add_expense(name, amount):
        """
        Route and record an expense.

        Returns:
            dict: {'routed': bool, 'field': str or None, 'expense': CustomExpense or None,
                   'settings': FinancialSettings}
        """
        validation = validate_expense_data({'name': name, 'amount': amount})
        if not validation['valid']:
            raise ValidationError(validation['errors'])

        amount = to_decimal(amount)
        field = route_expense_name(name)

        if field:
            settings = FinancialSettingsService.update_financials({field: amount})
            logger.info(f"Smart routing: '{name}' updated {field} to {amount}")
            return {'routed': True, 'field': field, 'expense': None, 'settings': settings}

        settings = FinancialSettings.get_instance()
        expense = CustomExpense.objects.create(
            settings=settings,
            name=name.strip(),
            amount=amount
        )
        logger.info(f"Custom expense added: {expense.name} ({amount})")
        return {'routed': False, 'field': None, 'expense': expense, 'settings': settings}

    @staticmethod
    def delete_custom_expense(expense_id):
        try:
            expense = CustomExpense.objects.get(pk=expense_id)
        except CustomExpense.DoesNotExist:
            raise ValidationError("Custom expense not found")

        name = expense.name
        expense.delete()
        logger.info(f"Custom expense deleted: {name}")
        return name


# =============================================================================
# CASHBOX SERVICE
# =============================================================================

class CashboxService:
    """
    Cashbox ledger. Each insert and its balance change commit together
    under a row lock on the settings singleton.
    """

    @staticmethod
    @transaction.atomic
    def record_transaction(*, direction, amount, category, description,
                           payment_method='cash', counterparty='', performed_by='Admin', date=None):
        """
        Record a cash movement and move the cashbox balance.

        Returns:
            tuple: (CashTransaction, Decimal new balance)
        """
        validation = validate_cash_transaction_data(
            {
                'direction': direction,
                'amount': amount,
                'category': category,
                'description': description,
                'payment_method': payment_method,
            },
            CashTransaction.DEPOSIT_CATEGORIES,
            CashTransaction.WITHDRAWAL_CATEGORIES
        )
        if not validation['valid']:
            raise ValidationError(validation['errors'])

        settings = FinancialSettings.objects.select_for_update().get(
            pk=FinancialSettings.get_instance().pk
        )

        amount = to_decimal(amount)
        tx = CashTransaction(
            date=date or timezone.now(),
            direction=direction,
            payment_method=payment_method,
            category=category,
            amount=amount,
            description=description.strip(),
            counterparty=(counterparty or '').strip(),
            performed_by=performed_by or 'Admin',
        )
        tx.full_clean(exclude=AUDIT_FIELDS)
        tx.save()

        settings.cashbox_balance = to_decimal(settings.cashbox_balance) + signed_amount(direction, amount)
        settings.save(update_fields=['cashbox_balance', 'updated_at', 'updated_from_ip'])

        logger.info(
            f"Cashbox {tx.get_direction_display().lower()}: {amount} ({category}); "
            f"balance now {settings.cashbox_balance}"
        )
        return tx, settings.cashbox_balance

    @staticmethod
    def reconcile(opening_balance=Decimal('0')):
        """
        Compare the stored cashbox balance to the balance derived from the ledger.

        Returns:
            dict: {'stored_balance', 'derived_balance', 'drift', 'in_sync', 'transaction_count'}
        """
        settings = FinancialSettings.get_instance()
        transactions = list(CashTransaction.objects.all())

        stored = to_decimal(settings.cashbox_balance)
        derived = derive_cashbox_balance(transactions, opening_balance)
        drift = stored - derived

        if drift:
            logger.warning(f"Cashbox drift detected: stored {stored}, ledger {derived}")

        return {
            'stored_balance': stored,
            'derived_balance': derived,
            'drift': drift,
            'in_sync': drift == 0,
            'transaction_count': len(transactions),
        }


# =============================================================================
# INCOME SERVICE
# =============================================================================

class IncomeService:

    @staticmethod
    @transaction.atomic
    def record_income(*, amount, client_name, date=None, description='', category='Retainer',
                      method='Check', notes=''):
        entry = IncomeEntry(
            date=date or timezone.localdate(),
            amount=to_decimal(amount),
            client_name=(client_name or '').strip(),
            description=description or '',
            category=category,
            method=method,
            notes=notes or '',
        )
        entry.full_clean(exclude=AUDIT_FIELDS)
        entry.save()
        return entry
