# finance/signals.py

"""
Finance Signals

Automatic triggers for:
- Append-only enforcement on the cashbox ledger and income entries
- Audit logging for settings and expense changes
"""

from django.db.models.signals import pre_save, post_save, post_delete, pre_delete
from django.dispatch import receiver
from django.core.exceptions import ValidationError
import logging

from finance.models import FinancialSettings, CustomExpense, CashTransaction, IncomeEntry

logger = logging.getLogger(__name__)


# =============================================================================
# FINANCIAL SETTINGS SIGNALS
# =============================================================================

@receiver(post_save, sender=FinancialSettings)
def financial_settings_post_save(sender, instance, created, **kwargs):
    if kwargs.get('raw', False):
        return

    if created:
        logger.info("Financial settings initialized")
    else:
        logger.debug(f"Financial settings saved (cashbox balance {instance.cashbox_balance})")


# =============================================================================
# CUSTOM EXPENSE SIGNALS
# =============================================================================

@receiver(post_save, sender=CustomExpense)
def custom_expense_post_save(sender, instance, created, **kwargs):
    if kwargs.get('raw', False):
        return

    if created:
        logger.info(f"Created custom expense: {instance.name} ({instance.amount})")


@receiver(post_delete, sender=CustomExpense)
def custom_expense_post_delete(sender, instance, **kwargs):
    logger.info(f"Removed custom expense: {instance.name}")


# =============================================================================
# APPEND-ONLY LEDGERS
# =============================================================================

@receiver(pre_save, sender=CashTransaction)
def cash_transaction_pre_save(sender, instance, **kwargs):
    """Cash transactions cannot be edited once recorded."""
    if kwargs.get('raw', False):
        return

    if not instance._state.adding:
        raise ValidationError("Cash transactions are append-only and cannot be edited")


@receiver(pre_delete, sender=CashTransaction)
def cash_transaction_pre_delete(sender, instance, **kwargs):
    """Queryset deletes skip CashTransaction.delete() and are stopped here."""
    raise ValidationError("Cash transactions are append-only and cannot be deleted")


@receiver(post_save, sender=CashTransaction)
def cash_transaction_post_save(sender, instance, created, **kwargs):
    if kwargs.get('raw', False):
        return

    if created:
        logger.info(
            f"Recorded cash transaction: {instance.direction} {instance.amount} "
            f"({instance.category}) by {instance.performed_by}"
        )


@receiver(pre_save, sender=IncomeEntry)
def income_entry_pre_save(sender, instance, **kwargs):
    if kwargs.get('raw', False):
        return

    if not instance._state.adding:
        raise ValidationError("Income entries are append-only and cannot be edited")


@receiver(pre_delete, sender=IncomeEntry)
def income_entry_pre_delete(sender, instance, **kwargs):
    raise ValidationError("Income entries are append-only and cannot be deleted")


@receiver(post_save, sender=IncomeEntry)
def income_entry_post_save(sender, instance, created, **kwargs):
    if kwargs.get('raw', False):
        return

    if created:
        logger.info(f"Recorded income: {instance.amount} from {instance.client_name}")
