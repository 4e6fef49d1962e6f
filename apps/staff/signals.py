# staff/signals.py

"""
Staff Signals

Automatic triggers for:
- Append-only enforcement on task logs
- Audit logging for roster changes
"""

from django.db.models.signals import pre_save, post_save, pre_delete
from django.dispatch import receiver
from django.core.exceptions import ValidationError
import logging

from staff.models import Employee, TaskLog

logger = logging.getLogger(__name__)


# =============================================================================
# EMPLOYEE SIGNALS
# =============================================================================

@receiver(post_save, sender=Employee)
def employee_post_save(sender, instance, created, **kwargs):
    if kwargs.get('raw', False):
        return

    if created:
        logger.info(
            f"Added {instance.name} to roster "
            f"({instance.pay_type}, effective cost {instance.effective_hourly_cost:.2f}/h)"
        )


# =============================================================================
# TASK LOG SIGNALS
# =============================================================================

@receiver(pre_save, sender=TaskLog)
def task_log_pre_save(sender, instance, **kwargs):
    """Logged costs are a point-in-time snapshot; edits are rejected."""
    if kwargs.get('raw', False):
        return

    if not instance._state.adding:
        raise ValidationError("Task logs are append-only and cannot be edited")


@receiver(pre_delete, sender=TaskLog)
def task_log_pre_delete(sender, instance, **kwargs):
    """Queryset deletes skip TaskLog.delete() and are stopped here."""
    raise ValidationError("Task logs are append-only and cannot be deleted")
