# clients/signals.py

from django.db.models.signals import pre_save, post_save, post_delete
from django.dispatch import receiver
import logging

from clients.models import Client, CaseType

logger = logging.getLogger(__name__)


# =============================================================================
# CLIENT SIGNALS
# =============================================================================

@receiver(pre_save, sender=Client)
def client_pre_save(sender, instance, **kwargs):
    """Remember the stored status so status changes can be logged."""
    if kwargs.get('raw', False) or instance._state.adding:
        return

    instance._previous_status = (
        Client.objects.filter(pk=instance.pk).values_list('status', flat=True).first()
    )


@receiver(post_save, sender=Client)
def client_post_save(sender, instance, created, **kwargs):
    if kwargs.get('raw', False):
        return

    if created:
        logger.info(f"New client file created: {instance.name} ({instance.case_type}, {instance.billing_type})")
        return

    previous_status = getattr(instance, '_previous_status', None)
    if previous_status and previous_status != instance.status:
        log = logger.warning if instance.status in ('risk', 'churned') else logger.info
        log(f"Client {instance.name} moved from {previous_status} to {instance.status}")


# =============================================================================
# CASE TYPE SIGNALS
# =============================================================================

@receiver(post_save, sender=CaseType)
def case_type_post_save(sender, instance, created, **kwargs):
    if kwargs.get('raw', False):
        return

    if created:
        logger.info(f"Case type added: {instance.name} ({instance.estimated_hours}h)")


@receiver(post_delete, sender=CaseType)
def case_type_post_delete(sender, instance, **kwargs):
    logger.info(f"Case type removed: {instance.name}")
