# support/signals.py

from django.db.models.signals import post_save
from django.dispatch import receiver
import logging

from support.models import SupportTicket

logger = logging.getLogger(__name__)


@receiver(post_save, sender=SupportTicket)
def support_ticket_post_save(sender, instance, created, **kwargs):
    if kwargs.get('raw', False):
        return

    if created:
        logger.info(
            f"Ticket #{instance.ticket_number} submitted by {instance.submitted_by} "
            f"({instance.priority}): {instance.subject}"
        )
        duplicates = SupportTicket.objects.filter(ticket_number=instance.ticket_number).exclude(pk=instance.pk)
        if duplicates.exists():
            logger.warning(f"Ticket number {instance.ticket_number} was issued more than once")
    elif instance.status == 'resolved':
        logger.info(f"Ticket #{instance.ticket_number} resolved")
