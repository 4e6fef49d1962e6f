# support/models.py

from django.db import models
import logging

from utils.models import BaseModel

logger = logging.getLogger(__name__)


# =============================================================================
# SUPPORT TICKET
# =============================================================================

class SupportTicket(BaseModel):
    """
    Internal support ticket. Ticket numbers are max+1 at submission time and
    carry no unique constraint; two concurrent submissions can share one.
    """

    PRIORITY_CHOICES = (
        ('low', 'Low'),
        ('medium', 'Medium'),
        ('high', 'High'),
        ('urgent', 'Urgent'),
    )

    STATUS_CHOICES = (
        ('open', 'Open'),
        ('in_progress', 'In Progress'),
        ('resolved', 'Resolved'),
        ('closed', 'Closed'),
    )

    ticket_number = models.CharField("Ticket #", max_length=10, db_index=True, editable=False)
    subject = models.CharField("Subject", max_length=200)
    description = models.TextField("Description")
    priority = models.CharField("Priority", max_length=10, choices=PRIORITY_CHOICES, default='medium')
    status = models.CharField("Status", max_length=15, choices=STATUS_CHOICES, default='open', db_index=True)
    submitted_by = models.CharField("Submitted By", max_length=100)
    resolution = models.TextField("Resolution", blank=True)
    resolved_at = models.DateTimeField("Resolved At", null=True, blank=True)

    class Meta:
        verbose_name = "Support Ticket"
        verbose_name_plural = "Support Tickets"
        ordering = ['-created_at']

    def __str__(self):
        return f"#{self.ticket_number} {self.subject}"

    @property
    def is_open(self):
        return self.status in ('open', 'in_progress')
