# support/services.py

"""
Support Services

- Ticket submission (optimistic max+1 numbering)
- Ticket status changes and resolution
"""

from django.db import transaction
from django.utils import timezone
from django.core.exceptions import ValidationError
import logging

from support.models import SupportTicket
from support.utils import generate_ticket_number, validate_ticket_data

logger = logging.getLogger(__name__)


class TicketService:

    @staticmethod
    @transaction.atomic
    def submit_ticket(*, subject, description, submitted_by, priority='medium'):
        validation = validate_ticket_data({
            'subject': subject,
            'description': description,
            'submitted_by': submitted_by,
            'priority': priority,
        })
        if not validation['valid']:
            raise ValidationError(validation['errors'])

        ticket = SupportTicket.objects.create(
            ticket_number=generate_ticket_number(),
            subject=subject.strip(),
            description=description.strip(),
            priority=priority or 'medium',
            status='open',
            submitted_by=submitted_by.strip(),
        )
        return ticket

    @staticmethod
    def resolve_ticket(ticket, resolution):
        if not (resolution or '').strip():
            raise ValidationError("Please describe the resolution")

        ticket.status = 'resolved'
        ticket.resolution = resolution.strip()
        ticket.resolved_at = timezone.now()
        ticket.save()
        return ticket

    @staticmethod
    def update_status(ticket, status):
        if status not in dict(SupportTicket.STATUS_CHOICES):
            raise ValidationError(f"Unknown status: {status}")

        ticket.status = status
        if status in ('resolved', 'closed') and not ticket.resolved_at:
            ticket.resolved_at = timezone.now()
        ticket.save()
        return ticket
