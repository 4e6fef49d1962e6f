# support/utils.py

"""
Support Utility Functions

- Ticket number sequencing
- Ticket validation
"""

import logging

logger = logging.getLogger(__name__)

TICKET_NUMBER_WIDTH = 5


def calculate_next_ticket_number(existing_numbers):
    """
    Next ticket number: highest existing number + 1, zero-padded to 5 digits.
    Gaps are not filled.

    Examples:
        []                   → "00001"
        ["00001", "00003"]   → "00004"
    """
    highest = 0
    for number in existing_numbers:
        try:
            highest = max(highest, int(number))
        except (TypeError, ValueError):
            logger.warning(f"Ignoring malformed ticket number: {number!r}")
    return str(highest + 1).zfill(TICKET_NUMBER_WIDTH)


def generate_ticket_number():
    """
    Ticket number for a new submission.

    Reads the current numbers without locking, so concurrent submissions
    may receive the same number.
    """
    from support.models import SupportTicket

    existing = SupportTicket.objects.values_list('ticket_number', flat=True)
    return calculate_next_ticket_number(existing)


def validate_ticket_data(ticket_data):
    from support.models import SupportTicket

    errors = []

    if not (ticket_data.get('subject') or '').strip():
        errors.append("Subject is required")
    if not (ticket_data.get('description') or '').strip():
        errors.append("Description is required")
    if not (ticket_data.get('submitted_by') or '').strip():
        errors.append("Please enter your name")

    priority = ticket_data.get('priority') or 'medium'
    if priority not in dict(SupportTicket.PRIORITY_CHOICES):
        errors.append(f"Unknown priority: {priority}")

    return {
        'valid': len(errors) == 0,
        'errors': errors,
        'warnings': []
    }
