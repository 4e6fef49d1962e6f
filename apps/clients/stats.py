# clients/stats.py
"""
Statistics functions for clients and cases
"""

from django.db.models import Count
import logging

logger = logging.getLogger(__name__)


def get_client_statistics():
    """
    Client counts, flat-fee portfolio totals and the overdue-update list.
    """
    from clients.models import Client
    from clients.utils import (
        summarize_client_portfolio, is_communication_overdue,
        days_since_communication, calculate_progress_percentage, calculate_value_per_hour
    )

    clients = list(Client.objects.all())
    portfolio = summarize_client_portfolio(clients)

    stats = {
        key: float(value) if not isinstance(value, int) else value
        for key, value in portfolio.items()
    }

    stats['by_case_type'] = dict(
        Client.objects.order_by().values('case_type')
        .annotate(count=Count('id'))
        .values_list('case_type', 'count')
    )

    stats['overdue_updates'] = [
        {
            'id': str(client.id),
            'name': client.name,
            'days_since_communication': days_since_communication(client),
        }
        for client in clients
        if is_communication_overdue(client)
    ]

    stats['flat_fee_cases'] = [
        {
            'id': str(client.id),
            'name': client.name,
            'case_type': client.case_type,
            'flat_fee_amount': float(client.flat_fee_amount),
            'estimated_hours': float(client.estimated_hours),
            'hours_logged': float(client.hours_logged),
            'progress': float(calculate_progress_percentage(client)),
            'value_per_hour': float(calculate_value_per_hour(client)),
        }
        for client in clients
        if client.billing_type == 'flat_fee'
    ]

    return stats
