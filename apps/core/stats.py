# core/stats.py
"""
Command-center statistics.
Loads a repository snapshot and delegates the math to core/metrics.py
"""

import logging

from core.metrics import compute_firm_metrics
from core.repository import get_repository
from core.serializers import to_json_safe

logger = logging.getLogger(__name__)


def get_dashboard_statistics(today=None, repository=None):
    """
    Firm metrics for the command center, JSON-ready.

    Returns:
        dict: compute_firm_metrics output plus 'snapshot_taken_at'
    """
    repository = repository or get_repository()
    snapshot = repository.snapshot()
    metrics = compute_firm_metrics(snapshot, today)

    stats = to_json_safe(metrics)
    stats['snapshot_taken_at'] = snapshot.taken_at.isoformat()
    stats['employee_count'] = len(snapshot.active_employees)
    return stats


def get_weekly_report(today=None, repository=None):
    from core.reports import build_weekly_sitrep

    repository = repository or get_repository()
    return build_weekly_sitrep(repository.snapshot(), today)
