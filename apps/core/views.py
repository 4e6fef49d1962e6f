# core/views.py

from datetime import datetime

from django.db import DatabaseError
from django.http import JsonResponse
from django.views.decorators.http import require_http_methods
import logging

from .cache import get_snapshot_cache
from .reports import export_sitrep_excel, export_sitrep_pdf
from .repository import get_repository
from .serializers import serialize_snapshot, to_json_safe
from .stats import get_dashboard_statistics, get_weekly_report

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ('json', 'xlsx', 'pdf')


def _parse_date(value):
    if not value:
        return None
    return datetime.strptime(value, '%Y-%m-%d').date()


# =============================================================================
# COMMAND CENTER
# =============================================================================

@require_http_methods(["GET"])
def dashboard(request):
    try:
        today = _parse_date(request.GET.get('date'))
    except ValueError:
        return JsonResponse({"success": False, "message": "Dates must be YYYY-MM-DD."}, status=400)

    try:
        stats = get_dashboard_statistics(today)
    except Exception as e:
        logger.error(f"Error computing dashboard metrics: {e}", exc_info=True)
        return JsonResponse({"success": False, "message": "Could not compute firm metrics."}, status=500)

    return JsonResponse({"success": True, "metrics": stats})


@require_http_methods(["GET"])
def snapshot(request):
    """
    Every cached collection. Falls back to the local snapshot cache when the
    store cannot be read.
    """
    try:
        data = serialize_snapshot(get_repository().snapshot())
    except DatabaseError as e:
        logger.error(f"Store unavailable, serving cached snapshot: {e}", exc_info=True)
        cached = get_snapshot_cache().load()
        if cached is None:
            return JsonResponse({"success": False, "message": "Store unavailable and no cached data."}, status=500)
        return JsonResponse({"success": True, "source": "cache", "data": cached})
    except Exception as e:
        logger.error(f"Error loading snapshot: {e}", exc_info=True)
        return JsonResponse({"success": False, "message": "Could not load firm data."}, status=500)

    return JsonResponse({"success": True, "source": "store", "data": data})


# =============================================================================
# WEEKLY SITREP
# =============================================================================

@require_http_methods(["GET"])
def weekly_report(request):
    export_format = request.GET.get('format', 'json').lower()
    if export_format not in EXPORT_FORMATS:
        return JsonResponse(
            {"success": False, "message": f"Unknown format '{export_format}'. Use json, xlsx or pdf."},
            status=400
        )

    try:
        today = _parse_date(request.GET.get('date'))
    except ValueError:
        return JsonResponse({"success": False, "message": "Dates must be YYYY-MM-DD."}, status=400)

    try:
        report = get_weekly_report(today)
        if export_format == 'xlsx':
            return export_sitrep_excel(report)
        if export_format == 'pdf':
            return export_sitrep_pdf(report)
    except Exception as e:
        logger.error(f"Error building weekly report: {e}", exc_info=True)
        return JsonResponse({"success": False, "message": "Could not build the weekly report."}, status=500)

    return JsonResponse({"success": True, "report": to_json_safe(report)})
