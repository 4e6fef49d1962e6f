# support/views.py

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods
from django.core.exceptions import ValidationError
import json
import logging

from .models import SupportTicket
from .forms import SupportTicketForm, TicketResolutionForm
from .services import TicketService
from core.serializers import serialize_ticket
from utils.utils import parse_json_body, parse_filters, form_errors, validation_error_messages

logger = logging.getLogger(__name__)


@require_http_methods(["GET"])
def ticket_list(request):
    try:
        filters = parse_filters(request, ['status', 'priority'])
        tickets = SupportTicket.objects.all()
        if filters['status']:
            tickets = tickets.filter(status=filters['status'])
        if filters['priority']:
            tickets = tickets.filter(priority=filters['priority'])

        return JsonResponse({
            "success": True,
            "tickets": [serialize_ticket(ticket) for ticket in tickets],
            "open_count": SupportTicket.objects.filter(status__in=['open', 'in_progress']).count(),
        })
    except Exception as e:
        logger.error(f"Error loading tickets: {e}", exc_info=True)
        return JsonResponse({"success": False, "message": "Could not load tickets."}, status=500)


@csrf_exempt
@require_http_methods(["POST"])
def ticket_submit(request):
    try:
        data = parse_json_body(request)
    except (json.JSONDecodeError, ValueError):
        return JsonResponse({"success": False, "message": "Invalid JSON data."}, status=400)

    form = SupportTicketForm(data)
    if not form.is_valid():
        return JsonResponse(
            {"success": False, "message": "Please complete the ticket.", "errors": form_errors(form)},
            status=400
        )

    try:
        ticket = TicketService.submit_ticket(**form.cleaned_data)
    except ValidationError as e:
        return JsonResponse(
            {"success": False, "message": "Invalid ticket.", "errors": validation_error_messages(e)},
            status=400
        )
    except Exception as e:
        logger.error(f"Error submitting ticket: {e}", exc_info=True)
        return JsonResponse({"success": False, "message": "Could not submit ticket."}, status=500)

    return JsonResponse({
        "success": True,
        "message": f"Ticket #{ticket.ticket_number} submitted.",
        "ticket": serialize_ticket(ticket),
    }, status=201)


@csrf_exempt
@require_http_methods(["POST"])
def ticket_resolve(request, ticket_id):
    try:
        data = parse_json_body(request)
    except (json.JSONDecodeError, ValueError):
        return JsonResponse({"success": False, "message": "Invalid JSON data."}, status=400)

    try:
        ticket = SupportTicket.objects.get(id=ticket_id)
    except SupportTicket.DoesNotExist:
        return JsonResponse({"success": False, "message": "Ticket not found."}, status=404)

    form = TicketResolutionForm(data)
    if not form.is_valid():
        return JsonResponse(
            {"success": False, "message": "Please describe the resolution.", "errors": form_errors(form)},
            status=400
        )

    try:
        ticket = TicketService.resolve_ticket(ticket, form.cleaned_data['resolution'])
    except ValidationError as e:
        return JsonResponse(
            {"success": False, "message": "Invalid resolution.", "errors": validation_error_messages(e)},
            status=400
        )
    except Exception as e:
        logger.error(f"Error resolving ticket {ticket_id}: {e}", exc_info=True)
        return JsonResponse({"success": False, "message": "Could not resolve ticket."}, status=500)

    return JsonResponse({"success": True, "message": "Ticket resolved.", "ticket": serialize_ticket(ticket)})


@csrf_exempt
@require_http_methods(["POST"])
def ticket_update_status(request, ticket_id):
    try:
        data = parse_json_body(request)
    except (json.JSONDecodeError, ValueError):
        return JsonResponse({"success": False, "message": "Invalid JSON data."}, status=400)

    try:
        ticket = SupportTicket.objects.get(id=ticket_id)
    except SupportTicket.DoesNotExist:
        return JsonResponse({"success": False, "message": "Ticket not found."}, status=404)

    try:
        ticket = TicketService.update_status(ticket, data.get('status'))
    except ValidationError as e:
        return JsonResponse(
            {"success": False, "message": "Invalid status.", "errors": validation_error_messages(e)},
            status=400
        )
    except Exception as e:
        logger.error(f"Error updating ticket {ticket_id}: {e}", exc_info=True)
        return JsonResponse({"success": False, "message": "Could not update ticket."}, status=500)

    return JsonResponse({"success": True, "message": "Ticket updated.", "ticket": serialize_ticket(ticket)})
