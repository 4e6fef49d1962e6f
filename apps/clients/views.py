# clients/views.py

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods
from django.core.exceptions import ValidationError
import json
import logging

from .models import Client, CaseType
from .forms import ClientIntakeForm, CaseTypeForm
from .services import ClientService, CaseTypeService
from .stats import get_client_statistics
from core.serializers import serialize_client, serialize_case_type
from utils.utils import parse_json_body, parse_filters, form_errors, validation_error_messages

logger = logging.getLogger(__name__)


# =============================================================================
# CLIENTS
# =============================================================================

@require_http_methods(["GET"])
def client_list(request):
    try:
        filters = parse_filters(request, ['status', 'billing_type'])
        clients = Client.objects.all()
        if filters['status']:
            clients = clients.filter(status=filters['status'])
        if filters['billing_type']:
            clients = clients.filter(billing_type=filters['billing_type'])

        return JsonResponse({
            "success": True,
            "clients": [serialize_client(client) for client in clients],
            "stats": get_client_statistics(),
        })
    except Exception as e:
        logger.error(f"Error loading clients: {e}", exc_info=True)
        return JsonResponse({"success": False, "message": "Could not load clients."}, status=500)


@csrf_exempt
@require_http_methods(["POST"])
def client_create(request):
    try:
        data = parse_json_body(request)
    except (json.JSONDecodeError, ValueError):
        return JsonResponse({"success": False, "message": "Invalid JSON data."}, status=400)

    form = ClientIntakeForm(data)
    if not form.is_valid():
        return JsonResponse(
            {"success": False, "message": "Please correct the client details.", "errors": form_errors(form)},
            status=400
        )

    try:
        client = ClientService.create_client(**form.cleaned_data)
    except ValidationError as e:
        return JsonResponse(
            {"success": False, "message": "Invalid client.", "errors": validation_error_messages(e)},
            status=400
        )
    except Exception as e:
        logger.error(f"Error creating client: {e}", exc_info=True)
        return JsonResponse(
            {"success": False, "message": "Error: Failed to save to database. Please check your connection."},
            status=500
        )

    return JsonResponse({
        "success": True,
        "message": "New client file created successfully.",
        "client": serialize_client(client),
    }, status=201)


@csrf_exempt
@require_http_methods(["POST"])
def client_update(request, client_id):
    try:
        data = parse_json_body(request)
    except (json.JSONDecodeError, ValueError):
        return JsonResponse({"success": False, "message": "Invalid JSON data."}, status=400)

    try:
        client = Client.objects.get(id=client_id)
    except Client.DoesNotExist:
        return JsonResponse({"success": False, "message": "Client not found."}, status=404)

    try:
        client = ClientService.update_client(client, data)
    except ValidationError as e:
        return JsonResponse(
            {"success": False, "message": "Invalid client.", "errors": validation_error_messages(e)},
            status=400
        )
    except Exception as e:
        logger.error(f"Error updating client {client_id}: {e}", exc_info=True)
        return JsonResponse({"success": False, "message": "Could not update client."}, status=500)

    return JsonResponse({"success": True, "message": "Client updated.", "client": serialize_client(client)})


@csrf_exempt
@require_http_methods(["POST"])
def client_record_communication(request, client_id):
    try:
        client = Client.objects.get(id=client_id)
    except Client.DoesNotExist:
        return JsonResponse({"success": False, "message": "Client not found."}, status=404)

    try:
        client = ClientService.record_communication(client)
    except Exception as e:
        logger.error(f"Error recording communication for client {client_id}: {e}", exc_info=True)
        return JsonResponse({"success": False, "message": "Could not record update."}, status=500)

    return JsonResponse({"success": True, "message": "Client update recorded.", "client": serialize_client(client)})


# =============================================================================
# CASE TYPES
# =============================================================================

@require_http_methods(["GET"])
def case_type_list(request):
    try:
        return JsonResponse({
            "success": True,
            "case_types": [serialize_case_type(case_type) for case_type in CaseType.objects.all()],
        })
    except Exception as e:
        logger.error(f"Error loading case types: {e}", exc_info=True)
        return JsonResponse({"success": False, "message": "Could not load case types."}, status=500)


@csrf_exempt
@require_http_methods(["POST"])
def case_type_create(request):
    try:
        data = parse_json_body(request)
    except (json.JSONDecodeError, ValueError):
        return JsonResponse({"success": False, "message": "Invalid JSON data."}, status=400)

    form = CaseTypeForm(data)
    if not form.is_valid():
        return JsonResponse(
            {"success": False, "message": "Please correct the case type.", "errors": form_errors(form)},
            status=400
        )

    try:
        case_type = CaseTypeService.create_case_type(**form.cleaned_data)
    except ValidationError as e:
        return JsonResponse(
            {"success": False, "message": "Invalid case type.", "errors": validation_error_messages(e)},
            status=400
        )
    except Exception as e:
        logger.error(f"Error creating case type: {e}", exc_info=True)
        return JsonResponse({"success": False, "message": "Could not save case type."}, status=500)

    return JsonResponse({
        "success": True,
        "message": "Case type added.",
        "case_type": serialize_case_type(case_type),
    }, status=201)


@csrf_exempt
@require_http_methods(["POST"])
def case_type_update(request, case_type_id):
    try:
        data = parse_json_body(request)
    except (json.JSONDecodeError, ValueError):
        return JsonResponse({"success": False, "message": "Invalid JSON data."}, status=400)

    try:
        case_type = CaseType.objects.get(id=case_type_id)
    except CaseType.DoesNotExist:
        return JsonResponse({"success": False, "message": "Case type not found."}, status=404)

    try:
        case_type = CaseTypeService.update_case_type(case_type, data)
    except ValidationError as e:
        return JsonResponse(
            {"success": False, "message": "Invalid case type.", "errors": validation_error_messages(e)},
            status=400
        )
    except Exception as e:
        logger.error(f"Error updating case type {case_type_id}: {e}", exc_info=True)
        return JsonResponse({"success": False, "message": "Could not update case type."}, status=500)

    return JsonResponse({"success": True, "message": "Case type updated.", "case_type": serialize_case_type(case_type)})


@csrf_exempt
@require_http_methods(["POST", "DELETE"])
def case_type_delete(request, case_type_id):
    try:
        case_type = CaseType.objects.get(id=case_type_id)
    except CaseType.DoesNotExist:
        return JsonResponse({"success": False, "message": "Case type not found."}, status=404)

    try:
        name = CaseTypeService.delete_case_type(case_type)
    except Exception as e:
        logger.error(f"Error deleting case type {case_type_id}: {e}", exc_info=True)
        return JsonResponse({"success": False, "message": "Could not delete case type."}, status=500)

    return JsonResponse({"success": True, "message": f"Removed {name}."})
