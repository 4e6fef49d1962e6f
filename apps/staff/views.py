# staff/views.py

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods
from django.core.exceptions import ValidationError
import json
import logging

from .models import Employee, TaskLog
from .forms import EmployeeForm, TaskLogForm
from .services import EmployeeService, TaskLoggingService
from .stats import get_staff_statistics
from core.serializers import serialize_employee, serialize_task_log
from utils.utils import (
    parse_json_body, parse_filters, paginate_queryset,
    form_errors, validation_error_messages, decimal_to_float
)

logger = logging.getLogger(__name__)


def _valuation_payload(valuation):
    return {
        key: decimal_to_float(value) if key != 'is_profitable' else value
        for key, value in valuation.items()
    }


# =============================================================================
# EMPLOYEES
# =============================================================================

@require_http_methods(["GET"])
def employee_list(request):
    try:
        employees = Employee.objects.all()
        if request.GET.get('active') == '1':
            employees = employees.filter(is_active=True)
        return JsonResponse({
            "success": True,
            "employees": [serialize_employee(employee) for employee in employees],
        })
    except Exception as e:
        logger.error(f"Error loading employees: {e}", exc_info=True)
        return JsonResponse({"success": False, "message": "Could not load employees."}, status=500)


@csrf_exempt
@require_http_methods(["POST"])
def employee_create(request):
    try:
        data = parse_json_body(request)
    except (json.JSONDecodeError, ValueError):
        return JsonResponse({"success": False, "message": "Invalid JSON data."}, status=400)

    form = EmployeeForm(data)
    if not form.is_valid():
        return JsonResponse(
            {"success": False, "message": "Please correct the employee details.", "errors": form_errors(form)},
            status=400
        )

    try:
        employee = EmployeeService.create_employee(**form.cleaned_data)
    except ValidationError as e:
        return JsonResponse(
            {"success": False, "message": "Invalid employee.", "errors": validation_error_messages(e)},
            status=400
        )
    except Exception as e:
        logger.error(f"Error creating employee: {e}", exc_info=True)
        return JsonResponse({"success": False, "message": "Could not add employee."}, status=500)

    return JsonResponse({
        "success": True,
        "message": "Employee added successfully to roster.",
        "employee": serialize_employee(employee),
    }, status=201)


@csrf_exempt
@require_http_methods(["POST"])
def employee_update(request, employee_id):
    try:
        data = parse_json_body(request)
    except (json.JSONDecodeError, ValueError):
        return JsonResponse({"success": False, "message": "Invalid JSON data."}, status=400)

    try:
        employee = Employee.objects.get(id=employee_id)
    except Employee.DoesNotExist:
        return JsonResponse({"success": False, "message": "Employee not found."}, status=404)

    try:
        employee = EmployeeService.update_employee(employee, data)
    except ValidationError as e:
        return JsonResponse(
            {"success": False, "message": "Invalid employee.", "errors": validation_error_messages(e)},
            status=400
        )
    except Exception as e:
        logger.error(f"Error updating employee {employee_id}: {e}", exc_info=True)
        return JsonResponse({"success": False, "message": "Could not update employee."}, status=500)

    return JsonResponse({
        "success": True,
        "message": "Employee updated.",
        "employee": serialize_employee(employee),
    })


# =============================================================================
# TASK LOGS
# =============================================================================

@require_http_methods(["GET"])
def task_log_list(request):
    try:
        filters = parse_filters(request, ['employee', 'date', 'billing_type', 'status'])
        logs = TaskLog.objects.select_related('employee', 'client')

        if filters['employee']:
            logs = logs.filter(employee_id=filters['employee'])
        if filters['date']:
            logs = logs.filter(date=filters['date'])
        if filters['billing_type']:
            logs = logs.filter(billing_type=filters['billing_type'])
        if filters['status']:
            logs = logs.filter(status=filters['status'])

        page_obj, paginator = paginate_queryset(request, logs, per_page=50)

        return JsonResponse({
            "success": True,
            "task_logs": [serialize_task_log(log) for log in page_obj],
            "page": page_obj.number,
            "num_pages": paginator.num_pages,
        })
    except (ValueError, ValidationError):
        return JsonResponse({"success": False, "message": "Invalid filter value."}, status=400)
    except Exception as e:
        logger.error(f"Error loading task logs: {e}", exc_info=True)
        return JsonResponse({"success": False, "message": "Could not load task logs."}, status=500)


@csrf_exempt
@require_http_methods(["POST"])
def task_log_create(request):
    """Log output and return the frozen valuation."""
    try:
        data = parse_json_body(request)
    except (json.JSONDecodeError, ValueError):
        return JsonResponse({"success": False, "message": "Invalid JSON data."}, status=400)

    form = TaskLogForm(data)
    if not form.is_valid():
        return JsonResponse(
            {
                "success": False,
                "message": "Please select an employee, describe the task, and enter hours spent.",
                "errors": form_errors(form),
            },
            status=400
        )

    try:
        task_log, valuation = TaskLoggingService.log_task(**form.cleaned_data)
    except ValidationError as e:
        return JsonResponse(
            {"success": False, "message": "Invalid task.", "errors": validation_error_messages(e)},
            status=400
        )
    except Exception as e:
        logger.error(f"Error logging task: {e}", exc_info=True)
        return JsonResponse({"success": False, "message": "Could not log task."}, status=500)

    return JsonResponse({
        "success": True,
        "message": "Task logged.",
        "task_log": serialize_task_log(task_log),
        "valuation": _valuation_payload(valuation),
    }, status=201)


@csrf_exempt
@require_http_methods(["POST"])
def task_preview(request):
    """Valuation of a task before it is logged; nothing is written."""
    try:
        data = parse_json_body(request)
    except (json.JSONDecodeError, ValueError):
        return JsonResponse({"success": False, "message": "Invalid JSON data."}, status=400)

    form = TaskLogForm(data)
    if not form.is_valid():
        return JsonResponse(
            {"success": False, "message": "Incomplete task details.", "errors": form_errors(form)},
            status=400
        )

    cleaned = form.cleaned_data
    try:
        valuation = TaskLoggingService.preview_task(
            employee=cleaned['employee'],
            hours=cleaned['hours'],
            billing_type=cleaned['billing_type'],
            billable_rate=cleaned.get('billable_rate'),
            client=cleaned.get('client'),
        )
    except Exception as e:
        logger.error(f"Error previewing task: {e}", exc_info=True)
        return JsonResponse({"success": False, "message": "Could not value task."}, status=500)

    return JsonResponse({"success": True, "valuation": _valuation_payload(valuation)})


# =============================================================================
# STATISTICS
# =============================================================================

@require_http_methods(["GET"])
def staff_stats(request):
    try:
        return JsonResponse({"success": True, "stats": get_staff_statistics()})
    except Exception as e:
        logger.error(f"Error computing staff statistics: {e}", exc_info=True)
        return JsonResponse({"success": False, "message": "Could not compute statistics."}, status=500)
