# finance/views.py

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods
from django.core.exceptions import ValidationError
import json
import logging

from .models import FinancialSettings, CashTransaction, IncomeEntry
from .forms import ExpenseForm, CashTransactionForm, IncomeEntryForm
from .services import (
    FinancialSettingsService, ExpenseRoutingService, CashboxService, IncomeService
)
from .stats import (
    get_overhead_statistics, get_burn_statistics,
    get_weekly_pnl_statistics, get_cashbox_statistics
)
from core.serializers import (
    serialize_financials, serialize_custom_expense,
    serialize_cash_transaction, serialize_income_entry
)
from utils.utils import (
    parse_json_body, paginate_queryset, form_errors,
    validation_error_messages, decimal_to_float
)

logger = logging.getLogger(__name__)


def _financials_payload(settings):
    from staff.models import Employee
    return serialize_financials(
        settings,
        list(settings.custom_expenses.all()),
        list(Employee.objects.filter(is_active=True))
    )


# =============================================================================
# FINANCIAL SETTINGS
# =============================================================================

@require_http_methods(["GET"])
def financials_detail(request):
    """Financial settings with the derived overhead figures."""
    try:
        settings = FinancialSettings.get_instance()
        return JsonResponse({
            "success": True,
            "financials": _financials_payload(settings),
            "overhead": get_overhead_statistics(),
        })
    except Exception as e:
        logger.error(f"Error loading financial settings: {e}", exc_info=True)
        return JsonResponse({"success": False, "message": "Could not load financial settings."}, status=500)


@csrf_exempt
@require_http_methods(["POST"])
def financials_update(request):
    try:
        data = parse_json_body(request)
    except (json.JSONDecodeError, ValueError):
        return JsonResponse({"success": False, "message": "Invalid JSON data."}, status=400)

    try:
        settings = FinancialSettingsService.update_financials(data)
    except ValidationError as e:
        return JsonResponse(
            {"success": False, "message": "Invalid financial settings.", "errors": validation_error_messages(e)},
            status=400
        )
    except Exception as e:
        logger.error(f"Error updating financial settings: {e}", exc_info=True)
        return JsonResponse({"success": False, "message": "Could not save financial settings."}, status=500)

    return JsonResponse({
        "success": True,
        "message": "Financial settings saved.",
        "financials": _financials_payload(settings),
    })


# =============================================================================
# EXPENSES
# =============================================================================

@csrf_exempt
@require_http_methods(["POST"])
def expense_add(request):
    """Add an expense by name; recognised names update the matching line item."""
    try:
        data = parse_json_body(request)
    except (json.JSONDecodeError, ValueError):
        return JsonResponse({"success": False, "message": "Invalid JSON data."}, status=400)

    form = ExpenseForm(data)
    if not form.is_valid():
        return JsonResponse(
            {"success": False, "message": "Please enter expense name and amount.", "errors": form_errors(form)},
            status=400
        )

    try:
        result = ExpenseRoutingService.add_expense(form.cleaned_data['name'], form.cleaned_data['amount'])
    except ValidationError as e:
        return JsonResponse(
            {"success": False, "message": "Invalid expense.", "errors": validation_error_messages(e)},
            status=400
        )
    except Exception as e:
        logger.error(f"Error adding expense: {e}", exc_info=True)
        return JsonResponse({"success": False, "message": "Could not add expense."}, status=500)

    if result['routed']:
        message = f"Smart Routing: Updated '{result['field']}' instead of creating a duplicate."
    else:
        message = "Custom expense added."

    return JsonResponse({
        "success": True,
        "message": message,
        "routed": result['routed'],
        "field": result['field'],
        "expense": serialize_custom_expense(result['expense']) if result['expense'] else None,
        "financials": _financials_payload(result['settings']),
    }, status=200 if result['routed'] else 201)


@csrf_exempt
@require_http_methods(["POST", "DELETE"])
def expense_delete(request, expense_id):
    try:
        name = ExpenseRoutingService.delete_custom_expense(expense_id)
    except ValidationError:
        return JsonResponse({"success": False, "message": "Custom expense not found."}, status=404)
    except Exception as e:
        logger.error(f"Error deleting custom expense {expense_id}: {e}", exc_info=True)
        return JsonResponse({"success": False, "message": "Could not delete expense."}, status=500)

    return JsonResponse({"success": True, "message": f"Removed {name}."})


# =============================================================================
# CASHBOX
# =============================================================================

@require_http_methods(["GET"])
def cashbox_list(request):
    try:
        transactions = CashTransaction.objects.all()
        direction = request.GET.get('direction')
        if direction in ('in', 'out'):
            transactions = transactions.filter(direction=direction)

        page_obj, paginator = paginate_queryset(request, transactions, per_page=50)

        return JsonResponse({
            "success": True,
            "transactions": [serialize_cash_transaction(tx) for tx in page_obj],
            "page": page_obj.number,
            "num_pages": paginator.num_pages,
            "stats": get_cashbox_statistics(),
        })
    except Exception as e:
        logger.error(f"Error loading cashbox: {e}", exc_info=True)
        return JsonResponse({"success": False, "message": "Could not load cashbox."}, status=500)


@csrf_exempt
@require_http_methods(["POST"])
def cashbox_add(request):
    try:
        data = parse_json_body(request)
    except (json.JSONDecodeError, ValueError):
        return JsonResponse({"success": False, "message": "Invalid JSON data."}, status=400)

    form = CashTransactionForm(data)
    if not form.is_valid():
        return JsonResponse(
            {"success": False, "message": "Please correct the transaction details.", "errors": form_errors(form)},
            status=400
        )

    try:
        tx, balance = CashboxService.record_transaction(**form.cleaned_data)
    except ValidationError as e:
        return JsonResponse(
            {"success": False, "message": "Invalid transaction.", "errors": validation_error_messages(e)},
            status=400
        )
    except Exception as e:
        logger.error(f"Error recording cash transaction: {e}", exc_info=True)
        return JsonResponse({"success": False, "message": "Could not record transaction."}, status=500)

    return JsonResponse({
        "success": True,
        "message": "Transaction recorded.",
        "transaction": serialize_cash_transaction(tx),
        "cashbox_balance": decimal_to_float(balance),
    }, status=201)


@require_http_methods(["GET"])
def cashbox_reconcile(request):
    try:
        result = CashboxService.reconcile()
    except Exception as e:
        logger.error(f"Error reconciling cashbox: {e}", exc_info=True)
        return JsonResponse({"success": False, "message": "Could not reconcile cashbox."}, status=500)

    return JsonResponse({
        "success": True,
        "stored_balance": decimal_to_float(result['stored_balance']),
        "derived_balance": decimal_to_float(result['derived_balance']),
        "drift": decimal_to_float(result['drift']),
        "in_sync": result['in_sync'],
        "transaction_count": result['transaction_count'],
    })


# =============================================================================
# INCOME
# =============================================================================

@require_http_methods(["GET"])
def income_list(request):
    try:
        entries = IncomeEntry.objects.all()
        page_obj, paginator = paginate_queryset(request, entries, per_page=50)
        return JsonResponse({
            "success": True,
            "income": [serialize_income_entry(entry) for entry in page_obj],
            "page": page_obj.number,
            "num_pages": paginator.num_pages,
        })
    except Exception as e:
        logger.error(f"Error loading income entries: {e}", exc_info=True)
        return JsonResponse({"success": False, "message": "Could not load income."}, status=500)


@csrf_exempt
@require_http_methods(["POST"])
def income_add(request):
    try:
        data = parse_json_body(request)
    except (json.JSONDecodeError, ValueError):
        return JsonResponse({"success": False, "message": "Invalid JSON data."}, status=400)

    form = IncomeEntryForm(data)
    if not form.is_valid():
        return JsonResponse(
            {"success": False, "message": "Please enter amount and client name.", "errors": form_errors(form)},
            status=400
        )

    try:
        entry = IncomeService.record_income(**form.cleaned_data)
    except ValidationError as e:
        return JsonResponse(
            {"success": False, "message": "Invalid income entry.", "errors": validation_error_messages(e)},
            status=400
        )
    except Exception as e:
        logger.error(f"Error recording income: {e}", exc_info=True)
        return JsonResponse({"success": False, "message": "Could not record income."}, status=500)

    return JsonResponse({
        "success": True,
        "message": "Income recorded.",
        "income": serialize_income_entry(entry),
    }, status=201)


# =============================================================================
# METRICS
# =============================================================================

@require_http_methods(["GET"])
def burn_metrics(request):
    try:
        return JsonResponse({"success": True, "burn": get_burn_statistics()})
    except Exception as e:
        logger.error(f"Error computing burn metrics: {e}", exc_info=True)
        return JsonResponse({"success": False, "message": "Could not compute burn metrics."}, status=500)


@require_http_methods(["GET"])
def weekly_pnl(request):
    """Weekly P&L; ?week=calendar for Mon-Sun, fiscal (Wed-Tue) otherwise."""
    week = request.GET.get('week', 'fiscal')
    try:
        return JsonResponse({"success": True, "pnl": get_weekly_pnl_statistics(week)})
    except Exception as e:
        logger.error(f"Error computing weekly P&L: {e}", exc_info=True)
        return JsonResponse({"success": False, "message": "Could not compute weekly P&L."}, status=500)
