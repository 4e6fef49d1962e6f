# utils/utils.py

from decimal import Decimal, InvalidOperation
import json

from django.core.paginator import Paginator, EmptyPage, PageNotAnInteger

# =============================================================================
# CORE UTILITY HELPER FUNCTIONS
# =============================================================================

def paginate_queryset(request, queryset, per_page=20):
    paginator = Paginator(queryset, per_page)
    page = request.GET.get('page', 1)
    try:
        page_obj = paginator.page(page)
    except PageNotAnInteger:
        page_obj = paginator.page(1)
    except EmptyPage:
        page_obj = paginator.page(paginator.num_pages)
    return page_obj, paginator

def parse_filters(request, filter_keys):
    """
    Extract filter values from request.GET.
    filter_keys: list of filter names to extract
    Returns dict: {key: value or None}
    """
    filters = {}
    for key in filter_keys:
        value = request.GET.get(key, '').strip()
        filters[key] = value if value else None
    return filters

def parse_json_body(request):
    """
    Decode a JSON request body into a dict.
    Form-encoded posts fall back to request.POST.
    Raises json.JSONDecodeError / ValueError on malformed JSON.
    """
    if request.content_type == 'application/json':
        if not request.body:
            return {}
        data = json.loads(request.body)
        if not isinstance(data, dict):
            raise ValueError("JSON body must be an object")
        return data
    return request.POST.dict()

def to_decimal(value, default=Decimal('0')):
    """
    Coerce a possibly-missing numeric value to Decimal.
    None, empty strings and unparseable values become `default`.
    """
    if value is None or value == '':
        return default
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return default


def decimal_to_float(value):
    """JSON-friendly float for Decimal values; None passes through."""
    if value is None:
        return None
    return float(value)

# =============================================================================
# ERROR PAYLOAD HELPERS
# =============================================================================

def form_errors(form):
    """Form errors as {field: [message, ...]}."""
    return {
        field: [error['message'] for error in errors]
        for field, errors in form.errors.get_json_data().items()
    }

def validation_error_messages(exc):
    """
    Flatten a django ValidationError for a JSON response.
    Field errors come back as a dict, others as a list.
    """
    if hasattr(exc, 'error_dict'):
        return exc.message_dict
    return exc.messages
