# intel/views.py

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods
import json
import logging

from .advisor import FirmAdvisor, NOT_CONFIGURED_MESSAGE, build_firm_context

logger = logging.getLogger(__name__)


@csrf_exempt
@require_http_methods(["POST"])
def chat(request):
    """
    Advisory chat. Always answers 200 with {"content": ...} so the chat UI
    can render a message bubble; 400 only for a malformed messages list.
    """
    advisor = FirmAdvisor()

    if not advisor.is_available:
        logger.warning("Chat requested but OPENAI_API_KEY is not configured")
        return JsonResponse({"content": NOT_CONFIGURED_MESSAGE}, status=200)

    try:
        data = json.loads(request.body or b'{}')
        messages = data.get('messages') if isinstance(data, dict) else None

        if not isinstance(messages, list) or not all(isinstance(m, dict) for m in messages):
            return JsonResponse({"error": "Invalid messages format"}, status=400)

        context = data.get('context')
        if not context:
            from core.repository import get_repository
            context = build_firm_context(get_repository().snapshot())

        content = advisor.advise(messages, context)
        return JsonResponse({"role": "assistant", "content": content})

    except json.JSONDecodeError:
        return JsonResponse({"error": "Invalid messages format"}, status=400)
    except Exception as e:
        logger.error(f"OpenAI API Error: {e}", exc_info=True)
        return JsonResponse(
            {"content": f"Error: {e}. Please check your connection or AI configuration."},
            status=200
        )
