# intel/advisor.py

"""
Firm Intelligence advisor.

Sends the conversation plus a trimmed snapshot of the firm's numbers to the
OpenAI chat-completions API and returns the reply text. A missing API key
is not an error: the advisor reports itself unavailable and the chat
endpoint answers with an explanatory message instead.
"""

import json
import logging

from django.conf import settings
from openai import OpenAI

logger = logging.getLogger(__name__)

NOT_CONFIGURED_MESSAGE = (
    "AI Service is not configured. Please add your OPENAI_API_KEY to the "
    "environment variables to activate Firm Intelligence."
)

SYSTEM_PROMPT = """
You are the "Chief of Staff" and "Strategic Advisor" for a law firm.
Your goal is to provide brutal, honest, and strategic advice to stop financial bleeding and increase production.

Here is the current live data for the firm:
{context}

Instructions:
1. Be concise, direct, and professional.
2. Analyze the provided data (Cashbox, Burn Rate, Staff Efficiency).
3. If staff are underperforming (Efficiency < 1.0), flag it.
4. If burn rate is high, suggest specific cuts based on the expense data.
5. Do not hallucinate data not present in the context.
"""

# Keys shorter than this are treated as placeholders
MIN_API_KEY_LENGTH = 10


def _first(mapping, *keys):
    for key in keys:
        if key in mapping:
            return mapping[key]
    return None


def clean_context(context):
    """
    Trim a context payload to what the advisor needs: employees (name, role,
    cost), financials, the clients summary and recent logs. Accepts the
    camelCase keys sent by the browser as well as snake_case ones.
    """
    context = context or {}
    employees = context.get('employees') or []

    return {
        'employees': [
            {
                'name': employee.get('name'),
                'role': employee.get('role'),
                'cost': _first(employee, 'hourlyCost', 'hourly_cost', 'effective_hourly_cost'),
            }
            for employee in employees
            if isinstance(employee, dict)
        ],
        'financials': context.get('financials'),
        'clients': _first(context, 'clientsSummary', 'clients_summary'),
        'logs': _first(context, 'recentLogs', 'recent_logs'),
    }


def build_system_prompt(context):
    return SYSTEM_PROMPT.format(context=json.dumps(clean_context(context), indent=2, default=str))


class FirmAdvisor:
    """
    Strategic advisor backed by an OpenAI chat model.
    """

    def __init__(self, api_key=None, model=None, history_length=None):
        self.api_key = api_key if api_key is not None else getattr(settings, 'OPENAI_API_KEY', '')
        self.model = model or getattr(settings, 'FIRM_ADVISOR_MODEL', 'gpt-4o')
        self.history_length = history_length or getattr(settings, 'FIRM_ADVISOR_HISTORY_LENGTH', 5)
        self._client = None

    @property
    def is_available(self):
        """True when a usable API key is configured."""
        api_key = (self.api_key or '').strip()
        return len(api_key) >= MIN_API_KEY_LENGTH and api_key != 'undefined'

    @property
    def client(self):
        """Lazy initialization of OpenAI client."""
        if self._client is None:
            if not self.is_available:
                raise ValueError("OpenAI API key required. Set OPENAI_API_KEY environment variable.")
            self._client = OpenAI(api_key=self.api_key)
        return self._client

    def build_messages(self, messages, context):
        """System prompt followed by the last few conversation turns."""
        history = [
            {'role': message.get('role'), 'content': message.get('content')}
            for message in messages[-self.history_length:]
        ]
        return [{'role': 'system', 'content': build_system_prompt(context)}] + history

    def advise(self, messages, context=None):
        """
        Ask the model for advice. No retry; upstream errors propagate.

        Returns:
            str: the assistant's reply
        """
        if not self.is_available:
            logger.warning("OPENAI_API_KEY is missing or invalid")
            return NOT_CONFIGURED_MESSAGE

        response = self.client.chat.completions.create(
            model=self.model,
            stream=False,
            messages=self.build_messages(messages, context),
        )
        return response.choices[0].message.content or ''


def build_firm_context(snapshot, today=None, recent_logs=None):
    """
    Advisor context assembled on the server from a repository snapshot,
    for callers that do not send one.
    """
    from core.metrics import compute_firm_metrics
    from core.serializers import to_json_safe

    recent_logs = recent_logs or getattr(settings, 'FIRM_ADVISOR_RECENT_LOGS', 10)
    metrics = compute_firm_metrics(snapshot, today)
    employees_by_id = {employee.id: employee for employee in snapshot.employees}

    return to_json_safe({
        'employees': [
            {
                'name': employee.name,
                'role': employee.role,
                'hourly_cost': employee.effective_hourly_cost,
            }
            for employee in snapshot.employees
        ],
        'financials': {
            'monthly_total': metrics['monthly_total'],
            'fixed_overhead_hourly': metrics['hourly_overhead'],
            'cash_on_hand': metrics['cash_on_hand'],
            'debt': metrics['debt'],
            'cashbox_balance': metrics['cashbox']['balance'],
            'burn': metrics['burn'],
            'runway': metrics['runway_display'],
            'burn_health': metrics['burn_health']['status'],
        },
        'clients_summary': metrics['clients'],
        'recent_logs': [
            {
                'employee': getattr(employees_by_id.get(log.employee_id), 'name', None),
                'date': log.date,
                'description': log.description,
                'hours': log.hours,
                'labor_cost': log.labor_cost,
                'production_cost': log.production_cost,
                'status': log.status,
            }
            for log in sorted(snapshot.task_logs, key=lambda log: (log.date, log.created_at), reverse=True)[:recent_logs]
        ],
    })
