"""Firm Intelligence advisor and chat endpoint."""

from types import SimpleNamespace
from unittest.mock import patch

import pytest

from intel.advisor import FirmAdvisor, NOT_CONFIGURED_MESSAGE, clean_context

API_KEY = 'sk-test-0123456789'


def completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class TestAvailability:

    @pytest.mark.parametrize('api_key', ['', '   ', 'short', 'undefined'])
    def test_placeholder_keys_are_unavailable(self, api_key):
        assert FirmAdvisor(api_key=api_key).is_available is False

    def test_real_key_is_available(self):
        assert FirmAdvisor(api_key=API_KEY).is_available is True

    def test_advise_without_key_does_not_call_out(self):
        with patch('intel.advisor.OpenAI') as openai:
            assert FirmAdvisor(api_key='').advise([{'role': 'user', 'content': 'Hi'}]) == NOT_CONFIGURED_MESSAGE
        openai.assert_not_called()

    def test_client_requires_key(self):
        with pytest.raises(ValueError):
            FirmAdvisor(api_key='').client


class TestPrompt:

    def test_only_recent_turns_are_sent(self):
        advisor = FirmAdvisor(api_key=API_KEY, history_length=5)
        messages = [{'role': 'user', 'content': f"question {i}"} for i in range(8)]

        built = advisor.build_messages(messages, {})

        assert len(built) == 6
        assert built[0]['role'] == 'system'
        assert [m['content'] for m in built[1:]] == [f"question {i}" for i in range(3, 8)]

    def test_context_is_embedded_in_the_system_prompt(self):
        advisor = FirmAdvisor(api_key=API_KEY)
        built = advisor.build_messages([], {'financials': {'cash_on_hand': 1234}})
        assert '1234' in built[0]['content']

    def test_clean_context_accepts_camel_case(self):
        context = {
            'employees': [{'name': 'Ana', 'role': 'Paralegal', 'hourlyCost': 30, 'salary': 90000}],
            'financials': {'monthlyLease': 3000},
            'clientsSummary': {'active': 4},
            'recentLogs': [{'hours': 2}],
            'tickets': ['ignored'],
        }
        cleaned = clean_context(context)

        assert cleaned == {
            'employees': [{'name': 'Ana', 'role': 'Paralegal', 'cost': 30}],
            'financials': {'monthlyLease': 3000},
            'clients': {'active': 4},
            'logs': [{'hours': 2}],
        }

    def test_clean_context_tolerates_nothing(self):
        assert clean_context(None) == {'employees': [], 'financials': None, 'clients': None, 'logs': None}


class TestAdvise:

    @patch('intel.advisor.OpenAI')
    def test_returns_the_reply_text(self, openai):
        openai.return_value.chat.completions.create.return_value = completion("Cut the printer lease.")
        advisor = FirmAdvisor(api_key=API_KEY, model='gpt-4o')

        reply = advisor.advise([{'role': 'user', 'content': 'Where do we cut?'}], {})

        assert reply == "Cut the printer lease."
        openai.assert_called_once_with(api_key=API_KEY)
        kwargs = openai.return_value.chat.completions.create.call_args.kwargs
        assert kwargs['model'] == 'gpt-4o'
        assert kwargs['stream'] is False
        assert kwargs['messages'][-1] == {'role': 'user', 'content': 'Where do we cut?'}

    @patch('intel.advisor.OpenAI')
    def test_upstream_errors_propagate(self, openai):
        openai.return_value.chat.completions.create.side_effect = RuntimeError("rate limited")
        with pytest.raises(RuntimeError):
            FirmAdvisor(api_key=API_KEY).advise([{'role': 'user', 'content': 'Hi'}], {})


class TestChatView:

    url = '/intel/chat/'

    def test_missing_key_answers_with_a_message(self, settings, post_json):
        settings.OPENAI_API_KEY = ''
        response = post_json(self.url, {'messages': [{'role': 'user', 'content': 'Hi'}]})

        assert response.status_code == 200
        assert response.json()['content'] == NOT_CONFIGURED_MESSAGE

    def test_missing_key_wins_over_a_bad_body(self, settings, client):
        settings.OPENAI_API_KEY = ''
        response = client.post(self.url, data='not json', content_type='application/json')
        assert response.status_code == 200

    @pytest.mark.parametrize('body', [{}, {'messages': 'hello'}, {'messages': ['hello']}])
    def test_malformed_messages(self, settings, post_json, body):
        settings.OPENAI_API_KEY = API_KEY
        response = post_json(self.url, body)

        assert response.status_code == 400
        assert response.json() == {'error': 'Invalid messages format'}

    def test_invalid_json(self, settings, client):
        settings.OPENAI_API_KEY = API_KEY
        response = client.post(self.url, data='{', content_type='application/json')
        assert response.status_code == 400

    @patch('intel.advisor.OpenAI')
    def test_reply(self, openai, settings, post_json):
        settings.OPENAI_API_KEY = API_KEY
        openai.return_value.chat.completions.create.return_value = completion("Runway is 12 days.")

        response = post_json(self.url, {
            'messages': [{'role': 'user', 'content': 'How long do we last?'}],
            'context': {'financials': {'cashOnHand': 5000}},
        })

        assert response.status_code == 200
        assert response.json() == {'role': 'assistant', 'content': 'Runway is 12 days.'}

    @pytest.mark.django_db
    @patch('intel.advisor.OpenAI')
    def test_context_is_built_when_not_sent(self, openai, settings, post_json, financials, make_employee):
        settings.OPENAI_API_KEY = API_KEY
        make_employee(name='Ana Ruiz', hourly_cost='30')
        openai.return_value.chat.completions.create.return_value = completion("OK")

        response = post_json(self.url, {'messages': [{'role': 'user', 'content': 'Status?'}]})

        assert response.status_code == 200
        system_prompt = openai.return_value.chat.completions.create.call_args.kwargs['messages'][0]['content']
        assert 'Ana Ruiz' in system_prompt

    @patch('intel.advisor.OpenAI')
    def test_upstream_failure_is_reported_in_the_bubble(self, openai, settings, post_json):
        settings.OPENAI_API_KEY = API_KEY
        openai.return_value.chat.completions.create.side_effect = RuntimeError("quota exceeded")

        response = post_json(self.url, {
            'messages': [{'role': 'user', 'content': 'Hi'}],
            'context': {'employees': []},
        })

        assert response.status_code == 200
        assert response.json()['content'].startswith("Error: quota exceeded")

    def test_get_not_allowed(self, client):
        assert client.get(self.url).status_code == 405
