"""Flat-fee progress, communication discipline and portfolio summaries."""

from datetime import datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace

from django.utils import timezone

from clients.utils import (
    calculate_progress_percentage, calculate_value_per_hour, is_over_budget,
    days_since_communication, is_communication_overdue, summarize_client_portfolio,
    validate_client_data, validate_case_type_data
)

NOW = timezone.make_aware(datetime(2024, 1, 8, 12, 0))


def client(**fields):
    defaults = {'billing_type': 'flat_fee', 'status': 'active', 'flat_fee_amount': 5000,
                'estimated_hours': 50, 'hours_logged': 0, 'last_communication': None}
    defaults.update(fields)
    return SimpleNamespace(**defaults)


class TestFlatFeeProgress:

    def test_progress_is_share_of_budget(self):
        assert calculate_progress_percentage(client(hours_logged=10)) == Decimal('20')

    def test_progress_is_clamped_for_display(self):
        over = client(hours_logged=55)
        assert calculate_progress_percentage(over) == Decimal('100')
        assert over.hours_logged == 55
        assert is_over_budget(over) is True

    def test_hourly_clients_show_no_progress(self):
        assert calculate_progress_percentage(client(billing_type='hourly', hours_logged=10)) == Decimal('0')

    def test_value_per_hour(self):
        assert calculate_value_per_hour(client()) == Decimal('100')

    def test_missing_estimate_counts_as_one_hour(self):
        assert calculate_value_per_hour(client(estimated_hours=0, flat_fee_amount=300)) == Decimal('300')


class TestCommunication:

    def test_never_contacted_is_not_overdue(self):
        assert days_since_communication(client(), NOW) is None
        assert is_communication_overdue(client(), NOW) is False

    def test_fourteen_days_is_still_on_time(self):
        on_time = client(last_communication=NOW - timedelta(days=14))
        assert days_since_communication(on_time, NOW) == 14
        assert is_communication_overdue(on_time, NOW) is False

    def test_fifteen_days_is_overdue(self):
        assert is_communication_overdue(client(last_communication=NOW - timedelta(days=15)), NOW) is True


class TestPortfolio:

    def test_summary(self):
        clients = [
            client(hours_logged=10),
            client(status='risk', hours_logged=60, last_communication=NOW - timedelta(days=30)),
            client(status='churned', billing_type='hourly', flat_fee_amount=0, estimated_hours=0),
        ]
        summary = summarize_client_portfolio(clients, NOW)

        assert summary['total_clients'] == 3
        assert summary['active_clients'] == 1
        assert summary['at_risk_clients'] == 2
        assert summary['churned_clients'] == 1
        assert summary['communication_overdue'] == 1
        assert summary['flat_fee_cases'] == 2
        assert summary['flat_fee_contract_value'] == Decimal('10000')
        assert summary['flat_fee_hours_budgeted'] == Decimal('100')
        assert summary['flat_fee_hours_logged'] == Decimal('70')
        assert summary['over_budget_cases'] == 1

    def test_empty_portfolio(self):
        summary = summarize_client_portfolio([], NOW)
        assert summary['total_clients'] == 0
        assert summary['flat_fee_contract_value'] == Decimal('0')


class TestValidation:

    def test_name_and_sponsor_required(self):
        result = validate_client_data({'name': 'Marcus Lee', 'flat_fee_amount': 5000, 'estimated_hours': 50})
        assert result['valid'] is False
        assert "Please enter at least the Client Name and Sponsor Name." in result['errors']

    def test_flat_fee_needs_amount_and_hours(self):
        result = validate_client_data({'name': 'Marcus Lee', 'sponsor_name': 'Dana Lee'})
        assert result['valid'] is False

    def test_hourly_client_needs_no_fee(self):
        result = validate_client_data({'name': 'Marcus Lee', 'sponsor_name': 'Dana Lee', 'billing_type': 'hourly'})
        assert result['valid'] is True

    def test_case_type_needs_hours(self):
        assert validate_case_type_data({'name': 'Parole Packet'})['valid'] is False
        assert validate_case_type_data({'name': 'Parole Packet', 'estimated_hours': '25'})['valid'] is True
