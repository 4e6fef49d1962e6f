"""Shared fixtures for the firm test suite."""

import json
from datetime import date
from decimal import Decimal

import pytest


@pytest.fixture
def monday():
    # 2024-01-08 is a Monday; the fiscal week around it runs Wed 3 Jan - Tue 9 Jan
    return date(2024, 1, 8)


# =============================================================================
# STORED RECORDS
# =============================================================================

@pytest.fixture
def financials(db):
    """Financial settings with a 4000/month fixed total and 10000 cash."""
    from finance.models import FinancialSettings

    settings = FinancialSettings.get_instance()
    settings.monthly_lease = Decimal('3000.00')
    settings.case_management = Decimal('500.00')
    settings.phone = Decimal('500.00')
    settings.cash_on_hand = Decimal('10000.00')
    settings.save()
    return settings


@pytest.fixture
def make_employee(db):
    from staff.models import Employee

    def _make(name='Ana Ruiz', role='Paralegal', hourly_cost='0', salary=None, daily_hours='8',
              daily_target='0', is_active=True):
        return Employee.objects.create(
            name=name,
            role=role,
            hourly_cost=Decimal(hourly_cost),
            salary=Decimal(salary) if salary is not None else None,
            daily_hours=Decimal(daily_hours),
            daily_target=Decimal(daily_target),
            is_active=is_active,
        )

    return _make


@pytest.fixture
def make_client(db):
    from clients.models import Client

    def _make(name='Marcus Lee', sponsor_name='Dana Lee', billing_type='flat_fee',
              flat_fee_amount='5000', estimated_hours='50', status='active', **extra):
        return Client.objects.create(
            name=name,
            sponsor_name=sponsor_name,
            billing_type=billing_type,
            flat_fee_amount=Decimal(flat_fee_amount),
            estimated_hours=Decimal(estimated_hours),
            status=status,
            **extra
        )

    return _make


@pytest.fixture
def post_json(client):
    """POST a JSON body with the Django test client."""
    def _post(url, data):
        return client.post(url, data=json.dumps(data), content_type='application/json')
    return _post
