"""JSON endpoints: status codes and response shapes."""

from decimal import Decimal

import pytest

from finance.models import FinancialSettings
from staff.models import TaskLog

pytestmark = pytest.mark.django_db


class TestStaffEndpoints:

    def test_create_employee(self, post_json):
        response = post_json('/staff/employees/create/', {'name': 'Ana Ruiz', 'role': 'Paralegal', 'salary': '52000'})

        assert response.status_code == 201
        employee = response.json()['employee']
        assert employee['pay_type'] == 'salary'
        assert employee['effective_hourly_cost'] == 25.0
        assert employee['daily_target'] == 75.0

    def test_employee_without_cost_basis(self, post_json):
        response = post_json('/staff/employees/create/', {'name': 'Ana Ruiz'})
        assert response.status_code == 400
        assert response.json()['success'] is False

    def test_invalid_json(self, client):
        response = client.post('/staff/employees/create/', data='{', content_type='application/json')
        assert response.status_code == 400

    def test_log_task(self, post_json, financials, make_employee):
        employee = make_employee(hourly_cost='30')
        response = post_json('/staff/tasks/create/', {
            'employee': str(employee.pk), 'description': 'Draft writ', 'hours': '2', 'billable_rate': '100'
        })
        body = response.json()

        assert response.status_code == 201
        assert body['valuation']['production_cost'] == 110.0
        assert body['task_log']['labor_cost'] == 60.0

    def test_flat_fee_task_without_case(self, post_json, financials, make_employee):
        employee = make_employee(hourly_cost='30')
        response = post_json('/staff/tasks/create/', {
            'employee': str(employee.pk), 'description': 'Research', 'hours': '2', 'billing_type': 'flat_fee'
        })
        assert response.status_code == 400
        assert TaskLog.objects.count() == 0

    def test_preview_writes_nothing(self, post_json, financials, make_employee):
        employee = make_employee(hourly_cost='30')
        response = post_json('/staff/tasks/preview/', {
            'employee': str(employee.pk), 'description': 'Call', 'hours': '1', 'billable_rate': '20'
        })

        assert response.status_code == 200
        assert response.json()['valuation']['is_profitable'] is False
        assert TaskLog.objects.count() == 0

    def test_list_endpoints(self, client, make_employee):
        make_employee(hourly_cost='30')
        assert client.get('/staff/employees/').status_code == 200
        assert client.get('/staff/tasks/').status_code == 200
        assert client.get('/staff/stats/').status_code == 200


class TestClientEndpoints:

    def test_create_client(self, post_json):
        response = post_json('/clients/create/', {
            'name': 'Marcus Lee', 'sponsor_name': 'Dana Lee', 'flat_fee_amount': '5000', 'estimated_hours': '50'
        })
        assert response.status_code == 201
        assert response.json()['client']['value_per_hour'] == 100.0

    def test_flat_fee_client_needs_estimate(self, post_json):
        response = post_json('/clients/create/', {
            'name': 'Marcus Lee', 'sponsor_name': 'Dana Lee', 'flat_fee_amount': '5000'
        })
        assert response.status_code == 400

    def test_update_unknown_client(self, post_json):
        response = post_json('/clients/00000000-0000-0000-0000-000000000000/update/', {'status': 'risk'})
        assert response.status_code == 404

    def test_case_types(self, client, post_json):
        response = post_json('/clients/case-types/create/', {'name': 'Parole Packet', 'estimated_hours': '25'})
        assert response.status_code == 201
        assert client.get('/clients/case-types/').status_code == 200


class TestFinanceEndpoints:

    def test_routed_expense(self, post_json, financials):
        response = post_json('/finance/expenses/add/', {'name': 'Rent', 'amount': '3200'})

        assert response.status_code == 200
        assert response.json()['field'] == 'monthly_lease'
        assert FinancialSettings.get_instance().monthly_lease == Decimal('3200')

    def test_custom_expense(self, post_json, financials):
        response = post_json('/finance/expenses/add/', {'name': 'Insurance', 'amount': '250'})

        assert response.status_code == 201
        assert response.json()['financials']['monthly_total'] == 4250.0

    def test_expense_needs_a_name(self, post_json, financials):
        assert post_json('/finance/expenses/add/', {'name': '', 'amount': '10'}).status_code == 400

    def test_cashbox_entry(self, post_json, financials):
        response = post_json('/finance/cashbox/add/', {
            'direction': 'in', 'amount': '100', 'category': 'Client Payment', 'description': 'Retainer'
        })

        assert response.status_code == 201
        assert response.json()['cashbox_balance'] == 100.0

    def test_cashbox_category_mismatch(self, post_json, financials):
        response = post_json('/finance/cashbox/add/', {
            'direction': 'out', 'amount': '100', 'category': 'Client Payment', 'description': 'Oops'
        })
        assert response.status_code == 400

    def test_reconcile(self, client, financials):
        response = client.get('/finance/cashbox/reconcile/')
        assert response.status_code == 200
        assert response.json()['in_sync'] is True

    def test_income(self, post_json, financials):
        response = post_json('/finance/income/add/', {'amount': '1500', 'client_name': 'Dana Lee'})
        assert response.status_code == 201
        assert post_json('/finance/income/add/', {'amount': '1500'}).status_code == 400

    @pytest.mark.parametrize('url', [
        '/finance/financials/', '/finance/cashbox/', '/finance/income/',
        '/finance/burn/', '/finance/pnl/', '/finance/pnl/?week=calendar',
    ])
    def test_read_endpoints(self, client, financials, url):
        response = client.get(url)
        assert response.status_code == 200
        assert response.json()['success'] is True


class TestSupportEndpoints:

    def test_submit_ticket(self, post_json):
        response = post_json('/support/tickets/submit/', {
            'subject': 'Printer jam', 'description': 'Tray 2', 'submitted_by': 'Ana'
        })

        assert response.status_code == 201
        assert response.json()['ticket']['ticket_number'] == '00001'
        assert response.json()['ticket']['priority'] == 'medium'

    def test_ticket_needs_subject(self, post_json):
        response = post_json('/support/tickets/submit/', {'description': 'Tray 2', 'submitted_by': 'Ana'})
        assert response.status_code == 400


class TestCommandCenterEndpoints:

    def test_dashboard(self, client, financials, make_employee):
        make_employee(hourly_cost='30')
        response = client.get('/?date=2024-01-08')
        metrics = response.json()['metrics']

        assert response.status_code == 200
        assert metrics['monthly_total'] == 4000.0
        assert metrics['hourly_overhead'] == 25.0
        assert metrics['runway_display'] == '50 Days'
        assert metrics['employee_count'] == 1

    def test_dashboard_bad_date(self, client):
        assert client.get('/?date=08/01/2024').status_code == 400

    def test_weekly_report_json(self, client, financials):
        response = client.get('/report/weekly/?date=2024-01-08')

        assert response.status_code == 200
        assert response.json()['report']['fixed_overhead'] == 1400.0

    def test_weekly_report_exports(self, client, financials):
        xlsx = client.get('/report/weekly/?format=xlsx')
        pdf = client.get('/report/weekly/?format=pdf')

        assert xlsx.status_code == 200
        assert xlsx['Content-Type'].startswith('application/vnd.openxmlformats')
        assert pdf.status_code == 200
        assert pdf['Content-Type'] == 'application/pdf'

    def test_weekly_report_unknown_format(self, client):
        assert client.get('/report/weekly/?format=csv').status_code == 400
