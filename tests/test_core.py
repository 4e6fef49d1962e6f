"""Repository, snapshot cache, metrics engine, SitRep and store commands."""

import json
from datetime import date, datetime
from decimal import Decimal
from io import BytesIO, StringIO
from types import SimpleNamespace
from unittest.mock import patch

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError
from django.db import DatabaseError, transaction
from django.utils import timezone
from openpyxl import load_workbook

from core.cache import SnapshotCache, CACHED_COLLECTIONS
from core.metrics import compute_firm_metrics
from core.reports import build_weekly_sitrep, export_sitrep_excel, export_sitrep_pdf
from core.repository import FirmRepository, FirmSnapshot
from core.utils import camel_to_snake, normalize_record, parse_record_datetime


def aware(*args):
    return timezone.make_aware(datetime(*args))


def firm_snapshot():
    """Two staff (one inactive), a 4000/month overhead and a small client book."""
    financials = SimpleNamespace(
        monthly_lease=3000, case_management=500, phone=500,
        cash_on_hand=Decimal('10000'), debt=Decimal('2500'), cashbox_balance=Decimal('60')
    )
    ana = SimpleNamespace(id=1, name='Ana Ruiz', role='Paralegal', hourly_cost=30, salary=None,
                          daily_hours=8, daily_target=500, is_active=True)
    ben = SimpleNamespace(id=2, name='Ben Ortiz', role='Clerk', hourly_cost=20, salary=None,
                          daily_hours=8, daily_target=300, is_active=False)
    task_logs = (
        SimpleNamespace(employee_id=1, date=date(2024, 1, 8), hours=Decimal('4'), labor_cost=Decimal('120'),
                        production_cost=Decimal('220'), description='Draft writ', status='completed',
                        created_at=aware(2024, 1, 8, 10)),
        SimpleNamespace(employee_id=1, date=date(2024, 1, 9), hours=Decimal('2'), labor_cost=Decimal('60'),
                        production_cost=Decimal('110'), description='Client call', status='completed',
                        created_at=aware(2024, 1, 9, 10)),
        SimpleNamespace(employee_id=2, date=date(2024, 1, 5), hours=Decimal('8'), labor_cost=Decimal('160'),
                        production_cost=Decimal('360'), description='Filing', status='completed',
                        created_at=aware(2024, 1, 5, 10)),
    )
    clients = (
        SimpleNamespace(id='c1', name='Marcus Lee', sponsor_name='Dana Lee', status='active',
                        billing_type='flat_fee', flat_fee_amount=5000, estimated_hours=50, hours_logged=6,
                        last_communication=aware(2024, 1, 10, 9)),
        SimpleNamespace(id='c2', name='Tom Reyes', sponsor_name='Lia Reyes', status='active',
                        billing_type='hourly', flat_fee_amount=0, estimated_hours=0, hours_logged=0,
                        last_communication=aware(2023, 12, 1, 9)),
        SimpleNamespace(id='c3', name="Kyle O'Brien", sponsor_name='Smith & Sons', status='risk',
                        billing_type='flat_fee', flat_fee_amount=2500, estimated_hours=25, hours_logged=0,
                        last_communication=None),
        SimpleNamespace(id='c4', name='Ray Cole', sponsor_name='Ann Cole', status='churned',
                        billing_type='hourly', flat_fee_amount=0, estimated_hours=0, hours_logged=0,
                        last_communication=None),
    )
    tickets = (
        SimpleNamespace(status='open'),
        SimpleNamespace(status='in_progress'),
        SimpleNamespace(status='resolved'),
    )
    cash_transactions = (
        SimpleNamespace(direction='in', amount=Decimal('100'), payment_method='cash'),
        SimpleNamespace(direction='out', amount=Decimal('40'), payment_method='cash'),
    )
    return FirmSnapshot(
        employees=(ana, ben),
        task_logs=task_logs,
        financials=financials,
        clients=clients,
        cash_transactions=cash_transactions,
        tickets=tickets,
    )


# =============================================================================
# REPOSITORY
# =============================================================================

class TestRepositorySubscriptions:

    def test_subscribers_are_notified_until_they_unsubscribe(self):
        repository = FirmRepository()
        calls = []
        unsubscribe = repository.subscribe(lambda *args: calls.append(args))

        repository.notify('clients', 'record', 'created')
        unsubscribe()
        unsubscribe()
        repository.notify('clients', 'record', 'updated')

        assert calls == [('clients', 'record', 'created')]
        assert repository.subscriber_count == 0

    def test_failing_subscriber_does_not_block_others(self):
        repository = FirmRepository()
        calls = []

        def broken(*args):
            raise RuntimeError("boom")

        repository.subscribe(broken)
        repository.subscribe(lambda *args: calls.append(args))
        repository.notify('tickets', 'record', 'deleted')

        assert calls == [('tickets', 'record', 'deleted')]

    @pytest.mark.django_db
    def test_model_writes_reach_subscribers(self, make_client):
        from core.repository import get_repository

        calls = []
        unsubscribe = get_repository().subscribe(lambda name, instance, action: calls.append((name, action)))
        try:
            client = make_client()
            client.notes = 'Called sponsor'
            client.save()
        finally:
            unsubscribe()

        assert calls == [('clients', 'created'), ('clients', 'updated')]

    @pytest.mark.django_db
    def test_snapshot_loads_every_collection(self, financials, make_employee, make_client):
        from core.repository import get_repository

        make_employee()
        make_employee(name='Ben Ortiz', is_active=False)
        make_client()

        snapshot = get_repository().snapshot()

        assert len(snapshot.employees) == 2
        assert len(snapshot.active_employees) == 1
        assert len(snapshot.clients) == 1
        assert snapshot.financials.cash_on_hand == Decimal('10000.00')


# =============================================================================
# SNAPSHOT CACHE
# =============================================================================

@pytest.mark.django_db
class TestSnapshotCache:

    @pytest.fixture
    def snapshot_cache(self):
        repository = FirmRepository()
        snapshot_cache = SnapshotCache(repository, key='law-firm-os-data-test').start()
        yield snapshot_cache
        snapshot_cache.stop()
        snapshot_cache.clear()

    def test_changes_in_one_transaction_refresh_once(self, snapshot_cache, django_capture_on_commit_callbacks):
        with patch.object(snapshot_cache, 'refresh') as refresh:
            with django_capture_on_commit_callbacks(execute=True) as callbacks:
                snapshot_cache.repository.notify('clients', None, 'created')
                snapshot_cache.repository.notify('taskLogs', None, 'created')
                snapshot_cache.repository.notify('customExpenses', None, 'deleted')

        assert len(callbacks) == 1
        refresh.assert_called_once_with()

    def test_rolled_back_write_does_not_stall_refreshes(self, financials, make_employee,
                                                        django_capture_on_commit_callbacks):
        from core.repository import get_repository

        live_cache = SnapshotCache(get_repository(), key='law-firm-os-data-live').start()
        try:
            with pytest.raises(RuntimeError):
                with transaction.atomic():
                    make_employee(name='Dropped')
                    raise RuntimeError("write failed")

            with django_capture_on_commit_callbacks(execute=True):
                make_employee(name='Kept')

            data = live_cache.load()
        finally:
            live_cache.stop()
            live_cache.clear()

        assert [employee['name'] for employee in data['employees']] == ['Kept']

    def test_savepoint_rollback_keeps_an_outer_refresh(self, snapshot_cache, django_capture_on_commit_callbacks):
        with patch.object(snapshot_cache, 'refresh') as refresh:
            with django_capture_on_commit_callbacks(execute=True) as callbacks:
                snapshot_cache.repository.notify('clients', None, 'created')
                with pytest.raises(RuntimeError):
                    with transaction.atomic():
                        snapshot_cache.repository.notify('tickets', None, 'created')
                        raise RuntimeError("write failed")

        assert len(callbacks) == 1
        refresh.assert_called_once_with()

    def test_uncached_collections_are_ignored(self, snapshot_cache, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks() as callbacks:
            snapshot_cache.repository.notify('incomeEntries', None, 'created')
        assert callbacks == []

    def test_refresh_writes_the_seven_collections(self, snapshot_cache, financials, make_employee):
        make_employee(name='Ana Ruiz', hourly_cost='30')
        snapshot_cache.refresh()
        data = snapshot_cache.load()

        assert set(data) == set(CACHED_COLLECTIONS)
        assert data['employees'][0]['name'] == 'Ana Ruiz'
        assert data['financials']['monthly_total'] == 4000.0
        assert data['financials']['fixed_overhead_hourly'] == 25.0

    def test_empty_cache_loads_nothing(self, snapshot_cache):
        assert snapshot_cache.load() is None

    @pytest.mark.parametrize('raw', ['{not json', '[1, 2]'])
    def test_unreadable_blob_is_discarded(self, snapshot_cache, raw):
        snapshot_cache.cache.set(snapshot_cache.key, raw)
        assert snapshot_cache.load() is None
        assert snapshot_cache.cache.get(snapshot_cache.key) is None

    def test_stop_unsubscribes(self, snapshot_cache):
        snapshot_cache.stop()
        assert snapshot_cache.repository.subscriber_count == 0


# =============================================================================
# METRICS ENGINE
# =============================================================================

class TestFirmMetrics:

    def test_command_center_figures(self, monday):
        metrics = compute_firm_metrics(firm_snapshot(), today=monday)

        assert metrics['monthly_total'] == Decimal('4000')
        # Only the active employee's hours carry overhead
        assert metrics['hourly_overhead'] == Decimal('25')
        assert metrics['daily_fixed_overhead'] == Decimal('200')
        assert metrics['burn']['daily_payroll'] == Decimal('120')
        assert metrics['burn']['total_daily_burn'] == Decimal('320')
        assert metrics['burn']['hourly_burn_rate'] == Decimal('80')
        assert metrics['runway_days'] == 31
        assert metrics['runway_display'] == '31 Days'
        assert metrics['burn_health']['overhead_duplication_risk'] is True
        assert metrics['billing_target'] == Decimal('500')
        assert metrics['open_tickets'] == 2
        assert metrics['cash_on_hand'] == Decimal('10000')
        assert metrics['debt'] == Decimal('2500')

    def test_cashbox_and_portfolio(self, monday):
        metrics = compute_firm_metrics(firm_snapshot(), today=monday)

        assert metrics['cashbox']['net'] == Decimal('60')
        assert metrics['cashbox']['balance'] == Decimal('60')
        assert metrics['clients']['active_clients'] == 2
        assert metrics['clients']['at_risk_clients'] == 2
        assert metrics['clients']['flat_fee_contract_value'] == Decimal('7500')

    def test_staff_productivity_covers_everyone(self, monday):
        metrics = compute_firm_metrics(firm_snapshot(), today=monday)
        by_name = {summary['name']: summary for summary in metrics['staff']}

        assert by_name['Ana Ruiz']['hours'] == Decimal('6')
        assert by_name['Ben Ortiz']['log_count'] == 1

    def test_quiet_day_has_no_hourly_burn_rate(self):
        metrics = compute_firm_metrics(firm_snapshot(), today=date(2024, 2, 1))
        assert metrics['burn']['hourly_burn_rate'] is None
        assert metrics['runway_days'] == 50

    def test_empty_firm(self):
        metrics = compute_firm_metrics(FirmSnapshot(), today=date(2024, 1, 8))
        assert metrics['monthly_total'] == Decimal('0')
        assert metrics['runway_display'] == '∞'
        assert metrics['staff'] == []


# =============================================================================
# WEEKLY SITREP
# =============================================================================

class TestWeeklySitRep:

    def test_calendar_week_figures(self, monday):
        report = build_weekly_sitrep(firm_snapshot(), today=monday)

        assert timezone.localtime(report['week_start']).date() == date(2024, 1, 8)
        assert timezone.localtime(report['week_end']).date() == date(2024, 1, 14)
        assert report['labor_cost'] == Decimal('180')
        assert report['production_cost'] == Decimal('330')
        assert report['fixed_overhead'] == Decimal('1400')
        assert report['total_burn'] == Decimal('1580')
        assert report['net'] == Decimal('-330')
        # 10000 / (1580 / 5)
        assert report['runway_days'] == 31

    def test_client_movement(self, monday):
        report = build_weekly_sitrep(firm_snapshot(), today=monday)

        assert report['new_active_clients'] == 1
        assert report['churned_clients'] == 1
        assert report['at_risk_clients'] == [
            {'id': 'c3', 'name': "Kyle O'Brien", 'sponsor_name': 'Smith & Sons'}
        ]

    def test_staff_rows_only_count_the_week(self, monday):
        report = build_weekly_sitrep(firm_snapshot(), today=monday)
        by_name = {summary['name']: summary for summary in report['staff']}

        assert by_name['Ana Ruiz']['log_count'] == 2
        assert by_name['Ben Ortiz']['log_count'] == 0

    def test_excel_export(self, monday):
        response = export_sitrep_excel(build_weekly_sitrep(firm_snapshot(), today=monday))

        assert response['Content-Type'] == 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
        assert 'attachment; filename="weekly_sitrep_' in response['Content-Disposition']

        ws = load_workbook(BytesIO(response.content)).active
        assert ws['A1'].value == 'Weekly SitRep'
        assert ws['B4'].value == 'Employee'
        assert ws['B5'].value == 'Ana Ruiz'
        assert ws.freeze_panes == 'A5'

    def test_pdf_export(self, monday):
        response = export_sitrep_pdf(build_weekly_sitrep(firm_snapshot(), today=monday))

        assert response['Content-Type'] == 'application/pdf'
        assert response.content.startswith(b'%PDF')


# =============================================================================
# SNAPSHOT BLOB HELPERS
# =============================================================================

class TestBlobNormalization:

    @pytest.mark.parametrize('name, expected', [
        ('senderOrRecipient', 'sender_or_recipient'),
        ('hourlyCost', 'hourly_cost'),
        ('hourly_cost', 'hourly_cost'),
        ('monthlyLease', 'monthly_lease'),
    ])
    def test_camel_to_snake(self, name, expected):
        assert camel_to_snake(name) == expected

    def test_legacy_cashbox_fields(self):
        legacy_id, fields = normalize_record('cashboxTransactions', {
            'id': 'tx-1', 'type': 'in', 'senderOrRecipient': 'Dana Lee', 'paymentMethod': 'check'
        })
        assert legacy_id == 'tx-1'
        assert fields == {'direction': 'in', 'counterparty': 'Dana Lee', 'payment_method': 'check'}

    def test_legacy_values_and_derived_fields(self):
        _, fields = normalize_record('taskLogs', {
            'employeeId': 'e-1', 'status': 'in-progress', 'hours': 2
        })
        assert fields == {'employee': 'e-1', 'status': 'in_progress', 'hours': 2}

        _, financials = normalize_record('financials', {'clio': 150, 'monthlyTotal': 999})
        assert financials == {'case_management': 150}

    def test_datetimes(self):
        parsed = parse_record_datetime('2024-01-09T15:30:00Z')
        assert timezone.is_aware(parsed)
        assert parse_record_datetime('2024-01-09').hour == 12
        assert parse_record_datetime('') is None


# =============================================================================
# STORE COMMANDS
# =============================================================================

@pytest.mark.django_db
class TestStoreCommands:

    def test_firm_init_config_is_idempotent(self):
        from clients.models import CaseType
        from finance.models import FinancialSettings

        out = StringIO()
        call_command('firm_init_config', stdout=out)
        call_command('firm_init_config', stdout=StringIO())

        assert 'Created 10 default case types' in out.getvalue()
        assert CaseType.objects.count() == 10
        assert FinancialSettings.objects.count() == 1

    def test_import_camel_case_blob(self, tmp_path):
        from clients.models import Client
        from finance.models import FinancialSettings, CashTransaction
        from staff.models import Employee, TaskLog

        blob = {
            'employees': [
                {'id': 'e-1', 'name': 'Ana Ruiz', 'role': 'Paralegal', 'hourlyCost': 30, 'salary': '',
                 'dailyHours': 8, 'dailyTarget': 400, 'effectiveHourlyCost': 30},
            ],
            'financials': {
                'monthlyLease': 3000, 'clio': 150, 'cashOnHand': 12000, 'fixedOverheadHourly': 19.7,
                'customExpenses': [{'id': 'x-1', 'name': 'Insurance', 'amount': 200}],
            },
            'clients': [
                {'id': 'c-1', 'name': 'Marcus Lee', 'sponsorName': 'Dana Lee', 'billingType': 'flat_fee',
                 'flatFeeAmount': 5000, 'estimatedHours': 50, 'hoursLogged': 12,
                 'lastCommunication': '2024-01-02T10:00:00Z', 'progress': 24},
            ],
            'taskLogs': [
                {'id': 't-1', 'employeeId': 'e-1', 'clientId': 'c-1', 'date': '2024-01-03', 'hours': 2,
                 'description': 'Draft writ', 'laborCost': 60, 'productionCost': 99.5,
                 'billingType': 'flat_fee', 'billableValue': 200, 'status': 'in-progress',
                 'createdAt': '2024-01-03T16:00:00Z'},
                {'id': 't-2', 'employeeId': 'missing', 'date': '2024-01-03', 'hours': 1,
                 'description': 'Orphan', 'laborCost': 10, 'productionCost': 10},
            ],
            'cashboxTransactions': [
                {'id': 'tx-1', 'date': '2024-01-04T12:00:00Z', 'type': 'in', 'paymentMethod': 'check',
                 'category': 'Client Payment', 'amount': 500, 'description': 'Retainer',
                 'senderOrRecipient': 'Dana Lee', 'performedBy': 'Admin'},
            ],
        }
        path = tmp_path / 'backup.json'
        path.write_text(json.dumps(blob), encoding='utf-8')

        out = StringIO()
        call_command('import_firm_snapshot', str(path), stdout=out)

        employee = Employee.objects.get()
        assert employee.salary is None
        assert employee.hourly_cost == Decimal('30')
        assert employee.created_from_ip == '127.0.0.1'

        settings = FinancialSettings.get_instance()
        assert settings.case_management == Decimal('150')
        assert settings.cash_on_hand == Decimal('12000')
        assert list(settings.custom_expenses.values_list('name', flat=True)) == ['Insurance']

        task_log = TaskLog.objects.get()
        assert task_log.employee == employee
        assert task_log.client == Client.objects.get()
        assert task_log.status == 'in_progress'
        assert task_log.production_cost == Decimal('99.50')
        assert Client.objects.get().hours_logged == Decimal('12')

        tx = CashTransaction.objects.get()
        assert tx.direction == 'in'
        assert tx.counterparty == 'Dana Lee'

        assert 'skipped 1' in out.getvalue()

    def test_import_from_empty_cache(self):
        with patch('core.management.commands.import_firm_snapshot.get_snapshot_cache') as get_cache:
            get_cache.return_value.load.return_value = None
            with pytest.raises(CommandError):
                call_command('import_firm_snapshot', '--from-cache')

    def test_import_rejects_bad_files(self, tmp_path):
        path = tmp_path / 'broken.json'
        path.write_text('{', encoding='utf-8')

        with pytest.raises(CommandError):
            call_command('import_firm_snapshot', str(path))
        with pytest.raises(CommandError):
            call_command('import_firm_snapshot', str(tmp_path / 'missing.json'))
        with pytest.raises(CommandError):
            call_command('import_firm_snapshot')


# =============================================================================
# SNAPSHOT ENDPOINT FALLBACK
# =============================================================================

class TestSnapshotEndpoint:

    @pytest.mark.django_db
    def test_serves_the_store(self, client, financials):
        response = client.get('/snapshot/')
        body = response.json()

        assert response.status_code == 200
        assert body['source'] == 'store'
        assert set(body['data']) == set(CACHED_COLLECTIONS)

    def test_falls_back_to_the_cache(self, client):
        cached = {name: [] for name in CACHED_COLLECTIONS}
        with patch('core.views.get_repository') as get_repository, \
                patch('core.views.get_snapshot_cache') as get_cache:
            get_repository.return_value.snapshot.side_effect = DatabaseError("connection refused")
            get_cache.return_value.load.return_value = cached
            response = client.get('/snapshot/')

        assert response.status_code == 200
        assert response.json() == {'success': True, 'source': 'cache', 'data': cached}

    def test_no_store_and_no_cache(self, client):
        with patch('core.views.get_repository') as get_repository, \
                patch('core.views.get_snapshot_cache') as get_cache:
            get_repository.return_value.snapshot.side_effect = DatabaseError("connection refused")
            get_cache.return_value.load.return_value = None
            response = client.get('/snapshot/')

        assert response.status_code == 500
        assert response.json()['success'] is False
