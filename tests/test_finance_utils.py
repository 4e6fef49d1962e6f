"""Overhead apportionment, burn, runway, week windows, P&L, routing and cashbox folding."""

from datetime import date, datetime, time
from decimal import Decimal
from types import SimpleNamespace

import pytest
from django.utils import timezone

from finance.utils import (
    FIXED_EXPENSE_FIELDS, EXPENSE_ROUTING_TABLE, BURN_STATUS_HEALTHY, BURN_STATUS_RISK,
    calculate_monthly_total, calculate_hourly_overhead, calculate_daily_fixed_overhead,
    calculate_daily_burn_metrics, calculate_cash_runway_days, format_runway,
    assess_burn_health, route_expense_name, get_fiscal_week_range, get_calendar_week_range,
    anchor_to_noon, is_within_window, calculate_efficiency_ratio,
    calculate_weekly_profit_and_loss, derive_cashbox_balance, summarize_cashbox,
    validate_expense_data, validate_cash_transaction_data
)


def staff(*daily_hours):
    return [
        SimpleNamespace(id=i, name=f"Staff {i}", role='', hourly_cost=30, salary=None, daily_hours=hours)
        for i, hours in enumerate(daily_hours, start=1)
    ]


def log(day, employee_id=1, hours=1, labor_cost=0, production_cost=0):
    return SimpleNamespace(
        employee_id=employee_id, date=day, hours=Decimal(str(hours)),
        labor_cost=Decimal(str(labor_cost)), production_cost=Decimal(str(production_cost))
    )


class TestOverheadApportionment:

    def test_monthly_total_sums_line_items_and_custom_expenses(self):
        financials = SimpleNamespace(monthly_lease=3000, case_management=150, phone=None)
        custom = [SimpleNamespace(amount=200), SimpleNamespace(amount=50)]
        assert calculate_monthly_total(financials, custom) == Decimal('3400')

    def test_every_line_item_counts(self):
        financials = SimpleNamespace(**{field: 1 for field in FIXED_EXPENSE_FIELDS})
        assert calculate_monthly_total(financials) == Decimal(len(FIXED_EXPENSE_FIELDS))

    def test_hourly_overhead_spreads_over_staff_hours(self):
        overhead = calculate_hourly_overhead(Decimal('4000'), staff(8, 4))
        assert float(overhead) == pytest.approx(16.6667, rel=1e-4)

    def test_hourly_overhead_without_staff_assumes_160_hours(self):
        assert calculate_hourly_overhead(Decimal('4000'), []) == Decimal('25')

    def test_daily_fixed_overhead_ignores_staff(self):
        monthly_total = Decimal('4000')
        before = calculate_daily_fixed_overhead(monthly_total)

        hourly_small_team = calculate_hourly_overhead(monthly_total, staff(8))
        hourly_large_team = calculate_hourly_overhead(monthly_total, staff(8, 8, 8, 4))

        assert before == calculate_daily_fixed_overhead(monthly_total) == Decimal('200')
        assert hourly_small_team != hourly_large_team


class TestDailyBurn:

    def test_only_todays_logs_count(self, monday):
        logs = [
            log(monday, hours=4, labor_cost=120),
            log(monday, hours=2, labor_cost=60),
            log(date(2024, 1, 5), hours=8, labor_cost=240),
        ]
        burn = calculate_daily_burn_metrics(logs, Decimal('4000'), today=monday)

        assert burn['daily_payroll'] == Decimal('180')
        assert burn['total_daily_hours'] == Decimal('6')
        assert burn['daily_fixed_overhead'] == Decimal('200')
        assert burn['total_daily_burn'] == Decimal('380')
        assert float(burn['hourly_burn_rate']) == pytest.approx(63.3333, rel=1e-4)

    @pytest.mark.parametrize('monthly_total', [0, 4000, 100000])
    def test_hourly_burn_rate_is_none_without_hours(self, monday, monthly_total):
        burn = calculate_daily_burn_metrics([], Decimal(monthly_total), today=monday)
        assert burn['hourly_burn_rate'] is None

    def test_runway_floors_whole_days(self):
        assert calculate_cash_runway_days(Decimal('1000'), Decimal('300')) == 3

    def test_runway_is_unbounded_without_burn(self):
        assert calculate_cash_runway_days(Decimal('1000'), Decimal('0')) is None
        assert format_runway(None) == '∞'

    def test_negative_cash_has_no_runway(self):
        assert calculate_cash_runway_days(Decimal('-50'), Decimal('300')) == 0
        assert format_runway(0) == '0 Days'


class TestBurnHealth:

    def test_overhead_heavy_burn_is_flagged(self):
        health = assess_burn_health({'daily_payroll': Decimal('100'), 'total_daily_burn': Decimal('300')})
        assert health['overhead_duplication_risk'] is True
        assert health['status'] == BURN_STATUS_RISK
        assert float(health['health_ratio']) == pytest.approx(33.333, rel=1e-3)

    def test_payroll_heavy_burn_is_healthy(self):
        health = assess_burn_health({'daily_payroll': Decimal('200'), 'total_daily_burn': Decimal('300')})
        assert health['overhead_duplication_risk'] is False
        assert health['status'] == BURN_STATUS_HEALTHY

    def test_no_payroll_is_not_a_risk(self):
        health = assess_burn_health({'daily_payroll': Decimal('0'), 'total_daily_burn': Decimal('200')})
        assert health['overhead_duplication_risk'] is False
        assert health['health_ratio'] == Decimal('0')


class TestExpenseRouting:

    @pytest.mark.parametrize('name, field', [
        ('Rent', 'monthly_lease'),
        ('  RENT ', 'monthly_lease'),
        ('Clio', 'case_management'),
        ('Frontier', 'wifi'),
        ('Kirbo', 'printer'),
        ('stamps', 'postage'),
        ('Filing Fees', 'efile'),
        ('Meals', 'staff_lunch'),
    ])
    def test_synonyms_route_to_named_fields(self, name, field):
        assert route_expense_name(name) == field

    def test_unknown_names_stay_custom(self):
        assert route_expense_name('Insurance') is None

    def test_every_route_targets_a_line_item(self):
        assert set(EXPENSE_ROUTING_TABLE.values()) <= set(FIXED_EXPENSE_FIELDS)

    def test_validation_reports_the_routed_field(self):
        result = validate_expense_data({'name': 'Rent', 'amount': '1200'})
        assert result['valid'] is True
        assert result['routed_field'] == 'monthly_lease'

    def test_negative_expense_rejected(self):
        assert validate_expense_data({'name': 'Insurance', 'amount': '-5'})['valid'] is False


class TestWeekWindows:

    def test_fiscal_week_runs_wednesday_to_tuesday(self, monday):
        start, end = get_fiscal_week_range(monday)
        assert timezone.localtime(start).date() == date(2024, 1, 3)
        assert timezone.localtime(start).time() == time.min
        assert timezone.localtime(end).date() == date(2024, 1, 9)
        assert timezone.localtime(end).time() == time.max

    def test_wednesday_starts_its_own_fiscal_week(self):
        start, _ = get_fiscal_week_range(date(2024, 1, 10))
        assert timezone.localtime(start).date() == date(2024, 1, 10)

    def test_calendar_week_runs_monday_to_sunday(self):
        start, end = get_calendar_week_range(date(2024, 1, 14))
        assert timezone.localtime(start).date() == date(2024, 1, 8)
        assert timezone.localtime(end).date() == date(2024, 1, 14)

    def test_bare_dates_anchor_at_noon(self):
        anchored = anchor_to_noon(date(2024, 1, 9))
        assert anchored.hour == 12
        assert timezone.is_aware(anchored)

    def test_window_edges_are_inclusive(self, monday):
        start, end = get_fiscal_week_range(monday)
        assert is_within_window(date(2024, 1, 3), start, end)
        assert is_within_window(date(2024, 1, 9), start, end)
        assert not is_within_window(date(2024, 1, 10), start, end)
        assert not is_within_window(None, start, end)

    def test_aware_datetimes_are_compared_in_local_time(self, monday):
        start, end = get_fiscal_week_range(monday)
        inside = timezone.make_aware(datetime(2024, 1, 9, 23, 0))
        assert is_within_window(inside, start, end)


class TestWeeklyProfitAndLoss:

    def test_week_totals(self, monday):
        start, end = get_fiscal_week_range(monday)
        employees = staff(8, 8)
        logs = [
            log(date(2024, 1, 4), employee_id=1, hours=2, labor_cost=60, production_cost=80),
            log(date(2024, 1, 8), employee_id=2, hours=3, labor_cost=90, production_cost=120),
            log(date(2024, 1, 10), employee_id=1, hours=8, labor_cost=240, production_cost=320),
        ]
        income = [
            SimpleNamespace(date=date(2024, 1, 5), amount=Decimal('1000')),
            SimpleNamespace(date=date(2024, 1, 2), amount=Decimal('500')),
        ]

        pnl = calculate_weekly_profit_and_loss(logs, income, employees, Decimal('200'), start, end)

        assert pnl['income'] == Decimal('1000')
        assert pnl['income_count'] == 1
        assert pnl['labor_cost'] == Decimal('150')
        assert pnl['production_cost'] == Decimal('200')
        assert pnl['fixed_overhead'] == Decimal('1400')
        assert pnl['expenses'] == Decimal('1550')
        assert pnl['net'] == Decimal('-550')
        assert pnl['is_profitable'] is False
        assert [driver['employee_id'] for driver in pnl['cost_drivers']] == ['2', '1']

    def test_efficiency_ratio_guards_tiny_expenses(self):
        assert calculate_efficiency_ratio(Decimal('500'), Decimal('0')) == Decimal('500')
        assert calculate_efficiency_ratio(Decimal('500'), Decimal('250')) == Decimal('2')

    def test_break_even_week_is_not_profitable(self, monday):
        start, end = get_fiscal_week_range(monday)
        income = [SimpleNamespace(date=date(2024, 1, 4), amount=Decimal('1400'))]
        pnl = calculate_weekly_profit_and_loss([], income, [], Decimal('200'), start, end)
        assert pnl['net'] == Decimal('0')
        assert pnl['is_profitable'] is False


class TestCashboxFolding:

    def tx(self, direction, amount, payment_method='cash'):
        return SimpleNamespace(direction=direction, amount=Decimal(amount), payment_method=payment_method)

    def test_balance_is_order_independent(self):
        deposit, withdrawal = self.tx('in', '100'), self.tx('out', '40')
        assert derive_cashbox_balance([deposit, withdrawal]) == Decimal('60')
        assert derive_cashbox_balance([withdrawal, deposit]) == Decimal('60')

    def test_opening_balance(self):
        assert derive_cashbox_balance([self.tx('out', '40')], Decimal('100')) == Decimal('60')

    def test_totals_split_cash_and_checks(self):
        summary = summarize_cashbox([
            self.tx('in', '100'),
            self.tx('in', '250', payment_method='check'),
            self.tx('out', '40'),
        ])
        assert summary == {
            'cash_in': Decimal('100'),
            'check_in': Decimal('250'),
            'total_in': Decimal('350'),
            'total_out': Decimal('40'),
            'net': Decimal('310'),
            'count': 3,
        }

    def test_category_must_match_direction(self):
        result = validate_cash_transaction_data(
            {'direction': 'in', 'amount': 10, 'category': 'Supplies', 'description': 'x'},
            ('Initial', 'Client Payment', 'Other'),
            ('Supplies', 'Other'),
        )
        assert result['valid'] is False
