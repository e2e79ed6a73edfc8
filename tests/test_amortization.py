"""Tests for the amortization formula, deferral handling and the monthly schedule."""

from dataclasses import replace

import pytest

from borrow_invest.model import amortization_schedule, amortize, monthly_payment
from borrow_invest.normalize import normalize_parameters
from borrow_invest.schemas import DeferralType, InvestmentParameters


class TestMonthlyPayment:
    """Tests for the annuity formula."""

    def test_standard_mortgage_example(self):
        """160k at 4.5% over 360 payments should cost about 810.70 a month."""
        payment = monthly_payment(160_000, 0.045 / 12, 360)

        assert payment == pytest.approx(810.70, abs=0.01)

    def test_zero_rate_divides_principal_evenly(self):
        """Without interest the payment is principal / n exactly."""
        assert monthly_payment(120_000, 0.0, 120) == 120_000 / 120

    def test_zero_principal_costs_nothing(self):
        assert monthly_payment(0.0, 0.01, 360) == 0.0
        assert monthly_payment(-5.0, 0.01, 360) == 0.0

    def test_no_payments_returns_zero(self):
        assert monthly_payment(10_000, 0.01, 0) == 0.0

    def test_payment_retires_principal(self):
        """Discounting n payments at the loan rate gives back the principal."""
        rate = 0.005
        payment = monthly_payment(50_000, rate, 60)
        present_value = sum(payment / (1 + rate) ** k for k in range(1, 61))

        assert present_value == pytest.approx(50_000, rel=1e-9)


class TestAmortize:
    """Tests for the amortization summary."""

    def test_baseline_derivations(self, baseline_params):
        """Principal, monthly rate and payment count follow from the inputs."""
        summary = amortize(baseline_params)

        assert baseline_params.principal == 160_000
        assert baseline_params.monthly_rate == pytest.approx(0.00375)
        assert summary.number_of_payments == 360
        assert summary.monthly_payment == pytest.approx(810.70, abs=0.01)

    def test_totals_add_up(self, baseline_params):
        summary = amortize(baseline_params)

        assert summary.total_interest == pytest.approx(
            summary.monthly_payment * 360 - 160_000
        )
        assert summary.total_insurance == 0.0
        assert summary.total_borrowing_cost == summary.total_interest
        assert summary.total_cost == pytest.approx(summary.monthly_payment * 360)

    def test_insurance_is_charged_every_loan_month(self, baseline_loan):
        params = normalize_parameters(
            replace(baseline_loan, monthly_insurance=50.0), InvestmentParameters()
        )
        summary = amortize(params)

        assert summary.total_insurance == 50.0 * 360
        assert summary.total_borrowing_cost == pytest.approx(
            summary.total_interest + 18_000
        )

    def test_capitalizing_deferral_raises_payment(self, baseline_loan):
        """Capitalized interest grows the amortized base and the payment."""
        investment = InvestmentParameters()
        plain = amortize(normalize_parameters(baseline_loan, investment))
        deferred = amortize(
            normalize_parameters(replace(baseline_loan, deferral_months=12), investment)
        )

        assert deferred.amortized_principal > plain.amortized_principal
        assert deferred.amortized_principal == pytest.approx(
            160_000 * (1 + 0.00375) ** 12
        )
        assert deferred.monthly_payment > plain.monthly_payment
        assert deferred.number_of_payments == 348

    def test_capitalizing_deferral_beats_same_term_without_deferral(self, baseline_loan):
        """Same repayment count, bigger base: the payment is strictly larger."""
        params = normalize_parameters(
            replace(baseline_loan, deferral_months=12), InvestmentParameters()
        )
        summary = amortize(params)
        undeferred = monthly_payment(160_000, params.monthly_rate, 348)

        assert summary.monthly_payment > undeferred

    def test_interest_only_deferral_keeps_principal(self, baseline_loan):
        params = normalize_parameters(
            replace(
                baseline_loan,
                deferral_months=12,
                deferral_type=DeferralType.INTEREST_ONLY,
            ),
            InvestmentParameters(),
        )
        summary = amortize(params)

        assert summary.amortized_principal == 160_000
        assert summary.deferral_interest == pytest.approx(160_000 * 0.00375 * 12)
        assert summary.monthly_payment == pytest.approx(
            monthly_payment(160_000, params.monthly_rate, 348)
        )
        assert summary.total_interest == pytest.approx(
            summary.monthly_payment * 348 - 160_000 + summary.deferral_interest
        )

    def test_zero_principal(self, baseline_loan):
        params = normalize_parameters(
            replace(baseline_loan, down_payment=200_000.0), InvestmentParameters()
        )
        summary = amortize(params)

        assert summary.monthly_payment == 0.0
        assert summary.total_interest == 0.0


class TestAmortizationSchedule:
    """Tests for the month-by-month loan table."""

    def test_one_row_per_loan_month(self, baseline_params):
        rows = amortization_schedule(baseline_params)

        assert len(rows) == 360
        assert rows[0].month == 1
        assert rows[-1].month == 360

    def test_balance_reaches_zero_and_never_rises(self, baseline_params):
        rows = amortization_schedule(baseline_params)
        balances = [row.balance for row in rows]

        assert all(later <= earlier for earlier, later in zip(balances, balances[1:]))
        assert balances[-1] == 0.0

    def test_payment_splits_into_interest_and_principal(self, baseline_params):
        first = amortization_schedule(baseline_params)[0]

        assert first.interest == pytest.approx(160_000 * 0.00375)
        assert first.interest + first.principal == pytest.approx(first.payment)
        assert first.balance == pytest.approx(160_000 - first.principal)

    def test_deferral_rows_are_flagged(self, baseline_loan):
        params = normalize_parameters(
            replace(baseline_loan, deferral_months=6), InvestmentParameters()
        )
        rows = amortization_schedule(params)

        assert all(row.is_deferral for row in rows[:6])
        assert not any(row.is_deferral for row in rows[6:])
        assert all(row.payment == 0.0 for row in rows[:6])
        assert rows[5].balance > 160_000

    def test_interest_only_rows_pay_interest(self, baseline_loan):
        params = normalize_parameters(
            replace(
                baseline_loan,
                deferral_months=3,
                deferral_type=DeferralType.INTEREST_ONLY,
            ),
            InvestmentParameters(),
        )
        rows = amortization_schedule(params)

        for row in rows[:3]:
            assert row.payment == row.interest
            assert row.balance == 160_000
