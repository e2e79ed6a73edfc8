from __future__ import annotations

from typing import Iterator, List, Optional

from .logging import get_logger
from .normalize import annual_to_monthly_rate, normalize_parameters
from .schemas import (
    AmortizationSummary,
    DeferralType,
    InvestmentParameters,
    LoanParameters,
    MonthlyPayment,
    NormalizedParameters,
    ProjectionResult,
    RiskLevel,
    ScenarioSeries,
    YearlyRecord,
)

logger = get_logger(__name__)

# worst-case returns may go negative but never below a total loss
MIN_SCENARIO_RATE_PCT = -100.0

LOW_RISK_BELOW_PCT = 10.0
MEDIUM_RISK_BELOW_PCT = 20.0


def project(
    loan: LoanParameters,
    investment: Optional[InvestmentParameters] = None,
) -> ProjectionResult:
    """Run the full borrow-and-invest projection for one parameter set."""
    investment = investment or InvestmentParameters()
    params = normalize_parameters(loan, investment)

    amortization = amortize(params)
    yearly = project_yearly(params, amortization)
    scenarios = generate_scenarios(params)
    final = yearly[-1]

    result = ProjectionResult(
        parameters=params,
        amortization=amortization,
        yearly=yearly,
        scenarios=scenarios,
        break_even_year=find_gains_break_even(
            yearly, params.principal, amortization.total_borrowing_cost
        ),
        break_even_year_real=find_gains_break_even(
            yearly, params.principal, final.total_borrowing_cost_real, real=True
        ),
        return_break_even_year=find_return_break_even(
            yearly, amortization.total_interest
        ),
        return_break_even_year_real=find_return_break_even(
            yearly, final.total_interest_real, real=True
        ),
    )
    logger.debug(
        "Projection done: payment=%.2f years=%d break_even=%s real_break_even=%s",
        amortization.monthly_payment,
        params.analysis_years,
        result.break_even_year,
        result.break_even_year_real,
    )
    return result


# ─── Amortization ─────────────────────────────────────────────────────


def monthly_payment(
    principal: float, monthly_rate: float, number_of_payments: int
) -> float:
    if principal <= 0 or number_of_payments < 1:
        return 0.0
    if monthly_rate == 0:
        return principal / number_of_payments
    growth = (1 + monthly_rate) ** number_of_payments
    return principal * monthly_rate * growth / (growth - 1)


def amortize(params: NormalizedParameters) -> AmortizationSummary:
    """Fixed payment and lifetime totals, accounting for any deferral period.

    A capitalizing deferral grows the amortized principal by one month of
    interest per deferral month. An interest-only deferral leaves the principal
    alone and charges ``principal * rate`` in cash for each deferral month.
    """
    principal = params.principal
    rate = params.monthly_rate
    number_of_payments = params.repayment_months

    amortized_principal = principal
    deferral_interest = 0.0
    if principal > 0 and params.deferral_months > 0:
        if params.deferral_type is DeferralType.CAPITALIZING:
            amortized_principal = principal * (1 + rate) ** params.deferral_months
            deferral_interest = amortized_principal - principal
        else:
            deferral_interest = principal * rate * params.deferral_months

    payment = monthly_payment(amortized_principal, rate, number_of_payments)
    total_interest = 0.0
    if principal > 0 and rate > 0:
        # capitalized interest is repaid inside the payments, paid interest is not
        total_interest = payment * number_of_payments - principal
        if params.deferral_type is DeferralType.INTEREST_ONLY:
            total_interest += deferral_interest

    return AmortizationSummary(
        principal=principal,
        monthly_payment=payment,
        number_of_payments=number_of_payments,
        amortized_principal=amortized_principal,
        deferral_interest=deferral_interest,
        total_interest=total_interest,
        total_insurance=params.monthly_insurance * params.total_loan_months,
    )


def amortization_schedule(
    params: NormalizedParameters,
    amortization: Optional[AmortizationSummary] = None,
) -> List[MonthlyPayment]:
    return list(_iter_loan_months(params, amortization or amortize(params)))


def _iter_loan_months(
    params: NormalizedParameters, amortization: AmortizationSummary
) -> Iterator[MonthlyPayment]:
    balance = params.principal
    rate = params.monthly_rate
    insurance = params.monthly_insurance

    for month in range(1, params.total_loan_months + 1):
        interest = balance * rate
        if month <= params.deferral_months:
            if params.deferral_type is DeferralType.CAPITALIZING:
                balance += interest
                payment = 0.0
            else:
                payment = interest
            yield MonthlyPayment(
                month=month,
                payment=payment,
                interest=interest,
                principal=0.0,
                insurance=insurance,
                balance=balance,
                is_deferral=True,
            )
            continue

        payment = amortization.monthly_payment
        principal_payment = min(max(payment - interest, 0.0), balance)
        balance = max(balance - principal_payment, 0.0)
        if month == params.total_loan_months:
            balance = 0.0
        yield MonthlyPayment(
            month=month,
            payment=payment,
            interest=interest,
            principal=principal_payment,
            insurance=insurance,
            balance=balance,
        )


# ─── Yearly projection ────────────────────────────────────────────────


def project_yearly(
    params: NormalizedParameters,
    amortization: Optional[AmortizationSummary] = None,
) -> List[YearlyRecord]:
    """Simulate month by month and snapshot running totals at each year end.

    The borrowed principal is invested in full at origination. Capitalized
    deferral interest counts towards borrowing cost but not towards cash paid.
    Real totals accumulate each month's cash flow deflated by the inflation
    factor of that month.
    """
    amortization = amortization or amortize(params)
    loan_months = _iter_loan_months(params, amortization)

    investment = params.principal
    balance = params.principal
    inflation_factor = 1.0
    total_paid = total_paid_real = 0.0
    borrowing_cost = borrowing_cost_real = 0.0
    interest = interest_real = 0.0

    records: List[YearlyRecord] = [
        YearlyRecord(
            year=0,
            investment_value=investment,
            investment_value_real=investment,
            loan_balance=balance,
            total_paid=0.0,
            total_paid_real=0.0,
            total_borrowing_cost=0.0,
            total_borrowing_cost_real=0.0,
            is_loan_active=True,
            is_deferral_period=params.deferral_months > 0,
        )
    ]

    for month in range(1, params.analysis_months + 1):
        investment *= 1 + params.investment_monthly_rate
        inflation_factor *= 1 + params.inflation_monthly_rate

        if month <= params.total_loan_months:
            row = next(loan_months)
            cash = row.payment + row.insurance
            total_paid += cash
            total_paid_real += cash / inflation_factor
            borrowing_cost += row.interest + row.insurance
            borrowing_cost_real += (row.interest + row.insurance) / inflation_factor
            interest += row.interest
            interest_real += row.interest / inflation_factor
            balance = row.balance

        if month % 12 == 0:
            first_month_of_year = month - 11
            records.append(
                YearlyRecord(
                    year=month // 12,
                    investment_value=investment,
                    investment_value_real=investment / inflation_factor,
                    loan_balance=balance,
                    total_paid=total_paid,
                    total_paid_real=total_paid_real,
                    total_borrowing_cost=borrowing_cost,
                    total_borrowing_cost_real=borrowing_cost_real,
                    total_interest=interest,
                    total_interest_real=interest_real,
                    is_loan_active=first_month_of_year <= params.total_loan_months,
                    is_deferral_period=first_month_of_year <= params.deferral_months,
                )
            )

    return records


# ─── Scenarios ────────────────────────────────────────────────────────


def scenario_series(
    initial: float,
    annual_rate_pct: float,
    years: int,
    monthly_contribution: float = 0.0,
) -> List[float]:
    """Gross investment value at each year end (year 0 first) at a fixed rate."""
    monthly_rate = annual_to_monthly_rate(max(annual_rate_pct, MIN_SCENARIO_RATE_PCT))
    value = initial
    series = [value]
    for month in range(1, years * 12 + 1):
        value = value * (1 + monthly_rate) + monthly_contribution
        if month % 12 == 0:
            series.append(value)
    return series


def generate_scenarios(params: NormalizedParameters) -> ScenarioSeries:
    expected_rate = params.investment.expected_annual_return_pct
    volatility = params.investment.volatility_pct
    best_rate = expected_rate + volatility
    worst_rate = max(expected_rate - volatility, MIN_SCENARIO_RATE_PCT)

    return ScenarioSeries(
        best=scenario_series(params.principal, best_rate, params.analysis_years),
        expected=scenario_series(params.principal, expected_rate, params.analysis_years),
        worst=scenario_series(params.principal, worst_rate, params.analysis_years),
        best_rate_pct=best_rate,
        expected_rate_pct=expected_rate,
        worst_rate_pct=worst_rate,
    )


# ─── Break-even ───────────────────────────────────────────────────────


def find_gains_break_even(
    yearly: List[YearlyRecord],
    principal: float,
    total_borrowing_cost: float,
    *,
    real: bool = False,
) -> Optional[int]:
    """First year whose investment gains cover the lifetime cost of borrowing."""
    for record in yearly:
        if record.interest_earned(principal, real=real) >= total_borrowing_cost:
            return record.year
    return None


def find_return_break_even(
    yearly: List[YearlyRecord],
    total_interest: float,
    *,
    real: bool = False,
) -> Optional[int]:
    """First year whose investment value net of cash paid covers total interest."""
    for record in yearly:
        net = record.net_position_real if real else record.net_position
        if net >= total_interest:
            return record.year
    return None


def risk_level(volatility_pct: float) -> RiskLevel:
    if volatility_pct < LOW_RISK_BELOW_PCT:
        return RiskLevel.LOW
    if volatility_pct < MEDIUM_RISK_BELOW_PCT:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH
