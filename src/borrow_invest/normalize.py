from __future__ import annotations

import math
from dataclasses import replace

from .logging import get_logger
from .schemas import (
    DeferralType,
    InvestmentParameters,
    LoanParameters,
    NormalizedParameters,
)

logger = get_logger(__name__)

MAX_LOAN_AMOUNT = 10_000_000
MAX_INTEREST_RATE_PCT = 20.0
MIN_LOAN_TERM_YEARS = 1
MAX_LOAN_TERM_YEARS = 40
MAX_MONTHLY_INSURANCE = 10_000
MAX_EXPECTED_RETURN_PCT = 30.0
MAX_VOLATILITY_PCT = 100.0
MAX_INFLATION_RATE_PCT = 20.0
MAX_ADDITIONAL_YEARS = 60
MAX_ANALYSIS_YEARS = 100


def normalize_parameters(
    loan: LoanParameters, investment: InvestmentParameters
) -> NormalizedParameters:
    """Clamp raw inputs into their valid ranges and derive the loop quantities."""
    loan_amount = _clamp("loan_amount", loan.loan_amount, 0.0, MAX_LOAN_AMOUNT)
    down_payment = _clamp("down_payment", loan.down_payment, 0.0, loan_amount)
    rate_pct = _clamp(
        "annual_interest_rate_pct",
        loan.annual_interest_rate_pct,
        0.0,
        MAX_INTEREST_RATE_PCT,
    )
    term_years = _clamp_whole(
        "loan_term_years", loan.loan_term_years, MIN_LOAN_TERM_YEARS, MAX_LOAN_TERM_YEARS
    )
    total_loan_months = term_years * 12
    # at least one repayment month must remain
    deferral_months = _clamp_whole(
        "deferral_months", loan.deferral_months, 0, total_loan_months - 1
    )
    insurance = _clamp(
        "monthly_insurance", loan.monthly_insurance, 0.0, MAX_MONTHLY_INSURANCE
    )

    expected_return = _clamp(
        "expected_annual_return_pct",
        investment.expected_annual_return_pct,
        0.0,
        MAX_EXPECTED_RETURN_PCT,
    )
    volatility = _clamp(
        "volatility_pct", investment.volatility_pct, 0.0, MAX_VOLATILITY_PCT
    )
    inflation = _clamp(
        "inflation_rate_pct",
        investment.inflation_rate_pct,
        0.0,
        MAX_INFLATION_RATE_PCT,
    )
    additional_years = _clamp_whole(
        "additional_years_after_loan",
        investment.additional_years_after_loan,
        0,
        MAX_ADDITIONAL_YEARS,
    )

    min_analysis_years = math.ceil(total_loan_months / 12)
    if investment.analysis_years is None:
        analysis_years = min_analysis_years + additional_years
    else:
        analysis_years = _clamp_whole(
            "analysis_years",
            investment.analysis_years,
            min_analysis_years,
            MAX_ANALYSIS_YEARS,
        )

    clamped_loan = replace(
        loan,
        loan_amount=loan_amount,
        down_payment=down_payment,
        annual_interest_rate_pct=rate_pct,
        loan_term_years=term_years,
        deferral_months=deferral_months,
        deferral_type=DeferralType(loan.deferral_type),
        monthly_insurance=insurance,
    )
    clamped_investment = replace(
        investment,
        expected_annual_return_pct=expected_return,
        volatility_pct=volatility,
        inflation_rate_pct=inflation,
        additional_years_after_loan=additional_years,
        analysis_years=analysis_years,
    )

    params = NormalizedParameters(
        loan=clamped_loan,
        investment=clamped_investment,
        principal=max(loan_amount - down_payment, 0.0),
        monthly_rate=annual_to_monthly_rate(rate_pct),
        total_loan_months=total_loan_months,
        deferral_months=deferral_months,
        repayment_months=max(total_loan_months - deferral_months, 1),
        analysis_years=analysis_years,
        investment_monthly_rate=annual_to_monthly_rate(expected_return),
        inflation_monthly_rate=annual_to_monthly_rate(inflation),
    )
    logger.debug(
        "Normalized parameters: principal=%.2f monthly_rate=%.6f months=%d "
        "deferral=%d horizon=%dy",
        params.principal,
        params.monthly_rate,
        params.total_loan_months,
        params.deferral_months,
        params.analysis_years,
    )
    return params


def annual_to_monthly_rate(annual_rate_pct: float) -> float:
    """Nominal monthly rate from an annual percentage; negative rates pass through."""
    return annual_rate_pct / 100.0 / 12.0


def _clamp(name: str, value: float, lower: float, upper: float) -> float:
    if value is None or math.isnan(value):
        logger.warning("%s is not a number; using %s", name, lower)
        return lower
    clamped = min(max(value, lower), upper)
    if clamped != value:
        logger.warning(
            "%s=%s out of range [%s, %s]; clamped to %s",
            name,
            value,
            lower,
            upper,
            clamped,
        )
    return clamped


def _clamp_whole(name: str, value: float, lower: int, upper: int) -> int:
    return int(math.floor(_clamp(name, value, lower, upper)))
