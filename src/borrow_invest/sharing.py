"""Flat query-string form of a parameter set, for sharing a projection as a link."""

from __future__ import annotations

from dataclasses import replace
from typing import Callable, Dict, Mapping, Optional, Tuple
from urllib.parse import parse_qsl, urlencode

from .logging import get_logger
from .schemas import DeferralType, InvestmentParameters, LoanParameters

logger = get_logger(__name__)


def _whole(raw: str) -> int:
    return int(float(raw))


DEFAULT_LOAN = LoanParameters(
    loan_amount=200_000.0,
    down_payment=40_000.0,
    annual_interest_rate_pct=4.5,
    loan_term_years=30,
)
DEFAULT_INVESTMENT = InvestmentParameters(
    expected_annual_return_pct=7.0,
    volatility_pct=15.0,
)

# query key -> (attribute, parser)
LOAN_FIELDS: Dict[str, Tuple[str, Callable[[str], object]]] = {
    "loanAmount": ("loan_amount", float),
    "downPayment": ("down_payment", float),
    "interestRate": ("annual_interest_rate_pct", float),
    "loanTerm": ("loan_term_years", _whole),
    "deferralMonths": ("deferral_months", _whole),
    "deferralType": ("deferral_type", DeferralType),
    "monthlyInsurance": ("monthly_insurance", float),
}
INVESTMENT_FIELDS: Dict[str, Tuple[str, Callable[[str], object]]] = {
    "expectedReturn": ("expected_annual_return_pct", float),
    "volatility": ("volatility_pct", float),
    "inflationRate": ("inflation_rate_pct", float),
    "additionalYears": ("additional_years_after_loan", _whole),
    "analysisYears": ("analysis_years", _whole),
}


def to_query_params(
    loan: LoanParameters, investment: InvestmentParameters
) -> Dict[str, str]:
    params: Dict[str, str] = {}
    for key, (attr, _) in LOAN_FIELDS.items():
        params[key] = _stringify(getattr(loan, attr))
    for key, (attr, _) in INVESTMENT_FIELDS.items():
        value = getattr(investment, attr)
        if value is not None:
            params[key] = _stringify(value)
    return params


def to_query_string(loan: LoanParameters, investment: InvestmentParameters) -> str:
    return urlencode(to_query_params(loan, investment))


def from_query_params(
    params: Mapping[str, str],
    *,
    loan_defaults: Optional[LoanParameters] = None,
    investment_defaults: Optional[InvestmentParameters] = None,
) -> Tuple[LoanParameters, InvestmentParameters]:
    """Restore a parameter set; missing keys keep the defaults, unknown keys are ignored."""
    loan_updates = _parse_fields(params, LOAN_FIELDS)
    investment_updates = _parse_fields(params, INVESTMENT_FIELDS)

    unknown = set(params) - set(LOAN_FIELDS) - set(INVESTMENT_FIELDS)
    if unknown:
        logger.debug("Ignoring unknown query keys: %s", ", ".join(sorted(unknown)))

    loan = replace(loan_defaults or DEFAULT_LOAN, **loan_updates)
    investment = replace(investment_defaults or DEFAULT_INVESTMENT, **investment_updates)
    return loan, investment


def from_query_string(
    query: str,
    *,
    loan_defaults: Optional[LoanParameters] = None,
    investment_defaults: Optional[InvestmentParameters] = None,
) -> Tuple[LoanParameters, InvestmentParameters]:
    return from_query_params(
        dict(parse_qsl(query.lstrip("?"))),
        loan_defaults=loan_defaults,
        investment_defaults=investment_defaults,
    )


def _parse_fields(
    params: Mapping[str, str],
    fields: Mapping[str, Tuple[str, Callable[[str], object]]],
) -> Dict[str, object]:
    updates: Dict[str, object] = {}
    for key, (attr, parser) in fields.items():
        raw = params.get(key)
        if raw in (None, ""):
            continue
        try:
            updates[attr] = parser(raw)
        except (ValueError, OverflowError) as exc:
            raise ValueError(f"Could not parse query value {key}='{raw}'") from exc
    return updates


def _stringify(value: object) -> str:
    if isinstance(value, DeferralType):
        return value.value
    if isinstance(value, float):
        # repr is the shortest string that parses back to the same float
        return repr(value)
    return str(value)
