from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


class DeferralType(str, Enum):
    CAPITALIZING = "capitalizing"
    INTEREST_ONLY = "interest-only"


class RiskLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


@dataclass(frozen=True)
class LoanParameters:
    """Raw loan inputs as entered by the user."""

    loan_amount: float
    annual_interest_rate_pct: float  # annual percentage, e.g., 4.5
    loan_term_years: int
    down_payment: float = 0.0
    deferral_months: int = 0
    deferral_type: DeferralType = DeferralType.CAPITALIZING
    monthly_insurance: float = 0.0

    @property
    def principal(self) -> float:
        return max(self.loan_amount - self.down_payment, 0.0)

    @property
    def total_loan_months(self) -> int:
        return int(self.loan_term_years) * 12


@dataclass(frozen=True)
class InvestmentParameters:
    """Assumptions for what happens to the borrowed money once invested."""

    expected_annual_return_pct: float = 7.0
    volatility_pct: float = 15.0  # standard deviation proxy
    inflation_rate_pct: float = 0.0
    additional_years_after_loan: int = 0
    analysis_years: Optional[int] = None  # overrides loan term + additional years

    @property
    def risk_level(self) -> RiskLevel:
        from .model import risk_level

        return risk_level(self.volatility_pct)


@dataclass(frozen=True)
class NormalizedParameters:
    """Clamped inputs plus every quantity derived from them."""

    loan: LoanParameters
    investment: InvestmentParameters
    principal: float
    monthly_rate: float
    total_loan_months: int
    deferral_months: int
    repayment_months: int
    analysis_years: int
    investment_monthly_rate: float
    inflation_monthly_rate: float

    @property
    def deferral_type(self) -> DeferralType:
        return self.loan.deferral_type

    @property
    def monthly_insurance(self) -> float:
        return self.loan.monthly_insurance

    @property
    def analysis_months(self) -> int:
        return self.analysis_years * 12


@dataclass
class AmortizationSummary:
    principal: float
    monthly_payment: float
    number_of_payments: int
    amortized_principal: float  # principal after any capitalized deferral interest
    deferral_interest: float = 0.0  # capitalized or paid during deferral
    total_interest: float = 0.0
    total_insurance: float = 0.0

    @property
    def total_borrowing_cost(self) -> float:
        return self.total_interest + self.total_insurance

    @property
    def total_cost(self) -> float:
        """Everything paid over the life of the loan, principal included."""
        return self.principal + self.total_borrowing_cost


@dataclass
class MonthlyPayment:
    month: int
    payment: float
    interest: float
    principal: float
    insurance: float
    balance: float
    is_deferral: bool = False


@dataclass
class YearlyRecord:
    year: int
    investment_value: float
    investment_value_real: float
    loan_balance: float
    total_paid: float
    total_paid_real: float
    total_borrowing_cost: float
    total_borrowing_cost_real: float
    is_loan_active: bool
    is_deferral_period: bool
    total_interest: float = 0.0  # borrowing cost without insurance
    total_interest_real: float = 0.0

    @property
    def net_position(self) -> float:
        return self.investment_value - self.total_paid

    @property
    def net_position_real(self) -> float:
        return self.investment_value_real - self.total_paid_real

    def interest_earned(self, principal: float, *, real: bool = False) -> float:
        value = self.investment_value_real if real else self.investment_value
        return value - principal


@dataclass
class ScenarioSeries:
    """Gross investment value per year (year 0 included) under three return rates."""

    best: List[float]
    expected: List[float]
    worst: List[float]
    best_rate_pct: float
    expected_rate_pct: float
    worst_rate_pct: float


@dataclass
class ProjectionResult:
    parameters: NormalizedParameters
    amortization: AmortizationSummary
    yearly: List[YearlyRecord]
    scenarios: ScenarioSeries
    break_even_year: Optional[int]
    break_even_year_real: Optional[int]
    return_break_even_year: Optional[int] = None
    return_break_even_year_real: Optional[int] = None

    @property
    def final_record(self) -> Optional[YearlyRecord]:
        return self.yearly[-1] if self.yearly else None

    @property
    def final_net_position(self) -> float:
        final = self.final_record
        return final.net_position if final else 0.0

    @property
    def risk_level(self) -> RiskLevel:
        return self.parameters.investment.risk_level

    @property
    def better_option(self) -> str:
        """Compare investing the loan against never borrowing at all."""
        final = self.final_record
        if final is None:
            return "tie"
        gain = final.interest_earned(self.parameters.principal)
        cost = final.total_borrowing_cost
        if gain > cost:
            return "investing"
        if cost > gain:
            return "not borrowing"
        return "tie"
