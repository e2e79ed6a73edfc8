"""
Borrow vs. invest projection engine.

This package amortizes a loan (with optional deferral and insurance), invests
the borrowed principal, and projects year by year whether investment gains
outrun the cost of borrowing, in nominal and inflation-adjusted terms.
"""

from .schemas import (
    AmortizationSummary,
    DeferralType,
    InvestmentParameters,
    LoanParameters,
    ProjectionResult,
    RiskLevel,
    ScenarioSeries,
    YearlyRecord,
)
from .model import project

__all__ = [
    "AmortizationSummary",
    "DeferralType",
    "InvestmentParameters",
    "LoanParameters",
    "ProjectionResult",
    "RiskLevel",
    "ScenarioSeries",
    "YearlyRecord",
    "project",
]
