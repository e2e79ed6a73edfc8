"""Pytest configuration and shared fixtures."""

import logging

import pytest

from borrow_invest.normalize import normalize_parameters
from borrow_invest.schemas import InvestmentParameters, LoanParameters


@pytest.fixture
def baseline_loan():
    """200k loan, 40k down, 4.5% over 30 years."""
    return LoanParameters(
        loan_amount=200_000.0,
        down_payment=40_000.0,
        annual_interest_rate_pct=4.5,
        loan_term_years=30,
    )


@pytest.fixture
def baseline_investment():
    """7% expected return, 15% volatility, no inflation."""
    return InvestmentParameters(expected_annual_return_pct=7.0, volatility_pct=15.0)


@pytest.fixture
def baseline_params(baseline_loan, baseline_investment):
    return normalize_parameters(baseline_loan, baseline_investment)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """setup_logging replaces root handlers; put them back after each test."""
    root = logging.getLogger()
    package = logging.getLogger("borrow_invest")
    handlers, level, package_level = root.handlers[:], root.level, package.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
    package.setLevel(package_level)
