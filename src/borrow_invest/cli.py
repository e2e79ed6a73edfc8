from __future__ import annotations

import json
from dataclasses import asdict
from typing import Optional, Tuple

import typer

from .config import Settings
from .logging import setup_logging
from .model import amortization_schedule, project
from .normalize import normalize_parameters
from .schemas import DeferralType, InvestmentParameters, LoanParameters
from .sharing import from_query_string, to_query_string

app = typer.Typer(help="Project what happens when you borrow money and invest it.")

CURRENCY_SYMBOLS = {"USD": "$", "EUR": "€", "GBP": "£", "JPY": "¥", "INR": "₹"}


def _default_currency() -> str:
    return Settings.from_env().currency


def format_currency(value: float, currency: str, decimals: int = 0) -> str:
    symbol = CURRENCY_SYMBOLS.get(currency.upper())
    sign = "-" if value < 0 else ""
    amount = f"{abs(value):,.{decimals}f}"
    if symbol is None:
        return f"{sign}{currency.upper()} {amount}"
    return f"{sign}{symbol}{amount}"


def _format_year(year: Optional[int]) -> str:
    return "never" if year is None else f"year {year}"


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None, help="Log level (env BORROW_INVEST_LOG_LEVEL if omitted)."
    ),
) -> None:
    settings = Settings.from_env()
    setup_logging(log_level or settings.log_level, settings.log_format)


def _build_parameters(
    from_query: Optional[str],
    loan: LoanParameters,
    investment: InvestmentParameters,
) -> Tuple[LoanParameters, InvestmentParameters]:
    if not from_query:
        return loan, investment
    try:
        return from_query_string(
            from_query, loan_defaults=loan, investment_defaults=investment
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--from-query") from exc


@app.command()
def run(
    loan_amount: float = typer.Option(200_000.0, help="Amount borrowed."),
    down_payment: float = typer.Option(40_000.0, help="Part of the loan paid upfront."),
    interest_rate: float = typer.Option(4.5, help="Annual interest rate in percent."),
    loan_term: int = typer.Option(30, help="Loan term in years."),
    deferral_months: int = typer.Option(0, help="Grace period before repayment starts."),
    deferral_type: DeferralType = typer.Option(
        DeferralType.CAPITALIZING, help="How interest is handled during deferral."
    ),
    monthly_insurance: float = typer.Option(0.0, help="Insurance paid every loan month."),
    expected_return: float = typer.Option(7.0, help="Expected annual return in percent."),
    volatility: float = typer.Option(15.0, help="Return volatility in percent."),
    inflation_rate: float = typer.Option(0.0, help="Annual inflation in percent."),
    additional_years: int = typer.Option(
        0, help="Years to keep projecting after the loan is repaid."
    ),
    from_query: Optional[str] = typer.Option(
        None, help="Restore parameters from a shared query string."
    ),
    currency: str = typer.Option(
        default_factory=_default_currency,
        help="ISO currency code for display (env BORROW_INVEST_CURRENCY if omitted).",
    ),
    share: bool = typer.Option(False, help="Print a query string for these parameters."),
    show_timeline: bool = typer.Option(
        False, help="If set, dump the yearly records as JSON."
    ),
) -> None:
    """
    Borrow the principal, invest it in full, and compare gains with the loan's cost.
    """
    loan, investment = _build_parameters(
        from_query,
        LoanParameters(
            loan_amount=loan_amount,
            down_payment=down_payment,
            annual_interest_rate_pct=interest_rate,
            loan_term_years=loan_term,
            deferral_months=deferral_months,
            deferral_type=deferral_type,
            monthly_insurance=monthly_insurance,
        ),
        InvestmentParameters(
            expected_annual_return_pct=expected_return,
            volatility_pct=volatility,
            inflation_rate_pct=inflation_rate,
            additional_years_after_loan=additional_years,
        ),
    )
    result = project(loan, investment)
    params = result.parameters
    amortization = result.amortization
    final = result.final_record

    def money(value: float, decimals: int = 0) -> str:
        return format_currency(value, currency, decimals)

    typer.echo(f"Principal: {money(params.principal)}")
    typer.echo(
        f"Monthly payment: {money(amortization.monthly_payment, 2)} "
        f"x {amortization.number_of_payments} payments"
    )
    if params.deferral_months:
        typer.echo(
            f"Deferral: {params.deferral_months} months ({params.deferral_type.value}), "
            f"interest {money(amortization.deferral_interest)}"
        )
    typer.echo(f"Total interest: {money(amortization.total_interest)}")
    typer.echo(f"Total insurance: {money(amortization.total_insurance)}")
    typer.echo(f"Total cost of loan: {money(amortization.total_cost)}")
    typer.echo("")
    typer.echo(f"Horizon: {params.analysis_years} years")
    typer.echo(
        f"Investment value: {money(final.investment_value)} "
        f"(real {money(final.investment_value_real)})"
    )
    typer.echo(
        f"Net position: {money(final.net_position)} "
        f"(real {money(final.net_position_real)})"
    )
    typer.echo(
        f"Break-even: {_format_year(result.break_even_year)} "
        f"(real {_format_year(result.break_even_year_real)})"
    )
    typer.echo(
        f"Return break-even: {_format_year(result.return_break_even_year)} "
        f"(real {_format_year(result.return_break_even_year_real)})"
    )
    scenarios = result.scenarios
    typer.echo(
        f"Scenarios: best {money(scenarios.best[-1])} ({scenarios.best_rate_pct:g}%), "
        f"expected {money(scenarios.expected[-1])} ({scenarios.expected_rate_pct:g}%), "
        f"worst {money(scenarios.worst[-1])} ({scenarios.worst_rate_pct:g}%)"
    )
    typer.echo(f"Risk level: {result.risk_level.value}")
    typer.echo(f"Better outcome: {result.better_option}")

    if share:
        typer.echo("")
        typer.echo(to_query_string(loan, investment))

    if show_timeline:
        payload = [
            {
                **asdict(record),
                "net_position": record.net_position,
                "net_position_real": record.net_position_real,
            }
            for record in result.yearly
        ]
        typer.echo(json.dumps(payload, indent=2))


@app.command()
def schedule(
    loan_amount: float = typer.Option(200_000.0, help="Amount borrowed."),
    down_payment: float = typer.Option(40_000.0, help="Part of the loan paid upfront."),
    interest_rate: float = typer.Option(4.5, help="Annual interest rate in percent."),
    loan_term: int = typer.Option(30, help="Loan term in years."),
    deferral_months: int = typer.Option(0, help="Grace period before repayment starts."),
    deferral_type: DeferralType = typer.Option(
        DeferralType.CAPITALIZING, help="How interest is handled during deferral."
    ),
    monthly_insurance: float = typer.Option(0.0, help="Insurance paid every loan month."),
    as_json: bool = typer.Option(False, "--json", help="Dump the rows as JSON."),
) -> None:
    """
    Print the month-by-month amortization table.
    """
    loan = LoanParameters(
        loan_amount=loan_amount,
        down_payment=down_payment,
        annual_interest_rate_pct=interest_rate,
        loan_term_years=loan_term,
        deferral_months=deferral_months,
        deferral_type=deferral_type,
        monthly_insurance=monthly_insurance,
    )
    rows = amortization_schedule(normalize_parameters(loan, InvestmentParameters()))

    if as_json:
        typer.echo(json.dumps([asdict(row) for row in rows], indent=2))
        return

    typer.echo(
        f"{'month':>5} {'payment':>12} {'interest':>12} {'principal':>12} "
        f"{'insurance':>10} {'balance':>14}"
    )
    for row in rows:
        marker = "*" if row.is_deferral else " "
        typer.echo(
            f"{row.month:>5} {row.payment:>12,.2f} {row.interest:>12,.2f} "
            f"{row.principal:>12,.2f} {row.insurance:>10,.2f} {row.balance:>14,.2f}{marker}"
        )


if __name__ == "__main__":
    app()
