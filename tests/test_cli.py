"""Tests for the typer command line interface."""

import json

import pytest
from typer.testing import CliRunner

from borrow_invest.cli import app, format_currency

runner = CliRunner()


class TestFormatCurrency:
    def test_known_symbol(self):
        assert format_currency(1234567.891, "USD") == "$1,234,568"
        assert format_currency(810.7, "eur", 2) == "€810.70"

    def test_unknown_code_is_prefixed(self):
        assert format_currency(1500, "CHF") == "CHF 1,500"

    def test_negative_values(self):
        assert format_currency(-42.0, "GBP") == "-£42"


class TestRunCommand:
    """The projection summary."""

    def test_baseline_summary(self, monkeypatch):
        monkeypatch.delenv("BORROW_INVEST_CURRENCY", raising=False)
        result = runner.invoke(app, ["run"])

        assert result.exit_code == 0, result.output
        assert "Principal: $160,000" in result.output
        assert "Monthly payment: $810.70 x 360 payments" in result.output
        assert "Break-even: year 9" in result.output
        assert "Risk level: Medium" in result.output
        assert "Better outcome: investing" in result.output

    def test_currency_from_environment(self, monkeypatch):
        monkeypatch.setenv("BORROW_INVEST_CURRENCY", "gbp")
        result = runner.invoke(app, ["run"])

        assert result.exit_code == 0, result.output
        assert "Principal: £160,000" in result.output

    def test_deferral_is_reported(self):
        result = runner.invoke(
            app,
            ["run", "--deferral-months", "12", "--deferral-type", "interest-only"],
        )

        assert result.exit_code == 0, result.output
        assert "Deferral: 12 months (interest-only)" in result.output

    def test_share_prints_query_string(self):
        result = runner.invoke(app, ["run", "--share", "--loan-amount", "250000"])

        assert result.exit_code == 0, result.output
        assert "loanAmount=250000.0" in result.output

    def test_from_query_overrides_options(self):
        result = runner.invoke(
            app, ["run", "--from-query", "loanAmount=100000&downPayment=0"]
        )

        assert result.exit_code == 0, result.output
        assert "Principal: $100,000" in result.output

    def test_bad_query_is_a_usage_error(self):
        result = runner.invoke(app, ["run", "--from-query", "loanAmount=lots"])

        assert result.exit_code == 2

    def test_timeline_json(self):
        result = runner.invoke(app, ["run", "--show-timeline", "--share"])

        assert result.exit_code == 0, result.output
        payload = json.loads(result.output[result.output.index("[") :])
        assert len(payload) == 31
        assert payload[0]["year"] == 0
        assert payload[-1]["loan_balance"] == 0.0
        assert payload[5]["net_position"] == pytest.approx(
            payload[5]["investment_value"] - payload[5]["total_paid"]
        )


class TestScheduleCommand:
    """The monthly amortization table."""

    def test_json_rows(self):
        result = runner.invoke(app, ["schedule", "--loan-term", "5", "--json"])

        assert result.exit_code == 0, result.output
        rows = json.loads(result.output)
        assert len(rows) == 60
        assert rows[-1]["balance"] == 0.0

    def test_table_marks_deferral_months(self):
        result = runner.invoke(
            app, ["schedule", "--loan-term", "1", "--deferral-months", "2"]
        )

        assert result.exit_code == 0, result.output
        lines = result.output.strip().splitlines()
        assert lines[0].split()[0] == "month"
        assert len(lines) == 13
        assert lines[1].endswith("*")
        assert lines[2].endswith("*")
        assert not lines[3].endswith("*")
