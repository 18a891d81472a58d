"""Tests for the current-month metrics calculator."""

from __future__ import annotations

import pandas as pd
import pytest
from adaptive_budget import metrics

NOW = pd.Timestamp("2024-06-15")


def _txn(day: str, amount: float, category: tuple[str, ...] = ("Food and Drink",)) -> dict:
    return {"date": day, "amount": amount, "category": list(category), "account_id": "acc_1"}


def test_empty_snapshot_has_no_metrics() -> None:
    assert metrics.calculate_monthly_metrics([], NOW) is None
    assert metrics.calculate_monthly_metrics(pd.DataFrame(), NOW) is None


def test_income_expenses_and_savings_for_current_month() -> None:
    transactions = [
        _txn("2024-06-01", -600.0, ("Transfer", "Payroll")),
        _txn("2024-06-14", -400.0, ("Transfer", "Payroll")),
        _txn("2024-06-03", 250.0),
        _txn("2024-06-10", 350.0, ("Shopping",)),
        _txn("2024-06-11", 0.0),
        _txn("2024-05-30", 900.0),
        _txn("2023-06-12", 75.0),
    ]

    result = metrics.calculate_monthly_metrics(transactions, NOW)

    assert result == {
        "income": pytest.approx(1000.0),
        "expenses": pytest.approx(600.0),
        "savings": pytest.approx(400.0),
        "expense_percentage": pytest.approx(60.0),
        "savings_percentage": pytest.approx(40.0),
    }


def test_savings_never_negative() -> None:
    transactions = [_txn("2024-06-02", -100.0), _txn("2024-06-03", 300.0)]

    result = metrics.calculate_monthly_metrics(transactions, NOW)

    assert result is not None
    assert result["savings"] == 0.0
    assert result["savings_percentage"] == 0.0
    assert result["expense_percentage"] == pytest.approx(300.0)


def test_no_income_yields_zero_percentages() -> None:
    result = metrics.calculate_monthly_metrics([_txn("2024-06-02", 120.0)], NOW)

    assert result is not None
    assert result["income"] == 0.0
    assert result["expenses"] == pytest.approx(120.0)
    assert result["expense_percentage"] == 0.0
    assert result["savings_percentage"] == 0.0


def test_snapshot_without_current_month_activity_reports_zeros() -> None:
    result = metrics.calculate_monthly_metrics([_txn("2024-04-02", 120.0)], NOW)

    assert result == {
        "income": 0.0,
        "expenses": 0.0,
        "savings": 0.0,
        "expense_percentage": 0.0,
        "savings_percentage": 0.0,
    }


def test_input_frame_is_not_mutated() -> None:
    frame = pd.DataFrame([_txn("2024-06-02", 120.0), _txn("2024-06-03", -50.0)])
    columns_before = list(frame.columns)

    metrics.calculate_monthly_metrics(frame, NOW)

    assert list(frame.columns) == columns_before
    assert frame["date"].tolist() == ["2024-06-02", "2024-06-03"]


def test_missing_required_columns_raise() -> None:
    with pytest.raises(ValueError, match="amount"):
        metrics.calculate_monthly_metrics([{"date": "2024-06-01"}], NOW)
