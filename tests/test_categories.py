"""Tests for per-category aggregates and adaptive budgets."""

from __future__ import annotations

import pandas as pd
import pytest
from adaptive_budget import categories, utils

NOW = pd.Timestamp("2024-06-15")


def _txn(day: str, amount: float, category=("Food and Drink",)) -> dict:
    return {"date": day, "amount": amount, "category": category, "account_id": "acc_1"}


def _by_name(aggregates: list) -> dict:
    return {item["name"]: item for item in aggregates}


def test_empty_and_income_only_snapshots_have_no_categories() -> None:
    assert categories.aggregate_categories([], NOW) == []
    assert categories.aggregate_categories([_txn("2024-06-01", -2400.0)], NOW) == []


def test_single_expense_one_month_ago() -> None:
    (food,) = categories.aggregate_categories([_txn("2024-05-15", 100.0)], NOW)

    assert food["name"] == "Food and Drink"
    assert food["months_span"] == 1
    assert food["historical_avg_spend"] == pytest.approx(100.0)
    assert food["recent_trend_spend"] == pytest.approx(100.0)
    assert food["current_month_spent"] == 0.0
    assert food["recent_weight"] == pytest.approx(0.25)
    assert food["adaptive_budget"] == pytest.approx(100.0)
    assert food["trend_percentage"] == pytest.approx(0.0)
    assert food["percentage"] == 0.0


def test_recent_trend_against_long_history() -> None:
    transactions = [
        _txn("2023-12-20", 100.0, ["Shopping"]),
        _txn("2024-01-20", 100.0, ["Shopping"]),
        _txn("2024-02-20", 100.0, ["Shopping"]),
        _txn("2024-04-01", 300.0, ["Shopping"]),
        _txn("2024-05-01", 300.0, ["Shopping"]),
        _txn("2024-06-01", 300.0, ["Shopping"]),
    ]

    (shopping,) = categories.aggregate_categories(transactions, NOW)

    assert shopping["months_span"] == 6
    assert shopping["total_spent"] == pytest.approx(1200.0)
    assert shopping["transaction_count"] == 6
    assert shopping["historical_avg_spend"] == pytest.approx(200.0)
    assert shopping["recent_trend_spend"] == pytest.approx(300.0)
    assert shopping["trend_percentage"] == pytest.approx(50.0)
    assert shopping["recent_weight"] == pytest.approx(0.7)
    assert shopping["historical_weight"] == pytest.approx(0.3)
    assert shopping["adaptive_budget"] == pytest.approx(270.0)
    assert shopping["current_month_spent"] == pytest.approx(300.0)
    assert shopping["percentage"] == pytest.approx(100.0)


def test_empty_or_missing_category_path_is_uncategorized() -> None:
    transactions = [
        _txn("2024-06-02", 10.0, []),
        _txn("2024-06-03", 15.0, None),
        {"date": "2024-06-04", "amount": 5.0},
        _txn("2024-06-05", 20.0, ""),
    ]

    (uncategorized,) = categories.aggregate_categories(transactions, NOW)

    assert uncategorized["name"] == "Uncategorized"
    assert uncategorized["transaction_count"] == 4
    assert uncategorized["current_month_spent"] == pytest.approx(50.0)


def test_primary_category_is_first_path_element() -> None:
    transactions = [
        _txn("2024-06-02", 10.0, ["Food and Drink", "Restaurants", "Coffee Shop"]),
        _txn("2024-06-03", 20.0, ["Food and Drink", "Groceries"]),
    ]

    names = [item["name"] for item in categories.aggregate_categories(transactions, NOW)]

    assert names == ["Food and Drink"]


def test_sorted_by_current_month_spend_with_shares() -> None:
    transactions = [
        _txn("2024-06-02", 100.0, ["Travel"]),
        _txn("2024-06-03", 300.0, ["Shopping"]),
        _txn("2024-03-03", 900.0, ["Entertainment"]),
        _txn("2024-06-04", -50.0, ["Shopping"]),
    ]

    aggregates = categories.aggregate_categories(transactions, NOW)

    assert [item["name"] for item in aggregates] == ["Shopping", "Travel", "Entertainment"]
    assert [item["percentage"] for item in aggregates] == pytest.approx([75.0, 25.0, 0.0])
    assert sum(item["percentage"] for item in aggregates) == pytest.approx(100.0)


def test_ties_keep_first_appearance_order() -> None:
    transactions = [
        _txn("2024-05-02", 40.0, ["Travel"]),
        _txn("2024-05-03", 40.0, ["Shopping"]),
        _txn("2024-05-04", 40.0, ["Entertainment"]),
    ]

    aggregates = categories.aggregate_categories(transactions, NOW)

    assert [item["name"] for item in aggregates] == ["Travel", "Shopping", "Entertainment"]
    assert all(item["percentage"] == 0.0 for item in aggregates)


def test_months_span_is_at_least_one_for_future_dated_rows() -> None:
    (travel,) = categories.aggregate_categories([_txn("2024-09-01", 120.0, ["Travel"])], NOW)

    assert travel["months_span"] == 1
    assert travel["historical_avg_spend"] == pytest.approx(120.0)


@pytest.mark.parametrize(
    ("months_span", "expected"),
    [(1, 0.25), (2, 0.5), (3, 0.7), (12, 0.7), (0, 0.25)],
)
def test_recent_weight_bounds(months_span: int, expected: float) -> None:
    weight = categories.recent_weight_for(months_span)

    assert weight == pytest.approx(expected)
    assert 0.25 <= weight <= 0.7


def test_recent_window_clamps_to_month_end() -> None:
    assert categories.recent_window_start(pd.Timestamp("2024-05-31 18:30")) == pd.Timestamp("2024-02-29")
    assert categories.recent_window_start(NOW) == pd.Timestamp("2024-03-15")


def test_window_boundary_is_inclusive() -> None:
    transactions = [
        _txn("2024-01-10", 60.0, ["Travel"]),
        _txn("2024-03-15", 90.0, ["Travel"]),
        _txn("2024-03-14", 30.0, ["Travel"]),
    ]

    (travel,) = categories.aggregate_categories(transactions, NOW)

    assert travel["recent_trend_spend"] == pytest.approx(30.0)


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("Travel", "Travel"),
        ("", "Uncategorized"),
        (["Shopping", "Online Marketplaces"], "Shopping"),
        ((), "Uncategorized"),
        ([None], "Uncategorized"),
        (None, "Uncategorized"),
        (float("nan"), "Uncategorized"),
    ],
)
def test_primary_category(path, expected: str) -> None:
    assert utils.primary_category(path) == expected
