"""Tests for insight cards, projections and the monthly overview."""

from __future__ import annotations

import pandas as pd
import pytest
from adaptive_budget import insights, progress

NOW = pd.Timestamp("2024-06-15")


def _metrics(income: float = 1000.0, expenses: float = 900.0) -> dict:
    savings = max(0.0, income - expenses)
    return {
        "income": income,
        "expenses": expenses,
        "savings": savings,
        "expense_percentage": expenses / income * 100 if income else 0.0,
        "savings_percentage": savings / income * 100 if income else 0.0,
    }


def _progress(*rows: tuple[str, float, float, float]) -> list:
    aggregates = [
        {
            "name": name,
            "current_month_spent": spent,
            "adaptive_budget": adaptive,
            "historical_avg_spend": adaptive,
            "trend_percentage": trend,
        }
        for name, spent, adaptive, trend in rows
    ]
    return progress.evaluate_budget_progress(aggregates, NOW)


def test_no_cards_without_metrics_or_progress() -> None:
    assert insights.generate_insights(None, _progress(("Travel", 50.0, 100.0, 0.0))) == []
    assert insights.generate_insights(_metrics(), []) == []


def test_over_pace_warning_and_recommendation() -> None:
    entries = _progress(("Food and Drink", 300.0, 400.0, 20.0))

    cards = insights.generate_insights(_metrics(), entries)

    assert [card["kind"] for card in cards] == ["over_pace", "recommendation", "projection"]
    warning = cards[0]
    assert warning["title"] == "Food and Drink over adaptive budget"
    assert warning["category"] == "Food and Drink"
    assert "exceed your adaptive budget by $200 by month end" in warning["message"]
    assert "trending up by 20% recently" in warning["message"]
    assert cards[1]["message"].startswith("Consider temporarily reducing food and drink spending")
    assert "$400" in cards[1]["message"]


def test_projected_overage_is_linear_extrapolation() -> None:
    (entry,) = _progress(("Travel", 300.0, 400.0, 0.0))

    assert insights.projected_overage(entry) == pytest.approx(200.0)


def test_trend_alert_uses_largest_absolute_change() -> None:
    entries = _progress(("Shopping", 50.0, 100.0, 20.0), ("Travel", 50.0, 100.0, -40.0))

    cards = insights.generate_insights(_metrics(expenses=700.0), entries)

    assert [card["kind"] for card in cards] == ["trend_change", "savings", "recommendation", "projection"]
    trend = cards[0]
    assert trend["category"] == "Travel"
    assert "decreased by 40%" in trend["message"]
    assert "automatically decreased to $100" in trend["message"]
    assert cards[1]["title"] == "Savings on track"
    assert "save $300 this month" in cards[1]["message"]
    assert cards[2]["message"].startswith("Great job reducing your travel expenses!")


def test_increasing_trend_recommendation() -> None:
    entries = _progress(("Shopping", 50.0, 100.0, 30.0))

    cards = insights.generate_insights(_metrics(expenses=830.0), entries)
    recommendation = next(card for card in cards if card["kind"] == "recommendation")

    assert recommendation["message"].startswith("Your spending on shopping has recently increased.")


def test_low_savings_rate_recommendation() -> None:
    cards = insights.generate_insights(_metrics(expenses=900.0), _progress(("Travel", 50.0, 100.0, 0.0)))
    recommendation = next(card for card in cards if card["kind"] == "recommendation")

    assert "current 10% savings rate" in recommendation["message"]
    assert recommendation["category"] is None


def test_under_pace_recommendation() -> None:
    cards = insights.generate_insights(_metrics(expenses=830.0), _progress(("Travel", 20.0, 100.0, 0.0)))
    recommendation = next(card for card in cards if card["kind"] == "recommendation")

    assert recommendation["message"].startswith("You're 60% under your adaptive budget for travel.")
    assert recommendation["category"] == "Travel"


def test_well_aligned_recommendation() -> None:
    cards = insights.generate_insights(_metrics(expenses=830.0), _progress(("Travel", 50.0, 100.0, 0.0)))

    assert [card["kind"] for card in cards] == ["recommendation", "projection"]
    assert cards[0]["message"].startswith("Your spending is well-aligned")


def test_savings_card_mentions_under_pace_category() -> None:
    cards = insights.generate_insights(_metrics(expenses=500.0), _progress(("Travel", 20.0, 100.0, 0.0)))
    savings = next(card for card in cards if card["kind"] == "savings")

    assert "Your spending in Travel is 60% below expected pace" in savings["message"]


def test_at_most_five_cards() -> None:
    entries = _progress(
        ("Food and Drink", 300.0, 400.0, 0.0),
        ("Travel", 50.0, 100.0, -40.0),
        ("Shopping", 20.0, 100.0, 0.0),
    )

    cards = insights.generate_insights(_metrics(expenses=200.0), entries)

    assert [card["kind"] for card in cards] == [
        "over_pace",
        "trend_change",
        "savings",
        "recommendation",
        "projection",
    ]


def test_annual_projection() -> None:
    entries = _progress(("A", 10.0, 100.0, 0.0), ("B", 10.0, 200.0, 0.0), ("C", 10.0, 300.0, 0.0))

    projection = insights.annual_projection(_metrics(income=1000.0), entries)

    assert projection == {
        "projected_annual_spend": pytest.approx(7200.0),
        "projected_annual_income": pytest.approx(12000.0),
        "projected_annual_savings": pytest.approx(4800.0),
        "projected_savings_rate": pytest.approx(40.0),
    }


def test_annual_projection_without_income() -> None:
    projection = insights.annual_projection(_metrics(income=0.0, expenses=50.0), _progress(("A", 10.0, 100.0, 0.0)))

    assert projection["projected_annual_savings"] == pytest.approx(-1200.0)
    assert projection["projected_savings_rate"] == 0.0


def test_budget_overview() -> None:
    aggregates = [{"adaptive_budget": 300.0}, {"adaptive_budget": 200.0}]

    overview = insights.budget_overview(_metrics(expenses=450.0), aggregates, NOW)

    assert overview is not None
    assert overview["month_label"] == "June 2024"
    assert overview["total_adaptive_budget"] == pytest.approx(500.0)
    assert overview["budget_used_percentage"] == pytest.approx(90.0)
    assert overview["is_over_budget"] is False
    assert overview["is_under_budget"] is False
    assert overview["day_of_month"] == 15
    assert overview["days_in_month"] == 30
    assert overview["expected_spending_percentage"] == pytest.approx(50.0)


def test_budget_overview_edge_cases() -> None:
    assert insights.budget_overview(None, [], NOW) is None

    overview = insights.budget_overview(_metrics(expenses=450.0), [], NOW)
    assert overview is not None
    assert overview["budget_used_percentage"] == 0.0
    assert overview["is_under_budget"] is True


def test_trending_categories() -> None:
    aggregates = [
        {"name": "Shopping", "historical_avg_spend": 200.0, "trend_percentage": 50.0, "adaptive_budget": 270.0},
        {"name": "Travel", "historical_avg_spend": 100.0, "trend_percentage": -80.0, "adaptive_budget": 60.0},
        {"name": "Pets", "historical_avg_spend": 50.0, "trend_percentage": 4.0, "adaptive_budget": 50.0},
        {"name": "Gifts", "historical_avg_spend": 0.0, "trend_percentage": 90.0, "adaptive_budget": 10.0},
        {"name": "Coffee", "historical_avg_spend": 30.0, "trend_percentage": 10.0, "adaptive_budget": 32.0},
        {"name": "Books", "historical_avg_spend": 30.0, "trend_percentage": -6.0, "adaptive_budget": 29.0},
    ]

    trending = insights.trending_categories(aggregates)

    assert [item["name"] for item in trending] == ["Travel", "Shopping", "Coffee"]
    assert trending[0]["direction"] == "decreasing"
    assert trending[1]["direction"] == "increasing"
    assert trending[1]["message"] == (
        "Your spending on Shopping has increased by 50% compared to your historical average. "
        "Your adaptive budget has adjusted to 270.00/mo."
    )
