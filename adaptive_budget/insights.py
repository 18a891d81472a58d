"""Insight cards, projections and overview helpers for the budget view."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from datetime import date, datetime
from typing import Literal, TypedDict

import pandas as pd

from . import settings, utils
from .categories import CategoryAggregate
from .metrics import MonthlyMetrics
from .progress import BudgetProgress

InsightKind = Literal["over_pace", "trend_change", "savings", "recommendation", "projection"]


class InsightCard(TypedDict):
    kind: InsightKind
    title: str
    message: str
    category: str | None


class AnnualProjection(TypedDict):
    projected_annual_spend: float
    projected_annual_income: float
    projected_annual_savings: float
    projected_savings_rate: float


class BudgetOverview(TypedDict):
    month_label: str
    total_adaptive_budget: float
    expenses: float
    budget_used_percentage: float
    is_over_budget: bool
    is_under_budget: bool
    day_of_month: int
    days_in_month: int
    expected_spending_percentage: float


class TrendingCategory(TypedDict):
    name: str
    trend_percentage: float
    direction: Literal["increasing", "decreasing"]
    adaptive_budget: float
    message: str


def _money(value: float) -> str:
    return utils.format_currency(value, decimals=0)


def _pct(value: float) -> str:
    return f"{value:.0f}"


def _below_pace(entry: BudgetProgress) -> float:
    return 100.0 - entry["spent_percentage"] / entry["expected_spending_percentage"] * 100.0


def projected_overage(entry: BudgetProgress) -> float:
    """Month-end overshoot of the adaptive budget at the current spending pace."""

    return entry["spent"] / entry["expected_spending_percentage"] * 100.0 - entry["adaptive_budget"]


def annual_projection(
    metrics: MonthlyMetrics,
    progress: Sequence[BudgetProgress],
) -> AnnualProjection:
    """Extrapolate a year from this month's income and the top adaptive budgets."""

    projected_spend = sum(entry["adaptive_budget"] for entry in progress) * 12
    projected_income = metrics["income"] * 12
    projected_savings = projected_income - projected_spend
    rate = projected_savings / projected_income * 100.0 if projected_income != 0 else 0.0
    return {
        "projected_annual_spend": float(projected_spend),
        "projected_annual_income": float(projected_income),
        "projected_annual_savings": float(projected_savings),
        "projected_savings_rate": float(rate),
    }


def _over_pace_card(entry: BudgetProgress) -> InsightCard:
    message = (
        f"You're spending too quickly on {entry['name']} this month. "
        f"At your current pace, you'll exceed your adaptive budget by "
        f"{_money(projected_overage(entry))} by month end."
    )
    if entry["trend_direction"] == "increasing":
        message += (
            f" Note that your spending in this category has been trending up by "
            f"{_pct(abs(entry['trend_percentage']))}% recently."
        )
    return {
        "kind": "over_pace",
        "title": f"{entry['name']} over adaptive budget",
        "message": message,
        "category": entry["name"],
    }


def _trend_card(entry: BudgetProgress) -> InsightCard:
    verb = "increased" if entry["trend_direction"] == "increasing" else "decreased"
    return {
        "kind": "trend_change",
        "title": "Spending pattern change detected",
        "message": (
            f"Your {entry['name']} spending has {verb} by "
            f"{_pct(abs(entry['trend_percentage']))}% compared to your historical average. "
            f"Your adaptive budget has automatically {verb} to "
            f"{_money(entry['adaptive_budget'])} to reflect this change."
        ),
        "category": entry["name"],
    }


def _savings_card(metrics: MonthlyMetrics, under: Sequence[BudgetProgress]) -> InsightCard:
    message = (
        f"You're on pace to save {_money(metrics['savings'])} this month. "
        f"With a savings rate of {_pct(metrics['savings_percentage'])}%, "
        f"you're building a solid financial foundation!"
    )
    if under:
        message += (
            f" Your spending in {under[0]['name']} is {_pct(_below_pace(under[0]))}% "
            f"below expected pace, contributing to your savings."
        )
    return {"kind": "savings", "title": "Savings on track", "message": message, "category": None}


def _recommendation_card(
    metrics: MonthlyMetrics,
    over: Sequence[BudgetProgress],
    changing: BudgetProgress | None,
    under: Sequence[BudgetProgress],
) -> InsightCard:
    category: str | None = None
    if over:
        category = over[0]["name"]
        message = (
            f"Consider temporarily reducing {category.lower()} spending for the rest of the month. "
            f"Your adaptive budget of {_money(over[0]['adaptive_budget'])} is based on your typical "
            f"spending patterns, but you're currently on track to exceed it."
        )
    elif changing is not None and changing["trend_direction"] == "increasing":
        category = changing["name"]
        message = (
            f"Your spending on {category.lower()} has recently increased. Your adaptive budget has "
            f"adjusted to {_money(changing['adaptive_budget'])}/month to reflect this change. "
            f"Consider if this increased spending aligns with your financial goals."
        )
    elif changing is not None and changing["trend_direction"] == "decreasing":
        category = changing["name"]
        message = (
            f"Great job reducing your {category.lower()} expenses! Your adaptive budget has adjusted "
            f"down to {_money(changing['adaptive_budget'])}/month. Consider allocating these savings "
            f"toward your financial goals."
        )
    elif metrics["savings_percentage"] < settings.LOW_SAVINGS_RATE:
        message = (
            f"Your adaptive budgets help you track spending patterns over time. To increase your "
            f"current {_pct(metrics['savings_percentage'])}% savings rate, look for categories where "
            f"your spending has gradually increased."
        )
    elif under:
        category = under[0]["name"]
        message = (
            f"You're {_pct(_below_pace(under[0]))}% under your adaptive budget for {category.lower()}. "
            f"If this continues, your adaptive budget will gradually adjust downward to reflect "
            f"your new spending pattern."
        )
    else:
        message = (
            "Your spending is well-aligned with your adaptive budgets, which adjust over time based "
            "on your spending habits. This balance gives you a realistic view of your finances and "
            "helps maintain long-term financial health."
        )
    return {
        "kind": "recommendation",
        "title": "Adaptive Budget Insight",
        "message": message,
        "category": category,
    }


def _projection_card(projection: AnnualProjection) -> InsightCard:
    return {
        "kind": "projection",
        "title": "Future Projection",
        "message": (
            f"Based on your adaptive budgets and current income, you're projected to save "
            f"approximately {_money(projection['projected_annual_savings'])} "
            f"({_pct(projection['projected_savings_rate'])}% of income) over the next year "
            f"if your patterns continue."
        ),
        "category": None,
    }


def generate_insights(
    metrics: MonthlyMetrics | None,
    progress: Sequence[BudgetProgress],
) -> list[InsightCard]:
    """Return up to five prioritised insight cards.

    Nothing is produced without monthly metrics and at least one budget
    progress entry.
    """

    if metrics is None or not progress:
        return []

    over = [entry for entry in progress if entry["is_over_pace"]]
    under = [entry for entry in progress if entry["is_under_pace"]]
    changing_candidates = [
        entry for entry in progress if abs(entry["trend_percentage"]) > settings.TREND_ALERT_THRESHOLD
    ]
    changing = (
        max(changing_candidates, key=lambda entry: abs(entry["trend_percentage"]))
        if changing_candidates
        else None
    )

    cards: list[InsightCard] = []
    if over:
        cards.append(_over_pace_card(over[0]))
    if changing is not None and not (over and changing["name"] == over[0]["name"]):
        cards.append(_trend_card(changing))
    if metrics["savings_percentage"] >= settings.GOOD_SAVINGS_RATE:
        cards.append(_savings_card(metrics, under))
    cards.append(_recommendation_card(metrics, over, changing, under))
    cards.append(_projection_card(annual_projection(metrics, progress)))
    return cards


def budget_overview(
    metrics: MonthlyMetrics | None,
    categories: Iterable[CategoryAggregate],
    now: date | datetime | str | pd.Timestamp,
) -> BudgetOverview | None:
    """Month-level view of expenses against the sum of every adaptive budget."""

    if metrics is None:
        return None

    reference = utils.to_timestamp(now)
    total_budget = float(sum(item["adaptive_budget"] for item in categories))
    used = utils.safe_percentage(metrics["expenses"], total_budget)
    return {
        "month_label": reference.strftime("%B %Y"),
        "total_adaptive_budget": total_budget,
        "expenses": metrics["expenses"],
        "budget_used_percentage": used,
        "is_over_budget": used > 100.0,
        "is_under_budget": used < settings.OVERVIEW_UNDER_BUDGET_PCT,
        "day_of_month": int(reference.day),
        "days_in_month": int(reference.days_in_month),
        "expected_spending_percentage": utils.expected_spending_percentage(reference),
    }


def trending_categories(
    categories: Iterable[Mapping],
    limit: int = settings.TRENDING_LIMIT,
) -> list[TrendingCategory]:
    """Categories whose recent average departs most from their history."""

    candidates = [
        item
        for item in categories
        if item["historical_avg_spend"] > 0 and abs(item["trend_percentage"]) > settings.TREND_STABLE_BAND
    ]
    candidates.sort(key=lambda item: abs(item["trend_percentage"]), reverse=True)

    trending: list[TrendingCategory] = []
    for item in candidates[:limit]:
        direction: Literal["increasing", "decreasing"] = (
            "increasing" if item["trend_percentage"] > 0 else "decreasing"
        )
        verb = "increased" if direction == "increasing" else "decreased"
        trending.append(
            {
                "name": str(item["name"]),
                "trend_percentage": float(item["trend_percentage"]),
                "direction": direction,
                "adaptive_budget": float(item["adaptive_budget"]),
                "message": (
                    f"Your spending on {item['name']} has {verb} by "
                    f"{_pct(abs(item['trend_percentage']))}% compared to your historical average. "
                    f"Your adaptive budget has adjusted to {item['adaptive_budget']:.2f}/mo."
                ),
            }
        )
    return trending
