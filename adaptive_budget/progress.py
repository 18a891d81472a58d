"""Compare current-month category spend with adaptive budgets and month pacing."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Literal, TypedDict

import pandas as pd

from . import settings, utils

TrendDirection = Literal["increasing", "decreasing", "stable"]


class BudgetProgress(TypedDict):
    name: str
    spent: float
    budget: float
    adaptive_budget: float
    historical_average: float
    spent_percentage: float
    adaptive_percentage: float
    expected_spending_percentage: float
    is_over_pace: bool
    is_under_pace: bool
    trend_direction: TrendDirection
    trend_percentage: float


def classify_trend(trend_percentage: float) -> TrendDirection:
    if trend_percentage > settings.TREND_STABLE_BAND:
        return "increasing"
    if trend_percentage < -settings.TREND_STABLE_BAND:
        return "decreasing"
    return "stable"


def resolve_budget(
    category: Mapping,
    fallback_budgets: Mapping[str, float] | None = None,
) -> float:
    """Adaptive budget when positive, else the fallback table entry, else 0."""

    table = settings.FALLBACK_BUDGETS if fallback_budgets is None else fallback_budgets
    adaptive = float(category.get("adaptive_budget", 0.0) or 0.0)
    if adaptive > 0:
        return adaptive
    return float(table.get(category["name"], 0.0))


def evaluate_budget_progress(
    categories: Iterable[Mapping],
    now: date | datetime | str | pd.Timestamp,
    *,
    fallback_budgets: Mapping[str, float] | None = None,
    limit: int = settings.TOP_PROGRESS_CATEGORIES,
) -> list[BudgetProgress]:
    """Build pacing entries for the top spending categories.

    ``categories`` must already be ordered by current-month spend, as returned
    by :func:`adaptive_budget.categories.aggregate_categories`. Categories with
    no budget or no spend this month are skipped before the ``limit`` is applied.
    """

    expected = utils.expected_spending_percentage(now)
    over_threshold = expected * (1 + settings.PACE_TOLERANCE)
    under_threshold = expected * (1 - settings.PACE_TOLERANCE)

    entries: list[BudgetProgress] = []
    for category in categories:
        if len(entries) >= limit:
            break

        spent = float(category["current_month_spent"])
        budget = resolve_budget(category, fallback_budgets)
        if budget <= 0 or spent <= 0:
            continue

        adaptive = float(category.get("adaptive_budget", 0.0) or 0.0)
        spent_percentage = spent / budget * 100.0
        trend_percentage = float(category.get("trend_percentage", 0.0))

        entries.append(
            {
                "name": str(category["name"]),
                "spent": spent,
                "budget": budget,
                "adaptive_budget": adaptive,
                "historical_average": float(category.get("historical_avg_spend", 0.0)),
                "spent_percentage": spent_percentage,
                "adaptive_percentage": utils.safe_percentage(spent, adaptive),
                "expected_spending_percentage": expected,
                "is_over_pace": spent_percentage > over_threshold,
                "is_under_pace": spent_percentage < under_threshold,
                "trend_direction": classify_trend(trend_percentage),
                "trend_percentage": trend_percentage,
            }
        )

    return entries
