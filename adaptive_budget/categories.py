"""Per-category spending aggregates and adaptive budgets.

Each primary category gets an all-time monthly average, a trailing
three-month average and an adaptive budget that blends the two. The recent
average is weighted by how much history the category has: a single month of
data gives it a 0.25 weight, three or more months give it the full 0.7.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import TypedDict

import pandas as pd

from . import features, settings, utils

logger = logging.getLogger(__name__)


class CategoryAggregate(TypedDict):
    name: str
    total_spent: float
    current_month_spent: float
    transaction_count: int
    months_span: int
    historical_avg_spend: float
    recent_trend_spend: float
    recent_weight: float
    historical_weight: float
    adaptive_budget: float
    trend_percentage: float
    percentage: float


def recent_weight_for(months_span: int) -> float:
    """Weight given to the recent average for a category with ``months_span`` of history."""

    recent_months = min(settings.RECENT_WINDOW_MONTHS, max(1, months_span))
    return min(settings.MAX_RECENT_WEIGHT, recent_months / settings.RECENT_WEIGHT_DIVISOR)


def recent_window_start(reference: pd.Timestamp) -> pd.Timestamp:
    # DateOffset clamps to the last day when the target month is shorter
    # (May 31 -> Feb 29) instead of rolling over into March.
    return reference.normalize() - pd.DateOffset(months=settings.RECENT_WINDOW_MONTHS)


def _aggregate(name: str, row: pd.Series, reference: pd.Timestamp) -> CategoryAggregate:
    months_span = max(1, utils.month_distance(reference, row["oldest"]))
    historical_avg = float(row["total_spent"]) / months_span

    recent_months = min(settings.RECENT_WINDOW_MONTHS, months_span)
    recent_trend = float(row["recent_total"]) / recent_months

    recent_weight = recent_weight_for(months_span)
    historical_weight = 1.0 - recent_weight
    adaptive_budget = recent_trend * recent_weight + historical_avg * historical_weight

    trend_percentage = (
        (recent_trend - historical_avg) / historical_avg * 100.0 if historical_avg > 0 else 0.0
    )

    return {
        "name": str(name),
        "total_spent": float(row["total_spent"]),
        "current_month_spent": float(row["current_month_spent"]),
        "transaction_count": int(row["transaction_count"]),
        "months_span": int(months_span),
        "historical_avg_spend": historical_avg,
        "recent_trend_spend": recent_trend,
        "recent_weight": recent_weight,
        "historical_weight": historical_weight,
        "adaptive_budget": adaptive_budget,
        "trend_percentage": trend_percentage,
        "percentage": 0.0,
    }


def aggregate_categories(
    transactions: Iterable[Mapping] | pd.DataFrame,
    now: date | datetime | str | pd.Timestamp,
) -> list[CategoryAggregate]:
    """Group expenses by primary category and derive adaptive budgets.

    The result is ordered by current-month spend, largest first. Categories
    that tie keep the order in which they first appear in the snapshot.
    ``percentage`` is each category's share of the month's total spend.
    """

    df = features.prepare_transactions(transactions)
    if df.empty:
        return []

    expenses = df.loc[df["amount"] > 0]
    if expenses.empty:
        return []

    reference = utils.to_timestamp(now)
    in_current_month = features.current_month_mask(expenses, reference)
    in_recent_window = expenses["date"] >= recent_window_start(reference)

    frame = expenses.assign(
        current=expenses["amount"].where(in_current_month, 0.0),
        recent=expenses["amount"].where(in_recent_window, 0.0),
    )
    grouped = frame.groupby("primary_category", sort=False).agg(
        total_spent=("amount", "sum"),
        current_month_spent=("current", "sum"),
        recent_total=("recent", "sum"),
        transaction_count=("amount", "size"),
        oldest=("date", "min"),
    )

    aggregates = [_aggregate(name, row, reference) for name, row in grouped.iterrows()]
    aggregates.sort(key=lambda item: item["current_month_spent"], reverse=True)

    total_current = sum(item["current_month_spent"] for item in aggregates)
    for item in aggregates:
        item["percentage"] = utils.safe_percentage(item["current_month_spent"], total_current)

    logger.debug("Aggregated %d categories as of %s", len(aggregates), reference.date())
    return aggregates
