"""Current-month income, expense and savings metrics."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import TypedDict

import pandas as pd

from . import features, utils


class MonthlyMetrics(TypedDict):
    income: float
    expenses: float
    savings: float
    expense_percentage: float
    savings_percentage: float


def calculate_monthly_metrics(
    transactions: Iterable[Mapping] | pd.DataFrame,
    now: date | datetime | str | pd.Timestamp,
) -> MonthlyMetrics | None:
    """Aggregate the calendar month containing ``now``.

    Returns ``None`` when there are no transactions at all. Amounts of exactly
    zero count as neither income nor expense.
    """

    df = features.prepare_transactions(transactions)
    if df.empty:
        return None

    reference = utils.to_timestamp(now)
    amounts = df.loc[features.current_month_mask(df, reference), "amount"]

    income = float(abs(amounts[amounts < 0].sum()))
    expenses = float(amounts[amounts > 0].sum())
    savings = max(0.0, income - expenses)

    return {
        "income": income,
        "expenses": expenses,
        "savings": savings,
        "expense_percentage": utils.safe_percentage(expenses, income),
        "savings_percentage": utils.safe_percentage(savings, income),
    }
