"""Shared utilities for the adaptive budget engine."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any

import numpy as np
import pandas as pd

from .settings import UNCATEGORIZED


def ensure_dataframe(records: Iterable[Mapping] | pd.DataFrame) -> pd.DataFrame:
    """Ensure the input payload is normalised to a :class:`pandas.DataFrame`."""

    if isinstance(records, pd.DataFrame):
        return records.copy()

    return pd.DataFrame(list(records))


def to_timestamp(now: date | datetime | str | pd.Timestamp) -> pd.Timestamp:
    """Coerce a clock reading to a timezone-naive timestamp."""

    ts = pd.Timestamp(now)
    if ts.tzinfo is not None:
        ts = ts.tz_localize(None)
    return ts


def month_distance(later: pd.Timestamp, earlier: pd.Timestamp) -> int:
    """Calendar-month difference, ignoring the day of month."""

    return (later.month - earlier.month) + 12 * (later.year - earlier.year)


def expected_spending_percentage(now: date | datetime | str | pd.Timestamp) -> float:
    """Share of the month elapsed by ``now``, as a percentage."""

    ts = to_timestamp(now)
    return ts.day / ts.days_in_month * 100.0


def primary_category(path: Any) -> str:
    """Return the first element of a category path."""

    if isinstance(path, str):
        return path or UNCATEGORIZED
    if isinstance(path, (list, tuple, np.ndarray, pd.Series)):
        items = list(path)
        if items and items[0] is not None:
            return str(items[0])
    return UNCATEGORIZED


def safe_percentage(numerator: float, denominator: float) -> float:
    return float(numerator / denominator * 100.0) if denominator > 0 else 0.0


def format_currency(value: float, currency: str = "$", decimals: int = 2) -> str:
    """Return a human-readable currency string."""

    sign = "-" if value < 0 and round(abs(value), decimals) > 0 else ""
    return f"{sign}{currency}{abs(value):,.{decimals}f}"
