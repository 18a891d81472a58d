"""The adaptive budget pipeline.

``build_report`` runs the four stages in order (monthly metrics, category
aggregates, budget progress, insights) and bundles the results.
:class:`BudgetEngine` memoizes that pipeline on the snapshot contents and the
calendar day of ``now``.
"""

from __future__ import annotations

import copy
import hashlib
import logging
import threading
from collections import OrderedDict
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import TypedDict

import pandas as pd

from . import categories, features, insights, metrics, progress, settings, utils
from .categories import CategoryAggregate
from .insights import AnnualProjection, BudgetOverview, InsightCard, TrendingCategory
from .metrics import MonthlyMetrics
from .progress import BudgetProgress

logger = logging.getLogger(__name__)

_FINGERPRINT_COLUMNS = ["date", "amount", "primary_category", "account_id"]


class BudgetReport(TypedDict):
    as_of: str
    account_count: int
    total_balance: float
    metrics: MonthlyMetrics | None
    categories: list[CategoryAggregate]
    progress: list[BudgetProgress]
    insights: list[InsightCard]
    overview: BudgetOverview | None
    trending: list[TrendingCategory]
    projection: AnnualProjection | None


def build_report(
    transactions: Iterable[Mapping] | pd.DataFrame,
    accounts: Iterable[Mapping] | pd.DataFrame,
    now: date | datetime | str | pd.Timestamp,
    *,
    fallback_budgets: Mapping[str, float] | None = None,
) -> BudgetReport:
    """Run every stage from scratch and return the combined report."""

    reference = utils.to_timestamp(now)
    prepared = features.prepare_transactions(transactions)
    account_frame = features.prepare_accounts(accounts)

    monthly = metrics.calculate_monthly_metrics(prepared, reference)
    aggregates = categories.aggregate_categories(prepared, reference)
    entries = progress.evaluate_budget_progress(
        aggregates, reference, fallback_budgets=fallback_budgets
    )
    cards = insights.generate_insights(monthly, entries)
    projection = (
        insights.annual_projection(monthly, entries) if monthly is not None and entries else None
    )

    logger.debug(
        "Built report as of %s: %d categories, %d progress entries, %d insights",
        reference.date(),
        len(aggregates),
        len(entries),
        len(cards),
    )

    return {
        "as_of": reference.strftime("%Y-%m-%d"),
        "account_count": int(len(account_frame)),
        "total_balance": float(account_frame["current_balance"].sum()) if not account_frame.empty else 0.0,
        "metrics": monthly,
        "categories": aggregates,
        "progress": entries,
        "insights": cards,
        "overview": insights.budget_overview(monthly, aggregates, reference),
        "trending": insights.trending_categories(aggregates),
        "projection": projection,
    }


def snapshot_fingerprint(
    transactions: Iterable[Mapping] | pd.DataFrame,
    accounts: Iterable[Mapping] | pd.DataFrame,
    now: date | datetime | str | pd.Timestamp,
) -> str:
    """Stable digest of the inputs that influence :func:`build_report`."""

    digest = hashlib.sha1(usedforsecurity=False)
    digest.update(utils.to_timestamp(now).strftime("%Y-%m-%d").encode())

    prepared = features.prepare_transactions(transactions)
    if not prepared.empty:
        frame = prepared[_FINGERPRINT_COLUMNS].astype({"account_id": "string"})
        digest.update(pd.util.hash_pandas_object(frame, index=False).values.tobytes())

    account_frame = features.prepare_accounts(accounts)
    if not account_frame.empty:
        digest.update(
            pd.util.hash_pandas_object(account_frame.astype(str), index=False).values.tobytes()
        )
    return digest.hexdigest()


class BudgetEngine:
    """Memoized front end for :func:`build_report`.

    Reports are cached per snapshot fingerprint; callers receive deep copies so
    they are free to modify what they get back. One engine may be shared across
    threads: cache access is serialised, the pipeline itself runs unlocked.
    """

    def __init__(
        self,
        *,
        fallback_budgets: Mapping[str, float] | None = None,
        cache_size: int = settings.ENGINE_CACHE_SIZE,
    ) -> None:
        if cache_size < 1:
            raise ValueError("cache_size must be positive")
        self.fallback_budgets = dict(fallback_budgets) if fallback_budgets is not None else None
        self.cache_size = cache_size
        self._cache: OrderedDict[str, BudgetReport] = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def report(
        self,
        transactions: Iterable[Mapping] | pd.DataFrame,
        accounts: Iterable[Mapping] | pd.DataFrame,
        now: date | datetime | str | pd.Timestamp,
    ) -> BudgetReport:
        transactions = utils.ensure_dataframe(transactions)
        accounts = utils.ensure_dataframe(accounts)
        key = snapshot_fingerprint(transactions, accounts, now)

        with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                self.hits += 1
                self._cache.move_to_end(key)
                snapshot = copy.deepcopy(cached)
            else:
                self.misses += 1
                snapshot = None
        if snapshot is not None:
            logger.debug("Report cache hit for %s", key[:10])
            return snapshot

        # Built outside the lock; concurrent misses on one key may both compute.
        result = build_report(transactions, accounts, now, fallback_budgets=self.fallback_budgets)
        with self._lock:
            self._cache[key] = result
            self._cache.move_to_end(key)
            while len(self._cache) > self.cache_size:
                self._cache.popitem(last=False)
        return copy.deepcopy(result)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()
