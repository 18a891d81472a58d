"""Snapshot preparation helpers for the adaptive budget engine.

Transactions arrive in the aggregator's sign convention: positive amounts are
expenses (debits) and negative amounts are income (credits). The helpers here
add the derived columns the budget stages rely on without touching that
convention.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

import numpy as np
import pandas as pd

from . import utils

logger = logging.getLogger(__name__)

REQUIRED_TRANSACTION_COLUMNS = ("date", "amount")

ACCOUNT_COLUMNS = ["account_id", "name", "type", "current_balance"]


def prepare_transactions(transactions: Iterable[Mapping] | pd.DataFrame) -> pd.DataFrame:
    """Return a copy of the snapshot with the derived budgeting columns.

    Added columns: ``primary_category``, ``flow`` (``expense``/``income``/
    ``neutral``), ``year`` and ``month``. An empty snapshot comes back as an
    empty frame.
    """

    df = utils.ensure_dataframe(transactions)
    if df.empty:
        return df

    missing = [column for column in REQUIRED_TRANSACTION_COLUMNS if column not in df]
    if missing:
        raise ValueError(f"transactions are missing required columns: {', '.join(missing)}")

    dates = pd.to_datetime(df["date"])
    if dates.dt.tz is not None:
        dates = dates.dt.tz_localize(None)
    df["date"] = dates.dt.normalize()
    df["amount"] = pd.to_numeric(df["amount"], errors="coerce").fillna(0.0).astype(float)

    if "category" in df:
        df["primary_category"] = df["category"].map(utils.primary_category)
    else:
        df["primary_category"] = utils.primary_category(None)

    if "account_id" not in df:
        df["account_id"] = None

    df["flow"] = np.where(
        df["amount"] > 0,
        "expense",
        np.where(df["amount"] < 0, "income", "neutral"),
    )
    df["year"] = df["date"].dt.year
    df["month"] = df["date"].dt.month

    logger.debug("Prepared %d transactions across %d categories", len(df), df["primary_category"].nunique())
    return df


def current_month_mask(df: pd.DataFrame, reference: pd.Timestamp) -> pd.Series:
    return (df["year"] == reference.year) & (df["month"] == reference.month)


def filter_by_account(transactions: pd.DataFrame, account_id: str | None) -> pd.DataFrame:
    """Restrict the snapshot to one account; ``None`` keeps every row."""

    df = utils.ensure_dataframe(transactions)
    if account_id is None or df.empty:
        return df
    if "account_id" not in df:
        return df.iloc[0:0].copy()
    return df.loc[df["account_id"] == account_id].copy()


def _current_balance(row: Mapping) -> float:
    balance = row.get("current_balance")
    if balance is None or pd.isna(balance):
        balances = row.get("balances")
        if isinstance(balances, Mapping):
            balance = balances.get("current")
    try:
        return float(balance) if balance is not None else 0.0
    except (TypeError, ValueError):
        return 0.0


def prepare_accounts(accounts: Iterable[Mapping] | pd.DataFrame) -> pd.DataFrame:
    """Normalise account records to ``account_id``, ``name``, ``type``, ``current_balance``."""

    df = utils.ensure_dataframe(accounts)
    if df.empty:
        return pd.DataFrame(columns=ACCOUNT_COLUMNS)

    records = df.to_dict("records")
    return pd.DataFrame(
        [
            {
                "account_id": row.get("account_id") or row.get("id"),
                "name": row.get("name") or row.get("official_name") or "Account",
                "type": row.get("type") or "other",
                "current_balance": _current_balance(row),
            }
            for row in records
        ],
        columns=ACCOUNT_COLUMNS,
    )
