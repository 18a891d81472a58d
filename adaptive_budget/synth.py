"""Synthetic transaction snapshots for demos and tests.

The generator produces deterministic, aggregator-style snapshots: linked
accounts plus transactions whose ``category`` is a taxonomy path and whose
amounts follow the aggregator sign convention (positive = money out,
negative = money in).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from pathlib import Path
from typing import Any
from uuid import UUID

import numpy as np
import pandas as pd

DEFAULT_MONTHS = 6
DEFAULT_SEED = 7
DEFAULT_AS_OF = date(2024, 6, 15)

CHECKING_ID = "acc_checking_0001"
SAVINGS_ID = "acc_savings_0002"
CREDIT_ID = "acc_credit_0003"


@dataclass(frozen=True)
class AccountProfile:
    account_id: str
    name: str
    official_name: str
    type: str
    subtype: str
    starting_balance: float


@dataclass(frozen=True)
class MerchantProfile:
    """Static metadata for a merchant."""

    name: str
    category: tuple[str, ...]
    payment_channel: str
    account_id: str
    amount_range: tuple[float, float]
    flow: str = "debit"  # "debit" or "credit"
    monthly_day: int | None = None


ACCOUNTS = (
    AccountProfile(CHECKING_ID, "Everyday Checking", "Plaid Gold Standard 0% Interest Checking", "depository", "checking", 3_200.0),
    AccountProfile(SAVINGS_ID, "High Yield Savings", "Plaid Silver Standard 0.1% Interest Saving", "depository", "savings", 8_500.0),
    AccountProfile(CREDIT_ID, "Rewards Card", "Plaid Diamond 12.5% APR Interest Credit Card", "credit", "credit card", 410.0),
)


def _merchant_catalogue() -> dict[str, MerchantProfile]:
    merchants = [
        MerchantProfile("Acme Payroll", ("Transfer", "Payroll"), "other", CHECKING_ID, (2_400.0, 2_400.0), flow="credit", monthly_day=1),
        MerchantProfile("Acme Payroll Mid-Month", ("Transfer", "Payroll"), "other", CHECKING_ID, (2_400.0, 2_400.0), flow="credit", monthly_day=15),
        MerchantProfile("Interest Earned", ("Transfer", "Deposit"), "other", SAVINGS_ID, (4.0, 9.0), flow="credit", monthly_day=28),
        MerchantProfile("Maple Street Apartments", ("Payment", "Rent"), "other", CHECKING_ID, (1_650.0, 1_650.0), monthly_day=1),
        MerchantProfile("City Power & Light", ("Service", "Utilities"), "online", CHECKING_ID, (70.0, 140.0), monthly_day=8),
        MerchantProfile("Netflix", ("Entertainment", "Streaming"), "online", CREDIT_ID, (15.49, 15.49), monthly_day=12),
        MerchantProfile("Spotify", ("Entertainment", "Streaming"), "online", CREDIT_ID, (10.99, 10.99), monthly_day=18),
        MerchantProfile("Starbucks", ("Food and Drink", "Restaurants", "Coffee Shop"), "in store", CREDIT_ID, (4.5, 9.0)),
        MerchantProfile("Chipotle", ("Food and Drink", "Restaurants"), "in store", CREDIT_ID, (11.0, 24.0)),
        MerchantProfile("Whole Foods", ("Food and Drink", "Groceries"), "in store", CHECKING_ID, (35.0, 140.0)),
        MerchantProfile("DoorDash", ("Food and Drink", "Restaurants", "Delivery"), "online", CREDIT_ID, (18.0, 45.0)),
        MerchantProfile("Uber", ("Transportation", "Taxi"), "online", CREDIT_ID, (9.0, 38.0)),
        MerchantProfile("Shell", ("Transportation", "Gas Stations"), "in store", CHECKING_ID, (30.0, 70.0)),
        MerchantProfile("Metro Transit", ("Transportation", "Public Transit"), "in store", CHECKING_ID, (2.75, 2.75)),
        MerchantProfile("Amazon", ("Shopping", "Online Marketplaces"), "online", CREDIT_ID, (12.0, 120.0)),
        MerchantProfile("Target", ("Shopping", "Department Stores"), "in store", CREDIT_ID, (20.0, 95.0)),
        MerchantProfile("AMC Theatres", ("Entertainment", "Movie Theatres"), "in store", CREDIT_ID, (14.0, 32.0)),
        MerchantProfile("United Airlines", ("Travel", "Airlines and Aviation Services"), "online", CREDIT_ID, (180.0, 520.0)),
        MerchantProfile("Marriott", ("Travel", "Lodging"), "online", CREDIT_ID, (140.0, 380.0)),
        MerchantProfile("Venmo Payment", (), "other", CHECKING_ID, (10.0, 60.0)),
        MerchantProfile("Amazon Refund", ("Shopping", "Online Marketplaces"), "online", CREDIT_ID, (10.0, 60.0), flow="credit"),
    ]
    return {merchant.name: merchant for merchant in merchants}


CATALOGUE = _merchant_catalogue()

DAILY_SPEND_MERCHANTS = (
    "Starbucks",
    "Chipotle",
    "Whole Foods",
    "DoorDash",
    "Uber",
    "Shell",
    "Metro Transit",
    "Amazon",
    "Target",
    "AMC Theatres",
    "Venmo Payment",
)
TRAVEL_MERCHANTS = ("United Airlines", "Marriott")
MONTHLY_MERCHANTS = tuple(name for name, merchant in CATALOGUE.items() if merchant.monthly_day)


def _uuid4_from_rng(rng: np.random.Generator) -> str:
    raw = bytearray(rng.bytes(16))
    raw[6] = (raw[6] & 0x0F) | 0x40  # version 4
    raw[8] = (raw[8] & 0x3F) | 0x80  # variant 10
    return str(UUID(bytes=bytes(raw)))


def _days_in_month(year: int, month: int) -> int:
    if month == 12:
        next_month = date(year + 1, 1, 1)
    else:
        next_month = date(year, month + 1, 1)
    return (next_month - date(year, month, 1)).days


def _build_transaction(
    merchant: MerchantProfile,
    *,
    posted_date: date,
    rng: np.random.Generator,
) -> dict[str, Any]:
    low, high = merchant.amount_range
    magnitude = round(float(rng.uniform(low, high)) if high > low else low, 2)
    amount = -magnitude if merchant.flow == "credit" else magnitude

    return {
        "transaction_id": _uuid4_from_rng(rng),
        "account_id": merchant.account_id,
        "date": posted_date.isoformat(),
        "name": merchant.name.upper(),
        "merchant_name": merchant.name,
        "amount": amount,
        "iso_currency_code": "USD",
        "category": list(merchant.category),
        "payment_channel": merchant.payment_channel,
        "pending": False,
    }


def _generate_month_transactions(
    year: int,
    month: int,
    rng: np.random.Generator,
    *,
    last_day: int,
) -> list[dict[str, Any]]:
    transactions: list[dict[str, Any]] = []
    month_start = date(year, month, 1)
    days = min(_days_in_month(year, month), last_day)

    for name in MONTHLY_MERCHANTS:
        merchant = CATALOGUE[name]
        if merchant.monthly_day is not None and merchant.monthly_day <= days:
            when = date(year, month, merchant.monthly_day)
            transactions.append(_build_transaction(merchant, posted_date=when, rng=rng))

    for offset in range(days):
        current_day = month_start + timedelta(days=offset)
        lam = 1.4 if current_day.weekday() < 5 else 2.2
        for _ in range(int(rng.poisson(lam))):
            merchant = CATALOGUE[rng.choice(DAILY_SPEND_MERCHANTS)]
            transactions.append(_build_transaction(merchant, posted_date=current_day, rng=rng))

    if rng.random() < 0.25:
        trip_day = month_start + timedelta(days=int(rng.integers(0, days)))
        merchant = CATALOGUE[rng.choice(TRAVEL_MERCHANTS)]
        transactions.append(_build_transaction(merchant, posted_date=trip_day, rng=rng))

    if rng.random() < 0.3:
        refund_day = month_start + timedelta(days=int(rng.integers(0, days)))
        transactions.append(_build_transaction(CATALOGUE["Amazon Refund"], posted_date=refund_day, rng=rng))

    return transactions


def generate_transactions(
    months: int = DEFAULT_MONTHS,
    *,
    as_of: date = DEFAULT_AS_OF,
    seed: int | None = DEFAULT_SEED,
) -> pd.DataFrame:
    """Generate ``months`` calendar months of history ending on ``as_of``.

    The month containing ``as_of`` is partial: nothing is dated after it.
    """

    if months <= 0:
        raise ValueError("months must be positive")

    rng = np.random.default_rng(seed)
    start = pd.Timestamp(as_of.year, as_of.month, 1) - pd.DateOffset(months=months - 1)

    transactions: list[dict[str, Any]] = []
    year, month = start.year, start.month
    for _ in range(months):
        last_day = as_of.day if (year, month) == (as_of.year, as_of.month) else 31
        transactions.extend(_generate_month_transactions(year, month, rng, last_day=last_day))
        month += 1
        if month > 12:
            month = 1
            year += 1

    df = pd.DataFrame(transactions)
    # Aggregators list the newest activity first.
    df.sort_values(["date", "transaction_id"], ascending=[False, True], inplace=True)
    df.reset_index(drop=True, inplace=True)
    return df


def generate_accounts(transactions: pd.DataFrame | None = None) -> pd.DataFrame:
    """Return the linked accounts, with balances rolled forward through ``transactions``."""

    flows: dict[str, float] = {}
    if transactions is not None and not transactions.empty:
        flows = transactions.groupby("account_id")["amount"].sum().to_dict()

    rows = []
    for account in ACCOUNTS:
        net = float(flows.get(account.account_id, 0.0))
        # Credit card balances grow with spend; deposit balances shrink.
        balance = account.starting_balance + net if account.type == "credit" else account.starting_balance - net
        rows.append(
            {
                "account_id": account.account_id,
                "name": account.name,
                "official_name": account.official_name,
                "type": account.type,
                "subtype": account.subtype,
                "current_balance": round(balance, 2),
            }
        )
    return pd.DataFrame(rows)


def generate_snapshot(
    months: int = DEFAULT_MONTHS,
    *,
    as_of: date = DEFAULT_AS_OF,
    seed: int | None = DEFAULT_SEED,
) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Return ``(transactions, accounts)`` for one synthetic user."""

    transactions = generate_transactions(months, as_of=as_of, seed=seed)
    return transactions, generate_accounts(transactions)


def write_synthetic_snapshot(
    *,
    months: int = DEFAULT_MONTHS,
    as_of: date = DEFAULT_AS_OF,
    seed: int | None = DEFAULT_SEED,
    output_dir: str | Path = Path("data"),
) -> tuple[Path, Path]:
    """Persist transactions and accounts as JSON record files."""

    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    transactions, accounts = generate_snapshot(months, as_of=as_of, seed=seed)
    transactions_path = output_path / "synthetic_transactions.json"
    accounts_path = output_path / "synthetic_accounts.json"
    transactions.to_json(transactions_path, orient="records", indent=2)
    accounts.to_json(accounts_path, orient="records", indent=2)
    return transactions_path, accounts_path


def load_snapshot(transactions_path: str | Path, accounts_path: str | Path) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Read a snapshot written by :func:`write_synthetic_snapshot`."""

    transactions = pd.read_json(transactions_path, orient="records")
    accounts = pd.read_json(accounts_path, orient="records")
    return transactions, accounts


def main() -> None:  # pragma: no cover - convenience CLI
    transactions_path, accounts_path = write_synthetic_snapshot()
    print(f"Wrote {transactions_path}")
    print(f"Wrote {accounts_path}")


if __name__ == "__main__":  # pragma: no cover - module CLI
    main()
