"""Per-user container for the budget view.

The session owns the transaction/account snapshot supplied by the sync layer,
the selected-account filter and the memoized engine. Presentation code gets
explicit callbacks (``select_account``, ``clear_account_filter``) and can
``subscribe`` to filter changes instead of reaching for shared global state.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping

import pandas as pd

from . import features, utils
from .engine import BudgetEngine, BudgetReport

logger = logging.getLogger(__name__)

Listener = Callable[[str | None], None]


class BudgetSession:
    def __init__(
        self,
        transactions: Iterable[Mapping] | pd.DataFrame = (),
        accounts: Iterable[Mapping] | pd.DataFrame = (),
        *,
        engine: BudgetEngine | None = None,
        clock: Callable[[], pd.Timestamp] | None = None,
    ) -> None:
        self.engine = engine or BudgetEngine()
        self._clock = clock or pd.Timestamp.now
        self._transactions = utils.ensure_dataframe(transactions)
        self._accounts = utils.ensure_dataframe(accounts)
        self._selected_account_id: str | None = None
        self._listeners: list[Listener] = []

    @property
    def selected_account_id(self) -> str | None:
        return self._selected_account_id

    @property
    def accounts(self) -> pd.DataFrame:
        return features.prepare_accounts(self._accounts)

    def refresh(
        self,
        transactions: Iterable[Mapping] | pd.DataFrame,
        accounts: Iterable[Mapping] | pd.DataFrame,
    ) -> None:
        """Replace the snapshot after a sync."""

        self._transactions = utils.ensure_dataframe(transactions)
        self._accounts = utils.ensure_dataframe(accounts)
        logger.debug("Session refreshed with %d transactions", len(self._transactions))

        known = set(self.accounts["account_id"])
        if self._selected_account_id is not None and self._selected_account_id not in known:
            self._set_selection(None)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a selection listener; returns a function that unsubscribes it."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def select_account(self, account_id: str) -> None:
        """Toggle the filter: choosing the selected account again clears it."""

        if self._selected_account_id == account_id:
            self._set_selection(None)
        else:
            self._set_selection(account_id)

    def clear_account_filter(self) -> None:
        self._set_selection(None)

    def _set_selection(self, account_id: str | None) -> None:
        if account_id == self._selected_account_id:
            return
        self._selected_account_id = account_id
        for listener in list(self._listeners):
            listener(account_id)

    def visible_transactions(self) -> pd.DataFrame:
        return features.filter_by_account(self._transactions, self._selected_account_id)

    def report(self, now: pd.Timestamp | None = None) -> BudgetReport:
        reference = now if now is not None else self._clock()
        return self.engine.report(self.visible_transactions(), self._accounts, reference)
