"""
engine.py - Balance Engine

Wires the pipeline behind a balance query:

1. Collect facts for (viewer, group) from a LedgerFactCollector
2. Accumulate per-user net balances
3. Check conservation (balances must sum to zero)
4. Simplify debts into suggested payments
5. Assemble the viewer's report

The engine holds no state between queries. It never retries: collector
errors (DataUnavailable) and integrity errors (LedgerImbalance) surface to
the caller unchanged.
"""

from __future__ import annotations
from typing import Optional

from .core import Money, UserId, NetBalances, FactSet, LedgerImbalance
from .balances import (
    accumulate_balances, check_conservation, find_unbalanced_expenses,
    pairwise_balance,
)
from .facts import LedgerFactCollector
from .report import BalanceReport, assemble_report
from .simplify import simplify_debts


def _checked_balances(facts: FactSet) -> NetBalances:
    balances = accumulate_balances(facts)
    try:
        check_conservation(balances)
    except LedgerImbalance as exc:
        unbalanced = find_unbalanced_expenses(facts)
        if unbalanced:
            raise LedgerImbalance(f"{exc}; unbalanced expenses: {unbalanced}") from exc
        raise
    return balances


def compute_report(
    facts: FactSet,
    viewer_id: UserId,
    group_id: Optional[str] = None,
) -> BalanceReport:
    """
    Run the full pipeline on an explicit fact set.

    Args:
        facts: Facts already scoped for the query
        viewer_id: User the report is for
        group_id: Group scope recorded on the report

    Raises:
        LedgerImbalance: If the facts do not conserve money
    """
    balances = _checked_balances(facts)
    transactions = simplify_debts(balances)
    return assemble_report(viewer_id, balances, transactions, group_id)


class BalanceEngine:
    """
    Entry point for balance queries.

    Example:
        store = InMemoryFactStore()
        store.record_expense(build_expense(
            "dinner", "300", {"u1": "300"}, SplitType.EQUAL, ["u1", "u2", "u3"],
        ))
        engine = BalanceEngine(store)
        report = engine.compute_balances("u2")
        report.you_owe          # Money(100.00)
    """

    def __init__(self, collector: LedgerFactCollector, verbose: bool = False):
        """
        Initialize the engine.

        Args:
            collector: Source of scoped ledger facts
            verbose: Print a one-line summary per query (default: False)
        """
        if not isinstance(collector, LedgerFactCollector):
            raise TypeError(f"collector must implement collect(), got {type(collector).__name__}")
        self.collector = collector
        self.verbose = verbose

    def _collect(self, viewer_id: UserId, group_id: Optional[str]) -> FactSet:
        facts = self.collector.collect(viewer_id, group_id)
        if self.verbose:
            scope = f"group={group_id}" if group_id is not None else "global"
            print(f"[BALANCES] viewer={viewer_id} {scope}: {facts!r}")
        return facts

    def net_balances(self, viewer_id: UserId, group_id: Optional[str] = None) -> NetBalances:
        """Net balance per involved user for the query scope."""
        return _checked_balances(self._collect(viewer_id, group_id))

    def compute_balances(self, viewer_id: UserId, group_id: Optional[str] = None) -> BalanceReport:
        """
        Compute the viewer's balance report.

        Args:
            viewer_id: User the report is for
            group_id: Restrict to one group, or None for global scope

        Returns:
            BalanceReport with you_owe, you_are_owed and simplified transactions

        Raises:
            DataUnavailable: If facts cannot be retrieved
            LedgerImbalance: If the facts do not conserve money
        """
        report = compute_report(self._collect(viewer_id, group_id), viewer_id, group_id)
        if self.verbose:
            print(
                f"[BALANCES] viewer={viewer_id}: owes {report.you_owe}, "
                f"owed {report.you_are_owed}, {len(report.simplified_transactions)} transactions"
            )
        return report

    def friend_balance(self, viewer_id: UserId, friend_id: UserId) -> Money:
        """
        Balance between the viewer and one other user, across all groups.

        Returns:
            Positive if the friend owes the viewer, negative otherwise
        """
        facts = self._collect(viewer_id, None).filter_between(viewer_id, friend_id)
        return pairwise_balance(facts, viewer_id, friend_id)
