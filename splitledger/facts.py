"""
facts.py - Ledger fact retrieval for balance queries

Provides the boundary through which the engine receives ledger facts.

Classes:
- LedgerFactCollector: Protocol defining the retrieval interface
- InMemoryFactStore: Dict-backed collector holding expenses and settlements

A collector returns a FactSet scoped by (viewer, optional group):
- group scope: every expense in the group, plus COMPLETED settlements tagged
  with the group
- global scope: every expense the viewer takes part in or that belongs to a
  group the viewer is a member of, plus COMPLETED settlements the viewer
  sent or received

Collectors must not silently drop records. Retrieval failures are raised as
DataUnavailable.
"""

from __future__ import annotations
from typing import Dict, List, Mapping, Optional, Protocol, Set, Iterable, runtime_checkable

from .core import (
    Money, MoneyLike, UserId,
    Expense, Settlement, SettlementStatus, FactSet,
    InvalidMoney,
)


@runtime_checkable
class LedgerFactCollector(Protocol):
    """
    Protocol for ledger fact sources.

    Implementations must provide collect(). Any retrieval failure must be
    raised as DataUnavailable; the engine propagates it without retrying.
    """

    def collect(self, viewer_id: UserId, group_id: Optional[str] = None) -> FactSet:
        """Return every fact in the (viewer, group) scope."""
        ...


class InMemoryFactStore:
    """
    Fact collector backed by in-memory dictionaries.

    Records expenses and settlements and answers scoped collect() queries.
    Not thread-safe. Each thread should keep its own store.

    Example:
        store = InMemoryFactStore()
        store.add_group_member("trip", "alice")
        store.record_expense(build_expense(...))
        store.record_settlement("s1", "bob", "alice", "50.00", group_id="trip")
        facts = store.collect("alice", group_id="trip")
    """

    def __init__(
        self,
        group_members: Optional[Mapping[str, Iterable[UserId]]] = None,
        verbose: bool = False,
    ):
        """
        Initialize an empty store.

        Args:
            group_members: Optional initial membership, group_id -> user IDs
            verbose: Print warnings for coerced amounts (default: False)
        """
        self._expenses: Dict[str, Expense] = {}
        self._settlements: Dict[str, Settlement] = {}
        self._group_members: Dict[str, Set[UserId]] = {}
        self.verbose = verbose

        if group_members:
            for group_id, members in group_members.items():
                for user_id in members:
                    self.add_group_member(group_id, user_id)

    # ========================================================================
    # RECORDING
    # ========================================================================

    def add_group_member(self, group_id: str, user_id: UserId) -> None:
        """Register a user as a member of a group."""
        self._group_members.setdefault(group_id, set()).add(user_id)

    def group_members(self, group_id: str) -> Set[UserId]:
        return set(self._group_members.get(group_id, ()))

    def record_expense(self, expense: Expense) -> Expense:
        """
        Store an expense.

        Raises:
            ValueError: If an expense with the same ID already exists
        """
        if expense.id in self._expenses:
            raise ValueError(f"Expense already recorded: {expense.id}")
        self._expenses[expense.id] = expense
        return expense

    def record_settlement(
        self,
        settlement_id: str,
        from_user_id: UserId,
        to_user_id: UserId,
        amount: MoneyLike,
        group_id: Optional[str] = None,
        status: SettlementStatus = SettlementStatus.COMPLETED,
    ) -> Settlement:
        """
        Store a settlement, normalizing its amount to Money.

        A non-finite or unparseable amount is coerced to zero and reported as
        a warning when verbose.

        Raises:
            ValueError: If the ID already exists or the record is malformed
        """
        if settlement_id in self._settlements:
            raise ValueError(f"Settlement already recorded: {settlement_id}")
        try:
            money = Money.parse(amount)
        except InvalidMoney as exc:
            if self.verbose:
                print(f"⚠️  INVALID AMOUNT for settlement {settlement_id}: {exc}; using 0.00")
            money = Money.zero()
        settlement = Settlement(
            id=settlement_id,
            from_user_id=from_user_id,
            to_user_id=to_user_id,
            amount=money,
            group_id=group_id,
            status=status,
        )
        self._settlements[settlement_id] = settlement
        return settlement

    def _transition(self, settlement_id: str, status: SettlementStatus) -> Settlement:
        if settlement_id not in self._settlements:
            raise KeyError(f"Settlement not found: {settlement_id}")
        updated = self._settlements[settlement_id].with_status(status)
        self._settlements[settlement_id] = updated
        return updated

    def complete_settlement(self, settlement_id: str) -> Settlement:
        """Mark a PENDING settlement as COMPLETED."""
        return self._transition(settlement_id, SettlementStatus.COMPLETED)

    def cancel_settlement(self, settlement_id: str) -> Settlement:
        """
        Cancel a settlement.

        Removes it from future computations; reports already returned are
        unaffected.
        """
        return self._transition(settlement_id, SettlementStatus.CANCELLED)

    # ========================================================================
    # QUERIES
    # ========================================================================

    def get_expense(self, expense_id: str) -> Expense:
        return self._expenses[expense_id]

    def get_settlement(self, settlement_id: str) -> Settlement:
        return self._settlements[settlement_id]

    def expenses(self) -> List[Expense]:
        """All expenses, in recording order."""
        return list(self._expenses.values())

    def settlements(self) -> List[Settlement]:
        """All settlements regardless of status, in recording order."""
        return list(self._settlements.values())

    def _expense_in_scope(self, expense: Expense, viewer_id: UserId, group_id: Optional[str]) -> bool:
        if group_id is not None:
            return expense.group_id == group_id
        if expense.involves(viewer_id):
            return True
        return (
            expense.group_id is not None
            and viewer_id in self._group_members.get(expense.group_id, ())
        )

    def _settlement_in_scope(self, settlement: Settlement, viewer_id: UserId, group_id: Optional[str]) -> bool:
        if not settlement.is_completed:
            return False
        if group_id is not None:
            return settlement.group_id == group_id
        return settlement.involves(viewer_id)

    def collect(self, viewer_id: UserId, group_id: Optional[str] = None) -> FactSet:
        """
        Return the facts in scope for a balance query.

        Args:
            viewer_id: User the query is made for
            group_id: Restrict to one group, or None for global scope

        Returns:
            FactSet with payments/obligations of in-scope expenses and
            COMPLETED settlements in scope
        """
        expenses = [
            e for e in self._expenses.values()
            if self._expense_in_scope(e, viewer_id, group_id)
        ]
        settlements = [
            s for s in self._settlements.values()
            if self._settlement_in_scope(s, viewer_id, group_id)
        ]
        return FactSet.from_expenses(expenses, settlements)

    def __repr__(self):
        return (
            f"InMemoryFactStore({len(self._expenses)} expenses, "
            f"{len(self._settlements)} settlements, {len(self._group_members)} groups)"
        )
