"""
balances.py - Net balance accumulation

Folds a FactSet into per-user net balances:

    balance(u) = Σ paid(u) - Σ owed(u) + Σ settled_out(u) - Σ settled_in(u)

Positive = the user is owed money; negative = the user owes money.

INVARIANT: Σ_u balance(u) = 0. Every payment term has a matching obligation
term within its expense and every settlement is symmetric, so money is never
created or destroyed. check_conservation() enforces this.

All functions here are pure.
"""

from __future__ import annotations
from collections import defaultdict
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from .core import (
    Money, UserId, NetBalances, FactSet,
    LedgerImbalance,
    sum_money,
)


def accumulate_balances(facts: FactSet) -> NetBalances:
    """
    Compute every involved user's net balance.

    A completed settlement moves both parties toward zero: the payer's
    balance rises and the receiver's falls by the settled amount. Paying
    more than is owed is accepted and flips the payer's sign. Settlements
    that are not COMPLETED are ignored.

    Args:
        facts: Payments, obligations and settlements in scope

    Returns:
        user_id -> non-zero balance, ordered by user_id
    """
    balances: Dict[UserId, Money] = defaultdict(Money.zero)

    for payment in facts.payments:
        balances[payment.user_id] += payment.amount_paid

    for obligation in facts.obligations:
        balances[obligation.user_id] -= obligation.amount_owed

    for settlement in facts.settlements:
        if not settlement.is_completed:
            continue
        balances[settlement.from_user_id] += settlement.amount
        balances[settlement.to_user_id] -= settlement.amount

    return {
        user_id: balances[user_id]
        for user_id in sorted(balances)
        if not balances[user_id].is_zero()
    }


def check_conservation(balances: NetBalances) -> Money:
    """
    Verify that balances sum to zero.

    Returns:
        The (zero) sum

    Raises:
        LedgerImbalance: If the sum is not zero within epsilon
    """
    net = sum_money(balances.values())
    if not net.is_zero():
        raise LedgerImbalance(f"Net balances sum to {net}, expected 0.00")
    return net


def find_unbalanced_expenses(facts: FactSet) -> List[str]:
    """Expense IDs whose payments and obligations do not sum to the same amount."""
    paid: Dict[str, Money] = defaultdict(Money.zero)
    owed: Dict[str, Money] = defaultdict(Money.zero)
    for payment in facts.payments:
        paid[payment.expense_id] += payment.amount_paid
    for obligation in facts.obligations:
        owed[obligation.expense_id] += obligation.amount_owed
    return [eid for eid in facts.expense_ids() if paid[eid] != owed[eid]]


def user_summary(balances: NetBalances, user_id: UserId) -> Tuple[Money, Money]:
    """
    Split one user's raw net balance into (owes, is_owed).

    At most one of the two is non-zero.
    """
    balance = balances.get(user_id, Money.zero())
    if balance.is_negative():
        return -balance, Money.zero()
    return Money.zero(), balance


def is_settled(balances: NetBalances, tolerance: Optional[Money] = None) -> bool:
    """True if every balance is zero (or within `tolerance` of zero)."""
    if tolerance is None:
        return all(b.is_zero() for b in balances.values())
    return all(abs(b) <= tolerance for b in balances.values())


def pairwise_balance(facts: FactSet, user_id: UserId, other_id: UserId) -> Money:
    """
    Balance between two users only.

    For each expense both users appear in, `other` owes `user` their share
    weighted by the fraction of the total that `user` paid, and vice versa.
    Completed settlements between the two are then applied. Intermediate
    values are kept exact; the result is rounded once at the end.

    Returns:
        Positive if `other` owes `user`, negative if `user` owes `other`
    """
    if user_id == other_id:
        raise ValueError("pairwise_balance requires two different users")

    paid: Dict[str, Dict[UserId, Decimal]] = defaultdict(lambda: defaultdict(Decimal))
    owed: Dict[str, Dict[UserId, Decimal]] = defaultdict(lambda: defaultdict(Decimal))
    for payment in facts.payments:
        paid[payment.expense_id][payment.user_id] += payment.amount_paid.amount
    for obligation in facts.obligations:
        owed[obligation.expense_id][obligation.user_id] += obligation.amount_owed.amount

    balance = Decimal(0)
    for expense_id in facts.expense_ids():
        total_paid = sum(paid[expense_id].values(), Decimal(0))
        if total_paid == 0:
            continue
        user_paid = paid[expense_id].get(user_id, Decimal(0))
        other_paid = paid[expense_id].get(other_id, Decimal(0))
        user_owed = owed[expense_id].get(user_id, Decimal(0))
        other_owed = owed[expense_id].get(other_id, Decimal(0))
        if user_paid > 0 and other_owed > 0:
            balance += other_owed * user_paid / total_paid
        if other_paid > 0 and user_owed > 0:
            balance -= user_owed * other_paid / total_paid

    for settlement in facts.settlements:
        if not settlement.is_completed:
            continue
        if settlement.from_user_id == user_id and settlement.to_user_id == other_id:
            balance += settlement.amount.amount
        elif settlement.from_user_id == other_id and settlement.to_user_id == user_id:
            balance -= settlement.amount.amount

    return Money(balance)
