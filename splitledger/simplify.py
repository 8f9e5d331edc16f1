"""
simplify.py - Greedy debt simplification

Reduces a net-balance mapping to a short list of point-to-point payments.

Algorithm (largest debtor pays largest creditor):
1. Partition non-zero balances into creditors and debtors (absolute value)
2. Keep both sides in max-heaps keyed by (amount desc, user_id asc)
3. Repeatedly match the top debtor with the top creditor for
   min(debt, credit), push back whichever side has a remainder
4. Stop when both sides are empty

Every match retires at least one party and the last match retires two, so at
most n - 1 transactions are emitted for n non-zero balances. The result is
not guaranteed to be the global minimum (that problem is NP-hard) but it is
bounded and deterministic.
"""

from __future__ import annotations
from decimal import Decimal
from typing import List, Tuple
import heapq

from .core import (
    Money, UserId, NetBalances, SimplifiedTransaction,
    LedgerImbalance,
    sum_money,
)


# Heap entry: (-amount, user_id). Negated so heapq pops the largest first;
# equal amounts pop in ascending user_id order.
_HeapEntry = Tuple[Decimal, UserId]


def _push(heap: List[_HeapEntry], user_id: UserId, amount: Money) -> None:
    heapq.heappush(heap, (-amount.amount, user_id))


def _pop(heap: List[_HeapEntry]) -> Tuple[UserId, Money]:
    neg_amount, user_id = heapq.heappop(heap)
    return user_id, Money(-neg_amount)


def simplify_debts(balances: NetBalances) -> List[SimplifiedTransaction]:
    """
    Produce suggested payments that bring every balance to zero.

    Args:
        balances: user_id -> signed net balance; must sum to zero

    Returns:
        Transactions in emission order (largest debts settled first)

    Raises:
        LedgerImbalance: If the balances do not sum to zero, including the
                         case of a single unmatched non-zero balance

    Example:
        simplify_debts({"u1": Money.parse(50), "u2": Money.parse(30), "u3": Money.parse(-80)})
        # [u3→u1: 50.00, u3→u2: 30.00]
    """
    net = sum_money(balances.values())
    if not net.is_zero():
        raise LedgerImbalance(
            f"Cannot simplify: balances sum to {net} across {len(balances)} users"
        )

    creditors: List[_HeapEntry] = []
    debtors: List[_HeapEntry] = []
    for user_id, balance in balances.items():
        if balance.is_positive():
            _push(creditors, user_id, balance)
        elif balance.is_negative():
            _push(debtors, user_id, -balance)

    transactions: List[SimplifiedTransaction] = []

    while debtors and creditors:
        debtor_id, debt = _pop(debtors)
        creditor_id, credit = _pop(creditors)

        amount = min(debt, credit)
        transactions.append(SimplifiedTransaction(debtor_id, creditor_id, amount))

        remaining_debt = debt - amount
        remaining_credit = credit - amount
        if not remaining_debt.is_zero():
            _push(debtors, debtor_id, remaining_debt)
        if not remaining_credit.is_zero():
            _push(creditors, creditor_id, remaining_credit)

    if debtors or creditors:
        leftover = [user_id for _, user_id in debtors + creditors]
        raise LedgerImbalance(f"Unmatched balances after simplification: {sorted(leftover)}")

    return transactions
