"""
report.py - Balance report assembly

Packages net balances and simplified transactions into the result returned
to callers, with the viewer's totals:

    you_owe      = Σ amount where viewer is the payer (from_user_id)
    you_are_owed = Σ amount where viewer is the receiver (to_user_id)

Display-name enrichment is left to the caller.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .core import Money, UserId, NetBalances, SimplifiedTransaction, sum_money


@dataclass(frozen=True, slots=True)
class BalanceReport:
    """
    Result of one balance query.

    Attributes:
        viewer_id: User the report was computed for
        group_id: Group scope, or None for global scope
        you_owe: Total the viewer should pay
        you_are_owed: Total the viewer should receive
        simplified_transactions: Suggested payments, in emission order
        net_balances: Net balance per involved user (non-zero only)
    """
    viewer_id: UserId
    group_id: Optional[str]
    you_owe: Money
    you_are_owed: Money
    simplified_transactions: Tuple[SimplifiedTransaction, ...]
    net_balances: Dict[UserId, Money] = field(default_factory=dict)

    def transactions_for(self, user_id: UserId) -> List[SimplifiedTransaction]:
        """Transactions the user pays or receives."""
        return [
            t for t in self.simplified_transactions
            if user_id in (t.from_user_id, t.to_user_id)
        ]

    def to_dict(self) -> Dict[str, Any]:
        """Render the external result contract."""
        return {
            "youOwe": self.you_owe.amount,
            "youAreOwed": self.you_are_owed.amount,
            "simplifiedTransactions": [t.to_dict() for t in self.simplified_transactions],
        }


def assemble_report(
    viewer_id: UserId,
    balances: NetBalances,
    transactions: List[SimplifiedTransaction],
    group_id: Optional[str] = None,
) -> BalanceReport:
    return BalanceReport(
        viewer_id=viewer_id,
        group_id=group_id,
        you_owe=sum_money(t.amount for t in transactions if t.from_user_id == viewer_id),
        you_are_owed=sum_money(t.amount for t in transactions if t.to_user_id == viewer_id),
        simplified_transactions=tuple(transactions),
        net_balances=dict(balances),
    )
