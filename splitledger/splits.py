"""
splits.py - Expense construction

Builds an Expense from a total, its payers, and a split description.

Split types:
- EQUAL: total divided evenly among participants
- EXACT: explicit amount per user
- PERCENTAGE: percentage per user (must sum to 100)
- SHARE: relative share weights per user

All allocations are exact: obligations always sum to the expense total, with
leftover minor units assigned by Money.allocate().
"""

from __future__ import annotations
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Dict, List, Mapping, Optional, Sequence, Union

from .core import (
    Money, MoneyLike, UserId,
    Expense, ExpensePayment, ExpenseObligation,
    sum_money,
)


class SplitType(Enum):
    """How an expense total is divided into obligations."""
    EQUAL = "EQUAL"
    EXACT = "EXACT"
    PERCENTAGE = "PERCENTAGE"
    SHARE = "SHARE"


HUNDRED = Decimal(100)


def _to_weight(value: Union[Decimal, int, float, str], label: str) -> Decimal:
    try:
        weight = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Invalid {label}: {value!r}") from None
    if not weight.is_finite() or weight < 0:
        raise ValueError(f"Invalid {label}: {value!r}")
    return weight


def _dedupe(user_ids: Sequence[UserId]) -> List[UserId]:
    return list(dict.fromkeys(user_ids))


def allocate_obligations(
    total: Money,
    split_type: SplitType,
    participant_ids: Sequence[UserId],
    splits: Optional[Mapping[UserId, Union[MoneyLike, Decimal]]] = None,
) -> Dict[UserId, Money]:
    """
    Divide `total` into per-user shares.

    Args:
        total: Expense total
        split_type: How to divide it
        participant_ids: Users sharing the expense (used by EQUAL)
        splits: Per-user amounts (EXACT), percentages (PERCENTAGE) or
                weights (SHARE)

    Returns:
        Mapping user_id -> share, in participant/split order, summing to total

    Raises:
        ValueError: If the split description is inconsistent with the total
        InvalidMoney: If an EXACT amount cannot be parsed
    """
    if split_type is SplitType.EQUAL:
        users = _dedupe(participant_ids)
        if not users:
            raise ValueError("EQUAL split requires at least one participant")
        return dict(zip(users, total.split_evenly(len(users))))

    if not splits:
        raise ValueError(f"{split_type.value} split requires per-user splits")
    users = list(splits)

    if split_type is SplitType.EXACT:
        shares = {uid: Money.parse(splits[uid]) for uid in users}
        if any(share.is_negative() for share in shares.values()):
            raise ValueError("EXACT split amounts cannot be negative")
        allocated = sum_money(shares.values())
        if allocated != total:
            raise ValueError(f"EXACT splits sum to {allocated}, expected {total}")
        return shares

    if split_type is SplitType.PERCENTAGE:
        weights = [_to_weight(splits[uid], "percentage") for uid in users]
        if sum(weights, Decimal(0)) != HUNDRED:
            raise ValueError(f"Percentages must sum to 100, got {sum(weights, Decimal(0))}")
        return dict(zip(users, total.allocate(weights)))

    if split_type is SplitType.SHARE:
        weights = [_to_weight(splits[uid], "share") for uid in users]
        if sum(weights, Decimal(0)) <= 0:
            raise ValueError("Total shares must be positive")
        return dict(zip(users, total.allocate(weights)))

    raise ValueError(f"Unknown split type: {split_type!r}")


def build_expense(
    expense_id: str,
    total: MoneyLike,
    payers: Mapping[UserId, MoneyLike],
    split_type: SplitType,
    participant_ids: Sequence[UserId] = (),
    splits: Optional[Mapping[UserId, Union[MoneyLike, Decimal]]] = None,
    group_id: Optional[str] = None,
) -> Expense:
    """
    Build a validated Expense.

    Payers and obligors are always added to the participant list.

    Args:
        expense_id: Expense identifier
        total: Total amount
        payers: user_id -> amount paid; must sum to total
        split_type: How the total is divided
        participant_ids: Users sharing the expense
        splits: Per-user split values (see allocate_obligations)
        group_id: Group the expense belongs to, or None

    Returns:
        An Expense whose payments and obligations both sum to total

    Raises:
        InvalidMoney: If the total or a payer amount cannot be parsed
        ValueError: If payer amounts or splits do not add up

    Example:
        expense = build_expense(
            "dinner", "300", {"u1": "300"}, SplitType.EQUAL, ["u1", "u2", "u3"],
        )
        # obligations: u1 100.00, u2 100.00, u3 100.00
    """
    total_money = Money.parse(total)
    if total_money.is_negative() or total_money.is_zero():
        raise ValueError(f"Expense total must be positive, got {total_money}")
    if not payers:
        raise ValueError("Expense requires at least one payer")

    payments = tuple(
        ExpensePayment(expense_id, uid, Money.parse(amount))
        for uid, amount in payers.items()
    )
    paid = sum_money(p.amount_paid for p in payments)
    if paid != total_money:
        raise ValueError(f"Sum of payers ({paid}) must equal total amount ({total_money})")

    shares = allocate_obligations(total_money, split_type, participant_ids, splits)
    obligations = tuple(
        ExpenseObligation(expense_id, uid, share)
        for uid, share in shares.items()
        if not share.is_zero()
    )

    participants = _dedupe(
        list(participant_ids) + [p.user_id for p in payments] + list(shares)
    )
    return Expense(
        id=expense_id,
        total=total_money,
        payments=payments,
        obligations=obligations,
        group_id=group_id,
        participant_ids=tuple(participants),
    )
