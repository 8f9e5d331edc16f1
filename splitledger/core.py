"""
Core types for the shared-expense balance engine.

This module provides the foundational data structures used by every other module:
1. Money: fixed-precision decimal amount (2 places, round-half-up)
2. Immutable ledger facts: ExpensePayment, ExpenseObligation, Settlement, Expense
3. FactSet: the explicit, immutable input to a balance computation
4. SimplifiedTransaction: one suggested payment produced by debt simplification
5. Exceptions: LedgerError and the engine's error taxonomy

Nothing in this module performs I/O or holds shared mutable state.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from decimal import Decimal, ROUND_HALF_UP, ROUND_FLOOR, InvalidOperation, getcontext
from enum import Enum
import math
from typing import Dict, List, Optional, Sequence, Tuple, Union, Iterable, FrozenSet


# ============================================================================
# DECIMAL CONTEXT CONFIGURATION
# ============================================================================
#
# Balance folds must be exact. The global context is configured once at
# module load; Money quantizes explicitly with its own rounding mode, so the
# context rounding only affects intermediate divisions (allocation, ratios).
#
# PRECONDITION: No other code should modify the global Decimal context.
# If thread-local contexts are needed, use decimal.localcontext().
#
_ENGINE_DECIMAL_CONTEXT = getcontext()
_ENGINE_DECIMAL_CONTEXT.prec = 50


# ============================================================================
# CONSTANTS
# ============================================================================

# Minor units per major unit are fixed at 2 decimal places (cents).
MONEY_PLACES = 2
MONEY_QUANTUM = Decimal(10) ** -MONEY_PLACES
MONEY_ROUNDING = ROUND_HALF_UP

# Half a minor unit. Amounts with absolute value at or below this are zero.
MONEY_EPSILON = Decimal("0.005")


# ============================================================================
# TYPE ALIASES
# ============================================================================

UserId = str

# Mapping from user ID to signed net balance.
# Positive = owed money (creditor), negative = owes money (debtor).
NetBalances = Dict[UserId, 'Money']

MoneyLike = Union['Money', Decimal, int, float, str]


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LedgerError(Exception):
    """Base exception for all balance-engine errors."""
    pass


class DataUnavailable(LedgerError):
    """Raised when ledger facts for a query cannot be retrieved."""
    pass


class LedgerImbalance(LedgerError):
    """Raised when balances do not sum to zero (corrupt upstream facts)."""
    pass


class InvalidMoney(LedgerError):
    """Raised when an amount is non-finite or cannot be parsed."""
    pass


# ============================================================================
# ENUMS
# ============================================================================

class SettlementStatus(Enum):
    """
    Lifecycle state of a recorded settlement.

    PENDING: Recorded but not yet confirmed; ignored by balance computation.
    COMPLETED: Confirmed payment; participates in balance computation.
    CANCELLED: Withdrawn; ignored by all future computations.
    """
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


# Allowed status transitions (source -> permitted targets)
SETTLEMENT_TRANSITIONS: Dict[SettlementStatus, FrozenSet[SettlementStatus]] = {
    SettlementStatus.PENDING: frozenset({SettlementStatus.COMPLETED, SettlementStatus.CANCELLED}),
    SettlementStatus.COMPLETED: frozenset({SettlementStatus.CANCELLED}),
    SettlementStatus.CANCELLED: frozenset(),
}


# ============================================================================
# MONEY
# ============================================================================

@dataclass(frozen=True, slots=True)
class Money:
    """
    An exact decimal amount with a fixed scale of 2.

    The stored amount is always quantized to MONEY_QUANTUM using
    round-half-up, so arithmetic between Money values never drifts.

    Use Money.parse() for strict construction from external input and
    Money.of() for the lenient variant that coerces bad input to zero.

    Example:
        Money.parse("10.005")          # Money(10.01)
        Money.of(float("nan"))         # Money(0.00)
        Money.parse(100).split_evenly(3)
        # [Money(33.34), Money(33.33), Money(33.33)]
    """
    amount: Decimal

    def __post_init__(self):
        value = self.amount
        if isinstance(value, int) and not isinstance(value, bool):
            value = Decimal(value)
        if not isinstance(value, Decimal):
            raise InvalidMoney(f"Money amount must be Decimal, got {type(self.amount)}")
        if not value.is_finite():
            raise InvalidMoney(f"Money amount must be finite, got {value}")
        try:
            quantized = value.quantize(MONEY_QUANTUM, rounding=MONEY_ROUNDING)
        except InvalidOperation:
            raise InvalidMoney(f"Money amount out of range: {value}") from None
        if quantized == 0:
            # Drop negative zero
            quantized = abs(quantized)
        object.__setattr__(self, 'amount', quantized)

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def zero(cls) -> Money:
        return cls(Decimal(0))

    @classmethod
    def from_minor_units(cls, minor_units: int) -> Money:
        """Build from an integer count of minor units (cents)."""
        return cls(Decimal(minor_units).scaleb(-MONEY_PLACES))

    @classmethod
    def parse(cls, value: MoneyLike) -> Money:
        """
        Strictly convert external input to Money.

        Floats are converted through str() so 0.1 becomes exactly 0.10.

        Raises:
            InvalidMoney: If the value is non-finite, unparseable, or of an
                          unsupported type.
        """
        if isinstance(value, Money):
            return value
        if isinstance(value, bool):
            raise InvalidMoney(f"Cannot convert bool to Money: {value!r}")
        if isinstance(value, Decimal):
            decimal_value = value
        elif isinstance(value, int):
            decimal_value = Decimal(value)
        elif isinstance(value, float):
            if not math.isfinite(value):
                raise InvalidMoney(f"Money amount must be finite, got {value}")
            decimal_value = Decimal(str(value))
        elif isinstance(value, str):
            try:
                decimal_value = Decimal(value.strip())
            except InvalidOperation:
                raise InvalidMoney(f"Cannot parse Money from {value!r}") from None
        else:
            raise InvalidMoney(f"Cannot convert {type(value).__name__} to Money")
        return cls(decimal_value)

    @classmethod
    def of(cls, value: MoneyLike) -> Money:
        """
        Leniently convert external input to Money.

        Non-finite or unparseable input is coerced to zero. This is a lossy
        fallback; callers that need to report the coercion should use
        parse() and handle InvalidMoney themselves.
        """
        try:
            return cls.parse(value)
        except InvalidMoney:
            return cls.zero()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def minor_units(self) -> int:
        """Amount as an integer number of minor units."""
        return int(self.amount.scaleb(MONEY_PLACES))

    def sign(self) -> int:
        """Return 1, -1 or 0, treating |amount| <= MONEY_EPSILON as zero."""
        if self.amount > MONEY_EPSILON:
            return 1
        if self.amount < -MONEY_EPSILON:
            return -1
        return 0

    def is_zero(self) -> bool:
        return self.sign() == 0

    def is_positive(self) -> bool:
        return self.sign() > 0

    def is_negative(self) -> bool:
        return self.sign() < 0

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return Money(self.amount + other.amount)

    def __radd__(self, other) -> Money:
        # Lets sum() start from the integer 0
        if isinstance(other, int) and other == 0:
            return self
        return NotImplemented

    def __sub__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return Money(self.amount - other.amount)

    def __neg__(self) -> Money:
        return Money(-self.amount)

    def __abs__(self) -> Money:
        return Money(abs(self.amount))

    def __lt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.amount <= other.amount

    def __gt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.amount > other.amount

    def __ge__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.amount >= other.amount

    # ------------------------------------------------------------------
    # Allocation
    # ------------------------------------------------------------------

    def allocate(self, weights: Sequence[Union[Decimal, int, float, str]]) -> List[Money]:
        """
        Split this amount into parts proportional to weights.

        Uses largest-remainder distribution over minor units, so the parts
        always sum exactly to this amount. Leftover minor units go to the
        parts with the largest fractional remainder; ties go to the earlier
        position.

        Args:
            weights: Non-negative weights with a positive total

        Returns:
            One Money per weight, in input order

        Raises:
            ValueError: If weights are empty, negative, or sum to zero
        """
        if not weights:
            raise ValueError("Cannot allocate across zero weights")
        decimal_weights = [
            w if isinstance(w, Decimal) else Decimal(str(w)) for w in weights
        ]
        if any(not w.is_finite() or w < 0 for w in decimal_weights):
            raise ValueError(f"Allocation weights must be finite and non-negative: {weights}")
        total_weight = sum(decimal_weights, Decimal(0))
        if total_weight == 0:
            raise ValueError("Allocation weights must not sum to zero")

        total_units = self.minor_units
        negative = total_units < 0
        total_units = abs(total_units)

        shares: List[int] = []
        remainders: List[Tuple[Decimal, int]] = []
        for index, weight in enumerate(decimal_weights):
            exact = Decimal(total_units) * weight / total_weight
            whole = int(exact.to_integral_value(rounding=ROUND_FLOOR))
            shares.append(whole)
            remainders.append((exact - whole, index))

        leftover = total_units - sum(shares)
        # Largest fractional part first, earlier index on ties
        for _, index in sorted(remainders, key=lambda r: (-r[0], r[1]))[:leftover]:
            shares[index] += 1

        sign = -1 if negative else 1
        return [Money.from_minor_units(sign * units) for units in shares]

    def split_evenly(self, parts: int) -> List[Money]:
        """Split into `parts` near-equal amounts; earlier parts get the extra cents."""
        if parts <= 0:
            raise ValueError(f"Cannot split into {parts} parts")
        return self.allocate([1] * parts)

    def __str__(self) -> str:
        return str(self.amount)

    def __format__(self, spec: str) -> str:
        return format(str(self), spec)

    def __repr__(self) -> str:
        return f"Money({self.amount})"


def sum_money(amounts: Iterable[Money]) -> Money:
    """Sum Money values, returning Money.zero() for an empty iterable."""
    return sum(amounts, Money.zero())


# ============================================================================
# LEDGER FACTS
# ============================================================================

def _require_id(value: str, label: str) -> None:
    if not value or not str(value).strip():
        raise ValueError(f"{label} cannot be empty")


@dataclass(frozen=True, slots=True)
class ExpensePayment:
    """
    One payer's contribution to one expense.

    Attributes:
        expense_id: Expense the payment belongs to
        user_id: User who paid
        amount_paid: Amount paid (non-negative)
    """
    expense_id: str
    user_id: UserId
    amount_paid: Money

    def __post_init__(self):
        _require_id(self.expense_id, "ExpensePayment expense_id")
        _require_id(self.user_id, "ExpensePayment user_id")
        if not isinstance(self.amount_paid, Money):
            raise ValueError(f"amount_paid must be Money, got {type(self.amount_paid)}")
        if self.amount_paid.is_negative():
            raise ValueError(f"amount_paid cannot be negative: {self.amount_paid}")


@dataclass(frozen=True, slots=True)
class ExpenseObligation:
    """
    One participant's share of one expense.

    Attributes:
        expense_id: Expense the obligation belongs to
        user_id: User who owes the share
        amount_owed: Share owed (non-negative)
    """
    expense_id: str
    user_id: UserId
    amount_owed: Money

    def __post_init__(self):
        _require_id(self.expense_id, "ExpenseObligation expense_id")
        _require_id(self.user_id, "ExpenseObligation user_id")
        if not isinstance(self.amount_owed, Money):
            raise ValueError(f"amount_owed must be Money, got {type(self.amount_owed)}")
        if self.amount_owed.is_negative():
            raise ValueError(f"amount_owed cannot be negative: {self.amount_owed}")


@dataclass(frozen=True, slots=True)
class Settlement:
    """
    A recorded real-world payment from one user to another.

    Only COMPLETED settlements participate in balance computation.
    Records are immutable; use with_status() to produce the transitioned copy.

    Attributes:
        id: Settlement identifier
        from_user_id: User who paid
        to_user_id: User who received the payment
        amount: Amount paid (non-negative; zero only after coercion)
        group_id: Group the settlement is tagged with, or None for direct
        status: Lifecycle state
    """
    id: str
    from_user_id: UserId
    to_user_id: UserId
    amount: Money
    group_id: Optional[str] = None
    status: SettlementStatus = SettlementStatus.COMPLETED

    def __post_init__(self):
        _require_id(self.id, "Settlement id")
        _require_id(self.from_user_id, "Settlement from_user_id")
        _require_id(self.to_user_id, "Settlement to_user_id")
        if self.from_user_id == self.to_user_id:
            raise ValueError("Settlement from_user_id and to_user_id must be different")
        if not isinstance(self.amount, Money):
            raise ValueError(f"Settlement amount must be Money, got {type(self.amount)}")
        if self.amount.is_negative():
            raise ValueError(f"Settlement amount cannot be negative: {self.amount}")
        if not isinstance(self.status, SettlementStatus):
            raise ValueError(f"Settlement status must be SettlementStatus, got {self.status!r}")

    @property
    def is_completed(self) -> bool:
        return self.status is SettlementStatus.COMPLETED

    def involves(self, user_id: UserId) -> bool:
        return user_id in (self.from_user_id, self.to_user_id)

    def with_status(self, status: SettlementStatus) -> Settlement:
        """
        Return a copy transitioned to `status`.

        Raises:
            ValueError: If the transition is not permitted
        """
        if status not in SETTLEMENT_TRANSITIONS[self.status]:
            raise ValueError(
                f"Settlement {self.id}: cannot transition {self.status.value} -> {status.value}"
            )
        return replace(self, status=status)


@dataclass(frozen=True, slots=True)
class Expense:
    """
    A shared expense with its payers and obligors.

    The sums of payments and of obligations must both equal `total`.

    Attributes:
        id: Expense identifier
        total: Total amount of the expense
        payments: Who paid how much
        obligations: Who owes how much
        group_id: Group the expense belongs to, or None for a direct expense
        participant_ids: Users the expense was shared with
    """
    id: str
    total: Money
    payments: Tuple[ExpensePayment, ...]
    obligations: Tuple[ExpenseObligation, ...]
    group_id: Optional[str] = None
    participant_ids: Tuple[UserId, ...] = ()

    def __post_init__(self):
        _require_id(self.id, "Expense id")
        object.__setattr__(self, 'payments', tuple(self.payments))
        object.__setattr__(self, 'obligations', tuple(self.obligations))
        object.__setattr__(self, 'participant_ids', tuple(self.participant_ids))
        for record in self.payments + self.obligations:
            if record.expense_id != self.id:
                raise ValueError(
                    f"Expense {self.id}: record belongs to expense {record.expense_id}"
                )
        paid = sum_money(p.amount_paid for p in self.payments)
        owed = sum_money(o.amount_owed for o in self.obligations)
        if paid != self.total:
            raise ValueError(f"Expense {self.id}: payments sum to {paid}, expected {self.total}")
        if owed != self.total:
            raise ValueError(f"Expense {self.id}: obligations sum to {owed}, expected {self.total}")

    def involves(self, user_id: UserId) -> bool:
        """True if the user paid, owes, or is listed as a participant."""
        return (
            user_id in self.participant_ids
            or any(p.user_id == user_id for p in self.payments)
            or any(o.user_id == user_id for o in self.obligations)
        )


@dataclass(frozen=True, slots=True)
class FactSet:
    """
    Immutable collection of ledger facts for one balance query.

    Attributes:
        payments: Expense payments in scope
        obligations: Expense obligations in scope
        settlements: Settlements in scope (normally COMPLETED only)
    """
    payments: Tuple[ExpensePayment, ...] = ()
    obligations: Tuple[ExpenseObligation, ...] = ()
    settlements: Tuple[Settlement, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'payments', tuple(self.payments))
        object.__setattr__(self, 'obligations', tuple(self.obligations))
        object.__setattr__(self, 'settlements', tuple(self.settlements))

    @classmethod
    def from_expenses(
        cls,
        expenses: Iterable[Expense],
        settlements: Iterable[Settlement] = (),
    ) -> FactSet:
        payments: List[ExpensePayment] = []
        obligations: List[ExpenseObligation] = []
        for expense in expenses:
            payments.extend(expense.payments)
            obligations.extend(expense.obligations)
        return cls(tuple(payments), tuple(obligations), tuple(settlements))

    def is_empty(self) -> bool:
        return not self.payments and not self.obligations and not self.settlements

    def expense_ids(self) -> List[str]:
        """Distinct expense IDs, in first-seen order."""
        seen: Dict[str, None] = {}
        for record in self.payments + self.obligations:
            seen.setdefault(record.expense_id, None)
        return list(seen)

    def filter_between(self, user_id: UserId, other_id: UserId) -> FactSet:
        """
        Restrict to facts shared by two users.

        Keeps every payment and obligation of expenses both users appear in
        (as payer or obligor) and the settlements between the two of them.
        """
        members: Dict[str, set] = {}
        for record in self.payments + self.obligations:
            members.setdefault(record.expense_id, set()).add(record.user_id)
        shared = {eid for eid, users in members.items() if {user_id, other_id} <= users}
        return FactSet(
            payments=tuple(p for p in self.payments if p.expense_id in shared),
            obligations=tuple(o for o in self.obligations if o.expense_id in shared),
            settlements=tuple(
                s for s in self.settlements
                if {s.from_user_id, s.to_user_id} == {user_id, other_id}
            ),
        )

    def __repr__(self) -> str:
        return (
            f"FactSet({len(self.payments)} payments, {len(self.obligations)} obligations, "
            f"{len(self.settlements)} settlements)"
        )


# ============================================================================
# DERIVED RESULTS
# ============================================================================

@dataclass(frozen=True, slots=True)
class SimplifiedTransaction:
    """
    A suggested payment: from_user_id should pay to_user_id `amount`.

    Attributes:
        from_user_id: Debtor who pays
        to_user_id: Creditor who receives
        amount: Strictly positive amount
    """
    from_user_id: UserId
    to_user_id: UserId
    amount: Money

    def __post_init__(self):
        if self.from_user_id == self.to_user_id:
            raise ValueError("Transaction from_user_id and to_user_id must be different")
        if not isinstance(self.amount, Money):
            raise ValueError(f"Transaction amount must be Money, got {type(self.amount)}")
        if not self.amount.is_positive():
            raise ValueError(f"Transaction amount must be positive, got {self.amount}")

    def to_dict(self) -> Dict[str, object]:
        return {
            "fromUserId": self.from_user_id,
            "toUserId": self.to_user_id,
            "amount": self.amount.amount,
        }

    def __repr__(self) -> str:
        return f"SimplifiedTransaction({self.from_user_id}→{self.to_user_id}: {self.amount})"
