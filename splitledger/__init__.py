"""
splitledger - Shared-expense balance and debt-simplification engine

Turns expense payments, expense obligations and completed settlements into
per-user net balances and a short list of suggested payments.

Usage:
    from splitledger import (
        BalanceEngine, InMemoryFactStore, SplitType, build_expense,
    )

    store = InMemoryFactStore()
    store.record_expense(build_expense(
        "dinner", "300.00", {"u1": "300.00"}, SplitType.EQUAL, ["u1", "u2", "u3"],
    ))
    store.record_settlement("s1", "u2", "u1", "100.00")

    engine = BalanceEngine(store)
    report = engine.compute_balances("u1")
    report.to_dict()
    # {'youOwe': Decimal('0.00'), 'youAreOwed': Decimal('100.00'),
    #  'simplifiedTransactions': [{'fromUserId': 'u3', 'toUserId': 'u1',
    #                              'amount': Decimal('100.00')}]}
"""

# Core types
from .core import (
    Money,
    MoneyLike,
    UserId,
    NetBalances,
    ExpensePayment,
    ExpenseObligation,
    Expense,
    Settlement,
    SettlementStatus,
    SETTLEMENT_TRANSITIONS,
    FactSet,
    SimplifiedTransaction,
    sum_money,
    LedgerError,
    DataUnavailable,
    LedgerImbalance,
    InvalidMoney,
    MONEY_PLACES,
    MONEY_QUANTUM,
    MONEY_ROUNDING,
    MONEY_EPSILON,
)

# Expense construction
from .splits import (
    SplitType,
    allocate_obligations,
    build_expense,
)

# Fact retrieval
from .facts import (
    LedgerFactCollector,
    InMemoryFactStore,
)

# Balances
from .balances import (
    accumulate_balances,
    check_conservation,
    find_unbalanced_expenses,
    user_summary,
    is_settled,
    pairwise_balance,
)

# Simplification
from .simplify import simplify_debts

# Reports
from .report import BalanceReport, assemble_report

# Engine
from .engine import BalanceEngine, compute_report


__all__ = [
    # Core
    'Money', 'MoneyLike', 'UserId', 'NetBalances',
    'ExpensePayment', 'ExpenseObligation', 'Expense',
    'Settlement', 'SettlementStatus', 'SETTLEMENT_TRANSITIONS',
    'FactSet', 'SimplifiedTransaction', 'sum_money',
    'LedgerError', 'DataUnavailable', 'LedgerImbalance', 'InvalidMoney',
    'MONEY_PLACES', 'MONEY_QUANTUM', 'MONEY_ROUNDING', 'MONEY_EPSILON',
    # Expense construction
    'SplitType', 'allocate_obligations', 'build_expense',
    # Fact retrieval
    'LedgerFactCollector', 'InMemoryFactStore',
    # Balances
    'accumulate_balances', 'check_conservation', 'find_unbalanced_expenses',
    'user_summary', 'is_settled', 'pairwise_balance',
    # Simplification
    'simplify_debts',
    # Reports
    'BalanceReport', 'assemble_report',
    # Engine
    'BalanceEngine', 'compute_report',
]

__version__ = '0.1.0'
