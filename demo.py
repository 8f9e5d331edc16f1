#!/usr/bin/env python3
"""
demo.py - Interactive Tutorial: Shared Expenses Step by Step

A walkthrough of how splitledger turns expenses and settlements into
balances and suggested payments. Press Enter to advance.

WHAT YOU'LL LEARN:
  1-3:  Foundation  - Money, splitting an expense, recording facts
  4-6:  Balances    - Net balances, settlements, simplified payments
  7-8:  Scope       - Group vs global views, friend-to-friend balances

Run:
    python demo.py           # Interactive mode (press Enter for each step)
    python demo.py --quick   # Run all steps without pausing
"""

from dataclasses import dataclass, field
from typing import List
import sys

from splitledger import (
    Money, BalanceEngine, InMemoryFactStore, SettlementStatus, SplitType,
    build_expense, accumulate_balances, check_conservation, simplify_debts,
)


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass
class DemoConfig:
    """Configuration for the tutorial. Modify these to experiment."""
    group_id: str = "lisbon"
    members: List[str] = field(default_factory=lambda: ["alice", "bob", "carol"])
    dinner_total: str = "100.00"
    hotel_total: str = "450.00"
    taxi_total: str = "37.50"
    settle_up_amount: str = "20.00"


CONFIG = DemoConfig()

QUICK_MODE = "--quick" in sys.argv


def wait_for_enter():
    """Pause for user input unless in quick mode."""
    if not QUICK_MODE:
        input("\n[Press Enter to continue...]")


def step_header(number: int, title: str, objective: str):
    """Print a step header with learning objective."""
    print(f"\n{'='*70}")
    print(f"STEP {number}: {title}")
    print(f"{'='*70}")
    print(f"\nObjective: {objective}\n")


def section_header(text: str):
    """Print a section header within a step."""
    print(f"\n--- {text} ---\n")


def show_balances(balances):
    for user_id, balance in balances.items():
        label = "is owed" if balance.is_positive() else "owes"
        print(f"  {user_id:<8} {label:<8} {abs(balance):>10}")


def show_transactions(transactions):
    if not transactions:
        print("  (nothing to settle)")
    for t in transactions:
        print(f"  {t.from_user_id:<8} pays {t.to_user_id:<8} {t.amount:>10}")


# ============================================================================
# PHASE 1: FOUNDATION
# ============================================================================

def step_01_money():
    """Money is an exact cent amount."""
    step_header(1, "Exact Money",
        "See why balances never drift by a fraction of a cent.")

    print(">>> Money.parse('0.1') + Money.parse('0.2')")
    print(f"    {Money.parse('0.1') + Money.parse('0.2')!r}")

    print("\n>>> Money.parse('100').split_evenly(3)")
    print(f"    {Money.parse('100').split_evenly(3)}")

    section_header("Key Insight")
    print("""
    Splitting 100.00 three ways gives 33.34 + 33.33 + 33.33. The leftover
    cent goes to the first participant, so the parts always add back up
    to the total.
    """)


def step_02_split_expense():
    """Build an expense from payers and a split rule."""
    step_header(2, "Splitting an Expense",
        "An expense is a set of payments and a set of obligations.")

    members = CONFIG.members
    dinner = build_expense(
        "dinner", CONFIG.dinner_total, {members[0]: CONFIG.dinner_total},
        SplitType.EQUAL, members, group_id=CONFIG.group_id,
    )

    section_header("Payments")
    for p in dinner.payments:
        print(f"  {p.user_id:<8} paid {p.amount_paid:>10}")
    section_header("Obligations")
    for o in dinner.obligations:
        print(f"  {o.user_id:<8} owes {o.amount_owed:>10}")

    return dinner


def step_03_record_facts(dinner):
    """Record expenses and settlements in a fact store."""
    step_header(3, "Recording Facts",
        "The fact store holds expenses, settlements and group membership.")

    members = CONFIG.members
    store = InMemoryFactStore(group_members={CONFIG.group_id: members}, verbose=True)
    store.record_expense(dinner)
    store.record_expense(build_expense(
        "hotel", CONFIG.hotel_total, {members[1]: CONFIG.hotel_total},
        SplitType.SHARE, splits={members[0]: 1, members[1]: 1, members[2]: 2},
        group_id=CONFIG.group_id,
    ))
    store.record_expense(build_expense(
        "taxi", CONFIG.taxi_total, {members[2]: CONFIG.taxi_total},
        SplitType.PERCENTAGE, splits={members[0]: 50, members[1]: 50},
        group_id=CONFIG.group_id,
    ))

    print(f">>> store  # {store!r}")
    for expense in store.expenses():
        print(f"  {expense.id:<8} total {expense.total:>10}  "
              f"participants {', '.join(expense.participant_ids)}")

    return store


# ============================================================================
# PHASE 2: BALANCES
# ============================================================================

def step_04_net_balances(store):
    """Fold the facts into net balances."""
    step_header(4, "Net Balances",
        "Positive means the group owes you; negative means you owe the group.")

    facts = store.collect(CONFIG.members[0], CONFIG.group_id)
    balances = accumulate_balances(facts)
    show_balances(balances)

    section_header("Conservation")
    print(f"Sum of all balances: {check_conservation(balances)}")
    return balances


def step_05_settlements(store):
    """Only completed settlements move balances."""
    step_header(5, "Settling Up",
        "A pending settlement is ignored until it is completed.")

    members = CONFIG.members
    store.record_settlement(
        "settle-1", members[0], members[1], CONFIG.settle_up_amount,
        group_id=CONFIG.group_id, status=SettlementStatus.PENDING,
    )
    engine = BalanceEngine(store, verbose=True)

    section_header("While pending")
    show_balances(engine.net_balances(members[0], CONFIG.group_id))

    store.complete_settlement("settle-1")
    section_header("After completion")
    show_balances(engine.net_balances(members[0], CONFIG.group_id))

    return engine


def step_06_simplify(engine):
    """Suggest the fewest payments that clear the group."""
    step_header(6, "Simplified Payments",
        "Largest debts are matched with largest credits first.")

    report = engine.compute_balances(CONFIG.members[0], CONFIG.group_id)
    show_transactions(report.simplified_transactions)

    section_header(f"Dashboard for {report.viewer_id}")
    print(f"  You owe:       {report.you_owe}")
    print(f"  You are owed:  {report.you_are_owed}")

    section_header("Textbook case")
    example = {
        "U1": Money.parse("50"), "U2": Money.parse("30"), "U3": Money.parse("-80"),
    }
    show_transactions(simplify_debts(example))


# ============================================================================
# PHASE 3: SCOPE
# ============================================================================

def step_07_global_scope(store, engine):
    """Group view vs everything the viewer is part of."""
    step_header(7, "Group vs Global",
        "A direct expense outside any group shows up only in the global view.")

    members = CONFIG.members
    store.record_expense(build_expense(
        "concert", "80.00", {"dave": "80.00"}, SplitType.EQUAL, [members[0], "dave"],
    ))

    section_header(f"Group '{CONFIG.group_id}'")
    show_balances(engine.net_balances(members[0], CONFIG.group_id))
    section_header("Global")
    show_balances(engine.net_balances(members[0]))


def step_08_friend_balance(engine):
    """Balance between two specific people."""
    step_header(8, "Friend Balance",
        "What one person owes another, attributed across every shared expense.")

    a, b = CONFIG.members[0], CONFIG.members[1]
    balance = engine.friend_balance(a, b)
    if balance.is_positive():
        print(f"  {b} owes {a} {balance}")
    elif balance.is_negative():
        print(f"  {a} owes {b} {abs(balance)}")
    else:
        print(f"  {a} and {b} are settled up")


def main():
    print("=" * 70)
    print("       SPLITLEDGER TUTORIAL")
    print("=" * 70)

    step_01_money()
    wait_for_enter()

    dinner = step_02_split_expense()
    wait_for_enter()

    store = step_03_record_facts(dinner)
    wait_for_enter()

    step_04_net_balances(store)
    wait_for_enter()

    engine = step_05_settlements(store)
    wait_for_enter()

    step_06_simplify(engine)
    wait_for_enter()

    step_07_global_scope(store, engine)
    wait_for_enter()

    step_08_friend_balance(engine)

    print("\n" + "=" * 70)
    print("       TUTORIAL COMPLETE!")
    print("=" * 70)
    print("""
    Next steps:
      - See splitledger/simplify.py for the matching algorithm
      - Run tests: pytest tests/
    """)


if __name__ == "__main__":
    main()
