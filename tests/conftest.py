"""
conftest.py - Shared pytest fixtures for splitledger tests

Provides common fixtures used across unit, functional and conformance tests:
- Fact stores for the reference scenarios
- Engines wired to those stores
"""

import pytest

from splitledger import (
    InMemoryFactStore, BalanceEngine,
    SplitType, build_expense,
)


# =============================================================================
# STORE FIXTURES
# =============================================================================

@pytest.fixture
def store():
    """Fresh, empty fact store."""
    return InMemoryFactStore(verbose=False)


@pytest.fixture
def dinner_expense():
    """u1 pays 300, split equally among u1, u2, u3 (100 each)."""
    return build_expense(
        "dinner", "300.00", {"u1": "300.00"}, SplitType.EQUAL,
        ["u1", "u2", "u3"], group_id="trip",
    )


@pytest.fixture
def scenario_a_store(store, dinner_expense):
    """Store holding only the dinner expense."""
    for user_id in ("u1", "u2", "u3"):
        store.add_group_member("trip", user_id)
    store.record_expense(dinner_expense)
    return store


@pytest.fixture
def scenario_b_store(scenario_a_store):
    """Dinner expense plus a completed u2 -> u1 settlement of 100."""
    scenario_a_store.record_settlement("s1", "u2", "u1", "100.00", group_id="trip")
    return scenario_a_store


# =============================================================================
# ENGINE FIXTURES
# =============================================================================

@pytest.fixture
def engine_a(scenario_a_store):
    return BalanceEngine(scenario_a_store)


@pytest.fixture
def engine_b(scenario_b_store):
    return BalanceEngine(scenario_b_store)
