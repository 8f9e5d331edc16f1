"""
Conservation Law Conformance Tests

INVARIANT: For every fact set F:
    Σ_{u ∈ users} balance(u, F) = 0

Every payment is matched by obligations of the same expense and every
settlement is symmetric, so accumulation redistributes money but never
creates or destroys it.

These tests use property-based testing to verify conservation
holds for arbitrary valid fact sets.
"""

import pytest
from hypothesis import given, settings, note
from hypothesis import strategies as st

from splitledger import (
    Money, FactSet, LedgerImbalance,
    accumulate_balances, check_conservation, find_unbalanced_expenses,
    compute_report,
)
from tests.conformance.strategies import USERS, fact_set, expense


class TestConservationProperties:
    """Property-based conservation tests."""

    @given(fact_set())
    @settings(max_examples=200)
    def test_balances_sum_to_zero(self, facts):
        """
        PROPERTY: Net balances of any valid fact set sum to exactly zero.
        """
        balances = accumulate_balances(facts)
        note(f"balances={balances}")
        assert sum(balances.values(), Money.zero()) == Money.zero()
        assert check_conservation(balances) == Money.zero()

    @given(fact_set())
    @settings(max_examples=100)
    def test_no_zero_balances_reported(self, facts):
        """
        PROPERTY: Users whose balance nets to zero are omitted.
        """
        balances = accumulate_balances(facts)
        assert all(not b.is_zero() for b in balances.values())

    @given(fact_set())
    @settings(max_examples=100)
    def test_valid_expenses_are_balanced(self, facts):
        """
        PROPERTY: Expenses built through build_expense never show up as unbalanced.
        """
        assert find_unbalanced_expenses(facts) == []

    @given(fact_set(), st.sampled_from(USERS))
    @settings(max_examples=100)
    def test_report_never_raises_for_valid_facts(self, facts, viewer):
        """
        PROPERTY: The full pipeline accepts every valid fact set.
        """
        report = compute_report(facts, viewer)
        assert report.you_owe >= Money.zero()
        assert report.you_are_owed >= Money.zero()

    @given(st.data())
    @settings(max_examples=50)
    def test_dropping_an_obligation_is_detected(self, data):
        """
        PROPERTY: Removing any non-zero obligation breaks conservation.
        """
        exp = data.draw(expense("e0"))
        facts = FactSet.from_expenses([exp])
        index = data.draw(st.integers(0, len(facts.obligations) - 1))
        damaged = FactSet(
            payments=facts.payments,
            obligations=facts.obligations[:index] + facts.obligations[index + 1:],
        )
        with pytest.raises(LedgerImbalance):
            compute_report(damaged, "alice")
        assert find_unbalanced_expenses(damaged) == ["e0"]


class TestConservationBoundary:
    """Boundary cases."""

    def test_empty_fact_set(self):
        assert accumulate_balances(FactSet()) == {}
        assert check_conservation({}) == Money.zero()
