"""
test_facts.py - Unit tests for fact collection

Tests:
- InMemoryFactStore recording and settlement status transitions
- Group scope and global scope selection
- Invalid amount coercion
"""

import pytest

from splitledger import (
    Money, FactSet, SettlementStatus, SplitType,
    LedgerFactCollector, InMemoryFactStore, build_expense,
)
from tests.fake_collector import FakeCollector, m


def _expense(expense_id, payer, users, amount="30", group_id=None):
    return build_expense(expense_id, amount, {payer: amount}, SplitType.EQUAL, users, group_id=group_id)


class TestProtocol:

    def test_store_is_collector(self):
        assert isinstance(InMemoryFactStore(), LedgerFactCollector)

    def test_fake_is_collector(self):
        assert isinstance(FakeCollector(), LedgerFactCollector)

    def test_arbitrary_object_is_not_collector(self):
        assert not isinstance(object(), LedgerFactCollector)


class TestRecording:

    def test_record_expense(self, store):
        expense = _expense("e1", "a", ["a", "b"])
        assert store.record_expense(expense) is expense
        assert store.get_expense("e1") is expense
        assert store.expenses() == [expense]

    def test_duplicate_expense_rejected(self, store):
        store.record_expense(_expense("e1", "a", ["a", "b"]))
        with pytest.raises(ValueError, match="already recorded"):
            store.record_expense(_expense("e1", "a", ["a", "b"]))

    def test_record_settlement_normalizes_amount(self, store):
        settlement = store.record_settlement("s1", "b", "a", 12.345)
        assert settlement.amount == m("12.35")
        assert settlement.status is SettlementStatus.COMPLETED

    def test_duplicate_settlement_rejected(self, store):
        store.record_settlement("s1", "b", "a", "5")
        with pytest.raises(ValueError, match="already recorded"):
            store.record_settlement("s1", "b", "a", "5")

    def test_invalid_settlement_amount_coerced_to_zero(self, store):
        settlement = store.record_settlement("s1", "b", "a", float("nan"))
        assert settlement.amount == Money.zero()

    def test_invalid_amount_warns_when_verbose(self, capsys):
        store = InMemoryFactStore(verbose=True)
        store.record_settlement("s1", "b", "a", "garbage")
        out = capsys.readouterr().out
        assert "INVALID AMOUNT" in out
        assert "s1" in out

    def test_invalid_amount_silent_when_not_verbose(self, store, capsys):
        store.record_settlement("s1", "b", "a", "garbage")
        assert capsys.readouterr().out == ""

    def test_complete_pending_settlement(self, store):
        store.record_settlement("s1", "b", "a", "5", status=SettlementStatus.PENDING)
        completed = store.complete_settlement("s1")
        assert completed.is_completed
        assert store.get_settlement("s1") is completed

    def test_cancel_settlement(self, store):
        store.record_settlement("s1", "b", "a", "5")
        store.cancel_settlement("s1")
        assert store.get_settlement("s1").status is SettlementStatus.CANCELLED

    def test_cancelled_cannot_complete(self, store):
        store.record_settlement("s1", "b", "a", "5")
        store.cancel_settlement("s1")
        with pytest.raises(ValueError, match="cannot transition"):
            store.complete_settlement("s1")

    def test_unknown_settlement(self, store):
        with pytest.raises(KeyError):
            store.cancel_settlement("missing")

    def test_initial_group_members(self):
        store = InMemoryFactStore(group_members={"g": ["a", "b"]})
        assert store.group_members("g") == {"a", "b"}
        assert store.group_members("unknown") == set()


class TestGroupScope:

    def test_includes_all_group_expenses(self, store):
        store.record_expense(_expense("g1", "a", ["a", "b"], group_id="g"))
        store.record_expense(_expense("g2", "b", ["b", "c"], group_id="g"))
        store.record_expense(_expense("other", "a", ["a", "b"], group_id="h"))
        store.record_expense(_expense("direct", "a", ["a", "b"]))

        facts = store.collect("a", group_id="g")
        assert facts.expense_ids() == ["g1", "g2"]

    def test_includes_expenses_without_viewer(self, store):
        store.record_expense(_expense("g1", "b", ["b", "c"], group_id="g"))
        facts = store.collect("a", group_id="g")
        assert facts.expense_ids() == ["g1"]

    def test_only_completed_group_settlements(self, store):
        store.record_settlement("done", "b", "a", "5", group_id="g")
        store.record_settlement("pending", "b", "a", "5", group_id="g", status=SettlementStatus.PENDING)
        store.record_settlement("cancelled", "b", "a", "5", group_id="g")
        store.cancel_settlement("cancelled")
        store.record_settlement("elsewhere", "b", "a", "5", group_id="h")
        store.record_settlement("direct", "b", "a", "5")

        facts = store.collect("a", group_id="g")
        assert [s.id for s in facts.settlements] == ["done"]

    def test_group_settlement_between_others_included(self, store):
        store.record_settlement("s1", "c", "b", "5", group_id="g")
        assert [s.id for s in store.collect("a", group_id="g").settlements] == ["s1"]


class TestGlobalScope:

    def test_expenses_viewer_participates_in(self, store):
        store.record_expense(_expense("mine", "a", ["a", "b"], group_id="g"))
        store.record_expense(_expense("paid_for_me", "b", ["a", "b"]))
        store.record_expense(_expense("not_mine", "b", ["b", "c"]))

        assert store.collect("a").expense_ids() == ["mine", "paid_for_me"]

    def test_expenses_of_groups_viewer_belongs_to(self, store):
        store.add_group_member("g", "a")
        store.record_expense(_expense("group_only", "b", ["b", "c"], group_id="g"))
        store.record_expense(_expense("foreign_group", "b", ["b", "c"], group_id="h"))

        assert store.collect("a").expense_ids() == ["group_only"]

    def test_settlements_involving_viewer(self, store):
        store.record_settlement("sent", "a", "b", "5", group_id="g")
        store.record_settlement("received", "c", "a", "5")
        store.record_settlement("unrelated", "b", "c", "5")
        store.record_settlement("pending", "a", "b", "5", status=SettlementStatus.PENDING)

        facts = store.collect("a")
        assert [s.id for s in facts.settlements] == ["sent", "received"]

    def test_empty_store(self, store):
        facts = store.collect("a")
        assert facts == FactSet()
        assert facts.is_empty()

    def test_collected_facts_are_complete(self, store):
        store.record_expense(build_expense(
            "e1", "90", {"a": "50", "b": "40"}, SplitType.EQUAL, ["a", "b", "c"],
        ))
        facts = store.collect("c")
        assert len(facts.payments) == 2
        assert len(facts.obligations) == 3
