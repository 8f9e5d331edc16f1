"""
test_report.py - Unit tests for BalanceReport assembly
"""

from decimal import Decimal

from splitledger import Money, SimplifiedTransaction, assemble_report
from tests.fake_collector import m, balances_of


TRANSACTIONS = [
    SimplifiedTransaction("u2", "u1", m("100")),
    SimplifiedTransaction("u3", "u1", m("100")),
]
BALANCES = balances_of(u1="200", u2="-100", u3="-100")


class TestAssembleReport:

    def test_creditor_view(self):
        report = assemble_report("u1", BALANCES, TRANSACTIONS)
        assert report.you_owe == Money.zero()
        assert report.you_are_owed == m("200")

    def test_debtor_view(self):
        report = assemble_report("u2", BALANCES, TRANSACTIONS, group_id="trip")
        assert report.you_owe == m("100")
        assert report.you_are_owed == Money.zero()
        assert report.group_id == "trip"

    def test_uninvolved_viewer(self):
        report = assemble_report("nobody", BALANCES, TRANSACTIONS)
        assert report.you_owe == Money.zero()
        assert report.you_are_owed == Money.zero()
        assert len(report.simplified_transactions) == 2

    def test_empty(self):
        report = assemble_report("u1", {}, [])
        assert report.simplified_transactions == ()
        assert report.net_balances == {}
        assert report.to_dict() == {
            "youOwe": Decimal("0.00"),
            "youAreOwed": Decimal("0.00"),
            "simplifiedTransactions": [],
        }

    def test_keeps_net_balances(self):
        report = assemble_report("u1", BALANCES, TRANSACTIONS)
        assert report.net_balances == BALANCES
        assert report.net_balances is not BALANCES

    def test_transactions_for(self):
        report = assemble_report("u1", BALANCES, TRANSACTIONS)
        assert report.transactions_for("u3") == [TRANSACTIONS[1]]
        assert report.transactions_for("u1") == TRANSACTIONS

    def test_to_dict_contract(self):
        report = assemble_report("u2", BALANCES, TRANSACTIONS)
        assert report.to_dict() == {
            "youOwe": Decimal("100.00"),
            "youAreOwed": Decimal("0.00"),
            "simplifiedTransactions": [
                {"fromUserId": "u2", "toUserId": "u1", "amount": Decimal("100.00")},
                {"fromUserId": "u3", "toUserId": "u1", "amount": Decimal("100.00")},
            ],
        }
