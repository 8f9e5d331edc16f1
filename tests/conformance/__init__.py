"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the balance engine.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. test_conservation.py - Balances always sum to zero
2. test_determinism.py - Identical inputs give identical outputs
3. test_settlement.py - Completed settlements reduce imbalance
4. test_simplification.py - Suggested payments settle every balance

These tests use hypothesis for property-based testing.
"""
