"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the rebase ledger.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. accrual.py - Effective balance never below principal; linear growth
2. idempotency.py - Settling twice at one instant equals settling once
3. conservation.py - Total supply equals settled principal; mint/burn symmetry
4. atomicity.py - Failed operations leave no trace, across ledger and vault
5. rates.py - Global rate never increases; locked rates never change
6. temporal.py - Time only moves forward; reads never write

These tests use hypothesis for property-based testing.
"""
