"""
Accrual Conformance Tests

INVARIANT: Effective balance never drops below principal.

    ∀ holder h, ∀ time t:
        balance_of(h) >= principal_balance_of(h)

INVARIANT: Interest is simple (linear) between settlements.

    ∀ p, r, t with no intervening operations:
        |(balance(2t) - balance(t)) - (balance(t) - balance(0))| <= 1
"""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from datetime import timedelta

from rebase_ledger import accrued_balance

from tests.conftest import T0, UNIT, RATE, MINTER, make_token, expected_balance


principals = st.integers(min_value=0, max_value=10 ** 30)
rates = st.integers(min_value=0, max_value=10 ** 12)
durations = st.integers(min_value=0, max_value=10 * 365 * 86_400)


class TestAccrualProperties:

    @given(principals, rates, durations)
    @settings(max_examples=200)
    def test_balance_never_below_principal(self, principal, rate, seconds):
        """PROPERTY: balance_of >= principal_balance_of at any time."""
        token = make_token(interest_rate=rate)
        token.mint(MINTER, "alice", principal)
        token.advance_time(T0 + timedelta(seconds=seconds))
        assert token.balance_of("alice") >= token.principal_balance_of("alice")

    @given(principals, rates, st.integers(min_value=1, max_value=365 * 86_400))
    @settings(max_examples=200)
    def test_equal_intervals_accrue_equally(self, principal, rate, seconds):
        """PROPERTY: consecutive equal intervals add the same interest, within one unit."""
        token = make_token(interest_rate=rate)
        token.mint(MINTER, "alice", principal)
        b0 = token.balance_of("alice")
        token.advance_time(T0 + timedelta(seconds=seconds))
        b1 = token.balance_of("alice")
        token.advance_time(T0 + timedelta(seconds=2 * seconds))
        b2 = token.balance_of("alice")
        assert abs((b2 - b1) - (b1 - b0)) <= 1

    @given(principals, rates, durations, durations)
    @settings(max_examples=200)
    def test_balance_non_decreasing_in_time(self, principal, rate, s1, s2):
        """PROPERTY: a later read never returns less than an earlier one."""
        early, late = sorted((s1, s2))
        assert accrued_balance(principal, rate, early) <= accrued_balance(principal, rate, late)

    @given(principals, rates, durations)
    @settings(max_examples=200)
    def test_engine_matches_formula(self, principal, rate, seconds):
        """PROPERTY: balance_of is exactly principal * (1e18 + r*t) // 1e18."""
        token = make_token(interest_rate=rate)
        token.mint(MINTER, "alice", principal)
        token.advance_time(T0 + timedelta(seconds=seconds))
        assert token.balance_of("alice") == expected_balance(principal, rate, seconds)


class TestAccrualExamples:

    def test_no_interest_without_time(self):
        token = make_token()
        token.mint(MINTER, "alice", 100 * UNIT)
        assert token.balance_of("alice") == 100 * UNIT

    def test_sub_second_elapsed_accrues_nothing(self):
        token = make_token()
        token.mint(MINTER, "alice", 100 * UNIT)
        token.advance_time(T0 + timedelta(milliseconds=999))
        assert token.balance_of("alice") == 100 * UNIT

    def test_sub_second_settlements_lose_no_interest(self):
        """Settling every 0.9 s charges the same whole seconds as settling every second."""
        frequent = make_token()
        every_second = make_token()
        lazy = make_token()
        for token in (frequent, every_second, lazy):
            token.mint(MINTER, "alice", 100 * UNIT)

        for tick in range(1, 11):
            frequent.advance_time(T0 + timedelta(milliseconds=900 * tick))
            frequent.mint(MINTER, "alice", 0)
        for second in range(1, 10):
            every_second.advance_time(T0 + timedelta(seconds=second))
            every_second.mint(MINTER, "alice", 0)
        lazy.advance_time(T0 + timedelta(seconds=9))

        assert frequent.get_holder("alice") == every_second.get_holder("alice")
        assert frequent.get_holder("alice").last_accrual == T0 + timedelta(seconds=9)
        assert frequent.balance_of("alice") >= lazy.balance_of("alice")
        assert lazy.balance_of("alice") == expected_balance(100 * UNIT, RATE, 9)

    def test_sub_second_settlement_leaves_record_unchanged(self):
        token = make_token()
        token.mint(MINTER, "alice", 100 * UNIT)
        before = token.get_holder("alice")
        token.advance_time(T0 + timedelta(milliseconds=500))
        token.mint(MINTER, "alice", 0)
        token.transfer("alice", "alice", 0)
        assert token.get_holder("alice") == before
        assert token.total_supply() == 100 * UNIT

    @given(st.lists(st.integers(min_value=1, max_value=5_000), min_size=1, max_size=40))
    @settings(max_examples=100)
    def test_settling_never_trails_a_lazy_read(self, steps_ms):
        """Any settlement schedule earns at least the lazy balance over the same span."""
        settled = make_token()
        lazy = make_token()
        for token in (settled, lazy):
            token.mint(MINTER, "alice", 100 * UNIT)
        now = T0
        for step in steps_ms:
            now += timedelta(milliseconds=step)
            settled.advance_time(now)
            settled.mint(MINTER, "alice", 0)
        lazy.advance_time(now)
        assert settled.balance_of("alice") >= lazy.balance_of("alice")

    def test_tiny_balance_truncates_to_principal(self):
        """One unit at 5e10 needs 2e7 seconds before a whole unit of interest appears."""
        token = make_token()
        token.mint(MINTER, "alice", 1)
        token.advance_time(T0 + timedelta(seconds=19_999_999))
        assert token.balance_of("alice") == 1
        token.advance_time(T0 + timedelta(seconds=20_000_000))
        assert token.balance_of("alice") == 2

    @pytest.mark.parametrize("days", [1, 7, 30, 365])
    def test_multi_day(self, days):
        token = make_token()
        token.mint(MINTER, "alice", 100 * UNIT)
        token.advance_time(T0 + timedelta(days=days))
        assert token.balance_of("alice") == expected_balance(100 * UNIT, RATE, days * 86_400)
