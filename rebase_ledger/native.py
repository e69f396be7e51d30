"""
native.py - Underlying Value Asset

NativeCurrency is the value the vault takes custody of: plain per-account
integer balances with no interest. It stands in for the host environment's
native coin, including the fact that a payout to an account can fail. An
account can be marked as refusing receipts, and send() then reports failure
instead of raising, like a low-level value call does.
"""

from __future__ import annotations
from typing import Dict, Set

from .core import validate_amount
from .journal import Journal


class NativeCurrency:
    """
    Per-account balances of the underlying value unit.

    Example:
        eth = NativeCurrency("ETH", verbose=False)
        eth.issue("alice", 10 * 10**18)
        eth.send("alice", "vault", 10**18)     # True
        eth.refuse_receipts("bob")
        eth.send("alice", "bob", 1)            # False, nothing moved
    """

    def __init__(self, symbol: str = "ETH", verbose: bool = True):
        self.symbol = symbol
        self.verbose = verbose
        self._balances: Dict[str, int] = {}
        self._refusing: Set[str] = set()
        self._issued = 0
        self._journal = Journal()

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    def total_issued(self) -> int:
        """Everything ever issued; balances always sum to this."""
        return self._issued

    def atomic(self):
        return self._journal.scope()

    def issue(self, account: str, amount: int) -> None:
        """Create value out of thin air for an account (funding, tests)."""
        validate_amount(amount)
        with self._journal.scope():
            self._journal.record_attr(self, "_issued")
            self._issued += amount
            self._credit(account, amount)

    def refuse_receipts(self, account: str, refuse: bool = True) -> None:
        """Make every future send() to account fail (or succeed again)."""
        if refuse:
            self._refusing.add(account)
        else:
            self._refusing.discard(account)

    def send(self, source: str, dest: str, amount: int) -> bool:
        """
        Move value between accounts.

        Returns:
            True if the value moved; False if source is short or dest refuses
            receipts. A False result leaves every balance unchanged.
        """
        validate_amount(amount)
        if dest in self._refusing:
            if self.verbose:
                print(f"✗ {self.symbol} send {amount} {source}→{dest}: recipient refused")
            return False
        if self.balance_of(source) < amount:
            if self.verbose:
                print(f"✗ {self.symbol} send {amount} {source}→{dest}: balance {self.balance_of(source)}")
            return False
        with self._journal.scope():
            self._credit(source, -amount)
            self._credit(dest, amount)
        if self.verbose:
            print(f"✓ {self.symbol} send {amount} {source}→{dest}")
        return True

    def _credit(self, account: str, delta: int) -> None:
        self._journal.record_item(self._balances, account)
        self._balances[account] = self.balance_of(account) + delta
