"""
vault.py - Custodial Exchange

The Vault takes custody of the underlying value and issues rebase balance
against it one-for-one. Withdrawing burns rebase balance and pays out the same
amount of underlying value, which includes whatever interest the balance
earned while it sat in the ledger.

The vault owns no ledger state. It reaches the ledger only through the
MintBurnCapability interface and must have been granted the mint/burn role by
the ledger's owner beforehand. Its custody balance is simply its account in
the NativeCurrency.

Pattern:
    Deposit:
        NativeCurrency: user → vault         amount
        RebaseToken:    mint(vault, user)     amount

    Withdraw:
        RebaseToken:    burn(vault, user)     amount (MAX_AMOUNT = balance_of(user))
        NativeCurrency: vault → user          amount   (failure undoes the burn)
"""

from __future__ import annotations
from contextlib import contextmanager
from typing import Iterator, List

from .core import (
    MAX_AMOUNT, LedgerError, MintBurnCapability,
    InsufficientBalance, ValueReleaseFailed, validate_amount,
)
from .events import Event, Deposit, Redeem
from .journal import Journal
from .native import NativeCurrency


class Vault:
    """
    Custodial exchange between NativeCurrency and a rebase ledger.

    Example:
        token = RebaseToken("admin", verbose=False)
        eth = NativeCurrency(verbose=False)
        vault = Vault(token, eth, verbose=False)
        token.grant_mint_and_burn_role("admin", vault.address)

        eth.issue("alice", 10**18)
        vault.deposit("alice", 10**18)
        ...
        vault.withdraw("alice", MAX_AMOUNT)
    """

    def __init__(
        self,
        token: MintBurnCapability,
        currency: NativeCurrency,
        address: str = "vault",
        verbose: bool = True,
    ):
        if not address or not address.strip():
            raise ValueError("vault address cannot be empty")
        self._token = token
        self._currency = currency
        self.address = address
        self.verbose = verbose
        self.event_log: List[Event] = []
        self._journal = Journal()

    @property
    def token(self) -> MintBurnCapability:
        return self._token

    def custody_balance(self) -> int:
        """Underlying value currently held by the vault."""
        return self._currency.balance_of(self.address)

    def deposit(self, caller: str, amount: int) -> None:
        """
        Take amount of caller's underlying value and mint the same rebase balance.

        Raises:
            InsufficientBalance: If caller does not hold amount of underlying value
        """
        validate_amount(amount)
        with self._operation(f"deposit {amount} by {caller}"):
            if not self._currency.send(caller, self.address, amount):
                raise InsufficientBalance(
                    f"{caller} cannot deposit {amount}: holds {self._currency.balance_of(caller)}"
                )
            self._token.mint(self.address, caller, amount)
            self._emit(Deposit(caller, amount, self._token.current_time))

    def withdraw(self, caller: str, amount: int) -> None:
        """
        Burn amount of caller's rebase balance and pay out the same underlying value.

        MAX_AMOUNT withdraws the caller's full effective balance, interest included.

        Raises:
            InsufficientBalance: If amount exceeds caller's effective balance
            ValueReleaseFailed: If the payout fails; the burn is undone
        """
        validate_amount(amount)
        with self._operation(f"withdraw {amount} by {caller}"):
            balance = self._token.balance_of(caller)
            if amount == MAX_AMOUNT:
                amount = balance
            if amount > balance:
                raise InsufficientBalance(
                    f"{caller} cannot withdraw {amount}: balance is {balance}"
                )
            self._token.burn(self.address, caller, amount)
            if not self._currency.send(self.address, caller, amount):
                raise ValueReleaseFailed(
                    f"Could not release {amount} {self._currency.symbol} to {caller}"
                )
            self._emit(Redeem(caller, amount, self._token.current_time))

    def fund_rewards(self, sender: str, amount: int) -> None:
        """
        Add underlying value to custody without minting anything.

        Interest is paid out of custody, so somebody has to top it up.
        """
        validate_amount(amount)
        with self._operation(f"fund rewards {amount} by {sender}"):
            if not self._currency.send(sender, self.address, amount):
                raise InsufficientBalance(
                    f"{sender} cannot fund {amount}: holds {self._currency.balance_of(sender)}"
                )

    @contextmanager
    def _operation(self, label: str) -> Iterator[None]:
        """One all-or-nothing unit spanning the vault, the ledger and the currency."""
        try:
            with self._journal.scope(), self._token.atomic(), self._currency.atomic():
                yield
        except LedgerError as e:
            if self.verbose:
                print(f"✗ REJECTED {label}: {e}")
            raise

    def _emit(self, event: Event) -> None:
        self._journal.record_list_length(self.event_log)
        self.event_log.append(event)
        if self.verbose:
            print(f"✓ {event!r}")
