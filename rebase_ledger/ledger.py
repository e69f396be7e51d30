"""
ledger.py - Interest-Bearing Rebase Ledger

RebaseToken is the central state manager for holder balances and interest.
It is the only module that mutates holder records, the global rate and the
total supply.

Key responsibilities:
    - Implements the LedgerView and MintBurnCapability protocols
    - Computes effective balances lazily (principal * linear interest factor)
    - Settles a holder (folds accrued interest into principal) right before
      any change to that holder's principal, and at no other time
    - Locks each holder's rate when its balance goes from zero to non-zero
    - Runs every mutation inside an atomic scope: it applies fully or not at all
    - Keeps an event log of everything that was applied
"""

from __future__ import annotations
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime
from typing import Dict, Iterator, List, Optional, Set, Tuple, Any
import copy

from .access import AccessControl
from .core import (
    # Types
    HolderRecord,
    # Constants
    DECIMALS, DEFAULT_INTEREST_RATE, MAX_AMOUNT, MINT_AND_BURN_ROLE,
    # Exceptions
    LedgerError, InsufficientAllowance, InsufficientBalance, RateIncreaseRejected,
    # Pure functions
    effective_balance, empty_record, settle, validate_amount,
)
from .events import (
    Event, Approval, InterestRateSet, OwnershipTransferred, RoleGranted, Transfer,
)
from .journal import Journal


def _require_account(account: str, what: str = "account") -> str:
    if not isinstance(account, str) or not account.strip():
        raise ValueError(f"{what} cannot be empty")
    return account


class RebaseToken:
    """
    Transferable balance ledger whose balances grow with simple interest.

    Each holder stores (principal, rate, last_accrual). balance_of() returns
    principal * (PRECISION + rate * elapsed) // PRECISION without writing
    anything. Mint, burn and transfer settle the holders they touch first, so
    interest owed so far becomes principal before the principal changes.

    The global rate only applies to holders whose balance is zero when they
    are funded; everyone else keeps the rate they were funded at. The owner
    may lower the global rate but never raise it.

    Thread Safety:
        Not thread-safe. Operations are assumed to run one at a time.

    Example:
        token = RebaseToken("admin", initial_time=datetime(2025, 1, 1))
        token.grant_mint_and_burn_role("admin", "vault")
        token.mint("vault", "alice", 100 * 10**18)
        token.advance_time(datetime(2025, 1, 2))
        token.balance_of("alice")   # > 100 * 10**18
    """

    def __init__(
        self,
        owner: str,
        name: str = "Rebase Token",
        symbol: str = "RBT",
        initial_time: Optional[datetime] = None,
        interest_rate: int = DEFAULT_INTEREST_RATE,
        verbose: bool = True,
    ):
        """
        Create a rebase ledger.

        Args:
            owner: Identity allowed to grant roles and lower the rate
            name: Human-readable token name
            symbol: Short ticker
            initial_time: Starting logical time (default: 1970-01-01)
            interest_rate: Initial global rate, per second scaled by 1e18
            verbose: Print applied operations and rejections (default: True)
        """
        self.name = name
        self.symbol = symbol
        self.decimals = DECIMALS
        self.verbose = verbose
        self._current_time: datetime = initial_time or datetime(1970, 1, 1)
        self._interest_rate: int = validate_amount(interest_rate, "interest rate")
        self._total_supply: int = 0
        self._holders: Dict[str, HolderRecord] = {}
        self._allowances: Dict[Tuple[str, str], int] = {}
        self.event_log: List[Event] = []
        self._journal = Journal()
        self._access = AccessControl(owner, self._journal)

    # ========================================================================
    # LedgerView PROTOCOL IMPLEMENTATION (read-only methods)
    # ========================================================================

    @property
    def current_time(self) -> datetime:
        """Current logical time of the ledger."""
        return self._current_time

    @property
    def owner(self) -> str:
        return self._access.owner

    def get_holder(self, holder: str) -> HolderRecord:
        """
        Stored record for a holder, without settling.

        Unknown holders get an empty record stamped with the current time;
        nothing is stored for them.
        """
        record = self._holders.get(holder)
        return record if record is not None else empty_record(self._current_time)

    def list_holders(self) -> Set[str]:
        """Every holder that has ever had a record, including zero balances."""
        return set(self._holders)

    def principal_balance_of(self, holder: str) -> int:
        """Stored principal, excluding interest accrued since the last settlement."""
        record = self._holders.get(holder)
        return record.principal if record is not None else 0

    def balance_of(self, holder: str) -> int:
        """Effective balance: principal plus unsettled interest. Never writes."""
        record = self._holders.get(holder)
        if record is None:
            return 0
        return effective_balance(record, self._current_time)

    def total_supply(self) -> int:
        """
        Sum of settled principal across holders.

        Interest that has not been settled yet is not included, so this lags
        the sum of balance_of() over all holders until each one is settled.
        """
        return self._total_supply

    def get_interest_rate(self) -> int:
        """Global rate handed to newly funded holders."""
        return self._interest_rate

    def get_user_interest_rate(self, holder: str) -> int:
        """Rate locked in for a holder (0 for unknown holders)."""
        record = self._holders.get(holder)
        return record.rate if record is not None else 0

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    def has_mint_and_burn_role(self, account: str) -> bool:
        return self._access.has_role(MINT_AND_BURN_ROLE, account)

    def verify_supply(self) -> Dict[str, Any]:
        """
        Check that total_supply() equals the sum of stored principal.

        Returns:
            Dict with keys:
            - 'valid': bool - True if the counter matches the sum
            - 'total_supply': int - the maintained counter
            - 'sum_of_principal': int - recomputed from holder records
            - 'unsettled_interest': int - sum(balance_of) - sum(principal)

        Example:
            result = token.verify_supply()
            assert result['valid'], result
        """
        holders = sorted(self._holders)
        principal = sum(self._holders[h].principal for h in holders)
        effective = sum(self.balance_of(h) for h in holders)
        return {
            'valid': principal == self._total_supply,
            'total_supply': self._total_supply,
            'sum_of_principal': principal,
            'unsettled_interest': effective - principal,
        }

    # ========================================================================
    # TIME MANAGEMENT
    # ========================================================================

    def advance_time(self, new_time: datetime) -> None:
        """
        Advance the ledger's logical clock. Time can only move forward.

        Raises:
            ValueError: If new_time is before the current time
        """
        if new_time < self._current_time:
            raise ValueError(
                f"Cannot move time backwards: {new_time} < {self._current_time}"
            )
        self._current_time = new_time

    # ========================================================================
    # ADMINISTRATION (Mutating, owner only)
    # ========================================================================

    def grant_mint_and_burn_role(self, caller: str, account: str) -> None:
        """Allow account to mint and burn. Grants are additive and permanent."""
        _require_account(account)
        with self._operation(f"grant {MINT_AND_BURN_ROLE} to {account}"):
            if self._access.grant_role(caller, MINT_AND_BURN_ROLE, account):
                self._emit(RoleGranted(MINT_AND_BURN_ROLE, account, self._current_time))

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        _require_account(new_owner, "new owner")
        with self._operation(f"transfer ownership to {new_owner}"):
            previous = self._access.transfer_ownership(caller, new_owner)
            self._emit(OwnershipTransferred(previous, new_owner, self._current_time))

    def set_interest_rate(self, caller: str, new_rate: int) -> None:
        """
        Lower (or keep) the global interest rate. Owner only.

        Holders that already have a balance keep their locked-in rate.

        Raises:
            Unauthorized: If caller is not the owner
            RateIncreaseRejected: If new_rate is above the current rate
            ValueError: If new_rate is negative or not an int
        """
        validate_amount(new_rate, "interest rate")
        with self._operation(f"set interest rate to {new_rate}"):
            self._access.require_owner(caller, "set the interest rate")
            if new_rate > self._interest_rate:
                raise RateIncreaseRejected(
                    f"Interest rate can only decrease: {new_rate} > {self._interest_rate}"
                )
            self._journal.record_attr(self, "_interest_rate")
            self._interest_rate = new_rate
            self._emit(InterestRateSet(new_rate, self._current_time))

    # ========================================================================
    # BALANCE OPERATIONS (Mutating)
    # ========================================================================

    def atomic(self):
        """
        Open an all-or-nothing scope over this ledger.

        Every public mutation already runs in one; callers composing several
        calls (the vault) open an outer scope so a later failure undoes them all.
        """
        return self._journal.scope()

    def mint(self, caller: str, to: str, amount: int) -> None:
        """
        Create amount new balance for `to`. Requires the mint/burn role.

        The holder is settled first, even when amount is 0. A holder going
        from zero to a non-zero balance is locked to the current global rate.
        """
        _require_account(to, "recipient")
        validate_amount(amount)
        with self._operation(f"mint {amount} to {to}"):
            self._access.require_role(caller, MINT_AND_BURN_ROLE, "mint")
            record = self._settle(to)
            if amount:
                self._write_holder(to, self._credit(record, amount))
                self._write_total_supply(self._total_supply + amount)
            self._emit(Transfer(None, to, amount, self._current_time))

    def burn(self, caller: str, holder: str, amount: int) -> None:
        """
        Destroy amount of holder's balance. Requires the mint/burn role.

        MAX_AMOUNT burns everything the holder has after settlement.

        Raises:
            InsufficientBalance: If amount exceeds the settled principal
        """
        _require_account(holder, "holder")
        validate_amount(amount)
        with self._operation(f"burn {amount} from {holder}"):
            self._access.require_role(caller, MINT_AND_BURN_ROLE, "burn")
            record = self._settle(holder)
            if amount == MAX_AMOUNT:
                amount = record.principal
            if amount > record.principal:
                raise InsufficientBalance(
                    f"{holder} cannot burn {amount}: balance is {record.principal}"
                )
            if holder in self._holders:
                self._write_holder(holder, replace(record, principal=record.principal - amount))
                self._write_total_supply(self._total_supply - amount)
            self._emit(Transfer(holder, None, amount, self._current_time))

    def transfer(self, sender: str, to: str, amount: int) -> None:
        """
        Move amount from sender to `to`.

        MAX_AMOUNT moves the sender's whole settled balance. A recipient at
        zero balance is locked to the current global rate, not the sender's.
        """
        _require_account(sender, "sender")
        _require_account(to, "recipient")
        validate_amount(amount)
        with self._operation(f"transfer {amount} {sender}→{to}"):
            self._move(sender, to, self._resolve_amount(sender, amount))

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> None:
        """
        Move amount from owner to `to` using spender's allowance.

        An allowance of MAX_AMOUNT is unlimited and is not decremented.

        Raises:
            InsufficientAllowance: If amount exceeds the approved allowance
            InsufficientBalance: If amount exceeds the owner's settled balance
        """
        _require_account(spender, "spender")
        _require_account(owner, "owner")
        _require_account(to, "recipient")
        validate_amount(amount)
        with self._operation(f"transfer_from {amount} {owner}→{to} by {spender}"):
            amount = self._resolve_amount(owner, amount)
            allowed = self.allowance(owner, spender)
            if allowed != MAX_AMOUNT:
                if amount > allowed:
                    raise InsufficientAllowance(
                        f"{spender} may move {allowed} of {owner}'s balance, requested {amount}"
                    )
                self._write_allowance(owner, spender, allowed - amount)
            self._move(owner, to, amount)

    def approve(self, owner: str, spender: str, amount: int) -> None:
        """Set (not add to) spender's allowance over owner's balance."""
        _require_account(owner, "owner")
        _require_account(spender, "spender")
        validate_amount(amount)
        with self._operation(f"approve {spender} for {amount} of {owner}"):
            self._write_allowance(owner, spender, amount)
            self._emit(Approval(owner, spender, amount, self._current_time))

    # ========================================================================
    # INTERNALS
    # ========================================================================

    @contextmanager
    def _operation(self, label: str) -> Iterator[None]:
        """Atomic scope that reports rejections when verbose."""
        try:
            with self._journal.scope():
                yield
        except LedgerError as e:
            if self.verbose:
                print(f"✗ REJECTED {label}: {e}")
            raise

    def _settle(self, holder: str) -> HolderRecord:
        """
        Bring holder's principal current and return the settled record.

        Interest folded in is added to the total supply. Holders without a
        record are not stored here; the caller stores them if it funds them.
        """
        record = self._holders.get(holder)
        if record is None:
            return empty_record(self._current_time)
        settled = settle(record, self._current_time)
        if settled == record:
            return record
        interest = settled.principal - record.principal
        self._write_holder(holder, settled)
        if interest:
            self._write_total_supply(self._total_supply + interest)
            self._emit(Transfer(None, holder, interest, self._current_time))
        return settled

    def _resolve_amount(self, holder: str, amount: int) -> int:
        """Replace the MAX_AMOUNT sentinel by holder's settled principal."""
        if amount == MAX_AMOUNT:
            return self._settle(holder).principal
        return amount

    def _move(self, sender: str, to: str, amount: int) -> None:
        source = self._settle(sender)
        dest = self._settle(to)
        if amount > source.principal:
            raise InsufficientBalance(
                f"{sender} cannot transfer {amount}: balance is {source.principal}"
            )
        # Self-transfers and zero amounts change nothing beyond the settlement above
        if sender != to and amount:
            self._write_holder(sender, replace(source, principal=source.principal - amount))
            self._write_holder(to, self._credit(dest, amount))
        self._emit(Transfer(sender, to, amount, self._current_time))

    def _credit(self, record: HolderRecord, amount: int) -> HolderRecord:
        """Add amount to a settled record, locking the global rate if it was empty."""
        if record.principal == 0:
            # Nothing accrues on zero principal, so the clock restarts here
            record = replace(record, rate=self._interest_rate, last_accrual=self._current_time)
        return replace(record, principal=record.principal + amount)

    def _write_holder(self, holder: str, record: HolderRecord) -> None:
        self._journal.record_item(self._holders, holder)
        self._holders[holder] = record

    def _write_total_supply(self, value: int) -> None:
        if value < 0:
            raise LedgerError(f"total supply would become negative: {value}")
        self._journal.record_attr(self, "_total_supply")
        self._total_supply = value

    def _write_allowance(self, owner: str, spender: str, amount: int) -> None:
        self._journal.record_item(self._allowances, (owner, spender))
        self._allowances[(owner, spender)] = amount

    def _emit(self, event: Event) -> None:
        self._journal.record_list_length(self.event_log)
        self.event_log.append(event)
        if self.verbose:
            print(f"✓ {event!r}")

    # ========================================================================
    # LEDGER OPERATIONS
    # ========================================================================

    def clone(self) -> RebaseToken:
        """
        Create an independent copy of this ledger.

        Holder records, allowances, roles, the event log, the clock and the
        global rate are copied; changes to either copy do not affect the other.
        An open atomic scope is not carried over.
        """
        cloned = RebaseToken.__new__(RebaseToken)
        cloned.name = self.name
        cloned.symbol = self.symbol
        cloned.decimals = self.decimals
        cloned.verbose = self.verbose
        cloned._current_time = self._current_time
        cloned._interest_rate = self._interest_rate
        cloned._total_supply = self._total_supply
        # HolderRecord is frozen, so a shallow dict copy is enough
        cloned._holders = dict(self._holders)
        cloned._allowances = dict(self._allowances)
        cloned.event_log = copy.copy(self.event_log)
        cloned._journal = Journal()
        cloned._access = self._access.copy(cloned._journal)
        return cloned

    def __repr__(self) -> str:
        return (
            f"RebaseToken({self.symbol}, holders={len(self._holders)}, "
            f"supply={self._total_supply}, rate={self._interest_rate}, t={self._current_time.isoformat()})"
        )
