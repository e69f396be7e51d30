"""
Core types and pure functions for the rebase ledger.

This module provides the foundational pieces the stateful components build on:
1. Protocols: LedgerView for read-only access, MintBurnCapability for the vault
2. Immutable data structures: HolderRecord
3. Exceptions: LedgerError and domain-specific error types
4. Constants: fixed-point precision, the sentinel maximum, default rate
5. Accrual functions: pure arithmetic for linear interest and settlement

All functions in this module are pure. No function here can mutate ledger state.
"""

from __future__ import annotations
from contextlib import AbstractContextManager
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Protocol, Set, runtime_checkable


# ============================================================================
# CONSTANTS
# ============================================================================

# Fixed-point denominator for interest rates (rates are "per second * 1e18").
PRECISION = 10 ** 18

# Reserved amount meaning "the holder's whole current balance".
MAX_AMOUNT = 2 ** 256 - 1

# Rate handed to newly funded holders when the ledger is created.
# 5e10 / 1e18 per second is about 157.7% per year, simple interest.
DEFAULT_INTEREST_RATE = 5 * 10 ** 10

DECIMALS = 18

SECONDS_PER_DAY = 86_400
SECONDS_PER_YEAR = 365 * SECONDS_PER_DAY

# Role identifier for accounts allowed to mint and burn.
MINT_AND_BURN_ROLE = "MINT_AND_BURN_ROLE"


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LedgerError(Exception):
    """Base exception for all ledger-related errors."""
    pass


class Unauthorized(LedgerError):
    """Raised when the caller is not the owner or lacks the mint/burn role."""
    pass


class InsufficientBalance(LedgerError):
    """Raised when a burn, transfer or withdrawal exceeds the available balance."""
    pass


class InsufficientAllowance(LedgerError):
    """Raised when transfer_from exceeds what the owner approved for the spender."""
    pass


class RateIncreaseRejected(LedgerError):
    """Raised when an interest rate update would raise the global rate."""
    pass


class ValueReleaseFailed(LedgerError):
    """Raised when the vault could not pay out the underlying value."""
    pass


TransferFailed = ValueReleaseFailed


# ============================================================================
# PROTOCOLS
# ============================================================================

@runtime_checkable
class LedgerView(Protocol):
    """
    Read-only interface to rebase ledger state.

    Functions accepting a LedgerView declare that they only read. RebaseToken
    implements this protocol alongside its mutating methods.
    """

    @property
    def current_time(self) -> datetime:
        """Return the current logical time of the ledger."""
        ...

    def get_holder(self, holder: str) -> HolderRecord:
        """Return the stored record for a holder (an empty record if unknown)."""
        ...

    def list_holders(self) -> Set[str]:
        """Return every holder that has ever had a record."""
        ...

    def balance_of(self, holder: str) -> int:
        ...

    def principal_balance_of(self, holder: str) -> int:
        ...

    def total_supply(self) -> int:
        ...

    def get_interest_rate(self) -> int:
        ...


@runtime_checkable
class MintBurnCapability(Protocol):
    """
    The narrow slice of the ledger a custodial vault is allowed to use.

    The vault never touches holder records directly. It mints and burns through
    this interface, reads effective balances, and wraps its own work in the
    ledger's atomic() scope so a failure on its side undoes the ledger change.
    """

    @property
    def current_time(self) -> datetime:
        ...

    def mint(self, caller: str, to: str, amount: int) -> None:
        ...

    def burn(self, caller: str, holder: str, amount: int) -> None:
        ...

    def balance_of(self, holder: str) -> int:
        ...

    def atomic(self) -> AbstractContextManager:
        ...


# ============================================================================
# HOLDER RECORD
# ============================================================================

@dataclass(frozen=True, slots=True)
class HolderRecord:
    """
    Stored accrual state of one holder.

    Attributes:
        principal: Balance as of last_accrual, excluding interest accrued since.
        rate: Locked-in rate (per second, scaled by PRECISION).
        last_accrual: Time up to which interest has been folded into principal.
    """
    principal: int
    rate: int
    last_accrual: datetime

    def __post_init__(self):
        if self.principal < 0:
            raise ValueError(f"principal cannot be negative, got {self.principal}")
        if self.rate < 0:
            raise ValueError(f"rate cannot be negative, got {self.rate}")

    def __repr__(self) -> str:
        return f"HolderRecord({self.principal} @ {self.rate}, since {self.last_accrual.isoformat()})"


# ============================================================================
# ACCRUAL FUNCTIONS
# ============================================================================

def validate_amount(amount: int, what: str = "amount") -> int:
    """Reject anything that is not a non-negative int (bools included)."""
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValueError(f"{what} must be an int, got {type(amount).__name__}")
    if amount < 0:
        raise ValueError(f"{what} cannot be negative, got {amount}")
    return amount


def elapsed_seconds(since: datetime, now: datetime) -> int:
    """Whole seconds between two instants. Never negative."""
    if now <= since:
        return 0
    return (now - since) // timedelta(seconds=1)


def interest_factor(rate: int, elapsed: int) -> int:
    """Linear growth factor, scaled by PRECISION: 1 + rate * elapsed."""
    return PRECISION + rate * elapsed


def accrued_balance(principal: int, rate: int, elapsed: int) -> int:
    """
    Effective balance after `elapsed` seconds of simple interest.

    Floor division truncates the fractional unit, so the result is never more
    than the exact value and never less than principal.
    """
    return principal * interest_factor(rate, elapsed) // PRECISION


def effective_balance(record: HolderRecord, now: datetime) -> int:
    """Principal plus interest accrued since the record was last settled."""
    return accrued_balance(record.principal, record.rate, elapsed_seconds(record.last_accrual, now))


def settle(record: HolderRecord, now: datetime) -> HolderRecord:
    """
    Fold accrued interest into principal and restart the accrual clock.

    The clock moves forward only by the whole seconds that were charged, so a
    sub-second remainder keeps accruing toward the next settlement. With no
    whole second elapsed the record is returned unchanged, which also makes
    settling twice at the same instant a no-op.
    """
    elapsed = elapsed_seconds(record.last_accrual, now)
    if elapsed == 0:
        return record
    return replace(
        record,
        principal=accrued_balance(record.principal, record.rate, elapsed),
        last_accrual=record.last_accrual + timedelta(seconds=elapsed),
    )


def empty_record(now: datetime) -> HolderRecord:
    return HolderRecord(principal=0, rate=0, last_accrual=now)
