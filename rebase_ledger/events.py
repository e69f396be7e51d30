"""
events.py - Notification Records

Immutable records appended to a component's event_log when an operation
succeeds. They are observational only: nothing in the ledger or vault reads
them back to make a decision. A rolled-back operation leaves no events behind.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union


@dataclass(frozen=True, slots=True)
class Transfer:
    """Balance moved between holders. sender is None for mints, recipient is None for burns."""
    sender: Optional[str]
    recipient: Optional[str]
    amount: int
    timestamp: datetime

    def __repr__(self) -> str:
        return f"Transfer({self.amount}: {self.sender or '∅'}→{self.recipient or '∅'})"


@dataclass(frozen=True, slots=True)
class Approval:
    owner: str
    spender: str
    amount: int
    timestamp: datetime


@dataclass(frozen=True, slots=True)
class InterestRateSet:
    new_rate: int
    timestamp: datetime


@dataclass(frozen=True, slots=True)
class RoleGranted:
    role: str
    account: str
    timestamp: datetime


@dataclass(frozen=True, slots=True)
class OwnershipTransferred:
    previous_owner: str
    new_owner: str
    timestamp: datetime


@dataclass(frozen=True, slots=True)
class Deposit:
    user: str
    amount: int
    timestamp: datetime


@dataclass(frozen=True, slots=True)
class Redeem:
    user: str
    amount: int
    timestamp: datetime


Event = Union[Transfer, Approval, InterestRateSet, RoleGranted, OwnershipTransferred, Deposit, Redeem]
