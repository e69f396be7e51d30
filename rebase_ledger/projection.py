"""
projection.py - Read-Only Accrual Forecasts

Vectorized helpers for looking ahead without touching ledger state:
- accrual_curve: effective balance of one (principal, rate) over many elapsed times
- project_holder / project_balances: the same from a ledger view at future instants
- unsettled_interest: interest owed but not yet counted in total_supply
- seconds_until: first elapsed time at which a balance reaches a target
- annual_percentage_rate: per-second fixed-point rate as a yearly fraction

Balances are integers far beyond int64 (1e18-scaled), so arrays use dtype=object
and every element is an exact Python int computed with the same floor division
the ledger uses. Results match balance_of() to the unit.
"""

from __future__ import annotations
from datetime import datetime
from typing import Dict, Sequence, Union

import numpy as np

from .core import (
    LedgerView, HolderRecord, PRECISION, SECONDS_PER_YEAR, elapsed_seconds,
)


# Type alias for scalar or array inputs
Elapsed = Union[int, Sequence[int], np.ndarray]


def _as_exact(values: Elapsed) -> np.ndarray:
    arr = np.asarray(values, dtype=object)
    if arr.size and np.any(arr < 0):
        raise ValueError("elapsed seconds must be non-negative")
    return arr


def accrual_curve(principal: int, rate: int, elapsed: Elapsed) -> np.ndarray:
    """
    Effective balance after each elapsed time, in seconds.

    principal * (PRECISION + rate * elapsed) // PRECISION, element-wise.
    """
    if principal < 0 or rate < 0:
        raise ValueError("principal and rate must be non-negative")
    t = _as_exact(elapsed)
    return principal * (PRECISION + rate * t) // PRECISION


def project_holder(record: HolderRecord, times: Sequence[datetime]) -> np.ndarray:
    """Effective balance of a stored record at each of the given instants."""
    elapsed = [elapsed_seconds(record.last_accrual, t) for t in times]
    return accrual_curve(record.principal, record.rate, elapsed)


def project_balances(view: LedgerView, at: datetime) -> Dict[str, int]:
    """
    balance_of() for every holder as it will read at a later instant,
    assuming nothing else happens in between.
    """
    if at < view.current_time:
        raise ValueError(f"Cannot project into the past: {at} < {view.current_time}")
    return {
        holder: int(project_holder(view.get_holder(holder), [at])[0])
        for holder in sorted(view.list_holders())
    }


def unsettled_interest(view: LedgerView) -> int:
    """
    Sum of effective balances minus total supply.

    total_supply only counts settled principal, so this is the interest that
    holders could claim right now but that has not been materialized yet.
    """
    effective = np.array([view.balance_of(h) for h in sorted(view.list_holders())], dtype=object)
    return int(effective.sum()) - view.total_supply()


def seconds_until(principal: int, rate: int, target: int) -> int:
    """
    Smallest whole number of seconds after which the balance reaches target.

    Raises:
        ValueError: If the target can never be reached (zero principal or rate)
    """
    if target <= principal:
        return 0
    if principal == 0 or rate == 0:
        raise ValueError("balance never grows with zero principal or zero rate")
    # principal * (P + r t) // P >= target  <=>  principal * r * t >= target * P - principal * P
    needed = target * PRECISION - principal * PRECISION
    step = principal * rate
    return -(-needed // step)


def annual_percentage_rate(rate: int) -> float:
    """Per-second fixed-point rate expressed as simple yearly interest (0.05 = 5%)."""
    return rate * SECONDS_PER_YEAR / PRECISION
