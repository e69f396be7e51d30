"""
rebase_ledger - Interest-Bearing Rebase Ledger

A transferable balance ledger whose balances grow with simple interest at a
per-holder locked-in rate, plus a vault that issues ledger balance against
deposited value and pays out principal plus interest on withdrawal.

Usage:
    from rebase_ledger import RebaseToken, NativeCurrency, Vault, MAX_AMOUNT

    token = RebaseToken("admin", initial_time=datetime(2025, 1, 1))
    eth = NativeCurrency("ETH")
    vault = Vault(token, eth)
    token.grant_mint_and_burn_role("admin", vault.address)

    eth.issue("alice", 10**18)
    vault.deposit("alice", 10**18)

    token.advance_time(datetime(2025, 1, 2))
    token.balance_of("alice")            # principal + one day of interest

    eth.issue("admin", 10**18)
    vault.fund_rewards("admin", 10**18)  # custody for the interest
    vault.withdraw("alice", MAX_AMOUNT)
"""

# Core types
from .core import (
    LedgerView,
    MintBurnCapability,
    HolderRecord,
    LedgerError,
    Unauthorized,
    InsufficientBalance,
    InsufficientAllowance,
    RateIncreaseRejected,
    ValueReleaseFailed,
    TransferFailed,
    PRECISION,
    MAX_AMOUNT,
    DEFAULT_INTEREST_RATE,
    DECIMALS,
    SECONDS_PER_DAY,
    SECONDS_PER_YEAR,
    MINT_AND_BURN_ROLE,
    interest_factor,
    accrued_balance,
    effective_balance,
    elapsed_seconds,
    settle,
)

# Events
from .events import (
    Event,
    Transfer,
    Approval,
    InterestRateSet,
    RoleGranted,
    OwnershipTransferred,
    Deposit,
    Redeem,
)

# Undo log
from .journal import Journal

# Access control
from .access import AccessControl

# Ledger
from .ledger import RebaseToken

# Underlying value and custody
from .native import NativeCurrency
from .vault import Vault

# Forecasting
from .projection import (
    accrual_curve,
    project_holder,
    project_balances,
    unsettled_interest,
    seconds_until,
    annual_percentage_rate,
)

__all__ = [
    # Core
    'LedgerView', 'MintBurnCapability', 'HolderRecord',
    'LedgerError', 'Unauthorized', 'InsufficientBalance', 'InsufficientAllowance',
    'RateIncreaseRejected', 'ValueReleaseFailed', 'TransferFailed',
    'PRECISION', 'MAX_AMOUNT', 'DEFAULT_INTEREST_RATE', 'DECIMALS',
    'SECONDS_PER_DAY', 'SECONDS_PER_YEAR', 'MINT_AND_BURN_ROLE',
    'interest_factor', 'accrued_balance', 'effective_balance', 'elapsed_seconds', 'settle',
    # Events
    'Event', 'Transfer', 'Approval', 'InterestRateSet', 'RoleGranted',
    'OwnershipTransferred', 'Deposit', 'Redeem',
    # Machinery
    'Journal', 'AccessControl',
    # Components
    'RebaseToken', 'NativeCurrency', 'Vault',
    # Forecasting
    'accrual_curve', 'project_holder', 'project_balances', 'unsettled_interest',
    'seconds_until', 'annual_percentage_rate',
]
