"""
conftest.py - Shared pytest fixtures for rebase ledger tests

Provides common fixtures used across unit, conformance and functional tests:
- Ledgers (empty, with a minter, with a funded holder)
- Vault setups (ledger + native currency + vault with the mint/burn role)
- Arithmetic helpers that restate the accrual formula independently
"""

import pytest
from datetime import datetime, timedelta

from rebase_ledger import (
    RebaseToken, NativeCurrency, Vault,
    PRECISION, DEFAULT_INTEREST_RATE,
)


# =============================================================================
# CONSTANTS
# =============================================================================

T0 = datetime(2025, 1, 1)
ONE_DAY = timedelta(days=1)
UNIT = 10 ** 18
RATE = DEFAULT_INTEREST_RATE          # 5e10
LOWER_RATE = 3 * 10 ** 10

OWNER = "admin"
MINTER = "minter"


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def expected_balance(principal: int, rate: int, seconds: int) -> int:
    """Linear interest with floor division, written out independently of the engine."""
    return principal * (PRECISION + rate * seconds) // PRECISION


def ledger_state(token: RebaseToken) -> dict:
    """Everything a failed operation must leave untouched."""
    return {
        "holders": {h: token.get_holder(h) for h in sorted(token.list_holders())},
        "total_supply": token.total_supply(),
        "rate": token.get_interest_rate(),
        "allowances": dict(token._allowances),
        "events": list(token.event_log),
        "owner": token.owner,
    }


def make_token(**kwargs) -> RebaseToken:
    """Quiet ledger starting at T0 with MINTER holding the mint/burn role."""
    kwargs.setdefault("initial_time", T0)
    kwargs.setdefault("verbose", False)
    token = RebaseToken(OWNER, **kwargs)
    token.grant_mint_and_burn_role(OWNER, MINTER)
    return token


# =============================================================================
# LEDGER FIXTURES
# =============================================================================

@pytest.fixture
def empty_token():
    """Fresh ledger, no roles granted, no holders."""
    return RebaseToken(OWNER, initial_time=T0, verbose=False)


@pytest.fixture
def token():
    """Ledger with MINTER allowed to mint and burn."""
    return make_token()


@pytest.fixture
def funded_token(token):
    """Ledger where alice was minted 100 tokens at T0 at the default rate."""
    token.mint(MINTER, "alice", 100 * UNIT)
    return token


# =============================================================================
# VAULT FIXTURES
# =============================================================================

@pytest.fixture
def vault_setup():
    """
    Ledger, currency and vault wired together.

    alice holds 10 ETH of underlying value; the owner holds 100 ETH for rewards.
    Returns (token, eth, vault).
    """
    token = RebaseToken(OWNER, initial_time=T0, verbose=False)
    eth = NativeCurrency("ETH", verbose=False)
    vault = Vault(token, eth, verbose=False)
    token.grant_mint_and_burn_role(OWNER, vault.address)
    eth.issue("alice", 10 * UNIT)
    eth.issue(OWNER, 100 * UNIT)
    return token, eth, vault
