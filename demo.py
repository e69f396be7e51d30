#!/usr/bin/env python3
"""
demo.py - Interactive Tutorial: Learn the Rebase Ledger Step by Step

A walk through the interest-bearing ledger and its vault. Each step builds on
the previous one. Press Enter to advance.

WHAT YOU'LL LEARN:
  1-3: Foundation  - The empty ledger, roles, the first mint
  4-5: Accrual     - Lazy interest, settlement on write
  6:   Rates       - Lowering the global rate, grandfathered holders
  7-8: Vault       - Deposit, withdraw everything, failed payouts roll back
  9:   Forecasting - Projections and what-if clones

Run:
    python demo.py           # Interactive mode (press Enter for each step)
    python demo.py --quick   # Run all steps without pausing
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
import sys

from rebase_ledger import (
    RebaseToken, NativeCurrency, Vault,
    MAX_AMOUNT, PRECISION, LedgerError,
    project_balances, unsettled_interest, annual_percentage_rate,
)


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass
class DemoConfig:
    """Configuration for the tutorial. Modify these to experiment."""
    start_time: datetime = datetime(2025, 1, 1, 9, 0, 0)
    owner: str = "admin"

    alice_deposit: int = 10 * PRECISION
    rewards_funding: int = 100 * PRECISION
    lower_rate: int = 3 * 10 ** 10

    hold_days: int = 30


CONFIG = DemoConfig()

QUICK_MODE = "--quick" in sys.argv


def wait_for_enter():
    """Pause for user input unless in quick mode."""
    if not QUICK_MODE:
        input("\n[Press Enter to continue...]")


def step_header(number: int, title: str, objective: str):
    print(f"\n{'='*70}")
    print(f"STEP {number}: {title}")
    print(f"{'='*70}")
    print(f"\nObjective: {objective}\n")


def section_header(text: str):
    print(f"\n--- {text} ---\n")


def tokens(amount: int) -> str:
    """Render an 18-decimal amount for humans."""
    return f"{amount / PRECISION:,.6f}"


# ============================================================================
# PHASE 1: FOUNDATION (Steps 1-3)
# ============================================================================

def step_01_empty_ledger():
    step_header(1, "The Empty Ledger",
        "A rebase ledger starts with an owner, a clock and a global rate.")

    print(">>> token = RebaseToken('admin', initial_time=datetime(2025, 1, 1, 9, 0))")
    token = RebaseToken(CONFIG.owner, initial_time=CONFIG.start_time, verbose=True)

    section_header("Initial State")
    print(f"Name / symbol:   {token.name} / {token.symbol}")
    print(f"Owner:           {token.owner}")
    print(f"Current time:    {token.current_time}")
    print(f"Global rate:     {token.get_interest_rate()} per second (x 1e18)")
    print(f"Yearly, simple:  {annual_percentage_rate(token.get_interest_rate()):.2%}")
    print(f"Total supply:    {token.total_supply()}")
    return token


def step_02_roles(token: RebaseToken):
    step_header(2, "Roles",
        "Only the owner grants the mint/burn role; everyone else is rejected.")

    print(">>> token.grant_mint_and_burn_role('mallory', 'mallory')")
    try:
        token.grant_mint_and_burn_role("mallory", "mallory")
    except LedgerError as e:
        print(f"    raised {type(e).__name__}")

    print(">>> token.grant_mint_and_burn_role('admin', 'minter')")
    token.grant_mint_and_burn_role(CONFIG.owner, "minter")
    return token


def step_03_first_mint(token: RebaseToken):
    step_header(3, "The First Mint",
        "Funding a holder from zero locks the current global rate for it.")

    print(">>> token.mint('minter', 'alice', 100 * 10**18)")
    token.mint("minter", "alice", 100 * PRECISION)

    section_header("Holder Record")
    print(f"alice: {token.get_holder('alice')}")
    return token


# ============================================================================
# PHASE 2: ACCRUAL (Steps 4-5)
# ============================================================================

def step_04_lazy_interest(token: RebaseToken):
    step_header(4, "Lazy Interest",
        "balance_of grows with time; nothing is written until a mutation.")

    token.advance_time(CONFIG.start_time + timedelta(days=1))
    print(f"After one day:   balance_of = {tokens(token.balance_of('alice'))}")
    print(f"                 principal  = {tokens(token.principal_balance_of('alice'))}")
    print(f"Total supply:    {tokens(token.total_supply())}")
    print(f"Unsettled:       {tokens(unsettled_interest(token))}")
    return token


def step_05_settlement(token: RebaseToken):
    step_header(5, "Settlement",
        "A transfer folds interest into principal before moving anything.")

    print(">>> token.transfer('alice', 'bob', 40 * 10**18)")
    token.transfer("alice", "bob", 40 * PRECISION)

    section_header("After Transfer")
    print(f"alice: {token.get_holder('alice')}")
    print(f"bob:   {token.get_holder('bob')}")
    print(f"Supply check: {token.verify_supply()}")
    return token


# ============================================================================
# PHASE 3: RATES (Step 6)
# ============================================================================

def step_06_rate_decrease(token: RebaseToken):
    step_header(6, "Lowering the Rate",
        "The owner may only lower the global rate; funded holders keep theirs.")

    print(f">>> token.set_interest_rate('admin', {CONFIG.lower_rate})")
    token.set_interest_rate(CONFIG.owner, CONFIG.lower_rate)

    print(">>> token.set_interest_rate('admin', 10**11)")
    try:
        token.set_interest_rate(CONFIG.owner, 10 ** 11)
    except LedgerError as e:
        print(f"    raised {type(e).__name__}")

    token.mint("minter", "carol", 100 * PRECISION)
    section_header("Locked Rates")
    for holder in ("alice", "bob", "carol"):
        print(f"{holder:6s} {token.get_user_interest_rate(holder)}")
    return token


# ============================================================================
# PHASE 4: VAULT (Steps 7-8)
# ============================================================================

def step_07_vault_round_trip():
    step_header(7, "Vault Round Trip",
        "Deposit underlying value, hold, then withdraw principal plus interest.")

    token = RebaseToken(CONFIG.owner, initial_time=CONFIG.start_time, verbose=False)
    eth = NativeCurrency("ETH", verbose=True)
    vault = Vault(token, eth, verbose=True)
    token.grant_mint_and_burn_role(CONFIG.owner, vault.address)

    eth.issue("alice", CONFIG.alice_deposit)
    eth.issue(CONFIG.owner, CONFIG.rewards_funding)

    vault.deposit("alice", CONFIG.alice_deposit)
    vault.fund_rewards(CONFIG.owner, CONFIG.rewards_funding)

    token.advance_time(CONFIG.start_time + timedelta(days=CONFIG.hold_days))
    print(f"\nalice after {CONFIG.hold_days} days: {tokens(token.balance_of('alice'))}")

    vault.withdraw("alice", MAX_AMOUNT)
    print(f"alice ETH:       {tokens(eth.balance_of('alice'))}")
    print(f"Vault custody:   {tokens(vault.custody_balance())}")
    return token, eth, vault


def step_08_failed_payout():
    step_header(8, "Failed Payout",
        "If paying out fails, the burn is undone as well.")

    token = RebaseToken(CONFIG.owner, initial_time=CONFIG.start_time, verbose=False)
    eth = NativeCurrency("ETH", verbose=True)
    vault = Vault(token, eth, verbose=True)
    token.grant_mint_and_burn_role(CONFIG.owner, vault.address)

    eth.issue("alice", CONFIG.alice_deposit)
    vault.deposit("alice", CONFIG.alice_deposit)
    eth.refuse_receipts("alice")

    try:
        vault.withdraw("alice", MAX_AMOUNT)
    except LedgerError as e:
        print(f"    raised {type(e).__name__}")

    print(f"alice still holds {tokens(token.balance_of('alice'))} {token.symbol}")
    print(f"Vault custody:    {tokens(vault.custody_balance())} ETH")


# ============================================================================
# PHASE 5: FORECASTING (Step 9)
# ============================================================================

def step_09_what_if(token: RebaseToken):
    step_header(9, "What If",
        "Project balances forward, or try changes on a clone.")

    later = token.current_time + timedelta(days=365)
    for holder, balance in project_balances(token, later).items():
        print(f"{holder:6s} in a year: {tokens(balance)}")

    scenario = token.clone()
    scenario.verbose = False
    scenario.transfer("carol", "dave", MAX_AMOUNT)
    print(f"\nIn the clone dave holds {tokens(scenario.balance_of('dave'))}; "
          f"in the live ledger {tokens(token.balance_of('dave'))}")


def main():
    print("=" * 70)
    print("       REBASE LEDGER TUTORIAL")
    print("=" * 70)

    token = step_01_empty_ledger()
    wait_for_enter()
    step_02_roles(token)
    wait_for_enter()
    step_03_first_mint(token)
    wait_for_enter()

    step_04_lazy_interest(token)
    wait_for_enter()
    step_05_settlement(token)
    wait_for_enter()

    step_06_rate_decrease(token)
    wait_for_enter()

    step_07_vault_round_trip()
    wait_for_enter()
    step_08_failed_payout()
    wait_for_enter()

    step_09_what_if(token)

    print("\n" + "=" * 70)
    print("       TUTORIAL COMPLETE!")
    print("=" * 70)
    print("""
    Next steps:
      - Read rebase_ledger/ledger.py for settlement and rate locking
      - Run tests: pytest tests/
    """)


if __name__ == "__main__":
    main()
