"""
access.py - Owner and Role Checks

Single-owner model with additive roles. The owner grants roles; grants are
never revoked, and any number of accounts may hold the same role. State
changes go through the owning component's journal so a failed operation
also undoes a grant or an ownership change made inside it.
"""

from __future__ import annotations
from typing import Dict, Set

from .core import Unauthorized
from .journal import Journal


class AccessControl:
    """
    Owner identity plus a role -> accounts mapping.

    Example:
        access = AccessControl("admin", Journal())
        access.grant_role("admin", MINT_AND_BURN_ROLE, "vault")
        access.require_role("vault", MINT_AND_BURN_ROLE, "mint")   # ok
        access.require_role("mallory", MINT_AND_BURN_ROLE, "mint") # Unauthorized
    """

    def __init__(self, owner: str, journal: Journal):
        if not owner or not owner.strip():
            raise ValueError("owner cannot be empty")
        self._owner = owner
        self._roles: Dict[str, Set[str]] = {}
        self._journal = journal

    @property
    def owner(self) -> str:
        return self._owner

    def has_role(self, role: str, account: str) -> bool:
        return account in self._roles.get(role, ())

    def members(self, role: str) -> Set[str]:
        return set(self._roles.get(role, ()))

    def require_owner(self, caller: str, action: str) -> None:
        if caller != self._owner:
            raise Unauthorized(f"{caller} is not the owner and cannot {action}")

    def require_role(self, caller: str, role: str, action: str) -> None:
        if not self.has_role(role, caller):
            raise Unauthorized(f"{caller} lacks {role} and cannot {action}")

    def grant_role(self, caller: str, role: str, account: str) -> bool:
        """
        Grant a role. Owner only.

        Returns:
            True if the account did not already hold the role.
        """
        self.require_owner(caller, f"grant {role}")
        if not account or not account.strip():
            raise ValueError("account cannot be empty")
        if self.has_role(role, account):
            return False
        self._journal.record_item(self._roles, role)
        self._roles[role] = self.members(role) | {account}
        return True

    def transfer_ownership(self, caller: str, new_owner: str) -> str:
        """Hand the owner identity to new_owner. Returns the previous owner."""
        self.require_owner(caller, "transfer ownership")
        if not new_owner or not new_owner.strip():
            raise ValueError("new owner cannot be empty")
        previous = self._owner
        self._journal.record_attr(self, "_owner")
        self._owner = new_owner
        return previous

    def copy(self, journal: Journal) -> AccessControl:
        cloned = AccessControl(self._owner, journal)
        cloned._roles = {role: set(accounts) for role, accounts in self._roles.items()}
        return cloned
