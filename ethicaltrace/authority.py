"""
EthicalTrace Authority Gate

Single-admin authorization shared by every mutating operation of a store.

Design principles:
- Fail-closed: any caller that is not exactly the current admin is refused
- One admin per store, held in an explicit AuthorityState
- Transfer is a single step with no validation of the new identity; a bad
  transfer can only be undone by the new admin transferring again
"""

from dataclasses import dataclass

from .outcome import ERR_NOT_AUTHORIZED, Outcome


@dataclass
class AuthorityState:
    """The current admin identity of one store."""
    admin: str


class AuthorityGate:
    """Admin check and transfer over an AuthorityState."""

    def __init__(self, state: AuthorityState):
        self.state = state

    @property
    def admin(self) -> str:
        return self.state.admin

    def is_admin(self, caller: str) -> bool:
        return caller == self.state.admin

    def require_admin(self, caller: str) -> Outcome:
        if not self.is_admin(caller):
            return Outcome.fail(ERR_NOT_AUTHORIZED)
        return Outcome.ok()

    def transfer(self, caller: str, new_admin: str) -> Outcome:
        """
        Hand the admin role to new_admin.

        Only the current admin may transfer. Every later gated call in the
        store is checked against the new admin.
        """
        outcome = self.require_admin(caller)
        if not outcome:
            return outcome
        self.state.admin = new_admin
        return Outcome.ok()
