"""
EthicalTrace store base.

A store owns its AuthorityState, its registries and a serialization lock.
Every mutating call runs under the lock, so a register/promote pair on the
same key is linearizable even when the host serves requests from several
threads. Each mutating call emits exactly one audit event.
"""

import threading
from typing import Any, Callable, Optional

from .authority import AuthorityGate, AuthorityState
from .clock import Clock, ValidityClock
from .logging_config import AuditLogger, audit_log
from .outcome import Outcome
from .validation import validate_identifier


class ComplianceStore:
    """
    Args:
        admin: Initial admin identity
        clock: Block height source shared with the host
        lock: Lock to serialize mutations; pass one lock to several stores
            to serialize across them
        audit: AuditLogger receiving mutation events
    """

    store_name = "store"

    def __init__(
        self,
        admin: str,
        clock: Optional[Clock] = None,
        lock: Optional[Any] = None,
        audit: Optional[AuditLogger] = None
    ):
        validate_identifier(admin, "admin")
        self.authority = AuthorityState(admin=admin)
        self.gate = AuthorityGate(self.authority)
        self.clock = ValidityClock(clock)
        self._lock = lock or threading.RLock()
        self._audit = audit or audit_log

    @property
    def admin(self) -> str:
        return self.authority.admin

    def block_height(self) -> int:
        return self.clock.now()

    def _mutate(self, operation: str, caller: str, action: Callable[[], Outcome], **details: Any) -> Outcome:
        """Run one mutation under the store lock and audit its outcome."""
        validate_identifier(caller, "caller")
        with self._lock:
            outcome = action()
            height = self.clock.now()

        if outcome:
            self._audit.mutation_applied(self.store_name, operation, caller, height, **details)
        else:
            self._audit.mutation_rejected(
                self.store_name, operation, caller, height, outcome.error.to_dict(), **details
            )
        return outcome

    def transfer_admin(self, caller: str, new_admin: str) -> Outcome:
        """
        Hand this store's admin role to new_admin (admin only).

        A non-admin caller is refused before new_admin is validated.
        """
        seen = {}

        def action() -> Outcome:
            outcome = self.gate.require_admin(caller)
            if not outcome:
                return outcome
            validate_identifier(new_admin, "new_admin")
            seen["previous"] = self.authority.admin
            return self.gate.transfer(caller, new_admin)

        outcome = self._mutate("transfer_admin", caller, action, new_admin=new_admin)
        if outcome:
            self._audit.admin_transferred(self.store_name, seen["previous"], new_admin)
        return outcome
