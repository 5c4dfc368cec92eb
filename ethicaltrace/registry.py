"""
EthicalTrace Registry

Generic keyed record store with create-once / promote / read semantics.

Keys are identifier strings or tuples of them. Values are frozen
dataclasses; a promotion replaces the stored value with an updated copy,
so records handed out by get() never change underneath the caller.
"""

from dataclasses import replace
from typing import Any, Dict, Generic, Hashable, List, Optional, TypeVar

from .authority import AuthorityGate
from .clock import ValidityClock
from .outcome import Outcome, StoreError

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class Registry(Generic[K, V]):
    """
    A keyed record store guarded by a store's AuthorityGate.

    Args:
        name: Registry name used in logs
        gate: AuthorityGate of the owning store
        clock: ValidityClock of the owning store
        exists_error: Error returned when registering an existing key
        missing_error: Error returned when promoting a missing key
        stamp_field: Record field that promote() stamps with the current
            block height, or None for registries that do not stamp
    """

    def __init__(
        self,
        name: str,
        gate: AuthorityGate,
        clock: ValidityClock,
        exists_error: StoreError,
        missing_error: StoreError,
        stamp_field: Optional[str] = None
    ):
        self.name = name
        self.gate = gate
        self.clock = clock
        self.exists_error = exists_error
        self.missing_error = missing_error
        self.stamp_field = stamp_field
        self._records: Dict[K, V] = {}

    def register(self, caller: str, key: K, record: V, gated: bool = True) -> Outcome:
        """
        Insert a new record. A second register for the same key is
        rejected and the stored record is left untouched.
        """
        if gated:
            outcome = self.gate.require_admin(caller)
            if not outcome:
                return outcome

        if key in self._records:
            return Outcome.fail(self.exists_error)

        self._records[key] = record
        return Outcome.ok()

    def upsert(self, caller: str, key: K, record: V) -> Outcome:
        """Admin-gated insert-or-overwrite with no existence check."""
        outcome = self.gate.require_admin(caller)
        if not outcome:
            return outcome

        self._records[key] = record
        return Outcome.ok()

    def promote(self, caller: str, key: K, **fields: Any) -> Outcome:
        """
        Overwrite fields of an existing record and stamp the current
        block height into stamp_field.
        """
        outcome = self.gate.require_admin(caller)
        if not outcome:
            return outcome

        current = self._records.get(key)
        if current is None:
            return Outcome.fail(self.missing_error)

        if self.stamp_field:
            fields[self.stamp_field] = self.clock.now()

        self._records[key] = replace(current, **fields)
        return Outcome.ok()

    def get(self, key: K) -> Optional[V]:
        return self._records.get(key)

    def contains(self, key: K) -> bool:
        return key in self._records

    def keys(self) -> List[K]:
        return list(self._records.keys())

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, key: object) -> bool:
        return key in self._records
