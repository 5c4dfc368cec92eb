"""
EthicalTrace Compliance Ledger

Composite-key (subject, standard) compliance records layered over a
subject Registry and a standard Registry of the same store.

Referential integrity is checked at write time: both parents must be
registered. Parents are never deleted, so the check keeps holding.

Records are overwrite-only. Re-recording compliance for a pair replaces
the previous evidence; no history is kept.
"""

from typing import Dict, Optional, Tuple

from .authority import AuthorityGate
from .clock import ValidityClock
from .hashing import to_hash32
from .outcome import Outcome, StoreError
from .records import ComplianceRecord
from .registry import Registry
from .validation import validate_uint


class ComplianceLedger:
    """
    Args:
        subjects: Registry whose keys are valid subject ids
        standards: Registry whose keys are valid standard ids
        gate: AuthorityGate of the owning store
        clock: ValidityClock of the owning store
        subject_missing: Error for an unregistered subject
        standard_missing: Error for an unregistered standard
        tracks_audits: Whether records carry a next audit date
    """

    def __init__(
        self,
        subjects: Registry,
        standards: Registry,
        gate: AuthorityGate,
        clock: ValidityClock,
        subject_missing: StoreError,
        standard_missing: StoreError,
        tracks_audits: bool = False
    ):
        self.subjects = subjects
        self.standards = standards
        self.gate = gate
        self.clock = clock
        self.subject_missing = subject_missing
        self.standard_missing = standard_missing
        self.tracks_audits = tracks_audits
        self._records: Dict[Tuple[str, str], ComplianceRecord] = {}

    def record(
        self,
        caller: str,
        subject_id: str,
        standard_id: str,
        compliant: bool,
        evidence_hash,
        audit_interval: Optional[int] = None
    ) -> Outcome:
        """Record (or overwrite) the compliance verdict for a pair."""
        evidence = to_hash32(evidence_hash, "evidence_hash")
        if self.tracks_audits:
            validate_uint(audit_interval, "audit_interval")

        outcome = self.gate.require_admin(caller)
        if not outcome:
            return outcome

        if not self.subjects.contains(subject_id):
            return Outcome.fail(self.subject_missing)

        if not self.standards.contains(standard_id):
            return Outcome.fail(self.standard_missing)

        now = self.clock.now()
        self._records[(subject_id, standard_id)] = ComplianceRecord(
            compliant=bool(compliant),
            evidence_hash=evidence,
            verification_date=now,
            next_audit_date=now + audit_interval if self.tracks_audits else None
        )
        return Outcome.ok()

    def check(self, subject_id: str, standard_id: str) -> ComplianceRecord:
        """Return the record for a pair, or a zero-valued record if absent."""
        record = self._records.get((subject_id, standard_id))
        if record is None:
            return ComplianceRecord.empty(self.tracks_audits)
        return record

    def get(self, subject_id: str, standard_id: str) -> Optional[ComplianceRecord]:
        return self._records.get((subject_id, standard_id))

    def is_audit_due(self, subject_id: str, standard_id: str) -> bool:
        """True once the clock reaches a recorded next audit date."""
        record = self._records.get((subject_id, standard_id))
        if record is None or record.next_audit_date is None:
            return False
        return self.clock.has_reached(record.next_audit_date)

    def __len__(self) -> int:
        return len(self._records)
