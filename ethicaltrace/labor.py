"""
Labor Certification store.

Certifications are registered unverified, then certified for a number of
blocks. A certification is valid while certified and the current block
height is strictly below its expiration height.

Labor standards carry wage and hours requirements. Entity compliance with
a standard also schedules the next audit relative to the recording block.
"""

from typing import Optional

from .compliance import ComplianceLedger
from .hashing import to_hash32
from .outcome import ErrorKind, Outcome, StoreError
from .records import ComplianceRecord, LaborCertification, LaborStandard
from .registry import Registry
from .store import ComplianceStore
from .validation import validate_identifier, validate_uint

ERR_CERTIFICATION_EXISTS = StoreError(ErrorKind.ALREADY_EXISTS, 101, "ERR-CERTIFICATION-EXISTS")
ERR_CERTIFICATION_NOT_FOUND = StoreError(ErrorKind.NOT_FOUND, 102, "ERR-CERTIFICATION-NOT-FOUND")
ERR_STANDARD_EXISTS = StoreError(ErrorKind.ALREADY_EXISTS, 103, "ERR-STANDARD-EXISTS")
ERR_STANDARD_NOT_FOUND = StoreError(ErrorKind.NOT_FOUND, 104, "ERR-STANDARD-NOT-FOUND")


class LaborCertificationStore(ComplianceStore):
    """Labor certifications, labor standards and entity compliance."""

    store_name = "labor_certification"

    def __init__(self, admin, clock=None, lock=None, audit=None):
        super().__init__(admin, clock=clock, lock=lock, audit=audit)
        self.certifications: Registry[str, LaborCertification] = Registry(
            "labor_certifications", self.gate, self.clock,
            exists_error=ERR_CERTIFICATION_EXISTS,
            missing_error=ERR_CERTIFICATION_NOT_FOUND,
            stamp_field="certification_date"
        )
        self.standards: Registry[str, LaborStandard] = Registry(
            "labor_standards", self.gate, self.clock,
            exists_error=ERR_STANDARD_EXISTS,
            missing_error=ERR_STANDARD_NOT_FOUND
        )
        self.compliance = ComplianceLedger(
            self.certifications, self.standards, self.gate, self.clock,
            subject_missing=ERR_CERTIFICATION_NOT_FOUND,
            standard_missing=ERR_STANDARD_NOT_FOUND,
            tracks_audits=True
        )

    def register_certification(
        self,
        caller: str,
        entity_id: str,
        name: str,
        certification_type: str,
        expiration_blocks: Optional[int] = None
    ) -> Outcome:
        """
        Register an uncertified entity.

        expiration_blocks is accepted for call compatibility but the
        expiration height stays 0 until certify_entity sets it.
        """
        validate_identifier(entity_id, "entity_id")
        if expiration_blocks is not None:
            validate_uint(expiration_blocks, "expiration_blocks")
        record = LaborCertification(name=name, certification_type=certification_type, certifier=caller)
        return self._mutate(
            "register_certification", caller,
            lambda: self.certifications.register(caller, entity_id, record),
            entity_id=entity_id
        )

    def certify_entity(self, caller: str, entity_id: str, expiration_blocks: int) -> Outcome:
        validate_uint(expiration_blocks, "expiration_blocks")
        return self._mutate(
            "certify_entity", caller,
            lambda: self.certifications.promote(
                caller, entity_id,
                certified=True,
                expiration_date=self.clock.expiry(expiration_blocks),
                certifier=caller
            ),
            entity_id=entity_id, expiration_blocks=expiration_blocks
        )

    def add_labor_standard(
        self,
        caller: str,
        standard_id: str,
        name: str,
        description: str,
        minimum_wage: int,
        max_hours_per_week: int
    ) -> Outcome:
        validate_identifier(standard_id, "standard_id")
        validate_uint(minimum_wage, "minimum_wage")
        validate_uint(max_hours_per_week, "max_hours_per_week")
        record = LaborStandard(
            name=name,
            description=description,
            minimum_wage=minimum_wage,
            max_hours_per_week=max_hours_per_week
        )
        return self._mutate(
            "add_labor_standard", caller,
            lambda: self.standards.register(caller, standard_id, record),
            standard_id=standard_id
        )

    def record_compliance(
        self,
        caller: str,
        entity_id: str,
        standard_id: str,
        compliant: bool,
        evidence_hash,
        next_audit_blocks: int
    ) -> Outcome:
        evidence = to_hash32(evidence_hash, "evidence_hash")
        validate_uint(next_audit_blocks, "next_audit_blocks")
        return self._mutate(
            "record_compliance", caller,
            lambda: self.compliance.record(
                caller, entity_id, standard_id, compliant, evidence, audit_interval=next_audit_blocks
            ),
            entity_id=entity_id, standard_id=standard_id, compliant=bool(compliant)
        )

    def is_certification_valid(self, entity_id: str) -> bool:
        certification = self.certifications.get(entity_id)
        if certification is None:
            return False
        return certification.certified and self.clock.is_before(certification.expiration_date)

    def is_audit_due(self, entity_id: str, standard_id: str) -> bool:
        return self.compliance.is_audit_due(entity_id, standard_id)

    def get_certification(self, entity_id: str) -> Optional[LaborCertification]:
        return self.certifications.get(entity_id)

    def get_labor_standard(self, standard_id: str) -> Optional[LaborStandard]:
        return self.standards.get(standard_id)

    def get_compliance(self, entity_id: str, standard_id: str) -> Optional[ComplianceRecord]:
        return self.compliance.get(entity_id, standard_id)
