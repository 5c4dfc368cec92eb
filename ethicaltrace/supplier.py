"""
Supplier Verification store.

Suppliers are registered once by the admin and later verified with an
ethical score. Ethical standards are registered once. Compliance of a
supplier with a standard is recorded by the admin and read back with a
zero-valued default when nothing was recorded.
"""

from typing import Optional

from .compliance import ComplianceLedger
from .hashing import to_hash32
from .outcome import ErrorKind, Outcome, StoreError
from .records import ComplianceRecord, EthicalStandard, Supplier
from .registry import Registry
from .store import ComplianceStore
from .validation import validate_identifier, validate_uint

ERR_SUPPLIER_EXISTS = StoreError(ErrorKind.ALREADY_EXISTS, 101, "ERR-SUPPLIER-EXISTS")
ERR_SUPPLIER_NOT_FOUND = StoreError(ErrorKind.NOT_FOUND, 102, "ERR-SUPPLIER-NOT-FOUND")
ERR_STANDARD_EXISTS = StoreError(ErrorKind.ALREADY_EXISTS, 103, "ERR-STANDARD-EXISTS")
ERR_STANDARD_NOT_FOUND = StoreError(ErrorKind.NOT_FOUND, 104, "ERR-STANDARD-NOT-FOUND")


class SupplierVerification(ComplianceStore):
    """Supplier registry, ethical standards and supplier compliance."""

    store_name = "supplier_verification"

    def __init__(self, admin, clock=None, lock=None, audit=None):
        super().__init__(admin, clock=clock, lock=lock, audit=audit)
        self.suppliers: Registry[str, Supplier] = Registry(
            "suppliers", self.gate, self.clock,
            exists_error=ERR_SUPPLIER_EXISTS,
            missing_error=ERR_SUPPLIER_NOT_FOUND,
            stamp_field="verification_date"
        )
        self.standards: Registry[str, EthicalStandard] = Registry(
            "ethical_standards", self.gate, self.clock,
            exists_error=ERR_STANDARD_EXISTS,
            missing_error=ERR_STANDARD_NOT_FOUND
        )
        self.compliance = ComplianceLedger(
            self.suppliers, self.standards, self.gate, self.clock,
            subject_missing=ERR_SUPPLIER_NOT_FOUND,
            standard_missing=ERR_STANDARD_NOT_FOUND
        )

    def register_supplier(self, caller: str, supplier_id: str, name: str) -> Outcome:
        validate_identifier(supplier_id, "supplier_id")
        record = Supplier(name=name, verifier=caller)
        return self._mutate(
            "register_supplier", caller,
            lambda: self.suppliers.register(caller, supplier_id, record),
            supplier_id=supplier_id
        )

    def verify_supplier(self, caller: str, supplier_id: str, ethical_score: int) -> Outcome:
        validate_uint(ethical_score, "ethical_score")
        return self._mutate(
            "verify_supplier", caller,
            lambda: self.suppliers.promote(
                caller, supplier_id,
                verified=True, ethical_score=ethical_score, verifier=caller
            ),
            supplier_id=supplier_id, ethical_score=ethical_score
        )

    def add_ethical_standard(
        self,
        caller: str,
        standard_id: str,
        name: str,
        description: str,
        required_score: int
    ) -> Outcome:
        validate_identifier(standard_id, "standard_id")
        validate_uint(required_score, "required_score")
        record = EthicalStandard(name=name, description=description, required_score=required_score)
        return self._mutate(
            "add_ethical_standard", caller,
            lambda: self.standards.register(caller, standard_id, record),
            standard_id=standard_id
        )

    def record_compliance(
        self,
        caller: str,
        supplier_id: str,
        standard_id: str,
        compliant: bool,
        evidence_hash
    ) -> Outcome:
        evidence = to_hash32(evidence_hash, "evidence_hash")
        return self._mutate(
            "record_compliance", caller,
            lambda: self.compliance.record(caller, supplier_id, standard_id, compliant, evidence),
            supplier_id=supplier_id, standard_id=standard_id, compliant=bool(compliant)
        )

    def check_compliance(self, supplier_id: str, standard_id: str) -> ComplianceRecord:
        return self.compliance.check(supplier_id, standard_id)

    def get_supplier(self, supplier_id: str) -> Optional[Supplier]:
        return self.suppliers.get(supplier_id)

    def get_ethical_standard(self, standard_id: str) -> Optional[EthicalStandard]:
        return self.standards.get(standard_id)
