"""
EthicalTrace store tests.

Exercises the four stores through their public operations:
supplier verification, labor certification, material tracking and
consumer verification, plus the authorization and admin-transfer
behaviour they share.
"""

import logging
import threading
import unittest

from ethicaltrace import (
    ConsumerVerification,
    ErrorKind,
    LaborCertificationStore,
    ManualClock,
    MaterialTracking,
    RequestStatus,
    SupplierVerification,
    ValidationError,
    ZERO_HASH,
    evidence_hash_json,
)
from ethicaltrace.logging_config import AuditLogger

ADMIN = "ST1PQHQKV0RJXZFY1DGX8MNSNYVE3VGZJSRTPGZGM"
OTHER = "ST2CY5V39NHDPWSXMW9QDT3HC3GD6Q6XX4CFRK9AG"
THIRD = "ST3THIRDPARTY"

EVIDENCE = evidence_hash_json({"audit": "site-visit", "auditor": "acme"})


class _CaptureHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


class TestSupplierVerification(unittest.TestCase):

    def setUp(self):
        self.clock = ManualClock(height=100)
        self.store = SupplierVerification(admin=ADMIN, clock=self.clock)

    def test_register_then_verify(self):
        self.assertTrue(self.store.register_supplier(ADMIN, "s1", "Eco Fabrics Inc"))
        self.assertEqual(self.store.get_supplier("s1").to_dict(), {
            "name": "Eco Fabrics Inc",
            "verified": False,
            "ethical_score": 0,
            "verification_date": 0,
            "verifier": ADMIN
        })

        self.assertTrue(self.store.verify_supplier(ADMIN, "s1", 4))
        supplier = self.store.get_supplier("s1")
        self.assertTrue(supplier.verified)
        self.assertEqual(supplier.ethical_score, 4)
        self.assertEqual(supplier.verification_date, 100)
        self.assertEqual(supplier.verifier, ADMIN)

    def test_duplicate_supplier(self):
        self.store.register_supplier(ADMIN, "s1", "Eco Fabrics Inc")
        outcome = self.store.register_supplier(ADMIN, "s1", "Imposter")
        self.assertEqual(outcome.kind, ErrorKind.ALREADY_EXISTS)
        self.assertEqual(outcome.code, 101)
        self.assertEqual(self.store.get_supplier("s1").name, "Eco Fabrics Inc")

    def test_verify_unknown_supplier(self):
        outcome = self.store.verify_supplier(ADMIN, "ghost", 4)
        self.assertEqual(outcome.code, 102)
        self.assertIsNone(self.store.get_supplier("ghost"))

    def test_reverify_overwrites_score(self):
        self.store.register_supplier(ADMIN, "s1", "Eco Fabrics Inc")
        self.store.verify_supplier(ADMIN, "s1", 4)
        self.clock.advance(10)
        self.assertTrue(self.store.verify_supplier(ADMIN, "s1", 2))
        supplier = self.store.get_supplier("s1")
        self.assertEqual(supplier.ethical_score, 2)
        self.assertEqual(supplier.verification_date, 110)

    def test_standards(self):
        self.assertTrue(self.store.add_ethical_standard(ADMIN, "std1", "Fair Trade", "Fair pay", 3))
        outcome = self.store.add_ethical_standard(ADMIN, "std1", "Again", "", 1)
        self.assertEqual(outcome.code, 103)
        self.assertEqual(self.store.get_ethical_standard("std1").to_dict(), {
            "name": "Fair Trade",
            "description": "Fair pay",
            "required_score": 3
        })
        self.assertIsNone(self.store.get_ethical_standard("std2"))

    def test_compliance_requires_both_parents(self):
        self.assertEqual(self.store.record_compliance(ADMIN, "s1", "std1", True, EVIDENCE).code, 102)
        self.store.register_supplier(ADMIN, "s1", "Eco Fabrics Inc")
        self.assertEqual(self.store.record_compliance(ADMIN, "s1", "std1", True, EVIDENCE).code, 104)
        self.store.add_ethical_standard(ADMIN, "std1", "Fair Trade", "Fair pay", 3)
        self.assertTrue(self.store.record_compliance(ADMIN, "s1", "std1", True, EVIDENCE))

        record = self.store.check_compliance("s1", "std1")
        self.assertTrue(record.compliant)
        self.assertEqual(record.evidence_hash, EVIDENCE)
        self.assertEqual(record.verification_date, 100)

    def test_compliance_accepts_hex_hash(self):
        self.store.register_supplier(ADMIN, "s1", "Eco Fabrics Inc")
        self.store.add_ethical_standard(ADMIN, "std1", "Fair Trade", "Fair pay", 3)
        self.assertTrue(self.store.record_compliance(ADMIN, "s1", "std1", False, "0x" + EVIDENCE.hex()))
        self.assertEqual(self.store.check_compliance("s1", "std1").evidence_hash, EVIDENCE)

    def test_check_compliance_default(self):
        record = self.store.check_compliance("s1", "std1")
        self.assertFalse(record.compliant)
        self.assertEqual(record.evidence_hash, ZERO_HASH)
        self.assertEqual(record.verification_date, 0)

    def test_malformed_inputs_raise(self):
        with self.assertRaises(ValidationError):
            self.store.register_supplier(ADMIN, "", "Nameless")
        with self.assertRaises(ValidationError):
            self.store.verify_supplier(ADMIN, "s1", -1)
        with self.assertRaises(ValidationError):
            self.store.record_compliance(ADMIN, "s1", "std1", True, b"\x00" * 31)


class TestLaborCertification(unittest.TestCase):

    def setUp(self):
        self.clock = ManualClock(height=100)
        self.store = LaborCertificationStore(admin=ADMIN, clock=self.clock)

    def test_register_is_uncertified(self):
        self.assertTrue(self.store.register_certification(
            ADMIN, "e1", "Textile Factory A", "fair-labor", 500))
        cert = self.store.get_certification("e1")
        self.assertFalse(cert.certified)
        self.assertEqual(cert.expiration_date, 0)
        self.assertEqual(cert.certification_date, 0)
        self.assertEqual(cert.certifier, ADMIN)
        self.assertFalse(self.store.is_certification_valid("e1"))

    def test_validity_boundary(self):
        self.store.register_certification(ADMIN, "e1", "Textile Factory A", "fair-labor")
        self.assertTrue(self.store.certify_entity(ADMIN, "e1", 10))

        cert = self.store.get_certification("e1")
        self.assertTrue(cert.certified)
        self.assertEqual(cert.certification_date, 100)
        self.assertEqual(cert.expiration_date, 110)

        self.clock.set(109)
        self.assertTrue(self.store.is_certification_valid("e1"))
        self.clock.set(110)
        self.assertFalse(self.store.is_certification_valid("e1"))
        self.clock.set(200)
        self.assertFalse(self.store.is_certification_valid("e1"))

    def test_zero_block_certification_is_never_valid(self):
        self.store.register_certification(ADMIN, "e1", "Textile Factory A", "fair-labor")
        self.store.certify_entity(ADMIN, "e1", 0)
        self.assertFalse(self.store.is_certification_valid("e1"))

    def test_recertify_extends(self):
        self.store.register_certification(ADMIN, "e1", "Textile Factory A", "fair-labor")
        self.store.certify_entity(ADMIN, "e1", 10)
        self.clock.set(120)
        self.assertFalse(self.store.is_certification_valid("e1"))
        self.store.certify_entity(ADMIN, "e1", 10)
        self.assertTrue(self.store.is_certification_valid("e1"))
        self.assertEqual(self.store.get_certification("e1").expiration_date, 130)

    def test_unknown_entity(self):
        self.assertEqual(self.store.certify_entity(ADMIN, "ghost", 10).code, 102)
        self.assertFalse(self.store.is_certification_valid("ghost"))
        self.assertIsNone(self.store.get_certification("ghost"))

    def test_duplicate_registration(self):
        self.store.register_certification(ADMIN, "e1", "Textile Factory A", "fair-labor")
        outcome = self.store.register_certification(ADMIN, "e1", "Other", "other")
        self.assertEqual(outcome.code, 101)
        self.assertEqual(self.store.get_certification("e1").name, "Textile Factory A")

    def test_labor_standards(self):
        self.assertTrue(self.store.add_labor_standard(ADMIN, "ls1", "Living Wage", "desc", 15, 48))
        self.assertEqual(self.store.add_labor_standard(ADMIN, "ls1", "x", "y", 1, 1).code, 103)
        standard = self.store.get_labor_standard("ls1")
        self.assertEqual(standard.minimum_wage, 15)
        self.assertEqual(standard.max_hours_per_week, 48)

    def test_compliance_with_audit(self):
        self.assertEqual(self.store.record_compliance(ADMIN, "e1", "ls1", True, EVIDENCE, 50).code, 102)
        self.store.register_certification(ADMIN, "e1", "Textile Factory A", "fair-labor")
        self.assertEqual(self.store.record_compliance(ADMIN, "e1", "ls1", True, EVIDENCE, 50).code, 104)
        self.store.add_labor_standard(ADMIN, "ls1", "Living Wage", "desc", 15, 48)
        self.assertIsNone(self.store.get_compliance("e1", "ls1"))

        self.assertTrue(self.store.record_compliance(ADMIN, "e1", "ls1", True, EVIDENCE, 50))
        record = self.store.get_compliance("e1", "ls1")
        self.assertTrue(record.compliant)
        self.assertEqual(record.verification_date, 100)
        self.assertEqual(record.next_audit_date, 150)
        self.assertEqual(record.to_dict()["next_audit_date"], 150)

        self.assertFalse(self.store.is_audit_due("e1", "ls1"))
        self.clock.set(150)
        self.assertTrue(self.store.is_audit_due("e1", "ls1"))

    def test_negative_blocks_raise(self):
        self.store.register_certification(ADMIN, "e1", "Textile Factory A", "fair-labor")
        with self.assertRaises(ValidationError):
            self.store.certify_entity(ADMIN, "e1", -5)
        with self.assertRaises(ValidationError):
            self.store.register_certification(ADMIN, "e2", "x", "y", -1)


class TestMaterialTracking(unittest.TestCase):

    def setUp(self):
        self.clock = ManualClock(height=42)
        self.store = MaterialTracking(admin=ADMIN, clock=self.clock)

    def test_register_and_certify(self):
        self.assertTrue(self.store.register_material(ADMIN, "m1", "Organic Cotton", "IN", "s1"))
        self.assertFalse(self.store.is_material_certified("m1"))

        self.assertTrue(self.store.certify_material(ADMIN, "m1"))
        material = self.store.get_material("m1")
        self.assertTrue(material.certified)
        self.assertEqual(material.certification_date, 42)
        self.assertEqual(material.supplier_id, "s1")
        self.assertTrue(self.store.is_material_certified("m1"))

    def test_existence(self):
        self.store.register_material(ADMIN, "m1", "Organic Cotton", "IN", "s1")
        self.assertEqual(self.store.register_material(ADMIN, "m1", "Other", "US", "s2").code, 101)
        self.assertEqual(self.store.certify_material(ADMIN, "ghost").code, 102)
        self.assertIsNone(self.store.get_material("ghost"))
        self.assertFalse(self.store.is_material_certified("ghost"))


class TestConsumerVerification(unittest.TestCase):

    def setUp(self):
        self.clock = ManualClock(height=300)
        self.store = ConsumerVerification(admin=ADMIN, clock=self.clock)

    def test_ethical_predicate(self):
        self.assertTrue(self.store.register_verification(ADMIN, "p1", 4, True, True, EVIDENCE))
        self.assertTrue(self.store.register_verification(ADMIN, "p2", 2, False, True, EVIDENCE))
        self.assertTrue(self.store.is_product_ethical("p1"))
        self.assertFalse(self.store.is_product_ethical("p2"))
        self.assertFalse(self.store.is_product_ethical("p3"))

    def test_ethical_threshold(self):
        self.store.register_verification(ADMIN, "p1", 3, True, True, EVIDENCE)
        self.store.register_verification(ADMIN, "p2", 5, True, False, EVIDENCE)
        self.assertTrue(self.store.is_product_ethical("p1"))
        self.assertFalse(self.store.is_product_ethical("p2"))

    def test_verification_upserts(self):
        self.store.register_verification(ADMIN, "p1", 4, True, True, EVIDENCE)
        self.clock.advance(2)
        self.assertTrue(self.store.register_verification(ADMIN, "p1", 1, True, True, ZERO_HASH))
        verification = self.store.get_product_verification("p1")
        self.assertEqual(verification.ethical_score, 1)
        self.assertEqual(verification.verification_date, 302)
        self.assertFalse(self.store.is_product_ethical("p1"))

    def test_request_lifecycle(self):
        self.assertTrue(self.store.request_verification(OTHER, "r1", "p1"))
        request = self.store.get_verification_request("r1")
        self.assertEqual(request.status, RequestStatus.PENDING)
        self.assertEqual(request.consumer, OTHER)
        self.assertEqual(request.request_date, 300)
        self.assertEqual(request.response_hash, ZERO_HASH)

        self.assertEqual(self.store.request_verification(THIRD, "r1", "p9").code, 103)
        self.assertEqual(self.store.get_verification_request("r1").product_id, "p1")

        self.assertEqual(self.store.respond_to_request(OTHER, "r1", "completed", EVIDENCE).code, 100)
        self.assertTrue(self.store.respond_to_request(ADMIN, "r1", "completed", EVIDENCE))
        request = self.store.get_verification_request("r1")
        self.assertEqual(request.status, RequestStatus.COMPLETED)
        self.assertEqual(request.response_hash, EVIDENCE)
        self.assertEqual(request.consumer, OTHER)
        self.assertEqual(request.request_date, 300)

    def test_respond_to_missing_request(self):
        outcome = self.store.respond_to_request(ADMIN, "ghost", RequestStatus.REJECTED, EVIDENCE)
        self.assertEqual(outcome.code, 104)
        self.assertIsNone(self.store.get_verification_request("ghost"))

    def test_respond_status_validation(self):
        self.store.request_verification(OTHER, "r1", "p1")
        with self.assertRaises(ValidationError):
            self.store.respond_to_request(ADMIN, "r1", "pending", EVIDENCE)
        with self.assertRaises(ValidationError):
            self.store.respond_to_request(ADMIN, "r1", "approved", EVIDENCE)

    def test_non_admin_refused_before_status_check(self):
        self.store.request_verification(OTHER, "r1", "p1")
        self.assertEqual(self.store.respond_to_request(OTHER, "r1", "pending", EVIDENCE).code, 100)
        self.assertEqual(self.store.respond_to_request(OTHER, "r1", "completed", "0x12").code, 100)
        self.assertEqual(self.store.get_verification_request("r1").status, RequestStatus.PENDING)

    def test_reviews(self):
        self.assertEqual(self.store.submit_review(OTHER, "p1", 6, "bad", True).code, 106)
        self.assertIsNone(self.store.get_product_review("p1", OTHER))

        self.assertTrue(self.store.submit_review(OTHER, "p1", 0, "meh", False))
        self.assertEqual(self.store.submit_review(OTHER, "p1", 4, "again", True).code, 105)
        self.assertEqual(self.store.submit_review(OTHER, "p1", 6, "again", True).kind,
                         ErrorKind.ALREADY_REVIEWED)
        self.assertTrue(self.store.submit_review(THIRD, "p1", 5, "great", True))

        review = self.store.get_product_review("p1", OTHER)
        self.assertEqual(review.rating, 0)
        self.assertEqual(review.review_date, 300)

    def test_reviews_need_no_verification(self):
        self.assertTrue(self.store.submit_review(ADMIN, "unlisted", 3, "", False))


class TestAuthorization(unittest.TestCase):
    """Gated operations by a non-admin fail and leave state unchanged."""

    def setUp(self):
        self.clock = ManualClock(height=10)

    def test_supplier_gates(self):
        store = SupplierVerification(admin=ADMIN, clock=self.clock)
        store.register_supplier(ADMIN, "s1", "Eco Fabrics Inc")
        store.add_ethical_standard(ADMIN, "std1", "Fair Trade", "desc", 3)

        results = [
            store.register_supplier(OTHER, "s2", "x"),
            store.verify_supplier(OTHER, "s1", 5),
            store.add_ethical_standard(OTHER, "std2", "x", "y", 1),
            store.record_compliance(OTHER, "s1", "std1", True, EVIDENCE),
        ]
        for outcome in results:
            self.assertEqual(outcome.code, 100)

        self.assertIsNone(store.get_supplier("s2"))
        self.assertFalse(store.get_supplier("s1").verified)
        self.assertIsNone(store.get_ethical_standard("std2"))
        self.assertFalse(store.check_compliance("s1", "std1").compliant)

    def test_labor_gates(self):
        store = LaborCertificationStore(admin=ADMIN, clock=self.clock)
        store.register_certification(ADMIN, "e1", "Factory", "fair-labor")
        store.add_labor_standard(ADMIN, "ls1", "Living Wage", "desc", 15, 48)

        results = [
            store.register_certification(OTHER, "e2", "x", "y"),
            store.certify_entity(OTHER, "e1", 100),
            store.add_labor_standard(OTHER, "ls2", "x", "y", 1, 1),
            store.record_compliance(OTHER, "e1", "ls1", True, EVIDENCE, 10),
        ]
        for outcome in results:
            self.assertEqual(outcome.kind, ErrorKind.NOT_AUTHORIZED)

        self.assertIsNone(store.get_certification("e2"))
        self.assertFalse(store.get_certification("e1").certified)
        self.assertIsNone(store.get_labor_standard("ls2"))
        self.assertIsNone(store.get_compliance("e1", "ls1"))

    def test_material_gates(self):
        store = MaterialTracking(admin=ADMIN, clock=self.clock)
        store.register_material(ADMIN, "m1", "Organic Cotton", "IN", "s1")
        self.assertEqual(store.register_material(OTHER, "m2", "x", "y", "s1").code, 100)
        self.assertEqual(store.certify_material(OTHER, "m1").code, 100)
        self.assertIsNone(store.get_material("m2"))
        self.assertFalse(store.is_material_certified("m1"))

    def test_consumer_gates(self):
        store = ConsumerVerification(admin=ADMIN, clock=self.clock)
        store.request_verification(OTHER, "r1", "p1")
        self.assertEqual(store.register_verification(OTHER, "p1", 5, True, True, EVIDENCE).code, 100)
        self.assertEqual(store.respond_to_request(OTHER, "r1", "rejected", EVIDENCE).code, 100)
        self.assertIsNone(store.get_product_verification("p1"))
        self.assertEqual(store.get_verification_request("r1").status, RequestStatus.PENDING)


class TestAdminTransfer(unittest.TestCase):

    def _stores(self):
        clock = ManualClock(height=1)
        return [
            SupplierVerification(admin=ADMIN, clock=clock),
            LaborCertificationStore(admin=ADMIN, clock=clock),
            MaterialTracking(admin=ADMIN, clock=clock),
            ConsumerVerification(admin=ADMIN, clock=clock),
        ]

    def test_transfer_in_every_store(self):
        for store in self._stores():
            self.assertEqual(store.transfer_admin(OTHER, THIRD).code, 100)
            self.assertTrue(store.transfer_admin(ADMIN, OTHER))
            self.assertEqual(store.admin, OTHER)
            self.assertEqual(store.transfer_admin(ADMIN, ADMIN).code, 100)
            self.assertEqual(store.admin, OTHER)

    def test_capabilities_follow_admin(self):
        store = SupplierVerification(admin=ADMIN, clock=ManualClock(height=5))
        store.transfer_admin(ADMIN, OTHER)
        self.assertEqual(store.register_supplier(ADMIN, "s1", "x").code, 100)
        self.assertTrue(store.register_supplier(OTHER, "s1", "x"))
        self.assertTrue(store.verify_supplier(OTHER, "s1", 4))
        self.assertEqual(store.get_supplier("s1").verifier, OTHER)

    def test_stores_have_independent_admins(self):
        clock = ManualClock()
        suppliers = SupplierVerification(admin=ADMIN, clock=clock)
        labor = LaborCertificationStore(admin=ADMIN, clock=clock)
        suppliers.transfer_admin(ADMIN, OTHER)
        self.assertEqual(labor.admin, ADMIN)
        self.assertTrue(labor.register_certification(ADMIN, "e1", "x", "y"))

    def test_transfer_validates_new_admin(self):
        store = MaterialTracking(admin=ADMIN)
        with self.assertRaises(ValidationError):
            store.transfer_admin(ADMIN, "")

    def test_non_admin_refused_before_new_admin_check(self):
        store = MaterialTracking(admin=ADMIN)
        self.assertEqual(store.transfer_admin(OTHER, "").code, 100)
        self.assertEqual(store.admin, ADMIN)


class TestAuditTrail(unittest.TestCase):

    def setUp(self):
        self.handler = _CaptureHandler()
        self.logger = logging.getLogger("ethicaltrace.audit.test")
        self.logger.addHandler(self.handler)
        self.logger.setLevel(logging.DEBUG)
        self.logger.propagate = False
        self.store = SupplierVerification(
            admin=ADMIN, clock=ManualClock(height=9), audit=AuditLogger("ethicaltrace.audit.test")
        )

    def tearDown(self):
        self.logger.removeHandler(self.handler)

    def _events(self):
        return [r.extra_fields for r in self.handler.records]

    def test_one_event_per_mutation(self):
        self.store.register_supplier(ADMIN, "s1", "Eco Fabrics Inc")
        self.store.register_supplier(OTHER, "s2", "x")
        events = self._events()
        self.assertEqual([e["event_type"] for e in events], ["MUTATION_APPLIED", "MUTATION_REJECTED"])
        self.assertEqual(events[0]["operation"], "register_supplier")
        self.assertEqual(events[0]["block_height"], 9)
        self.assertEqual(events[1]["error"]["err"], 100)

    def test_transfer_is_audited(self):
        self.store.transfer_admin(ADMIN, OTHER)
        transfer = [e for e in self._events() if e["event_type"] == "ADMIN_TRANSFERRED"]
        self.assertEqual(len(transfer), 1)
        self.assertEqual(transfer[0]["previous_admin"], ADMIN)
        self.assertEqual(transfer[0]["new_admin"], OTHER)


class TestConcurrentRegistration(unittest.TestCase):

    def test_single_winner(self):
        store = SupplierVerification(admin=ADMIN, clock=ManualClock())
        results = []

        def register():
            results.append(store.register_supplier(ADMIN, "s1", threading.current_thread().name))

        threads = [threading.Thread(target=register) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(sum(1 for r in results if r), 1)
        self.assertEqual(sum(1 for r in results if r.code == 101), 7)


if __name__ == "__main__":
    unittest.main()
