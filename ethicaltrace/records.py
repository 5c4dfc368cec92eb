"""
EthicalTrace record types.

All records are frozen dataclasses. Hash fields hold 32-byte values and
serialize as 0x-prefixed hex.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from .hashing import ZERO_HASH, hash_hex

ETHICAL_SCORE_THRESHOLD = 3


class RequestStatus(str, Enum):
    """Verification request status. Requests start PENDING."""
    PENDING = "pending"
    COMPLETED = "completed"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Supplier:
    name: str
    verifier: str
    verified: bool = False
    ethical_score: int = 0
    verification_date: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "verified": self.verified,
            "ethical_score": self.ethical_score,
            "verification_date": self.verification_date,
            "verifier": self.verifier
        }


@dataclass(frozen=True)
class EthicalStandard:
    name: str
    description: str
    required_score: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "required_score": self.required_score
        }


@dataclass(frozen=True)
class LaborCertification:
    name: str
    certification_type: str
    certifier: str
    certified: bool = False
    certification_date: int = 0
    expiration_date: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "certification_type": self.certification_type,
            "certified": self.certified,
            "certification_date": self.certification_date,
            "expiration_date": self.expiration_date,
            "certifier": self.certifier
        }


@dataclass(frozen=True)
class LaborStandard:
    name: str
    description: str
    minimum_wage: int
    max_hours_per_week: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "minimum_wage": self.minimum_wage,
            "max_hours_per_week": self.max_hours_per_week
        }


@dataclass(frozen=True)
class Material:
    name: str
    origin: str
    supplier_id: str
    certifier: str
    certified: bool = False
    certification_date: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "origin": self.origin,
            "supplier_id": self.supplier_id,
            "certified": self.certified,
            "certification_date": self.certification_date,
            "certifier": self.certifier
        }


@dataclass(frozen=True)
class ComplianceRecord:
    """
    Latest compliance verdict for one (subject, standard) pair.

    next_audit_date is only tracked by ledgers that schedule audits; it is
    None elsewhere and omitted from to_dict().
    """
    compliant: bool = False
    evidence_hash: bytes = ZERO_HASH
    verification_date: int = 0
    next_audit_date: Optional[int] = None

    @classmethod
    def empty(cls, tracks_audits: bool = False) -> "ComplianceRecord":
        return cls(next_audit_date=0 if tracks_audits else None)

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "compliant": self.compliant,
            "evidence_hash": hash_hex(self.evidence_hash),
            "verification_date": self.verification_date
        }
        if self.next_audit_date is not None:
            d["next_audit_date"] = self.next_audit_date
        return d


@dataclass(frozen=True)
class ProductVerification:
    ethical_score: int
    labor_certified: bool
    materials_certified: bool
    verification_date: int
    verifier: str
    verification_hash: bytes

    def is_ethical(self) -> bool:
        return self.ethical_score >= ETHICAL_SCORE_THRESHOLD and self.labor_certified and self.materials_certified

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ethical_score": self.ethical_score,
            "labor_certified": self.labor_certified,
            "materials_certified": self.materials_certified,
            "verification_date": self.verification_date,
            "verifier": self.verifier,
            "verification_hash": hash_hex(self.verification_hash)
        }


@dataclass(frozen=True)
class VerificationRequest:
    product_id: str
    consumer: str
    request_date: int
    status: RequestStatus = RequestStatus.PENDING
    response_hash: bytes = ZERO_HASH

    def to_dict(self) -> Dict[str, Any]:
        return {
            "product_id": self.product_id,
            "consumer": self.consumer,
            "request_date": self.request_date,
            "status": self.status.value,
            "response_hash": hash_hex(self.response_hash)
        }


@dataclass(frozen=True)
class ProductReview:
    rating: int
    review_text: str
    review_date: int
    verified_purchase: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rating": self.rating,
            "review_text": self.review_text,
            "review_date": self.review_date,
            "verified_purchase": self.verified_purchase
        }
