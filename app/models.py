from typing import Annotated

from pydantic import BaseModel, Field

from ethicaltrace import MAX_ID_LENGTH

Identifier = Annotated[str, Field(min_length=1, max_length=MAX_ID_LENGTH)]
Hash32 = Annotated[str, Field(pattern=r"^(0x)?[0-9a-fA-F]{64}$")]
UInt = Annotated[int, Field(ge=0)]


class TransferAdminRequest(BaseModel):
    new_admin: Identifier


# Supplier verification

class RegisterSupplierRequest(BaseModel):
    name: str


class VerifySupplierRequest(BaseModel):
    ethical_score: UInt


class EthicalStandardRequest(BaseModel):
    name: str
    description: str
    required_score: UInt


class SupplierComplianceRequest(BaseModel):
    compliant: bool
    evidence_hash: Hash32


# Labor certification

class RegisterCertificationRequest(BaseModel):
    name: str
    certification_type: str
    expiration_blocks: UInt = 0


class CertifyEntityRequest(BaseModel):
    expiration_blocks: UInt


class LaborStandardRequest(BaseModel):
    name: str
    description: str
    minimum_wage: UInt
    max_hours_per_week: UInt


class LaborComplianceRequest(BaseModel):
    compliant: bool
    evidence_hash: Hash32
    next_audit_blocks: UInt


# Material tracking

class RegisterMaterialRequest(BaseModel):
    name: str
    origin: str
    supplier_id: Identifier


# Consumer verification

class ProductVerificationRequest(BaseModel):
    ethical_score: UInt
    labor_certified: bool
    materials_certified: bool
    verification_hash: Hash32


class OpenVerificationRequest(BaseModel):
    product_id: Identifier


class RespondRequest(BaseModel):
    status: str
    response_hash: Hash32


class ReviewRequest(BaseModel):
    # ratings above 5 are a store outcome (ERR-INVALID-RATING), not a 422
    rating: UInt
    review_text: str
    verified_purchase: bool


class AdvanceClockRequest(BaseModel):
    blocks: UInt = 1
