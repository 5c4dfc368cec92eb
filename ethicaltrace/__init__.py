"""
EthicalTrace: Ethical Compliance Registry

Version: 1.0.0
License: Apache 2.0

Four independent record stores for supply-chain ethics:

- Supplier verification (suppliers, ethical standards, compliance)
- Labor certification (block-height expiry, labor standards, audits)
- Material tracking
- Consumer verification (product verifications, requests, reviews)

Every store shares one pattern: a single admin gates every mutation,
records are created once and promoted once, and validity is judged
against an external block height. Mutations never raise on domain
failures; they return an Outcome that is either OK or carries a typed
StoreError.

Usage:
    from ethicaltrace import ManualClock, SupplierVerification

    clock = ManualClock(height=100)
    suppliers = SupplierVerification(admin="ST1ADMIN", clock=clock)

    outcome = suppliers.register_supplier("ST1ADMIN", "s1", "Eco Fabrics Inc")
    if outcome.is_ok():
        suppliers.verify_supplier("ST1ADMIN", "s1", 4)
    else:
        print(outcome.to_dict())    # {"err": 101}
"""

__version__ = "1.0.0"
__license__ = "Apache-2.0"

# Outcomes and validation
from .outcome import ErrorKind, Outcome, StoreError, ERR_NOT_AUTHORIZED
from .validation import ValidationError, MAX_ID_LENGTH

# Hashing
from .canonicalization import canonicalize, canonicalize_str
from .hashing import (
    ZERO_HASH,
    to_hash32,
    hash_hex,
    is_zero_hash,
    evidence_hash,
    evidence_hash_json,
)

# Core components
from .authority import AuthorityGate, AuthorityState
from .clock import Clock, ManualClock, EpochClock, ValidityClock
from .registry import Registry
from .compliance import ComplianceLedger
from .reviews import ReviewStore, MAX_RATING
from .records import (
    ETHICAL_SCORE_THRESHOLD,
    RequestStatus,
    Supplier,
    EthicalStandard,
    LaborCertification,
    LaborStandard,
    Material,
    ComplianceRecord,
    ProductVerification,
    VerificationRequest,
    ProductReview,
)

# Stores
from .store import ComplianceStore
from .supplier import SupplierVerification
from .labor import LaborCertificationStore
from .material import MaterialTracking
from .consumer import ConsumerVerification


__all__ = [
    "__version__",

    # Outcomes
    "ErrorKind",
    "Outcome",
    "StoreError",
    "ERR_NOT_AUTHORIZED",
    "ValidationError",
    "MAX_ID_LENGTH",

    # Hashing
    "canonicalize",
    "canonicalize_str",
    "ZERO_HASH",
    "to_hash32",
    "hash_hex",
    "is_zero_hash",
    "evidence_hash",
    "evidence_hash_json",

    # Core
    "AuthorityGate",
    "AuthorityState",
    "Clock",
    "ManualClock",
    "EpochClock",
    "ValidityClock",
    "Registry",
    "ComplianceLedger",
    "ReviewStore",
    "MAX_RATING",

    # Records
    "ETHICAL_SCORE_THRESHOLD",
    "RequestStatus",
    "Supplier",
    "EthicalStandard",
    "LaborCertification",
    "LaborStandard",
    "Material",
    "ComplianceRecord",
    "ProductVerification",
    "VerificationRequest",
    "ProductReview",

    # Stores
    "ComplianceStore",
    "SupplierVerification",
    "LaborCertificationStore",
    "MaterialTracking",
    "ConsumerVerification",
]
