"""
Consumer Verification store.

- Product verifications are written by the admin and silently overwrite
  any earlier verification of the same product.
- Any caller may open a verification request; only the admin responds.
- Any caller may review a product once.
- A product is ethical iff a verification exists with a score of at least
  3 and both labor and materials certified. No verification means not
  ethical.
"""

from typing import Optional, Union

from .hashing import to_hash32
from .outcome import ErrorKind, Outcome, StoreError
from .records import (
    ProductReview,
    ProductVerification,
    RequestStatus,
    VerificationRequest,
)
from .registry import Registry
from .reviews import ReviewStore
from .store import ComplianceStore
from .validation import ValidationError, validate_identifier, validate_uint

ERR_VERIFICATION_EXISTS = StoreError(ErrorKind.ALREADY_EXISTS, 101, "ERR-VERIFICATION-EXISTS")
ERR_VERIFICATION_NOT_FOUND = StoreError(ErrorKind.NOT_FOUND, 102, "ERR-VERIFICATION-NOT-FOUND")
ERR_REQUEST_EXISTS = StoreError(ErrorKind.ALREADY_EXISTS, 103, "ERR-REQUEST-EXISTS")
ERR_REQUEST_NOT_FOUND = StoreError(ErrorKind.NOT_FOUND, 104, "ERR-REQUEST-NOT-FOUND")
ERR_REVIEW_EXISTS = StoreError(ErrorKind.ALREADY_REVIEWED, 105, "ERR-REVIEW-EXISTS")
ERR_INVALID_RATING = StoreError(ErrorKind.INVALID_RATING, 106, "ERR-INVALID-RATING")


def parse_response_status(status: Union[str, RequestStatus]) -> RequestStatus:
    """A response must move a request out of pending."""
    try:
        parsed = RequestStatus(status)
    except ValueError:
        raise ValidationError("status", f"unknown request status {status!r}")
    if parsed == RequestStatus.PENDING:
        raise ValidationError("status", "a response cannot set the request back to pending")
    return parsed


class ConsumerVerification(ComplianceStore):
    """Product verifications, consumer requests and product reviews."""

    store_name = "consumer_verification"

    def __init__(self, admin, clock=None, lock=None, audit=None):
        super().__init__(admin, clock=clock, lock=lock, audit=audit)
        self.verifications: Registry[str, ProductVerification] = Registry(
            "product_verifications", self.gate, self.clock,
            exists_error=ERR_VERIFICATION_EXISTS,
            missing_error=ERR_VERIFICATION_NOT_FOUND
        )
        self.requests: Registry[str, VerificationRequest] = Registry(
            "verification_requests", self.gate, self.clock,
            exists_error=ERR_REQUEST_EXISTS,
            missing_error=ERR_REQUEST_NOT_FOUND
        )
        self.reviews = ReviewStore(
            self.clock,
            reviewed_error=ERR_REVIEW_EXISTS,
            rating_error=ERR_INVALID_RATING
        )

    def register_verification(
        self,
        caller: str,
        product_id: str,
        ethical_score: int,
        labor_certified: bool,
        materials_certified: bool,
        verification_hash
    ) -> Outcome:
        """Write (or overwrite) the verification of a product."""
        validate_identifier(product_id, "product_id")
        validate_uint(ethical_score, "ethical_score")
        digest = to_hash32(verification_hash, "verification_hash")

        def action() -> Outcome:
            record = ProductVerification(
                ethical_score=ethical_score,
                labor_certified=bool(labor_certified),
                materials_certified=bool(materials_certified),
                verification_date=self.clock.now(),
                verifier=caller,
                verification_hash=digest
            )
            return self.verifications.upsert(caller, product_id, record)

        return self._mutate("register_verification", caller, action, product_id=product_id)

    def request_verification(self, caller: str, request_id: str, product_id: str) -> Outcome:
        """Open a pending request. Open to any caller."""
        validate_identifier(request_id, "request_id")
        validate_identifier(product_id, "product_id")

        def action() -> Outcome:
            record = VerificationRequest(
                product_id=product_id,
                consumer=caller,
                request_date=self.clock.now()
            )
            return self.requests.register(caller, request_id, record, gated=False)

        return self._mutate(
            "request_verification", caller, action, request_id=request_id, product_id=product_id
        )

    def respond_to_request(
        self,
        caller: str,
        request_id: str,
        status: Union[str, RequestStatus],
        response_hash
    ) -> Outcome:
        """Admin only. Status and hash are checked once the caller is known to be the admin."""
        def action() -> Outcome:
            outcome = self.gate.require_admin(caller)
            if not outcome:
                return outcome
            parsed = parse_response_status(status)
            digest = to_hash32(response_hash, "response_hash")
            return self.requests.promote(caller, request_id, status=parsed, response_hash=digest)

        return self._mutate(
            "respond_to_request", caller, action,
            request_id=request_id, status=getattr(status, "value", status)
        )

    def submit_review(
        self,
        caller: str,
        product_id: str,
        rating: int,
        review_text: str,
        verified_purchase: bool
    ) -> Outcome:
        validate_identifier(product_id, "product_id")
        return self._mutate(
            "submit_review", caller,
            lambda: self.reviews.submit(caller, product_id, rating, review_text, verified_purchase),
            product_id=product_id, rating=rating
        )

    def is_product_ethical(self, product_id: str) -> bool:
        verification = self.verifications.get(product_id)
        if verification is None:
            return False
        return verification.is_ethical()

    def get_product_verification(self, product_id: str) -> Optional[ProductVerification]:
        return self.verifications.get(product_id)

    def get_verification_request(self, request_id: str) -> Optional[VerificationRequest]:
        return self.requests.get(request_id)

    def get_product_review(self, product_id: str, reviewer: str) -> Optional[ProductReview]:
        return self.reviews.get(product_id, reviewer)
