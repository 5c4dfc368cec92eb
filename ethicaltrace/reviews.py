"""
EthicalTrace Review Store

One review per (subject, author) pair, forever. Reviews are never edited
or deleted.
"""

from typing import Dict, List, Optional, Tuple

from .clock import ValidityClock
from .outcome import Outcome, StoreError
from .records import ProductReview
from .validation import validate_uint

MAX_RATING = 5


class ReviewStore:
    """
    Args:
        clock: ValidityClock used to stamp review_date
        reviewed_error: Error for a second review of the same pair
        rating_error: Error for a rating above MAX_RATING
    """

    def __init__(self, clock: ValidityClock, reviewed_error: StoreError, rating_error: StoreError):
        self.clock = clock
        self.reviewed_error = reviewed_error
        self.rating_error = rating_error
        self._reviews: Dict[Tuple[str, str], ProductReview] = {}

    def submit(
        self,
        caller: str,
        subject_id: str,
        rating: int,
        text: str,
        verified_purchase: bool
    ) -> Outcome:
        """
        Store caller's review of subject_id.

        The duplicate check runs before the rating check, so a repeated
        pair is always reported as already reviewed. Only the upper bound
        of the rating is checked; 0 is a valid rating.
        """
        validate_uint(rating, "rating")
        key = (subject_id, caller)

        if key in self._reviews:
            return Outcome.fail(self.reviewed_error)

        if rating > MAX_RATING:
            return Outcome.fail(self.rating_error)

        self._reviews[key] = ProductReview(
            rating=rating,
            review_text=text,
            review_date=self.clock.now(),
            verified_purchase=bool(verified_purchase)
        )
        return Outcome.ok()

    def get(self, subject_id: str, author: str) -> Optional[ProductReview]:
        return self._reviews.get((subject_id, author))

    def for_subject(self, subject_id: str) -> List[Tuple[str, ProductReview]]:
        """All (author, review) pairs for a subject, in submission order."""
        return [(author, review) for (subject, author), review in self._reviews.items()
                if subject == subject_id]

    def __len__(self) -> int:
        return len(self._reviews)
