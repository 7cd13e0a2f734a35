import logging
from dataclasses import dataclass
from typing import List, Optional

from ..ports.directory_store import DirectoryStore, DoctorDto
from ..ports.review_store import ReviewStore
from ..ports.search_cache import SearchCache
from ...exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

MIN_SCORE = 1
MAX_SCORE = 5


def mean_rating(scores: List[int]) -> Optional[float]:
    if not scores:
        return None
    return sum(scores) / len(scores)


@dataclass
class RatingService:
    store: DirectoryStore
    reviews: ReviewStore
    cache: Optional[SearchCache] = None

    def submit_review(self, doctor_id: int, score: int, comment: Optional[str] = None) -> DoctorDto:
        if isinstance(score, bool) or not isinstance(score, int) or not (MIN_SCORE <= score <= MAX_SCORE):
            raise ValidationError(f"score must be an integer between {MIN_SCORE} and {MAX_SCORE}", field="score")
        if not self.store.get_doctor(doctor_id):
            raise NotFoundError("Doctor not found")

        self.reviews.add(doctor_id, score, comment)
        scores = self.reviews.scores_for(doctor_id)
        average = mean_rating(scores)
        self.store.set_rating(doctor_id, average, len(scores))
        logger.info(f"Doctor {doctor_id} rating recomputed: {average} over {len(scores)} reviews")

        if self.cache is not None:
            self.cache.invalidate()
        return self.store.get_doctor(doctor_id)
