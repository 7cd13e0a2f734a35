from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Protocol


@dataclass
class ReviewDto:
    id: int
    doctor_id: int
    score: int
    comment: Optional[str]
    created_at: datetime


class ReviewStore(Protocol):
    def add(self, doctor_id: int, score: int, comment: Optional[str] = None) -> ReviewDto:
        """Stage a review in the current unit of work.

        The review becomes durable together with the ``DirectoryStore.set_rating``
        call that follows it, so a failed rating write leaves no orphan score.
        """
        ...

    def scores_for(self, doctor_id: int) -> List[int]:
        ...
