from typing import List, Optional
from sqlmodel import Session, select

from .....db.models import Review
from .....application.ports.review_store import ReviewStore, ReviewDto


class SqlReviewStore(ReviewStore):
    def __init__(self, session: Session):
        self.session = session

    def add(self, doctor_id: int, score: int, comment: Optional[str] = None) -> ReviewDto:
        r = Review(doctor_id=doctor_id, score=score, comment=comment)
        self.session.add(r)
        # flushed, not committed: the rating write on this session commits both
        self.session.flush()
        self.session.refresh(r)
        return ReviewDto(id=r.id, doctor_id=r.doctor_id, score=r.score, comment=r.comment, created_at=r.created_at)

    def scores_for(self, doctor_id: int) -> List[int]:
        return list(self.session.exec(select(Review.score).where(Review.doctor_id == doctor_id)).all())
