import pytest

from doctor_directory.application.services.rating_service import RatingService, mean_rating
from doctor_directory.exceptions import NotFoundError, ValidationError


def test_mean_rating():
    assert mean_rating([]) is None
    assert mean_rating([4, 5]) == 4.5


def test_submit_review_recomputes_average(store, reviews, cache):
    d = store.create_doctor("Asha Rao", "Cardiologist", "Pune", 12)
    svc = RatingService(store=store, reviews=reviews, cache=cache)

    assert svc.submit_review(d.id, 5).average_rating == 5.0
    out = svc.submit_review(d.id, 2, comment="long wait")

    assert out.average_rating == 3.5
    assert out.review_count == 2
    assert reviews.reviews[-1].comment == "long wait"
    assert cache.invalidations == 2


@pytest.mark.parametrize("score", [0, 6, 4.5, True])
def test_submit_review_rejects_bad_scores(store, reviews, score):
    d = store.create_doctor("Asha Rao", "Cardiologist", "Pune", 12)
    svc = RatingService(store=store, reviews=reviews)
    with pytest.raises(ValidationError):
        svc.submit_review(d.id, score)
    assert reviews.reviews == []


def test_submit_review_unknown_doctor(store, reviews):
    svc = RatingService(store=store, reviews=reviews)
    with pytest.raises(NotFoundError):
        svc.submit_review(99, 4)
