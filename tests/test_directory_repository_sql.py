from datetime import time

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from doctor_directory.application.ports.directory_store import DayOfWeek, SlotStatus
from doctor_directory.infrastructure.persistence.sqlalchemy.repositories.directory_repository_sql import SqlDirectoryStore
from doctor_directory.infrastructure.persistence.sqlalchemy.repositories.review_repository_sql import SqlReviewStore


@pytest.fixture
def session():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    SQLModel.metadata.create_all(engine)
    with Session(engine) as s:
        yield s


def test_list_doctors_joins_slots(session):
    repo = SqlDirectoryStore(session)
    a = repo.create_doctor("Asha Rao", "Cardiologist", "Pune", 12, email="asha@example.com")
    b = repo.create_doctor("Vikram Shah", "Dermatologist", "Mumbai", 3)
    repo.add_slot(a.id, DayOfWeek.TUE, time(14), time(16), SlotStatus.OPEN)
    repo.add_slot(a.id, DayOfWeek.MON, time(9), time(12), SlotStatus.BOOKED)

    doctors = repo.list_doctors()

    assert [d.id for d in doctors] == [a.id, b.id]
    assert doctors[0].email == "asha@example.com"
    assert doctors[0].average_rating is None
    assert [(s.day_of_week, s.start_time, s.status) for s in doctors[0].slots] == [
        (DayOfWeek.MON, time(9), SlotStatus.BOOKED),
        (DayOfWeek.TUE, time(14), SlotStatus.OPEN),
    ]
    assert doctors[1].slots == ()
    # weekday order, not insertion order
    assert [s.day_of_week for s in repo.get_availability(a.id)] == [DayOfWeek.MON, DayOfWeek.TUE]


def test_update_and_rating(session):
    repo = SqlDirectoryStore(session)
    d = repo.create_doctor("Asha Rao", "Cardiologist", "Pune", 12)
    assert repo.update_doctor(d.id, {"location": "Mumbai"}).location == "Mumbai"
    assert repo.update_doctor(999, {"location": "Mumbai"}) is None

    repo.set_rating(d.id, 4.25, 4)
    got = repo.get_doctor(d.id)
    assert got.average_rating == 4.25
    assert got.review_count == 4


def test_slot_status_and_delete(session):
    repo = SqlDirectoryStore(session)
    d = repo.create_doctor("Asha Rao", "Cardiologist", "Pune", 12)
    s = repo.add_slot(d.id, DayOfWeek.FRI, time(9), time(10), SlotStatus.OPEN)

    assert repo.set_slot_status(s.id, SlotStatus.BOOKED).status == SlotStatus.BOOKED
    assert repo.get_slot(s.id).status == SlotStatus.BOOKED
    assert repo.delete_slot(s.id) is True
    assert repo.get_slot(s.id) is None
    assert repo.delete_slot(s.id) is False
    assert repo.set_slot_status(s.id, SlotStatus.OPEN) is None


def test_delete_doctor_removes_slots_and_reviews(session):
    repo = SqlDirectoryStore(session)
    reviews = SqlReviewStore(session)
    d = repo.create_doctor("Asha Rao", "Cardiologist", "Pune", 12)
    repo.add_slot(d.id, DayOfWeek.MON, time(9), time(10), SlotStatus.OPEN)
    reviews.add(d.id, 5)

    assert repo.delete_doctor(d.id) is True
    assert repo.get_doctor(d.id) is None
    assert repo.get_availability(d.id) == []
    assert reviews.scores_for(d.id) == []
    assert repo.delete_doctor(d.id) is False


def test_review_store_scores(session):
    repo = SqlDirectoryStore(session)
    reviews = SqlReviewStore(session)
    d = repo.create_doctor("Asha Rao", "Cardiologist", "Pune", 12)
    r = reviews.add(d.id, 4, comment="kind")
    reviews.add(d.id, 2)
    assert r.id is not None
    assert r.comment == "kind"
    assert sorted(reviews.scores_for(d.id)) == [2, 4]


def test_timestamps_are_timezone_aware():
    from doctor_directory.db.models import Doctor, Review

    assert Doctor(name="A", specialization="B", location="C").created_at.tzinfo is not None
    assert Review(doctor_id=1, score=5).created_at.tzinfo is not None


def test_review_is_not_kept_when_rating_write_fails(session, monkeypatch):
    from doctor_directory.application.services.rating_service import RatingService

    repo = SqlDirectoryStore(session)
    reviews = SqlReviewStore(session)
    d = repo.create_doctor("Asha Rao", "Cardiologist", "Pune", 12)
    svc = RatingService(store=repo, reviews=reviews)

    def broken_set_rating(doctor_id, average_rating, review_count):
        raise RuntimeError("database went away")

    monkeypatch.setattr(repo, "set_rating", broken_set_rating)
    with pytest.raises(RuntimeError):
        svc.submit_review(d.id, 5)
    session.rollback()

    assert reviews.scores_for(d.id) == []
    assert repo.get_doctor(d.id).review_count == 0


def test_review_and_rating_commit_together(session):
    from doctor_directory.application.services.rating_service import RatingService

    repo = SqlDirectoryStore(session)
    reviews = SqlReviewStore(session)
    d = repo.create_doctor("Asha Rao", "Cardiologist", "Pune", 12)
    RatingService(store=repo, reviews=reviews).submit_review(d.id, 4)
    session.rollback()

    assert reviews.scores_for(d.id) == [4]
    assert repo.get_doctor(d.id).average_rating == 4.0
