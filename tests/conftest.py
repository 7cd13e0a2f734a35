from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest

from doctor_directory.application.ports.directory_store import (
    AvailabilitySlotDto,
    DayOfWeek,
    DoctorDto,
    SlotStatus,
)
from doctor_directory.application.ports.review_store import ReviewDto

DAYS = list(DayOfWeek)


class FakeDirectoryStore:
    def __init__(self):
        self._doctor_id = 1
        self._slot_id = 1
        self.doctors: Dict[int, DoctorDto] = {}
        self.slots: Dict[int, AvailabilitySlotDto] = {}
        self.list_calls = 0

    def _with_slots(self, d: DoctorDto) -> DoctorDto:
        return replace(d, slots=tuple(self.get_availability(d.id)))

    def list_doctors(self) -> List[DoctorDto]:
        self.list_calls += 1
        return [self._with_slots(d) for _, d in sorted(self.doctors.items())]

    def get_availability(self, doctor_id: int) -> List[AvailabilitySlotDto]:
        own = [s for s in self.slots.values() if s.doctor_id == doctor_id]
        return sorted(own, key=lambda s: (DAYS.index(s.day_of_week), s.start_time, s.id))

    def get_doctor(self, doctor_id: int) -> Optional[DoctorDto]:
        d = self.doctors.get(doctor_id)
        return self._with_slots(d) if d else None

    def create_doctor(self, name, specialization, location, experience, email=None, phone=None) -> DoctorDto:
        d = DoctorDto(
            id=self._doctor_id,
            name=name,
            specialization=specialization,
            location=location,
            experience=experience,
            email=email,
            phone=phone,
        )
        self.doctors[d.id] = d
        self._doctor_id += 1
        return d

    def update_doctor(self, doctor_id: int, fields: Dict[str, Any]) -> Optional[DoctorDto]:
        if doctor_id not in self.doctors:
            return None
        self.doctors[doctor_id] = replace(self.doctors[doctor_id], **fields)
        return self.get_doctor(doctor_id)

    def delete_doctor(self, doctor_id: int) -> bool:
        if self.doctors.pop(doctor_id, None) is None:
            return False
        self.slots = {k: s for k, s in self.slots.items() if s.doctor_id != doctor_id}
        return True

    def add_slot(self, doctor_id, day_of_week, start_time, end_time, status) -> AvailabilitySlotDto:
        s = AvailabilitySlotDto(self._slot_id, doctor_id, DayOfWeek(day_of_week), start_time, end_time, SlotStatus(status))
        self.slots[s.id] = s
        self._slot_id += 1
        return s

    def get_slot(self, slot_id: int) -> Optional[AvailabilitySlotDto]:
        return self.slots.get(slot_id)

    def set_slot_status(self, slot_id: int, status: SlotStatus) -> Optional[AvailabilitySlotDto]:
        if slot_id not in self.slots:
            return None
        self.slots[slot_id] = replace(self.slots[slot_id], status=status)
        return self.slots[slot_id]

    def delete_slot(self, slot_id: int) -> bool:
        return self.slots.pop(slot_id, None) is not None

    def set_rating(self, doctor_id: int, average_rating: Optional[float], review_count: int) -> None:
        if doctor_id in self.doctors:
            self.doctors[doctor_id] = replace(self.doctors[doctor_id], average_rating=average_rating, review_count=review_count)


class FakeReviewStore:
    def __init__(self):
        self.reviews: List[ReviewDto] = []

    def add(self, doctor_id: int, score: int, comment: Optional[str] = None) -> ReviewDto:
        r = ReviewDto(len(self.reviews) + 1, doctor_id, score, comment, datetime.now(timezone.utc))
        self.reviews.append(r)
        return r

    def scores_for(self, doctor_id: int) -> List[int]:
        return [r.score for r in self.reviews if r.doctor_id == doctor_id]


class FakeAuditLogger:
    def __init__(self):
        self.entries = []

    def log(self, action, doctor_id=None, slot_id=None, success=True, details=None):
        self.entries.append((action, doctor_id, slot_id))


class RecordingCache:
    def __init__(self):
        self.data = {}
        self.invalidations = 0

    def version(self):
        return self.invalidations

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value, ttl_seconds, version):
        if version == self.invalidations:
            self.data[key] = value

    def invalidate(self):
        self.invalidations += 1
        self.data.clear()


@pytest.fixture
def store():
    return FakeDirectoryStore()


@pytest.fixture
def reviews():
    return FakeReviewStore()


@pytest.fixture
def audit():
    return FakeAuditLogger()


@pytest.fixture
def cache():
    return RecordingCache()
