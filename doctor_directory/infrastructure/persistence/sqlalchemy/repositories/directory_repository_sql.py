from collections import defaultdict
from datetime import datetime, time, timezone
from typing import Any, Dict, Iterable, List, Optional

from sqlmodel import Session, select

from .....db.models import AvailabilitySlot, Doctor
from .....application.ports.directory_store import (
    AvailabilitySlotDto,
    DayOfWeek,
    DirectoryStore,
    DoctorDto,
    SlotStatus,
)

DAY_ORDER = {day.value: index for index, day in enumerate(DayOfWeek)}


class SqlDirectoryStore(DirectoryStore):
    def __init__(self, session: Session):
        self.session = session

    def _slot_to_dto(self, s: AvailabilitySlot) -> AvailabilitySlotDto:
        return AvailabilitySlotDto(
            id=s.id,
            doctor_id=s.doctor_id,
            day_of_week=DayOfWeek(s.day_of_week),
            start_time=s.start_time,
            end_time=s.end_time,
            status=SlotStatus(s.status),
        )

    def _doctor_to_dto(self, d: Doctor, slots: Iterable[AvailabilitySlot]) -> DoctorDto:
        return DoctorDto(
            id=d.id,
            name=d.name,
            specialization=d.specialization,
            location=d.location,
            experience=d.experience,
            average_rating=d.average_rating,
            review_count=d.review_count,
            email=d.email,
            phone=d.phone,
            slots=tuple(self._slot_to_dto(s) for s in slots),
        )

    def _slot_rows(self, doctor_id: int) -> List[AvailabilitySlot]:
        rows = self.session.exec(
            select(AvailabilitySlot)
            .where(AvailabilitySlot.doctor_id == doctor_id)
            .order_by(AvailabilitySlot.start_time, AvailabilitySlot.id)
        ).all()
        # day_of_week is stored as text, so order MON..SUN here
        return sorted(rows, key=lambda s: DAY_ORDER[s.day_of_week])

    def list_doctors(self) -> List[DoctorDto]:
        doctors = self.session.exec(select(Doctor).order_by(Doctor.id)).all()
        slots_by_doctor = defaultdict(list)
        rows = self.session.exec(select(AvailabilitySlot).order_by(AvailabilitySlot.start_time, AvailabilitySlot.id)).all()
        for s in sorted(rows, key=lambda s: DAY_ORDER[s.day_of_week]):
            slots_by_doctor[s.doctor_id].append(s)
        return [self._doctor_to_dto(d, slots_by_doctor.get(d.id, [])) for d in doctors]

    def get_availability(self, doctor_id: int) -> List[AvailabilitySlotDto]:
        return [self._slot_to_dto(s) for s in self._slot_rows(doctor_id)]

    def get_doctor(self, doctor_id: int) -> Optional[DoctorDto]:
        d = self.session.exec(select(Doctor).where(Doctor.id == doctor_id)).first()
        if not d:
            return None
        return self._doctor_to_dto(d, self._slot_rows(doctor_id))

    def create_doctor(self, name: str, specialization: str, location: str, experience: int, email: Optional[str] = None, phone: Optional[str] = None) -> DoctorDto:
        d = Doctor(
            name=name,
            specialization=specialization,
            location=location,
            experience=experience,
            email=email,
            phone=phone,
        )
        self.session.add(d)
        self.session.commit()
        self.session.refresh(d)
        return self._doctor_to_dto(d, [])

    def update_doctor(self, doctor_id: int, fields: Dict[str, Any]) -> Optional[DoctorDto]:
        d = self.session.exec(select(Doctor).where(Doctor.id == doctor_id)).first()
        if not d:
            return None
        for key, value in fields.items():
            setattr(d, key, value)
        d.updated_at = datetime.now(timezone.utc)
        self.session.add(d)
        self.session.commit()
        self.session.refresh(d)
        return self._doctor_to_dto(d, self._slot_rows(doctor_id))

    def delete_doctor(self, doctor_id: int) -> bool:
        d = self.session.exec(select(Doctor).where(Doctor.id == doctor_id)).first()
        if not d:
            return False
        # slots and reviews go with the doctor (delete-orphan cascade)
        self.session.delete(d)
        self.session.commit()
        return True

    def add_slot(self, doctor_id: int, day_of_week: DayOfWeek, start_time: time, end_time: time, status: SlotStatus) -> AvailabilitySlotDto:
        s = AvailabilitySlot(
            doctor_id=doctor_id,
            day_of_week=DayOfWeek(day_of_week).value,
            start_time=start_time,
            end_time=end_time,
            status=SlotStatus(status).value,
        )
        self.session.add(s)
        self.session.commit()
        self.session.refresh(s)
        return self._slot_to_dto(s)

    def get_slot(self, slot_id: int) -> Optional[AvailabilitySlotDto]:
        s = self.session.exec(select(AvailabilitySlot).where(AvailabilitySlot.id == slot_id)).first()
        return self._slot_to_dto(s) if s else None

    def set_slot_status(self, slot_id: int, status: SlotStatus) -> Optional[AvailabilitySlotDto]:
        s = self.session.exec(select(AvailabilitySlot).where(AvailabilitySlot.id == slot_id)).first()
        if not s:
            return None
        s.status = SlotStatus(status).value
        self.session.add(s)
        self.session.commit()
        self.session.refresh(s)
        return self._slot_to_dto(s)

    def delete_slot(self, slot_id: int) -> bool:
        s = self.session.exec(select(AvailabilitySlot).where(AvailabilitySlot.id == slot_id)).first()
        if not s:
            return False
        self.session.delete(s)
        self.session.commit()
        return True

    def set_rating(self, doctor_id: int, average_rating: Optional[float], review_count: int) -> None:
        d = self.session.exec(select(Doctor).where(Doctor.id == doctor_id)).first()
        if not d:
            return
        d.average_rating = average_rating
        d.review_count = review_count
        d.updated_at = datetime.now(timezone.utc)
        self.session.add(d)
        self.session.commit()
