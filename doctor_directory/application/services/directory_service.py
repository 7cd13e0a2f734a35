import logging
from dataclasses import dataclass
from datetime import time
from typing import Any, Dict, List, Optional

from ..ports.audit_logger import AuditLogger
from ..ports.directory_store import AvailabilitySlotDto, DayOfWeek, DirectoryStore, DoctorDto, SlotStatus
from ..ports.search_cache import SearchCache
from ...exceptions import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "specialization", "location", "experience", "email", "phone")

# (current status, action) -> new status
TRANSITIONS = {
    (SlotStatus.OPEN, "book"): SlotStatus.BOOKED,
    (SlotStatus.BOOKED, "cancel"): SlotStatus.OPEN,
    (SlotStatus.OPEN, "block"): SlotStatus.BLOCKED,
    (SlotStatus.BLOCKED, "reopen"): SlotStatus.OPEN,
}


def _overlaps(a_start: time, a_end: time, b_start: time, b_end: time) -> bool:
    return a_start < b_end and b_start < a_end


def _validate_profile(fields: Dict[str, Any]) -> None:
    for key in ("name", "specialization", "location"):
        if key in fields and (fields[key] is None or str(fields[key]).strip() == ""):
            raise ValidationError(f"{key} cannot be blank", field=key)
    if "experience" in fields and (fields["experience"] is None or fields["experience"] < 0):
        raise ValidationError("experience cannot be negative", field="experience")


@dataclass
class DirectoryService:
    store: DirectoryStore
    audit: AuditLogger
    cache: Optional[SearchCache] = None

    def _changed(self, action: str, doctor_id: Optional[int] = None, slot_id: Optional[int] = None, details: Optional[Dict[str, Any]] = None) -> None:
        if self.cache is not None:
            self.cache.invalidate()
        self.audit.log(action, doctor_id=doctor_id, slot_id=slot_id, details=details)

    def get_doctor(self, doctor_id: int) -> DoctorDto:
        doctor = self.store.get_doctor(doctor_id)
        if not doctor:
            raise NotFoundError("Doctor not found")
        return doctor

    def register(self, name: str, specialization: str, location: str, experience: int, email: Optional[str] = None, phone: Optional[str] = None) -> DoctorDto:
        _validate_profile({"name": name, "specialization": specialization, "location": location, "experience": experience})
        doctor = self.store.create_doctor(name.strip(), specialization.strip(), location.strip(), experience, email=email, phone=phone)
        self._changed("doctor.register", doctor_id=doctor.id)
        return doctor

    def update(self, doctor_id: int, fields: Dict[str, Any]) -> DoctorDto:
        unknown = set(fields) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown fields: {sorted(unknown)}")
        fields = {k: v.strip() if isinstance(v, str) else v for k, v in fields.items()}
        _validate_profile(fields)
        doctor = self.store.update_doctor(doctor_id, fields)
        if not doctor:
            raise NotFoundError("Doctor not found")
        self._changed("doctor.update", doctor_id=doctor_id, details={"fields": sorted(fields)})
        return doctor

    def remove(self, doctor_id: int) -> None:
        if not self.store.delete_doctor(doctor_id):
            raise NotFoundError("Doctor not found")
        self._changed("doctor.remove", doctor_id=doctor_id)

    def list_slots(self, doctor_id: int) -> List[AvailabilitySlotDto]:
        self.get_doctor(doctor_id)
        return self.store.get_availability(doctor_id)

    def _check_overlap(self, doctor_id: int, day: DayOfWeek, start: time, end: time, ignore_slot_id: Optional[int] = None) -> None:
        for slot in self.store.get_availability(doctor_id):
            if slot.id == ignore_slot_id or slot.status == SlotStatus.BLOCKED or slot.day_of_week != day:
                continue
            if _overlaps(start, end, slot.start_time, slot.end_time):
                raise ConflictError(
                    f"Slot overlaps existing slot {slot.id} ({slot.start_time.isoformat(timespec='minutes')}-{slot.end_time.isoformat(timespec='minutes')})"
                )

    def add_slot(self, doctor_id: int, day: DayOfWeek, start: time, end: time, status: SlotStatus = SlotStatus.OPEN) -> AvailabilitySlotDto:
        if start.tzinfo is not None or end.tzinfo is not None:
            raise ValidationError("Slot times must not carry a UTC offset", field="start_time")
        if start >= end:
            raise ValidationError("Slot start must be before its end", field="start_time")
        self.get_doctor(doctor_id)
        if status != SlotStatus.BLOCKED:
            self._check_overlap(doctor_id, day, start, end)
        slot = self.store.add_slot(doctor_id, day, start, end, status)
        self._changed("slot.add", doctor_id=doctor_id, slot_id=slot.id)
        return slot

    def transition_slot(self, slot_id: int, action: str) -> AvailabilitySlotDto:
        slot = self.store.get_slot(slot_id)
        if not slot:
            raise NotFoundError("Slot not found")
        new_status = TRANSITIONS.get((slot.status, action))
        if new_status is None:
            raise ConflictError(f"Cannot {action} a slot that is {slot.status.value}")
        if slot.status == SlotStatus.BLOCKED:
            self._check_overlap(slot.doctor_id, slot.day_of_week, slot.start_time, slot.end_time, ignore_slot_id=slot.id)
        updated = self.store.set_slot_status(slot_id, new_status)
        if not updated:
            raise NotFoundError("Slot not found")
        logger.info(f"Slot {slot_id}: {slot.status.value} -> {new_status.value}")
        self._changed(f"slot.{action}", doctor_id=slot.doctor_id, slot_id=slot_id)
        return updated

    def book_slot(self, slot_id: int) -> AvailabilitySlotDto:
        return self.transition_slot(slot_id, "book")

    def cancel_booking(self, slot_id: int) -> AvailabilitySlotDto:
        return self.transition_slot(slot_id, "cancel")

    def block_slot(self, slot_id: int) -> AvailabilitySlotDto:
        return self.transition_slot(slot_id, "block")

    def reopen_slot(self, slot_id: int) -> AvailabilitySlotDto:
        return self.transition_slot(slot_id, "reopen")

    def remove_slot(self, slot_id: int) -> None:
        slot = self.store.get_slot(slot_id)
        if not slot or not self.store.delete_slot(slot_id):
            raise NotFoundError("Slot not found")
        self._changed("slot.remove", doctor_id=slot.doctor_id, slot_id=slot_id)
