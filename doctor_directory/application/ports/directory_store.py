from dataclasses import dataclass, field
from datetime import time
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, Tuple


class DayOfWeek(str, Enum):
    MON = "MON"
    TUE = "TUE"
    WED = "WED"
    THU = "THU"
    FRI = "FRI"
    SAT = "SAT"
    SUN = "SUN"


class SlotStatus(str, Enum):
    OPEN = "OPEN"
    BOOKED = "BOOKED"
    BLOCKED = "BLOCKED"


@dataclass(frozen=True)
class AvailabilitySlotDto:
    id: int
    doctor_id: int
    day_of_week: DayOfWeek
    start_time: time
    end_time: time
    status: SlotStatus = SlotStatus.OPEN


@dataclass(frozen=True)
class DoctorDto:
    id: int
    name: str
    specialization: str
    location: str
    experience: int
    average_rating: Optional[float] = None
    review_count: int = 0
    email: Optional[str] = None
    phone: Optional[str] = None
    slots: Tuple[AvailabilitySlotDto, ...] = field(default_factory=tuple)


class DirectoryStore(Protocol):
    # read side, used by search
    def list_doctors(self) -> List[DoctorDto]:
        ...

    def get_availability(self, doctor_id: int) -> List[AvailabilitySlotDto]:
        ...

    # write side, used by the directory and rating services
    def get_doctor(self, doctor_id: int) -> Optional[DoctorDto]:
        ...

    def create_doctor(self, name: str, specialization: str, location: str, experience: int, email: Optional[str] = None, phone: Optional[str] = None) -> DoctorDto:
        ...

    def update_doctor(self, doctor_id: int, fields: Dict[str, Any]) -> Optional[DoctorDto]:
        ...

    def delete_doctor(self, doctor_id: int) -> bool:
        ...

    def add_slot(self, doctor_id: int, day_of_week: DayOfWeek, start_time: time, end_time: time, status: SlotStatus) -> AvailabilitySlotDto:
        ...

    def get_slot(self, slot_id: int) -> Optional[AvailabilitySlotDto]:
        ...

    def set_slot_status(self, slot_id: int, status: SlotStatus) -> Optional[AvailabilitySlotDto]:
        ...

    def delete_slot(self, slot_id: int) -> bool:
        ...

    def set_rating(self, doctor_id: int, average_rating: Optional[float], review_count: int) -> None:
        ...
