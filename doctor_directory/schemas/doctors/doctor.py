# doctor_directory/schemas/doctors/doctor.py
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import time

from ...application.ports.directory_store import DayOfWeek, SlotStatus

class DoctorBase(BaseModel):
    name: str
    specialization: str
    location: str
    experience: int = Field(ge=0)
    email: Optional[str] = None
    phone: Optional[str] = None

class DoctorCreate(DoctorBase):
    pass

class DoctorUpdate(BaseModel):
    name: Optional[str] = None
    specialization: Optional[str] = None
    location: Optional[str] = None
    experience: Optional[int] = Field(default=None, ge=0)
    email: Optional[str] = None
    phone: Optional[str] = None

class SlotCreate(BaseModel):
    day_of_week: DayOfWeek
    start_time: time
    end_time: time
    status: SlotStatus = SlotStatus.OPEN

    @field_validator("start_time", "end_time")
    @classmethod
    def no_utc_offset(cls, value: time) -> time:
        if value.tzinfo is not None:
            raise ValueError("slot times must not carry a UTC offset")
        return value

class SlotResponse(SlotCreate):
    id: int
    doctor_id: int

class DoctorSummary(BaseModel):
    id: int
    name: str
    specialization: str
    location: str
    experience: int
    average_rating: Optional[float] = None
    review_count: int = 0

class DoctorResponse(DoctorSummary):
    email: Optional[str] = None
    phone: Optional[str] = None
    slots: List[SlotResponse] = []

class SearchResultItem(BaseModel):
    doctor: DoctorSummary
    matching_slots: List[SlotResponse] = []

class SearchResponse(BaseModel):
    items: List[SearchResultItem]
    total: int
    page: int
    page_size: int

class ReviewCreate(BaseModel):
    score: int
    comment: Optional[str] = Field(default=None, max_length=2000)
