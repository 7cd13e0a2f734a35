from typing import Optional
from sqlmodel import SQLModel, Field, Relationship
from datetime import time

class AvailabilitySlot(SQLModel, table=True):
    __tablename__ = "availability_slots"
    id: Optional[int] = Field(default=None, primary_key=True)
    doctor_id: int = Field(foreign_key="doctors.id", index=True)
    day_of_week: str = Field(index=True)  # MON..SUN
    start_time: time
    end_time: time
    status: str = Field(default="OPEN")  # OPEN | BOOKED | BLOCKED

    doctor: Optional["Doctor"] = Relationship(back_populates="slots")
