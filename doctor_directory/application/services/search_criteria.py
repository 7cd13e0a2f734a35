from dataclasses import dataclass
from datetime import time
from typing import Any, Dict, Optional

from ..ports.directory_store import DayOfWeek
from ...exceptions import ValidationError

MIN_RATING = 0.0
MAX_RATING = 5.0


@dataclass(frozen=True)
class AvailabilityWindow:
    """A requested [start, end) interval on one day of the week."""

    day: DayOfWeek
    start: time
    end: time

    @classmethod
    def from_parts(cls, day: Optional[DayOfWeek], start: Optional[time], end: Optional[time]) -> Optional["AvailabilityWindow"]:
        """Build a window from loose request parameters.

        Returns None when none of the parts is given; a partial window is
        rejected rather than silently ignored.
        """
        parts = (day, start, end)
        if all(p is None for p in parts):
            return None
        if any(p is None for p in parts):
            raise ValidationError("day, start_time and end_time must be supplied together", field="availability")
        return cls(day=DayOfWeek(day), start=start, end=end)

    def validate(self) -> None:
        if self.start.tzinfo is not None or self.end.tzinfo is not None:
            raise ValidationError("Availability window times must not carry a UTC offset", field="availability")
        if self.start >= self.end:
            raise ValidationError("Availability window start must be before its end", field="availability")


@dataclass(frozen=True)
class SearchCriteria:
    """Optional search filters. An unset field matches every doctor."""

    name: Optional[str] = None
    specialization: Optional[str] = None
    location: Optional[str] = None
    min_experience: Optional[int] = None
    min_rating: Optional[float] = None
    availability: Optional[AvailabilityWindow] = None

    def validate(self) -> None:
        if self.min_experience is not None and self.min_experience < 0:
            raise ValidationError("min_experience cannot be negative", field="min_experience")
        if self.min_rating is not None and not (MIN_RATING <= self.min_rating <= MAX_RATING):
            raise ValidationError(f"min_rating must be between {MIN_RATING} and {MAX_RATING}", field="min_rating")
        if self.availability is not None:
            self.availability.validate()

    def as_dict(self) -> Dict[str, Any]:
        window = self.availability
        return {
            "name": self.name,
            "specialization": self.specialization,
            "location": self.location,
            "min_experience": self.min_experience,
            "min_rating": self.min_rating,
            "availability": None if window is None else {
                "day": window.day.value,
                "start": window.start.isoformat(),
                "end": window.end.isoformat(),
            },
        }
