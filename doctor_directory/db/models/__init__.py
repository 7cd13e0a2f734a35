# Models package (re-export table modules for stable imports)
from .doctor import Doctor
from .availability import AvailabilitySlot
from .review import Review

__all__ = [
    "Doctor",
    "AvailabilitySlot",
    "Review",
]
