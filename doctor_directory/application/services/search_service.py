"""Doctor search: optional filters, rating order and pagination.

Everything here except ``SearchService`` is a pure function over a
snapshot of ``DoctorDto`` records. Filters are plain predicates combined
with AND; an unset criterion contributes a predicate that is always true.
"""
import hashlib
import json
import logging
from dataclasses import dataclass, field
from datetime import time
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from ..ports.directory_store import AvailabilitySlotDto, DayOfWeek, DirectoryStore, DoctorDto, SlotStatus
from ..ports.search_cache import SearchCache
from .search_criteria import AvailabilityWindow, SearchCriteria
from ...exceptions import ValidationError

logger = logging.getLogger(__name__)

Predicate = Callable[[DoctorDto], bool]


@dataclass(frozen=True)
class DoctorMatch:
    doctor: DoctorDto
    # only populated when the criteria carried an availability window
    matching_slots: Tuple[AvailabilitySlotDto, ...] = ()


@dataclass(frozen=True)
class SearchPage:
    items: List[DoctorMatch] = field(default_factory=list)
    total: int = 0
    page: int = 0
    page_size: int = 20


def _blank(value: Optional[str]) -> bool:
    return value is None or value.strip() == ""


def _always(doctor: DoctorDto) -> bool:
    return True


def name_predicate(name: Optional[str]) -> Predicate:
    if _blank(name):
        return _always
    needle = name.strip().casefold()
    return lambda d: needle in d.name.casefold()


def equals_predicate(attr: str, value: Optional[str]) -> Predicate:
    if _blank(value):
        return _always
    wanted = value.strip().casefold()
    return lambda d: getattr(d, attr).strip().casefold() == wanted


def experience_predicate(min_experience: Optional[int]) -> Predicate:
    if min_experience is None:
        return _always
    return lambda d: d.experience >= min_experience


def rating_predicate(min_rating: Optional[float]) -> Predicate:
    if min_rating is None:
        return _always
    # unrated doctors rank as -inf, so they never reach a set minimum
    return lambda d: d.average_rating is not None and d.average_rating >= min_rating


def slot_contains(slot: AvailabilitySlotDto, window: AvailabilityWindow) -> bool:
    """True when an open slot fully contains the requested window."""
    return (
        slot.day_of_week == window.day
        and slot.status == SlotStatus.OPEN
        and slot.start_time <= window.start
        and slot.end_time >= window.end
    )


def matching_slots(doctor: DoctorDto, window: AvailabilityWindow) -> List[AvailabilitySlotDto]:
    return sorted((s for s in doctor.slots if slot_contains(s, window)), key=lambda s: (s.start_time, s.id))


def availability_predicate(window: Optional[AvailabilityWindow]) -> Predicate:
    if window is None:
        return _always
    return lambda d: any(slot_contains(s, window) for s in d.slots)


def all_of(predicates: Iterable[Predicate]) -> Predicate:
    predicates = list(predicates)
    return lambda d: all(p(d) for p in predicates)


def build_predicate(criteria: SearchCriteria) -> Predicate:
    return all_of([
        name_predicate(criteria.name),
        equals_predicate("specialization", criteria.specialization),
        equals_predicate("location", criteria.location),
        experience_predicate(criteria.min_experience),
        rating_predicate(criteria.min_rating),
        availability_predicate(criteria.availability),
    ])


def rank_key(doctor: DoctorDto) -> Tuple[int, float, int]:
    """Rating descending, unrated last, ties broken by ascending id."""
    if doctor.average_rating is None:
        return (1, 0.0, doctor.id)
    return (0, -doctor.average_rating, doctor.id)


def search(criteria: SearchCriteria, doctors: Iterable[DoctorDto]) -> List[DoctorMatch]:
    criteria.validate()
    predicate = build_predicate(criteria)
    window = criteria.availability
    ranked = sorted((d for d in doctors if predicate(d)), key=rank_key)
    return [
        DoctorMatch(doctor=d, matching_slots=tuple(matching_slots(d, window)) if window else ())
        for d in ranked
    ]


def validate_pagination(page: int, page_size: int) -> None:
    if page < 0:
        raise ValidationError("page cannot be negative", field="page")
    if page_size <= 0:
        raise ValidationError("page_size must be greater than zero", field="page_size")


def paginate(matches: Sequence[DoctorMatch], page: int, page_size: int) -> List[DoctorMatch]:
    validate_pagination(page, page_size)
    start = page * page_size
    return list(matches[start:start + page_size])


def search_page(criteria: SearchCriteria, doctors: Iterable[DoctorDto], page: int = 0, page_size: int = 20) -> SearchPage:
    validate_pagination(page, page_size)
    matches = search(criteria, doctors)
    return SearchPage(items=paginate(matches, page, page_size), total=len(matches), page=page, page_size=page_size)


# Cache serialization

def cache_key(criteria: SearchCriteria, page: int, page_size: int) -> str:
    payload = json.dumps({"criteria": criteria.as_dict(), "page": page, "page_size": page_size}, sort_keys=True)
    return "search:" + hashlib.sha256(payload.encode()).hexdigest()


def _slot_to_dict(s: AvailabilitySlotDto) -> Dict[str, Any]:
    return {
        "id": s.id,
        "doctor_id": s.doctor_id,
        "day_of_week": s.day_of_week.value,
        "start_time": s.start_time.isoformat(),
        "end_time": s.end_time.isoformat(),
        "status": s.status.value,
    }


def _slot_from_dict(data: Dict[str, Any]) -> AvailabilitySlotDto:
    return AvailabilitySlotDto(
        id=data["id"],
        doctor_id=data["doctor_id"],
        day_of_week=DayOfWeek(data["day_of_week"]),
        start_time=time.fromisoformat(data["start_time"]),
        end_time=time.fromisoformat(data["end_time"]),
        status=SlotStatus(data["status"]),
    )


def _doctor_to_dict(d: DoctorDto) -> Dict[str, Any]:
    return {
        "id": d.id,
        "name": d.name,
        "specialization": d.specialization,
        "location": d.location,
        "experience": d.experience,
        "average_rating": d.average_rating,
        "review_count": d.review_count,
        "email": d.email,
        "phone": d.phone,
        "slots": [_slot_to_dict(s) for s in d.slots],
    }


def _doctor_from_dict(data: Dict[str, Any]) -> DoctorDto:
    return DoctorDto(
        id=data["id"],
        name=data["name"],
        specialization=data["specialization"],
        location=data["location"],
        experience=data["experience"],
        average_rating=data["average_rating"],
        review_count=data["review_count"],
        email=data["email"],
        phone=data["phone"],
        slots=tuple(_slot_from_dict(s) for s in data["slots"]),
    )


def page_to_dict(result: SearchPage) -> Dict[str, Any]:
    return {
        "items": [
            {"doctor": _doctor_to_dict(m.doctor), "matching_slots": [_slot_to_dict(s) for s in m.matching_slots]}
            for m in result.items
        ],
        "total": result.total,
        "page": result.page,
        "page_size": result.page_size,
    }


def page_from_dict(data: Dict[str, Any]) -> SearchPage:
    return SearchPage(
        items=[
            DoctorMatch(
                doctor=_doctor_from_dict(item["doctor"]),
                matching_slots=tuple(_slot_from_dict(s) for s in item["matching_slots"]),
            )
            for item in data["items"]
        ],
        total=data["total"],
        page=data["page"],
        page_size=data["page_size"],
    )


@dataclass
class SearchService:
    store: DirectoryStore
    cache: Optional[SearchCache] = None
    cache_ttl_seconds: int = 60

    def search(self, criteria: SearchCriteria, page: int = 0, page_size: int = 20) -> SearchPage:
        # fail fast, before touching the cache or the store
        criteria.validate()
        validate_pagination(page, page_size)

        key = None
        version = None
        if self.cache is not None:
            # read before the store so an invalidation during the scan is noticed
            version = self.cache.version()
            key = cache_key(criteria, page, page_size)
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug(f"Search cache hit for {key}")
                return page_from_dict(cached)

        result = search_page(criteria, self.store.list_doctors(), page, page_size)
        logger.info(f"Search matched {result.total} doctors (page={page}, page_size={page_size})")

        if self.cache is not None:
            self.cache.set(key, page_to_dict(result), self.cache_ttl_seconds, version)
        return result
