from datetime import time
from typing import List, Literal, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
import logging

from ..core.config import settings
from ..dependencies import get_directory_service, get_rating_service, get_search_service
from ..exceptions import create_success_response
from ..application.ports.directory_store import AvailabilitySlotDto, DayOfWeek, DoctorDto
from ..application.services.directory_service import DirectoryService
from ..application.services.rating_service import RatingService
from ..application.services.search_criteria import AvailabilityWindow, SearchCriteria
from ..application.services.search_service import SearchService
from ..schemas.common.common import ErrorResponse, SuccessResponse
from ..schemas.doctors.doctor import (
    DoctorCreate,
    DoctorResponse,
    DoctorSummary,
    DoctorUpdate,
    ReviewCreate,
    SearchResponse,
    SearchResultItem,
    SlotCreate,
    SlotResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/doctors", tags=["Doctors"])


def _slot_response(s: AvailabilitySlotDto) -> SlotResponse:
    return SlotResponse(
        id=s.id,
        doctor_id=s.doctor_id,
        day_of_week=s.day_of_week,
        start_time=s.start_time,
        end_time=s.end_time,
        status=s.status,
    )


def _doctor_summary(d: DoctorDto) -> DoctorSummary:
    return DoctorSummary(
        id=d.id,
        name=d.name,
        specialization=d.specialization,
        location=d.location,
        experience=d.experience,
        average_rating=d.average_rating,
        review_count=d.review_count,
    )


def _doctor_response(d: DoctorDto) -> DoctorResponse:
    return DoctorResponse(
        **_doctor_summary(d).model_dump(),
        email=d.email,
        phone=d.phone,
        slots=[_slot_response(s) for s in d.slots],
    )


@router.get("/search", response_model=SearchResponse)
def search_doctors(
    name: Optional[str] = Query(None, description="Case-insensitive name substring"),
    specialization: Optional[str] = Query(None, description="Exact specialization"),
    location: Optional[str] = Query(None, description="Exact location"),
    min_experience: Optional[int] = Query(None, description="Minimum years of experience"),
    min_rating: Optional[float] = Query(None, description="Minimum average rating"),
    day: Optional[DayOfWeek] = Query(None, description="Requested day of week"),
    start_time: Optional[time] = Query(None, description="Requested start, HH:MM"),
    end_time: Optional[time] = Query(None, description="Requested end, HH:MM"),
    page: int = Query(0, ge=0),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    service: SearchService = Depends(get_search_service),
):
    """Search doctors; every filter is optional and all given filters must match"""
    try:
        criteria = SearchCriteria(
            name=name,
            specialization=specialization,
            location=location,
            min_experience=min_experience,
            min_rating=min_rating,
            availability=AvailabilityWindow.from_parts(day, start_time, end_time),
        )
        result = service.search(criteria, page=page, page_size=page_size)
        return SearchResponse(
            items=[
                SearchResultItem(
                    doctor=_doctor_summary(m.doctor),
                    matching_slots=[_slot_response(s) for s in m.matching_slots],
                )
                for m in result.items
            ],
            total=result.total,
            page=result.page,
            page_size=result.page_size,
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error searching doctors: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to search doctors")


@router.get("/{doctor_id}", response_model=DoctorResponse, responses={404: {"model": ErrorResponse}})
def get_doctor(doctor_id: int, service: DirectoryService = Depends(get_directory_service)):
    return _doctor_response(service.get_doctor(doctor_id))


@router.post("/", response_model=DoctorResponse, status_code=201)
def create_doctor(doctor_data: DoctorCreate, service: DirectoryService = Depends(get_directory_service)):
    """Register a new doctor"""
    try:
        d = service.register(
            name=doctor_data.name,
            specialization=doctor_data.specialization,
            location=doctor_data.location,
            experience=doctor_data.experience,
            email=doctor_data.email,
            phone=doctor_data.phone,
        )
        logger.info(f"Created doctor {d.id}")
        return _doctor_response(d)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating doctor: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to create doctor")


@router.put("/{doctor_id}", response_model=DoctorResponse)
def update_doctor(doctor_id: int, doctor_data: DoctorUpdate, service: DirectoryService = Depends(get_directory_service)):
    try:
        d = service.update(doctor_id, doctor_data.model_dump(exclude_unset=True))
        return _doctor_response(d)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating doctor {doctor_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to update doctor")


@router.delete("/{doctor_id}", response_model=SuccessResponse, responses={404: {"model": ErrorResponse}})
def delete_doctor(doctor_id: int, service: DirectoryService = Depends(get_directory_service)):
    try:
        service.remove(doctor_id)
        return create_success_response({"id": doctor_id})
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting doctor {doctor_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to delete doctor")


@router.get("/{doctor_id}/slots", response_model=List[SlotResponse])
def list_slots(doctor_id: int, service: DirectoryService = Depends(get_directory_service)):
    return [_slot_response(s) for s in service.list_slots(doctor_id)]


@router.post("/{doctor_id}/slots", response_model=SlotResponse, status_code=201, responses={409: {"model": ErrorResponse}})
def add_slot(doctor_id: int, slot_data: SlotCreate, service: DirectoryService = Depends(get_directory_service)):
    try:
        s = service.add_slot(doctor_id, slot_data.day_of_week, slot_data.start_time, slot_data.end_time, slot_data.status)
        return _slot_response(s)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error adding slot for doctor {doctor_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to add slot")


@router.post("/slots/{slot_id}/{action}", response_model=SlotResponse)
def change_slot_status(
    slot_id: int,
    action: Literal["book", "cancel", "block", "reopen"],
    service: DirectoryService = Depends(get_directory_service),
):
    """Book, cancel, block or reopen a slot"""
    try:
        return _slot_response(service.transition_slot(slot_id, action))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error applying {action} to slot {slot_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to update slot")


@router.delete("/slots/{slot_id}", response_model=SuccessResponse, responses={404: {"model": ErrorResponse}})
def delete_slot(slot_id: int, service: DirectoryService = Depends(get_directory_service)):
    try:
        service.remove_slot(slot_id)
        return create_success_response({"id": slot_id})
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting slot {slot_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to delete slot")


@router.post("/{doctor_id}/reviews", response_model=DoctorSummary, status_code=201)
def submit_review(doctor_id: int, review: ReviewCreate, service: RatingService = Depends(get_rating_service)):
    """Record a review score and return the doctor with the recomputed rating"""
    try:
        return _doctor_summary(service.submit_review(doctor_id, review.score, review.comment))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error submitting review for doctor {doctor_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to submit review")
