"""API Schemas - Request and Response DTOs"""
from pydantic import BaseModel, Field, validator
from datetime import date, time
from typing import List


# ============================================================================
# RESERVATION SCHEMAS
# ============================================================================

class ReservationCreateRequest(BaseModel):
    """Create reservation request DTO"""
    date: date
    start_time: time
    end_time: time
    price: int = Field(ge=0)
    guest_count: int = Field(ge=1)
    usage_purpose: str = ""
    request_message: str = ""

    @validator('end_time')
    def end_after_start(cls, v, values):
        if 'start_time' in values and v <= values['start_time']:
            raise ValueError('End time must be after start time')
        return v


class ReservationResponse(BaseModel):
    """Create reservation response DTO"""
    id: int


class DetailReservationResponse(BaseModel):
    """Reservation detail response DTO"""
    reservation_id: int
    guest_id: int
    host_id: int
    space_id: int
    date: date
    start_time: time
    end_time: time
    price: int
    guest_count: int
    usage_purpose: str
    request_message: str
    status: str


class ReservationListResponse(BaseModel):
    """Reservation list item DTO; review_id is 0 when no review exists"""
    reservation_id: int
    space_id: int
    date: date
    start_time: time
    end_time: time
    price: int
    guest_count: int
    status: str
    review_id: int = 0


class ReservationListPageResponse(BaseModel):
    """Paged reservation list DTO"""
    reservations: List[ReservationListResponse]
    last: bool
    total_pages: int


class CancelReservationResponse(BaseModel):
    """Cancel reservation response DTO"""
    reservation_id: int
    status: str


# ============================================================================
# AUTH SCHEMAS
# ============================================================================

class Token(BaseModel):
    """Token response DTO"""
    access_token: str
    token_type: str = "bearer"


class FindLoginIdRequest(BaseModel):
    """Find login id request DTO"""
    name: str
    phone: str
    email: str


class FindLoginIdResponse(BaseModel):
    """Find login id response DTO"""
    login_id: str


class ResetPasswordRequest(BaseModel):
    """Reset password request DTO"""
    login_id: str
    name: str
    phone: str
    email: str


class ResetPasswordResponse(BaseModel):
    """Reset password response DTO, carries the plaintext temporary password once"""
    temp_password: str


class ErrorResponse(BaseModel):
    """Error body for every domain failure"""
    code: str
    message: str
