"""Domain Entities - Aggregates"""
from pydantic import BaseModel, Field
from datetime import datetime, date, time, timezone
from typing import Optional

from domain.enums import ReservationStatus
from domain.value_objects import TimeSlot


class Space(BaseModel):
    """Bookable space owned by a host (read-only here)"""
    space_id: int
    host_id: int
    name: str = ""
    price_per_hour: int = Field(ge=0)
    max_capacity: int = Field(ge=1)
    deleted_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    def price_for(self, time_slot: TimeSlot) -> int:
        return self.price_per_hour * time_slot.hours()


class AvailableTime(BaseModel):
    """Host-declared booking window of a space on a date"""
    available_time_id: Optional[int] = None
    space_id: int
    date: date
    start_time: time
    end_time: time

    class Config:
        from_attributes = True

    def contains(self, time_slot: TimeSlot) -> bool:
        return self.start_time <= time_slot.start_time and self.end_time >= time_slot.end_time


class Review(BaseModel):
    """Guest review of a space for a reserved date (read-only here)"""
    review_id: int
    guest_id: int
    space_id: int
    reserved_date: date
    deleted_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RefreshToken(BaseModel):
    """Persisted active refresh token"""
    login_id: str
    refresh: str
    expiration: str

    class Config:
        from_attributes = True


class Reservation(BaseModel):
    """Reservation Aggregate Root Entity"""

    # Identity, assigned by the store on first save
    reservation_id: Optional[int] = None

    # References to other contexts
    guest_id: int
    host_id: int
    space_id: int

    # Slot
    date: date
    start_time: time
    end_time: time

    price: int
    guest_count: int = Field(ge=1)
    usage_purpose: str = ""
    request_message: str = ""

    status: ReservationStatus = ReservationStatus.PENDING

    # Metadata
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    deleted_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    # ==================== FACTORY METHOD ====================
    @staticmethod
    def create(
        guest_id: int,
        host_id: int,
        space_id: int,
        reserved_date: date,
        time_slot: TimeSlot,
        price: int,
        guest_count: int,
        usage_purpose: str = "",
        request_message: str = ""
    ) -> "Reservation":
        """Create a new PENDING reservation"""
        return Reservation(
            guest_id=guest_id,
            host_id=host_id,
            space_id=space_id,
            date=reserved_date,
            start_time=time_slot.start_time,
            end_time=time_slot.end_time,
            price=price,
            guest_count=guest_count,
            usage_purpose=usage_purpose,
            request_message=request_message,
            status=ReservationStatus.PENDING
        )

    # ==================== STATE TRANSITION METHODS ====================
    def accept(self) -> None:
        """Host approval; only a pending reservation can be accepted"""
        if self.status != ReservationStatus.PENDING:
            raise ValueError(
                f"Cannot accept reservation with status {self.status.value}"
            )
        self._change_status(ReservationStatus.ACCEPTED)

    def cancel(self) -> None:
        """Guest cancellation; callers check is_cancellable() first"""
        if not self.is_cancellable():
            raise ValueError(
                f"Cannot cancel reservation with status {self.status.value}"
            )
        self._change_status(ReservationStatus.CANCELLED)

    def complete(self) -> None:
        if self.status != ReservationStatus.ACCEPTED:
            raise ValueError(
                f"Cannot complete reservation with status {self.status.value}"
            )
        self._change_status(ReservationStatus.COMPLETED)

    def soft_delete(self) -> None:
        self.deleted_at = datetime.now(timezone.utc)

    # ==================== QUERY METHODS ====================
    @property
    def time_slot(self) -> TimeSlot:
        return TimeSlot(start_time=self.start_time, end_time=self.end_time)

    @property
    def starts_at(self) -> datetime:
        return datetime.combine(self.date, self.start_time)

    @property
    def ends_at(self) -> datetime:
        return datetime.combine(self.date, self.end_time)

    def is_cancellable(self) -> bool:
        return self.status == ReservationStatus.PENDING

    def is_active(self) -> bool:
        return self.deleted_at is None and self.status != ReservationStatus.CANCELLED

    def _change_status(self, status: ReservationStatus) -> None:
        self.status = status
        self.updated_at = datetime.now(timezone.utc)
