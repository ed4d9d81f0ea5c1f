"""Domain Repository Interfaces"""
from abc import ABC, abstractmethod
from typing import Optional, List
from datetime import date, datetime

from domain.auth import User
from domain.entities import Reservation, Space, AvailableTime, Review, RefreshToken
from domain.enums import ReservationStatus
from domain.value_objects import Page, PageRequest


class UserRepository(ABC):
    """Repository interface for users; finders skip soft-deleted rows unless noted"""

    @abstractmethod
    async def save(self, user: User) -> User:
        pass

    @abstractmethod
    async def find_by_id(self, user_id: int) -> Optional[User]:
        """Find user by ID, deleted or not"""
        pass

    @abstractmethod
    async def find_by_login_id(self, login_id: str) -> Optional[User]:
        pass

    @abstractmethod
    async def find_by_name_and_phone_and_email(self, name: str, phone: str, email: str) -> Optional[User]:
        pass

    @abstractmethod
    async def find_by_login_id_and_name_and_phone_and_email(
        self, login_id: str, name: str, phone: str, email: str
    ) -> Optional[User]:
        pass


class SpaceRepository(ABC):
    """Repository interface for spaces"""

    @abstractmethod
    async def save(self, space: Space) -> Space:
        pass

    @abstractmethod
    async def find_by_id(self, space_id: int) -> Optional[Space]:
        pass


class AvailableTimeRepository(ABC):
    """Repository interface for host-declared availability windows"""

    @abstractmethod
    async def save(self, available_time: AvailableTime) -> AvailableTime:
        pass

    @abstractmethod
    async def find_by_space_and_date(self, space_id: int, available_date: date) -> Optional[AvailableTime]:
        pass


class ReservationRepository(ABC):
    """Repository interface for Reservation Aggregate"""

    @abstractmethod
    async def save(self, reservation: Reservation) -> Reservation:
        """Insert or update; assigns reservation_id on first save"""
        pass

    @abstractmethod
    async def find_by_id(self, reservation_id: int) -> Optional[Reservation]:
        pass

    @abstractmethod
    async def find_by_space_and_date(self, space_id: int, reserved_date: date) -> List[Reservation]:
        """Non-deleted reservations of a space on a date, any status"""
        pass

    @abstractmethod
    async def find_upcoming_by_guest(
        self, guest_id: int, now: datetime, page_request: PageRequest
    ) -> Page[Reservation]:
        """Non-cancelled reservations starting at or after now, by date then start time"""
        pass

    @abstractmethod
    async def find_past_by_guest(
        self, guest_id: int, now: datetime, page_request: PageRequest
    ) -> Page[Reservation]:
        """Reservations that started before now, by date then start time.

        CANCELLED reservations are left out on purpose; they are listed only
        by status.
        """
        pass

    @abstractmethod
    async def find_by_guest_and_status(
        self, guest_id: int, status: ReservationStatus, page_request: PageRequest
    ) -> Page[Reservation]:
        pass


class ReviewRepository(ABC):
    """Repository interface for reviews (read-only join)"""

    @abstractmethod
    async def save(self, review: Review) -> Review:
        pass

    @abstractmethod
    async def find_by_guest_and_space_and_date(
        self, guest_id: int, space_id: int, reserved_date: date
    ) -> Optional[Review]:
        """Non-deleted review for (guest, space, reserved date)"""
        pass


class RefreshTokenRepository(ABC):
    """Repository interface for active refresh tokens"""

    @abstractmethod
    async def save(self, refresh_token: RefreshToken) -> RefreshToken:
        pass

    @abstractmethod
    async def exists_by_refresh(self, refresh: str) -> bool:
        pass

    @abstractmethod
    async def delete_by_refresh(self, refresh: str) -> None:
        pass
