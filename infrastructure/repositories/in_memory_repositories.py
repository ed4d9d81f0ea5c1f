"""In-Memory Repository Implementations"""
from itertools import count
from typing import Optional, List, Dict, Tuple
from datetime import date, datetime

from domain.auth import User
from domain.entities import Reservation, Space, AvailableTime, Review, RefreshToken
from domain.enums import ReservationStatus
from domain.repositories import (
    UserRepository, SpaceRepository, AvailableTimeRepository,
    ReservationRepository, ReviewRepository, RefreshTokenRepository
)
from domain.value_objects import Page, PageRequest


def _by_slot(reservation: Reservation):
    return (reservation.date, reservation.start_time, reservation.reservation_id)


class InMemoryUserRepository(UserRepository):
    """In-memory implementation of UserRepository"""

    def __init__(self):
        self._storage: Dict[int, User] = {}

    async def save(self, user: User) -> User:
        self._storage[user.user_id] = user
        return user

    async def find_by_id(self, user_id: int) -> Optional[User]:
        return self._storage.get(user_id)

    async def find_by_login_id(self, login_id: str) -> Optional[User]:
        return self._find_live(lambda u: u.login_id == login_id)

    async def find_by_name_and_phone_and_email(self, name: str, phone: str, email: str) -> Optional[User]:
        return self._find_live(lambda u: (u.name, u.phone, u.email) == (name, phone, email))

    async def find_by_login_id_and_name_and_phone_and_email(
        self, login_id: str, name: str, phone: str, email: str
    ) -> Optional[User]:
        return self._find_live(
            lambda u: (u.login_id, u.name, u.phone, u.email) == (login_id, name, phone, email)
        )

    def _find_live(self, predicate) -> Optional[User]:
        for user in self._storage.values():
            if not user.is_deleted() and predicate(user):
                return user
        return None


class InMemorySpaceRepository(SpaceRepository):
    """In-memory implementation of SpaceRepository"""

    def __init__(self):
        self._storage: Dict[int, Space] = {}

    async def save(self, space: Space) -> Space:
        self._storage[space.space_id] = space
        return space

    async def find_by_id(self, space_id: int) -> Optional[Space]:
        return self._storage.get(space_id)


class InMemoryAvailableTimeRepository(AvailableTimeRepository):
    """In-memory implementation of AvailableTimeRepository"""

    def __init__(self):
        self._storage: Dict[Tuple[int, date], AvailableTime] = {}
        self._ids = count(1)

    async def save(self, available_time: AvailableTime) -> AvailableTime:
        if available_time.available_time_id is None:
            available_time.available_time_id = next(self._ids)
        self._storage[(available_time.space_id, available_time.date)] = available_time
        return available_time

    async def find_by_space_and_date(self, space_id: int, available_date: date) -> Optional[AvailableTime]:
        return self._storage.get((space_id, available_date))


class InMemoryReservationRepository(ReservationRepository):
    """In-memory implementation of ReservationRepository"""

    def __init__(self):
        self._storage: Dict[int, Reservation] = {}
        self._ids = count(1)

    async def save(self, reservation: Reservation) -> Reservation:
        if reservation.reservation_id is None:
            reservation.reservation_id = next(self._ids)
        self._storage[reservation.reservation_id] = reservation
        return reservation

    async def find_by_id(self, reservation_id: int) -> Optional[Reservation]:
        return self._storage.get(reservation_id)

    async def find_by_space_and_date(self, space_id: int, reserved_date: date) -> List[Reservation]:
        return [
            r for r in self._live()
            if r.space_id == space_id and r.date == reserved_date
        ]

    async def find_upcoming_by_guest(
        self, guest_id: int, now: datetime, page_request: PageRequest
    ) -> Page[Reservation]:
        items = [
            r for r in self._live()
            if r.guest_id == guest_id
            and r.status != ReservationStatus.CANCELLED
            and r.starts_at >= now
        ]
        return Page.of(sorted(items, key=_by_slot), page_request)

    async def find_past_by_guest(
        self, guest_id: int, now: datetime, page_request: PageRequest
    ) -> Page[Reservation]:
        items = [
            r for r in self._live()
            if r.guest_id == guest_id
            and r.status != ReservationStatus.CANCELLED
            and r.starts_at < now
        ]
        return Page.of(sorted(items, key=_by_slot), page_request)

    async def find_by_guest_and_status(
        self, guest_id: int, status: ReservationStatus, page_request: PageRequest
    ) -> Page[Reservation]:
        items = [
            r for r in self._live()
            if r.guest_id == guest_id and r.status == status
        ]
        return Page.of(sorted(items, key=_by_slot), page_request)

    def _live(self) -> List[Reservation]:
        return [r for r in self._storage.values() if r.deleted_at is None]


class InMemoryReviewRepository(ReviewRepository):
    """In-memory implementation of ReviewRepository"""

    def __init__(self):
        self._storage: Dict[int, Review] = {}

    async def save(self, review: Review) -> Review:
        self._storage[review.review_id] = review
        return review

    async def find_by_guest_and_space_and_date(
        self, guest_id: int, space_id: int, reserved_date: date
    ) -> Optional[Review]:
        for review in self._storage.values():
            if (review.deleted_at is None
                    and review.guest_id == guest_id
                    and review.space_id == space_id
                    and review.reserved_date == reserved_date):
                return review
        return None


class InMemoryRefreshTokenRepository(RefreshTokenRepository):
    """In-memory implementation of RefreshTokenRepository"""

    def __init__(self):
        self._storage: Dict[str, RefreshToken] = {}

    async def save(self, refresh_token: RefreshToken) -> RefreshToken:
        self._storage[refresh_token.refresh] = refresh_token
        return refresh_token

    async def exists_by_refresh(self, refresh: str) -> bool:
        return refresh in self._storage

    async def delete_by_refresh(self, refresh: str) -> None:
        self._storage.pop(refresh, None)

    async def find_all(self) -> List[RefreshToken]:
        return list(self._storage.values())
