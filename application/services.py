"""Application Services - Business use cases"""
import logging
from datetime import date, datetime, time
from typing import Callable, List

from pydantic import BaseModel

from application.rules import ReservationRuleEngine
from domain.auth import User
from domain.entities import Reservation
from domain.enums import ErrorCode, ReservationStatus
from domain.errors import DomainError, ReservationNotFound, SpaceNotFoundError, UserNotFoundError, MismatchError
from domain.repositories import ReservationRepository, ReviewRepository, SpaceRepository, UserRepository
from domain.value_objects import Page, PageRequest, TimeSlot

logger = logging.getLogger(__name__)

NO_REVIEW_ID = 0

Clock = Callable[[], datetime]


class ReservationListEntry(BaseModel):
    """A listed reservation; review_id is NO_REVIEW_ID when there is none"""
    reservation: Reservation
    review_id: int = NO_REVIEW_ID


class ReservationListPage(BaseModel):
    reservations: List[ReservationListEntry]
    last: bool
    total_pages: int


async def find_guest(user_repo: UserRepository, login_id: str) -> User:
    """Resolve the authenticated caller; soft-deleted users do not resolve"""
    user = await user_repo.find_by_login_id(login_id)
    if user is None:
        raise UserNotFoundError(ErrorCode.USER_NOT_FOUND)
    return user


class ReservationService:
    """Creates, cancels and reads single reservations"""

    def __init__(self,
                 repository: ReservationRepository,
                 user_repo: UserRepository,
                 space_repo: SpaceRepository,
                 rule_engine: ReservationRuleEngine,
                 clock: Clock = datetime.now):
        self.repository = repository
        self.user_repo = user_repo
        self.space_repo = space_repo
        self.rule_engine = rule_engine
        self.clock = clock

    async def create_reservation(
        self,
        login_id: str,
        space_id: int,
        reserved_date: date,
        start_time: time,
        end_time: time,
        price: int,
        guest_count: int,
        usage_purpose: str = "",
        request_message: str = ""
    ) -> int:
        """Admit a booking request and store it as PENDING; returns its id"""
        guest = await find_guest(self.user_repo, login_id)

        space = await self.space_repo.find_by_id(space_id)
        if space is None:
            raise SpaceNotFoundError(ErrorCode.SPACE_NOT_FOUND)

        host = await self.user_repo.find_by_id(space.host_id)
        if host is None:
            raise UserNotFoundError(ErrorCode.USER_NOT_FOUND)

        time_slot = TimeSlot(start_time=start_time, end_time=end_time)
        try:
            await self.rule_engine.admit(space, reserved_date, time_slot, price, guest_count, self.clock())
        except DomainError as e:
            logger.info("Reservation for space %s rejected: %s", space_id, e.code)
            raise

        reservation = Reservation.create(
            guest_id=guest.user_id,
            host_id=host.user_id,
            space_id=space.space_id,
            reserved_date=reserved_date,
            time_slot=time_slot,
            price=price,
            guest_count=guest_count,
            usage_purpose=usage_purpose,
            request_message=request_message
        )
        saved = await self.repository.save(reservation)
        logger.info(
            "Reservation %s created for space %s on %s %s-%s",
            saved.reservation_id, space_id, reserved_date, start_time, end_time
        )
        return saved.reservation_id

    async def get_reservation_detail(self, reservation_id: int) -> Reservation:
        return await self._get_or_raise(reservation_id)

    async def cancel_reservation(self, reservation_id: int) -> Reservation:
        """Cancel a PENDING reservation; any other status is CANNOT_CANCEL_RESERVATION"""
        reservation = await self._get_or_raise(reservation_id)

        if not reservation.is_cancellable():
            raise MismatchError(ErrorCode.CANNOT_CANCEL_RESERVATION)

        reservation.cancel()
        await self.repository.save(reservation)
        logger.info("Reservation %s cancelled", reservation_id)
        return reservation

    async def _get_or_raise(self, reservation_id: int) -> Reservation:
        reservation = await self.repository.find_by_id(reservation_id)
        if reservation is None:
            raise ReservationNotFound(ErrorCode.RESERVATION_NOT_FOUND)
        return reservation


class ReservationQueryService:
    """Paginated reservation listings for the authenticated guest.

    Every listing raises ReservationNotFound when the page is empty.
    """

    def __init__(self,
                 repository: ReservationRepository,
                 user_repo: UserRepository,
                 review_repo: ReviewRepository,
                 clock: Clock = datetime.now):
        self.repository = repository
        self.user_repo = user_repo
        self.review_repo = review_repo
        self.clock = clock

    async def find_upcoming_reservations(self, login_id: str, page_request: PageRequest) -> ReservationListPage:
        guest = await find_guest(self.user_repo, login_id)
        page = await self.repository.find_upcoming_by_guest(guest.user_id, self.clock(), page_request)
        self._check_not_empty(page)
        return self._to_list_page(page, [ReservationListEntry(reservation=r) for r in page.content])

    async def find_reservations_by_status(
        self, login_id: str, status: ReservationStatus, page_request: PageRequest
    ) -> ReservationListPage:
        guest = await find_guest(self.user_repo, login_id)
        page = await self.repository.find_by_guest_and_status(guest.user_id, status, page_request)
        self._check_not_empty(page)
        return self._to_list_page(page, [ReservationListEntry(reservation=r) for r in page.content])

    async def find_past_reservations(self, login_id: str, page_request: PageRequest) -> ReservationListPage:
        """List reservations that started before now.

        Not a pure read: ACCEPTED reservations on the page are moved to
        COMPLETED and saved before they are returned.
        """
        guest = await find_guest(self.user_repo, login_id)
        page = await self.repository.find_past_by_guest(guest.user_id, self.clock(), page_request)
        self._check_not_empty(page)

        entries = []
        for reservation in page.content:
            if reservation.status == ReservationStatus.ACCEPTED:
                reservation.complete()
                await self.repository.save(reservation)
                logger.info("Reservation %s completed", reservation.reservation_id)

            review = await self.review_repo.find_by_guest_and_space_and_date(
                guest.user_id, reservation.space_id, reservation.date
            )
            review_id = review.review_id if review is not None else NO_REVIEW_ID
            entries.append(ReservationListEntry(reservation=reservation, review_id=review_id))

        return self._to_list_page(page, entries)

    @staticmethod
    def _check_not_empty(page: Page) -> None:
        if page.is_empty():
            raise ReservationNotFound(ErrorCode.RESERVATION_NOT_FOUND)

    @staticmethod
    def _to_list_page(page: Page, entries: List[ReservationListEntry]) -> ReservationListPage:
        return ReservationListPage(reservations=entries, last=page.is_last, total_pages=page.total_pages)
