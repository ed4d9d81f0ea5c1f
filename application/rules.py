"""Admission rules for new reservations"""
import logging
from datetime import date, datetime

from application.availability import AvailabilityChecker, OverlapValidator
from domain.entities import Space
from domain.enums import ErrorCode
from domain.errors import MismatchError
from domain.value_objects import TimeSlot

logger = logging.getLogger(__name__)


class ReservationRuleEngine:
    """Admits or rejects a booking request.

    Rules run in a fixed order and the first failure is raised:
    price, capacity, availability window, overlap.
    """

    def __init__(self, availability_checker: AvailabilityChecker, overlap_validator: OverlapValidator):
        self.availability_checker = availability_checker
        self.overlap_validator = overlap_validator

    async def admit(
        self,
        space: Space,
        reserved_date: date,
        time_slot: TimeSlot,
        price: int,
        guest_count: int,
        now: datetime
    ) -> None:
        self.check_price(space, time_slot, price)
        self.check_capacity(space, guest_count)
        await self.availability_checker.check_requested_slot(space.space_id, reserved_date, time_slot, now)
        await self.overlap_validator.check(space.space_id, reserved_date, time_slot)

    @staticmethod
    def check_price(space: Space, time_slot: TimeSlot, price: int) -> None:
        expected = space.price_for(time_slot)
        if price != expected:
            logger.info("Rejected price %s for space %s, expected %s", price, space.space_id, expected)
            raise MismatchError(ErrorCode.INVALID_PRICE)

    @staticmethod
    def check_capacity(space: Space, guest_count: int) -> None:
        if guest_count > space.max_capacity:
            raise MismatchError(ErrorCode.INVALID_CAPACITY)
