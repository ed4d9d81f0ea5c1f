"""Availability window and slot-overlap checks for new reservations"""
import logging
from datetime import date, datetime

from domain.entities import AvailableTime
from domain.enums import ErrorCode
from domain.errors import AvailableTimeNotFound, MismatchError
from domain.repositories import AvailableTimeRepository, ReservationRepository
from domain.value_objects import TimeSlot

logger = logging.getLogger(__name__)


class AvailabilityChecker:
    """Checks a requested slot against the space's declared availability"""

    def __init__(self, available_time_repo: AvailableTimeRepository):
        self.available_time_repo = available_time_repo

    async def get_available_window(self, space_id: int, reserved_date: date) -> AvailableTime:
        available_time = await self.available_time_repo.find_by_space_and_date(space_id, reserved_date)
        if available_time is None:
            raise AvailableTimeNotFound(ErrorCode.AVAILABLE_TIME_NOT_FOUND)
        return available_time

    async def check_requested_slot(
        self,
        space_id: int,
        reserved_date: date,
        time_slot: TimeSlot,
        now: datetime
    ) -> AvailableTime:
        """Return the window containing the slot.

        Raises AvailableTimeNotFound when the space has no window on the date
        or when a slot for today starts before the current time, and
        MismatchError(TIME_UNAVAILABLE) when the window does not contain the
        whole slot.
        """
        available_time = await self.get_available_window(space_id, reserved_date)

        if reserved_date == now.date() and time_slot.start_time < now.time():
            raise AvailableTimeNotFound(
                ErrorCode.AVAILABLE_TIME_NOT_FOUND,
                f"Start time {time_slot.start_time} has already passed today"
            )

        if not available_time.contains(time_slot):
            raise MismatchError(ErrorCode.TIME_UNAVAILABLE)

        return available_time


class OverlapValidator:
    """Hour-granularity conflict scan against existing reservations.

    Bookings are whole hours, so the requested range is probed one hour at a
    time from its start; a probe ``t`` conflicts with an existing reservation
    when ``existing.start < t + 1h and existing.end > t``. Back-to-back slots
    (10-12 then 12-13) do not conflict.

    The scan reads then decides without a lock: two concurrent requests for
    the same slot can both pass. Closing that needs a storage-level unique
    constraint or a serialized check-and-insert.
    """

    def __init__(self, reservation_repo: ReservationRepository):
        self.reservation_repo = reservation_repo

    async def has_conflict(self, space_id: int, reserved_date: date, time_slot: TimeSlot) -> bool:
        existing = [
            r for r in await self.reservation_repo.find_by_space_and_date(space_id, reserved_date)
            if r.is_active()
        ]
        if not existing:
            return False

        for probe in time_slot.probes(reserved_date):
            for reservation in existing:
                if reservation.time_slot.overlaps_hour(reserved_date, probe):
                    logger.debug(
                        "Slot %s on %s for space %s conflicts with reservation %s",
                        probe.time(), reserved_date, space_id, reservation.reservation_id
                    )
                    return True
        return False

    async def check(self, space_id: int, reserved_date: date, time_slot: TimeSlot) -> None:
        if await self.has_conflict(space_id, reserved_date, time_slot):
            raise MismatchError(ErrorCode.TIME_UNAVAILABLE)
