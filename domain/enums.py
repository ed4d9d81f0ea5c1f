"""Domain Enums"""
from enum import Enum


class ReservationStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class UserRole(str, Enum):
    GUEST = "GUEST"
    HOST = "HOST"
    ADMIN = "ADMIN"


class TokenCategory(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


class ErrorCode(Enum):
    """Stable error codes: (http status hint, message)"""

    # User
    USER_NOT_FOUND = (404, "User not found")
    MEMBER_NOT_FOUND = (404, "No member matches the given information")
    REFRESH_TOKEN_NOT_FOUND = (401, "Refresh token not found")
    REFRESH_TOKEN_EXPIRED = (401, "Refresh token expired")

    # Space
    SPACE_NOT_FOUND = (404, "Space not found")

    # Reservation
    RESERVATION_NOT_FOUND = (404, "Reservation not found")
    INVALID_PRICE = (400, "Price does not match the space's hourly rate")
    INVALID_CAPACITY = (400, "Guest count exceeds the space's maximum capacity")
    CANNOT_CANCEL_RESERVATION = (400, "Only pending reservations can be cancelled")

    # Available time
    AVAILABLE_TIME_NOT_FOUND = (404, "No available time for the requested date")
    TIME_UNAVAILABLE = (400, "Requested time is not available")

    @property
    def status(self) -> int:
        return self.value[0]

    @property
    def message(self) -> str:
        return self.value[1]
