"""Domain Errors

Every failure raised by the application layer is a DomainError carrying an
ErrorCode, so callers can map it to a protocol-level response.
"""
from typing import Optional

from domain.enums import ErrorCode


class DomainError(Exception):
    """Base class for domain/service errors."""

    def __init__(self, error_code: ErrorCode, detail: Optional[str] = None):
        self.error_code = error_code
        self.detail = detail
        super().__init__(detail or error_code.message)

    @property
    def code(self) -> str:
        return self.error_code.name

    @property
    def status(self) -> int:
        return self.error_code.status


class NotFoundError(DomainError):
    pass


class SpaceNotFoundError(NotFoundError):
    pass


class UserNotFoundError(NotFoundError):
    pass


class ReservationNotFound(NotFoundError):
    pass


class MismatchError(DomainError):
    """Business-rule violation on an otherwise well-formed request."""


class AvailableTimeNotFound(DomainError):
    pass


class TokenNotFoundError(DomainError):
    pass


class TokenExpiredError(DomainError):
    pass
