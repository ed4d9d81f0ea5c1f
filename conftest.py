"""Shared fixtures: in-memory stores, a fixed clock and seeded users/space"""
import pytest
from datetime import date, datetime, time, timedelta

from application.availability import AvailabilityChecker, OverlapValidator
from application.login_service import LoginService
from application.rules import ReservationRuleEngine
from application.services import ReservationService, ReservationQueryService
from domain.auth import User
from domain.entities import AvailableTime, Reservation, Space
from domain.enums import ReservationStatus, UserRole
from infrastructure.repositories.in_memory_repositories import (
    InMemoryUserRepository, InMemorySpaceRepository, InMemoryAvailableTimeRepository,
    InMemoryReservationRepository, InMemoryReviewRepository, InMemoryRefreshTokenRepository
)
from infrastructure.security import JWTUtil, get_password_hash

NOW = datetime(2030, 5, 10, 14, 30)
TODAY = NOW.date()
TOMORROW = TODAY + timedelta(days=1)
YESTERDAY = TODAY - timedelta(days=1)

GUEST_LOGIN_ID = "guest01"
GUEST_PASSWORD = "guest-password-1"
HOST_USER_ID = 2
SPACE_ID = 100
PRICE_PER_HOUR = 15000
MAX_CAPACITY = 4


def make_reservation(
    reserved_date: date,
    start: int,
    end: int,
    status: ReservationStatus = ReservationStatus.PENDING,
    guest_id: int = 1,
    space_id: int = SPACE_ID
) -> Reservation:
    return Reservation(
        guest_id=guest_id,
        host_id=HOST_USER_ID,
        space_id=space_id,
        date=reserved_date,
        start_time=time(start),
        end_time=time(end),
        price=PRICE_PER_HOUR * (end - start),
        guest_count=2,
        status=status
    )


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def user_repository():
    return InMemoryUserRepository()


@pytest.fixture
def space_repository():
    return InMemorySpaceRepository()


@pytest.fixture
def available_time_repository():
    return InMemoryAvailableTimeRepository()


@pytest.fixture
def reservation_repository():
    return InMemoryReservationRepository()


@pytest.fixture
def review_repository():
    return InMemoryReviewRepository()


@pytest.fixture
def refresh_token_repository():
    return InMemoryRefreshTokenRepository()


@pytest.fixture
def jwt_util():
    return JWTUtil(secret_key="test-secret", algorithm="HS256")


@pytest.fixture
def guest():
    return User(
        user_id=1,
        login_id=GUEST_LOGIN_ID,
        name="Kim Guest",
        email="guest@example.com",
        phone="010-1111-2222",
        password=get_password_hash(GUEST_PASSWORD),
        role=UserRole.GUEST
    )


@pytest.fixture
def host():
    return User(
        user_id=HOST_USER_ID,
        login_id="host01",
        name="Lee Host",
        email="host@example.com",
        phone="010-3333-4444",
        password=get_password_hash("host-password-1"),
        role=UserRole.HOST
    )


@pytest.fixture
def space():
    return Space(
        space_id=SPACE_ID,
        host_id=HOST_USER_ID,
        name="Rooftop Studio",
        price_per_hour=PRICE_PER_HOUR,
        max_capacity=MAX_CAPACITY
    )


@pytest.fixture
async def seeded(user_repository, space_repository, available_time_repository, guest, host, space):
    """Guest, host, space and 09:00-22:00 windows for today and tomorrow"""
    await user_repository.save(guest)
    await user_repository.save(host)
    await space_repository.save(space)
    for day in (TODAY, TOMORROW):
        await available_time_repository.save(
            AvailableTime(space_id=SPACE_ID, date=day, start_time=time(9), end_time=time(22))
        )


@pytest.fixture
def availability_checker(available_time_repository):
    return AvailabilityChecker(available_time_repository)


@pytest.fixture
def overlap_validator(reservation_repository):
    return OverlapValidator(reservation_repository)


@pytest.fixture
def rule_engine(availability_checker, overlap_validator):
    return ReservationRuleEngine(availability_checker, overlap_validator)


@pytest.fixture
def reservation_service(reservation_repository, user_repository, space_repository, rule_engine, clock):
    return ReservationService(reservation_repository, user_repository, space_repository, rule_engine, clock)


@pytest.fixture
def query_service(reservation_repository, user_repository, review_repository, clock):
    return ReservationQueryService(reservation_repository, user_repository, review_repository, clock)


@pytest.fixture
def login_service(user_repository, refresh_token_repository, jwt_util):
    return LoginService(user_repository, refresh_token_repository, jwt_util)
