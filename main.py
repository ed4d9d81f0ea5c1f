from fastapi import FastAPI, Depends, Query, Request, Response
from fastapi.responses import JSONResponse
from fastapi.security import OAuth2PasswordRequestForm

from api.schemas import (
    # Reservation
    ReservationCreateRequest, ReservationResponse, DetailReservationResponse,
    ReservationListResponse, ReservationListPageResponse, CancelReservationResponse,
    # Auth
    Token, FindLoginIdRequest, FindLoginIdResponse, ResetPasswordRequest, ResetPasswordResponse,
    ErrorResponse
)
from api.dependencies import get_current_login_id, get_jwt_util

from application.availability import AvailabilityChecker, OverlapValidator
from application.login_service import LoginService, TokenPair
from application.rules import ReservationRuleEngine
from application.services import ReservationService, ReservationQueryService, ReservationListPage
from domain.enums import ReservationStatus
from domain.errors import DomainError
from domain.value_objects import PageRequest
from infrastructure.config import settings
from infrastructure.logging_config import setup_logging
from infrastructure.repositories.in_memory_repositories import (
    InMemoryUserRepository, InMemorySpaceRepository, InMemoryAvailableTimeRepository,
    InMemoryReservationRepository, InMemoryReviewRepository, InMemoryRefreshTokenRepository
)

setup_logging(settings.LOG_LEVEL)

app = FastAPI(
    title="Space Reservation API",
    description="Guest reservations for hourly space rentals",
    version="1.0.0"
)

# Initialize repositories
user_repo = InMemoryUserRepository()
space_repo = InMemorySpaceRepository()
available_time_repo = InMemoryAvailableTimeRepository()
reservation_repo = InMemoryReservationRepository()
review_repo = InMemoryReviewRepository()
refresh_token_repo = InMemoryRefreshTokenRepository()

# Dependency injection
def get_reservation_service() -> ReservationService:
    rule_engine = ReservationRuleEngine(
        AvailabilityChecker(available_time_repo),
        OverlapValidator(reservation_repo)
    )
    return ReservationService(reservation_repo, user_repo, space_repo, rule_engine)

def get_reservation_query_service() -> ReservationQueryService:
    return ReservationQueryService(reservation_repo, user_repo, review_repo)

def get_login_service() -> LoginService:
    return LoginService(user_repo, refresh_token_repo, get_jwt_util())

def get_page_request(page: int = Query(0, ge=0), size: int = Query(10, ge=1)) -> PageRequest:
    return PageRequest(page=page, size=size)

# ============================================================================
# ERROR HANDLING
# ============================================================================

@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    return JSONResponse(
        status_code=exc.status,
        content=ErrorResponse(code=exc.code, message=str(exc)).model_dump()
    )

# ============================================================================
# HEALTH
# ============================================================================

@app.get("/api/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "message": "API is running"}

# ============================================================================
# AUTH ENDPOINTS
# ============================================================================

@app.post("/login", response_model=Token, tags=["Auth"])
async def login(
    response: Response,
    form_data: OAuth2PasswordRequestForm = Depends(),
    service: LoginService = Depends(get_login_service)
):
    tokens = await service.login(form_data.username, form_data.password)
    return _token_response(response, tokens)

@app.post("/logout", status_code=204, tags=["Auth"])
async def logout(
    request: Request,
    service: LoginService = Depends(get_login_service)
):
    await service.logout(request.cookies)
    response = Response(status_code=204)
    response.delete_cookie(settings.REFRESH_COOKIE_NAME)
    return response

@app.post("/api/users/reissue", response_model=Token, tags=["Auth"])
async def reissue_tokens(
    request: Request,
    response: Response,
    service: LoginService = Depends(get_login_service)
):
    """Rotate the refresh cookie and issue a new access token"""
    tokens = await service.reissue_tokens(request.cookies)
    return _token_response(response, tokens)

@app.post("/api/users/find-login-id", response_model=FindLoginIdResponse, tags=["Auth"])
async def find_login_id(
    request: FindLoginIdRequest,
    service: LoginService = Depends(get_login_service)
):
    login_id = await service.find_login_id(request.name, request.phone, request.email)
    return FindLoginIdResponse(login_id=login_id)

@app.post("/api/users/reset-password", response_model=ResetPasswordResponse, tags=["Auth"])
async def reset_password(
    request: ResetPasswordRequest,
    service: LoginService = Depends(get_login_service)
):
    temp_password = await service.reset_password(request.login_id, request.name, request.phone, request.email)
    return ResetPasswordResponse(temp_password=temp_password)

# ============================================================================
# RESERVATION ENDPOINTS
# ============================================================================

@app.post("/api/spaces/{space_id}/reservations", response_model=ReservationResponse, status_code=201, tags=["Reservations"])
async def create_reservation(
    space_id: int,
    request: ReservationCreateRequest,
    service: ReservationService = Depends(get_reservation_service),
    login_id: str = Depends(get_current_login_id)
):
    """Create new reservation"""
    reservation_id = await service.create_reservation(
        login_id=login_id,
        space_id=space_id,
        reserved_date=request.date,
        start_time=request.start_time,
        end_time=request.end_time,
        price=request.price,
        guest_count=request.guest_count,
        usage_purpose=request.usage_purpose,
        request_message=request.request_message
    )
    return ReservationResponse(id=reservation_id)

@app.get("/api/reservations", response_model=ReservationListPageResponse, tags=["Reservations"])
async def get_upcoming_reservations(
    page_request: PageRequest = Depends(get_page_request),
    service: ReservationQueryService = Depends(get_reservation_query_service),
    login_id: str = Depends(get_current_login_id)
):
    """Upcoming reservations of the caller"""
    return _list_page_to_response(await service.find_upcoming_reservations(login_id, page_request))

@app.get("/api/reservations/past", response_model=ReservationListPageResponse, tags=["Reservations"])
async def get_past_reservations(
    page_request: PageRequest = Depends(get_page_request),
    service: ReservationQueryService = Depends(get_reservation_query_service),
    login_id: str = Depends(get_current_login_id)
):
    """Past reservations of the caller; accepted ones are marked completed"""
    return _list_page_to_response(await service.find_past_reservations(login_id, page_request))

@app.get("/api/reservations/cancelled", response_model=ReservationListPageResponse, tags=["Reservations"])
async def get_cancelled_reservations(
    page_request: PageRequest = Depends(get_page_request),
    service: ReservationQueryService = Depends(get_reservation_query_service),
    login_id: str = Depends(get_current_login_id)
):
    return _list_page_to_response(
        await service.find_reservations_by_status(login_id, ReservationStatus.CANCELLED, page_request)
    )

@app.get("/api/reservations/{reservation_id}", response_model=DetailReservationResponse, tags=["Reservations"])
async def get_reservation_detail(
    reservation_id: int,
    service: ReservationService = Depends(get_reservation_service),
    login_id: str = Depends(get_current_login_id)
):
    """Get reservation by ID"""
    reservation = await service.get_reservation_detail(reservation_id)
    return DetailReservationResponse(
        reservation_id=reservation.reservation_id,
        guest_id=reservation.guest_id,
        host_id=reservation.host_id,
        space_id=reservation.space_id,
        date=reservation.date,
        start_time=reservation.start_time,
        end_time=reservation.end_time,
        price=reservation.price,
        guest_count=reservation.guest_count,
        usage_purpose=reservation.usage_purpose,
        request_message=reservation.request_message,
        status=reservation.status.value
    )

@app.patch("/api/reservations/{reservation_id}/cancel", response_model=CancelReservationResponse, tags=["Reservations"])
async def cancel_reservation(
    reservation_id: int,
    service: ReservationService = Depends(get_reservation_service),
    login_id: str = Depends(get_current_login_id)
):
    """Cancel a pending reservation"""
    reservation = await service.cancel_reservation(reservation_id)
    return CancelReservationResponse(
        reservation_id=reservation.reservation_id,
        status=reservation.status.value
    )

# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def _token_response(response: Response, tokens: TokenPair) -> Token:
    """Refresh token goes to an http-only cookie, access token to the body"""
    response.set_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        value=tokens.refresh_token,
        max_age=settings.REFRESH_TOKEN_EXPIRATION_MILLIS // 1000,
        httponly=True
    )
    return Token(access_token=tokens.access_token)

def _list_page_to_response(page: ReservationListPage) -> ReservationListPageResponse:
    """Convert a service listing page to ReservationListPageResponse"""
    return ReservationListPageResponse(
        reservations=[
            ReservationListResponse(
                reservation_id=entry.reservation.reservation_id,
                space_id=entry.reservation.space_id,
                date=entry.reservation.date,
                start_time=entry.reservation.start_time,
                end_time=entry.reservation.end_time,
                price=entry.reservation.price,
                guest_count=entry.reservation.guest_count,
                status=entry.reservation.status.value,
                review_id=entry.review_id
            )
            for entry in page.reservations
        ],
        last=page.last,
        total_pages=page.total_pages
    )

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
