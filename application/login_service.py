"""Application Services - account recovery and token lifecycle"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Mapping, Optional

from jose import JWTError
from pydantic import BaseModel

from domain.entities import RefreshToken
from domain.enums import ErrorCode, TokenCategory
from domain.errors import TokenExpiredError, TokenNotFoundError, UserNotFoundError
from domain.repositories import RefreshTokenRepository, UserRepository
from infrastructure.config import settings
from infrastructure.security import JWTUtil, generate_temp_password, get_password_hash, verify_password

logger = logging.getLogger(__name__)


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str


class LoginService:
    """Login-id lookup, password reset and refresh-token rotation"""

    def __init__(self,
                 user_repo: UserRepository,
                 refresh_token_repo: RefreshTokenRepository,
                 jwt_util: JWTUtil,
                 access_expiration_ms: int = settings.ACCESS_TOKEN_EXPIRATION_MILLIS,
                 refresh_expiration_ms: int = settings.REFRESH_TOKEN_EXPIRATION_MILLIS,
                 refresh_cookie_name: str = settings.REFRESH_COOKIE_NAME):
        self.user_repo = user_repo
        self.refresh_token_repo = refresh_token_repo
        self.jwt_util = jwt_util
        self.access_expiration_ms = access_expiration_ms
        self.refresh_expiration_ms = refresh_expiration_ms
        self.refresh_cookie_name = refresh_cookie_name

    async def find_login_id(self, name: str, phone: str, email: str) -> str:
        user = await self.user_repo.find_by_name_and_phone_and_email(name, phone, email)
        if user is None:
            raise UserNotFoundError(ErrorCode.MEMBER_NOT_FOUND)
        return user.login_id

    async def reset_password(self, login_id: str, name: str, phone: str, email: str) -> str:
        """Replace the password with a random temporary one.

        Only the hash is stored; the plaintext is returned once to the caller.
        """
        user = await self.user_repo.find_by_login_id_and_name_and_phone_and_email(login_id, name, phone, email)
        if user is None:
            raise UserNotFoundError(ErrorCode.MEMBER_NOT_FOUND)

        temp_password = generate_temp_password()
        user.update_password(get_password_hash(temp_password))
        await self.user_repo.save(user)
        logger.info("Password reset for user %s", user.user_id)
        return temp_password

    async def login(self, login_id: str, password: str) -> TokenPair:
        user = await self.user_repo.find_by_login_id(login_id)
        if user is None or not verify_password(password, user.password):
            raise UserNotFoundError(ErrorCode.MEMBER_NOT_FOUND)

        tokens = self._issue_tokens(user.login_id, user.role.value)
        await self._add_refresh_token(user.login_id, tokens.refresh_token)
        logger.info("User %s logged in", user.user_id)
        return tokens

    async def logout(self, cookies: Mapping[str, str]) -> None:
        refresh = self._extract_refresh(cookies)
        if refresh is None:
            raise TokenNotFoundError(ErrorCode.REFRESH_TOKEN_NOT_FOUND)
        await self.refresh_token_repo.delete_by_refresh(refresh)

    async def reissue_tokens(self, cookies: Mapping[str, str]) -> TokenPair:
        """Rotate the refresh token found in the request cookies.

        The old refresh token is deleted and the new one saved as two separate
        store calls; a failure between them leaves no active token and the
        client has to log in again.
        """
        refresh = self._extract_refresh(cookies)
        await self._check_refresh_token_is_valid(refresh)

        login_id = self.jwt_util.get_login_id(refresh)
        role = self.jwt_util.get_role(refresh)
        tokens = self._issue_tokens(login_id, role)

        await self.refresh_token_repo.delete_by_refresh(refresh)
        await self._add_refresh_token(login_id, tokens.refresh_token)
        logger.info("Refresh token rotated for %s", login_id)
        return tokens

    def _extract_refresh(self, cookies: Optional[Mapping[str, str]]) -> Optional[str]:
        if not cookies:
            return None
        return cookies.get(self.refresh_cookie_name) or None

    async def _check_refresh_token_is_valid(self, refresh: Optional[str]) -> None:
        if refresh is None:
            raise TokenNotFoundError(ErrorCode.REFRESH_TOKEN_NOT_FOUND)

        try:
            expired = self.jwt_util.is_expired(refresh)
            category = self.jwt_util.get_category(refresh)
        except JWTError as e:
            logger.warning("Rejected undecodable refresh token: %s", e)
            raise TokenNotFoundError(ErrorCode.REFRESH_TOKEN_NOT_FOUND) from e

        if expired:
            raise TokenExpiredError(ErrorCode.REFRESH_TOKEN_EXPIRED)

        if category != TokenCategory.REFRESH.value or not await self.refresh_token_repo.exists_by_refresh(refresh):
            raise TokenNotFoundError(ErrorCode.REFRESH_TOKEN_NOT_FOUND)

    def _issue_tokens(self, login_id: str, role: str) -> TokenPair:
        return TokenPair(
            access_token=self.jwt_util.create_jwt(TokenCategory.ACCESS, login_id, role, self.access_expiration_ms),
            refresh_token=self.jwt_util.create_jwt(TokenCategory.REFRESH, login_id, role, self.refresh_expiration_ms)
        )

    async def _add_refresh_token(self, login_id: str, refresh: str) -> None:
        expiration = datetime.now(timezone.utc) + timedelta(milliseconds=self.refresh_expiration_ms)
        await self.refresh_token_repo.save(
            RefreshToken(login_id=login_id, refresh=refresh, expiration=expiration.isoformat())
        )
