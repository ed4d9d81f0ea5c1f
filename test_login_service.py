"""Account recovery, token rotation and security helper tests"""
import pytest
from datetime import datetime
from jose import JWTError

from domain.entities import RefreshToken
from domain.enums import ErrorCode, TokenCategory
from domain.errors import TokenExpiredError, TokenNotFoundError, UserNotFoundError
from infrastructure.config import Settings
from infrastructure.security import (
    JWTUtil, TEMP_PASSWORD_CHARS, generate_temp_password, get_password_hash, verify_password
)

from conftest import GUEST_LOGIN_ID, GUEST_PASSWORD

ONE_HOUR_MS = 60 * 60 * 1000


async def store_refresh(repo, token, login_id=GUEST_LOGIN_ID):
    await repo.save(RefreshToken(login_id=login_id, refresh=token, expiration="2099-01-01T00:00:00+00:00"))


class TestSecurity:
    """Test password hashing and the JWT codec"""

    @pytest.mark.unit
    def test_password_hash_roundtrip(self):
        hashed = get_password_hash("s3cret-pass")
        assert hashed != "s3cret-pass"
        assert verify_password("s3cret-pass", hashed)
        assert not verify_password("wrong-pass", hashed)

    @pytest.mark.unit
    @pytest.mark.edge_case
    def test_long_password_hash(self):
        long_password = "x" * 100
        assert verify_password(long_password, get_password_hash(long_password))

    @pytest.mark.unit
    def test_temp_password_shape(self):
        password = generate_temp_password()
        assert len(password) == 10
        assert all(c in TEMP_PASSWORD_CHARS for c in password)

    @pytest.mark.unit
    def test_temp_passwords_differ(self):
        assert len({generate_temp_password() for _ in range(20)}) == 20

    @pytest.mark.unit
    def test_jwt_claims(self, jwt_util):
        token = jwt_util.create_jwt(TokenCategory.REFRESH, "guest01", "GUEST", ONE_HOUR_MS)
        assert jwt_util.get_login_id(token) == "guest01"
        assert jwt_util.get_category(token) == "refresh"
        assert jwt_util.get_role(token) == "GUEST"
        assert not jwt_util.is_expired(token)

    @pytest.mark.unit
    def test_jwt_expired(self, jwt_util):
        token = jwt_util.create_jwt(TokenCategory.ACCESS, "guest01", "GUEST", -ONE_HOUR_MS)
        assert jwt_util.is_expired(token)

    @pytest.mark.unit
    def test_jwt_tokens_are_unique(self, jwt_util):
        first = jwt_util.create_jwt(TokenCategory.REFRESH, "guest01", "GUEST", ONE_HOUR_MS)
        second = jwt_util.create_jwt(TokenCategory.REFRESH, "guest01", "GUEST", ONE_HOUR_MS)
        assert first != second

    @pytest.mark.unit
    def test_jwt_wrong_secret(self, jwt_util):
        token = JWTUtil(secret_key="other-secret").create_jwt(TokenCategory.REFRESH, "guest01", "GUEST", ONE_HOUR_MS)
        with pytest.raises(JWTError):
            jwt_util.is_expired(token)

    @pytest.mark.unit
    def test_settings_read_dotenv(self, tmp_path, monkeypatch):
        """Settings pick up values from a .env file in the working directory"""
        monkeypatch.delenv("REFRESH_COOKIE_NAME", raising=False)
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".env").write_text("REFRESH_COOKIE_NAME=refresh_v2\n")

        assert Settings().REFRESH_COOKIE_NAME == "refresh_v2"


class TestAccountRecovery:
    """Test login id lookup and password reset"""

    @pytest.mark.unit
    @pytest.mark.application
    async def test_find_login_id(self, seeded, login_service, guest):
        login_id = await login_service.find_login_id(guest.name, guest.phone, guest.email)
        assert login_id == GUEST_LOGIN_ID

    @pytest.mark.unit
    @pytest.mark.application
    async def test_find_login_id_no_match(self, seeded, login_service, guest):
        with pytest.raises(UserNotFoundError) as exc_info:
            await login_service.find_login_id(guest.name, "010-0000-0000", guest.email)
        assert exc_info.value.error_code == ErrorCode.MEMBER_NOT_FOUND

    @pytest.mark.unit
    @pytest.mark.application
    async def test_find_login_id_deleted_user(self, seeded, login_service, guest):
        guest.deleted_at = datetime(2030, 1, 1)
        with pytest.raises(UserNotFoundError):
            await login_service.find_login_id(guest.name, guest.phone, guest.email)

    @pytest.mark.unit
    @pytest.mark.application
    async def test_reset_password(self, seeded, login_service, user_repository, guest):
        temp_password = await login_service.reset_password(GUEST_LOGIN_ID, guest.name, guest.phone, guest.email)

        assert len(temp_password) == 10
        assert temp_password.isalnum()
        stored = await user_repository.find_by_login_id(GUEST_LOGIN_ID)
        assert stored.password != temp_password
        assert verify_password(temp_password, stored.password)
        assert not verify_password(GUEST_PASSWORD, stored.password)

    @pytest.mark.unit
    @pytest.mark.application
    async def test_reset_password_mismatch(self, seeded, login_service, guest):
        with pytest.raises(UserNotFoundError) as exc_info:
            await login_service.reset_password("host01", guest.name, guest.phone, guest.email)
        assert exc_info.value.error_code == ErrorCode.MEMBER_NOT_FOUND


class TestTokenLifecycle:
    """Test login, logout and refresh-token rotation"""

    @pytest.mark.unit
    @pytest.mark.application
    async def test_login_issues_and_stores_tokens(self, seeded, login_service, refresh_token_repository, jwt_util):
        tokens = await login_service.login(GUEST_LOGIN_ID, GUEST_PASSWORD)

        assert jwt_util.get_category(tokens.access_token) == "access"
        assert jwt_util.get_category(tokens.refresh_token) == "refresh"
        assert jwt_util.get_role(tokens.access_token) == "GUEST"
        assert await refresh_token_repository.exists_by_refresh(tokens.refresh_token)

    @pytest.mark.unit
    @pytest.mark.application
    async def test_login_wrong_password(self, seeded, login_service):
        with pytest.raises(UserNotFoundError):
            await login_service.login(GUEST_LOGIN_ID, "not-the-password")

    @pytest.mark.unit
    @pytest.mark.application
    async def test_logout_removes_token(self, seeded, login_service, refresh_token_repository):
        tokens = await login_service.login(GUEST_LOGIN_ID, GUEST_PASSWORD)
        await login_service.logout({"refresh": tokens.refresh_token})
        assert not await refresh_token_repository.exists_by_refresh(tokens.refresh_token)

    @pytest.mark.unit
    @pytest.mark.application
    async def test_reissue_rotates_token(self, seeded, login_service, refresh_token_repository, jwt_util):
        old = jwt_util.create_jwt(TokenCategory.REFRESH, GUEST_LOGIN_ID, "GUEST", ONE_HOUR_MS)
        await store_refresh(refresh_token_repository, old)

        tokens = await login_service.reissue_tokens({"refresh": old})

        assert tokens.refresh_token != old
        assert not await refresh_token_repository.exists_by_refresh(old)
        stored = await refresh_token_repository.find_all()
        assert [t.refresh for t in stored] == [tokens.refresh_token]
        assert stored[0].login_id == GUEST_LOGIN_ID
        assert jwt_util.get_category(tokens.access_token) == "access"
        assert jwt_util.get_login_id(tokens.access_token) == GUEST_LOGIN_ID

    @pytest.mark.unit
    @pytest.mark.application
    async def test_reissued_token_is_single_use(self, seeded, login_service, refresh_token_repository, jwt_util):
        old = jwt_util.create_jwt(TokenCategory.REFRESH, GUEST_LOGIN_ID, "GUEST", ONE_HOUR_MS)
        await store_refresh(refresh_token_repository, old)
        await login_service.reissue_tokens({"refresh": old})

        with pytest.raises(TokenNotFoundError):
            await login_service.reissue_tokens({"refresh": old})

    @pytest.mark.unit
    @pytest.mark.application
    async def test_reissue_without_cookie(self, login_service):
        with pytest.raises(TokenNotFoundError) as exc_info:
            await login_service.reissue_tokens({})
        assert exc_info.value.error_code == ErrorCode.REFRESH_TOKEN_NOT_FOUND

    @pytest.mark.unit
    @pytest.mark.application
    @pytest.mark.edge_case
    async def test_reissue_with_no_cookies_at_all(self, login_service):
        with pytest.raises(TokenNotFoundError):
            await login_service.reissue_tokens(None)

    @pytest.mark.unit
    @pytest.mark.application
    async def test_reissue_expired(self, login_service, refresh_token_repository, jwt_util):
        expired = jwt_util.create_jwt(TokenCategory.REFRESH, GUEST_LOGIN_ID, "GUEST", -ONE_HOUR_MS)
        await store_refresh(refresh_token_repository, expired)

        with pytest.raises(TokenExpiredError) as exc_info:
            await login_service.reissue_tokens({"refresh": expired})
        assert exc_info.value.error_code == ErrorCode.REFRESH_TOKEN_EXPIRED

    @pytest.mark.unit
    @pytest.mark.application
    async def test_reissue_token_not_in_store(self, login_service, jwt_util):
        unknown = jwt_util.create_jwt(TokenCategory.REFRESH, GUEST_LOGIN_ID, "GUEST", ONE_HOUR_MS)
        with pytest.raises(TokenNotFoundError):
            await login_service.reissue_tokens({"refresh": unknown})

    @pytest.mark.unit
    @pytest.mark.application
    async def test_reissue_with_access_token(self, login_service, refresh_token_repository, jwt_util):
        access = jwt_util.create_jwt(TokenCategory.ACCESS, GUEST_LOGIN_ID, "GUEST", ONE_HOUR_MS)
        await store_refresh(refresh_token_repository, access)

        with pytest.raises(TokenNotFoundError):
            await login_service.reissue_tokens({"refresh": access})

    @pytest.mark.unit
    @pytest.mark.application
    @pytest.mark.edge_case
    async def test_reissue_malformed_token(self, login_service):
        with pytest.raises(TokenNotFoundError):
            await login_service.reissue_tokens({"refresh": "not-a-jwt"})
