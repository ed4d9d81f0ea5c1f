from datetime import datetime, timedelta, timezone
from uuid import uuid4
from jose import jwt
from passlib.context import CryptContext
import hashlib
import secrets
import string

from domain.enums import TokenCategory
from infrastructure.config import settings

TEMP_PASSWORD_LENGTH = 10
TEMP_PASSWORD_CHARS = string.ascii_uppercase + string.ascii_lowercase + string.digits

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    # bcrypt 4.x compatibility: explicitly handle password length
    bcrypt__ident="2b"
)

def _prepare_password(password: str) -> str:
    """
    Prepare password for bcrypt to handle strings > 72 bytes.
    bcrypt has a 72-byte password limit. If password is longer,
    we pre-hash it with SHA256 to get a safe length string.
    """
    password_bytes = password.encode('utf-8')
    if len(password_bytes) > 72:
        return hashlib.sha256(password_bytes).hexdigest()
    return password

def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash"""
    return pwd_context.verify(_prepare_password(plain_password), hashed_password)

def get_password_hash(password: str) -> str:
    """Generate password hash"""
    return pwd_context.hash(_prepare_password(password))

def generate_temp_password(length: int = TEMP_PASSWORD_LENGTH) -> str:
    """Cryptographically random alphanumeric password"""
    return ''.join(secrets.choice(TEMP_PASSWORD_CHARS) for _ in range(length))


class JWTUtil:
    """Issues and reads the platform's access/refresh JWTs

    Claims: ``category`` (access|refresh), ``sub`` (login id), ``role``,
    ``iat``, ``exp`` and a random ``jti`` so two tokens issued in the same
    second never collide.
    """

    def __init__(self, secret_key: str = settings.JWT_SECRET, algorithm: str = settings.JWT_ALGORITHM):
        self.secret_key = secret_key
        self.algorithm = algorithm

    def create_jwt(self, category: TokenCategory, login_id: str, role: str, expires_ms: int) -> str:
        now = datetime.now(timezone.utc)
        to_encode = {
            "category": TokenCategory(category).value,
            "sub": login_id,
            "role": role,
            "iat": now,
            "exp": now + timedelta(milliseconds=expires_ms),
            "jti": uuid4().hex,
        }
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def is_expired(self, token: str) -> bool:
        """Raises JWTError if the token is malformed or its signature is wrong"""
        exp = self._claims(token).get("exp")
        if exp is None:
            return True
        return datetime.fromtimestamp(exp, tz=timezone.utc) <= datetime.now(timezone.utc)

    def get_login_id(self, token: str) -> str:
        return self._claims(token).get("sub")

    def get_category(self, token: str) -> str:
        return self._claims(token).get("category")

    def get_role(self, token: str) -> str:
        return self._claims(token).get("role")

    def _claims(self, token: str) -> dict:
        # Expiry is reported by is_expired(), not by decoding
        return jwt.decode(
            token,
            self.secret_key,
            algorithms=[self.algorithm],
            options={"verify_exp": False}
        )
