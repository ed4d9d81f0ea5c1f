"""API Dependencies - Authentication"""
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError

from domain.enums import TokenCategory
from infrastructure.security import JWTUtil

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="login")

jwt_util = JWTUtil()


def get_jwt_util() -> JWTUtil:
    return jwt_util


async def get_current_login_id(
    token: str = Depends(oauth2_scheme),
    codec: JWTUtil = Depends(get_jwt_util)
) -> str:
    """Login id of the caller, taken from a valid, unexpired access token"""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        if codec.is_expired(token):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Access token expired",
                headers={"WWW-Authenticate": "Bearer"},
            )
        category = codec.get_category(token)
        login_id = codec.get_login_id(token)
    except JWTError:
        raise credentials_exception

    if category != TokenCategory.ACCESS.value or login_id is None:
        raise credentials_exception
    return login_id
