"""
Request identity.

Authentication proper happens upstream: a bearer JWT carries the caller's
``sub`` (user id) and ``role``. These dependencies only decode it.
"""
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .error_handlers import UnauthorizedError, get_error_message
from .jwt import decode_access_token

_bearer = HTTPBearer(auto_error=False)


def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> dict | None:
    if credentials is None or not credentials.credentials:
        return None

    claims = decode_access_token(credentials.credentials)
    if not claims or not claims.get("sub"):
        raise UnauthorizedError(get_error_message("session_expired"))
    return claims


def get_current_user(user: dict | None = Depends(get_optional_user)) -> dict:
    if user is None:
        raise UnauthorizedError(get_error_message("unauthorized"))
    return user
