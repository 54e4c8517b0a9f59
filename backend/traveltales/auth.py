"""
TravelTales Backend: Access Token Verification
===============================================

What:  FastAPI dependency that turns the caller's access token into a user id.
How:   Reads `Authorization: Bearer <jwt>`, falling back to the auth cookie,
       and verifies it with python-jose against JWT_SECRET / JWT_ALGORITHM.
       The user id is the `id` claim, or `sub` when `id` is absent.

Tokens are issued by the separate auth service; this module never creates them.
"""

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from traveltales.config import Settings
from traveltales.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)

# auto_error=False: a missing header falls through to the cookie check
bearer_scheme = HTTPBearer(auto_error=False)


def decode_user_id(token: str, settings: Settings) -> str:
    """
    Verify `token` and return the user id it carries.

    Raises:
        UnauthorizedError: bad signature, expired, or no usable id claim
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.info("Rejected access token: %s", str(e))
        raise UnauthorizedError(message="Invalid or expired token") from e

    user_id = payload.get("id") or payload.get("sub")
    if user_id in (None, ""):
        raise UnauthorizedError(message="Invalid or expired token")
    return str(user_id)


async def get_current_user_id(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    settings: Settings = request.app.state.settings

    token = credentials.credentials if credentials else request.cookies.get(settings.auth_cookie_name)
    if not token:
        raise UnauthorizedError()

    return decode_user_id(token, settings)
