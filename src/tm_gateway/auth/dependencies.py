"""FastAPI dependencies: get_current_user_id, verify_event_token.

Usage in any protected router:
    from src.tm_gateway.auth.dependencies import get_current_user_id

    @router.get("/protected")
    async def protected(user_id: str = Depends(get_current_user_id)):
        ...
"""

import hmac

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from config.settings import settings
from src.tm_common.errors import InvalidCredentialsError, InvalidEventTokenError
from src.tm_gateway.auth.jwt_handler import decode_access_token

# auto_error=False so a missing header gets the same 401 body as a bad token
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token", auto_error=False)

_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="unauthenticated",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_user_id(
    token: str | None = Depends(oauth2_scheme),
) -> str:
    """Return the authenticated caller's userId or raise HTTP 401."""
    if not token:
        raise _CREDENTIALS_EXCEPTION
    try:
        payload = decode_access_token(token)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None

    user_id = payload.get("sub")
    if not user_id:
        raise _CREDENTIALS_EXCEPTION
    return user_id


async def verify_event_token(
    x_event_token: str | None = Header(default=None),
) -> None:
    """Guard for trigger deliveries when EVENTS_SHARED_SECRET is configured."""
    expected = settings.EVENTS_SHARED_SECRET
    if not expected:
        return
    if x_event_token is None or not hmac.compare_digest(
        x_event_token.encode(), expected.encode()
    ):
        raise InvalidEventTokenError()
