"""FastAPI dependency: get_current_participant.

Usage in any protected router:
    from src.rp_gateway.auth.dependencies import get_current_participant

    @router.get("/protected")
    async def protected(participant_id: str = Depends(get_current_participant)):
        ...
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.rp_common.errors import InvalidTokenError
from src.rp_gateway.auth.jwt_handler import decode_token

_bearer = HTTPBearer(auto_error=False)

# Reusable 401 exception with WWW-Authenticate header (OAuth2 standard)
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_participant(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> str:
    """Extract and validate the JWT Bearer token, return the participant id.

    Raises HTTP 401 if the token is missing, invalid, or expired.
    """
    if credentials is None:
        raise _CREDENTIALS_EXCEPTION
    try:
        payload = decode_token(credentials.credentials)
    except InvalidTokenError:
        raise _CREDENTIALS_EXCEPTION from None

    participant_id = payload.get("sub")
    if not participant_id:
        raise _CREDENTIALS_EXCEPTION
    return participant_id
