"""FastAPI dependencies."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from challenge_engine.core.errors import Unauthenticated
from challenge_engine.core.security import decode_access_token

security = HTTPBearer(auto_error=False)


def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> str:
    """Require an authenticated caller. Returns the opaque user id from ``sub``."""
    if not credentials:
        raise Unauthenticated("Not authenticated")
    payload = decode_access_token(credentials.credentials)
    if not payload or not payload.get("sub"):
        raise Unauthenticated("Invalid or expired token")
    return str(payload["sub"])


CurrentUserId = Annotated[str, Depends(get_current_user_id)]
