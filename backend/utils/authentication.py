# backend/utils/authentication.py
import logging
from typing import Optional, Tuple

from fastapi import Depends, Request, Response

from models.token import RefreshToken
from schemas.user import TokenUser
from utils.errors import UnauthenticatedError, UnauthorizedError
from utils.session import SessionManager, get_session_manager

logger = logging.getLogger(__name__)


def _resolve_session(request: Request, sessions: SessionManager) -> Tuple[TokenUser, Optional[RefreshToken]]:
    """Identity from the cookies, plus the refresh record when the refresh cookie was used."""
    # 1. Access token: no database round trip
    token_user = sessions.read_access(request)
    if token_user is not None:
        return token_user, None

    # 2. Refresh token: must match a live server-side record
    refreshed = sessions.read_refresh(request)
    if refreshed is None:
        raise UnauthenticatedError("Authentication invalid")

    token_user, refresh_value = refreshed
    record = sessions.store.find(token_user.user_id, refresh_value)
    if record is None or not record.is_valid:
        logger.info("Refresh token rejected for user %s", token_user.user_id)
        raise UnauthenticatedError("Authentication invalid")
    return token_user, record


# Resolve the caller from the session cookies
def authenticate_user(
    request: Request,
    response: Response,
    sessions: SessionManager = Depends(get_session_manager),
) -> TokenUser:
    token_user, record = _resolve_session(request, sessions)
    if record is not None:
        # Sliding session: a fresh access token rides back on this response
        sessions.issue_session(response, token_user, record.refresh_token)
    return token_user


# Same checks as authenticate_user but never re-issues cookies (logout)
def identify_user(
    request: Request,
    sessions: SessionManager = Depends(get_session_manager),
) -> TokenUser:
    token_user, _ = _resolve_session(request, sessions)
    return token_user


# Dependency factory for role-based access control
def authorize_roles(*allowed_roles):
    def _checker(current_user: TokenUser = Depends(authenticate_user)) -> TokenUser:
        if current_user.role not in allowed_roles:
            raise UnauthorizedError("Unauthorized to access this route")
        return current_user
    return _checker
