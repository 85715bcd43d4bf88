# backend/utils/session.py
"""Access/refresh token pair issued as http-only cookies.

The access token is short lived and verified without touching the database.
The refresh token embeds the opaque value stored in ``refresh_tokens`` so a
session can be revoked server side before the cookie itself expires.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Request, Response

from config import Settings, get_settings
from schemas.user import TokenUser
from utils.token_store import RefreshTokenStore, get_token_store
from utils.tokenJWT import InvalidTokenError, TokenCodec, get_token_codec

logger = logging.getLogger(__name__)

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"


@dataclass
class SessionTokens:
    access_token: str
    refresh_token: str


class SessionManager:
    def __init__(self, codec: TokenCodec, store: RefreshTokenStore, settings: Settings):
        self.codec = codec
        self.store = store
        self.access_ttl = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        self.refresh_ttl = timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
        self.secure = settings.secure_cookies

    def issue_session(self, response: Response, token_user: TokenUser, refresh_value: str) -> SessionTokens:
        """Sign both tokens for ``token_user`` and attach them as cookies."""
        claims = token_user.to_claims()
        tokens = SessionTokens(
            access_token=self.codec.sign({"userObj": claims}, self.access_ttl),
            refresh_token=self.codec.sign({"userObj": claims, "refreshToken": refresh_value}, self.refresh_ttl),
        )
        now = datetime.now(timezone.utc)
        self._set_cookie(response, ACCESS_COOKIE, tokens.access_token, now + self.access_ttl)
        self._set_cookie(response, REFRESH_COOKIE, tokens.refresh_token, now + self.refresh_ttl)
        return tokens

    def revoke_session(self, response: Response, user_id) -> None:
        """Drop the server-side record and expire both cookies (logout)."""
        self.store.delete_by_user(user_id)
        now = datetime.now(timezone.utc)
        self._set_cookie(response, ACCESS_COOKIE, "logout", now)
        self._set_cookie(response, REFRESH_COOKIE, "logout", now)
        logger.info("Session revoked for user %s", user_id)

    def read_access(self, request: Request) -> Optional[TokenUser]:
        payload = self._read(request, ACCESS_COOKIE)
        if payload is None:
            return None
        try:
            return TokenUser.model_validate(payload["userObj"])
        except (KeyError, TypeError, ValueError):
            return None

    def read_refresh(self, request: Request) -> Optional[tuple]:
        """Return ``(token_user, refresh_value)`` from a verified refresh cookie."""
        payload = self._read(request, REFRESH_COOKIE)
        if payload is None:
            return None
        try:
            token_user = TokenUser.model_validate(payload["userObj"])
            refresh_value = payload["refreshToken"]
        except (KeyError, TypeError, ValueError):
            return None
        if not refresh_value:
            return None
        return token_user, refresh_value

    def _read(self, request: Request, name: str) -> Optional[dict]:
        token = request.cookies.get(name)
        if not token:
            return None
        try:
            return self.codec.verify(token)
        except InvalidTokenError as e:
            logger.debug("Rejected %s cookie: %s", name, e)
            return None

    def _set_cookie(self, response: Response, name: str, value: str, expires: datetime) -> None:
        response.set_cookie(
            name, value,
            httponly=True,
            secure=self.secure,
            samesite="lax",
            expires=expires,
        )


def get_session_manager(
    codec: TokenCodec = Depends(get_token_codec),
    store: RefreshTokenStore = Depends(get_token_store),
    settings: Settings = Depends(get_settings),
) -> SessionManager:
    return SessionManager(codec, store, settings)
