# utils/tokenJWT.py
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from jose import jwt, JWTError

from config import Settings, get_settings


class InvalidTokenError(Exception):
    """Token is malformed, carries a bad signature or has expired."""


class TokenCodec:
    """Signs and verifies JWTs with the server-wide secret from settings."""

    def __init__(self, settings: Settings):
        self._secret = settings.SECRET_KEY
        self._algorithm = settings.ALGORITHM

    # Sign a payload; without ttl the token carries no exp claim
    def sign(self, payload: dict, ttl: Optional[timedelta] = None) -> str:
        to_encode = payload.copy()
        if ttl is not None:
            to_encode.update({"exp": datetime.now(timezone.utc) + ttl})
        return jwt.encode(to_encode, self._secret, algorithm=self._algorithm)

    # Decode a token, rejecting bad signatures, garbage and expired tokens
    def verify(self, token: str) -> dict:
        if not token:
            raise InvalidTokenError("Token missing")
        try:
            return jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError as e:
            raise InvalidTokenError(str(e)) from e


def get_token_codec(settings: Settings = Depends(get_settings)) -> TokenCodec:
    return TokenCodec(settings)
