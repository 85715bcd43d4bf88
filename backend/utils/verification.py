# backend/utils/verification.py
"""Single-use tokens for email verification and password reset."""
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.orm import Session

from models.users import User
from utils.errors import UnauthenticatedError
from utils.hashing import create_hash, set_password

logger = logging.getLogger(__name__)

VERIFICATION_TOKEN_BYTES = 40
PASSWORD_TOKEN_BYTES = 70


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def new_verification_token() -> str:
    return secrets.token_hex(VERIFICATION_TOKEN_BYTES)


def verify_email(db: Session, email: Optional[str], verification_token: Optional[str]) -> User:
    """Mark the account verified when the emailed token matches, consuming it."""
    user = db.query(User).filter(User.email == email).first() if email else None
    if user is None:
        raise UnauthenticatedError("Verification failed!")

    if not user.verification_token or not verification_token \
            or not secrets.compare_digest(user.verification_token, verification_token):
        raise UnauthenticatedError("Verification failed!")

    user.is_verified = True
    user.verified = datetime.now(timezone.utc)
    user.verification_token = ""
    db.commit()
    return user


def issue_password_token(db: Session, user: User, ttl: timedelta) -> str:
    """Store the hash of a fresh reset token on ``user`` and return the raw token."""
    password_token = secrets.token_hex(PASSWORD_TOKEN_BYTES)
    user.password_token = create_hash(password_token)
    user.password_token_expiration_date = datetime.now(timezone.utc) + ttl
    db.commit()
    return password_token


def reset_password(db: Session, email: str, token: str, password: str, now: Optional[datetime] = None) -> bool:
    """Apply a new password if ``token`` is the live reset token for ``email``.

    Returns whether the password changed. Unknown emails, wrong tokens and
    expired tokens are all a silent no-op so callers answer identically.
    """
    user = db.query(User).filter(User.email == email).first()
    if user is None or not user.password_token or user.password_token_expiration_date is None:
        return False

    now = now or datetime.now(timezone.utc)
    if not secrets.compare_digest(user.password_token, create_hash(token)):
        return False
    if _as_utc(user.password_token_expiration_date) <= now:
        logger.info("Expired password token presented for user %s", user.id)
        return False

    set_password(user, password)
    user.password_token = None
    user.password_token_expiration_date = None
    db.commit()
    return True
