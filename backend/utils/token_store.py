# backend/utils/token_store.py
import logging
from typing import Optional

from fastapi import Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import get_db
from models.token import RefreshToken

logger = logging.getLogger(__name__)


class RefreshTokenStore:
    """Persistence for the per-user refresh token record."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_user(self, user_id) -> Optional[RefreshToken]:
        return self.db.query(RefreshToken).filter(RefreshToken.user_id == int(user_id)).first()

    # Lookup used when a refresh cookie is presented: both the owner and the value must match
    def find(self, user_id, refresh_token: str) -> Optional[RefreshToken]:
        return (
            self.db.query(RefreshToken)
            .filter(RefreshToken.user_id == int(user_id), RefreshToken.refresh_token == refresh_token)
            .first()
        )

    def create(self, user_id, refresh_token: str, ip: str, user_agent: str) -> RefreshToken:
        record = RefreshToken(
            user_id=int(user_id), refresh_token=refresh_token,
            ip=ip or "unknown", user_agent=user_agent or "unknown",
        )
        self.db.add(record)
        try:
            self.db.commit()
        except IntegrityError:
            # A concurrent login for the same user inserted first; use its record
            self.db.rollback()
            existing = self.find_by_user(user_id)
            if existing is None:
                raise
            logger.info("Refresh token for user %s created concurrently, reusing it", user_id)
            return existing
        self.db.refresh(record)
        return record

    def delete_by_user(self, user_id) -> None:
        self.db.query(RefreshToken).filter(RefreshToken.user_id == int(user_id)).delete()
        self.db.commit()

    # Administrative revocation; the record stays but can no longer refresh sessions
    def invalidate(self, user_id) -> Optional[RefreshToken]:
        record = self.find_by_user(user_id)
        if record is None:
            return None
        record.is_valid = False
        self.db.commit()
        self.db.refresh(record)
        return record


def get_token_store(db: Session = Depends(get_db)) -> RefreshTokenStore:
    return RefreshTokenStore(db)
