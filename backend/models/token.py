# backend/models/token.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from database import Base

# Server-side record backing a refresh token cookie (one per user)
class RefreshToken(Base):
    __tablename__ = "refresh_tokens"

    id = Column(Integer, primary_key=True, index=True)
    refresh_token = Column(String, nullable=False)
    ip = Column(String(64), nullable=False)
    user_agent = Column(String, nullable=False)
    is_valid = Column(Boolean, nullable=False, default=True)

    # Unique: concurrent first logins cannot create two records for one user
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User")
