# backend/models/users.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, CheckConstraint, func
from database import Base

# Represents a storefront account with credentials, verification and reset state
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    name = Column(String(50), nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(String, CheckConstraint("role IN ('admin', 'user')"), nullable=False, default="user")

    # Email verification (single-use token kept in plaintext until consumed)
    verification_token = Column(String, nullable=True)
    is_verified = Column(Boolean, nullable=False, default=False)
    verified = Column(DateTime(timezone=True), nullable=True)

    # Password reset (only the hash of the emailed token is stored)
    password_token = Column(String, nullable=True)
    password_token_expiration_date = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
