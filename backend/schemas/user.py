from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import List, Optional
from datetime import datetime

ROLES = ("admin", "user")

# Minimal identity embedded in tokens and attached to each authenticated request
class TokenUser(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userID")
    name: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def to_claims(self) -> dict:
        return self.model_dump(by_alias=True)


def create_token_user(user) -> TokenUser:
    return TokenUser(user_id=str(user.id), name=user.name, role=user.role)


# Schema for registration requests
class UserCreate(BaseModel):
    name: str = Field(min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6)

# Login credentials; presence is checked in the route so a missing field is a 400
class UserLogin(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None

class ForgotPasswordRequest(BaseModel):
    email: Optional[str] = None

class ResetPasswordRequest(BaseModel):
    token: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None

# Self-service profile update
class UserUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=3, max_length=50)
    email: Optional[EmailStr] = None

class PasswordChange(BaseModel):
    old_password: Optional[str] = None
    new_password: Optional[str] = Field(default=None, min_length=6)

# Output schema for user profile details (never includes hashes or tokens)
class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: str
    is_verified: bool
    verified: Optional[datetime] = None

class UserList(BaseModel):
    users: List[UserResponse]
    count: int

# Response wrapper used by login, showMe and updateUser
class TokenUserResponse(BaseModel):
    user: TokenUser

class MessageResponse(BaseModel):
    msg: str

# Test-only responses exposing raw tokens
class RegisterTokenResponse(BaseModel):
    user: TokenUser
    verification_token: str

class ForgotPasswordTokenResponse(BaseModel):
    msg: str
    password_token: Optional[str] = None
