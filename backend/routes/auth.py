# backend/routes/auth.py
import logging
import secrets
from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session

from config import Settings, get_settings
from database import get_db
from models.users import User
from schemas import user as schemas
from schemas.user import TokenUser, create_token_user
from utils.audit import client_ip, write_log
from utils.authentication import identify_user
from utils.errors import BadRequestError, UnauthenticatedError, UnauthorizedError
from utils.hashing import set_password, verify_password
from utils.mailer import EmailService, get_email_service
from utils.session import SessionManager, get_session_manager
from utils import verification

router = APIRouter(prefix="/auth", tags=["Auth"])
# Variants that hand raw tokens back to the caller; mounted only when ENABLE_TEST_ROUTES is set
test_router = APIRouter(prefix="/auth", tags=["Auth (test only)"])
logger = logging.getLogger(__name__)

REFRESH_TOKEN_BYTES = 40
MIN_PASSWORD_LENGTH = 6
FORGOT_PASSWORD_MSG = "Please check your email to reset your password!"


def _normalize_email(email: Optional[str]) -> Optional[str]:
    if email is None:
        return None
    return email.strip().lower() or None


# Create an unverified account; the very first account becomes admin
def _create_account(db: Session, payload: schemas.UserCreate) -> User:
    is_first_account = db.query(User).count() == 0
    user = User(
        email=_normalize_email(payload.email),
        name=payload.name.strip(),
        role="admin" if is_first_account else "user",
        verification_token=verification.new_verification_token(),
        is_verified=False,
    )
    set_password(user, payload.password)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def _issue_password_token(db: Session, user: User, settings: Settings) -> str:
    ttl = timedelta(minutes=settings.PASSWORD_TOKEN_EXPIRE_MINUTES)
    return verification.issue_password_token(db, user, ttl)


# Register a new account and email its verification link
@router.post("/register", response_model=schemas.MessageResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: schemas.UserCreate,
    request: Request,
    db: Session = Depends(get_db),
    mailer: EmailService = Depends(get_email_service),
):
    user = _create_account(db, payload)

    mailer.send_verification_email(user.name, user.email, user.verification_token)

    write_log(db, user_id=user.id, action="REGISTER", resource="auth", status="SUCCESS",
              ip=client_ip(request), meta={"role": user.role})

    return {"msg": "Success! Please check your email to verify your account"}


# Authenticate with email/password and start (or resume) a cookie session
@router.post("/login", response_model=schemas.TokenUserResponse)
def login(
    payload: schemas.UserLogin,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    sessions: SessionManager = Depends(get_session_manager),
):
    email = _normalize_email(payload.email)
    if not email or not payload.password:
        raise BadRequestError("Please provide email and password!")

    ip = client_ip(request)
    user = db.query(User).filter(User.email == email).first()

    # Validate credentials and log failure on error
    if not user or not verify_password(payload.password, user.password_hash):
        write_log(db, user_id=(user.id if user else None), action="LOGIN", resource="auth",
                  status="FAIL", ip=ip, meta={"reason": "credentials"})
        raise UnauthenticatedError("Please provide a correct email and password!")

    if not user.is_verified:
        write_log(db, user_id=user.id, action="LOGIN", resource="auth",
                  status="FAIL", ip=ip, meta={"reason": "unverified"})
        raise UnauthenticatedError("Account is not verified, please verify your account!")

    token_user = create_token_user(user)

    # Returning user: keep the session record unless it has been revoked
    existing = sessions.store.find_by_user(user.id)
    if existing is not None:
        if not existing.is_valid:
            write_log(db, user_id=user.id, action="LOGIN", resource="auth",
                      status="FAIL", ip=ip, meta={"reason": "revoked"})
            raise UnauthenticatedError("Invalid Credentials!")
        refresh_value = existing.refresh_token
    else:
        record = sessions.store.create(
            user.id, secrets.token_hex(REFRESH_TOKEN_BYTES), ip, request.headers.get("user-agent"),
        )
        refresh_value = record.refresh_token

    sessions.issue_session(response, token_user, refresh_value)

    write_log(db, user_id=user.id, action="LOGIN", resource="auth", status="SUCCESS", ip=ip)

    return {"user": token_user}


# End the session: drop the refresh record and expire both cookies
@router.delete("/logout", response_model=schemas.MessageResponse)
def logout(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(identify_user),
    sessions: SessionManager = Depends(get_session_manager),
):
    sessions.revoke_session(response, current_user.user_id)
    write_log(db, user_id=int(current_user.user_id), action="LOGOUT", resource="auth",
              status="SUCCESS", ip=client_ip(request))
    return {"msg": "User logged out!"}


# Confirm ownership of the email address with the emailed token
@router.get("/verify-email", response_model=schemas.MessageResponse)
def verify_email(
    request: Request,
    verification_token: Optional[str] = Query(None, alias="verificationToken"),
    email: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    user = verification.verify_email(db, _normalize_email(email), verification_token)
    write_log(db, user_id=user.id, action="VERIFY_EMAIL", resource="auth",
              status="SUCCESS", ip=client_ip(request))
    return {"msg": "Email verified!"}


# Start a password reset; the answer never reveals whether the email exists
@router.post("/forgot-password", response_model=schemas.MessageResponse)
def forgot_password(
    payload: schemas.ForgotPasswordRequest,
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    mailer: EmailService = Depends(get_email_service),
):
    email = _normalize_email(payload.email)
    if not email:
        raise BadRequestError("Please provide a valid email!")

    user = db.query(User).filter(User.email == email).first()
    if user:
        password_token = _issue_password_token(db, user, settings)
        mailer.send_reset_password_email(user.name, user.email, password_token)
        write_log(db, user_id=user.id, action="FORGOT_PASSWORD", resource="auth",
                  status="SUCCESS", ip=client_ip(request))

    return {"msg": FORGOT_PASSWORD_MSG}


# Set a new password with the emailed reset token
@router.post("/reset-password", response_model=schemas.MessageResponse)
def reset_password(
    payload: schemas.ResetPasswordRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    # Missing token is a 403, missing email/password a 400
    if not payload.token:
        raise UnauthorizedError("Unauthenticated!")
    email = _normalize_email(payload.email)
    if not email or not payload.password:
        raise BadRequestError("Please provide all values!")
    if len(payload.password) < MIN_PASSWORD_LENGTH:
        raise BadRequestError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

    changed = verification.reset_password(db, email, payload.token, payload.password)
    if changed:
        user = db.query(User).filter(User.email == email).first()
        write_log(db, user_id=user.id, action="RESET_PASSWORD", resource="auth",
                  status="SUCCESS", ip=client_ip(request))
    else:
        logger.info("Password reset ignored for %s", email.split("@")[-1])

    return {"msg": "Password successfully reset!"}


# ==========================================
#  TEST-ONLY VARIANTS
# ==========================================
@test_router.post("/test-register", response_model=schemas.RegisterTokenResponse,
                  status_code=status.HTTP_201_CREATED)
def test_register(payload: schemas.UserCreate, db: Session = Depends(get_db)):
    user = _create_account(db, payload)
    return {"user": create_token_user(user), "verification_token": user.verification_token}


@test_router.post("/test-forgot-password", response_model=schemas.ForgotPasswordTokenResponse)
def test_forgot_password(
    payload: schemas.ForgotPasswordRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    email = _normalize_email(payload.email)
    if not email:
        raise BadRequestError("Please provide a valid email!")

    password_token = None
    user = db.query(User).filter(User.email == email).first()
    if user:
        password_token = _issue_password_token(db, user, settings)

    return {"msg": FORGOT_PASSWORD_MSG, "password_token": password_token}
