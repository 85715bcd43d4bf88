# backend/routes/users.py
from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from schemas import user as schemas
from schemas.user import TokenUser, create_token_user
from utils.audit import client_ip, write_log
from utils.authentication import authenticate_user, authorize_roles
from utils.errors import BadRequestError, NotFoundError, UnauthenticatedError
from utils.hashing import set_password, verify_password
from utils.permissions import check_permissions
from utils.session import SessionManager, get_session_manager

router = APIRouter(prefix="/users", tags=["Users"])


def _get_current_account(db: Session, current_user: TokenUser) -> User:
    user = db.query(User).filter(User.id == int(current_user.user_id)).first()
    if not user:
        raise UnauthenticatedError("Authentication invalid")
    return user


# List customer accounts (Admin only)
@router.get("", response_model=schemas.UserList)
def get_all_users(
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(authorize_roles("admin")),
):
    users = db.query(User).filter(User.role == "user").order_by(User.id).all()
    return {"users": users, "count": len(users)}


# Identity carried by the session cookies
@router.get("/showMe", response_model=schemas.TokenUserResponse)
def show_current_user(current_user: TokenUser = Depends(authenticate_user)):
    return {"user": current_user}


# Update own name/email and re-issue cookies with the new identity
@router.patch("/updateUser", response_model=schemas.TokenUserResponse)
def update_user(
    payload: schemas.UserUpdate,
    response: Response,
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(authenticate_user),
    sessions: SessionManager = Depends(get_session_manager),
):
    if not payload.name or not payload.email:
        raise BadRequestError("Please provide the required values!")

    user = _get_current_account(db, current_user)
    user.name = payload.name.strip()
    user.email = payload.email.strip().lower()
    db.commit()
    db.refresh(user)

    token_user = create_token_user(user)
    record = sessions.store.find_by_user(user.id)
    if record is not None and record.is_valid:
        sessions.issue_session(response, token_user, record.refresh_token)

    return {"user": token_user}


# Change own password after confirming the current one
@router.patch("/updateUserPassword", response_model=schemas.MessageResponse)
def update_user_password(
    payload: schemas.PasswordChange,
    request: Request,
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(authenticate_user),
):
    if not payload.old_password or not payload.new_password:
        raise BadRequestError("Please provide both old_password and new_password!")

    user = _get_current_account(db, current_user)
    if not verify_password(payload.old_password, user.password_hash):
        raise UnauthenticatedError("Invalid Credentials!")

    set_password(user, payload.new_password)
    db.commit()

    write_log(db, user_id=user.id, action="PASSWORD_CHANGE", resource="users",
              status="SUCCESS", ip=client_ip(request))
    return {"msg": "Password updated!"}


# Single account; owners see themselves, admins see anyone
@router.get("/{user_id}", response_model=schemas.UserResponse)
def get_single_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(authenticate_user),
):
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User not found!")

    check_permissions(current_user, user.id)
    return user
