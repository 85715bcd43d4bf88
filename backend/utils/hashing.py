# backend/utils/hashing.py
import hashlib

import bcrypt

BCRYPT_ROUNDS = 10


def get_password_hash(password: str) -> str:
    """Hash a plaintext password with a fresh bcrypt salt."""
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Compare a candidate password with a stored bcrypt hash; never raises."""
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def set_password(user, password: str) -> None:
    # The only place a user's password hash is (re)computed
    user.password_hash = get_password_hash(password)


def create_hash(value: str) -> str:
    """One-way digest for single-use tokens stored server side."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()
