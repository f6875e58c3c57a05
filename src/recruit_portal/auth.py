"""Authentication helpers — JWT tokens, password hashing and role guards."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from recruit_portal import database as db
from recruit_portal.config import load_config
from recruit_portal.errors import PermissionDeniedError
from recruit_portal.models import AppUser, UserType

_cfg = load_config()

JWT_SECRET = _cfg.jwt_secret
JWT_ALGORITHM = "HS256"
JWT_EXPIRE_DAYS = _cfg.jwt_expire_days
ADMIN_EMAIL = _cfg.admin_email

_bearer_scheme = HTTPBearer()

STAFF = (UserType.ADMIN, UserType.HR, UserType.TEAMLEAD, UserType.TEAM)

# Who may read each collection in full. ``None`` means everyone.
READERS: dict[str, tuple[UserType, ...] | None] = {
    "jobs": None,
    "users": (*STAFF, UserType.STORE_SUPERVISOR),
    "candidates": (*STAFF, UserType.PARTNER, UserType.STORE_SUPERVISOR),
    "complaints": (UserType.ADMIN, UserType.HR),
    "partner_requirements": (*STAFF, UserType.PARTNER),
    "demo_requests": (UserType.ADMIN, UserType.HR),
    "store_supervisors": (UserType.ADMIN, UserType.HR, UserType.PARTNER),
    "settings": None,
}


# ── Password helpers ──────────────────────────────────────────────────────

def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(password: str, hashed: str) -> bool:
    if not hashed:
        return False
    return bcrypt.checkpw(password.encode(), hashed.encode())


# ── JWT helpers ───────────────────────────────────────────────────────────

def create_token(user_id: str, email: str | None) -> str:
    payload = {
        "sub": user_id,
        "email": email,
        "exp": datetime.now(timezone.utc) + timedelta(days=JWT_EXPIRE_DAYS),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_token(token: str) -> dict:
    return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])


# ── Users ─────────────────────────────────────────────────────────────────

def resolve_user_type(doc: dict) -> UserType:
    """Stored user type, except that the configured admin email is always ADMIN."""
    email = (doc.get("email") or "").strip().lower()
    if ADMIN_EMAIL and email == ADMIN_EMAIL.strip().lower():
        return UserType.ADMIN
    try:
        return UserType(doc.get("userType") or UserType.NONE.value)
    except ValueError:
        return UserType.NONE


def to_app_user(doc: dict) -> AppUser:
    return AppUser(
        uid=doc["id"],
        email=doc.get("email"),
        user_type=resolve_user_type(doc),
        full_name=doc.get("fullName") or "",
        profile_complete=bool(doc.get("profileComplete")),
    )


def can_read(user: AppUser, collection: str) -> None:
    """Raise ``PermissionDeniedError`` if ``user`` may not read ``collection``."""
    readers = READERS.get(collection, ())
    if readers is None or user.user_type in readers:
        return
    raise PermissionDeniedError(collection)


# ── FastAPI dependencies ──────────────────────────────────────────────────

def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(_bearer_scheme),
) -> AppUser:
    """Decode JWT from Authorization header and return the signed-in user."""
    try:
        payload = decode_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    doc = db.get_user_by_id(payload["sub"])
    if not doc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return to_app_user(doc)


def require_roles(*roles: UserType) -> Callable[..., AppUser]:
    """Dependency factory rejecting users outside ``roles`` with 403."""

    def _guard(current_user: AppUser = Depends(get_current_user)) -> AppUser:
        if current_user.user_type not in roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return current_user

    return _guard


def require_read(collection: str) -> Callable[..., AppUser]:
    def _guard(current_user: AppUser = Depends(get_current_user)) -> AppUser:
        can_read(current_user, collection)
        return current_user

    return _guard
