"""Auth routes — register, login, phone login, me."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from recruit_portal import database as db
from recruit_portal.auth import (
    create_token,
    get_current_user,
    hash_password,
    resolve_user_type,
    to_app_user,
    verify_password,
)
from recruit_portal.errors import AuthError
from recruit_portal.models import (
    TEAM_USER_TYPES,
    AppUser,
    PhoneLogin,
    UserLogin,
    UserRegister,
    UserType,
)

log = logging.getLogger(__name__)

router = APIRouter()

# Staff and supervisor accounts are created by an admin, not self-registered
SELF_REGISTER = (UserType.CANDIDATE, UserType.PARTNER)


def _check_type(doc: dict, requested: UserType | None) -> None:
    """The login panel a user signs in through must match the account."""
    if requested is None:
        return
    actual = resolve_user_type(doc)
    if requested in TEAM_USER_TYPES and actual in TEAM_USER_TYPES:
        return
    if actual != requested:
        raise AuthError("account_type_mismatch")


def _session(doc: dict) -> dict:
    user = to_app_user(doc)
    return {"token": create_token(user.uid, user.email), "user": user.model_dump(by_alias=True)}


@router.post("/register")
async def register(req: UserRegister):
    if req.user_type not in SELF_REGISTER:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only candidate and partner accounts can self-register",
        )
    if db.get_user_by_email(req.email):
        raise AuthError("email_in_use")

    doc = db.insert_doc("users", {
        "email": req.email.strip().lower(),
        "fullName": req.full_name,
        "phone": req.phone,
        "userType": req.user_type.value,
        "passwordHash": hash_password(req.password),
        "profileComplete": False,
    })
    log.info("Registered %s account %s", req.user_type.value, doc["id"])
    return _session(doc)


@router.post("/login")
async def login(req: UserLogin):
    doc = db.get_user_by_email(req.email)
    if not doc or not verify_password(req.password, doc.get("passwordHash", "")):
        raise AuthError("invalid_credentials")
    _check_type(doc, req.user_type)
    return _session(doc)


@router.post("/phone-login")
async def phone_login(req: PhoneLogin):
    doc = db.get_user_by_phone(req.phone)
    if not doc:
        raise AuthError("no_account_for_phone")
    if not verify_password(req.password, doc.get("passwordHash", "")):
        raise AuthError("invalid_credentials")
    _check_type(doc, req.user_type)
    return _session(doc)


@router.get("/me")
async def me(current_user: AppUser = Depends(get_current_user)):
    return current_user.model_dump(by_alias=True)
