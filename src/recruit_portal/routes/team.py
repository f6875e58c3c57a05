"""Team routes — members, manager links and hierarchy performance."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from recruit_portal import database as db
from recruit_portal.auth import hash_password, require_read, require_roles
from recruit_portal.errors import AuthError
from recruit_portal.live import read_snapshot
from recruit_portal.models import (
    TEAM_USER_TYPES,
    AppUser,
    TeamMemberCreate,
    TeamMemberRecord,
    TeamMemberUpdate,
    UserType,
)
from recruit_portal.pipeline import build_team_performance, link_managers, visible_team

log = logging.getLogger(__name__)

router = APIRouter()

_managers = require_roles(UserType.ADMIN, UserType.HR)


def _team_docs() -> list[dict]:
    return [u for u in db.fetch_all("users") if u.get("userType") in {t.value for t in TEAM_USER_TYPES}]


def _public(doc: dict) -> dict:
    return {k: v for k, v in doc.items() if k != "passwordHash"}


def relink_team() -> dict[str, str]:
    """Resolve every member's manager name to ``managerId``; return quarantined links."""
    members = [
        TeamMemberRecord.model_validate(d)
        for d in _team_docs()
        if d.get("userType") not in (UserType.ADMIN.value, UserType.HR.value)
    ]
    links = link_managers(members)
    for m in members:
        parent = links.parent.get(m.id)
        if m.manager_id != parent:
            db.update_doc("users", m.id, {"managerId": parent})
    return links.quarantined


@router.get("/performance")
async def team_performance(user: AppUser = Depends(require_read("users"))):
    snapshot, _settings = read_snapshot(user)
    rows = build_team_performance(snapshot.team_members, snapshot.candidates)
    return [r.model_dump(by_alias=True) for r in visible_team(rows, user)]


@router.get("/members")
async def list_members(_user: AppUser = Depends(_managers)):
    return [_public(d) for d in _team_docs()]


@router.post("/members")
async def add_member(req: TeamMemberCreate, _user: AppUser = Depends(_managers)):
    if req.user_type not in TEAM_USER_TYPES:
        raise HTTPException(status_code=400, detail="Not a team account type")
    if db.get_user_by_email(req.email):
        raise AuthError("email_in_use")

    doc = db.insert_doc("users", {
        "email": req.email.strip().lower(),
        "fullName": req.full_name,
        "phone": req.phone,
        "userType": req.user_type.value,
        "reportingManager": req.reporting_manager,
        "role": req.role,
        "passwordHash": hash_password(req.password),
        "profileComplete": True,
    })
    quarantined = relink_team()
    result = _public(db.get_user_by_id(doc["id"]) or doc)
    if doc["id"] in quarantined:
        result["managerWarning"] = quarantined[doc["id"]]
    return result


@router.put("/members/{member_id}")
async def update_member(member_id: str, req: TeamMemberUpdate, _user: AppUser = Depends(_managers)):
    updates = req.model_dump(by_alias=True, exclude_none=True, mode="json")
    if "reportingManager" in updates:
        # Force re-resolution from the new name
        updates["managerId"] = None
    if not db.update_doc("users", member_id, updates):
        raise HTTPException(status_code=404, detail="Team member not found")
    quarantined = relink_team()
    result = _public(db.get_user_by_id(member_id) or {})
    if member_id in quarantined:
        result["managerWarning"] = quarantined[member_id]
    return result


@router.delete("/members/{member_id}")
async def delete_member(member_id: str, _user: AppUser = Depends(require_roles(UserType.ADMIN))):
    if not db.delete_doc("users", member_id):
        raise HTTPException(status_code=404, detail="Team member not found")
    relink_team()
    return {"deleted": True}
