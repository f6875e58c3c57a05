"""Partner requirement routes — submission, review and approval."""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException

from recruit_portal import database as db
from recruit_portal.auth import STAFF, require_read, require_roles
from recruit_portal.config import merge_settings
from recruit_portal.models import (
    AppUser,
    RequirementRecord,
    RequirementUpdate,
    SubmissionStatus,
    UserType,
)
from recruit_portal.pipeline.visibility import owned_brands

log = logging.getLogger(__name__)

router = APIRouter()

_readers = require_read("partner_requirements")
_submitters = require_roles(UserType.ADMIN, UserType.HR, UserType.PARTNER)
_reviewers = require_roles(UserType.ADMIN, UserType.HR)


def _owned_by(user: AppUser, req: dict) -> bool:
    if req.get("partnerId") == user.uid:
        return True
    brands = owned_brands(merge_settings(db.get_settings()).vendors, user)
    return (req.get("brand") or req.get("client")) in brands


def _get_or_404(requirement_id: str) -> dict:
    req = db.get_doc("partner_requirements", requirement_id)
    if not req:
        raise HTTPException(status_code=404, detail="Requirement not found")
    return req


@router.get("")
async def list_requirements(user: AppUser = Depends(_readers)):
    docs = db.fetch_all("partner_requirements")
    if user.user_type == UserType.PARTNER:
        docs = [d for d in docs if _owned_by(user, d)]
    return docs


@router.post("")
async def submit_requirement(req: RequirementRecord, user: AppUser = Depends(_submitters)):
    doc = req.to_doc()
    doc.pop("id", None)
    if user.user_type == UserType.PARTNER:
        doc["partnerId"] = user.uid
        doc["submissionStatus"] = SubmissionStatus.PENDING.value
    doc["brand"] = doc.get("brand") or doc.get("client")
    doc["postedDate"] = doc.get("postedDate") or datetime.now().isoformat()
    return db.insert_doc("partner_requirements", doc)


@router.put("/{requirement_id}")
async def update_requirement(requirement_id: str, req: RequirementUpdate, user: AppUser = Depends(_submitters)):
    current = _get_or_404(requirement_id)
    updates = req.model_dump(by_alias=True, exclude_none=True, mode="json")
    if user.user_type == UserType.PARTNER:
        if not _owned_by(user, current):
            raise HTTPException(status_code=404, detail="Requirement not found")
        # Partners cannot approve their own submissions
        updates.pop("submissionStatus", None)
    db.update_doc("partner_requirements", requirement_id, updates)
    return db.get_doc("partner_requirements", requirement_id)


def _review(requirement_id: str, outcome: SubmissionStatus) -> dict:
    _get_or_404(requirement_id)
    db.update_doc("partner_requirements", requirement_id, {"submissionStatus": outcome.value})
    log.info("Requirement %s marked %s", requirement_id, outcome.value)
    return db.get_doc("partner_requirements", requirement_id)


@router.post("/{requirement_id}/approve")
async def approve_requirement(requirement_id: str, _user: AppUser = Depends(_reviewers)):
    return _review(requirement_id, SubmissionStatus.APPROVED)


@router.post("/{requirement_id}/reject")
async def reject_requirement(requirement_id: str, _user: AppUser = Depends(_reviewers)):
    return _review(requirement_id, SubmissionStatus.REJECTED)


@router.post("/{requirement_id}/assign")
async def assign_requirement(requirement_id: str, member_id: str, _user: AppUser = Depends(require_roles(*STAFF))):
    """Credit a requirement to a team member for the team breakdown."""
    _get_or_404(requirement_id)
    member = db.get_user_by_id(member_id)
    if not member:
        raise HTTPException(status_code=404, detail="Team member not found")
    db.update_doc("partner_requirements", requirement_id, {"assignedTo": member.get("fullName") or member.get("email")})
    return db.get_doc("partner_requirements", requirement_id)


@router.delete("/{requirement_id}")
async def delete_requirement(requirement_id: str, user: AppUser = Depends(_submitters)):
    current = _get_or_404(requirement_id)
    if user.user_type == UserType.PARTNER and not _owned_by(user, current):
        raise HTTPException(status_code=404, detail="Requirement not found")
    db.delete_doc("partner_requirements", requirement_id)
    return {"deleted": True}
