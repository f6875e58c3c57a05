"""Complaint (help desk ticket) routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from recruit_portal import database as db
from recruit_portal.auth import get_current_user, require_read, require_roles
from recruit_portal.models import AppUser, Complaint, ComplaintUpdate, UserType

router = APIRouter()


@router.get("")
async def list_complaints(_user: AppUser = Depends(require_read("complaints"))):
    return db.fetch_all("complaints")


@router.get("/mine")
async def my_complaints(user: AppUser = Depends(get_current_user)):
    return db.find_docs("complaints", userId=user.uid)


@router.post("")
async def submit_complaint(req: Complaint, user: AppUser = Depends(get_current_user)):
    doc = req.to_doc()
    doc.pop("id", None)
    doc["userId"] = user.uid
    doc["status"] = "Open"
    return db.insert_doc("complaints", doc)


@router.put("/{complaint_id}")
async def update_complaint(
    complaint_id: str,
    req: ComplaintUpdate,
    _user: AppUser = Depends(require_roles(UserType.ADMIN, UserType.HR)),
):
    if not db.update_doc("complaints", complaint_id, req.model_dump(by_alias=True, exclude_none=True)):
        raise HTTPException(status_code=404, detail="Complaint not found")
    return db.get_doc("complaints", complaint_id)
