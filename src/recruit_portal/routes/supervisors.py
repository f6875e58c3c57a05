"""Store supervisor routes — partners manage the supervisors of their stores."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from recruit_portal import database as db
from recruit_portal.auth import require_read, require_roles
from recruit_portal.models import AppUser, StoreSupervisor, UserType

router = APIRouter()

_managers = require_roles(UserType.ADMIN, UserType.PARTNER)


def _get_owned(supervisor_id: str, user: AppUser) -> dict:
    doc = db.get_doc("store_supervisors", supervisor_id)
    if not doc or (user.user_type == UserType.PARTNER and doc.get("partnerId") != user.uid):
        raise HTTPException(status_code=404, detail="Supervisor not found")
    return doc


@router.get("")
async def list_supervisors(user: AppUser = Depends(require_read("store_supervisors"))):
    if user.user_type == UserType.PARTNER:
        return db.find_docs("store_supervisors", partnerId=user.uid)
    return db.fetch_all("store_supervisors")


@router.post("")
async def add_supervisor(req: StoreSupervisor, user: AppUser = Depends(_managers)):
    doc = req.to_doc()
    doc.pop("id", None)
    if user.user_type == UserType.PARTNER:
        doc["partnerId"] = user.uid
    return db.insert_doc("store_supervisors", doc)


@router.put("/{supervisor_id}")
async def update_supervisor(supervisor_id: str, req: StoreSupervisor, user: AppUser = Depends(_managers)):
    _get_owned(supervisor_id, user)
    updates = req.model_dump(by_alias=True, exclude_unset=True, exclude={"id", "partner_id"})
    db.update_doc("store_supervisors", supervisor_id, updates)
    return db.get_doc("store_supervisors", supervisor_id)


@router.delete("/{supervisor_id}")
async def remove_supervisor(supervisor_id: str, user: AppUser = Depends(_managers)):
    _get_owned(supervisor_id, user)
    db.delete_doc("store_supervisors", supervisor_id)
    return {"deleted": True}
