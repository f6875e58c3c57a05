"""Demo request routes — public submission, admin follow-up."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from recruit_portal import database as db
from recruit_portal.auth import require_read, require_roles
from recruit_portal.models import AppUser, DemoRequest, UserType

log = logging.getLogger(__name__)

router = APIRouter()


class DemoStatus(BaseModel):
    status: str


@router.post("")
async def request_demo(req: DemoRequest):
    doc = req.to_doc()
    doc.pop("id", None)
    doc["status"] = "Pending"
    saved = db.insert_doc("demo_requests", doc)
    log.info("Demo requested by %s", req.company_name or req.email)
    return saved


@router.get("")
async def list_demo_requests(_user: AppUser = Depends(require_read("demo_requests"))):
    return db.fetch_all("demo_requests")


@router.put("/{request_id}")
async def update_demo_request(
    request_id: str,
    req: DemoStatus,
    _user: AppUser = Depends(require_roles(UserType.ADMIN, UserType.HR)),
):
    if not db.update_doc("demo_requests", request_id, {"status": req.status}):
        raise HTTPException(status_code=404, detail="Demo request not found")
    return db.get_doc("demo_requests", request_id)
