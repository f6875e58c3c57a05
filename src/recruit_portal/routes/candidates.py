"""Candidate routes — role-filtered listing, lineup entry, status updates."""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException

from recruit_portal import database as db
from recruit_portal.auth import STAFF, get_current_user, require_read, require_roles
from recruit_portal.live import read_snapshot
from recruit_portal.models import (
    AppUser,
    CandidateRecord,
    CandidateUpdate,
    JobRecord,
    UserType,
)
from recruit_portal.pipeline import build_team_performance, filter_candidates

log = logging.getLogger(__name__)

router = APIRouter()

_readers = require_read("candidates")
_editors = require_roles(*STAFF, UserType.PARTNER, UserType.STORE_SUPERVISOR)


def visible_candidates(user: AppUser) -> list[CandidateRecord]:
    snapshot, settings = read_snapshot(user)
    hierarchy = build_team_performance(snapshot.team_members, snapshot.candidates)
    return filter_candidates(snapshot.candidates, user, hierarchy, settings.vendors)


def _visible_or_404(user: AppUser, candidate_id: str) -> CandidateRecord:
    for c in visible_candidates(user):
        if c.id == candidate_id:
            return c
    raise HTTPException(status_code=404, detail="Candidate not found")


@router.get("")
async def list_candidates(user: AppUser = Depends(_readers)):
    return [c.to_doc() for c in visible_candidates(user)]


@router.get("/{candidate_id}")
async def get_candidate(candidate_id: str, user: AppUser = Depends(_readers)):
    return _visible_or_404(user, candidate_id).to_doc()


@router.post("")
async def add_candidate(req: CandidateRecord, user: AppUser = Depends(_editors)):
    """Add a lineup entry. Recruiters are credited by name when none is given."""
    doc = req.to_doc()
    doc.pop("id", None)
    doc["status"] = doc.get("status") or "Active"
    doc["stage"] = doc.get("stage") or "Sourced"
    doc["appliedDate"] = doc.get("appliedDate") or datetime.now().isoformat()
    if user.user_type in (UserType.TEAM, UserType.TEAMLEAD) and not doc.get("recruiter"):
        doc["recruiter"] = user.full_name
    return db.insert_doc("candidates", doc)


@router.post("/apply/{job_id}")
async def apply_to_job(job_id: str, user: AppUser = Depends(get_current_user)):
    if user.user_type != UserType.CANDIDATE:
        raise HTTPException(status_code=403, detail="Only candidates can apply")
    raw = db.get_doc("jobs", job_id)
    if not raw:
        raise HTTPException(status_code=404, detail="Job not found")
    job = JobRecord.model_validate(raw)
    candidate = CandidateRecord(
        name=user.full_name,
        email=user.email,
        status="Active",
        stage="Applied",
        role=job.title,
        vendor=job.company,
        location=job.job_city,
        store_location=job.store_name or job.locality,
        applied_date=datetime.now().isoformat(),
    )
    doc = candidate.to_doc()
    doc.pop("id")
    doc["userId"] = user.uid
    doc["jobId"] = job.id
    log.info("Candidate %s applied to job %s", user.uid, job.id)
    return db.insert_doc("candidates", doc)


@router.put("/{candidate_id}")
async def update_candidate(candidate_id: str, req: CandidateUpdate, user: AppUser = Depends(_editors)):
    _visible_or_404(user, candidate_id)
    db.update_doc("candidates", candidate_id, req.model_dump(by_alias=True, exclude_none=True))
    return db.get_doc("candidates", candidate_id)


@router.delete("/{candidate_id}")
async def delete_candidate(candidate_id: str, _user: AppUser = Depends(require_roles(UserType.ADMIN))):
    if not db.delete_doc("candidates", candidate_id):
        raise HTTPException(status_code=404, detail="Candidate not found")
    return {"deleted": True}
