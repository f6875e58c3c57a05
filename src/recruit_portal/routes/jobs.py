"""Job routes — CRUD, the public job board and description drafting."""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException

from recruit_portal import database as db
from recruit_portal.agents.jd import generate_job_description
from recruit_portal.auth import STAFF, get_current_user, require_roles
from recruit_portal.config import load_config
from recruit_portal.models import (
    AppUser,
    JobDescriptionRequest,
    JobRecord,
    JobUpdate,
    RequirementRecord,
)
from recruit_portal.pipeline import public_job_feed
from recruit_portal.pipeline.dashboard import parse_docs

log = logging.getLogger(__name__)

router = APIRouter()

_posters = require_roles(*STAFF)


@router.get("/public")
async def list_public_jobs():
    """Direct postings plus approved requirements, newest first. No login needed."""
    jobs = parse_docs(JobRecord, db.fetch_all("jobs"))
    requirements = parse_docs(RequirementRecord, db.fetch_all("partner_requirements"))
    return [j.model_dump(by_alias=True) for j in public_job_feed(jobs, requirements)]


@router.get("")
async def list_jobs(_user: AppUser = Depends(get_current_user)):
    return db.fetch_all("jobs")


@router.get("/{job_id}")
async def get_job(job_id: str, _user: AppUser = Depends(get_current_user)):
    job = db.get_doc("jobs", job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return job


@router.post("")
async def create_job(req: JobRecord, user: AppUser = Depends(_posters)):
    doc = req.to_doc()
    doc.pop("id", None)
    doc["title"] = (doc.get("title") or "").strip() or "Untitled Position"
    doc["adminId"] = user.uid
    doc["postedDate"] = doc.get("postedDate") or datetime.now().isoformat()
    return db.insert_doc("jobs", doc)


@router.put("/{job_id}")
async def update_job(job_id: str, req: JobUpdate, _user: AppUser = Depends(_posters)):
    updates = req.model_dump(by_alias=True, exclude_none=True)
    if not db.update_doc("jobs", job_id, updates):
        raise HTTPException(status_code=404, detail="Job not found")
    return db.get_doc("jobs", job_id)


@router.delete("/{job_id}")
async def delete_job(job_id: str, _user: AppUser = Depends(_posters)):
    if not db.delete_doc("jobs", job_id):
        raise HTTPException(status_code=404, detail="Job not found")
    return {"deleted": True}


@router.post("/generate-description")
async def generate_description(req: JobDescriptionRequest, _user: AppUser = Depends(_posters)):
    """Draft a description from keywords. Always returns text, even on LLM failure."""
    keywords = req.keywords.strip()
    if not keywords:
        raise HTTPException(status_code=400, detail="Keywords are required")
    return {"description": generate_job_description(load_config(), keywords)}
