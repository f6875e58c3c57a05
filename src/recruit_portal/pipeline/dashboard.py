"""Dashboard composition — one ``DashboardStats`` per viewer per pass."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from recruit_portal.models import (
    AppUser,
    CandidateRecord,
    Complaint,
    ComplaintStats,
    DashboardStats,
    JobRecord,
    PartnerStats,
    PortalSettings,
    RequirementRecord,
    RequirementStats,
    SubmissionStatus,
    TEAM_USER_TYPES,
    TeamMemberRecord,
    UserType,
    VendorStats,
)
from recruit_portal.pipeline.breakdown import build_requirement_breakdowns
from recruit_portal.pipeline.classifier import classify_candidates
from recruit_portal.pipeline.hierarchy import build_team_performance
from recruit_portal.pipeline.normalizer import (
    NormalizedRequirement,
    coerce_openings,
    normalize_all,
)
from recruit_portal.pipeline.visibility import (
    filter_candidates,
    owned_brands,
    visible_team,
)

log = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

ACTIVE_COMPLAINT = ("Open", "In Progress", "Active")
CLOSED_COMPLAINT = ("Resolved", "Closed")

# Collections a dashboard subscribes to
SNAPSHOT_COLLECTIONS = ("users", "candidates", "complaints", "partner_requirements", "jobs")


def parse_docs(model: type[M], docs: list[dict[str, Any]]) -> list[M]:
    out: list[M] = []
    for doc in docs:
        try:
            out.append(model.model_validate(doc))
        except ValidationError as e:
            log.warning("Skipping malformed %s %s: %s", model.__name__, doc.get("id"), e)
    return out


@dataclass
class DataSnapshot:
    team_members: list[TeamMemberRecord] = field(default_factory=list)
    candidates: list[CandidateRecord] = field(default_factory=list)
    complaints: list[Complaint] = field(default_factory=list)
    requirements: list[RequirementRecord] = field(default_factory=list)
    jobs: list[JobRecord] = field(default_factory=list)

    @classmethod
    def from_docs(cls, docs: Mapping[str, list[dict[str, Any]]]) -> DataSnapshot:
        """Build a snapshot from raw store documents keyed by collection name."""
        team_types = {t.value for t in TEAM_USER_TYPES}
        users = [u for u in docs.get("users", []) if u.get("userType") in team_types]
        return cls(
            team_members=parse_docs(TeamMemberRecord, users),
            candidates=parse_docs(CandidateRecord, docs.get("candidates", [])),
            complaints=parse_docs(Complaint, docs.get("complaints", [])),
            requirements=parse_docs(RequirementRecord, docs.get("partner_requirements", [])),
            jobs=parse_docs(JobRecord, docs.get("jobs", [])),
        )


def complaint_stats(complaints: list[Complaint]) -> ComplaintStats:
    stats = ComplaintStats()
    for c in complaints:
        if c.status in ACTIVE_COMPLAINT:
            stats.active += 1
        elif c.status in CLOSED_COMPLAINT:
            stats.closed += 1
    return stats


def requirement_stats(items: list[NormalizedRequirement]) -> RequirementStats:
    stats = RequirementStats(total=len(items))
    for i in items:
        if i.submission_status == SubmissionStatus.PENDING.value:
            stats.pending += 1
        elif i.submission_status == SubmissionStatus.APPROVED.value:
            stats.approved += 1
    return stats


def partner_stats(
    requirements: list[RequirementRecord],
    candidates: list[CandidateRecord],
    settings: PortalSettings,
    user: AppUser,
) -> PartnerStats:
    """Requirement and candidate figures for the brands a partner owns."""
    brands = owned_brands(settings.vendors, user)
    if not brands:
        return PartnerStats()

    mine = [r for r in requirements if (r.brand or r.client) in brands]
    approved = [r for r in mine if r.submission_status == SubmissionStatus.APPROVED.value]
    pending = [r for r in mine if r.submission_status == SubmissionStatus.PENDING.value]
    submitted = [c for c in candidates if c.vendor and c.vendor in brands]

    total_openings = sum(coerce_openings(r.openings) for r in approved)
    joined = sum(1 for c in submitted if c.status == "Joined")
    return PartnerStats(
        total_openings=total_openings,
        candidates_submitted=len(submitted),
        interviews_scheduled=sum(1 for c in submitted if c.stage == "Interview"),
        offers_released=sum(
            1 for c in submitted if c.status and ("Offer" in c.status or c.stage == "Offer Sent")
        ),
        candidates_joined=joined,
        fill_rate=joined / total_openings * 100 if total_openings else 0.0,
        pending_requirements=len(pending),
        active_requirements=len(approved),
    )


def _compute(snapshot: DataSnapshot, viewer: AppUser, settings: PortalSettings, now: datetime | None) -> DashboardStats:
    # Hierarchy is built over every candidate; only the classifier sees the filtered set
    hierarchy = build_team_performance(snapshot.team_members, snapshot.candidates)
    visible = filter_candidates(snapshot.candidates, viewer, hierarchy, settings.vendors)
    candidate_stats = classify_candidates(visible, now)
    items = normalize_all(snapshot.requirements, snapshot.jobs, settings.vendors)

    stats = DashboardStats(
        pipeline=candidate_stats.pipeline,
        vendor=VendorStats(total=len(settings.vendors)),
        complaint=complaint_stats(snapshot.complaints),
        partner_requirement=requirement_stats(items),
        hr_stats=candidate_stats.hr_stats,
        process=candidate_stats.process,
        role=candidate_stats.role,
        team=visible_team(hierarchy, viewer),
        requirement_breakdown=build_requirement_breakdowns(items),
    )
    if viewer.user_type == UserType.PARTNER:
        stats.partner = partner_stats(snapshot.requirements, snapshot.candidates, settings, viewer)
    return stats


def compute_dashboard_stats(
    snapshot: DataSnapshot,
    viewer: AppUser,
    settings: PortalSettings | None = None,
    now: datetime | None = None,
) -> DashboardStats:
    """Derive every dashboard statistic for ``viewer``.

    Never raises: a fault anywhere in the pass yields empty default stats.
    """
    try:
        return _compute(snapshot, viewer, settings or PortalSettings(), now)
    except Exception:
        log.exception("Dashboard aggregation failed for %s", viewer.uid)
        return DashboardStats()
