"""Entity normalizer — canonical shapes for requirements, jobs and manager links.

All defaulting of loosely-typed store documents happens here so the rest of
the pipeline can rely on plain, fully-populated values.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from recruit_portal.models import (
    JobRecord,
    PublicJob,
    RequirementRecord,
    SubmissionStatus,
    TeamMemberRecord,
    Vendor,
)

log = logging.getLogger(__name__)

NO_PARTNER = "N/A"
ROOT_MANAGER = "Admin"


@dataclass(frozen=True)
class NormalizedRequirement:
    id: str
    title: str
    client: str
    brand: str
    store_name: str
    location: str
    openings: int
    submission_status: str
    partner_name: str
    posted_date: str | None = None
    assigned_to: str | None = None
    source: str = "requirement"


def coerce_openings(value: Any) -> int:
    """Openings as an int; anything non-numeric counts as zero."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        n = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(n) or math.isinf(n):
        return 0
    return int(n)


def parse_date(value: Any) -> datetime | None:
    """Parse an ISO date/datetime string into a naive local datetime, or None."""
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        dt = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


def build_partner_lookup(vendors: list[Vendor]) -> dict[str, str]:
    """Map every brand (and vendor name) to the owning partner's name."""
    lookup: dict[str, str] = {}
    for v in vendors:
        partner = v.partner_name or NO_PARTNER
        for brand in [v.name, *v.brand_names]:
            if brand and brand not in lookup:
                lookup[brand] = partner
    return lookup


def normalize_requirement(req: RequirementRecord, partner_lookup: dict[str, str]) -> NormalizedRequirement:
    client = req.client or req.brand or ""
    brand = client or "Unknown"
    location = req.location or "N/A"
    return NormalizedRequirement(
        id=req.id,
        title=req.title or "",
        client=client,
        brand=brand,
        store_name=req.store_name or location,
        location=location,
        openings=coerce_openings(req.openings),
        submission_status=req.submission_status or SubmissionStatus.PENDING.value,
        partner_name=partner_lookup.get(brand, NO_PARTNER),
        posted_date=req.posted_date,
        assigned_to=req.assigned_to or None,
    )


def normalize_job(job: JobRecord, partner_lookup: dict[str, str]) -> NormalizedRequirement:
    """A direct job posting behaves as an already approved requirement."""
    return NormalizedRequirement(
        id=job.id,
        title=job.title,
        client=job.company,
        brand=job.company or "Unknown",
        store_name=job.store_name or job.locality or "Unknown Store",
        location=job.job_city or "Unknown City",
        openings=coerce_openings(job.number_of_openings),
        submission_status=SubmissionStatus.APPROVED.value,
        partner_name=partner_lookup.get(job.company, NO_PARTNER),
        posted_date=job.posted_date,
        source="job",
    )


def normalize_all(
    requirements: list[RequirementRecord],
    jobs: list[JobRecord],
    vendors: list[Vendor],
) -> list[NormalizedRequirement]:
    """Requirements first, then jobs, each in store order."""
    lookup = build_partner_lookup(vendors)
    return [normalize_requirement(r, lookup) for r in requirements] + [
        normalize_job(j, lookup) for j in jobs
    ]


def public_job_feed(jobs: list[JobRecord], requirements: list[RequirementRecord]) -> list[PublicJob]:
    """Direct jobs plus approved requirements, newest first."""
    items = normalize_all(
        [r for r in requirements if r.submission_status == SubmissionStatus.APPROVED.value],
        jobs,
        [],
    )
    feed = [
        PublicJob(
            id=i.id,
            title=i.title,
            company=i.client or i.brand,
            location=i.location,
            store_name=i.store_name,
            openings=i.openings,
            posted_date=i.posted_date,
            source=i.source,
        )
        for i in items
    ]

    def _key(job: PublicJob) -> tuple[bool, datetime]:
        dt = parse_date(job.posted_date)
        return (dt is not None, dt or datetime.min)

    feed.sort(key=_key, reverse=True)
    return feed


# ── Manager links ─────────────────────────────────────────────────────────

@dataclass
class ManagerLinks:
    parent: dict[str, str | None] = field(default_factory=dict)
    quarantined: dict[str, str] = field(default_factory=dict)

    def children(self) -> dict[str, list[str]]:
        kids: dict[str, list[str]] = defaultdict(list)
        for member_id, parent_id in self.parent.items():
            if parent_id is not None:
                kids[parent_id].append(member_id)
        return dict(kids)


def link_managers(members: list[TeamMemberRecord]) -> ManagerLinks:
    """Resolve each member's manager to a member id.

    A member is a root when it names no manager or the ``"Admin"`` sentinel.
    References that cannot be linked safely (unknown or duplicated names,
    self-references, cycles) are quarantined: the member becomes a root and
    the reason is kept on the result.
    """
    links = ManagerLinks()
    ids = {m.id for m in members}
    by_name: dict[str, list[str]] = defaultdict(list)
    for m in members:
        if m.full_name:
            by_name[m.full_name].append(m.id)

    for m in members:
        if m.manager_id and m.manager_id in ids and m.manager_id != m.id:
            links.parent[m.id] = m.manager_id
            continue

        name = m.reporting_manager
        if not name or name == ROOT_MANAGER:
            links.parent[m.id] = None
            continue

        matches = by_name.get(name, [])
        match matches:
            case []:
                links.quarantined[m.id] = f"unknown manager '{name}'"
                links.parent[m.id] = None
            case [only] if only == m.id:
                links.quarantined[m.id] = "reports to self"
                links.parent[m.id] = None
            case [only]:
                links.parent[m.id] = only
            case _:
                links.quarantined[m.id] = f"ambiguous manager name '{name}'"
                links.parent[m.id] = None

    for m in sorted(members, key=lambda m: ((m.full_name or "").casefold(), m.id)):
        seen: set[str] = set()
        cur = links.parent.get(m.id)
        while cur is not None and cur not in seen:
            if cur == m.id:
                links.parent[m.id] = None
                links.quarantined[m.id] = "reporting cycle"
                break
            seen.add(cur)
            cur = links.parent.get(cur)

    if links.quarantined:
        log.info("Quarantined %d manager link(s)", len(links.quarantined))
        for member_id, reason in links.quarantined.items():
            log.debug("Member %s treated as root: %s", member_id, reason)
    return links
