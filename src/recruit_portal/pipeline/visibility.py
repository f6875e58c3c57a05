"""Visibility filter — what each viewer may see of candidates and team rows."""

from __future__ import annotations

from recruit_portal.models import (
    AppUser,
    CandidateRecord,
    TeamMemberPerformance,
    UserType,
    Vendor,
)


def _same_email(a: str | None, b: str | None) -> bool:
    return bool(a) and bool(b) and a.strip().lower() == b.strip().lower()


def partner_vendor(vendors: list[Vendor], user: AppUser) -> Vendor | None:
    """The vendor directory entry owned by a partner account, matched by email."""
    for v in vendors:
        if _same_email(v.email, user.email):
            return v
    return None


def owned_brands(vendors: list[Vendor], user: AppUser) -> set[str]:
    vendor = partner_vendor(vendors, user)
    return set(vendor.brand_names) if vendor else set()


def downline(hierarchy: list[TeamMemberPerformance], user_id: str) -> list[TeamMemberPerformance]:
    """The member's own row plus the contiguous run of deeper rows after it.

    ``hierarchy`` must be in the pre-order produced by
    :func:`recruit_portal.pipeline.hierarchy.build_team_performance`.
    """
    for i, row in enumerate(hierarchy):
        if row.id == user_id:
            break
    else:
        return []

    rows = [row]
    for below in hierarchy[i + 1:]:
        if below.level <= row.level:
            break
        rows.append(below)
    return rows


def filter_candidates(
    candidates: list[CandidateRecord],
    user: AppUser,
    hierarchy: list[TeamMemberPerformance],
    vendors: list[Vendor],
) -> list[CandidateRecord]:
    """Return the candidates ``user`` may see. Never mutates the input list."""
    match user.user_type:
        case UserType.ADMIN | UserType.HR:
            return list(candidates)
        case UserType.PARTNER:
            brands = owned_brands(vendors, user)
            return [c for c in candidates if c.vendor and c.vendor in brands]
        case UserType.TEAMLEAD:
            names = {row.team_member for row in downline(hierarchy, user.uid)}
            return [c for c in candidates if c.recruiter and c.recruiter in names]
        case UserType.TEAM:
            if not user.full_name:
                return []
            return [c for c in candidates if c.recruiter == user.full_name]
        case UserType.STORE_SUPERVISOR:
            return [c for c in candidates if _same_email(c.supervisor_email, user.email)]
        case _:
            return []


def visible_team(hierarchy: list[TeamMemberPerformance], user: AppUser) -> list[TeamMemberPerformance]:
    """Rows of the performance table shown to ``user``."""
    match user.user_type:
        case UserType.ADMIN | UserType.HR:
            return [r for r in hierarchy if r.user_type not in (UserType.ADMIN, UserType.HR)]
        case UserType.TEAMLEAD:
            return downline(hierarchy, user.uid)
        case UserType.TEAM | UserType.STORE_SUPERVISOR:
            return [r for r in hierarchy if r.id == user.uid]
        case _:
            return []
