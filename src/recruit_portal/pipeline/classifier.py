"""Pipeline classifier — funnel buckets, process stages, role tally and HR metrics."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from recruit_portal.models import (
    CandidateRecord,
    HrStats,
    PipelineStats,
    ProcessMetric,
    RoleMetric,
)
from recruit_portal.pipeline.normalizer import parse_date

DEFAULT_STATUS = "Active"
DEFAULT_STAGE = "Sourced"
DEFAULT_ROLE = "Unknown"

PROCESS_STAGES = ("Screening", "Interview", "Selected", "Joined")
TOP_ROLES = 5

# Past the funnel: counted by process/HR metrics, not by pipeline buckets
_PAST_FUNNEL = {"Selected", "Joined"}


@dataclass
class CandidateStats:
    pipeline: PipelineStats = field(default_factory=PipelineStats)
    process: list[ProcessMetric] = field(default_factory=list)
    role: list[RoleMetric] = field(default_factory=list)
    hr_stats: HrStats = field(default_factory=HrStats)


def _status_stage(c: CandidateRecord) -> tuple[str, str]:
    return c.status or DEFAULT_STATUS, c.stage or DEFAULT_STAGE


def pipeline_bucket(c: CandidateRecord) -> str | None:
    """Return the candidate's funnel bucket, or None once it is past the funnel."""
    status, stage = _status_stage(c)
    if status == "Rejected":
        return "rejected"
    if status == "Quit":
        return "quit"
    if stage == "Interview":
        return "interview"
    if stage not in _PAST_FUNNEL:
        return "active"
    return None


def process_stage(c: CandidateRecord) -> str | None:
    """Joined > Selected > Interview > Screening; None for rejected/quit candidates."""
    status, stage = _status_stage(c)
    if status in ("Rejected", "Quit"):
        return None
    if status == "Joined" or stage == "Joined":
        return "Joined"
    if stage == "Selected":
        return "Selected"
    if stage == "Interview":
        return "Interview"
    return "Screening"


def week_start(now: datetime) -> datetime:
    """Most recent Sunday at local midnight."""
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return today - timedelta(days=(today.weekday() + 1) % 7)


def _update_hr(hr: HrStats, c: CandidateRecord, windows: tuple[datetime, datetime, datetime]) -> None:
    status, stage = _status_stage(c)
    if stage == "Selected" or status in ("Selected", "Joined"):
        hr.total_selected += 1
    if "Offer" in status or stage == "Offer Sent":
        hr.total_offer_released += 1
    if status == "Onboarding" or (stage == "Selected" and status != "Joined"):
        hr.total_onboarding_pending += 1

    if status == "Joined" or stage == "Joined":
        joined = parse_date(c.joining_date or c.applied_date)
        if joined is None:
            return
        day, week, month = windows
        if joined >= day:
            hr.new_joining.day += 1
        if joined >= week:
            hr.new_joining.week += 1
        if joined >= month:
            hr.new_joining.month += 1


def classify_candidates(candidates: list[CandidateRecord], now: datetime | None = None) -> CandidateStats:
    """Tally funnel, process, role and HR metrics over an already filtered candidate set."""
    now = now or datetime.now()
    if now.tzinfo is not None:
        now = now.astimezone().replace(tzinfo=None)
    start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
    windows = (start_of_day, week_start(now), start_of_day.replace(day=1))

    stats = CandidateStats()
    process: Counter[str] = Counter({name: 0 for name in PROCESS_STAGES})
    roles: Counter[str] = Counter()

    for c in candidates:
        bucket = pipeline_bucket(c)
        if bucket:
            setattr(stats.pipeline, bucket, getattr(stats.pipeline, bucket) + 1)

        stage = process_stage(c)
        if stage:
            process[stage] += 1
            roles[c.role or DEFAULT_ROLE] += 1

        _update_hr(stats.hr_stats, c, windows)

    stats.process = [ProcessMetric(name=name, count=process[name]) for name in PROCESS_STAGES]
    # most_common keeps first-encounter order among equal counts
    stats.role = [RoleMetric(name=name, count=n) for name, n in roles.most_common(TOP_ROLES)]
    return stats
