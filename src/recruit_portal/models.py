"""Pydantic models — stored documents, API payloads and derived dashboard stats."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _new_id() -> str:
    return uuid.uuid4().hex[:8]


def _now() -> str:
    return datetime.now().isoformat()


class Document(BaseModel):
    """A stored record. Keys are camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: str = Field(default_factory=_new_id)

    def to_doc(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class Stats(BaseModel):
    """Derived values, recomputed on every pass and never persisted."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Users ─────────────────────────────────────────────────────────────────

class UserType(str, Enum):
    CANDIDATE = "CANDIDATE"
    PARTNER = "PARTNER"
    TEAM = "TEAM"
    ADMIN = "ADMIN"
    HR = "HR"
    TEAMLEAD = "TEAMLEAD"
    STORE_SUPERVISOR = "STORE_SUPERVISOR"
    NONE = "NONE"


TEAM_USER_TYPES = (UserType.ADMIN, UserType.HR, UserType.TEAM, UserType.TEAMLEAD)


class AppUser(Stats):
    uid: str
    email: str | None = None
    user_type: UserType = UserType.NONE
    full_name: str = ""
    profile_complete: bool = False


class UserRegister(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    email: str
    password: str
    full_name: str = ""
    phone: str = ""
    user_type: UserType = UserType.CANDIDATE


class UserLogin(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    email: str
    password: str
    user_type: UserType | None = None


class PhoneLogin(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    phone: str
    password: str
    user_type: UserType | None = None


# ── Team members ──────────────────────────────────────────────────────────

class TeamMemberRecord(Document):
    full_name: str | None = None
    email: str | None = None
    phone: str | None = None
    user_type: UserType = UserType.TEAM
    reporting_manager: str | None = None
    manager_id: str | None = None
    role: str | None = None


class TeamMemberCreate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    full_name: str
    email: str
    password: str
    phone: str = ""
    user_type: UserType = UserType.TEAM
    reporting_manager: str | None = None
    role: str | None = None


class TeamMemberUpdate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    full_name: str | None = None
    phone: str | None = None
    user_type: UserType | None = None
    reporting_manager: str | None = None
    role: str | None = None


# ── Candidates ────────────────────────────────────────────────────────────

class CandidateRecord(Document):
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    status: str | None = None
    stage: str | None = None
    recruiter: str | None = None
    vendor: str | None = None
    partner_name: str | None = None
    partner_email: str | None = None
    supervisor_email: str | None = None
    role: str | None = None
    location: str | None = None
    store_location: str | None = None
    applied_date: str | None = None
    joining_date: str | None = None


class CandidateUpdate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str | None = None
    email: str | None = None
    phone: str | None = None
    status: str | None = None
    stage: str | None = None
    recruiter: str | None = None
    vendor: str | None = None
    role: str | None = None
    location: str | None = None
    store_location: str | None = None
    joining_date: str | None = None


# ── Requirements & jobs ───────────────────────────────────────────────────

class SubmissionStatus(str, Enum):
    PENDING = "Pending Review"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class RequirementRecord(Document):
    title: str | None = None
    client: str | None = None
    brand: str | None = None
    location: str | None = None
    store_name: str | None = None
    openings: Any = None  # partners type free text here
    salary: str | None = None
    experience: str | None = None
    description: str | None = None
    job_type: str | None = None
    submission_status: str | None = SubmissionStatus.PENDING.value
    posted_date: str | None = None
    partner_id: str | None = None
    assigned_to: str | None = None


class RequirementUpdate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str | None = None
    client: str | None = None
    location: str | None = None
    store_name: str | None = None
    openings: int | None = None
    submission_status: SubmissionStatus | None = None
    assigned_to: str | None = None
    description: str | None = None


class JobRecord(Document):
    title: str = ""
    company: str = ""
    store_name: str | None = None
    locality: str | None = None
    job_city: str | None = None
    number_of_openings: Any = 0
    posted_date: str | None = None
    admin_id: str | None = None
    description: str = ""
    salary_range: str | None = None
    experience_level: str | None = None
    job_category: str | None = None
    job_type: str | None = None


class JobUpdate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str | None = None
    company: str | None = None
    store_name: str | None = None
    locality: str | None = None
    job_city: str | None = None
    number_of_openings: int | None = None
    description: str | None = None
    salary_range: str | None = None


class JobDescriptionRequest(BaseModel):
    keywords: str


class PublicJob(Stats):
    """One entry of the public job board: a direct job or an approved requirement."""

    id: str
    title: str
    company: str
    location: str
    store_name: str
    openings: int
    posted_date: str | None = None
    source: str  # "job" | "requirement"


# ── Directory, complaints, supervisors, demo requests ─────────────────────

class Vendor(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    name: str = ""
    partner_name: str | None = None
    email: str | None = None
    brand_names: list[str] = Field(default_factory=list)


class Complaint(Document):
    user_id: str | None = None
    category: str = "General Inquiry"
    subject: str = ""
    description: str = ""
    status: str = "Open"
    submitted_date: str = Field(default_factory=_now)


class ComplaintUpdate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    status: str | None = None
    description: str | None = None


class StoreSupervisor(Document):
    name: str = ""
    email: str = ""
    phone: str = ""
    store_location: str = ""
    status: str = "Active"
    partner_id: str | None = None


class DemoRequest(Document):
    company_name: str = ""
    contact_name: str = ""
    email: str = ""
    phone: str = ""
    message: str = ""
    status: str = "Pending"
    request_date: str = Field(default_factory=_now)


# ── Settings document ─────────────────────────────────────────────────────

class CallToAction(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str = ""
    description: str = ""
    link: str = ""
    background_image: str | None = None


class BrandingConfig(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    portal_name: str = "R.K.M ENTERPRISE"
    hire_talent: CallToAction = Field(default_factory=lambda: CallToAction(
        title="Hire Top Talent",
        description="Post your job openings and find the perfect candidates for your business.",
        link="https://example.com/hire",
    ))
    become_partner: CallToAction = Field(default_factory=lambda: CallToAction(
        title="Become a Partner",
        description="Expand your business by collaborating with us and accessing our network.",
        link="https://example.com/register",
    ))


class PanelConfig(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    email_notifications: bool = True
    maintenance_mode: bool = False


class StoreEntry(BaseModel):
    id: str = ""
    name: str = ""
    location: str = ""


class SystemRole(BaseModel):
    name: str = ""
    panel: str = ""


class PortalSettings(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    branding: BrandingConfig = Field(default_factory=BrandingConfig)
    logo_src: str | None = None
    vendors: list[Vendor] = Field(default_factory=list)
    job_roles: list[str] = Field(default_factory=list)
    system_roles: list[SystemRole] = Field(default_factory=list)
    locations: list[str] = Field(default_factory=list)
    stores: list[StoreEntry] = Field(default_factory=list)
    panel_config: PanelConfig = Field(default_factory=PanelConfig)


# ── Derived dashboard stats ───────────────────────────────────────────────

class PipelineStats(Stats):
    active: int = 0
    interview: int = 0
    rejected: int = 0
    quit: int = 0


class ProcessMetric(Stats):
    name: str
    count: int = 0


class RoleMetric(Stats):
    name: str
    count: int = 0


class NewJoining(Stats):
    day: int = 0
    week: int = 0
    month: int = 0


class HrStats(Stats):
    total_selected: int = 0
    total_offer_released: int = 0
    total_onboarding_pending: int = 0
    new_joining: NewJoining = Field(default_factory=NewJoining)


class ComplaintStats(Stats):
    active: int = 0
    closed: int = 0


class RequirementStats(Stats):
    total: int = 0
    pending: int = 0
    approved: int = 0


class VendorStats(Stats):
    total: int = 0


class PartnerStats(Stats):
    total_openings: int = 0
    candidates_submitted: int = 0
    interviews_scheduled: int = 0
    offers_released: int = 0
    candidates_joined: int = 0
    fill_rate: float = 0.0
    pending_requirements: int = 0
    active_requirements: int = 0


class TeamMemberPerformance(Stats):
    id: str
    team_member: str
    email: str | None = None
    role: str
    user_type: UserType = UserType.TEAM
    total: int = 0
    selected: int = 0
    pending: int = 0
    rejected: int = 0
    quit: int = 0
    success_rate: float = 0.0
    self_success_rate: float = 0.0
    level: int = 0
    is_downline: bool = False


class RequirementBreakdownRow(Stats):
    id: str
    name: str
    location: str = "N/A"
    total_openings: int = 0
    pending: int = 0
    approved: int = 0
    breakdowns: dict[str, dict[str, int]] = Field(default_factory=dict)


class RequirementBreakdown(Stats):
    team: list[RequirementBreakdownRow] = Field(default_factory=list)
    partner: list[RequirementBreakdownRow] = Field(default_factory=list)
    store: list[RequirementBreakdownRow] = Field(default_factory=list)
    role: list[RequirementBreakdownRow] = Field(default_factory=list)


class DashboardStats(Stats):
    pipeline: PipelineStats = Field(default_factory=PipelineStats)
    vendor: VendorStats = Field(default_factory=VendorStats)
    complaint: ComplaintStats = Field(default_factory=ComplaintStats)
    partner_requirement: RequirementStats = Field(default_factory=RequirementStats)
    hr_stats: HrStats = Field(default_factory=HrStats)
    process: list[ProcessMetric] = Field(default_factory=list)
    role: list[RoleMetric] = Field(default_factory=list)
    team: list[TeamMemberPerformance] = Field(default_factory=list)
    requirement_breakdown: RequirementBreakdown = Field(default_factory=RequirementBreakdown)
    partner: PartnerStats | None = None
