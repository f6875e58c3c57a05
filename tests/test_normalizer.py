"""Tests for the entity normalizer, the public job feed and manager links."""

from __future__ import annotations

from conftest import member

from recruit_portal.models import JobRecord, RequirementRecord, Vendor
from recruit_portal.pipeline.normalizer import (
    build_partner_lookup,
    coerce_openings,
    link_managers,
    normalize_job,
    normalize_requirement,
    parse_date,
    public_job_feed,
)

VENDORS = [
    Vendor(name="QuickStaff", partner_name="Quick Staffing LLP", email="ops@quick.test", brand_names=["Zepto", "Blinkit"]),
    Vendor(name="NoPartner", brand_names=["Dunzo"]),
]


# ---------------------------------------------------------------------------
# Requirements and jobs
# ---------------------------------------------------------------------------

def test_coerce_openings():
    assert coerce_openings(5) == 5
    assert coerce_openings("7") == 7
    assert coerce_openings(" 3 ") == 3
    assert coerce_openings(2.9) == 2
    assert coerce_openings("many") == 0
    assert coerce_openings("nan") == 0
    assert coerce_openings(None) == 0
    assert coerce_openings(True) == 0
    assert coerce_openings([1]) == 0


def test_partner_lookup_covers_brands_and_vendor_name():
    lookup = build_partner_lookup(VENDORS)
    assert lookup["Zepto"] == "Quick Staffing LLP"
    assert lookup["Blinkit"] == "Quick Staffing LLP"
    assert lookup["QuickStaff"] == "Quick Staffing LLP"
    assert lookup["Dunzo"] == "N/A"


def test_normalize_requirement():
    req = RequirementRecord(title="Picker", client="Zepto", location="Pune", openings="4")
    before = req.model_dump()
    n = normalize_requirement(req, build_partner_lookup(VENDORS))
    assert n.brand == "Zepto"
    assert n.store_name == "Pune"
    assert n.location == "Pune"
    assert n.openings == 4
    assert n.partner_name == "Quick Staffing LLP"
    assert n.submission_status == "Pending Review"
    assert req.model_dump() == before


def test_normalize_requirement_defaults():
    n = normalize_requirement(RequirementRecord(openings="lots"), {})
    assert n.brand == "Unknown"
    assert n.partner_name == "N/A"
    assert n.openings == 0
    assert n.location == "N/A"


def test_normalize_job_is_always_approved():
    job = JobRecord(title="Rider", company="Blinkit", locality="Andheri", number_of_openings="12")
    n = normalize_job(job, build_partner_lookup(VENDORS))
    assert n.submission_status == "Approved"
    assert n.store_name == "Andheri"
    assert n.location == "Unknown City"
    assert n.openings == 12
    assert n.partner_name == "Quick Staffing LLP"

    bare = normalize_job(JobRecord(title="Rider", company="Other"), {})
    assert bare.store_name == "Unknown Store"
    assert bare.partner_name == "N/A"


def test_parse_date():
    assert parse_date("2024-05-01").day == 1
    assert parse_date("2024-05-01T10:00:00Z").tzinfo is None
    assert parse_date("yesterday") is None
    assert parse_date(None) is None
    assert parse_date(20240501) is None


# ---------------------------------------------------------------------------
# Public job feed
# ---------------------------------------------------------------------------

def test_public_feed_merges_jobs_and_approved_requirements():
    job = JobRecord(id="job1", title="Rider", company="Blinkit", job_city="Mumbai", posted_date="2024-05-01T10:00:00")
    approved = RequirementRecord(
        id="req1", title="Picker", client="Zepto", location="Pune",
        openings=3, submission_status="Approved", posted_date="2024-05-03T10:00:00",
    )
    pending = RequirementRecord(id="req2", title="Packer", client="Zepto", posted_date="2024-05-09T10:00:00")

    feed = public_job_feed([job], [approved, pending])
    assert [j.id for j in feed] == ["req1", "job1"]
    assert feed[0].source == "requirement"
    assert feed[0].company == "Zepto"
    assert feed[1].source == "job"
    assert feed[1].location == "Mumbai"


def test_public_feed_puts_undated_entries_last():
    jobs = [
        JobRecord(id="a", title="A", company="X", posted_date="garbage"),
        JobRecord(id="b", title="B", company="X", posted_date="2023-01-01"),
        JobRecord(id="c", title="C", company="X", posted_date="2024-01-01"),
    ]
    assert [j.id for j in public_job_feed(jobs, [])] == ["c", "b", "a"]


def test_stored_documents_without_posted_date_sort_last():
    jobs = [
        JobRecord.model_validate({"id": "j1", "title": "Rider", "company": "X", "postedDate": "2024-01-01"}),
        JobRecord.model_validate({"id": "j2", "title": "Picker", "company": "X"}),
    ]
    approved = RequirementRecord.model_validate({"id": "r1", "title": "Packer", "submissionStatus": "Approved"})
    assert jobs[1].posted_date is None
    assert approved.posted_date is None
    assert [j.id for j in public_job_feed(jobs, [approved])] == ["j1", "r1", "j2"]


# ---------------------------------------------------------------------------
# Manager links
# ---------------------------------------------------------------------------

def test_links_resolve_names_to_ids():
    links = link_managers([member("Asha"), member("Bala", "Asha"), member("Chitra", "Bala")])
    assert links.parent == {"asha": None, "bala": "asha", "chitra": "bala"}
    assert links.quarantined == {}
    assert links.children() == {"asha": ["bala"], "bala": ["chitra"]}


def test_admin_sentinel_is_a_plain_root():
    links = link_managers([member("Asha", "Admin")])
    assert links.parent["asha"] is None
    assert links.quarantined == {}


def test_unknown_and_ambiguous_managers_are_quarantined():
    links = link_managers([
        member("Ravi", id="r1"),
        member("Ravi", id="r2"),
        member("Sunil", "Ravi"),
        member("Tara", "Nobody"),
        member("Uma", "Uma"),
    ])
    assert links.parent["sunil"] is None
    assert "ambiguous" in links.quarantined["sunil"]
    assert "unknown" in links.quarantined["tara"]
    assert links.quarantined["uma"] == "reports to self"


def test_cycles_are_broken_deterministically():
    links = link_managers([member("Yamini", "Xavier"), member("Xavier", "Yamini")])
    assert links.parent == {"yamini": "xavier", "xavier": None}
    assert links.quarantined == {"xavier": "reporting cycle"}


def test_explicit_manager_id_wins_over_name():
    links = link_managers([
        member("Asha"),
        member("Bala"),
        member("Chitra", "Asha", manager_id="bala"),
    ])
    assert links.parent["chitra"] == "bala"
