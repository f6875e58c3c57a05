"""End-to-end tests through the FastAPI app."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from recruit_portal import auth, database
from recruit_portal.routes import jobs as job_routes


@pytest.fixture
def client(monkeypatch, tmp_path):
    monkeypatch.setenv("PORTAL_DB_PATH", str(tmp_path / "api.db"))
    monkeypatch.setenv("PORTAL_SETTINGS_CACHE", str(tmp_path / "cache.json"))
    monkeypatch.setattr(database, "DB_PATH", tmp_path / "api.db")
    monkeypatch.setattr(database, "_listeners", [])
    monkeypatch.setattr(auth, "ADMIN_EMAIL", "boss@portal.test")

    from recruit_portal.main import app

    with TestClient(app) as c:
        yield c


def _seed(email: str, user_type: str, full_name: str = "", password: str = "secret", **extra) -> dict:
    return database.insert_doc("users", {
        "email": email,
        "fullName": full_name,
        "userType": user_type,
        "passwordHash": auth.hash_password(password),
        **extra,
    })


def _login(client, email: str, password: str = "secret", user_type: str | None = None) -> dict:
    body = {"email": email, "password": password}
    if user_type:
        body["userType"] = user_type
    resp = client.post("/api/auth/login", json=body)
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['token']}"}


def _admin(client) -> dict:
    _seed("boss@portal.test", "ADMIN", "Boss")
    return _login(client, "boss@portal.test")


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_register_login_me(client):
    resp = client.post("/api/auth/register", json={
        "email": "Seeker@Mail.test", "password": "pw12345", "fullName": "Seeker", "userType": "CANDIDATE",
    })
    assert resp.status_code == 200
    assert resp.json()["user"]["userType"] == "CANDIDATE"

    headers = _login(client, "seeker@mail.test", "pw12345", "CANDIDATE")
    me = client.get("/api/auth/me", headers=headers).json()
    assert me["email"] == "seeker@mail.test"
    assert me["fullName"] == "Seeker"


def test_register_rejects_duplicates_and_staff_types(client):
    body = {"email": "a@mail.test", "password": "pw", "userType": "PARTNER"}
    assert client.post("/api/auth/register", json=body).status_code == 200

    dup = client.post("/api/auth/register", json=body)
    assert dup.status_code == 409
    assert dup.json()["code"] == "email_in_use"

    staff = client.post("/api/auth/register", json={"email": "b@mail.test", "password": "pw", "userType": "ADMIN"})
    assert staff.status_code == 403


def test_login_failures(client):
    _seed("rep@portal.test", "TEAM", "Ravi", phone="98765 43210")

    bad = client.post("/api/auth/login", json={"email": "rep@portal.test", "password": "wrong"})
    assert bad.status_code == 401
    assert bad.json()["code"] == "invalid_credentials"

    wrong_panel = client.post("/api/auth/login", json={
        "email": "rep@portal.test", "password": "secret", "userType": "PARTNER",
    })
    assert wrong_panel.status_code == 403
    assert wrong_panel.json()["code"] == "account_type_mismatch"

    # Any team panel accepts any team account
    _login(client, "rep@portal.test", user_type="HR")

    ok = client.post("/api/auth/phone-login", json={"phone": "9876543210", "password": "secret"})
    assert ok.status_code == 200
    missing = client.post("/api/auth/phone-login", json={"phone": "111", "password": "secret"})
    assert missing.status_code == 404


def test_admin_email_always_signs_in_as_admin(client):
    _seed("boss@portal.test", "CANDIDATE", "Boss")
    headers = _login(client, "boss@portal.test")
    assert client.get("/api/auth/me", headers=headers).json()["userType"] == "ADMIN"


def test_missing_or_bad_token(client):
    assert client.get("/api/jobs").status_code in (401, 403)
    assert client.get("/api/jobs", headers={"Authorization": "Bearer nope"}).status_code == 401


# ---------------------------------------------------------------------------
# Jobs and requirements
# ---------------------------------------------------------------------------

def test_public_feed_merges_jobs_and_approved_requirements(client):
    admin = _admin(client)
    _seed("partner@quick.test", "PARTNER", "Quick")
    partner = _login(client, "partner@quick.test")

    client.post("/api/jobs", headers=admin, json={
        "title": "Rider", "company": "Blinkit", "jobCity": "Mumbai", "numberOfOpenings": 2,
        "postedDate": "2024-01-01T00:00:00",
    })
    req = client.post("/api/requirements", headers=partner, json={
        "title": "Picker", "client": "Zepto", "location": "Pune", "openings": "5",
        "submissionStatus": "Approved",
    }).json()
    assert req["submissionStatus"] == "Pending Review"
    assert req["brand"] == "Zepto"

    feed = client.get("/api/jobs/public").json()
    assert [j["title"] for j in feed] == ["Rider"]

    assert client.post(f"/api/requirements/{req['id']}/approve", headers=partner).status_code == 403
    client.post(f"/api/requirements/{req['id']}/approve", headers=admin)

    feed = client.get("/api/jobs/public").json()
    assert [j["title"] for j in feed] == ["Picker", "Rider"]
    assert feed[0]["openings"] == 5
    assert feed[0]["source"] == "requirement"
    assert feed[1]["storeName"] == "Unknown Store"


def test_public_feed_skips_malformed_documents(client):
    database.insert_doc("jobs", {"title": 5, "company": "Broken"})
    database.insert_doc("jobs", {"title": "Rider", "company": "Blinkit"})

    resp = client.get("/api/jobs/public")
    assert resp.status_code == 200
    assert [j["title"] for j in resp.json()] == ["Rider"]


def test_created_records_are_dated(client):
    admin = _admin(client)
    job = client.post("/api/jobs", headers=admin, json={"title": "Rider", "company": "Blinkit"}).json()
    assert job["postedDate"]
    req = client.post("/api/requirements", headers=admin, json={"title": "Picker", "client": "Zepto"}).json()
    assert req["postedDate"]
    cand = client.post("/api/candidates", headers=admin, json={"name": "Asha"}).json()
    assert cand["appliedDate"]


def test_partner_sees_only_own_requirements(client):
    admin = _admin(client)
    client.post("/api/requirements", headers=admin, json={"title": "Packer", "client": "Dunzo"})
    _seed("partner@quick.test", "PARTNER")
    partner = _login(client, "partner@quick.test")
    client.post("/api/requirements", headers=partner, json={"title": "Picker", "client": "Zepto"})

    assert [r["title"] for r in client.get("/api/requirements", headers=partner).json()] == ["Picker"]
    assert len(client.get("/api/requirements", headers=admin).json()) == 2


def test_generate_description(client, monkeypatch):
    admin = _admin(client)
    monkeypatch.setattr(job_routes, "generate_job_description", lambda cfg, kw: f"Role: {kw}")

    resp = client.post("/api/jobs/generate-description", headers=admin, json={"keywords": " picker "})
    assert resp.json() == {"description": "Role: picker"}
    blank = client.post("/api/jobs/generate-description", headers=admin, json={"keywords": "  "})
    assert blank.status_code == 400


# ---------------------------------------------------------------------------
# Team and dashboard
# ---------------------------------------------------------------------------

def test_team_manager_links_resolve_and_warn(client):
    admin = _admin(client)
    lead = client.post("/api/team/members", headers=admin, json={
        "fullName": "Lata", "email": "lata@portal.test", "password": "pw", "userType": "TEAMLEAD",
    }).json()
    rep = client.post("/api/team/members", headers=admin, json={
        "fullName": "Ravi", "email": "ravi@portal.test", "password": "pw", "reportingManager": "Lata",
    }).json()
    assert rep["managerId"] == lead["id"]
    assert "passwordHash" not in rep

    stray = client.post("/api/team/members", headers=admin, json={
        "fullName": "Sam", "email": "sam@portal.test", "password": "pw", "reportingManager": "Nobody",
    }).json()
    assert stray["managerWarning"] == "unknown manager 'Nobody'"
    assert stray.get("managerId") is None

    rows = client.get("/api/team/performance", headers=admin).json()
    assert [(r["teamMember"], r["level"]) for r in rows] == [("Lata", 0), ("Ravi", 1), ("Sam", 0)]


def test_dashboard_stats_per_viewer(client):
    admin = _admin(client)
    _seed("ravi@portal.test", "TEAM", "Ravi")
    database.insert_doc("candidates", {"recruiter": "Ravi", "stage": "Interview"})
    database.insert_doc("candidates", {"recruiter": "Other", "status": "Rejected"})
    database.insert_doc("complaints", {"status": "Open"})

    body = client.get("/api/dashboard/stats", headers=admin).json()
    assert body["errors"] == []
    assert body["stats"]["pipeline"]["interview"] == 1
    assert body["stats"]["pipeline"]["rejected"] == 1
    assert body["stats"]["complaint"]["active"] == 1

    rep = _login(client, "ravi@portal.test")
    body = client.get("/api/dashboard/stats", headers=rep).json()
    assert body["stats"]["pipeline"]["rejected"] == 0
    assert body["stats"]["complaint"]["active"] == 0
    assert len(body["errors"]) == 1
    assert "complaints" in body["errors"][0]


def test_complaints_are_admin_only(client):
    _seed("ravi@portal.test", "TEAM", "Ravi")
    rep = _login(client, "ravi@portal.test")
    assert client.get("/api/complaints", headers=rep).status_code == 403

    client.post("/api/complaints", headers=rep, json={"subject": "Payslip", "status": "Resolved"})
    mine = client.get("/api/complaints/mine", headers=rep).json()
    assert [c["status"] for c in mine] == ["Open"]


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

def test_settings_defaults_and_update(client):
    assert client.get("/api/settings").json()["branding"]["portalName"] == "R.K.M ENTERPRISE"

    admin = _admin(client)
    resp = client.put("/api/settings", headers=admin, json={"branding": {"portalName": "Acme"}})
    assert resp.status_code == 200
    body = client.get("/api/settings").json()
    assert body["branding"]["portalName"] == "Acme"
    assert body["branding"]["hireTalent"]["title"] == "Hire Top Talent"

    bad = client.put("/api/settings", headers=admin, json={"vendors": "not a list"})
    assert bad.status_code == 422

    client.post("/api/settings/vendors", headers=admin, json={"name": "QuickStaff", "brandNames": ["Zepto"]})
    vendors = client.get("/api/settings/vendors", headers=admin).json()
    assert vendors[0]["brandNames"] == ["Zepto"]
