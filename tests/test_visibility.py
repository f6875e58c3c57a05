"""Tests for the visibility filter."""

from __future__ import annotations

import pytest
from conftest import candidate, member

from recruit_portal.models import AppUser, UserType, Vendor
from recruit_portal.pipeline.hierarchy import build_team_performance
from recruit_portal.pipeline.visibility import downline, filter_candidates, visible_team

VENDORS = [
    Vendor(name="V1", partner_name="Partner One", email="partner@one.test", brand_names=["X"]),
    Vendor(name="V2", partner_name="Partner Two", email="partner@two.test", brand_names=["Y", "Z"]),
]

MEMBERS = [
    member("Lata", user_type=UserType.TEAMLEAD),
    member("Manoj", "Lata"),
    member("Neha", "Manoj"),
    member("Om", user_type=UserType.TEAMLEAD),
    member("Pia", "Om"),
]

CANDIDATES = [
    candidate("Lata", name="c1", vendor="X"),
    candidate("Manoj", name="c2", vendor="Y"),
    candidate("Neha", name="c3", vendor="X", supervisor_email="sup@store.test"),
    candidate("Om", name="c4", vendor="Z"),
    candidate("Pia", name="c5"),
    candidate(None, name="c6", vendor="X"),
]


@pytest.fixture
def team():
    return build_team_performance(MEMBERS, CANDIDATES)


def _names(candidates):
    return sorted(c.name for c in candidates)


def _user(user_type: UserType, uid: str = "u", **kw) -> AppUser:
    return AppUser(uid=uid, user_type=user_type, **kw)


# ---------------------------------------------------------------------------
# Candidates
# ---------------------------------------------------------------------------

def test_partner_sees_only_owned_brands(team):
    partner = _user(UserType.PARTNER, email="partner@one.test")
    assert _names(filter_candidates(CANDIDATES, partner, team, VENDORS)) == ["c1", "c3", "c6"]


def test_partner_email_match_ignores_case(team):
    partner = _user(UserType.PARTNER, email="Partner@Two.TEST")
    assert _names(filter_candidates(CANDIDATES, partner, team, VENDORS)) == ["c2", "c4"]


def test_partner_without_vendor_entry_sees_nothing(team):
    partner = _user(UserType.PARTNER, email="stranger@else.test")
    assert filter_candidates(CANDIDATES, partner, team, VENDORS) == []


def test_team_lead_sees_self_and_downline(team):
    lead = _user(UserType.TEAMLEAD, uid="lata", full_name="Lata")
    assert _names(filter_candidates(CANDIDATES, lead, team, VENDORS)) == ["c1", "c2", "c3"]

    mid = _user(UserType.TEAMLEAD, uid="manoj", full_name="Manoj")
    assert _names(filter_candidates(CANDIDATES, mid, team, VENDORS)) == ["c2", "c3"]


def test_team_lead_missing_from_hierarchy_sees_nothing(team):
    lead = _user(UserType.TEAMLEAD, uid="nobody", full_name="Nobody")
    assert filter_candidates(CANDIDATES, lead, team, VENDORS) == []


def test_team_member_sees_own_candidates(team):
    rep = _user(UserType.TEAM, uid="pia", full_name="Pia")
    assert _names(filter_candidates(CANDIDATES, rep, team, VENDORS)) == ["c5"]


@pytest.mark.parametrize("user_type", [UserType.ADMIN, UserType.HR])
def test_admin_and_hr_see_everything(team, user_type):
    assert len(filter_candidates(CANDIDATES, _user(user_type), team, VENDORS)) == len(CANDIDATES)


def test_store_supervisor_sees_assigned_candidates(team):
    sup = _user(UserType.STORE_SUPERVISOR, email="sup@store.test")
    assert _names(filter_candidates(CANDIDATES, sup, team, VENDORS)) == ["c3"]


@pytest.mark.parametrize("user_type", [UserType.CANDIDATE, UserType.NONE])
def test_candidates_and_anonymous_see_nothing(team, user_type):
    assert filter_candidates(CANDIDATES, _user(user_type), team, VENDORS) == []


# ---------------------------------------------------------------------------
# Team rows
# ---------------------------------------------------------------------------

def test_downline_slice_stops_at_sibling_level(team):
    assert [r.id for r in downline(team, "lata")] == ["lata", "manoj", "neha"]
    assert [r.id for r in downline(team, "om")] == ["om", "pia"]
    assert [r.id for r in downline(team, "neha")] == ["neha"]
    assert downline(team, "missing") == []


def test_visible_team_rows(team):
    assert len(visible_team(team, _user(UserType.ADMIN))) == len(MEMBERS)
    assert [r.id for r in visible_team(team, _user(UserType.TEAMLEAD, uid="om"))] == ["om", "pia"]
    assert [r.id for r in visible_team(team, _user(UserType.TEAM, uid="neha"))] == ["neha"]
    assert visible_team(team, _user(UserType.PARTNER)) == []
