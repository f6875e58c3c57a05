"""Shared fixtures: a throwaway SQLite store and record factories."""

from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from recruit_portal import database
from recruit_portal.models import CandidateRecord, TeamMemberRecord, UserType


@pytest.fixture
def store(monkeypatch):
    with tempfile.TemporaryDirectory() as tmpdir:
        monkeypatch.setattr(database, "DB_PATH", Path(tmpdir) / "test.db")
        monkeypatch.setattr(database, "_listeners", [])
        database.init_db()
        yield database


def member(name: str, manager: str | None = None, user_type: UserType = UserType.TEAM, **kw) -> TeamMemberRecord:
    return TeamMemberRecord(id=kw.pop("id", name.lower()), full_name=name, reporting_manager=manager, user_type=user_type, **kw)


def candidate(recruiter: str | None = None, **kw) -> CandidateRecord:
    kw.setdefault("applied_date", "2024-01-01T09:00:00")
    return CandidateRecord(recruiter=recruiter, **kw)
