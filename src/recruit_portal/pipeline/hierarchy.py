"""Team hierarchy aggregator.

Builds the reporting forest of non-admin team members, tallies each member's
own candidates, rolls the counts up the tree post-order and flattens it into
a depth-annotated, pre-order list. The flatten order keeps every subtree
contiguous, which the downline slice in ``visibility`` depends on.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field

from recruit_portal.models import (
    CandidateRecord,
    TeamMemberPerformance,
    TeamMemberRecord,
    UserType,
)
from recruit_portal.pipeline.normalizer import link_managers

log = logging.getLogger(__name__)

_EXCLUDED = (UserType.ADMIN, UserType.HR)


@dataclass
class _Node:
    member: TeamMemberRecord
    total: int = 0
    selected: int = 0
    pending: int = 0
    rejected: int = 0
    quit: int = 0
    success_rate: float = 0.0
    self_success_rate: float = 0.0
    children: list[_Node] = field(default_factory=list)


def _rate(selected: int, total: int) -> float:
    return selected / total * 100 if total else 0.0


def _sort_key(node: _Node) -> tuple[str, str]:
    return ((node.member.full_name or "").casefold(), node.member.id)


def member_funnel(candidates: list[CandidateRecord]) -> tuple[int, int, int, int]:
    """(total, selected, rejected, quit) for one member's own candidates."""
    selected = rejected = quit = 0
    for c in candidates:
        if c.stage in ("Selected", "Joined") or c.status == "Joined":
            selected += 1
        elif c.status == "Rejected":
            rejected += 1
        elif c.status == "Quit":
            quit += 1
    return len(candidates), selected, rejected, quit


def _roll_up(node: _Node) -> None:
    for child in node.children:
        _roll_up(child)
        node.total += child.total
        node.selected += child.selected
        node.pending += child.pending
        node.rejected += child.rejected
        node.quit += child.quit
    node.success_rate = _rate(node.selected, node.total)


def _flatten(node: _Node, level: int, out: list[TeamMemberPerformance]) -> None:
    m = node.member
    out.append(TeamMemberPerformance(
        id=m.id,
        team_member=m.full_name or m.email or "Unknown User",
        email=m.email,
        role=m.role or ("Team Lead" if m.user_type == UserType.TEAMLEAD else "Team Member"),
        user_type=m.user_type,
        total=node.total,
        selected=node.selected,
        pending=node.pending,
        rejected=node.rejected,
        quit=node.quit,
        success_rate=node.success_rate,
        self_success_rate=node.self_success_rate,
        level=level,
        is_downline=level > 0,
    ))
    for child in sorted(node.children, key=_sort_key):
        _flatten(child, level + 1, out)


def _build(members: list[TeamMemberRecord], candidates: list[CandidateRecord]) -> list[TeamMemberPerformance]:
    relevant = [m for m in members if m.user_type not in _EXCLUDED]

    by_recruiter: dict[str, list[CandidateRecord]] = defaultdict(list)
    for c in candidates:
        if c.recruiter:
            by_recruiter[c.recruiter].append(c)

    nodes: dict[str, _Node] = {}
    for m in relevant:
        total, selected, rejected, quit = member_funnel(by_recruiter.get(m.full_name or "", []))
        rate = _rate(selected, total)
        nodes[m.id] = _Node(
            member=m,
            total=total,
            selected=selected,
            pending=max(total - (selected + rejected + quit), 0),
            rejected=rejected,
            quit=quit,
            success_rate=rate,
            self_success_rate=rate,
        )

    links = link_managers(relevant)
    roots: list[_Node] = []
    for member_id, node in nodes.items():
        parent_id = links.parent.get(member_id)
        if parent_id is not None and parent_id in nodes:
            nodes[parent_id].children.append(node)
        else:
            roots.append(node)

    out: list[TeamMemberPerformance] = []
    for root in sorted(roots, key=_sort_key):
        _roll_up(root)
        _flatten(root, 0, out)
    return out


def build_team_performance(
    members: list[TeamMemberRecord],
    candidates: list[CandidateRecord],
) -> list[TeamMemberPerformance]:
    """Hierarchy performance rows in pre-order; empty if anything goes wrong."""
    try:
        return _build(members, candidates)
    except Exception:
        log.exception("Team performance aggregation failed")
        return []
