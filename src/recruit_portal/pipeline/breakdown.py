"""Multi-axis breakdown builder over normalized requirements."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping

from recruit_portal.models import (
    RequirementBreakdown,
    RequirementBreakdownRow,
    SubmissionStatus,
)
from recruit_portal.pipeline.normalizer import NormalizedRequirement

Selector = Callable[[NormalizedRequirement], str | None]

MISSING = "N/A"
UNASSIGNED_TEAM = "Unassigned Team"


def create_breakdown(
    items: Iterable[NormalizedRequirement],
    key: Selector,
    selectors: Mapping[str, Selector],
) -> list[RequirementBreakdownRow]:
    """Group ``items`` by ``key`` and sum openings per row and per secondary value.

    Rows appear in first-encounter order. A row's ``location`` is taken from
    the first item that created it.
    """
    rows: dict[str, RequirementBreakdownRow] = {}
    for item in items:
        name = key(item) or MISSING
        row = rows.get(name)
        if row is None:
            row = RequirementBreakdownRow(
                id=name,
                name=name,
                location=item.location or MISSING,
                breakdowns={axis: {} for axis in selectors},
            )
            rows[name] = row

        openings = item.openings
        row.total_openings += openings
        if item.submission_status == SubmissionStatus.PENDING.value:
            row.pending += openings
        elif item.submission_status == SubmissionStatus.APPROVED.value:
            row.approved += openings

        for axis, select in selectors.items():
            value = select(item) or MISSING
            tally = row.breakdowns[axis]
            tally[value] = tally.get(value, 0) + openings
    return list(rows.values())


def build_requirement_breakdowns(items: list[NormalizedRequirement]) -> RequirementBreakdown:
    """The four dashboard views: by team member, partner, store and role."""
    return RequirementBreakdown(
        team=create_breakdown(items, lambda i: i.assigned_to or UNASSIGNED_TEAM, {
            "location": lambda i: i.location,
            "role": lambda i: i.title,
            "store": lambda i: i.store_name,
            "brand": lambda i: i.brand,
            "partnerName": lambda i: i.partner_name,
        }),
        partner=create_breakdown(items, lambda i: i.client or "Unassigned", {
            "location": lambda i: i.location,
            "role": lambda i: i.title,
            "store": lambda i: i.store_name,
            "partnerName": lambda i: i.partner_name,
        }),
        store=create_breakdown(items, lambda i: i.store_name, {
            "role": lambda i: i.title,
            "partner": lambda i: i.client,
            "brand": lambda i: i.brand,
            "partnerName": lambda i: i.partner_name,
        }),
        role=create_breakdown(items, lambda i: i.title, {
            "location": lambda i: i.location,
            "store": lambda i: i.store_name,
            "partner": lambda i: i.client,
            "brand": lambda i: i.brand,
            "partnerName": lambda i: i.partner_name,
        }),
    )
