"""Dashboard aggregation pipeline.

raw snapshots → normalizer → hierarchy → visibility → classifier / breakdowns → DashboardStats
"""

from recruit_portal.pipeline.breakdown import build_requirement_breakdowns, create_breakdown
from recruit_portal.pipeline.classifier import classify_candidates
from recruit_portal.pipeline.dashboard import DataSnapshot, compute_dashboard_stats
from recruit_portal.pipeline.hierarchy import build_team_performance
from recruit_portal.pipeline.normalizer import (
    build_partner_lookup,
    link_managers,
    normalize_job,
    normalize_requirement,
    public_job_feed,
)
from recruit_portal.pipeline.visibility import filter_candidates, visible_team
