"""Command line entry point — run the API server or print a dashboard report."""

from __future__ import annotations

import argparse
import logging
import sys

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

from recruit_portal import __version__
from recruit_portal import database as db
from recruit_portal.auth import to_app_user
from recruit_portal.config import Config, load_config
from recruit_portal.errors import InitErrorLog
from recruit_portal.live import read_snapshot
from recruit_portal.models import AppUser, DashboardStats, UserType
from recruit_portal.pipeline import compute_dashboard_stats

custom_theme = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "bold green",
})

console = Console(theme=custom_theme)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="recruit-portal", description="Recruitment portal backend")
    parser.add_argument("--env-file", help="Load settings from this .env file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    report = sub.add_parser("report", help="Print the dashboard for one user")
    report.add_argument("--user", help="Email of the viewing user (default: full admin view)")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.env_file)
    if args.command == "serve":
        _serve(args.host, args.port)
    else:
        sys.exit(_report(config, args.user))


def _serve(host: str, port: int) -> None:
    import uvicorn

    uvicorn.run("recruit_portal.main:app", host=host, port=port)


def _viewer(email: str | None) -> AppUser | None:
    if not email:
        return AppUser(uid="cli", full_name="Command line", user_type=UserType.ADMIN)
    doc = db.get_user_by_email(email)
    return to_app_user(doc) if doc else None


def _report(config: Config, email: str | None) -> int:
    db.DB_PATH = config.db_path
    db.init_db()

    viewer = _viewer(email)
    if viewer is None:
        console.print(f"[error]No account found for {email}.[/error]")
        return 1

    errors = InitErrorLog()
    snapshot, settings = read_snapshot(viewer, errors)
    stats = compute_dashboard_stats(snapshot, viewer, settings)

    console.print(Panel(
        f"{settings.branding.portal_name} dashboard for [bold]{viewer.full_name or viewer.email}[/bold] "
        f"({viewer.user_type.value})",
        title=f"Recruit Portal v{__version__}",
        border_style="cyan",
    ))
    for message in errors.messages:
        console.print(f"[warning]{message}[/warning]")
    _print_stats(stats)
    return 0


def _print_stats(stats: DashboardStats) -> None:
    funnel = Table(title="Candidate Pipeline")
    for name in ("Active", "Interview", "Rejected", "Quit"):
        funnel.add_column(name, justify="right")
    p = stats.pipeline
    funnel.add_row(str(p.active), str(p.interview), str(p.rejected), str(p.quit))
    console.print(funnel)

    process = Table(title="Process")
    process.add_column("Stage")
    process.add_column("Count", justify="right")
    for m in stats.process:
        process.add_row(m.name, str(m.count))
    console.print(process)

    if stats.role:
        roles = Table(title="Top Roles")
        roles.add_column("Role")
        roles.add_column("Count", justify="right")
        for m in stats.role:
            roles.add_row(m.name, str(m.count))
        console.print(roles)

    hr = stats.hr_stats
    console.print(
        f"[info]Selected[/info] {hr.total_selected}  "
        f"[info]Offers[/info] {hr.total_offer_released}  "
        f"[info]Onboarding[/info] {hr.total_onboarding_pending}  "
        f"[info]Joined today/week/month[/info] "
        f"{hr.new_joining.day}/{hr.new_joining.week}/{hr.new_joining.month}"
    )

    if stats.team:
        team = Table(title="Team Performance")
        team.add_column("Member")
        team.add_column("Role")
        team.add_column("Total", justify="right")
        team.add_column("Selected", justify="right")
        team.add_column("Pending", justify="right")
        team.add_column("Rejected", justify="right")
        team.add_column("Quit", justify="right")
        team.add_column("Success %", justify="right")
        for row in stats.team:
            team.add_row(
                "  " * row.level + row.team_member,
                row.role,
                str(row.total),
                str(row.selected),
                str(row.pending),
                str(row.rejected),
                str(row.quit),
                f"{row.success_rate:.1f}",
            )
        console.print(team)

    req = stats.partner_requirement
    console.print(
        f"[info]Requirements[/info] {req.total} total, {req.pending} pending, {req.approved} approved  "
        f"[info]Complaints[/info] {stats.complaint.active} active, {stats.complaint.closed} closed  "
        f"[info]Vendors[/info] {stats.vendor.total}"
    )

    if stats.requirement_breakdown.partner:
        partners = Table(title="Openings by Partner")
        partners.add_column("Client")
        partners.add_column("Location")
        partners.add_column("Openings", justify="right")
        partners.add_column("Pending", justify="right")
        partners.add_column("Approved", justify="right")
        for row in stats.requirement_breakdown.partner:
            partners.add_row(row.name, row.location, str(row.total_openings), str(row.pending), str(row.approved))
        console.print(partners)

    if stats.partner is not None:
        ps = stats.partner
        console.print(Panel(
            f"Openings {ps.total_openings}  Submitted {ps.candidates_submitted}  "
            f"Interviews {ps.interviews_scheduled}  Offers {ps.offers_released}  "
            f"Joined {ps.candidates_joined}  Fill rate {ps.fill_rate:.1f}%",
            title="Partner",
            border_style="green",
        ))
