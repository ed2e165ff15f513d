"""
JobHunt command line — track applications, keep a résumé, run ATS scans.

Usage:
    python -m jobhunt <command> [options]

Commands:
    add       Track a new application (optionally fetch its description and scan it)
    list      List applications with search, status and time-window filters
    stats     Counts for today / last 7 days / last 30 days / last year
    status    Change the status of an application
    delete    Remove an application
    scan      Re-run the ATS match for a tracked application
    report    Show the ATS match report of an application
    profile   Show or replace the résumé profile (text or PDF)
    export    Write a JSON backup of all data
    import    Restore data from a JSON backup

Examples:
    python -m jobhunt add --title "Backend Engineer" --company "Acme Corp" --url https://... --fetch --scan
    python -m jobhunt list --search acme --window week
    python -m jobhunt status 3f2a9c1b0d4e Interviewing
    python -m jobhunt profile --pdf ~/resume.pdf
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from jobhunt.ai import AIClient, ExtractionError, FetchError
from jobhunt.backup import MalformedBackupError, export_backup, import_backup
from jobhunt.config import Settings, ensure_dirs, load_settings
from jobhunt.drafts import fetch_description, new_draft, scan_draft, submit
from jobhunt.log import get_logger, set_console_level
from jobhunt.models import (
    Application,
    FilterState,
    MatchReport,
    SortOrder,
    Status,
    TimeWindow,
    ValidationError,
    parse_date,
    parse_platform,
    parse_status,
    parse_window,
)
from jobhunt.profile import ProfileManager
from jobhunt.stats import compute_stats, filter_and_sort, local_today, status_breakdown
from jobhunt.store import FileStore
from jobhunt.tracker import ApplicationTracker

log = get_logger(__name__)

SCAN_FAILED = "Failed to analyze. Check your API key or connection."


@dataclass
class Context:
    settings: Settings
    tracker: ApplicationTracker
    profiles: ProfileManager
    _ai: AIClient | None = field(default=None, repr=False)

    @classmethod
    def open(cls, settings: Settings) -> Context:
        ensure_dirs(settings)
        store = FileStore(settings.data_dir)
        tracker = ApplicationTracker(store)
        tracker.load()
        profiles = ProfileManager(store)
        profiles.load()
        return cls(settings=settings, tracker=tracker, profiles=profiles)

    @property
    def ai(self) -> AIClient:
        if self._ai is None:
            self._ai = AIClient(self.settings)
        return self._ai

    def today(self) -> date:
        return local_today(tz=self.settings.timezone)


# ── Formatting ───────────────────────────────────────────────────────────


def format_display_date(applied: date, today: date) -> str:
    days = (today - applied).days
    if days == 0:
        return "Today"
    if days == 1:
        return "Yesterday"
    if 1 < days < 7:
        return f"{days} days ago"
    return f"{applied:%b} {applied.day}, {applied.year}"


def _print_app(app: Application, today: date) -> None:
    score = f"{app.ats_report.score}%" if app.ats_report else "N/A"
    print(f"\n  {app.job_title} @ {app.company_name}")
    where = f" | {app.location}" if app.location else ""
    print(f"     {format_display_date(app.applied_date, today)} | {app.platform.value}{where}")
    print(f"     Status: {app.status.value} | ATS: {score} | ID: {app.id}")


def _print_report(report: MatchReport) -> None:
    print(f"\n  Match Report: {report.score}%")
    print(f"\n  Strengths:        {', '.join(report.strengths) or '—'}")
    print(f"  Missing Keywords: {', '.join(report.missing_keywords) or '—'}")
    print(f"\n  AI Suggestion:\n    {report.suggestions}")


def _ask_yn(prompt: str, default: bool = False) -> bool:
    hint = "Y/n" if default else "y/N"
    val = input(f"  {prompt} ({hint}): ").strip().lower()
    if not val:
        return default
    return val in ("y", "yes")


def _read_text_arg(value: str) -> str:
    if value == "-":
        return sys.stdin.read()
    return Path(value).expanduser().read_text(encoding="utf-8")


def _require(ctx: Context, app_id: str) -> Application:
    app = ctx.tracker.get(app_id)
    if app is None:
        raise ValidationError(f"Application {app_id} not found")
    return app


# ── Commands ─────────────────────────────────────────────────────────────


async def _prepare_draft(draft, ctx: Context, *, fetch: bool, scan: bool) -> None:
    if fetch:
        try:
            await fetch_description(draft, ctx.ai)
            print(f"  ✓ Pulled job description ({len(draft.job_description)} chars)")
        except (FetchError, ValidationError) as exc:
            print(f"  ⚠ {exc}")
    if scan:
        try:
            report = await scan_draft(draft, ctx.profiles.resume_text, ctx.ai)
        except ValidationError as exc:
            print(f"  ⚠ {exc}")
            return
        if report is None:
            print(f"  ⚠ {SCAN_FAILED}")
        else:
            print(f"  ✓ ATS match: {report.score}%")


def cmd_add(args, ctx: Context) -> int:
    draft = new_draft(
        ctx.today(),
        job_title=args.title or "",
        company_name=args.company or "",
        location=args.location or "",
        notes=args.notes or "",
        salary=args.salary or "",
        job_url=args.url or "",
        job_description=_read_text_arg(args.description_file) if args.description_file else (args.description or ""),
    )
    if args.platform:
        draft.platform = args.platform
    if args.status:
        draft.status = args.status
    if args.date:
        draft.applied_date = args.date
    draft.validate()

    if args.fetch or args.scan:
        asyncio.run(_prepare_draft(draft, ctx, fetch=args.fetch, scan=args.scan))

    app = submit(draft, ctx.tracker)
    print(f"  ✓ Tracking {app.job_title} @ {app.company_name} (ID: {app.id})")
    return 0


def cmd_list(args, ctx: Context) -> int:
    state = FilterState(
        query=args.search or "",
        status=args.status,
        window=args.window,
        sort=SortOrder.ASC if args.asc else SortOrder.DESC,
    )
    today = ctx.today()
    apps = filter_and_sort(ctx.tracker.applications, state, today)
    print(f"\n  Applications ({len(apps)} of {len(ctx.tracker)})")
    print("  " + "-" * 60)
    if not apps:
        print("\n  No applications found.")
        return 0
    for app in apps:
        _print_app(app, today)
    print()
    return 0


def cmd_stats(args, ctx: Context) -> int:
    apps = ctx.tracker.applications
    stats = compute_stats(apps, ctx.today())
    print("\n  Application Statistics")
    print("  " + "=" * 30)
    print(f"  Applied Today:  {stats.today}")
    print(f"  Last 7 Days:    {stats.week}")
    print(f"  Last 30 Days:   {stats.month}")
    print(f"  Total Year:     {stats.year}")
    print("\n  By Status:")
    for status, count in status_breakdown(apps).items():
        print(f"    {status.value:<13} {count}")
    return 0


def cmd_status(args, ctx: Context) -> int:
    app = ctx.tracker.update_status(args.id, args.new_status)
    if app is None:
        print(f"  ✗ Application {args.id} not found")
        return 1
    print(f"  ✓ {app.company_name} → {app.status.value}")
    return 0


def cmd_delete(args, ctx: Context) -> int:
    app = _require(ctx, args.id)
    if not args.yes and not _ask_yn(f"Remove {app.job_title} @ {app.company_name}?"):
        print("  Kept.")
        return 0
    ctx.tracker.delete(app.id)
    print("  ✓ Removed")
    return 0


def cmd_scan(args, ctx: Context) -> int:
    app = _require(ctx, args.id)
    if not ctx.profiles.resume_text.strip():
        raise ValidationError("Please save your resume in the Profile section first!")
    if not (app.job_description or "").strip():
        raise ValidationError("This application has no job description to scan against.")
    report = asyncio.run(ctx.ai.compute_match_report(ctx.profiles.resume_text, app.job_description))
    if report is None:
        print(f"  ✗ {SCAN_FAILED}")
        return 1
    ctx.tracker.attach_report(app.id, report)
    _print_report(report)
    return 0


def cmd_report(args, ctx: Context) -> int:
    app = _require(ctx, args.id)
    if app.ats_report is None:
        print(f"  No match report for {app.job_title} @ {app.company_name}")
        return 1
    _print_report(app.ats_report)
    return 0


def cmd_profile(args, ctx: Context) -> int:
    if args.pdf:
        data = Path(args.pdf).expanduser().read_bytes()
        print("  AI Scanning...")
        profile = asyncio.run(ctx.profiles.upload_pdf(data, ctx.ai))
        print(f"  ✓ Resume Updated! ({len(profile.resume_text)} chars)")
    elif args.text:
        profile = ctx.profiles.save_text(_read_text_arg(args.text))
        print(f"  ✓ Profile saved ({len(profile.resume_text)} chars)")
    else:
        text = ctx.profiles.resume_text
        print(text if text else "  (no résumé saved — use --text FILE or --pdf FILE)")
    return 0


def cmd_export(args, ctx: Context) -> int:
    directory = Path(args.dir).expanduser() if args.dir else ctx.settings.backup_dir
    path = export_backup(ctx.tracker, ctx.profiles, directory)
    print(f"  ✓ Backup written → {path}")
    return 0


def cmd_import(args, ctx: Context) -> int:
    data = Path(args.file).expanduser().read_bytes()
    apps_done, profile_done = import_backup(data, ctx.tracker, ctx.profiles)
    restored = [name for name, done in (("applications", apps_done), ("profile", profile_done)) if done]
    if restored:
        print(f"  ✓ Success! Restored {' and '.join(restored)}.")
    else:
        print("  Nothing to restore in that file.")
    return 0


COMMANDS = {
    "add": cmd_add,
    "list": cmd_list,
    "stats": cmd_stats,
    "status": cmd_status,
    "delete": cmd_delete,
    "scan": cmd_scan,
    "report": cmd_report,
    "profile": cmd_profile,
    "export": cmd_export,
    "import": cmd_import,
}


def _status_filter(value: str) -> Status | None:
    if value.strip().lower() == "all":
        return None
    return parse_status(value)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jobhunt",
        description="JobHunt — job application tracker with ATS match reports",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More log output (-vv for debug)")
    sub = parser.add_subparsers(dest="command", help="Available commands")

    statuses = ", ".join(s.value for s in Status)

    add = sub.add_parser("add", help="Track a new application")
    add.add_argument("--title", "-t", help="Job title")
    add.add_argument("--company", "-c", help="Company name")
    add.add_argument("--platform", "-p", type=parse_platform, help="LinkedIn, Indeed, Glassdoor, Company Site, ...")
    add.add_argument("--status", "-s", type=parse_status, help=statuses)
    add.add_argument("--date", "-d", type=parse_date, help="Applied date YYYY-MM-DD (default: today)")
    add.add_argument("--location", "-l")
    add.add_argument("--notes")
    add.add_argument("--salary")
    add.add_argument("--url", "-u", help="Job posting URL")
    add.add_argument("--description", help="Job description text")
    add.add_argument("--description-file", help="Read the job description from a file ('-' for stdin)")
    add.add_argument("--fetch", action="store_true", help="Pull the description from --url")
    add.add_argument("--scan", action="store_true", help="Run the ATS scan before saving")

    ls = sub.add_parser("list", help="List applications")
    ls.add_argument("--search", "-q", help="Match title, company or location")
    ls.add_argument("--status", "-s", type=_status_filter, default=None, help=f"all, {statuses}")
    ls.add_argument(
        "--window", "-w", type=parse_window, default=TimeWindow.ALL,
        help="today, week, month, year or all",
    )
    ls.add_argument("--asc", action="store_true", help="Oldest first")

    sub.add_parser("stats", help="Application counts")

    st = sub.add_parser("status", help="Change application status")
    st.add_argument("id")
    st.add_argument("new_status", type=parse_status, metavar="STATUS", help=statuses)

    dl = sub.add_parser("delete", help="Remove an application")
    dl.add_argument("id")
    dl.add_argument("--yes", "-y", action="store_true", help="Skip the confirmation prompt")

    sc = sub.add_parser("scan", help="Re-run the ATS match for an application")
    sc.add_argument("id")

    rp = sub.add_parser("report", help="Show an application's match report")
    rp.add_argument("id")

    pr = sub.add_parser("profile", help="Show or replace the résumé profile")
    group = pr.add_mutually_exclusive_group()
    group.add_argument("--show", action="store_true", help="Print the saved résumé text")
    group.add_argument("--text", help="Replace the résumé with a text file ('-' for stdin)")
    group.add_argument("--pdf", help="Replace the résumé with text extracted from a PDF")

    ex = sub.add_parser("export", help="Write a JSON backup")
    ex.add_argument("--dir", help="Output directory (default: backups/)")

    im = sub.add_parser("import", help="Restore from a JSON backup")
    im.add_argument("file")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        set_console_level(logging.DEBUG if args.verbose > 1 else logging.INFO)

    if not args.command:
        parser.print_help()
        return 1

    log.debug("Running command: %s", args.command)
    try:
        ctx = Context.open(load_settings())
        return COMMANDS[args.command](args, ctx)
    except (ValidationError, ExtractionError, FetchError) as exc:
        print(f"  ✗ {exc}")
        return 1
    except MalformedBackupError as exc:
        print(f"  ✗ Error: {exc}")
        return 1
    except UnicodeDecodeError as exc:
        print(f"  ✗ Not a UTF-8 text file: {exc.reason}")
        return 1
    except OSError as exc:
        print(f"  ✗ {exc}")
        return 1
    except KeyboardInterrupt:
        print("\n\nOperation cancelled.")
        return 130


if __name__ == "__main__":
    sys.exit(main())
