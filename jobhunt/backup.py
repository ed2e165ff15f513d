"""Export the whole pipeline to a JSON backup file and restore it again."""
from __future__ import annotations

import json
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

from jobhunt.log import get_logger
from jobhunt.models import Application, UserProfile, ValidationError
from jobhunt.profile import ProfileManager
from jobhunt.tracker import ApplicationTracker

log = get_logger(__name__)


class MalformedBackupError(ValueError):
    pass


def backup_filename(today: date) -> str:
    return f"jobhunt_pro_backup_{today.isoformat()}.json"


def build_backup(
    apps: list[Application], profile: UserProfile, now: datetime | None = None
) -> dict[str, Any]:
    now = now or datetime.now(timezone.utc)
    return {
        "applications": [a.to_dict() for a in apps],
        "userProfile": profile.to_dict(),
        "exportDate": now.astimezone(timezone.utc).isoformat().replace("+00:00", "Z"),
    }


def export_backup(
    tracker: ApplicationTracker,
    profiles: ProfileManager,
    directory: Path,
    now: datetime | None = None,
) -> Path:
    now = now or datetime.now(timezone.utc)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / backup_filename(now.astimezone(timezone.utc).date())
    doc = build_backup(tracker.applications, profiles.profile, now)
    path.write_text(json.dumps(doc, indent=2, ensure_ascii=False), encoding="utf-8")
    log.info("Exported %d applications → %s", len(doc["applications"]), path)
    return path


def parse_backup(text: str | bytes) -> tuple[list[Application] | None, UserProfile | None]:
    """Decode a backup; each part is None when its field is absent.

    Raises MalformedBackupError if anything present cannot be decoded, so a
    bad document never applies partially.
    """
    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise MalformedBackupError(f"Invalid backup file format: not UTF-8 text ({exc.reason})") from exc
    try:
        data = json.loads(text)
    except ValueError as exc:
        raise MalformedBackupError(f"Invalid backup file format: {exc}") from exc
    if not isinstance(data, dict):
        raise MalformedBackupError("Invalid backup file format: expected a JSON object")

    apps: list[Application] | None = None
    profile: UserProfile | None = None
    try:
        raw_apps = data.get("applications")
        if raw_apps is not None:
            if not isinstance(raw_apps, list):
                raise ValidationError("'applications' must be a list")
            apps = [Application.from_dict(item) for item in raw_apps]
        raw_profile = data.get("userProfile")
        if raw_profile is not None:
            profile = UserProfile.from_dict(raw_profile)
    except ValidationError as exc:
        raise MalformedBackupError(f"Invalid backup file format: {exc}") from exc

    ids = [a.id for a in apps or []]
    if len(ids) != len(set(ids)):
        raise MalformedBackupError("Invalid backup file format: duplicate application ids")
    return apps, profile


def import_backup(
    text: str | bytes, tracker: ApplicationTracker, profiles: ProfileManager
) -> tuple[bool, bool]:
    """Restore state from *text*; returns (applications_restored, profile_restored)."""
    apps, profile = parse_backup(text)
    if apps is not None:
        tracker.replace_all(apps)
    if profile is not None:
        profiles.replace(profile)
    log.info(
        "Import complete: applications=%s, profile=%s",
        "restored" if apps is not None else "unchanged",
        "restored" if profile is not None else "unchanged",
    )
    return apps is not None, profile is not None
