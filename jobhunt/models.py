"""Data models for tracked applications, the résumé profile and match reports.

Records serialize to the camelCase JSON shape used by the local store and by
backup files, so existing JobHunt backups stay importable.
"""
from __future__ import annotations

import re
import uuid
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any


class ValidationError(ValueError):
    """Input rejected at the boundary (missing field, unknown enum value, bad date)."""


class Status(Enum):
    APPLIED = "Applied"
    SCREENING = "Screening"
    INTERVIEWING = "Interviewing"
    OFFER = "Offer"
    REJECTED = "Rejected"
    GHOSTED = "Ghosted"


class Platform(Enum):
    LINKEDIN = "LinkedIn"
    INDEED = "Indeed"
    GLASSDOOR = "Glassdoor"
    COMPANY_SITE = "Company Site"
    REFERRAL = "Referral"
    GREENHOUSE = "Greenhouse"
    LEVER = "Lever"
    OTHER = "Other"


class TimeWindow(Enum):
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    ALL = "all"


class SortOrder(Enum):
    DESC = "desc"
    ASC = "asc"


_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

NO_SUGGESTIONS = "No specific suggestions."


def _parse_enum(enum_cls: type[Enum], value: Any) -> Any:
    if isinstance(value, enum_cls):
        return value
    text = str(value or "").strip()
    for member in enum_cls:
        if text.lower() in (member.value.lower(), member.name.lower()):
            return member
    choices = ", ".join(m.value for m in enum_cls)
    raise ValidationError(f"Invalid {enum_cls.__name__.lower()}: {value!r} (expected one of: {choices})")


def parse_status(value: Any) -> Status:
    return _parse_enum(Status, value)


def parse_platform(value: Any) -> Platform:
    return _parse_enum(Platform, value)


def parse_window(value: Any) -> TimeWindow:
    return _parse_enum(TimeWindow, value)


def parse_date(value: Any) -> date:
    """Parse a calendar date in strict ``YYYY-MM-DD`` form."""
    if isinstance(value, date):
        return value
    text = str(value or "").strip()
    if not _DATE_RE.match(text):
        raise ValidationError(f"Invalid date {value!r}: expected YYYY-MM-DD")
    try:
        return date.fromisoformat(text)
    except ValueError as exc:
        raise ValidationError(f"Invalid date {value!r}: {exc}") from exc


def new_id() -> str:
    return uuid.uuid4().hex[:12]


def _opt_str(data: dict, key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"Field {key!r} must be a string")
    return value or None


def _str_list(data: dict, key: str) -> tuple[str, ...]:
    value = data.get(key) or []
    if not isinstance(value, list):
        raise ValidationError(f"Field {key!r} must be a list")
    return tuple(str(v) for v in value)


@dataclass(frozen=True)
class MatchReport:
    score: int
    missing_keywords: tuple[str, ...] = ()
    strengths: tuple[str, ...] = ()
    suggestions: str = NO_SUGGESTIONS

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "missingKeywords": list(self.missing_keywords),
            "strengths": list(self.strengths),
            "suggestions": self.suggestions,
        }

    @classmethod
    def from_dict(cls, data: Any) -> MatchReport:
        """Build a report from stored or model-produced JSON.

        Missing parts fall back to empty values; the score is clamped to 0-100.
        """
        if not isinstance(data, dict):
            raise ValidationError("Match report must be an object")
        raw_score = data.get("score") or 0
        try:
            score = int(round(float(raw_score)))
        except (TypeError, ValueError, OverflowError) as exc:
            raise ValidationError(f"Invalid match score: {raw_score!r}") from exc
        return cls(
            score=max(0, min(100, score)),
            missing_keywords=_str_list(data, "missingKeywords"),
            strengths=_str_list(data, "strengths"),
            suggestions=str(data.get("suggestions") or NO_SUGGESTIONS),
        )


@dataclass
class UserProfile:
    resume_text: str = ""

    def to_dict(self) -> dict:
        return {"resumeText": self.resume_text}

    @classmethod
    def from_dict(cls, data: Any) -> UserProfile:
        if not isinstance(data, dict):
            raise ValidationError("Profile must be an object")
        text = data.get("resumeText") or ""
        if not isinstance(text, str):
            raise ValidationError("Field 'resumeText' must be a string")
        return cls(resume_text=text)


@dataclass
class Application:
    id: str
    job_title: str
    company_name: str
    platform: Platform
    status: Status
    applied_date: date
    location: str | None = None
    notes: str | None = None
    salary: str | None = None
    job_url: str | None = None
    job_description: str | None = None
    ats_report: MatchReport | None = None

    def to_dict(self) -> dict:
        data: dict[str, Any] = {
            "id": self.id,
            "jobTitle": self.job_title,
            "companyName": self.company_name,
            "platform": self.platform.value,
            "status": self.status.value,
            "appliedDate": self.applied_date.isoformat(),
        }
        optional = {
            "jobUrl": self.job_url,
            "notes": self.notes,
            "location": self.location,
            "salary": self.salary,
            "jobDescription": self.job_description,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        if self.ats_report is not None:
            data["atsReport"] = self.ats_report.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Any) -> Application:
        if not isinstance(data, dict):
            raise ValidationError("Application must be an object")
        for key in ("id", "jobTitle", "companyName"):
            if not isinstance(data.get(key), str) or not data[key]:
                raise ValidationError(f"Application is missing {key!r}")
        report = data.get("atsReport")
        return cls(
            id=data["id"],
            job_title=data["jobTitle"],
            company_name=data["companyName"],
            platform=parse_platform(data.get("platform")),
            status=parse_status(data.get("status")),
            applied_date=parse_date(data.get("appliedDate")),
            location=_opt_str(data, "location"),
            notes=_opt_str(data, "notes"),
            salary=_opt_str(data, "salary"),
            job_url=_opt_str(data, "jobUrl"),
            job_description=_opt_str(data, "jobDescription"),
            ats_report=MatchReport.from_dict(report) if report else None,
        )


@dataclass
class ApplicationDraft:
    """Form payload for an application that has not been created yet.

    ``applied_date`` has no default: the caller passes its local date (see
    ``drafts.new_draft``) so the draft agrees with the configured time zone.
    """
    job_title: str = ""
    company_name: str = ""
    platform: Platform = Platform.LINKEDIN
    status: Status = Status.APPLIED
    applied_date: date | None = None
    location: str = ""
    notes: str = ""
    salary: str = ""
    job_url: str = ""
    job_description: str = ""
    ats_report: MatchReport | None = None

    def validate(self) -> None:
        if not self.job_title.strip():
            raise ValidationError("Job title is required")
        if not self.company_name.strip():
            raise ValidationError("Company name is required")
        if self.applied_date is None:
            raise ValidationError("Applied date is required")

    def to_application(self, app_id: str) -> Application:
        self.validate()
        return Application(
            id=app_id,
            job_title=self.job_title.strip(),
            company_name=self.company_name.strip(),
            platform=self.platform,
            status=self.status,
            applied_date=self.applied_date,
            location=self.location.strip() or None,
            notes=self.notes.strip() or None,
            salary=self.salary.strip() or None,
            job_url=self.job_url.strip() or None,
            job_description=self.job_description.strip() or None,
            ats_report=self.ats_report,
        )


@dataclass
class FilterState:
    """Transient list view state; never persisted. ``status=None`` means all."""
    query: str = ""
    status: Status | None = None
    window: TimeWindow = TimeWindow.ALL
    sort: SortOrder = SortOrder.DESC

    def toggle_window(self, window: TimeWindow) -> TimeWindow:
        self.window = TimeWindow.ALL if self.window == window else window
        return self.window

    def toggle_sort(self) -> SortOrder:
        self.sort = SortOrder.ASC if self.sort == SortOrder.DESC else SortOrder.DESC
        return self.sort
