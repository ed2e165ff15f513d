"""Prepare an application before it is tracked: pull its description, scan it."""
from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from jobhunt.log import get_logger
from jobhunt.models import Application, ApplicationDraft, MatchReport, ValidationError

if TYPE_CHECKING:
    from jobhunt.ai import AIClient
    from jobhunt.tracker import ApplicationTracker

log = get_logger(__name__)

NEED_RESUME = "Please save your resume in the Profile section first!"
NEED_DESCRIPTION = "Please provide the Job Description first (paste it or use 'Fetch from URL')."
NEED_URL = "Please provide a valid Job URL first."


def new_draft(today: date, **fields) -> ApplicationDraft:
    """Blank draft dated *today* (the caller's local date) unless a date is given."""
    fields.setdefault("applied_date", today)
    return ApplicationDraft(**fields)


async def fetch_description(draft: ApplicationDraft, ai: AIClient) -> str:
    """Fill the draft's description from its URL.

    On FetchError the description is left as it was and the error propagates.
    """
    if not draft.job_url.strip():
        raise ValidationError(NEED_URL)
    text = await ai.fetch_job_description(draft.job_url)
    draft.job_description = text
    return text


async def scan_draft(draft: ApplicationDraft, resume_text: str, ai: AIClient) -> MatchReport | None:
    """Run the ATS scan and attach the report; None means the scan failed."""
    if not resume_text.strip():
        raise ValidationError(NEED_RESUME)
    if not draft.job_description.strip():
        raise ValidationError(NEED_DESCRIPTION)
    report = await ai.compute_match_report(resume_text, draft.job_description)
    if report is None:
        log.debug("Scan produced no report; draft keeps %s", "its previous report" if draft.ats_report else "no report")
        return None
    draft.ats_report = report
    return report


def submit(draft: ApplicationDraft, tracker: ApplicationTracker) -> Application:
    return tracker.create(draft)
