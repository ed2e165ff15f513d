"""
Tests for the résumé profile and the add-application draft flow
"""
import json
from datetime import date
from unittest.mock import AsyncMock, patch

import pytest

from jobhunt import store as kv
from jobhunt.ai import ExtractionError, FetchError
from jobhunt.drafts import (
    NEED_DESCRIPTION,
    NEED_RESUME,
    NEED_URL,
    fetch_description,
    new_draft,
    scan_draft,
    submit,
)
from jobhunt.models import MatchReport, ValidationError
from jobhunt.profile import ProfileManager


class TestProfile:
    def test_save_text_persists(self, profiles, memory_store):
        profiles.save_text("Jane Doe\nPython engineer")
        assert json.loads(memory_store.records[kv.PROFILE_KEY]) == {"resumeText": "Jane Doe\nPython engineer"}

        reloaded = ProfileManager(memory_store)
        assert reloaded.load().resume_text == "Jane Doe\nPython engineer"

    def test_clearing_text_is_allowed(self, profiles):
        profiles.save_text("old")
        profiles.save_text("")
        assert profiles.resume_text == ""

    @pytest.mark.asyncio
    async def test_upload_pdf_replaces_text(self, profiles, ai):
        profiles.save_text("old résumé")
        with patch("jobhunt.ai._read_pdf", return_value="New résumé from PDF"):
            await profiles.upload_pdf(b"%PDF-1.7", ai)
        assert profiles.resume_text == "New résumé from PDF"

    @pytest.mark.asyncio
    async def test_failed_upload_keeps_existing_profile(self, profiles, ai, memory_store):
        profiles.save_text("keep me")
        before = memory_store.records[kv.PROFILE_KEY]

        with patch("jobhunt.ai._read_pdf", side_effect=ValueError("not a PDF")):
            with pytest.raises(ExtractionError):
                await profiles.upload_pdf(b"garbage", ai)

        assert profiles.resume_text == "keep me"
        assert memory_store.records[kv.PROFILE_KEY] == before


class TestNewDraft:
    def test_defaults_to_given_today(self, today):
        assert new_draft(today).applied_date == today

    def test_explicit_date_wins(self, today):
        assert new_draft(today, applied_date=date(2024, 1, 2)).applied_date == date(2024, 1, 2)


class TestFetchDescription:
    @pytest.mark.asyncio
    async def test_fills_description(self, today):
        ai = AsyncMock()
        ai.fetch_job_description.return_value = "Build APIs in Go."
        draft = new_draft(today, job_url="https://jobs.example.com/42")

        await fetch_description(draft, ai)

        assert draft.job_description == "Build APIs in Go."
        ai.fetch_job_description.assert_awaited_once_with("https://jobs.example.com/42")

    @pytest.mark.asyncio
    async def test_requires_url(self, today):
        ai = AsyncMock()
        with pytest.raises(ValidationError, match=NEED_URL):
            await fetch_description(new_draft(today, job_url="  "), ai)
        ai.fetch_job_description.assert_not_called()

    @pytest.mark.asyncio
    async def test_failure_leaves_description_unchanged(self, today):
        ai = AsyncMock()
        ai.fetch_job_description.side_effect = FetchError("blocked")
        draft = new_draft(today, job_url="https://jobs.example.com/42", job_description="pasted by hand")

        with pytest.raises(FetchError):
            await fetch_description(draft, ai)
        assert draft.job_description == "pasted by hand"


class TestScanDraft:
    @pytest.mark.asyncio
    async def test_attaches_report(self, today, sample_report):
        ai = AsyncMock()
        ai.compute_match_report.return_value = sample_report
        draft = new_draft(today, job_description="Need Python")

        assert await scan_draft(draft, "Python dev", ai) is sample_report
        assert draft.ats_report is sample_report
        ai.compute_match_report.assert_awaited_once_with("Python dev", "Need Python")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("resume,description,message", [
        ("", "Need Python", NEED_RESUME),
        ("Python dev", "   ", NEED_DESCRIPTION),
    ])
    async def test_missing_inputs(self, today, resume, description, message):
        ai = AsyncMock()
        draft = new_draft(today, job_description=description)
        with pytest.raises(ValidationError) as exc_info:
            await scan_draft(draft, resume, ai)
        assert str(exc_info.value) == message
        ai.compute_match_report.assert_not_called()

    @pytest.mark.asyncio
    async def test_failed_scan_keeps_previous_report(self, today, sample_report):
        ai = AsyncMock()
        ai.compute_match_report.return_value = None
        draft = new_draft(today, job_description="Need Python", ats_report=sample_report)

        assert await scan_draft(draft, "Python dev", ai) is None
        assert draft.ats_report is sample_report


class TestSubmit:
    def test_tracks_draft_with_its_report(self, today, tracker):
        report = MatchReport(score=55, missing_keywords=("SQL",))
        draft = new_draft(
            today, job_title="Analyst", company_name="Other Inc",
            job_description="SQL heavy", ats_report=report,
        )

        app = submit(draft, tracker)

        assert tracker.applications == [app]
        assert app.applied_date == today
        assert app.ats_report == report
        assert app.job_description == "SQL heavy"

    def test_invalid_draft_is_not_tracked(self, today, tracker):
        with pytest.raises(ValidationError):
            submit(new_draft(today, company_name="Acme"), tracker)
        assert len(tracker) == 0
