"""
Tests for records, enum parsing and the interchange format
"""
from datetime import date

import pytest

from jobhunt.models import (
    NO_SUGGESTIONS,
    Application,
    ApplicationDraft,
    FilterState,
    MatchReport,
    Platform,
    SortOrder,
    Status,
    TimeWindow,
    UserProfile,
    ValidationError,
    parse_date,
    parse_platform,
    parse_status,
    parse_window,
)


class TestEnumParsing:
    def test_status_accepts_value_and_name_case_insensitively(self):
        assert parse_status("Interviewing") is Status.INTERVIEWING
        assert parse_status("ghosted") is Status.GHOSTED
        assert parse_status(Status.OFFER) is Status.OFFER

    def test_platform_with_space(self):
        assert parse_platform("Company Site") is Platform.COMPANY_SITE
        assert parse_platform("company_site") is Platform.COMPANY_SITE

    def test_unknown_values_are_rejected(self):
        with pytest.raises(ValidationError, match="Invalid status"):
            parse_status("Hired")
        with pytest.raises(ValidationError):
            parse_platform("Monster")
        with pytest.raises(ValidationError):
            parse_window("decade")

    def test_closed_sets(self):
        assert len(Status) == 6
        assert len(Platform) == 8
        assert parse_window("WEEK") is TimeWindow.WEEK


class TestParseDate:
    def test_valid(self):
        assert parse_date("2024-02-29") == date(2024, 2, 29)

    @pytest.mark.parametrize("value", ["2023-02-29", "2024/06/01", "20240601", "", None, "2024-6-1"])
    def test_invalid(self, value):
        with pytest.raises(ValidationError):
            parse_date(value)


class TestMatchReport:
    def test_from_model_output_fills_defaults(self):
        report = MatchReport.from_dict({"score": 64.6, "missingKeywords": ["Go"]})
        assert report.score == 65
        assert report.missing_keywords == ("Go",)
        assert report.strengths == ()
        assert report.suggestions == NO_SUGGESTIONS

    def test_score_is_clamped(self):
        assert MatchReport.from_dict({"score": 140}).score == 100
        assert MatchReport.from_dict({"score": -3}).score == 0

    @pytest.mark.parametrize("score", [float("inf"), float("-inf"), "inf", float("nan")])
    def test_non_finite_score_is_rejected(self, score):
        with pytest.raises(ValidationError, match="Invalid match score"):
            MatchReport.from_dict({"score": score})

    def test_bad_shapes(self):
        with pytest.raises(ValidationError):
            MatchReport.from_dict({"score": "high"})
        with pytest.raises(ValidationError):
            MatchReport.from_dict({"score": 50, "strengths": "Python"})
        with pytest.raises(ValidationError):
            MatchReport.from_dict(["score", 50])

    def test_is_immutable(self, sample_report):
        with pytest.raises(AttributeError):
            sample_report.score = 10


class TestApplicationSerialization:
    def test_uses_camel_case_keys_and_omits_absent_fields(self, make_app):
        data = make_app(location="Remote").to_dict()
        assert data == {
            "id": data["id"],
            "jobTitle": "Backend Engineer",
            "companyName": "Acme Corp",
            "platform": "LinkedIn",
            "status": "Applied",
            "appliedDate": "2024-06-10",
            "location": "Remote",
        }

    def test_reads_back_with_report(self, make_app, sample_report):
        app = make_app(notes="Referred by Sam", ats_report=sample_report)
        assert Application.from_dict(app.to_dict()) == app

    def test_unknown_fields_are_ignored(self):
        app = Application.from_dict({
            "id": "x1", "jobTitle": "QA", "companyName": "Other Inc",
            "platform": "Lever", "status": "Offer", "appliedDate": "2024-01-02",
            "jobUrl": "", "favourite": True,
        })
        assert app.job_url is None
        assert app.platform is Platform.LEVER

    def test_invalid_status_is_rejected(self):
        with pytest.raises(ValidationError):
            Application.from_dict({
                "id": "x1", "jobTitle": "QA", "companyName": "Other Inc",
                "platform": "Lever", "status": "Hired", "appliedDate": "2024-01-02",
            })

    def test_profile(self):
        assert UserProfile.from_dict({}).resume_text == ""
        assert UserProfile.from_dict({"resumeText": "CV"}).to_dict() == {"resumeText": "CV"}


class TestApplicationDraft:
    def test_defaults(self):
        draft = ApplicationDraft()
        assert draft.platform is Platform.LINKEDIN
        assert draft.status is Status.APPLIED
        assert draft.ats_report is None
        assert draft.applied_date is None

    def test_requires_applied_date(self):
        with pytest.raises(ValidationError, match="Applied date is required"):
            ApplicationDraft(job_title="Engineer", company_name="Acme").validate()

    @pytest.mark.parametrize("title,company,message", [
        ("", "Acme", "Job title"),
        ("Engineer", "   ", "Company name"),
    ])
    def test_requires_title_and_company(self, title, company, message):
        with pytest.raises(ValidationError, match=message):
            ApplicationDraft(job_title=title, company_name=company).validate()

    def test_blank_optionals_become_none(self):
        app = ApplicationDraft(
            job_title=" Engineer ", company_name="Acme", location="  ", notes="call back",
            applied_date=date(2024, 6, 1),
        ).to_application("id1")
        assert app.job_title == "Engineer"
        assert app.location is None
        assert app.notes == "call back"


class TestFilterState:
    def test_toggling_active_window_returns_to_all(self):
        state = FilterState()
        assert state.toggle_window(TimeWindow.WEEK) is TimeWindow.WEEK
        assert state.toggle_window(TimeWindow.MONTH) is TimeWindow.MONTH
        assert state.toggle_window(TimeWindow.MONTH) is TimeWindow.ALL

    def test_toggle_sort(self):
        state = FilterState()
        assert state.sort is SortOrder.DESC
        assert state.toggle_sort() is SortOrder.ASC
        assert state.toggle_sort() is SortOrder.DESC
