"""Shared fixtures for the test suite."""
import os

os.environ.setdefault("JOBHUNT_NO_LOG_FILE", "1")

from datetime import date
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest

from jobhunt.ai import AIClient
from jobhunt.config import Settings
from jobhunt.models import Application, MatchReport, Platform, Status
from jobhunt.profile import ProfileManager
from jobhunt.store import MemoryStore
from jobhunt.tracker import ApplicationTracker


@pytest.fixture
def today():
    return date(2024, 6, 15)


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def tracker(memory_store):
    t = ApplicationTracker(memory_store)
    t.load()
    return t


@pytest.fixture
def profiles(memory_store):
    p = ProfileManager(memory_store)
    p.load()
    return p


@pytest.fixture
def make_app():
    counter = iter(range(1, 10_000))

    def _make(
        company="Acme Corp",
        title="Backend Engineer",
        applied="2024-06-10",
        status=Status.APPLIED,
        location=None,
        **extra,
    ) -> Application:
        return Application(
            id=extra.pop("id", f"app{next(counter)}"),
            job_title=title,
            company_name=company,
            platform=extra.pop("platform", Platform.LINKEDIN),
            status=status,
            applied_date=date.fromisoformat(applied),
            location=location,
            **extra,
        )

    return _make


@pytest.fixture
def sample_report():
    return MatchReport(
        score=78,
        missing_keywords=("Kubernetes", "Terraform"),
        strengths=("Python", "REST APIs", "PostgreSQL"),
        suggestions="Mention infrastructure-as-code experience.",
    )


def completion(content: str) -> SimpleNamespace:
    """Shape of an OpenAI chat completion response, reduced to what the client reads."""
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture
def llm():
    client = Mock()
    client.chat.completions.create = AsyncMock(return_value=completion(""))
    return client


@pytest.fixture
def ai(llm):
    return AIClient(Settings(api_key="test-key"), client=llm)
