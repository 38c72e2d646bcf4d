"""Pytest fixtures for portfolio profile tests."""

import os
from collections.abc import AsyncIterator, Callable
from typing import Any
from unittest.mock import AsyncMock

import httpx
import pytest
import pytest_asyncio

from portfolio_profile.client import ProfileClient


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Set up test environment variables before any settings are loaded."""
    os.environ.setdefault("ENVIRONMENT", "test")
    os.environ.setdefault("LOG_TO_FILE", "false")

    from portfolio_profile.config import get_settings

    get_settings.cache_clear()

    yield

    get_settings.cache_clear()


def make_experience(
    company: str,
    start: str,
    end: str | None,
    technologies: list[str] | None = None,
    skill_ids: list[str] | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Build a camelCase experience payload."""
    data: dict[str, Any] = {
        "id": f"exp-{company.lower()}",
        "company": company,
        "position": "Engineer",
        "location": "Remote",
        "startDate": start,
        "isCurrent": end is None,
        "description": f"Work at {company}",
        "achievements": [],
        "technologies": technologies or [],
    }
    if end is not None:
        data["endDate"] = end
    if skill_ids is not None:
        data["skillIds"] = skill_ids
    data.update(extra)
    return data


@pytest.fixture
def profile_payload() -> dict[str, Any]:
    """A realistic profile payload as served by GET /api/profile."""
    return {
        "id": "profile-123",
        "name": "Ada Example",
        "title": "Software Engineer",
        "location": "Sydney, Australia",
        "bio": "Builds things.",
        "academics": [
            {
                "id": "academic-0",
                "institution": "UTS",
                "degree": "Master",
                "field": "Artificial Intelligence",
                "startDate": "2025-02-01",
            }
        ],
        "certifications": [],
        "contacts": [
            {"id": "c1", "type": "github", "value": "ada", "label": "GitHub", "isPrimary": False},
            {"id": "c2", "type": "email", "value": "ada@example.com", "label": "Email",
             "isPrimary": True},
            {"id": "c3", "type": "phone", "value": "123", "label": "Phone", "isPrimary": True},
        ],
        "experiences": [
            make_experience("Samsung", "2019-03-01", "2020-03-01", ["React", "TypeScript"]),
            make_experience("Apple", "2020-01-01", "2021-06-01", ["react"], skill_ids=["Swift"]),
            make_experience("Startup", "2023-01-01", None, ["Go"]),
        ],
        "honors": [],
        "languages": [{"id": "l1", "name": "English", "proficiency": "fluent"}],
        "learningSections": [
            {"id": "s2", "title": "Graphs", "slug": "graphs", "order": 2, "published": True,
             "items": [
                 {"id": "t2", "title": "DFS", "order": 2},
                 {"id": "t1", "title": "BFS", "order": 1},
             ]},
            {"id": "s3", "title": "Drafts", "slug": "drafts", "order": 3, "published": False},
            {"id": "s1", "title": "Arrays", "slug": "arrays", "order": 1, "published": True},
        ],
        "projects": [
            {"id": "p1", "title": "Old", "description": "done", "technologies": ["Swift"],
             "category": "mobile", "startDate": "2020-01-01", "endDate": "2020-06-01",
             "isActive": False, "achievements": []},
            {"id": "p2", "title": "Live", "description": "running", "technologies": ["React"],
             "category": "web", "startDate": "2023-01-01", "endDate": "2024-01-01",
             "isActive": True, "achievements": []},
            {"id": "p3", "title": "Ongoing", "description": "wip", "technologies": ["Go"],
             "category": "backend", "startDate": "2024-01-01", "isActive": False,
             "achievements": []},
            {"id": "p4", "title": "Also live", "description": "running", "technologies": [],
             "category": "web", "startDate": "2024-02-01", "isActive": True, "achievements": []},
            {"id": "p5", "title": "Fourth", "description": "extra", "technologies": [],
             "category": "ai", "startDate": "2024-03-01", "isActive": True, "achievements": []},
        ],
        "softSkills": [{"id": "ss1", "name": "Mentoring", "category": "leadership"}],
        "stats": [{"id": "st1", "label": "Projects", "value": 12}],
        "technicalSkills": [
            {"id": "ts1", "name": "React", "category": "framework", "proficiency": "expert",
             "yearsOfExperience": 1.0},
            {"id": "ts2", "name": "Go", "category": "language", "proficiency": "advanced"},
            {"id": "ts3", "name": "TypeScript", "category": "language",
             "proficiency": "expert", "yearsOfExperience": 5.0},
        ],
        "testimonials": [],
        "createdAt": "2024-01-01T00:00:00.000Z",
        "updatedAt": "2024-06-01T00:00:00.000Z",
    }


@pytest.fixture
def experience_factory() -> Callable[..., dict[str, Any]]:
    """Factory for camelCase experience payloads."""
    return make_experience


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeBackend:
    """Handler for ``httpx.MockTransport`` that records requests.

    Queued items are served in order and the last one repeats. An item is
    an ``httpx.Response`` or an ``httpx.RequestError`` subclass to raise.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._items: list[httpx.Response | type[httpx.RequestError]] = []

    def queue(self, *items: httpx.Response | type[httpx.RequestError]) -> None:
        self._items.extend(items)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        item = self._items.pop(0) if len(self._items) > 1 else self._items[0]
        if isinstance(item, type):
            raise item("simulated failure", request=request)
        # Fresh copy so a repeated item is never served twice
        return httpx.Response(item.status_code, headers=item.headers, content=item.content)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleep() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest_asyncio.fixture
async def http_client(backend: FakeBackend) -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(transport=httpx.MockTransport(backend)) as client:
        yield client


@pytest.fixture
def make_client(
    http_client: httpx.AsyncClient, clock: FakeClock, sleep: AsyncMock
) -> Callable[..., ProfileClient]:
    """Factory for a ProfileClient wired to the fake backend, clock and sleep."""

    def _make(**kwargs: Any) -> ProfileClient:
        kwargs.setdefault("base_url", "http://backend.test")
        return ProfileClient(http_client=http_client, clock=clock, sleep=sleep, **kwargs)

    return _make
