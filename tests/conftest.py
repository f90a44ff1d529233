"""
Pytest configuration and shared fixtures.
"""

import os
import sys
from pathlib import Path

# Add src to Python path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

# Set test environment variables
os.environ["API_BASE_URL"] = "http://catalog.test"
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ["LOG_FORMAT"] = "text"  # Better for test output


import httpx
import pytest

from api.client import ApiClient
from core.coordinator import ViewCoordinator
from core.session import SessionState
from models import User


class FakeCatalogApi:
    """
    In-process stand-in for the catalog API, served through httpx.MockTransport.

    Routes map (method, path) to (status, json) or to a handler(request).
    Unrouted requests get a 404.
    """

    def __init__(self):
        self.routes = {}
        self.requests: list[httpx.Request] = []

    def add(self, method, path, status=200, json=None, handler=None):
        self.routes[(method, path)] = handler or (status, json)

    def __call__(self, request: httpx.Request):
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": "Not found"})
        if callable(route):
            return route(request)
        status, json = route
        if json is None:
            return httpx.Response(status)
        return httpx.Response(status, json=json)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def calls(self, method, path=None) -> list[httpx.Request]:
        return [
            r
            for r in self.requests
            if r.method == method and (path is None or r.url.path == path)
        ]


@pytest.fixture
def movies_json():
    """Movie list as the server sends it."""
    return [
        {
            "id": 1,
            "title": "Dune: Part Two",
            "description": "Paul Atreides unites with Chani and the Fremen.",
            "year": 2024,
            "img": "http://example.com/dune2.jpg",
            "adminName": "admin",
        },
        {
            "id": 2,
            "title": "Stalker",
            "description": "A guide leads two men through the Zone.",
            "year": 1979,
            "img": "http://example.com/stalker.jpg",
            "adminName": "admin",
        },
        {
            "id": 5,
            "title": "Amélie",
            "description": "A shy waitress in Paris decides to change lives.",
            "year": 2001,
            "img": "http://example.com/amelie.jpg",
            "adminName": "admin",
        },
    ]


@pytest.fixture
def screenings_json():
    """Screening list as the server sends it, deliberately out of time order."""
    return [
        {"id": 10, "movieId": 2, "room": "B", "time": "2025-07-08T20:00:00", "adminName": "admin"},
        {"id": 11, "movieId": 1, "room": "A", "time": "2025-07-08T14:30:00", "adminName": "admin"},
        {"id": 12, "movieId": 2, "room": "A", "time": "2025-07-07T18:00:00", "adminName": "admin"},
        {"id": 13, "movieId": 99, "room": "C", "time": "2025-07-09T10:00:00", "adminName": "admin"},
    ]


@pytest.fixture
def admin_user():
    return User(id=7, username="boss", email_address="boss@example.com", is_admin=True)


@pytest.fixture
def regular_user():
    return User(id=8, username="viewer", email_address="viewer@example.com", is_admin=False)


@pytest.fixture
def fake_api(movies_json, screenings_json):
    """Catalog API serving the sample lists."""
    fake = FakeCatalogApi()
    fake.add("GET", "/api/movies/movies", json=movies_json)
    fake.add("GET", "/api/screenings/screenings", json=screenings_json)
    return fake


@pytest.fixture
def session():
    return SessionState()


@pytest.fixture
def coordinator(fake_api, session):
    """Coordinator wired to the fake API."""
    api = ApiClient(session, base_url="http://catalog.test", transport=fake_api.transport())
    coordinator = ViewCoordinator(api, session)
    coordinator.messages = []
    coordinator.on_message(coordinator.messages.append)
    return coordinator
