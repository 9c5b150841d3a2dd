"""Pytest fixtures for tender-portal tests."""

from typing import Any, Optional

import httpx
import pytest

from tender_portal.config import PortalSettings
from tender_portal.credentials import MemoryCredentialStore

API = "portal.test/api"
STATIC = "portal.test"
LEGACY = "legacy.test"


class FakePortal:
    """
    In-memory backend behind httpx.MockTransport.
    Routes are keyed by method and host+path (query ignored); unknown routes answer 404.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], dict[str, Any]] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        *,
        status: int = 200,
        json: Any = None,
        content: Optional[bytes] = None,
        error: bool = False,
    ) -> None:
        self.routes[(method.upper(), path)] = {
            "status": status,
            "json": json,
            "content": content,
            "error": error,
        }

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, f"{request.url.host}{request.url.path}"))
        if route is None:
            return httpx.Response(404, json={"success": False, "message": "Not found"})
        if route["error"]:
            raise httpx.ConnectError("connection refused", request=request)
        if route["content"] is not None:
            return httpx.Response(route["status"], content=route["content"])
        if route["json"] is not None:
            return httpx.Response(route["status"], json=route["json"])
        return httpx.Response(route["status"])

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))

    def urls(self, method: Optional[str] = None) -> list[str]:
        """Requested URLs (with query) in order, optionally for one method."""
        return [str(r.url) for r in self.requests if method is None or r.method == method]

    def paths(self, method: Optional[str] = None) -> list[str]:
        return [
            f"{r.url.host}{r.url.path}"
            for r in self.requests
            if method is None or r.method == method
        ]


@pytest.fixture
def portal() -> FakePortal:
    return FakePortal()


@pytest.fixture
def http_client(portal: FakePortal) -> httpx.Client:
    client = portal.client()
    yield client
    client.close()


@pytest.fixture
def settings(tmp_path) -> PortalSettings:
    """Settings with distinct static and legacy roots so all four candidates differ."""
    return PortalSettings(
        api_base=f"http://{API}",
        legacy_static_root=f"http://{LEGACY}",
        download_dir=tmp_path / "downloads",
    )


@pytest.fixture
def credentials() -> MemoryCredentialStore:
    return MemoryCredentialStore("token-abc")


@pytest.fixture
def tender_data() -> dict[str, Any]:
    """A tender row as the backend stores it."""
    return {
        "id": 42,
        "title": "Road resurfacing, phase 2",
        "description": "Resurface 12 km of district roads.",
        "status": "open",
        "deadline": "2030-01-15T12:00:00Z",
        "budget_min": "10000",
        "budget_max": 25000,
        "category_name": "Construction",
        "attachments": [
            {
                "filename": "file-1690000000-123.pdf",
                "originalName": "Specification.pdf",
                "size": 2048,
            },
            {"name": "drawings.docx", "path": "/uploads/drawings.docx"},
        ],
        "documents": [
            {"data": {"filename": "file-1690000001-456.docx", "originalName": "Terms.docx"}},
        ],
    }
