"""Pytest fixtures and HTTP test doubles.

FakeSession stands in for requests.Session: it records every call and answers
from a route table, so tests can assert exactly which remote calls a request
made (and that some were never made) without touching the network.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from gemini_bridge.services.bridge_service import GeminiBridgeHandler

GEMINI_BASE = "https://gemini.test"
UPLOAD_START_URL = f"{GEMINI_BASE}/upload/v1beta/files"
UPLOAD_SESSION_URL = f"{GEMINI_BASE}/upload/session"
GENERATE_URL = f"{GEMINI_BASE}/v1beta/models/"

# =============================================================================
# Test Doubles
# =============================================================================


class FakeResponse:
    """Minimal requests.Response double."""

    def __init__(
        self,
        status_code: int = 200,
        json_data: Any = None,
        content: bytes = b"",
        headers: dict[str, str] | None = None,
    ) -> None:
        self.status_code = status_code
        self._json = json_data
        self.content = content
        self.headers = CaseInsensitiveDict(headers or {})

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", "replace")

    def json(self) -> Any:
        if self._json is None:
            raise ValueError("No JSON body")
        return self._json

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


@dataclass
class Call:
    method: str
    url: str
    kwargs: dict[str, Any]


@dataclass
class FakeSession:
    """Records calls; answers with the first route whose method and URL prefix match.

    A route's answer may be a FakeResponse, a list of them (consumed in order,
    the last one repeats) or an exception instance to raise.
    """

    routes: list[tuple[str, str, Any]] = field(default_factory=list)
    calls: list[Call] = field(default_factory=list)
    closed: bool = False

    def add(self, method: str, url_prefix: str, answer: Any) -> FakeSession:
        self.routes.append((method, url_prefix, answer))
        return self

    def _dispatch(self, method: str, url: str, kwargs: dict[str, Any]) -> FakeResponse:
        self.calls.append(Call(method, url, kwargs))
        for route_method, prefix, answer in self.routes:
            if route_method == method and url.startswith(prefix):
                if isinstance(answer, list):
                    answer = answer.pop(0) if len(answer) > 1 else answer[0]
                if isinstance(answer, Exception):
                    raise answer
                return answer
        raise AssertionError(f"Unexpected {method} {url}")

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._dispatch("GET", url, kwargs)

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._dispatch("POST", url, kwargs)

    def calls_to(self, method: str, url_prefix: str) -> list[Call]:
        return [c for c in self.calls if c.method == method and c.url.startswith(url_prefix)]

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> FakeSession:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


def gemini_success(
    text: str = "Hello from Gemini",
    finish_reason: str = "STOP",
    usage: dict[str, Any] | None = None,
) -> dict[str, Any]:
    return {
        "candidates": [
            {"content": {"parts": [{"text": text}], "role": "model"}, "finishReason": finish_reason}
        ],
        "usageMetadata": usage if usage is not None else {"totalTokenCount": 42},
    }


def add_gemini_routes(
    session: FakeSession,
    *,
    file_uris: list[str] | None = None,
    generate: FakeResponse | None = None,
) -> FakeSession:
    """Successful upload start/finalize and generateContent routes."""
    uris = file_uris or ["https://gemini.test/files/file-1"]
    session.add(
        "POST",
        UPLOAD_START_URL,
        FakeResponse(headers={"X-Goog-Upload-URL": f"{UPLOAD_SESSION_URL}/1"}),
    )
    session.add(
        "POST",
        UPLOAD_SESSION_URL,
        [FakeResponse(json_data={"file": {"uri": uri, "name": uri.rsplit("/", 1)[-1]}}) for uri in uris],
    )
    session.add("POST", GENERATE_URL, generate or FakeResponse(json_data=gemini_success()))
    return session


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def handler(session: FakeSession) -> GeminiBridgeHandler:
    return GeminiBridgeHandler(session_factory=lambda: session, gemini_base_url=GEMINI_BASE, timeout=None)


@pytest.fixture
def client_context() -> dict[str, str]:
    return {"googleApiKey": "test-api-key", "gcDomain": "mypurecloud.de"}


@pytest.fixture
def base_payload() -> dict[str, Any]:
    return {
        "provider": "google",
        "model": "gemini-2.0-flash",
        "user_message": "Summarize the attachment",
        "processLastConversationFile": False,
    }
