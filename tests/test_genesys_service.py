"""Genesys Cloud client: stored-file URLs, OAuth exchange, conversation scanning."""

from __future__ import annotations

import pytest
import requests

from gemini_bridge.errors import CredentialsError, DownloadError
from gemini_bridge.models import Credentials, FileSource, Modality
from gemini_bridge.services.file_fetcher import FileFetcher
from gemini_bridge.services.genesys_service import (
    GenesysCloudClient,
    GenesysCloudError,
    find_latest_customer_media,
    match_stored_download,
)
from tests.conftest import FakeResponse, FakeSession

TOKEN_URL = "https://login.mypurecloud.de/oauth/token"
DOWNLOAD_URL = "https://api.mypurecloud.de/api/v2/downloads/abc123"
STORED_URL = "https://api-downloads.mypurecloud.de/api/v2/downloads/abc123"


def _credentials(**overrides: str) -> Credentials:
    values = {
        "google_api_key": "k",
        "gc_client_id": "client-id",
        "gc_client_secret": "client-secret",
        "gc_domain": "mypurecloud.de",
    }
    values.update(overrides)
    return Credentials(**values)


def _pdf(url: str) -> FileSource:
    return FileSource(modality=Modality.DOCUMENT, url=url, mime_type="application/pdf")


# =============================================================================
# URL matching
# =============================================================================


def test_match_stored_download() -> None:
    assert match_stored_download(STORED_URL) == ("mypurecloud.de", "abc123")
    assert match_stored_download(DOWNLOAD_URL) == ("mypurecloud.de", "abc123")
    assert match_stored_download("https://example.com/api/v2/downloads/abc123") is None
    assert match_stored_download("http://api-downloads.mypurecloud.de/api/v2/downloads/x") is None


# =============================================================================
# Fetching
# =============================================================================


def test_stored_url_uses_one_token_exchange_then_authenticated_download() -> None:
    session = FakeSession()
    session.add("POST", TOKEN_URL, FakeResponse(json_data={"access_token": "tok"}))
    session.add("GET", DOWNLOAD_URL, FakeResponse(content=b"%PDF-1.7"))
    fetcher = FileFetcher(session, GenesysCloudClient(session, _credentials()))

    fetched = fetcher.fetch(_pdf(STORED_URL))

    assert fetched.data == b"%PDF-1.7"
    assert fetched.mime_type == "application/pdf"
    assert [(c.method, c.url) for c in session.calls] == [("POST", TOKEN_URL), ("GET", DOWNLOAD_URL)]
    token_call, download_call = session.calls
    assert token_call.kwargs["data"] == {"grant_type": "client_credentials"}
    assert token_call.kwargs["auth"] == ("client-id", "client-secret")
    assert download_call.kwargs["headers"]["Authorization"] == "Bearer tok"


def test_public_url_is_fetched_without_token() -> None:
    session = FakeSession().add("GET", "https://cdn.test/", FakeResponse(content=b"img"))
    fetcher = FileFetcher(session, GenesysCloudClient(session, _credentials()))

    fetched = fetcher.fetch(FileSource(modality=Modality.IMAGE, url="https://cdn.test/a.png", mime_type="image/png"))

    assert fetched.data == b"img"
    assert session.calls_to("POST", TOKEN_URL) == []
    assert len(session.calls) == 1
    assert "headers" not in session.calls[0].kwargs


def test_token_is_reused_within_a_request() -> None:
    session = FakeSession()
    session.add("POST", TOKEN_URL, FakeResponse(json_data={"access_token": "tok"}))
    client = GenesysCloudClient(session, _credentials())

    assert client.get_access_token("mypurecloud.de") == "tok"
    assert client.get_access_token("mypurecloud.de") == "tok"
    assert len(session.calls) == 1


def test_stored_url_without_credentials_is_credentials_error() -> None:
    session = FakeSession()
    fetcher = FileFetcher(session, GenesysCloudClient(session, _credentials(gc_client_id="", gc_client_secret="")))

    with pytest.raises(CredentialsError):
        fetcher.fetch(_pdf(STORED_URL))
    assert session.calls == []


def test_token_failure_becomes_download_error() -> None:
    session = FakeSession().add("POST", TOKEN_URL, FakeResponse(status_code=401, json_data={"error": "invalid_client"}))
    fetcher = FileFetcher(session, GenesysCloudClient(session, _credentials()))

    with pytest.raises(DownloadError) as exc_info:
        fetcher.fetch(_pdf(STORED_URL))

    assert exc_info.value.message == "Failed to download PDF"
    assert exc_info.value.detail.startswith("Failed to obtain Genesys Cloud OAuth token")
    assert session.calls_to("GET", DOWNLOAD_URL) == []


def test_token_response_without_access_token() -> None:
    session = FakeSession().add("POST", TOKEN_URL, FakeResponse(json_data={}))

    with pytest.raises(GenesysCloudError, match="Failed to obtain access token"):
        GenesysCloudClient(session, _credentials()).get_access_token("mypurecloud.de")


def test_public_download_failure_carries_detail() -> None:
    session = FakeSession().add("GET", "https://cdn.test/", requests.ConnectionError("connection refused"))
    fetcher = FileFetcher(session, GenesysCloudClient(session, _credentials()))

    with pytest.raises(DownloadError) as exc_info:
        fetcher.fetch(FileSource(modality=Modality.AUDIO, url="https://cdn.test/a.mp3", mime_type="audio/mp3"))

    assert exc_info.value.status == 400
    assert exc_info.value.message == "Failed to download audio"
    assert exc_info.value.detail == "Error downloading file: connection refused"


# =============================================================================
# Conversation scanning
# =============================================================================


def _conversation() -> dict:
    return {
        "id": "conv-1",
        "participants": [
            {
                "purpose": "customer",
                "messages": [
                    {
                        "messageId": "m1",
                        "messageTime": "2024-05-01T10:00:00.000Z",
                        "media": [{"url": "https://api.mypurecloud.de/api/v2/downloads/old", "mediaType": "image/png", "name": "old.png"}],
                    },
                    {
                        "messageId": "m2",
                        "messageTime": "2024-05-01T10:05:00.000Z",
                        "media": [{"url": "https://api.mypurecloud.de/api/v2/downloads/new", "mediaType": "application/pdf", "name": "invoice.pdf"}],
                    },
                    {"messageId": "m3", "messageTime": "2024-05-01T10:06:00.000Z"},
                ],
            },
            {
                "purpose": "agent",
                "messages": [
                    {
                        "messageId": "m4",
                        "messageTime": "2024-05-01T10:10:00.000Z",
                        "media": [{"url": "https://api.mypurecloud.de/api/v2/downloads/agent", "mediaType": "image/png"}],
                    }
                ],
            },
        ],
    }


def test_latest_customer_media_is_selected() -> None:
    source = find_latest_customer_media(_conversation())

    assert source == FileSource(
        modality=Modality.DOCUMENT,
        url="https://api.mypurecloud.de/api/v2/downloads/new",
        mime_type="application/pdf",
    )


def test_unsupported_media_is_skipped() -> None:
    conversation = _conversation()
    conversation["participants"][0]["messages"][1]["media"] = [
        {"url": "https://cdn.test/clip.mp4", "mediaType": "video/mp4"}
    ]

    source = find_latest_customer_media(conversation)

    assert source.url == "https://api.mypurecloud.de/api/v2/downloads/old"
    assert source.modality is Modality.IMAGE


def test_no_customer_media() -> None:
    conversation = _conversation()
    conversation["participants"] = conversation["participants"][1:]

    assert find_latest_customer_media(conversation) is None
    assert find_latest_customer_media({}) is None


def test_get_conversation_uses_domain_from_credentials() -> None:
    session = FakeSession()
    session.add("POST", TOKEN_URL, FakeResponse(json_data={"access_token": "tok"}))
    session.add("GET", "https://api.mypurecloud.de/api/v2/conversations/messages/conv-1", FakeResponse(json_data=_conversation()))

    conversation = GenesysCloudClient(session, _credentials()).get_conversation("conv-1")

    assert conversation["id"] == "conv-1"
    assert session.calls[-1].kwargs["headers"]["Authorization"] == "Bearer tok"
