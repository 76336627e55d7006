"""
GENESYS CLOUD SERVICE MODULE
============================

Talks to the Genesys Cloud platform API on behalf of one request:

  - get_access_token(domain): OAuth client-credentials grant against
    https://login.<domain>/oauth/token. The token is kept for the rest of the
    request (this client is created per request), so a conversation lookup
    followed by the attachment download costs one exchange.
  - download(domain, download_id): bytes from https://api.<domain>/api/v2/downloads/<id>.
  - get_conversation(conversation_id): the messaging conversation with its participants.

Helpers:
  - match_stored_download(url): (domain, download_id) for stored-file URLs, else None.
  - find_latest_customer_media(conversation): the newest customer attachment as a FileSource.

Failures are raised as GenesysCloudError; callers decide what they mean for
the request (a download failure or a lookup failure).
"""

import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

import requests

from gemini_bridge.errors import CredentialsError
from gemini_bridge.models import Credentials, FileSource
from gemini_bridge.utils.mime_types import attachment_mime_type, modality_for

logger = logging.getLogger("GeminiBridge")

# https://api-downloads.<domain>/api/v2/downloads/<downloadId>; conversation
# media links use the api.<domain> host for the same resource.
STORED_DOWNLOAD_PATTERN = re.compile(
    r"^https://api(?:-downloads)?\.([^/]+)/api/v2/downloads/([^?#]+)"
)

CUSTOMER_PURPOSE = "customer"


class GenesysCloudError(Exception):
    """A Genesys Cloud call failed; status_code is set when the platform answered."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def match_stored_download(url: str) -> Optional[Tuple[str, str]]:
    """(domain, download_id) when url is a Genesys stored-file download URL."""
    match = STORED_DOWNLOAD_PATTERN.match(url or "")
    if not match:
        return None
    return match.group(1), match.group(2)


def _status_of(exc: requests.RequestException) -> Optional[int]:
    response = getattr(exc, "response", None)
    return response.status_code if response is not None else None


# ==============================================================================
# GENESYS CLOUD CLIENT
# ==============================================================================

class GenesysCloudClient:
    """Request-scoped Genesys Cloud API client (one per invocation)."""

    def __init__(self, session: requests.Session, credentials: Credentials, timeout: Optional[float] = None):
        self.session = session
        self.credentials = credentials
        self.timeout = timeout
        self._tokens: Dict[str, str] = {}

    def _require_credentials(self) -> None:
        if not self.credentials.has_genesys_credentials:
            raise CredentialsError(
                "Missing gcClientId or gcClientSecret in headers or clientContext"
            )

    def get_access_token(self, domain: str) -> str:
        """Bearer token for the given region domain (client-credentials grant)."""
        self._require_credentials()
        if domain in self._tokens:
            return self._tokens[domain]

        token_url = f"https://login.{domain}/oauth/token"
        logger.info("Requesting Genesys Cloud OAuth token from %s", token_url)
        try:
            response = self.session.post(
                token_url,
                data={"grant_type": "client_credentials"},
                auth=(self.credentials.gc_client_id, self.credentials.gc_client_secret),
                timeout=self.timeout,
            )
            response.raise_for_status()
            access_token = response.json().get("access_token")
        except requests.RequestException as e:
            raise GenesysCloudError(
                f"Failed to obtain Genesys Cloud OAuth token: {e}", _status_of(e)
            ) from e
        except ValueError as e:
            raise GenesysCloudError(f"Failed to obtain Genesys Cloud OAuth token: {e}") from e

        if not access_token:
            raise GenesysCloudError("Failed to obtain access token from Genesys Cloud.")
        self._tokens[domain] = access_token
        return access_token

    def _auth_headers(self, domain: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.get_access_token(domain)}",
            "Content-Type": "application/json",
        }

    def download(self, domain: str, download_id: str) -> bytes:
        """Fetch a stored file with an OAuth bearer token."""
        headers = self._auth_headers(domain)
        download_url = f"https://api.{domain}/api/v2/downloads/{download_id}"
        logger.info("Downloading Genesys Cloud file %s", download_id)
        try:
            response = self.session.get(download_url, headers=headers, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise GenesysCloudError(
                f"Error downloading file from Genesys Cloud: {e}", _status_of(e)
            ) from e
        return response.content

    def get_conversation(self, conversation_id: str) -> Dict[str, Any]:
        """The messaging conversation, including each participant's messages."""
        domain = self.credentials.gc_domain
        headers = self._auth_headers(domain)
        url = f"https://api.{domain}/api/v2/conversations/messages/{conversation_id}"
        logger.info("Listing messages of conversation %s", conversation_id)
        try:
            response = self.session.get(url, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            raise GenesysCloudError(
                f"Error retrieving conversation {conversation_id}: {e}", _status_of(e)
            ) from e
        except ValueError as e:
            raise GenesysCloudError(f"Conversation {conversation_id} returned invalid JSON: {e}") from e


# ==============================================================================
# CONVERSATION SCANNING
# ==============================================================================

def _message_time(message: Dict[str, Any]) -> datetime:
    raw = message.get("messageTime") or ""
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return datetime.min.replace(tzinfo=timezone.utc)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def find_latest_customer_media(conversation: Dict[str, Any]) -> Optional[FileSource]:
    """
    The newest attachment sent by the customer, as a FileSource.

    Messages are ordered by messageTime; for equal (or missing) times the later
    one in the participant's list wins. Media that is not a PDF, image or audio
    file is skipped.
    """
    candidates = []
    order = 0
    for participant in conversation.get("participants") or []:
        if (participant.get("purpose") or "").lower() != CUSTOMER_PURPOSE:
            continue
        for message in participant.get("messages") or []:
            order += 1
            for media in message.get("media") or []:
                url = media.get("url")
                name = media.get("name") or url or ""
                modality = modality_for(media.get("mediaType"), name)
                if url and modality is not None:
                    source = FileSource(
                        modality=modality,
                        url=url,
                        mime_type=attachment_mime_type(media.get("mediaType"), name, modality),
                    )
                    candidates.append((_message_time(message), order, source))
                    break

    if not candidates:
        return None
    return max(candidates, key=lambda item: (item[0], item[1]))[2]
