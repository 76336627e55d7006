"""
ERRORS MODULE
=============

Exception hierarchy for the bridge. Every pipeline stage raises one of these;
GeminiBridgeHandler.handle() is the only place that turns them into the
{status, message, detail} response body, so the first failure ends the request.

  BridgeError              - base class, carries status / message / detail
    InputError             - malformed payload, invalid responseSchema (400)
    CredentialsError       - missing Gemini key or Genesys client credentials (400)
    SourceResolutionError  - no customer media in the conversation (404)
    DownloadError          - file download or OAuth exchange failed (400)
    UploadError            - Gemini File API rejected the staging (provider status or 400)
    GenerationError        - generateContent failed (provider status or 400)
"""

import json
from typing import Any, Optional


def describe(detail: Any) -> Optional[str]:
    """Render diagnostic detail as a string (provider bodies are often JSON objects)."""
    if detail is None or isinstance(detail, str):
        return detail
    try:
        return json.dumps(detail)
    except (TypeError, ValueError):
        return str(detail)


class BridgeError(Exception):
    """Base exception: a failure that maps to a caller-facing status and message."""

    status = 400

    def __init__(self, message: str, *, status: Optional[int] = None, detail: Any = None):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status
        self.detail = describe(detail)

    def to_output(self) -> dict:
        output = {"status": self.status, "message": self.message}
        if self.detail is not None:
            output["detail"] = self.detail
        return output


class InputError(BridgeError):
    """The payload could not be parsed or failed validation."""


class CredentialsError(BridgeError):
    """A credential needed for this request is missing."""


class SourceResolutionError(BridgeError):
    """No usable file could be located for the request."""

    status = 404


class DownloadError(BridgeError):
    """Fetching file bytes failed (network, HTTP status or OAuth exchange)."""


class UploadError(BridgeError):
    """Staging a file with the Gemini File API failed."""


class GenerationError(BridgeError):
    """The generateContent call failed."""


def provider_status(status_code: Optional[int], default: int = 400) -> int:
    """Use an upstream HTTP status when it is an error status, else the default."""
    if status_code is not None and status_code >= 400:
        return status_code
    return default
