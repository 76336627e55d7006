"""
GEMINI SERVICE MODULE
=====================

Calls the Gemini REST API with the request's API key:

  upload_file(fetched)          - File API resumable upload in two calls:
                                  1. start: declare length, MIME type and display name;
                                     Gemini answers with a session URL (x-goog-upload-url).
                                  2. upload + finalize: send all bytes at offset 0;
                                     Gemini answers with {"file": {"uri": ...}}.
  generate_content(model, req)  - one POST to models/<model>:generateContent.

The key travels as the ?key= query parameter and is never logged. Each call is
made once; there are no retries.
"""

import logging
from typing import Any, Dict, Optional

import requests

from config import GEMINI_API_BASE_URL
from gemini_bridge.errors import GenerationError, UploadError, describe, provider_status
from gemini_bridge.models import FetchedFile, GenerationRequest, UploadedFileRef

logger = logging.getLogger("GeminiBridge")


def _body_of(response: Optional[requests.Response]) -> Any:
    """Parsed JSON body when there is one, else the raw text (for diagnostics)."""
    if response is None:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def _describe_body(response: requests.Response) -> str:
    return describe(_body_of(response)) or ""


# ==============================================================================
# GEMINI CLIENT
# ==============================================================================

class GeminiClient:

    def __init__(
        self,
        session: requests.Session,
        api_key: str,
        base_url: str = GEMINI_API_BASE_URL,
        timeout: Optional[float] = None,
    ):
        self.session = session
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    # -------------------------------------------------------------------------
    # FILE API
    # -------------------------------------------------------------------------

    def _start_upload(self, fetched: FetchedFile) -> str:
        """Open a resumable upload session and return its URL."""
        response = self.session.post(
            f"{self.base_url}/upload/v1beta/files",
            params={"key": self.api_key},
            json={"file": {"display_name": fetched.modality.display_name}},
            headers={
                "X-Goog-Upload-Protocol": "resumable",
                "X-Goog-Upload-Command": "start",
                "X-Goog-Upload-Header-Content-Length": str(len(fetched.data)),
                "X-Goog-Upload-Header-Content-Type": fetched.mime_type,
                "Content-Type": "application/json",
            },
            timeout=self.timeout,
        )
        # Any status is accepted here; the session URL header decides.
        upload_url = response.headers.get("x-goog-upload-url")
        if not upload_url:
            raise UploadError(
                f"Failed to upload {fetched.modality.label}",
                status=provider_status(response.status_code),
                detail=f"Failed to start resumable upload: {_describe_body(response)}",
            )
        return upload_url

    def _finalize_upload(self, upload_url: str, fetched: FetchedFile) -> str:
        """Send the bytes and finalize; returns the file URI."""
        response = self.session.post(
            upload_url,
            data=fetched.data,
            headers={
                "Content-Length": str(len(fetched.data)),
                "X-Goog-Upload-Offset": "0",
                "X-Goog-Upload-Command": "upload, finalize",
            },
            timeout=self.timeout,
        )
        response.raise_for_status()
        body = _body_of(response)
        file_uri = (body.get("file") or {}).get("uri") if isinstance(body, dict) else None
        if not file_uri:
            raise UploadError(
                f"Failed to upload {fetched.modality.label}",
                detail=f"Failed to finalize upload: {_describe_body(response)}",
            )
        return file_uri

    def upload_file(self, fetched: FetchedFile) -> UploadedFileRef:
        label = fetched.modality.label
        logger.info("Uploading %s to Gemini File API (%s, %d bytes)", label, fetched.mime_type, len(fetched.data))
        try:
            upload_url = self._start_upload(fetched)
            file_uri = self._finalize_upload(upload_url, fetched)
        except requests.RequestException as e:
            response = getattr(e, "response", None)
            logger.error("Error uploading %s: %s", label, e)
            raise UploadError(
                f"Failed to upload {label}",
                status=provider_status(response.status_code if response is not None else None),
                detail=_body_of(response) or str(e),
            ) from e
        except UploadError as e:
            logger.error("Error uploading %s: %s", label, e.detail)
            raise

        logger.info("Uploaded %s as %s", label, file_uri)
        return UploadedFileRef(modality=fetched.modality, file_uri=file_uri, mime_type=fetched.mime_type)

    # -------------------------------------------------------------------------
    # GENERATION
    # -------------------------------------------------------------------------

    def generate_content(self, model: str, request: GenerationRequest) -> Dict[str, Any]:
        """Call generateContent once and return the parsed response body."""
        logger.info("Calling generateContent on %s with %d part(s)", model, len(request.parts))
        try:
            response = self.session.post(
                f"{self.base_url}/v1beta/models/{model}:generateContent",
                params={"key": self.api_key},
                json=request.to_body(),
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            response = getattr(e, "response", None)
            detail = _body_of(response) or str(e)
            logger.error("Error calling generateContent: %s", detail)
            raise GenerationError(
                "Failed to call generateContent",
                status=provider_status(response.status_code if response is not None else None),
                detail=detail,
            ) from e
        except ValueError as e:
            raise GenerationError("Failed to call generateContent", detail=f"Invalid JSON response: {e}") from e

        logger.info("generateContent on %s succeeded", model)
        return data
