"""
BRIDGE SERVICE MODULE
=====================

Runs one invocation end to end. This is the only place that knows the order of
the stages and the only place that turns a failure into a response body.

FLOW (strictly sequential, nothing retried):
  1. extract_payload + validate_payload     - 400 on bad JSON or a bad field
  2. load_response_schema                   - 400 "Invalid responseSchema JSON"
  3. resolve_credentials                    - 400 when the Gemini key is missing
  4. resolve_file_sources                   - conversation lookup or the three URL fields
  5. for each source: fetch, then upload    - one file completely before the next
  6. build_generation_request
  7. GeminiClient.generate_content
  8. extract_generation_result + format_output

Each stage raises a BridgeError subclass on failure; handle() stops at the first
one and answers with its status/message/detail. Anything unexpected becomes a
500 "Internal error".

A new requests.Session (and with it a new Genesys token) is used for every
invocation, so no state is shared between requests.
"""

import logging
from typing import Any, Callable, Dict, Mapping, Optional

import requests

from config import GEMINI_API_BASE_URL, HTTP_TIMEOUT_SECONDS
from gemini_bridge.errors import BridgeError, InputError
from gemini_bridge.services.credentials import resolve_credentials
from gemini_bridge.services.file_fetcher import FileFetcher
from gemini_bridge.services.gemini_service import GeminiClient
from gemini_bridge.services.genesys_service import GenesysCloudClient
from gemini_bridge.services.prompt_builder import build_generation_request
from gemini_bridge.services.source_resolver import resolve_file_sources
from gemini_bridge.utils.output import extract_generation_result, format_output, success_output
from gemini_bridge.utils.payload import extract_payload, load_response_schema, validate_payload

logger = logging.getLogger("GeminiBridge")


class GeminiBridgeHandler:
    """
    Framework-independent request handler.

    session_factory is called once per invocation and must return a
    requests.Session-compatible object usable as a context manager.
    """

    def __init__(
        self,
        session_factory: Callable[[], requests.Session] = requests.Session,
        gemini_base_url: str = GEMINI_API_BASE_URL,
        timeout: Optional[float] = HTTP_TIMEOUT_SECONDS,
    ):
        self.session_factory = session_factory
        self.gemini_base_url = gemini_base_url
        self.timeout = timeout

    def handle(
        self,
        event: Any,
        headers: Optional[Mapping[str, str]] = None,
        client_context: Optional[Mapping[str, str]] = None,
    ) -> Dict[str, Any]:
        """Process one invocation; always returns a response body, never raises."""
        try:
            return self._run(event, headers or {}, client_context or {})
        except BridgeError as e:
            logger.warning("Request failed (%s): %s", e.status, e.message)
            return format_output(e.to_output())
        except Exception as e:
            logger.error("Unexpected error in handler: %s", e, exc_info=True)
            return format_output({"status": 500, "message": "Internal error", "detail": str(e)})

    def _run(self, event: Any, headers: Mapping[str, str], client_context: Mapping[str, str]) -> Dict[str, Any]:
        raw_payload = extract_payload(event)
        logger.info("Invocation received with fields: %s", ", ".join(sorted(raw_payload)))

        outcome = validate_payload(raw_payload)
        if not outcome.ok:
            raise InputError(f"Invalid input: {outcome.error}")
        payload = outcome.payload
        response_schema = load_response_schema(payload)

        credentials = resolve_credentials(headers, client_context)

        with self.session_factory() as session:
            genesys = GenesysCloudClient(session, credentials, timeout=self.timeout)
            gemini = GeminiClient(session, credentials.google_api_key, self.gemini_base_url, self.timeout)
            fetcher = FileFetcher(session, genesys, timeout=self.timeout)

            sources = resolve_file_sources(payload, genesys)
            logger.info("Processing %d file(s) with model %s", len(sources), payload.model)

            uploads = []
            for source in sources:
                fetched = fetcher.fetch(source)
                uploads.append(gemini.upload_file(fetched))

            request = build_generation_request(payload, uploads, response_schema)
            data = gemini.generate_content(payload.model, request)

        result = extract_generation_result(data, payload.is_json_response)
        return success_output(result)
