"""
PAYLOAD UTILITY
===============

Input normalization for one invocation:

  extract_payload(event)         - rawRequest (a JSON string) wins over the event's own fields.
  validate_payload(payload)      - one strict pass over InvocationPayload; returns a
                                   ValidationOutcome with the model or the first violation.
  load_response_schema(payload)  - parse responseSchema when strict-JSON output is requested.

Failures are raised as InputError (status 400) by extract_payload and
load_response_schema; validate_payload never raises.
"""

import json
from typing import Any, NamedTuple, Optional

from pydantic import ValidationError

from config import MAX_MAX_TOKENS, MIN_MAX_TOKENS
from gemini_bridge.errors import InputError
from gemini_bridge.models import InvocationPayload

# Expected types for "Property 'x' should be <type>" messages, keyed by the
# field name callers use.
FIELD_TYPES = {
    "provider": "a string",
    "model": "a string",
    "user_message": "a string",
    "processLastConversationFile": "a boolean",
    "pdfDownloadUrl": "a string",
    "imageDownloadUrl": "a string",
    "audioDownloadUrl": "a string",
    "conversationId": "a string",
    "temperature": "a number",
    "max_tokens": "an integer",
    "system_message": "a string",
    "isJsonResponse": "a boolean",
    "responseSchema": "a string",
}

_RANGE_ERRORS = {"greater_than_equal", "less_than_equal", "greater_than", "less_than"}


class ValidationOutcome(NamedTuple):
    payload: Optional[InvocationPayload]
    error: Optional[str]

    @property
    def ok(self) -> bool:
        return self.error is None


def extract_payload(event: Any) -> dict:
    """Return the JSON object to validate: event["rawRequest"] when present, else the event."""
    if not isinstance(event, dict):
        raise InputError("Invalid input: payload must be a JSON object")

    raw_request = event.get("rawRequest")
    if raw_request:
        if isinstance(raw_request, dict):
            return raw_request
        try:
            payload = json.loads(raw_request)
        except (TypeError, ValueError) as e:
            raise InputError("rawRequest is not valid JSON", detail=str(e)) from e
        if not isinstance(payload, dict):
            raise InputError("Invalid input: payload must be a JSON object")
        return payload

    return event


def _describe_error(error: dict) -> str:
    """Turn one pydantic error entry into the caller-facing violation text."""
    field = str(error["loc"][0]) if error.get("loc") else ""
    kind = error["type"]

    if kind == "missing":
        return f"Missing required property: {field}"
    if kind in _RANGE_ERRORS:
        return f"Property '{field}' should be between {MIN_MAX_TOKENS} and {MAX_MAX_TOKENS}"
    if kind in ("unsupported_value", "conditional_required"):
        return error["msg"]
    if field in FIELD_TYPES:
        return f"Property '{field}' should be {FIELD_TYPES[field]}"
    return error["msg"]


def validate_payload(payload: dict) -> ValidationOutcome:
    """Validate the payload in one pass and report the first violation, if any."""
    try:
        return ValidationOutcome(InvocationPayload.model_validate(payload), None)
    except ValidationError as e:
        errors = e.errors()
        return ValidationOutcome(None, _describe_error(errors[0]) if errors else str(e))


def load_response_schema(payload: InvocationPayload) -> Optional[Any]:
    """Parsed responseSchema when isJsonResponse is set; None otherwise."""
    if not (payload.is_json_response and payload.response_schema):
        return None
    try:
        return json.loads(payload.response_schema)
    except ValueError as e:
        raise InputError("Invalid responseSchema JSON", detail=str(e)) from e
