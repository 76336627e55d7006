"""
OUTPUT UTILITY
==============

Shapes what the endpoint returns. Success and failure share one body:

  status        - numeric outcome (200, 400, 404, 500, or the provider's status)
  message       - "success" or a short description of what failed
  geminiResponse, textOutput, finishReason, usage - only on success
  detail        - lower-level diagnostic text, on errors that have one

Any other keys given to format_output() are appended after the declared ones.
"""

import logging
from typing import Any, Dict

from gemini_bridge.errors import describe
from gemini_bridge.models import GenerationResult

logger = logging.getLogger("GeminiBridge")

OUTPUT_FIELDS = (
    "status",
    "message",
    "geminiResponse",
    "textOutput",
    "finishReason",
    "usage",
    "detail",
)
REQUIRED_OUTPUT_FIELDS = ("status", "message")


def format_output(output: Dict[str, Any]) -> Dict[str, Any]:
    """Order the declared fields first, check the required ones, then pass extras through."""
    formatted = {name: output[name] for name in OUTPUT_FIELDS if name in output}

    for name in REQUIRED_OUTPUT_FIELDS:
        if name not in formatted:
            logger.error("Missing required output property: %s", name)
            return {"status": 500, "message": "Internal error: missing required output property"}

    if "detail" in formatted:
        formatted["detail"] = describe(formatted["detail"])

    for name, value in output.items():
        if name not in formatted:
            formatted[name] = value
    return formatted


def extract_generation_result(data: Any, is_json_response: bool = False) -> GenerationResult:
    """
    Pull text, finish reason and usage out of a generateContent response.

    Only the first candidate's first part is read. In strict-JSON mode the text
    is stripped of surrounding whitespace; nothing inside it is touched.
    """
    data = data if isinstance(data, dict) else {}
    candidates = data.get("candidates") or [{}]
    first = candidates[0] if isinstance(candidates[0], dict) else {}
    parts = (first.get("content") or {}).get("parts") or [{}]

    text_output = (parts[0].get("text") or "") if isinstance(parts[0], dict) else ""
    if is_json_response:
        text_output = text_output.strip()

    return GenerationResult(
        raw_response=data,
        text_output=text_output,
        finish_reason=first.get("finishReason") or "",
        usage=data.get("usageMetadata") or {},
    )


def success_output(result: GenerationResult) -> Dict[str, Any]:
    return format_output({
        "status": 200,
        "message": "success",
        "geminiResponse": result.raw_response,
        "textOutput": result.text_output,
        "finishReason": result.finish_reason,
        "usage": result.usage,
    })
