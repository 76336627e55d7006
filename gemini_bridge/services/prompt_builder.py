"""
GENERATION REQUEST BUILDER
==========================

Turns the uploaded files and the user's prompt into a GenerationRequest.

PART ORDER:
  - no files:                      [text]                (text is sent even when empty)
  - exactly one file, a PDF:       [text, file]          (text only when non-empty)
  - anything else:                 [file, file, ..., text] in source order

Gemini answers single-document questions better with the question first; other
media are reference material and go before the instruction. Callers depend on
this order, so keep it as is.
"""

from typing import Any, Dict, List, Optional, Sequence

from gemini_bridge.models import GenerationRequest, InvocationPayload, Modality, UploadedFileRef


def file_part(upload: UploadedFileRef) -> Dict[str, Any]:
    return {"file_data": {"mime_type": upload.mime_type, "file_uri": upload.file_uri}}


def build_parts(uploads: Sequence[UploadedFileRef], user_message: str) -> List[Dict[str, Any]]:
    if not uploads:
        return [{"text": user_message}]

    text_parts = [{"text": user_message}] if user_message else []
    if len(uploads) == 1 and uploads[0].modality is Modality.DOCUMENT:
        return text_parts + [file_part(uploads[0])]
    return [file_part(upload) for upload in uploads] + text_parts


def build_generation_request(
    payload: InvocationPayload,
    uploads: Sequence[UploadedFileRef],
    response_schema: Optional[Any] = None,
) -> GenerationRequest:
    """
    Assemble the request: ordered parts, temperature and max tokens always,
    system instruction when a system message was given, and the strict-JSON
    directive when a parsed response schema is passed in.
    """
    return GenerationRequest(
        parts=build_parts(uploads, payload.user_message),
        temperature=payload.temperature,
        max_output_tokens=payload.max_tokens,
        system_message=payload.system_message or None,
        response_schema=response_schema if payload.is_json_response else None,
    )
