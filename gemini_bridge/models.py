"""
DATA MODELS MODULE
==================

Pydantic models for the invocation payload and for the request-scoped values
that flow through the pipeline. Nothing here is persisted; every instance lives
for one invocation.

MODELS:
  InvocationPayload - The caller's JSON payload. Declares every recognized field
                      with its type; validated strictly (no coercion). Unknown
                      fields are kept and passed through.
  Credentials       - Genesys client id/secret, Gemini key and Genesys domain,
                      resolved once per request.
  Modality          - document / image / audio.
  FileSource        - A URL to fetch plus its modality and MIME type.
  FetchedFile       - Downloaded bytes, waiting to be uploaded.
  UploadedFileRef   - The Gemini file URI returned by the File API.
  GenerationRequest - Ordered content parts + generation config, ready to send.
  GenerationResult  - Fields extracted from the generateContent response.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_core import PydanticCustomError

from config import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    MAX_MAX_TOKENS,
    MIN_MAX_TOKENS,
    PROVIDER_GOOGLE,
    SUPPORTED_MODELS,
)

# ==============================================================================
# INVOCATION PAYLOAD
# ==============================================================================

class InvocationPayload(BaseModel):
    """
    Request body of one invocation.

    strict=True means a JSON true is not accepted as a number and 4096 is not
    accepted as a string; the first violation is reported back to the caller
    (see gemini_bridge.utils.payload.validate_payload).
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True, strict=True)

    provider: str
    model: str
    user_message: str
    process_last_conversation_file: bool = Field(..., alias="processLastConversationFile")

    pdf_download_url: Optional[str] = Field(None, alias="pdfDownloadUrl")
    image_download_url: Optional[str] = Field(None, alias="imageDownloadUrl")
    audio_download_url: Optional[str] = Field(None, alias="audioDownloadUrl")
    conversation_id: Optional[str] = Field(None, alias="conversationId")

    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = Field(DEFAULT_MAX_TOKENS, ge=MIN_MAX_TOKENS, le=MAX_MAX_TOKENS)
    system_message: Optional[str] = None
    is_json_response: bool = Field(False, alias="isJsonResponse")
    response_schema: Optional[str] = Field(None, alias="responseSchema")

    @field_validator("provider")
    @classmethod
    def _known_provider(cls, value: str) -> str:
        if value != PROVIDER_GOOGLE:
            raise PydanticCustomError(
                "unsupported_value",
                "Property 'provider' should be one of: {allowed}",
                {"allowed": PROVIDER_GOOGLE},
            )
        return value

    @field_validator("model")
    @classmethod
    def _known_model(cls, value: str) -> str:
        if value not in SUPPORTED_MODELS:
            raise PydanticCustomError(
                "unsupported_value",
                "Property 'model' should be one of: {allowed}",
                {"allowed": ", ".join(SUPPORTED_MODELS)},
            )
        return value

    @model_validator(mode="after")
    def _conditional_fields(self) -> "InvocationPayload":
        # Only checked once every field has the right type.
        if self.process_last_conversation_file and not self.conversation_id:
            raise PydanticCustomError(
                "conditional_required",
                "Property 'conversationId' is required when processLastConversationFile is true",
            )
        if self.is_json_response and not self.response_schema:
            raise PydanticCustomError(
                "conditional_required",
                "Property 'responseSchema' is required when isJsonResponse is true",
            )
        return self


# ==============================================================================
# CREDENTIALS
# ==============================================================================

class Credentials(BaseModel):
    """Resolved once at the start of a request and passed to every remote call."""
    model_config = ConfigDict(frozen=True)

    google_api_key: str
    gc_client_id: Optional[str] = None
    gc_client_secret: Optional[str] = None
    gc_domain: str

    @property
    def has_genesys_credentials(self) -> bool:
        return bool(self.gc_client_id and self.gc_client_secret)

    def __repr__(self) -> str:
        # Keep secrets out of logs and tracebacks.
        return f"Credentials(gc_client_id={self.gc_client_id!r}, gc_domain={self.gc_domain!r})"

    __str__ = __repr__


# ==============================================================================
# FILES
# ==============================================================================

class Modality(str, Enum):
    DOCUMENT = "document"
    IMAGE = "image"
    AUDIO = "audio"

    @property
    def label(self) -> str:
        """Name used in caller-facing messages ("Failed to download PDF")."""
        return {"document": "PDF", "image": "image", "audio": "audio"}[self.value]

    @property
    def display_name(self) -> str:
        """display_name sent to the Gemini File API."""
        return {"document": "GenesysPDF", "image": "GenesysImage", "audio": "GenesysAudio"}[self.value]


class FileSource(BaseModel):
    model_config = ConfigDict(frozen=True)

    modality: Modality
    url: str
    mime_type: str


class FetchedFile(BaseModel):
    model_config = ConfigDict(frozen=True)

    modality: Modality
    data: bytes
    mime_type: str


class UploadedFileRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    modality: Modality
    file_uri: str
    mime_type: str


# ==============================================================================
# GENERATION
# ==============================================================================

class GenerationRequest(BaseModel):
    """
    One generateContent request.

    parts are already in Gemini REST form ({"text": ...} or {"file_data": ...});
    to_body() adds the envelope.
    """
    parts: List[Dict[str, Any]]
    temperature: float
    max_output_tokens: int
    system_message: Optional[str] = None
    response_schema: Optional[Any] = None

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "contents": [{"parts": self.parts}],
            "generationConfig": {
                "temperature": self.temperature,
                "maxOutputTokens": self.max_output_tokens,
            },
        }
        if self.system_message:
            body["system_instruction"] = {"parts": [{"text": self.system_message}]}
        if self.response_schema is not None:
            body["generationConfig"]["responseMimeType"] = "application/json"
            body["generationConfig"]["responseSchema"] = self.response_schema
        return body


class GenerationResult(BaseModel):
    raw_response: Dict[str, Any]
    text_output: str = ""
    finish_reason: str = ""
    usage: Dict[str, Any] = Field(default_factory=dict)
