"""
FILE SOURCE RESOLVER
====================

Decides which files a request works on:

  - processLastConversationFile=true: look up the conversation and take the
    most recent customer attachment (exactly one source, or a 404).
  - otherwise: pdfDownloadUrl, imageDownloadUrl and audioDownloadUrl, each one
    that is present, in that order. Zero sources is fine (text-only prompt).
"""

import logging
from typing import List

from gemini_bridge.errors import SourceResolutionError, provider_status
from gemini_bridge.models import FileSource, InvocationPayload, Modality
from gemini_bridge.services.genesys_service import (
    GenesysCloudClient,
    GenesysCloudError,
    find_latest_customer_media,
)
from gemini_bridge.utils.mime_types import guess_mime_type

logger = logging.getLogger("GeminiBridge")


def sources_from_urls(payload: InvocationPayload) -> List[FileSource]:
    sources = []
    for modality, url in (
        (Modality.DOCUMENT, payload.pdf_download_url),
        (Modality.IMAGE, payload.image_download_url),
        (Modality.AUDIO, payload.audio_download_url),
    ):
        if url:
            sources.append(FileSource(modality=modality, url=url, mime_type=guess_mime_type(url, modality)))
    return sources


def source_from_conversation(conversation_id: str, genesys: GenesysCloudClient) -> FileSource:
    try:
        conversation = genesys.get_conversation(conversation_id)
    except GenesysCloudError as e:
        logger.error("Conversation lookup failed: %s", e)
        raise SourceResolutionError(
            "Failed to retrieve conversation messages",
            status=provider_status(e.status_code, default=502),
            detail=str(e),
        ) from e

    source = find_latest_customer_media(conversation)
    if source is None:
        raise SourceResolutionError(
            "No customer media found in conversation",
            detail=f"Conversation {conversation_id} has no customer message with a PDF, image or audio attachment",
        )
    logger.info("Using latest customer %s attachment from conversation %s", source.modality.value, conversation_id)
    return source


def resolve_file_sources(payload: InvocationPayload, genesys: GenesysCloudClient) -> List[FileSource]:
    if payload.process_last_conversation_file:
        return [source_from_conversation(payload.conversation_id, genesys)]
    return sources_from_urls(payload)
