"""
MIME TYPE UTILITY
=================

Maps a file to the MIME type sent to Gemini, by modality and file extension.
PDFs are always application/pdf; unknown image extensions fall back to JPEG and
unknown audio extensions to MP3.
"""

from typing import Optional
from urllib.parse import urlsplit

from gemini_bridge.models import Modality

PDF_MIME_TYPE = "application/pdf"

IMAGE_MIME_TYPES = {
    ".png": "image/png",
    ".jpeg": "image/jpeg",
    ".jpg": "image/jpeg",
    ".webp": "image/webp",
}
DEFAULT_IMAGE_MIME_TYPE = "image/jpeg"

AUDIO_MIME_TYPES = {
    ".wav": "audio/wav",
    ".mp3": "audio/mp3",
    ".ogg": "audio/ogg",
}
DEFAULT_AUDIO_MIME_TYPE = "audio/mp3"


def _path_of(url: str) -> str:
    """Lower-cased path of a URL (or plain file name), without query or fragment."""
    parts = urlsplit(url)
    return (parts.path or url).lower()


def guess_mime_type(url: str, modality: Modality) -> str:
    """MIME type for a file of the given modality, guessed from its extension."""
    path = _path_of(url)
    if modality is Modality.DOCUMENT:
        return PDF_MIME_TYPE
    if modality is Modality.IMAGE:
        table, default = IMAGE_MIME_TYPES, DEFAULT_IMAGE_MIME_TYPE
    else:
        table, default = AUDIO_MIME_TYPES, DEFAULT_AUDIO_MIME_TYPE
    for extension, mime_type in table.items():
        if path.endswith(extension):
            return mime_type
    return default


def modality_for(media_type: Optional[str], name: str = "") -> Optional[Modality]:
    """
    Modality of an attachment from its declared media type, falling back to the
    extension of its name or URL. None when it is neither a PDF, image nor audio.
    """
    media_type = (media_type or "").lower()
    if media_type == PDF_MIME_TYPE:
        return Modality.DOCUMENT
    if media_type.startswith("image/"):
        return Modality.IMAGE
    if media_type.startswith("audio/"):
        return Modality.AUDIO

    path = _path_of(name) if name else ""
    if path.endswith(".pdf"):
        return Modality.DOCUMENT
    if any(path.endswith(ext) for ext in IMAGE_MIME_TYPES):
        return Modality.IMAGE
    if any(path.endswith(ext) for ext in AUDIO_MIME_TYPES):
        return Modality.AUDIO
    return None


def attachment_mime_type(media_type: Optional[str], name: str, modality: Modality) -> str:
    """Declared media type when Gemini-supported by the mapping above, else the extension guess."""
    media_type = (media_type or "").lower()
    supported = {PDF_MIME_TYPE, *IMAGE_MIME_TYPES.values(), *AUDIO_MIME_TYPES.values()}
    if media_type in supported and modality_for(media_type) is modality:
        return media_type
    return guess_mime_type(name, modality)
