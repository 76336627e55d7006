"""
FILE FETCHER
============

Downloads the bytes behind a FileSource. Genesys stored-file URLs go through
the OAuth token exchange and the authenticated download endpoint; every other
URL is fetched directly with no authentication. Nothing is cached.
"""

import logging
from typing import Optional

import requests

from gemini_bridge.errors import DownloadError
from gemini_bridge.models import FetchedFile, FileSource
from gemini_bridge.services.genesys_service import (
    GenesysCloudClient,
    GenesysCloudError,
    match_stored_download,
)

logger = logging.getLogger("GeminiBridge")


class FileFetcher:

    def __init__(self, session: requests.Session, genesys: GenesysCloudClient, timeout: Optional[float] = None):
        self.session = session
        self.genesys = genesys
        self.timeout = timeout

    def fetch_bytes(self, url: str) -> bytes:
        stored = match_stored_download(url)
        if stored:
            domain, download_id = stored
            return self.genesys.download(domain, download_id)

        response = self.session.get(url, timeout=self.timeout)
        response.raise_for_status()
        return response.content

    def fetch(self, source: FileSource) -> FetchedFile:
        """Download one file; any failure becomes 'Failed to download <modality>'."""
        label = source.modality.label
        logger.info("Fetching %s", label)
        try:
            data = self.fetch_bytes(source.url)
        except GenesysCloudError as e:
            logger.error("Error fetching %s: %s", label, e)
            raise DownloadError(f"Failed to download {label}", detail=str(e)) from e
        except requests.RequestException as e:
            logger.error("Error fetching %s: %s", label, e)
            raise DownloadError(f"Failed to download {label}", detail=f"Error downloading file: {e}") from e

        logger.info("Fetched %s (%d bytes)", label, len(data))
        return FetchedFile(modality=source.modality, data=data, mime_type=source.mime_type)
