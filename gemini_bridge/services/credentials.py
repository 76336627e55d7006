"""
CREDENTIAL RESOLVER
===================

Builds the Credentials for one request:

  gcClientId / gcClientSecret / gcDomain - request headers first, then the client context.
  googleApiKey                           - client context only. A shared secret is never
                                           taken from request headers.

A missing Gemini key stops the request here. Missing Genesys credentials are
not an error yet: they only matter once a stored-file download or a
conversation lookup needs a token (see GenesysCloudClient).
"""

from typing import Mapping, Optional

from config import GC_DOMAIN
from gemini_bridge.errors import CredentialsError
from gemini_bridge.models import Credentials


def _lookup(headers: Mapping[str, str], client_context: Mapping[str, str], name: str) -> Optional[str]:
    value = headers.get(name.lower()) or client_context.get(name)
    return value.strip() if isinstance(value, str) and value.strip() else None


def resolve_credentials(headers: Optional[Mapping[str, str]], client_context: Optional[Mapping[str, str]]) -> Credentials:
    # Header names are matched case-insensitively.
    headers = {str(k).lower(): v for k, v in (headers or {}).items()}
    client_context = client_context or {}

    google_api_key = client_context.get("googleApiKey")
    if not google_api_key:
        raise CredentialsError("Missing googleApiKey in client context")

    return Credentials(
        google_api_key=google_api_key,
        gc_client_id=_lookup(headers, client_context, "gcClientId"),
        gc_client_secret=_lookup(headers, client_context, "gcClientSecret"),
        gc_domain=_lookup(headers, client_context, "gcDomain") or GC_DOMAIN,
    )
