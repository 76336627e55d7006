"""
CONFIGURATION MODULE
====================

PURPOSE:
  Central place for all bridge settings: the Gemini API key, Genesys Cloud
  OAuth client credentials, the Genesys region domain, Gemini endpoints, model
  names and generation defaults.

WHAT THIS FILE DOES:
  - Loads environment variables from .env (so API keys stay out of code).
  - Exposes GOOGLE_API_KEY, GC_CLIENT_ID, GC_CLIENT_SECRET and GC_DOMAIN.
  - Defines the list of Gemini models a caller may ask for and the default
    temperature / max token values applied when a request omits them.
  - build_client_context(): the invocation-time configuration context that the
    credential resolver falls back to (header values win for Genesys
    credentials; the Gemini key is only ever taken from here).

USAGE:
  Import what you need: `from config import GEMINI_API_BASE_URL, build_client_context`
  All services import from here so behaviour is consistent.
"""

import os
import logging
from typing import Optional
from dotenv import load_dotenv


# -----------------------------------------------------------------------------
# LOGGING
# -----------------------------------------------------------------------------
logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# ENVIRONMENT
# -----------------------------------------------------------------------------
# Load environment variables from .env file (if it exists).
load_dotenv()


def _float_env(name: str) -> Optional[float]:
    """Read a float from the environment; empty or invalid values mean 'not set'."""
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not a number", name, raw)
        return None


# ============================================================================
# GOOGLE GEMINI CONFIGURATION
# ============================================================================
# The Gemini key is a shared secret: it is read from the server environment and
# never accepted from request headers.

GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY", "").strip()
GEMINI_API_BASE_URL = os.getenv(
    "GEMINI_API_BASE_URL", "https://generativelanguage.googleapis.com"
).rstrip("/")

# The only provider value accepted in the "provider" field of a request.
PROVIDER_GOOGLE = "google"

SUPPORTED_MODELS = (
    "gemini-2.5-pro",
    "gemini-2.5-flash",
    "gemini-2.5-flash-lite",
    "gemini-2.0-flash",
    "gemini-2.0-flash-exp",
    "gemini-2.0-flash-lite",
    "gemini-1.5-pro",
    "gemini-1.5-flash",
)

# Generation defaults used when the request omits them.
DEFAULT_TEMPERATURE = 0.2
DEFAULT_MAX_TOKENS = 4096
MIN_MAX_TOKENS = 4
MAX_MAX_TOKENS = 8192

# ============================================================================
# GENESYS CLOUD CONFIGURATION
# ============================================================================
# Client credentials grant used for stored-file downloads and conversation
# lookups. Request headers gcClientId / gcClientSecret override these.
# GC_DOMAIN is the region domain, e.g. mypurecloud.com, mypurecloud.de.

GC_CLIENT_ID = os.getenv("GC_CLIENT_ID", "").strip()
GC_CLIENT_SECRET = os.getenv("GC_CLIENT_SECRET", "").strip()
GC_DOMAIN = os.getenv("GC_DOMAIN", "mypurecloud.com").strip()

# ============================================================================
# HTTP / SERVER
# ============================================================================
# Unset means no client-side timeout: the hosting environment's own deadline
# is the only ceiling for a request.
HTTP_TIMEOUT_SECONDS = _float_env("HTTP_TIMEOUT_SECONDS")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))


def build_client_context() -> dict:
    """
    Return the configuration context for one invocation.

    Keys mirror the names callers use in headers: googleApiKey, gcClientId,
    gcClientSecret, gcDomain. Empty values are left out so a lookup falls
    through to the next source.
    """
    context = {
        "googleApiKey": GOOGLE_API_KEY,
        "gcClientId": GC_CLIENT_ID,
        "gcClientSecret": GC_CLIENT_SECRET,
        "gcDomain": GC_DOMAIN,
    }
    return {key: value for key, value in context.items() if value}
