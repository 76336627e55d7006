"""
GEMINI BRIDGE MAIN API
======================

This module defines the FastAPI application and its HTTP endpoints. Genesys
Cloud (a Function / data action) posts one invocation per request; the bridge
downloads the referenced files, stages them with the Gemini File API, calls
generateContent and returns the normalized result.

ENDPOINTS:
  GET  /        - Returns API name and list of endpoints.
  GET  /health  - Returns service status and whether a Gemini key is configured.
  POST /invoke  - Runs one invocation. The body is the invocation event: either
                  the payload fields themselves, or {"rawRequest": "<json string>"}.
                  An optional "headers" object and "clientContext" object in the
                  event are honoured as the Genesys Function runtime sends them.

RESPONSES:
  /invoke always answers HTTP 200. The outcome is in the body: "status" (200 on
  success, 4xx/5xx on failure), "message", and on success geminiResponse,
  textOutput, finishReason and usage; failures may carry "detail".

CREDENTIALS:
  gcClientId / gcClientSecret / gcDomain may come as request headers. The Gemini
  key (googleApiKey) comes only from the server configuration (GOOGLE_API_KEY in
  .env) or the event's clientContext; server configuration wins.
"""

from contextlib import asynccontextmanager
from typing import Any, Dict
import logging

from fastapi import FastAPI, Request
from starlette.concurrency import run_in_threadpool
import uvicorn

from config import GOOGLE_API_KEY, HOST, LOG_LEVEL, PORT, build_client_context
from gemini_bridge.services.bridge_service import GeminiBridgeHandler


# -----------------------------------------------------------------------------
# LOGGING
# -----------------------------------------------------------------------------
logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger("GeminiBridge")


# -----------------------------------------------------------------------------
# GLOBAL SERVICE REFERENCES
# -----------------------------------------------------------------------------
# Set during startup (lifespan) and used by the route handlers.
bridge_handler: GeminiBridgeHandler = None


# -------------------------------------------------------------------------
# LIFESPAN (STARTUP / SHUTDOWN)
# -------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the request handler on startup; nothing to save on shutdown."""
    global bridge_handler

    logger.info("=" * 60)
    logger.info("Gemini Bridge - Starting Up...")
    logger.info("=" * 60)

    bridge_handler = GeminiBridgeHandler()
    if not GOOGLE_API_KEY:
        logger.warning("GOOGLE_API_KEY not set. Requests must carry googleApiKey in clientContext.")

    logger.info("Bridge handler ready")
    logger.info("=" * 60)

    yield

    logger.info("Gemini Bridge shutting down")


# -------------------------------------------------------------------------
# FASTAPI APP
# -------------------------------------------------------------------------
app = FastAPI(
    title="Gemini Bridge API",
    description="Genesys Cloud to Google Gemini multimodal bridge",
    lifespan=lifespan
)


def _invocation_headers(request: Request, event: Any) -> Dict[str, str]:
    """HTTP request headers, overlaid with the event's own "headers" object if any."""
    headers = {key.lower(): value for key, value in request.headers.items()}
    if isinstance(event, dict) and isinstance(event.get("headers"), dict):
        headers.update({str(key).lower(): value for key, value in event["headers"].items()})
    return headers


def _invocation_client_context(event: Any) -> Dict[str, Any]:
    """The event's clientContext with the server configuration on top."""
    context = {}
    if isinstance(event, dict) and isinstance(event.get("clientContext"), dict):
        context.update(event["clientContext"])
    context.update(build_client_context())
    return context


# =========================================================================
# API ENDPOINTS
# =========================================================================

@app.get("/")
async def root():
    """Return the API name and a short description of each endpoint (for discovery)."""
    return {
        "message": "Gemini Bridge API",
        "endpoints": {
            "/invoke": "Download files, stage them with Gemini and generate content",
            "/health": "System health check"
        }
    }


@app.get("/health")
async def health():
    return {
        "status": "healthy",
        "bridge_handler": bridge_handler is not None,
        "gemini_key_configured": bool(GOOGLE_API_KEY),
    }


@app.post("/invoke")
async def invoke(request: Request):
    """
    Run one invocation.

    REQUEST BODY (payload fields directly):
    {
        "provider": "google",
        "model": "gemini-2.0-flash",
        "user_message": "Summarize this document",
        "processLastConversationFile": false,
        "pdfDownloadUrl": "https://example.com/file.pdf"
    }

    or wrapped: {"rawRequest": "{\\"provider\\": \\"google\\", ...}"}

    RESPONSE:
    {
        "status": 200,
        "message": "success",
        "geminiResponse": {...},
        "textOutput": "The document describes...",
        "finishReason": "STOP",
        "usage": {"totalTokenCount": 42}
    }
    """
    try:
        event = await request.json()
    except ValueError:
        event = None

    # The pipeline makes blocking HTTP calls; keep them off the event loop.
    return await run_in_threadpool(
        bridge_handler.handle,
        event,
        _invocation_headers(request, event),
        _invocation_client_context(event),
    )


# -------------------------------------------------------------------------
# STANDALONE RUN (python -m gemini_bridge.main)
# -------------------------------------------------------------------------
def run():
    """Start the uvicorn server (same as run.py)"""
    uvicorn.run(
        "gemini_bridge.main:app",
        host=HOST,
        port=PORT,
        log_level=LOG_LEVEL.lower()
    )

if __name__ == "__main__":
    run()
