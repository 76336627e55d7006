"""
SERVICES PACKAGE
================

Business logic lives here. The API layer (gemini_bridge.main) calls
GeminiBridgeHandler; the other modules are its stages and don't handle HTTP
requests from callers, only calls to Genesys Cloud and Gemini.

MODULES:
    bridge_service   - GeminiBridgeHandler: runs the stages in order, builds error responses
    credentials      - resolve_credentials(): headers / client context lookup
    source_resolver  - which files to process (URL fields or latest conversation attachment)
    genesys_service  - Genesys Cloud OAuth, stored-file download, conversation lookup
    file_fetcher     - FileFetcher: bytes for a URL (public or Genesys stored file)
    gemini_service   - GeminiClient: resumable File API upload and generateContent
    prompt_builder   - content part ordering and generation config
"""
