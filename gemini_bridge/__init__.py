"""
GEMINI BRIDGE APPLICATION PACKAGE
=================================

Genesys Cloud to Google Gemini multimodal bridge.

FILE STRUCTURE:
  gemini_bridge/
    __init__.py   - This file; marks 'gemini_bridge' as a package.
    main.py       - FastAPI app and HTTP endpoints (/invoke, /health, /).
    models.py     - Pydantic models: invocation payload, credentials, files, generation.
    errors.py     - BridgeError hierarchy; each error knows its status and message.
    services/     - The pipeline: credentials, Genesys Cloud, file fetch, Gemini upload/generate.
    utils/        - Helpers: payload validation, MIME types, response shaping.
"""
