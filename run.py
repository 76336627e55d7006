"""
RUN SCRIPT - Start the Gemini Bridge server
===========================================

PURPOSE:
  Single entry point to start the bridge. Genesys Cloud then posts invocations
  to POST /invoke on this server.

WHAT IT DOES:
  - Imports the FastAPI app from gemini_bridge.main.
  - Runs it with uvicorn on HOST / PORT from config (default 0.0.0.0:8000).

USAGE:
  python run.py

  API docs: http://localhost:8000/docs

NOTE:
  Before running, set GOOGLE_API_KEY (and GC_CLIENT_ID / GC_CLIENT_SECRET /
  GC_DOMAIN for Genesys stored files and conversation lookups) in .env.
"""

import uvicorn

from config import HOST, PORT

# ------------------------------------------------------------------------------
# ENTRY POINT
# ------------------------------------------------------------------------------
if __name__ == "__main__":
    uvicorn.run(
        "gemini_bridge.main:app",   # String path to the FastAPI app instance (module:variable).
        host=HOST,                  # 0.0.0.0 listens on all network interfaces.
        port=PORT,
        reload=True                 # Auto-restart when .py files change (useful during development).
    )
