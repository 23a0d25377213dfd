"""Production startup for the Reelsmith API.

Imports the real app; if that fails, serves a stub whose health check
reports the import error so the deploy shows up as unhealthy.
"""
import os
import sys
import traceback
from pathlib import Path

host = os.environ.get("HOST", "0.0.0.0")
port = int(os.environ.get("PORT", "10000"))
log_level = os.environ.get("LOG_LEVEL", "info").lower()

# The app imports its packages as top-level modules (api, services, ...)
sys.path.insert(0, str(Path(__file__).parent / "src"))

try:
    from api.server import app
    print("[start.py] Reelsmith app imported", flush=True)
except Exception as e:
    import_error = f"{type(e).__name__}: {e}\n{traceback.format_exc()}"
    print(f"[start.py] IMPORT FAILED: {import_error}", flush=True)

    from fastapi import FastAPI
    from fastapi.responses import PlainTextResponse

    app = FastAPI(title="Reelsmith API (import failed)")

    @app.get("/", response_class=PlainTextResponse)
    async def root():
        return f"Import error:\n{import_error}"

    @app.get("/api/health", response_class=PlainTextResponse, status_code=503)
    async def health():
        return f"UNHEALTHY - Import error:\n{import_error}"

import uvicorn

print(f"[start.py] Starting on {host}:{port}", flush=True)
uvicorn.run(app, host=host, port=port, log_level=log_level)
