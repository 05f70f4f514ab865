# main.py  (backend entrypoint)
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from follicle_backend.app.config import validate_manifest
from follicle_backend.app.routers import interactions, matching, profile, scores

logger = logging.getLogger("uvicorn.error")

app = FastAPI(title="Follicle Match API")

# --- CORS for Vite dev -------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Include routers under /api ----------------------------------------------
for _module in (profile, interactions, scores, matching):
    app.include_router(_module.router, prefix="/api")

# --- Health / manifest -------------------------------------------------------
@app.get("/health")
async def health():
    return {"ok": True}

@app.get("/api/health")
async def api_health():
    # mirror the non-prefixed /health so the FE's /api/health succeeds
    return {"ok": True}

@app.get("/api/manifest")
def manifest():
    return validate_manifest()

# Log final routes for sanity check
@app.on_event("startup")
async def _log_routes():
    from fastapi.routing import APIRoute
    for r in app.router.routes:
        if isinstance(r, APIRoute):
            methods = ",".join(sorted(r.methods))
            logger.info(f"{methods:10s} {r.path}")
