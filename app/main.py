import asyncio
from datetime import timedelta

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi

from app.shared.config import settings
from app.shared.db import init_db
from app.shared.errors import install_error_handlers
from app.shared.logging_config import setup_logging
from app.shared.sessions import SessionRegistry, sweep_periodically

# Routers Import
from app.auth.api import router as auth_router
from app.files.api import router as files_router

setup_logging(settings.LOG_LEVEL)

TAGS_METADATA = [
    {"name": "Auth", "description": "Register and log in; login returns a bearer token"},
    {"name": "Files", "description": "Upload, list, preview and download your files"},
    {"name": "Health", "description": "Service health"},
]

PUBLIC_PATHS = {"/api/register", "/api/login", "/healthz"}

app = FastAPI(
    title="File Manager",
    version="0.1.0",
    description="Multi-user file manager API with bearer-token sessions.",
    openapi_tags=TAGS_METADATA,
)

# one registry per process; nothing survives a restart
app.state.sessions = SessionRegistry(
    secret=settings.JWT_KEY,
    algorithm=settings.JWT_ALG,
    ttl=timedelta(minutes=settings.SESSION_TTL_MIN),
    sweep_threshold=settings.SESSION_SWEEP_THRESHOLD,
)

install_error_handlers(app)


@app.on_event("startup")
def _init_db():
    init_db()

@app.on_event("startup")
async def _start_session_sweeper():
    app.state.sweeper = asyncio.create_task(
        sweep_periodically(app.state.sessions, settings.SESSION_SWEEP_INTERVAL_SEC)
    )

@app.on_event("shutdown")
async def _stop_session_sweeper():
    sweeper = getattr(app.state, "sweeper", None)
    if sweeper is not None:
        sweeper.cancel()

@app.get("/healthz", tags=["Health"])
def healthz():
    return {"ok": True}

app.include_router(auth_router)
app.include_router(files_router)

# --- Custom OpenAPI: add bearerAuth to every protected route ---
def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema
    schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
    )
    schema.setdefault("components", {}).setdefault("securitySchemes", {})
    schema["components"]["securitySchemes"]["bearerAuth"] = {
        "type": "http",
        "scheme": "bearer",
        "bearerFormat": "JWT",
    }
    for path, ops in schema.get("paths", {}).items():
        if path in PUBLIC_PATHS:
            continue
        for op in ops.values():
            op.setdefault("security", [{"bearerAuth": []}])
    app.openapi_schema = schema
    return app.openapi_schema

app.openapi = custom_openapi
