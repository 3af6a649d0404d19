"""Signage Server - FastAPI Application Entry Point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlmodel import Session

from signage.config import settings
from signage.database import engine, init_db
from signage.errors import SignageError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database, bootstrap admin and apply the retention policy on startup."""
    init_db()

    from signage.services.approval_service import purge_rejected_displays
    from signage.services.auth_service import ensure_bootstrap_admin

    with Session(engine) as session:
        ensure_bootstrap_admin(session)
        purge_rejected_displays(session)

    yield


app = FastAPI(
    title="Signage",
    description="Digital signage display registry, approval and playlist server",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS - browser displays register from arbitrary origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SignageError)
async def signage_error_handler(request: Request, exc: SignageError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.kind},
    )


# --- Register API routers ---
from signage.api.auth import router as auth_router  # noqa: E402
from signage.api.displays import router as displays_router  # noqa: E402
from signage.api.connection_requests import router as connection_requests_router  # noqa: E402
from signage.api.loops import router as loops_router  # noqa: E402
from signage.api.ads import router as ads_router  # noqa: E402
from signage.api.analytics import router as analytics_router  # noqa: E402

API_PREFIX = "/api/v1"

app.include_router(auth_router, prefix=API_PREFIX)
app.include_router(displays_router, prefix=API_PREFIX)
app.include_router(connection_requests_router, prefix=API_PREFIX)
app.include_router(loops_router, prefix=API_PREFIX)
app.include_router(ads_router, prefix=API_PREFIX)
app.include_router(analytics_router, prefix=API_PREFIX)


@app.get("/")
def root():
    """Health check / server info."""
    return {
        "name": settings.server_name,
        "version": "0.1.0",
        "status": "running",
    }


@app.get("/api/v1/health")
def health():
    return {"status": "ok"}


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host=settings.host, port=settings.port)
