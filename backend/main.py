"""
EWERS - Early Warning Early Response System
Crisis monitoring dashboard API
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
import logging
import os
import time

import storage
from storage import MemStorage, seed_sample_data
from session_auth import SessionStore
from ai_service import create_ai_proxy
from routers import auth, users, incidents, call_logs, alerts, social_trends, response_plans, stats, lookups, ai, websocket
from routers.websocket import ConnectionRegistry

logging.basicConfig(
    level=os.environ.get("EWERS_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

CORS_ORIGINS = [o.strip() for o in os.environ.get("EWERS_CORS_ORIGINS", "*").split(",") if o.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup - all state is per-process and built fresh here
    logger.info("EWERS starting up...")
    app.state.store = MemStorage()
    if storage.SEED_SAMPLE_DATA:
        seed_sample_data(app.state.store)
    app.state.sessions = SessionStore()
    app.state.broadcast = ConnectionRegistry()
    app.state.ai = create_ai_proxy()
    yield
    # Shutdown
    logger.info("EWERS shutting down...")


app = FastAPI(
    title="EWERS API",
    description="Early Warning Early Response System - crisis monitoring dashboard",
    version="1.0.0",
    lifespan=lifespan
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_api_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    if request.url.path.startswith("/api"):
        duration_ms = int((time.perf_counter() - start) * 1000)
        line = f"{request.method} {request.url.path} {response.status_code} in {duration_ms}ms"
        if len(line) > 80:
            line = line[:79] + "…"
        logger.info(line)
    return response


# =============================================================================
# ERROR RESPONSES - every error body is {"message": "..."}
# =============================================================================

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    parts = []
    for err in exc.errors():
        # Drop the leading "body"/"query"/"path" from the location
        path = ".".join(str(p) for p in err["loc"][1:])
        parts.append(f'{err["msg"]} at "{path}"' if path else err["msg"])
    return JSONResponse(status_code=400, content={"message": "Validation error: " + "; ".join(parts)})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"message": "Internal Server Error"})


# Routers
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(incidents.router, prefix="/api/incidents", tags=["Incidents"])
app.include_router(call_logs.router, prefix="/api/call-logs", tags=["Call Logs"])
app.include_router(alerts.router, prefix="/api/alerts", tags=["Alerts"])
app.include_router(social_trends.router, prefix="/api/social-trends", tags=["Social Trends"])
app.include_router(response_plans.router, prefix="/api/response-plans", tags=["Response Plans"])
app.include_router(stats.router, prefix="/api/stats", tags=["Stats"])
app.include_router(lookups.router, prefix="/api/lookups", tags=["Lookups"])
app.include_router(ai.router, prefix="/api", tags=["AI"])
app.include_router(websocket.router, tags=["WebSocket"])


@app.get("/")
async def root():
    return {"status": "ok", "service": "EWERS API", "version": "1.0.0"}


@app.get("/health")
async def health():
    return {"status": "healthy"}
