"""
Veo Studio API
FastAPI application that runs one generation session: submit, retry,
try again, extend and start over.
"""

import os
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .config import API_TITLE, API_DESCRIPTION, API_VERSION, CORS_ORIGINS, parse_bool_env
from .core import setup_logging, get_logger, set_session_id, clear_context
from .routes import session_router
from .routes.session import shutdown_session_controller

# Initialize logging
log_level = os.getenv("LOG_LEVEL", "INFO")
log_file = os.getenv("LOG_FILE")
use_json_logs = parse_bool_env(os.getenv("JSON_LOGS"), default=False)

setup_logging(
    level=log_level,
    log_file=Path(log_file) if log_file else None,
    use_json=use_json_logs,
)

logger = get_logger(__name__, service="api")
logger.info("Starting Veo Studio API", extra={
    "log_level": log_level,
    "json_logs": use_json_logs
})


@asynccontextmanager
async def lifespan(_app: FastAPI):
    try:
        yield
    finally:
        # Releases playback resources held by the displayed result
        shutdown_session_controller()


app = FastAPI(
    title=API_TITLE,
    description=API_DESCRIPTION,
    version=API_VERSION,
    lifespan=lifespan,
)


@app.middleware("http")
async def add_request_correlation(request: Request, call_next):
    """Tag every log line of a request with a correlation id."""
    session_id = request.headers.get("X-Session-ID", str(uuid.uuid4()))
    set_session_id(session_id)
    logger.info(f"{request.method} {request.url.path}", extra={
        "method": request.method,
        "path": request.url.path,
    })
    try:
        return await call_next(request)
    finally:
        clear_context()


app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(session_router)


@app.get("/health")
async def health():
    return {"status": "healthy", "version": API_VERSION}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
