# app_fastapi.py
# -*- coding: utf-8 -*-

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import sessionmaker
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.config import Settings, load_settings
from core.errors import ComplaintNotFound, GrievanceError, PersistenceError, ValidationError
from core.logging import logger
from db.session import SessionLocal, engine, init_db
from routers import assistant, authority, complaint, health
from services.grievance_service import GrievanceServices, build_services

DESCRIPTION = """
Backend API for the multilingual **citizen grievance desk**.

- Citizens submit complaints as text or voice in English, Hindi or Marathi.
- Every complaint is normalized to English, given a category and a routing
  department (AI backend when configured, keyword table otherwise) and stored
  with status *Submitted*.
- Authorities list / filter complaints, move them between
  Submitted, Under Review, In Progress and Resolved, and read statistics.
- An assistant helps citizens word a complaint and previews its category.
"""

# domain error -> HTTP status
ERROR_STATUS = (
    (ValidationError, 400),
    (ComplaintNotFound, 404),
    (PersistenceError, 503),
)


async def grievance_error_handler(request: Request, exc: GrievanceError) -> JSONResponse:
    status_code = 500
    for exc_type, code in ERROR_STATUS:
        if isinstance(exc, exc_type):
            status_code = code
            break

    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")

    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": exc.message},
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Auth failures, 403s and unknown routes in the same body shape."""
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": message},
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # malformed request bodies (e.g. status update without "status")
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"{field}: {first.get('msg', 'invalid request')}" if field else "invalid request"
    return JSONResponse(
        status_code=422,
        content={"success": False, "message": message},
    )


def create_app(
    settings: Optional[Settings] = None,
    session_factory: Optional[sessionmaker] = None,
    services: Optional[GrievanceServices] = None,
) -> FastAPI:
    """
    - settings: defaults to load_settings() (environment / .env)
    - session_factory: defaults to db.session.SessionLocal (tables are created)
    - services: prebuilt services, e.g. with stub collaborators in tests
    """
    if services is None:
        settings = settings or load_settings()
        if session_factory is None:
            init_db(engine)
            session_factory = SessionLocal
        services = build_services(settings, session_factory)

    app = FastAPI(
        title="Grievance Desk API",
        description=DESCRIPTION,
        version="1.0.0",
    )
    app.state.services = services

    # CORS: open in development, restrict to the frontend domain in production
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(GrievanceError, grievance_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(health.router)
    app.include_router(complaint.router)
    app.include_router(authority.router)
    app.include_router(assistant.router)

    logger.info(
        f"grievance desk ready (AI backend: {'on' if services.settings.llm_enabled else 'off'}, "
        f"STT: {services.settings.stt_backend})"
    )
    return app


# ============================================================
# uvicorn entry point
# ============================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app_fastapi:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
