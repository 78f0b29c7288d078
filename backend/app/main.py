# AI Hub backend entrypoint: lead capture, demo booking, activity log and AI bots.

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.app.core.errors import PersistenceError, ServiceError, ValidationError
from backend.app.core.logging import init_logging
from backend.app.core.settings import get_settings
from backend.app.api import activity
from backend.app.api import ai_bots
from backend.app.api import leads
from backend.app.db.base import Base
from backend.app.db.session import engine

logger = logging.getLogger(__name__)

app = FastAPI()
settings = get_settings()

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(leads.router)
app.include_router(activity.router)
app.include_router(ai_bots.router)


def _error_response(exc: ServiceError) -> JSONResponse:
    content = {"error": True, "message": exc.message}
    details = exc.details()
    if details is not None:
        content["details"] = details
    data = exc.data()
    if data is not None:
        content["data"] = data
    return JSONResponse(status_code=exc.status_code, content=content)


def _field_name(loc) -> str:
    parts = [str(part) for part in loc[1:]] if len(loc) > 1 else [str(part) for part in loc]
    return ".".join(parts)


@app.exception_handler(ServiceError)
async def handle_service_error(request: Request, exc: ServiceError):
    return _error_response(exc)


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    errors = [{"field": _field_name(err.get("loc", ())), "reason": err.get("msg", "")} for err in exc.errors()]
    return _error_response(ValidationError(errors))


@app.exception_handler(StarletteHTTPException)
async def handle_http_exception(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": True, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(SQLAlchemyError)
async def handle_persistence_error(request: Request, exc: SQLAlchemyError):
    # Detail stays in the server log
    logger.exception("Persistence failure on %s %s", request.method, request.url.path, exc_info=exc)
    return _error_response(PersistenceError())


@app.get("/")
def read_root():
    return {"app": "AI Hub backend", "status": "ok"}


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.on_event("startup")
def prepare_runtime():
    init_logging()
    Base.metadata.create_all(bind=engine)
