from __future__ import annotations

import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from studynotes_api.config import Settings
from studynotes_api.dependencies import get_settings
from studynotes_api.domain.exceptions import StorageUnavailable, ValidationError
from studynotes_api.domain.ports import NoteRepository
from studynotes_api.interface.api.routes import router
from studynotes_api.storage.factory import build_repository


def _invalid_message(path: str) -> str:
    if path.startswith("/api/subjects"):
        return "Invalid subject data"
    if path.startswith("/api/notes"):
        return "Invalid note data"
    return "Invalid request"


def create_app(settings: Optional[Settings] = None, repository: Optional[NoteRepository] = None) -> FastAPI:
    settings = settings or get_settings()
    repo = repository if repository is not None else build_repository(settings)

    logger = logging.getLogger("studynotes.api")
    logging.getLogger("studynotes").setLevel(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        repo.open()
        try:
            yield
        finally:
            repo.close()

    app = FastAPI(title="Study Notes API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.repository = repo

    @app.exception_handler(ValidationError)
    async def storage_validation_error(request: Request, exc: ValidationError):
        return JSONResponse(
            status_code=400,
            content={"message": _invalid_message(request.url.path), "errors": exc.errors},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"message": _invalid_message(request.url.path), "errors": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(StorageUnavailable)
    async def storage_unavailable(request: Request, exc: StorageUnavailable):
        logger.error("storage_unavailable", extra={"rid": getattr(request.state, "request_id", ""), "error": str(exc)})
        return JSONResponse(status_code=500, content={"message": "storage_unavailable"})

    @app.middleware("http")
    async def request_id_and_logging(request: Request, call_next):
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        start = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            dt_ms = (time.perf_counter() - start) * 1000.0
            logger.exception("request_error", extra={"rid": request_id, "path": request.url.path, "ms": dt_ms})
            return JSONResponse(
                status_code=500,
                content={"detail": "internal_error", "request_id": request_id},
                headers={"X-Request-ID": request_id},
            )

        dt_ms = (time.perf_counter() - start) * 1000.0
        fields = {
            "rid": request_id,
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "ms": dt_ms,
        }
        if settings.api_debug_log:
            fields["query"] = request.url.query
        logger.info("request", extra=fields)
        response.headers["X-Request-ID"] = request_id
        return response

    app.include_router(router)
    return app


app = create_app()
